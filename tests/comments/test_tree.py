"""Tests for reply tree assembly."""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from threadboard.comments.models import Comment
from threadboard.comments.tree import build_comment_tree


BASE = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _comment(minute: int, parent_id: UUID | None = None) -> Comment:
    return Comment.create(
        author_id=uuid4(),
        author_username="user",
        content=f"comment at {minute}",
        parent_id=parent_id,
        now=BASE + timedelta(minutes=minute),
    )


def test_empty() -> None:
    assert build_comment_tree([]) == []


def test_nesting() -> None:
    root = _comment(0)
    reply = _comment(1, root.comment_id)
    nested = _comment(2, reply.comment_id)

    roots = build_comment_tree([root, reply, nested])

    assert [node.comment for node in roots] == [root]
    assert [node.comment for node in roots[0].children] == [reply]
    assert [node.comment for node in roots[0].children[0].children] == [nested]


def test_order_is_preserved() -> None:
    first = _comment(0)
    second = _comment(1)
    reply_a = _comment(2, first.comment_id)
    reply_b = _comment(3, first.comment_id)

    roots = build_comment_tree([first, second, reply_a, reply_b])

    assert [node.comment for node in roots] == [first, second]
    assert [node.comment for node in roots[0].children] == [reply_a, reply_b]


def test_child_before_parent_in_input() -> None:
    root = _comment(0)
    reply = _comment(1, root.comment_id)

    roots = build_comment_tree([reply, root])

    assert [node.comment for node in roots] == [root]
    assert roots[0].children[0].comment == reply


def test_orphan_promoted_to_root() -> None:
    orphan = _comment(1, parent_id=uuid4())
    root = _comment(0)

    roots = build_comment_tree([root, orphan])

    assert [node.comment for node in roots] == [root, orphan]


def test_deleted_comments_kept() -> None:
    root = _comment(0)
    root.is_deleted = True
    root.deleted_at = BASE
    reply = _comment(1, root.comment_id)

    roots = build_comment_tree([root, reply])

    assert roots[0].comment.is_deleted is True
    assert roots[0].children[0].comment == reply


def test_self_parent_is_root() -> None:
    comment = _comment(0)
    comment.parent_id = comment.comment_id

    roots = build_comment_tree([comment])

    assert len(roots) == 1
    assert roots[0].children == []


def test_every_comment_appears_once() -> None:
    comments = [_comment(0)]
    for minute in range(1, 20):
        parent = comments[minute // 2]
        comments.append(_comment(minute, parent.comment_id))

    seen: list[UUID] = []
    stack = build_comment_tree(comments)
    while stack:
        node = stack.pop()
        seen.append(node.comment.comment_id)
        stack.extend(node.children)

    assert sorted(seen) == sorted(c.comment_id for c in comments)
