"""Assemble a flat list of comments into a reply forest."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from threadboard.comments.models import Comment


@dataclass
class CommentNode:
    """A comment with its direct replies, in load order."""

    comment: Comment
    children: list["CommentNode"] = field(default_factory=list)


def build_comment_tree(comments: Iterable[Comment]) -> list[CommentNode]:
    """Build the reply forest for `comments`.

    Runs in two linear passes. The first maps every id to a node with an
    empty children list, the second attaches each node to its parent. A
    comment whose parent is not in the input is promoted to a root instead
    of being dropped. Deleted comments are kept; callers decide how to
    render them.

    Relative input order is preserved for roots and within each children
    list, so callers pass comments sorted by created_at.
    """
    nodes: dict[UUID, CommentNode] = {}
    ordered: list[CommentNode] = []
    for comment in comments:
        node = CommentNode(comment=comment)
        nodes[comment.comment_id] = node
        ordered.append(node)

    roots: list[CommentNode] = []
    for node in ordered:
        parent_id = node.comment.parent_id
        parent = nodes.get(parent_id) if parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    return roots
