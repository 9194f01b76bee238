"""In-memory stand-in for a cassandra-asyncio-driver session.

Understands only the statement shapes the services prepare: single-table
INSERT, SELECT * / SELECT COUNT(*) with an optional `col = ? AND ...`
filter, and UPDATE ... SET ... WHERE. Plain string statements such as
schema DDL or the health check query are accepted and return no rows.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Any


_INSERT_RE = re.compile(r"^INSERT INTO (\S+) \((.+?)\) VALUES")
_SELECT_RE = re.compile(
    r"^SELECT (\*|COUNT\(\*\)) FROM (\S+)(?: WHERE (.+?))?(?: ALLOW FILTERING)?$"
)
_UPDATE_RE = re.compile(r"^UPDATE (\S+) SET (.+?) WHERE (.+)$")

KEYSPACE = "threadboard_test"


def _columns(clause: str, separator: str) -> list[str]:
    return [part.split("=")[0].strip() for part in clause.split(separator)]


class ResultSet(list):
    """List of rows with the driver's `one()` accessor."""

    def one(self) -> Any:
        return self[0] if self else None


@dataclass(frozen=True)
class PreparedStatement:
    query_string: str


class FakeCassandraSession:
    """Executes prepared statements against per-table lists of dict rows."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.executed: list[str] = []

    def prepare(self, query: str) -> PreparedStatement:
        return PreparedStatement(" ".join(query.split()))

    def rows(self, table: str) -> list[dict[str, Any]]:
        """Stored rows of `table`, matched by its unqualified name."""
        for name, rows in self.tables.items():
            if name.split(".")[-1] == table:
                return rows
        return []

    async def aexecute(self, statement: Any, params: list[Any] | None = None) -> ResultSet:
        if not isinstance(statement, PreparedStatement):
            self.executed.append(str(statement))
            return ResultSet([SimpleNamespace()])

        query = statement.query_string
        self.executed.append(query)
        params = list(params or [])

        if match := _INSERT_RE.match(query):
            table, columns = match.group(1), _columns(match.group(2), ",")
            self.tables.setdefault(table, []).append(dict(zip(columns, params, strict=True)))
            return ResultSet()

        if match := _SELECT_RE.match(query):
            projection, table, where = match.groups()
            found = self._filter(table, where, params)
            if projection == "*":
                return ResultSet(SimpleNamespace(**row) for row in found)
            return ResultSet([SimpleNamespace(count=len(found))])

        if match := _UPDATE_RE.match(query):
            table, assignments, where = match.groups()
            columns = _columns(assignments, ",")
            values, where_params = params[: len(columns)], params[len(columns) :]
            for row in self._filter(table, where, where_params):
                row.update(zip(columns, values, strict=True))
            return ResultSet()

        msg = f"Unsupported statement: {query}"
        raise NotImplementedError(msg)

    def _filter(
        self, table: str, where: str | None, params: list[Any]
    ) -> list[dict[str, Any]]:
        rows = self.tables.get(table, [])
        if not where:
            return list(rows)
        columns = _columns(where, " AND ")
        return [
            row
            for row in rows
            if all(row.get(col) == value for col, value in zip(columns, params, strict=True))
        ]


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
