"""Minimal SELECT builder with ``?`` placeholders.

Don't build a full ORM - just enough to carry filter conditions to sqlite3.
"""

import logging
import re
import sqlite3
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from structfilter.exceptions import QueryBuildError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\(\?\)|\?")
_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def expand_placeholders(clause: str, params: list[Any]) -> tuple[str, list[Any]]:
    """Expand ``(?)`` placeholders bound to sequences into one marker per element.

    Args:
        clause: SQL fragment with ``?`` placeholders
        params: Positional parameters, one per placeholder

    Returns:
        Tuple of (clause, params) with sequences flattened

    Raises:
        QueryBuildError: If the number of placeholders and params differ

    Examples:
        >>> expand_placeholders("id in (?) AND age > ?", [[1, 2], 30])
        ('id in (?, ?) AND age > ?', [1, 2, 30])

        >>> expand_placeholders("id in (?)", [[]])
        ('id in (NULL)', [])
    """
    flat: list[Any] = []
    remaining = iter(params)
    used = 0

    def replace_marker(match: re.Match[str]) -> str:
        nonlocal used
        try:
            value = next(remaining)
        except StopIteration:
            raise QueryBuildError(
                f"Clause has more placeholders than the {len(params)} parameter(s) given: {clause}"
            ) from None
        used += 1
        if match.group(0) == "(?)" and isinstance(value, _SEQUENCE_TYPES):
            if not value:
                return "(NULL)"
            flat.extend(value)
            return "(" + ", ".join("?" * len(value)) + ")"
        flat.append(value)
        return match.group(0)

    expanded = _PLACEHOLDER.sub(replace_marker, clause)
    if used != len(params):
        raise QueryBuildError(
            f"Clause has {used} placeholder(s) but {len(params)} parameter(s) were given: {clause}"
        )
    return expanded, flat


@dataclass(frozen=True)
class SelectQuery:
    """A SELECT statement assembled one WHERE condition at a time.

    Every builder method returns a new query; the original is left unchanged.
    """

    table: str
    columns: tuple[str, ...] = ("*",)
    conditions: tuple[tuple[str, tuple[Any, ...]], ...] = field(default_factory=tuple)
    order: Optional[str] = None
    max_rows: Optional[int] = None

    def where(self, clause: str, *params: Any) -> "SelectQuery":
        """Add a condition, ANDed with any existing ones."""
        return replace(self, conditions=self.conditions + ((clause, params),))

    def scopes(self, *transforms: Callable[["SelectQuery"], "SelectQuery"]) -> "SelectQuery":
        """Apply transforms in order."""
        query = self
        for transform in transforms:
            query = transform(query)
        return query

    def order_by(self, column: str) -> "SelectQuery":
        return replace(self, order=column)

    def limit(self, n: int) -> "SelectQuery":
        return replace(self, max_rows=n)

    def _where_clause(self) -> tuple[str, list[Any]]:
        """Join all conditions into one WHERE clause."""
        if len(self.conditions) == 1:
            clause, params = self.conditions[0]
            return clause, list(params)

        parts: list[str] = []
        all_params: list[Any] = []
        for clause, params in self.conditions:
            parts.append(f"({clause})")
            all_params.extend(params)
        return " AND ".join(parts), all_params

    def to_sql(self) -> tuple[str, list[Any]]:
        """Render the statement and its positional parameters.

        Examples:
            >>> SelectQuery("users").where("age > ?", 30).to_sql()
            ('SELECT * FROM users WHERE age > ?', [30])
        """
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}"
        params: list[Any] = []

        if self.conditions:
            clause, raw_params = self._where_clause()
            clause, params = expand_placeholders(clause, raw_params)
            sql += f" WHERE {clause}"
        if self.order:
            sql += f" ORDER BY {self.order}"
        if self.max_rows is not None:
            sql += " LIMIT ?"
            params.append(self.max_rows)

        return sql, params

    def fetch_all(self, conn: sqlite3.Connection) -> list[Any]:
        """Execute the statement and return all rows."""
        sql, params = self.to_sql()
        logger.debug("Executing: %s %s", sql, params)
        return conn.execute(sql, params).fetchall()
