"""Data models for the rules system."""

from dataclasses import dataclass, field
from enum import Enum
from numbers import Number
from typing import Any, Union


class Operator(Enum):
    """Supported comparison operators."""

    EQ = "="
    LIKE = "like"
    RLIKE = "rlike"
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    IN = "in"
    DATE_RANGE = "date_range"

    @classmethod
    def coerce(cls, value: Union["Operator", str, None]) -> Union["Operator", str]:
        """Convert an operator string to an Operator.

        Empty values mean equality. Unknown strings are returned unchanged so the
        renderer can decide what to do with them.
        """
        if isinstance(value, Operator):
            return value
        if not value:
            return cls.EQ
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass(frozen=True)
class Rule:
    """A single predicate: a column, how to compare it, and when to skip it."""

    name: str
    operator: Union[Operator, str] = Operator.EQ
    table: str = ""
    use_zero: bool = False  # Render even when the bound value is zero/empty

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator.coerce(self.operator))

    @property
    def column(self) -> str:
        """Column reference, qualified with the table when one is set."""
        if self.table:
            return f"{self.table}.{self.name}"
        return self.name

    @property
    def is_known_operator(self) -> bool:
        """Check if the operator is one of the supported operators."""
        return isinstance(self.operator, Operator)

    def skips(self, value: Any, *, empty_sequences: bool = True) -> bool:
        """Check if this rule should be dropped for the given value.

        Args:
            value: The value bound to the rule
            empty_sequences: Also treat empty lists/tuples/sets as skippable

        Returns:
            True if the rule produces no predicate
        """
        if self.use_zero:
            return False
        if is_zero(value):
            return True
        return empty_sequences and is_empty_sequence(value)


@dataclass
class Condition:
    """A rendered WHERE clause and its positional parameters."""

    clause: str
    params: list[Any] = field(default_factory=list)

    def __str__(self) -> str:
        return self.clause


def is_zero(value: Any) -> bool:
    """Check if a value is the zero value of its type."""
    if value is None:
        return True
    if isinstance(value, (str, bytes)):
        return len(value) == 0
    if isinstance(value, Number):
        return value == 0
    return False


def is_empty_sequence(value: Any) -> bool:
    """Check if a value is an empty list, tuple or set."""
    return isinstance(value, (list, tuple, set, frozenset)) and len(value) == 0
