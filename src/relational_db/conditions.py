"""
WHERE-clause evaluation.

All values are stored as text. Before each comparison the attribute's type is
inferred from the first non-null value in the column; that type decides how
`!=` (and boolean `==`) behave. The inference pass is repeated on every
evaluation, nothing is cached.
"""

import re
from enum import Enum
from typing import Iterable, Set

from src.relational_db.ast_nodes import (
    BooleanCondition,
    BoolOperator,
    Comparator,
    Comparison,
    Condition,
)
from src.relational_db.core import Table
from src.relational_db.errors import AttributeNotFoundError

_INTEGER_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?\d+(\.\d+)?")
# plain decimal/exponent notation only: "NaN", "Infinity" and "1f" compare as text
_NUMBER_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class ValueType(Enum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"
    STRING = "string"


def value_type(value: str) -> ValueType:
    if _INTEGER_RE.fullmatch(value):
        return ValueType.INTEGER
    if _FLOAT_RE.fullmatch(value):
        return ValueType.FLOAT
    if value.lower() in ("true", "false"):
        return ValueType.BOOLEAN
    # "" is the placeholder left by ALTER TABLE ADD and short rows; it counts as NULL
    if value == "" or value.lower() == "null":
        return ValueType.NULL
    return ValueType.STRING


def infer_type(values: Iterable[str]) -> ValueType:
    """Type of the first non-null value; NULL if there is none."""
    for value in values:
        kind = value_type(value)
        if kind is not ValueType.NULL:
            return kind
    return ValueType.NULL


def _is_numeric(value: str) -> bool:
    return _NUMBER_RE.fullmatch(value) is not None


def matches(stored: str, comparator: Comparator, literal: str, attribute_type: ValueType) -> bool:
    numeric = _is_numeric(stored) and _is_numeric(literal)
    left = float(stored) if numeric else None
    right = float(literal) if numeric else None

    match comparator:
        case Comparator.EQUAL:
            if numeric and left == right:
                return True
            if stored == literal:
                return True
            return attribute_type is ValueType.BOOLEAN and stored.lower() == literal.lower()
        case Comparator.NOT_EQUAL:
            # string/boolean inequality only counts when the column has that type
            if numeric and left != right:
                return True
            if attribute_type is ValueType.BOOLEAN and stored.lower() != literal.lower():
                return True
            return attribute_type is ValueType.STRING and stored != literal
        case Comparator.LESS_THAN:
            return numeric and left < right
        case Comparator.LESS_THAN_OR_EQUAL:
            return numeric and left <= right
        case Comparator.GREATER_THAN:
            return numeric and left > right
        case Comparator.GREATER_THAN_OR_EQUAL:
            return numeric and left >= right
        case Comparator.LIKE:
            return literal.lower() in stored.lower()
    return False


def evaluate(condition: Condition, table: Table) -> Set[int]:
    """Ids of the records of `table` satisfying `condition`."""
    match condition:
        case BooleanCondition(left=left, operator=BoolOperator.AND, right=right):
            return evaluate(left, table) & evaluate(right, table)
        case BooleanCondition(left=left, operator=BoolOperator.OR, right=right):
            return evaluate(left, table) | evaluate(right, table)
        case Comparison(attribute=attribute, operator=comparator, value=literal):
            if attribute not in table.attributes:
                raise AttributeNotFoundError(f'Attribute "{attribute}" does not exist')
            key = attribute.lower()
            attribute_type = infer_type(table.values(attribute))
            return {
                record_id
                for record_id, record in table.records.items()
                if matches(record.get(key, ""), comparator, literal, attribute_type)
            }
    raise TypeError(f"Not a condition: {condition!r}")
