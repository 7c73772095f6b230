"""
AST node definitions: commands, conditions and element lists.
Nodes are plain frozen dataclasses; all behaviour lives in the interpreter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union


# ---------------- lists ----------------

@dataclass(frozen=True)
class AttributeList:
    # <AttributeList> ::= [AttributeName] | [AttributeName] "," <AttributeList>
    names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WildAttributeList(AttributeList):
    # <WildAttribList> ::= <AttributeList> | "*"
    wildcard: bool = False


@dataclass(frozen=True)
class ValueList:
    # <ValueList> ::= [Value] | [Value] "," <ValueList>
    values: Tuple[str, ...] = ()


WILDCARD = WildAttributeList(wildcard=True)


# ---------------- conditions ----------------

class Comparator(Enum):
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LIKE = "LIKE"


class BoolOperator(Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Comparison:
    attribute: str
    operator: Comparator
    value: str


@dataclass(frozen=True)
class BooleanCondition:
    left: "Condition"
    operator: BoolOperator
    right: "Condition"


Condition = Union[Comparison, BooleanCondition]


# ---------------- commands ----------------

@dataclass(frozen=True)
class Use:
    database: str


@dataclass(frozen=True)
class CreateDatabase:
    database: str


@dataclass(frozen=True)
class CreateTable:
    table: str
    attributes: AttributeList = AttributeList()
    display_name: str = ""


@dataclass(frozen=True)
class DropDatabase:
    database: str


@dataclass(frozen=True)
class DropTable:
    table: str


@dataclass(frozen=True)
class AddAttribute:
    table: str
    attribute: str


@dataclass(frozen=True)
class DropAttribute:
    table: str
    attribute: str


@dataclass(frozen=True)
class Insert:
    table: str
    values: ValueList


@dataclass(frozen=True)
class Select:
    attributes: WildAttributeList
    table: str
    condition: Optional[Condition] = None


@dataclass(frozen=True)
class Delete:
    table: str
    condition: Condition


@dataclass(frozen=True)
class Update:
    table: str
    assignments: Dict[str, str]
    condition: Condition


@dataclass(frozen=True)
class Join:
    left_table: str
    right_table: str
    left_attribute: str
    right_attribute: str


Command = Union[
    Use, CreateDatabase, CreateTable, DropDatabase, DropTable,
    AddAttribute, DropAttribute, Insert, Select, Delete, Update, Join,
]
