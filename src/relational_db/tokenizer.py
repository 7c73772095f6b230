"""
Lexical analysis: raw command text -> flat list of classified tokens.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List


class TokenKind(Enum):
    # command keywords
    USE = "USE"
    CREATE = "CREATE"
    DROP = "DROP"
    ALTER = "ALTER"
    INSERT = "INSERT"
    SELECT = "SELECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    JOIN = "JOIN"
    # language keywords
    DATABASE = "DATABASE"
    TABLE = "TABLE"
    INTO = "INTO"
    VALUES = "VALUES"
    FROM = "FROM"
    WHERE = "WHERE"
    SET = "SET"
    AND = "AND"
    OR = "OR"
    ADD = "ADD"
    ON = "ON"
    # literals
    INTEGER_LITERAL = "INTEGER_LITERAL"
    FLOAT_LITERAL = "FLOAT_LITERAL"
    BOOLEAN_LITERAL = "BOOLEAN_LITERAL"
    NULL_LITERAL = "NULL_LITERAL"
    STRING_LITERAL = "STRING_LITERAL"
    IDENTIFIER = "IDENTIFIER"
    # operators
    EQUALS = "=="
    NOT_EQUALS = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LIKE = "LIKE"
    ASSIGN = "="
    # punctuation
    SEMICOLON = ";"
    COMMA = ","
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    ASTERISK = "*"
    EOF = "EOF"
    INVALID = "INVALID"


# Words and symbols with a fixed kind. Keywords are matched case-insensitively.
_FIXED = {
    "USE": TokenKind.USE,
    "CREATE": TokenKind.CREATE,
    "DROP": TokenKind.DROP,
    "ALTER": TokenKind.ALTER,
    "INSERT": TokenKind.INSERT,
    "SELECT": TokenKind.SELECT,
    "UPDATE": TokenKind.UPDATE,
    "DELETE": TokenKind.DELETE,
    "JOIN": TokenKind.JOIN,
    "DATABASE": TokenKind.DATABASE,
    "TABLE": TokenKind.TABLE,
    "INTO": TokenKind.INTO,
    "VALUES": TokenKind.VALUES,
    "FROM": TokenKind.FROM,
    "WHERE": TokenKind.WHERE,
    "SET": TokenKind.SET,
    "AND": TokenKind.AND,
    "OR": TokenKind.OR,
    "ADD": TokenKind.ADD,
    "ON": TokenKind.ON,
    "TRUE": TokenKind.BOOLEAN_LITERAL,
    "FALSE": TokenKind.BOOLEAN_LITERAL,
    "NULL": TokenKind.NULL_LITERAL,
    "LIKE": TokenKind.LIKE,
    "==": TokenKind.EQUALS,
    "!=": TokenKind.NOT_EQUALS,
    "<": TokenKind.LESS_THAN,
    "<=": TokenKind.LESS_THAN_OR_EQUAL,
    ">": TokenKind.GREATER_THAN,
    ">=": TokenKind.GREATER_THAN_OR_EQUAL,
    "=": TokenKind.ASSIGN,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "*": TokenKind.ASTERISK,
}

_INTEGER_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?\d+(\.\d+)?")
_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9]+")

# longest operators first so that "<=" is not split into "<" "="
_SEPARATED_RE = re.compile(r"(==|!=|<=|>=|<|>|=|[(),;])")

EOF_TEXT = "EOF"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str

    def __repr__(self):
        return f"{self.kind.name}({self.text!r})"


def classify(text: str) -> TokenKind:
    """Kind of a single raw token; INVALID when nothing matches."""
    fixed = _FIXED.get(text.upper())
    if fixed is not None:
        return fixed
    if _INTEGER_RE.fullmatch(text):
        return TokenKind.INTEGER_LITERAL
    if _FLOAT_RE.fullmatch(text):
        return TokenKind.FLOAT_LITERAL
    if len(text) >= 2 and text.startswith("'") and text.endswith("'"):
        return TokenKind.STRING_LITERAL
    if _IDENTIFIER_RE.fullmatch(text):
        return TokenKind.IDENTIFIER
    return TokenKind.INVALID


def _split_fragment(fragment: str) -> List[str]:
    # text outside quotes: pad punctuation/operators with spaces, then split
    return _SEPARATED_RE.sub(r" \1 ", fragment).split()


def tokenize(text: str) -> List[Token]:
    """
    Split a command into tokens, always terminated by an EOF token.

    Single-quoted literals are kept whole (quotes included). An unterminated
    quote leaves the rest of the text as one INVALID token.
    """
    fragments = text.strip().split("'")
    raw: List[str] = []
    for i, fragment in enumerate(fragments):
        if i % 2 == 0:
            raw.extend(_split_fragment(fragment))
        elif i == len(fragments) - 1:
            # odd number of quotes: this fragment never got its closing quote
            raw.append("'" + fragment)
        else:
            raw.append(f"'{fragment}'")

    tokens = [Token(classify(r), r) for r in raw]
    tokens.append(Token(TokenKind.EOF, EOF_TEXT))
    return tokens
