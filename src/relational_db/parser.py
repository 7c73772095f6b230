"""
Recursive-descent parser: token list -> one Command node.

Grammar (one statement per call):
    <Command>     ::= <CommandType> ";"
    <Use>         ::= USE [DatabaseName]
    <Create>      ::= CREATE DATABASE [DatabaseName]
                    | CREATE TABLE [TableName] [ "(" <AttributeList> ")" ]
    <Drop>        ::= DROP DATABASE [DatabaseName] | DROP TABLE [TableName]
    <Alter>       ::= ALTER TABLE [TableName] (ADD | DROP) [AttributeName]
    <Insert>      ::= INSERT INTO [TableName] VALUES "(" <ValueList> ")"
    <Select>      ::= SELECT <WildAttribList> FROM [TableName] [ WHERE <Condition> ]
    <Delete>      ::= DELETE FROM [TableName] WHERE <Condition>
    <Update>      ::= UPDATE [TableName] SET <NameValueList> WHERE <Condition>
    <Join>        ::= JOIN [TableName] AND [TableName] ON [AttributeName] AND [AttributeName]
"""

from typing import Dict, List, Sequence

from src.relational_db.ast_nodes import (
    WILDCARD,
    AddAttribute,
    AttributeList,
    BoolOperator,
    BooleanCondition,
    Command,
    Comparator,
    Comparison,
    Condition,
    CreateDatabase,
    CreateTable,
    Delete,
    DropAttribute,
    DropDatabase,
    DropTable,
    Insert,
    Join,
    Select,
    Update,
    Use,
    ValueList,
    WildAttributeList,
)
from src.relational_db.errors import InvalidListError, InvalidQueryError
from src.relational_db.tokenizer import Token, TokenKind, tokenize

VALUE_KINDS = (
    TokenKind.STRING_LITERAL,
    TokenKind.BOOLEAN_LITERAL,
    TokenKind.FLOAT_LITERAL,
    TokenKind.INTEGER_LITERAL,
    TokenKind.NULL_LITERAL,
)

_COMPARATORS = {
    TokenKind.EQUALS: Comparator.EQUAL,
    TokenKind.NOT_EQUALS: Comparator.NOT_EQUAL,
    TokenKind.LESS_THAN: Comparator.LESS_THAN,
    TokenKind.LESS_THAN_OR_EQUAL: Comparator.LESS_THAN_OR_EQUAL,
    TokenKind.GREATER_THAN: Comparator.GREATER_THAN,
    TokenKind.GREATER_THAN_OR_EQUAL: Comparator.GREATER_THAN_OR_EQUAL,
    TokenKind.LIKE: Comparator.LIKE,
}

_BOOL_OPERATORS = {
    TokenKind.AND: BoolOperator.AND,
    TokenKind.OR: BoolOperator.OR,
}


def _unquote(s: str) -> str:
    """Strip the enclosing single quotes of a string literal and trim it."""
    if len(s) >= 2 and s[0] == s[-1] == "'":
        s = s[1:-1]
    return s.strip()


def _value_of(token: Token) -> str:
    if token.kind is TokenKind.STRING_LITERAL:
        return _unquote(token.text)
    return token.text


class Parser:
    def __init__(self):
        self.tokens: List[Token] = []
        self.pos = 0
        self.depth = 0

    def parse(self, tokens: Sequence[Token]) -> Command:
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            raise InvalidQueryError("Syntax error: token stream is not terminated by EOF")
        self.tokens = list(tokens)
        self.pos = 0
        self.depth = 0

        command = self._parse_command_type()
        self._expect(TokenKind.SEMICOLON)
        self._expect(TokenKind.EOF)
        return command

    # ---------------- token helpers ----------------

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        # EOF is sticky: never step past the last token
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def _expect(self, *kinds: TokenKind) -> Token:
        token = self._current()
        if token.kind in kinds:
            return self._advance()
        expected = " or ".join(k.name for k in kinds)
        raise InvalidQueryError(f"Syntax error: Expected {expected} but found {token.kind.name}")

    # ---------------- commands ----------------

    def _parse_command_type(self) -> Command:
        kind = self._current().kind
        match kind:
            case TokenKind.USE:
                return self._parse_use()
            case TokenKind.CREATE:
                return self._parse_create()
            case TokenKind.DROP:
                return self._parse_drop()
            case TokenKind.ALTER:
                return self._parse_alter()
            case TokenKind.INSERT:
                return self._parse_insert()
            case TokenKind.SELECT:
                return self._parse_select()
            case TokenKind.DELETE:
                return self._parse_delete()
            case TokenKind.UPDATE:
                return self._parse_update()
            case TokenKind.JOIN:
                return self._parse_join()
            case _:
                raise InvalidQueryError(f"Syntax error: Unknown command {self._current().text!r}")

    def _parse_use(self) -> Use:
        self._expect(TokenKind.USE)
        name = self._expect(TokenKind.IDENTIFIER)
        return Use(name.text.lower())

    def _parse_create(self) -> Command:
        self._expect(TokenKind.CREATE)
        target = self._expect(TokenKind.DATABASE, TokenKind.TABLE)
        name = self._expect(TokenKind.IDENTIFIER)
        if target.kind is TokenKind.DATABASE:
            return CreateDatabase(name.text.lower())

        if self._current().kind is TokenKind.SEMICOLON:
            return CreateTable(name.text.lower(), AttributeList(), name.text)

        self._expect(TokenKind.LEFT_PAREN)
        names = self._parse_list({TokenKind.IDENTIFIER}, TokenKind.RIGHT_PAREN)
        self._expect(TokenKind.RIGHT_PAREN)
        return CreateTable(name.text.lower(), AttributeList(tuple(t.text for t in names)), name.text)

    def _parse_drop(self) -> Command:
        self._expect(TokenKind.DROP)
        target = self._expect(TokenKind.DATABASE, TokenKind.TABLE)
        name = self._expect(TokenKind.IDENTIFIER).text.lower()
        if target.kind is TokenKind.DATABASE:
            return DropDatabase(name)
        return DropTable(name)

    def _parse_alter(self) -> Command:
        self._expect(TokenKind.ALTER)
        self._expect(TokenKind.TABLE)
        table = self._expect(TokenKind.IDENTIFIER).text.lower()
        alteration = self._expect(TokenKind.ADD, TokenKind.DROP)
        attribute = self._expect(TokenKind.IDENTIFIER).text
        if alteration.kind is TokenKind.ADD:
            return AddAttribute(table, attribute)
        return DropAttribute(table, attribute)

    def _parse_insert(self) -> Insert:
        self._expect(TokenKind.INSERT)
        self._expect(TokenKind.INTO)
        table = self._expect(TokenKind.IDENTIFIER).text.lower()
        self._expect(TokenKind.VALUES)
        self._expect(TokenKind.LEFT_PAREN)
        values = self._parse_list(VALUE_KINDS, TokenKind.RIGHT_PAREN)
        self._expect(TokenKind.RIGHT_PAREN)
        return Insert(table, ValueList(tuple(_value_of(t) for t in values)))

    def _parse_select(self) -> Select:
        self._expect(TokenKind.SELECT)
        if self._current().kind is TokenKind.ASTERISK:
            self._advance()
            attributes = WILDCARD
        else:
            names = self._parse_list({TokenKind.IDENTIFIER}, TokenKind.FROM)
            attributes = WildAttributeList(tuple(t.text for t in names))
        self._expect(TokenKind.FROM)
        table = self._expect(TokenKind.IDENTIFIER).text.lower()

        if self._current().kind is TokenKind.SEMICOLON:
            return Select(attributes, table)
        self._expect(TokenKind.WHERE)
        return Select(attributes, table, self._parse_where_condition())

    def _parse_delete(self) -> Delete:
        self._expect(TokenKind.DELETE)
        self._expect(TokenKind.FROM)
        table = self._expect(TokenKind.IDENTIFIER).text.lower()
        self._expect(TokenKind.WHERE)
        return Delete(table, self._parse_where_condition())

    def _parse_update(self) -> Update:
        self._expect(TokenKind.UPDATE)
        table = self._expect(TokenKind.IDENTIFIER).text.lower()
        self._expect(TokenKind.SET)
        assignments = self._parse_name_value_list()
        self._expect(TokenKind.WHERE)
        return Update(table, assignments, self._parse_where_condition())

    def _parse_join(self) -> Join:
        self._expect(TokenKind.JOIN)
        left_table = self._expect(TokenKind.IDENTIFIER).text.lower()
        self._expect(TokenKind.AND)
        right_table = self._expect(TokenKind.IDENTIFIER).text.lower()
        self._expect(TokenKind.ON)
        left_attribute = self._expect(TokenKind.IDENTIFIER).text
        self._expect(TokenKind.AND)
        right_attribute = self._expect(TokenKind.IDENTIFIER).text
        return Join(left_table, right_table, left_attribute, right_attribute)

    # ---------------- lists ----------------

    def _parse_list(self, accepted, ending: TokenKind) -> List[Token]:
        """
        Element ("," element)* up to, but not including, `ending`.
        Empty lists, trailing commas and running into EOF are list errors.
        """
        elements: List[Token] = []
        while True:
            token = self._current()
            if token.kind is TokenKind.EOF:
                raise InvalidListError("Invalid list: unexpected end of command")
            if token.kind not in accepted:
                raise InvalidListError(f"Invalid list: unexpected {token.kind.name} {token.text!r}")
            elements.append(self._advance())

            following = self._current()
            if following.kind is ending:
                return elements
            if following.kind is not TokenKind.COMMA:
                raise InvalidListError(f"Invalid list: expected COMMA but found {following.kind.name}")
            self._advance()

    def _parse_name_value_list(self) -> Dict[str, str]:
        # <NameValueList> ::= <NameValuePair> | <NameValuePair> "," <NameValueList>
        assignments: Dict[str, str] = {}
        while True:
            token = self._current()
            if token.kind is not TokenKind.IDENTIFIER:
                raise InvalidListError(f"Invalid list: expected attribute name but found {token.kind.name}")
            name = self._advance().text.lower()
            self._expect(TokenKind.ASSIGN)
            value = self._expect(*VALUE_KINDS)
            assignments[name] = _value_of(value)

            following = self._current()
            if following.kind is TokenKind.WHERE:
                return assignments
            if following.kind is not TokenKind.COMMA:
                raise InvalidListError(f"Invalid list: expected COMMA but found {following.kind.name}")
            self._advance()

    # ---------------- conditions ----------------

    def _parse_where_condition(self) -> Condition:
        condition = self._parse_condition()
        if self.depth != 0:
            raise InvalidQueryError("Syntax error: unbalanced parentheses in condition")
        return condition

    def _parse_condition(self) -> Condition:
        """
        Units joined by AND/OR, folded strictly left to right
        (A AND B OR C == (A AND B) OR C). A unit is either a comparison
        or a parenthesised condition.
        """
        units: List[Condition] = []
        operators: List[BoolOperator] = []
        while True:
            if self._current().kind is TokenKind.LEFT_PAREN:
                self._advance()
                self.depth += 1
                units.append(self._parse_condition())
            else:
                units.append(self._parse_comparison())

            operator = _BOOL_OPERATORS.get(self._current().kind)
            if operator is None:
                break
            self._advance()
            operators.append(operator)

        if self._current().kind is TokenKind.RIGHT_PAREN:
            self._advance()
            self.depth -= 1

        result = units[0]
        for operator, right in zip(operators, units[1:]):
            result = BooleanCondition(result, operator, right)
        return result

    def _parse_comparison(self) -> Comparison:
        # <AttributeComparison> ::= [AttributeName] <Comparator> [Value]
        attribute = self._expect(TokenKind.IDENTIFIER).text
        token = self._current()
        comparator = _COMPARATORS.get(token.kind)
        if comparator is None:
            raise InvalidQueryError(f"Syntax error: Expected comparator but found {token.kind.name}")
        self._advance()
        value = self._expect(*VALUE_KINDS)
        return Comparison(attribute, comparator, _value_of(value))


def parse_command(line: str) -> Command:
    """Tokenize and parse a single command string."""
    return Parser().parse(tokenize(line))
