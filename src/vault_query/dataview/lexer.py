"""
Lexical analyzer (tokenizer) for Dataview queries.
"""

from dataclasses import dataclass
from enum import Enum, auto

from vault_query.dataview.errors import DataviewSyntaxError


class TokenType(Enum):
    """Token types for Dataview queries."""

    # Keywords
    TABLE = auto()
    LIST = auto()
    TASK = auto()
    FROM = auto()
    WHERE = auto()
    SORT = auto()
    GROUP = auto()
    BY = auto()
    FLATTEN = auto()
    LIMIT = auto()
    AS = auto()
    ASC = auto()
    DESC = auto()
    WITHOUT = auto()
    ID = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    CONTAINS = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()
    THIS = auto()

    # Literals and identifiers
    STRING = auto()
    NUMBER = auto()
    IDENTIFIER = auto()

    # Comparison operators
    EQUALS = auto()  # =
    NOT_EQUALS = auto()  # !=
    LESS_THAN = auto()  # <
    GREATER_THAN = auto()  # >
    LESS_EQUAL = auto()  # <=
    GREATER_EQUAL = auto()  # >=

    # Punctuation
    DOT = auto()
    COMMA = auto()
    LPAREN = auto()
    RPAREN = auto()
    BANG = auto()
    HASH = auto()
    SLASH = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    PERCENT = auto()

    # Special
    EOF = auto()


@dataclass
class Token:
    """A token in the Dataview query.

    ``value`` keeps the source spelling, so keywords used as field names
    (``id``, ``this.type``) resolve with their original case.
    """

    type: TokenType
    value: str
    offset: int
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class DataviewLexer:
    """Tokenizer for Dataview queries."""

    KEYWORDS = {
        "TABLE": TokenType.TABLE,
        "LIST": TokenType.LIST,
        "TASK": TokenType.TASK,
        "FROM": TokenType.FROM,
        "WHERE": TokenType.WHERE,
        "SORT": TokenType.SORT,
        "GROUP": TokenType.GROUP,
        "BY": TokenType.BY,
        "FLATTEN": TokenType.FLATTEN,
        "LIMIT": TokenType.LIMIT,
        "AS": TokenType.AS,
        "ASC": TokenType.ASC,
        "DESC": TokenType.DESC,
        "WITHOUT": TokenType.WITHOUT,
        "ID": TokenType.ID,
        "AND": TokenType.AND,
        "OR": TokenType.OR,
        "NOT": TokenType.NOT,
        "CONTAINS": TokenType.CONTAINS,
        "TRUE": TokenType.TRUE,
        "FALSE": TokenType.FALSE,
        "NULL": TokenType.NULL,
        "THIS": TokenType.THIS,
    }

    DIGITS = "0123456789"

    TWO_CHAR_OPERATORS = {
        "!=": TokenType.NOT_EQUALS,
        "<=": TokenType.LESS_EQUAL,
        ">=": TokenType.GREATER_EQUAL,
    }

    SINGLE_CHAR_TOKENS = {
        "=": TokenType.EQUALS,
        "<": TokenType.LESS_THAN,
        ">": TokenType.GREATER_THAN,
        "!": TokenType.BANG,
        ".": TokenType.DOT,
        ",": TokenType.COMMA,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "#": TokenType.HASH,
        "/": TokenType.SLASH,
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.STAR,
        "%": TokenType.PERCENT,
    }

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the entire input. The result always ends with an EOF token."""
        while self.pos < len(self.text):
            self._skip_whitespace()
            if self.pos >= len(self.text):
                break

            if not self._try_tokenize_one():
                raise DataviewSyntaxError(
                    f"Unexpected character '{self.text[self.pos]}'",
                    self._byte_offset(self.pos),
                    self.line,
                    self.column,
                )

        self.tokens.append(self._make_token(TokenType.EOF, "", self.pos, self.column))
        return self.tokens

    def _try_tokenize_one(self) -> bool:
        """Try to tokenize one token. Returns True if successful."""
        # Comments
        if self._match_comment():
            return True

        # Strings
        if self._match_string():
            return True

        # Numbers
        if self._match_number():
            return True

        # Identifiers and keywords
        if self._match_identifier():
            return True

        # Operators and punctuation (two-character operators first)
        if self._match_operator():
            return True

        return False

    def _byte_offset(self, pos: int) -> int:
        return len(self.text[:pos].encode("utf-8"))

    def _make_token(self, token_type: TokenType, value: str, start: int, start_col: int) -> Token:
        return Token(token_type, value, self._byte_offset(start), self.line, start_col)

    def _skip_whitespace(self):
        """Skip whitespace but track newlines."""
        while self.pos < len(self.text) and self.text[self.pos] in " \t\r\n":
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _match_comment(self) -> bool:
        """Match // line comments."""
        if self.text.startswith("//", self.pos):
            while self.pos < len(self.text) and self.text[self.pos] != "\n":
                self.pos += 1
                self.column += 1
            return True
        return False

    def _match_string(self) -> bool:
        """Match single or double quoted strings. There are no escape sequences."""
        if self.text[self.pos] not in ('"', "'"):
            return False

        quote = self.text[self.pos]
        start = self.pos
        start_line = self.line
        start_col = self.column

        end = self.text.find(quote, start + 1)
        if end == -1:
            raise DataviewSyntaxError(
                "Unterminated string", self._byte_offset(start), start_line, start_col
            )

        value = self.text[start + 1 : end]
        token = self._make_token(TokenType.STRING, value, start, start_col)
        token.line = start_line
        self.tokens.append(token)

        # Strings may span lines
        newlines = value.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(value) - value.rfind("\n")
        else:
            self.column += len(value) + 1
        self.column += 1
        self.pos = end + 1
        return True

    def _match_number(self) -> bool:
        """Match integer and decimal literals. Negation is a separate token."""
        if self.text[self.pos] not in self.DIGITS:
            return False

        start = self.pos
        start_col = self.column

        while self.pos < len(self.text) and self.text[self.pos] in self.DIGITS:
            self.pos += 1

        # Optional decimal part
        if self.pos < len(self.text) and self.text[self.pos] == ".":
            self.pos += 1
            while self.pos < len(self.text) and self.text[self.pos] in self.DIGITS:
                self.pos += 1

        value = self.text[start : self.pos]
        self.column += self.pos - start
        self.tokens.append(self._make_token(TokenType.NUMBER, value, start, start_col))
        return True

    def _match_identifier(self) -> bool:
        """Match identifiers and keywords. Hyphens are allowed after the first character."""
        if not (self.text[self.pos].isalpha() or self.text[self.pos] == "_"):
            return False

        start = self.pos
        start_col = self.column

        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isalnum() or char in ("_", "-"):
                self.pos += 1
            else:
                break

        value = self.text[start : self.pos]
        self.column += self.pos - start

        token_type = self.KEYWORDS.get(value.upper(), TokenType.IDENTIFIER)
        self.tokens.append(self._make_token(token_type, value, start, start_col))
        return True

    def _match_operator(self) -> bool:
        """Match operators and punctuation."""
        start = self.pos
        start_col = self.column

        two_char = self.text[self.pos : self.pos + 2]
        token_type = self.TWO_CHAR_OPERATORS.get(two_char)
        if token_type:
            self.tokens.append(self._make_token(token_type, two_char, start, start_col))
            self.pos += 2
            self.column += 2
            return True

        char = self.text[self.pos]
        token_type = self.SINGLE_CHAR_TOKENS.get(char)
        if token_type:
            self.tokens.append(self._make_token(token_type, char, start, start_col))
            self.pos += 1
            self.column += 1
            return True

        return False
