"""
Parser for Dataview queries.

Converts tokens into an Abstract Syntax Tree (AST).

Expression precedence, lowest to highest:
    OR, AND, NOT / !, comparison (one per level), + -, * / %,
    unary minus, postfix `.field`, primary
"""

from vault_query.dataview.ast import (
    AndSource,
    BinaryOpNode,
    DataviewQuery,
    ExpressionNode,
    FieldNode,
    FlattenClause,
    FolderSource,
    FunctionCallNode,
    GroupByClause,
    LiteralNode,
    NegateNode,
    NotSource,
    OrSource,
    QueryType,
    SortClause,
    SortDirection,
    SourceNode,
    TableField,
    TagSource,
    ThisNode,
    UnaryOpNode,
)
from vault_query.dataview.errors import DataviewSyntaxError
from vault_query.dataview.lexer import DataviewLexer, Token, TokenType

KEYWORD_TYPES = frozenset(DataviewLexer.KEYWORDS.values())

# Keywords that may stand in for a bare field or function name
KEYWORDS_AS_IDENTIFIER = frozenset({TokenType.ID, TokenType.AS, TokenType.ASC, TokenType.DESC})

# Keywords that double as built-in function names when followed by `(` (contains, list)
KEYWORDS_AS_FUNCTION = KEYWORD_TYPES - {
    TokenType.NOT,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NULL,
    TokenType.THIS,
}

# Tokens that start a clause; they end an optional field list or LIST expression
CLAUSE_KEYWORDS = frozenset(
    {
        TokenType.FROM,
        TokenType.WHERE,
        TokenType.SORT,
        TokenType.GROUP,
        TokenType.FLATTEN,
        TokenType.LIMIT,
    }
)

COMPARISON_OPERATORS = {
    TokenType.EQUALS: "=",
    TokenType.NOT_EQUALS: "!=",
    TokenType.LESS_THAN: "<",
    TokenType.GREATER_THAN: ">",
    TokenType.LESS_EQUAL: "<=",
    TokenType.GREATER_EQUAL: ">=",
    TokenType.CONTAINS: "CONTAINS",
}


class DataviewParser:
    """Parser for Dataview queries."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    @classmethod
    def parse(cls, query_text: str) -> DataviewQuery:
        """Parse a Dataview query string into an AST.

        Raises:
            DataviewSyntaxError: on tokenizer or grammar errors
        """
        tokens = DataviewLexer(query_text).tokenize()
        parser = cls(tokens)
        return parser.parse_query()

    @classmethod
    def parse_expression(cls, expression_text: str) -> ExpressionNode:
        """Parse a standalone expression, e.g. the body of an inline `= this.file.name`."""
        tokens = DataviewLexer(expression_text).tokenize()
        parser = cls(tokens)
        expr = parser._parse_expression()
        if not parser._is_at_end():
            raise parser._error("Unexpected token after expression")
        return expr

    def parse_query(self) -> DataviewQuery:
        """Parse the complete query."""
        query = self._parse_header()

        # Clauses may come in any order; a repeated clause replaces the earlier one
        while not self._is_at_end():
            if self._match(TokenType.FROM):
                query.from_source = self._parse_source()
            elif self._match(TokenType.WHERE):
                query.where_clause = self._parse_expression()
            elif self._match(TokenType.SORT):
                query.sort_clauses = self._parse_sort_clauses()
            elif self._match(TokenType.GROUP):
                self._expect(TokenType.BY, "Expected BY after GROUP")
                expr = self._parse_expression()
                query.group_by = GroupByClause(expression=expr, alias=self._parse_alias())
            elif self._match(TokenType.FLATTEN):
                expr = self._parse_expression()
                query.flatten = FlattenClause(expression=expr, alias=self._parse_alias())
            elif self._match(TokenType.LIMIT):
                query.limit = self._parse_limit()
            else:
                raise self._error(f"Unexpected token '{self._current().value}'")

        return query

    def _parse_header(self) -> DataviewQuery:
        """Parse the query type and whatever directly follows it."""
        if self._match(TokenType.TABLE):
            query = DataviewQuery(query_type=QueryType.TABLE)
            query.without_id = self._parse_without_id()
            query.fields = self._parse_table_fields() if self._at_expression_start() else []
            return query

        if self._match(TokenType.LIST):
            query = DataviewQuery(query_type=QueryType.LIST)
            query.without_id = self._parse_without_id()
            if self._at_expression_start():
                query.list_expression = self._parse_expression()
            return query

        if self._match(TokenType.TASK):
            return DataviewQuery(query_type=QueryType.TASK)

        raise self._error("Expected TABLE, LIST, or TASK")

    def _parse_without_id(self) -> bool:
        if self._match(TokenType.WITHOUT):
            self._expect(TokenType.ID, "Expected ID after WITHOUT")
            return True
        return False

    def _at_expression_start(self) -> bool:
        return not self._is_at_end() and self._current().type not in CLAUSE_KEYWORDS

    def _parse_table_fields(self) -> list[TableField]:
        """Parse TABLE fields: expr [AS alias] (, expr [AS alias])*"""
        fields = []
        while True:
            expr = self._parse_expression()
            fields.append(TableField(expression=expr, alias=self._parse_alias()))
            if not self._match(TokenType.COMMA):
                break
        return fields

    def _parse_alias(self) -> str | None:
        """Parse an optional `AS name`; the name may be a string, identifier or keyword."""
        if not self._match(TokenType.AS):
            return None
        token = self._current()
        if token.type in (TokenType.STRING, TokenType.IDENTIFIER) or token.type in KEYWORD_TYPES:
            self._advance()
            return token.value
        raise self._error("Expected alias name after AS")

    def _parse_sort_clauses(self) -> list[SortClause]:
        """Parse SORT keys: expr [ASC|DESC] (, expr [ASC|DESC])*"""
        clauses = []
        while True:
            expr = self._parse_expression()
            direction = SortDirection.ASC
            if self._match(TokenType.DESC):
                direction = SortDirection.DESC
            else:
                self._match(TokenType.ASC)
            clauses.append(SortClause(expression=expr, direction=direction))
            if not self._match(TokenType.COMMA):
                break
        return clauses

    def _parse_limit(self) -> int:
        """Parse LIMIT value."""
        token = self._expect(TokenType.NUMBER, "Expected number after LIMIT")
        return int(float(token.value))

    # Source (FROM clause)

    def _parse_source(self) -> SourceNode:
        """Atoms joined left to right by AND/OR, which share one precedence level."""
        left = self._parse_source_atom()
        while True:
            if self._match(TokenType.AND):
                left = AndSource(left=left, right=self._parse_source_atom())
            elif self._match(TokenType.OR):
                left = OrSource(left=left, right=self._parse_source_atom())
            else:
                return left

    def _parse_source_atom(self) -> SourceNode:
        token = self._current()

        if self._match(TokenType.STRING):
            return FolderSource(path=token.value)

        if self._match(TokenType.HASH):
            parts = [self._parse_tag_segment("Expected tag name after '#'")]
            while self._match(TokenType.SLASH):
                parts.append(self._parse_tag_segment("Expected tag segment after '/'"))
            return TagSource(tag="/".join(parts))

        if self._match(TokenType.BANG) or self._match(TokenType.NOT):
            return NotSource(operand=self._parse_source_atom())

        if self._match(TokenType.LPAREN):
            source = self._parse_source()
            self._expect(TokenType.RPAREN, "Expected ')' after source")
            return source

        raise self._error("Expected source (quoted path, #tag, !, or parenthesized source)")

    def _parse_tag_segment(self, message: str) -> str:
        token = self._current()
        if token.type == TokenType.IDENTIFIER or token.type in KEYWORD_TYPES:
            self._advance()
            return token.value
        raise self._error(message)

    # Expressions

    def _parse_expression(self) -> ExpressionNode:
        """Parse an expression (handles operator precedence)."""
        return self._parse_or_expression()

    def _parse_or_expression(self) -> ExpressionNode:
        left = self._parse_and_expression()
        while self._match(TokenType.OR):
            right = self._parse_and_expression()
            left = BinaryOpNode(operator="OR", left=left, right=right)
        return left

    def _parse_and_expression(self) -> ExpressionNode:
        left = self._parse_not_expression()
        while self._match(TokenType.AND):
            right = self._parse_not_expression()
            left = BinaryOpNode(operator="AND", left=left, right=right)
        return left

    def _parse_not_expression(self) -> ExpressionNode:
        if self._match(TokenType.BANG) or self._match(TokenType.NOT):
            return UnaryOpNode(operator="NOT", operand=self._parse_not_expression())
        return self._parse_comparison_expression()

    def _parse_comparison_expression(self) -> ExpressionNode:
        """Comparisons do not chain: `a < b < c` stops after `a < b`."""
        left = self._parse_additive_expression()
        operator = COMPARISON_OPERATORS.get(self._current().type)
        if operator:
            self._advance()
            right = self._parse_additive_expression()
            return BinaryOpNode(operator=operator, left=left, right=right)
        return left

    def _parse_additive_expression(self) -> ExpressionNode:
        left = self._parse_multiplicative_expression()
        while self._check_any([TokenType.PLUS, TokenType.MINUS]):
            operator = self._advance().value
            right = self._parse_multiplicative_expression()
            left = BinaryOpNode(operator=operator, left=left, right=right)
        return left

    def _parse_multiplicative_expression(self) -> ExpressionNode:
        left = self._parse_unary_expression()
        while self._check_any([TokenType.STAR, TokenType.SLASH, TokenType.PERCENT]):
            operator = self._advance().value
            right = self._parse_unary_expression()
            left = BinaryOpNode(operator=operator, left=left, right=right)
        return left

    def _parse_unary_expression(self) -> ExpressionNode:
        if self._match(TokenType.MINUS):
            return NegateNode(operand=self._parse_unary_expression())
        return self._parse_postfix_expression()

    def _parse_postfix_expression(self) -> ExpressionNode:
        """Dotted field access. Keywords are valid segments (file.name, this.type)."""
        node = self._parse_primary_expression()

        while self._match(TokenType.DOT):
            token = self._current()
            if token.type != TokenType.IDENTIFIER and token.type not in KEYWORD_TYPES:
                raise self._error("Expected field name after '.'")
            self._advance()

            if isinstance(node, ThisNode):
                node = FieldNode(path=[token.value], this=True)
            elif isinstance(node, FieldNode):
                node.path.append(token.value)
            else:
                node = FieldNode(path=[token.value], base=node)

        return node

    def _parse_primary_expression(self) -> ExpressionNode:
        """Parse primary expression (literals, fields, function calls)."""
        token = self._current()

        if self._match(TokenType.NUMBER):
            if "." in token.value:
                return LiteralNode(value=float(token.value))
            return LiteralNode(value=int(token.value))

        if self._match(TokenType.STRING):
            return LiteralNode(value=token.value)

        if self._match(TokenType.TRUE):
            return LiteralNode(value=True)
        if self._match(TokenType.FALSE):
            return LiteralNode(value=False)
        if self._match(TokenType.NULL):
            return LiteralNode(value=None)

        if self._match(TokenType.THIS):
            return ThisNode()

        is_keyword_call = token.type in KEYWORDS_AS_FUNCTION and self._peek().type == TokenType.LPAREN
        if token.type == TokenType.IDENTIFIER or token.type in KEYWORDS_AS_IDENTIFIER or is_keyword_call:
            self._advance()
            if self._match(TokenType.LPAREN):
                if token.value.lower() == "dur":
                    return self._parse_raw_duration_call(token.value)
                args = self._parse_function_arguments()
                self._expect(TokenType.RPAREN, "Expected ')' after function arguments")
                return FunctionCallNode(function_name=token.value, arguments=args)
            return FieldNode(path=[token.value])

        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        raise self._error("Expected expression")

    def _parse_raw_duration_call(self, name: str) -> FunctionCallNode:
        """dur(30 days): everything up to ')' becomes one raw string argument."""
        parts = []
        while not self._is_at_end() and not self._check(TokenType.RPAREN):
            parts.append(self._advance().value)
        self._expect(TokenType.RPAREN, "Expected ')' after duration")
        return FunctionCallNode(function_name=name, arguments=[LiteralNode(value=" ".join(parts))])

    def _parse_function_arguments(self) -> list[ExpressionNode]:
        """Parse function arguments."""
        args: list[ExpressionNode] = []
        if self._check(TokenType.RPAREN):
            return args

        args.append(self._parse_expression())
        while self._match(TokenType.COMMA):
            args.append(self._parse_expression())
        return args

    # Helper methods

    def _current(self) -> Token:
        """Get the current token."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # Return EOF

    def _peek(self) -> Token:
        """The token after the current one."""
        if self.pos + 1 < len(self.tokens):
            return self.tokens[self.pos + 1]
        return self.tokens[-1]

    def _advance(self) -> Token:
        """Advance to the next token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches the given type."""
        return self._current().type == token_type

    def _check_any(self, token_types: list[TokenType]) -> bool:
        """Check if current token matches any of the given types."""
        return any(self._check(t) for t in token_types)

    def _match(self, token_type: TokenType) -> bool:
        """Consume the current token if it has the given type."""
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self._check(token_type):
            return self._advance()
        token = self._current()
        got = f"'{token.value}'" if token.type != TokenType.EOF else "end of query"
        raise self._error(f"{message}, got {got}")

    def _is_at_end(self) -> bool:
        """Check if we're at the end of tokens."""
        return self._current().type == TokenType.EOF

    def _error(self, message: str) -> DataviewSyntaxError:
        token = self._current()
        return DataviewSyntaxError(message, token.offset, token.line, token.column, token)
