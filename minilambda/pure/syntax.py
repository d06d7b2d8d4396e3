"""Abstract syntax tree and recursive-descent parser for the minilambda language.

Formally, the grammar can be defined as

```
<expr>        ::= <integer> | <variable> | <boolean>
                | <unary_expr> | <binary_expr> | <func_expr> | <if_expr> | <apply_expr>
<unary_expr>  ::= "!" <expr>
<binary_expr> ::= <binary_op> "(" <expr> "," <expr> ")"    ; prefix: +(1, 2), never 1 + 2
<func_expr>   ::= "func" <variable> "=>" <expr>            ; bodies are greedy
<if_expr>     ::= "if" <expr> "then" <expr> "else" <expr>
<apply_expr>  ::= "apply" "(" <expr> "," <expr> ")"
```

Each production starts with a distinct token, so one token of lookahead always picks the production: every Expression
subclass declares the token kind it starts with (FIRST), and Parser.expression hands control to the subclass whose FIRST
matches. Operators are always written in prefix form with parenthesized operands, so there is no precedence or
associativity to resolve.

Note that str(expr) is the display form (`+(1, 2)` displays as `1 + 2`), which generally can't be parsed back;
expr.to_source() gives the parseable form.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from minilambda.lang.error import ExpectedExpression, ExpectedToken, UnexpectedEndOfInput
from minilambda.pure.lexical import BinaryOperator, TokenKind, UnaryOperator, lex


class Expression(ABC):
    """Superclass of every AST node. Nodes are immutable and own their children."""
    FIRST = None

    @classmethod
    @abstractmethod
    def parse(cls, parser):
        """This method should consume this production from parser, starting at its FIRST token (which is guaranteed to
        be the lookahead), and return the parsed node.
        """

    @property
    def nodes(self):
        """Children of this node, in source order."""
        return []

    @abstractmethod
    def to_source(self):
        """Returns parseable source text that parses back to an equal tree."""

    def display(self, indents=0):
        """Recursively displays Expression tree with readable format.

        Format:
        <Expression>(expr='<expr>', nodes=[
            <Expression>(expr='<expr>', nodes=[
                ...
                <Expression>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    @classmethod
    def productions(cls):
        """Returns {token kind: Expression subclass} for every concrete production."""
        return {subclass.FIRST: subclass for subclass in cls.__subclasses__() if subclass.FIRST is not None}


def _span():
    return field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Integer(Expression):
    value: int
    span: tuple = _span()

    FIRST = TokenKind.INTEGER

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        return cls(token.value, (token.start, token.end))

    def to_source(self):
        return str(self.value)

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Variable(Expression):
    name: str
    span: tuple = _span()

    FIRST = TokenKind.VARIABLE

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        return cls(token.value, (token.start, token.end))

    def to_source(self):
        return self.name

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool
    span: tuple = _span()

    FIRST = TokenKind.BOOLEAN

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        return cls(token.value, (token.start, token.end))

    def to_source(self):
        return str(self)

    def __str__(self):
        return "T" if self.value else "F"


@dataclass(frozen=True)
class UnaryOp(Expression):
    op: UnaryOperator
    child: Expression
    span: tuple = _span()

    FIRST = TokenKind.UNARY_OP

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        child = parser.expression()
        return cls(token.value, child, parser.span_from(token))

    @property
    def nodes(self):
        return [self.child]

    def to_source(self):
        return f"{self.op}{self.child.to_source()}"

    def __str__(self):
        return f"{self.op}{self.child}"


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: BinaryOperator
    left: Expression
    right: Expression
    span: tuple = _span()

    FIRST = TokenKind.BINARY_OP

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        left, right = parser.operands(f"operator '{token.value}'")
        return cls(token.value, left, right, parser.span_from(token))

    @property
    def nodes(self):
        return [self.left, self.right]

    def to_source(self):
        return f"{self.op}({self.left.to_source()}, {self.right.to_source()})"

    def __str__(self):
        return f"{self.left} {self.op} {self.right}"


@dataclass(frozen=True)
class Func(Expression):
    """Unevaluated single-argument abstraction: func <param> => <body>."""
    param: str
    body: Expression
    span: tuple = _span()

    FIRST = TokenKind.FUNC

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        param = parser.expect(TokenKind.VARIABLE, "parameter name after 'func'")
        parser.expect(TokenKind.ARROW, f"'=>' after 'func {param.value}'")
        body = parser.expression()
        return cls(param.value, body, parser.span_from(token))

    @property
    def nodes(self):
        return [Variable(self.param), self.body]

    def to_source(self):
        return f"func {self.param} => {self.body.to_source()}"

    def __str__(self):
        return f"func {self.param} => {self.body}"


@dataclass(frozen=True)
class If(Expression):
    condition: Expression
    then_branch: Expression
    else_branch: Expression
    span: tuple = _span()

    FIRST = TokenKind.IF

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        condition = parser.expression()
        parser.expect(TokenKind.THEN, "'then' after if condition")
        then_branch = parser.expression()
        parser.expect(TokenKind.ELSE, "'else' after then branch")
        else_branch = parser.expression()
        return cls(condition, then_branch, else_branch, parser.span_from(token))

    @property
    def nodes(self):
        return [self.condition, self.then_branch, self.else_branch]

    def to_source(self):
        condition, then_branch, else_branch = (node.to_source() for node in self.nodes)
        return f"if {condition} then {then_branch} else {else_branch}"

    def __str__(self):
        return f"if {self.condition} then {self.then_branch} else {self.else_branch}"


@dataclass(frozen=True)
class Apply(Expression):
    func: Expression
    arg: Expression
    span: tuple = _span()

    FIRST = TokenKind.APPLY

    @classmethod
    def parse(cls, parser):
        token = parser.advance()
        func, arg = parser.operands("'apply'")
        return cls(func, arg, parser.span_from(token))

    @property
    def nodes(self):
        return [self.func, self.arg]

    def to_source(self):
        return f"apply({self.func.to_source()}, {self.arg.to_source()})"

    def __str__(self):
        return f"{self.func} ({self.arg})"


class Parser:
    """Recursive-descent parser over a list of Tokens. source is only used for error messages."""

    def __init__(self, tokens, source=""):
        self.tokens = list(tokens)
        self.source = source
        self.pos = 0
        self._productions = Expression.productions()

    def peek(self):
        """Returns the lookahead token, or None at end of input."""
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def advance(self):
        """Consumes and returns the lookahead token."""
        token = self.peek()
        if token is None:
            raise UnexpectedEndOfInput(self.source, self._end_pos())
        self.pos += 1
        return token

    def expect(self, kind, description):
        """Consumes the lookahead token if it is of kind, else raises ExpectedToken naming description."""
        token = self.peek()
        if token is None:
            raise ExpectedToken(description, "end of input", self.source, self._end_pos(), self._end_pos() + 1)
        if token.kind is not kind:
            raise ExpectedToken(description, f"'{token}'", self.source, token.start, token.end)
        return self.advance()

    def operands(self, owner):
        """Parses '(' <expr> ',' <expr> ')' and returns both expressions. owner names the construct in errors."""
        self.expect(TokenKind.OPEN_PAREN, f"'(' after {owner}")
        first = self.expression()
        self.expect(TokenKind.COMMA, f"',' between operands of {owner}")
        second = self.expression()
        self.expect(TokenKind.CLOSE_PAREN, f"')' closing {owner}")
        return first, second

    def expression(self):
        """Parses one expression starting at the lookahead token."""
        token = self.peek()
        if token is None:
            raise UnexpectedEndOfInput(self.source, self._end_pos())

        production = self._productions.get(token.kind)
        if production is None:
            raise ExpectedExpression(str(token), self.source, token.start, token.end)
        return production.parse(self)

    def parse(self):
        """Parses a complete expression. Raises ExpectedToken if any tokens are left over."""
        expr = self.expression()

        token = self.peek()
        if token is not None:
            raise ExpectedToken("end of input", f"'{token}'", self.source, token.start, token.end)
        return expr

    def span_from(self, token):
        """Returns the (start, end) span from token to the last consumed token."""
        return token.start, self.tokens[self.pos - 1].end

    def _end_pos(self):
        if self.tokens:
            return self.tokens[-1].end
        return len(self.source)


def parse(tokens, source=""):
    """Parses tokens into an Expression. Raises a ParseError if tokens are not exactly one expression."""
    return Parser(tokens, source).parse()


def parse_source(source):
    """Lexes and parses source."""
    return parse(lex(source), source)
