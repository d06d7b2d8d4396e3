"""Lexical analysis for the minilambda language: converts a line of source text into a list of Tokens.

The token vocabulary can be loosely defined as follows:

```
<integer>    ::= [0-9]+                          ; no sign: negation is written -(0, n)
<boolean>    ::= "T" | "F"                       ; single characters, checked before identifiers
<keyword>    ::= "if" | "then" | "else" | "func" | "apply"
<variable>   ::= [a-z]+                          ; any lowercase run that isn't a keyword
<binary_op>  ::= "+" | "-" | "*" | "/" | "<" | "=" | "&" | "|"
<unary_op>   ::= "!"
<arrow>      ::= "=>"                            ; "=" needs one character of lookahead
<structural> ::= "(" | ")" | ","
```

Spaces, tabs and line breaks separate tokens and are otherwise ignored. Keywords always win over variables, so no
variable can be spelled like a keyword.
"""

from dataclasses import dataclass, field
from enum import Enum

from minilambda.lang.error import IntegerOutOfRange, UnexpectedCharacter


INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1


class BinaryOperator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    LESS_THAN = "<"
    EQUALS = "="
    AND = "&"
    OR = "|"

    def __str__(self):
        return self.value


class UnaryOperator(Enum):
    NOT = "!"

    def __str__(self):
        return self.value


class TokenKind(Enum):
    INTEGER = "integer"
    VARIABLE = "variable"
    BOOLEAN = "boolean"
    IF = "'if'"
    THEN = "'then'"
    ELSE = "'else'"
    FUNC = "'func'"
    APPLY = "'apply'"
    BINARY_OP = "binary operator"
    UNARY_OP = "unary operator"
    OPEN_PAREN = "'('"
    CLOSE_PAREN = "')'"
    COMMA = "','"
    ARROW = "'=>'"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Token:
    """One lexical unit. start and end are offsets into the source line and are ignored when comparing tokens."""
    kind: TokenKind
    value: object
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    @property
    def lexeme(self):
        """Source text of this token."""
        if self.kind is TokenKind.BOOLEAN:
            return "T" if self.value else "F"
        return str(self.value)

    def __str__(self):
        return self.lexeme


class Lexer:
    """Single-pass scanner with one character of lookahead."""
    WHITESPACE = " \t\r\n"
    DIGITS = "0123456789"
    LETTERS = "abcdefghijklmnopqrstuvwxyz"

    BOOLEANS = {"T": True, "F": False}
    KEYWORDS = {
        "if": TokenKind.IF,
        "then": TokenKind.THEN,
        "else": TokenKind.ELSE,
        "func": TokenKind.FUNC,
        "apply": TokenKind.APPLY,
    }
    STRUCTURAL = {"(": TokenKind.OPEN_PAREN, ")": TokenKind.CLOSE_PAREN, ",": TokenKind.COMMA}
    BINARY_OPS = {op.value: op for op in BinaryOperator if op is not BinaryOperator.EQUALS}  # "=" needs lookahead
    UNARY_OPS = {op.value: op for op in UnaryOperator}

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.tokens = []

    def peek(self, offset=0):
        """Returns the character offset places ahead of the cursor, or None past the end of source."""
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else None

    def tokenize(self):
        """Scans all of self.source, raises a LexError on the first character that doesn't start a token."""
        while self.peek() is not None:
            char = self.peek()

            if char in Lexer.WHITESPACE:
                self.pos += 1
            elif char in Lexer.DIGITS:
                self._integer()
            elif char in Lexer.BOOLEANS:
                self._emit(TokenKind.BOOLEAN, Lexer.BOOLEANS[char], 1)
            elif char in Lexer.LETTERS:
                self._word()
            elif char == "=":
                if self.peek(1) == ">":
                    self._emit(TokenKind.ARROW, "=>", 2)
                else:
                    self._emit(TokenKind.BINARY_OP, BinaryOperator.EQUALS, 1)
            elif char in Lexer.BINARY_OPS:
                self._emit(TokenKind.BINARY_OP, Lexer.BINARY_OPS[char], 1)
            elif char in Lexer.UNARY_OPS:
                self._emit(TokenKind.UNARY_OP, Lexer.UNARY_OPS[char], 1)
            elif char in Lexer.STRUCTURAL:
                self._emit(Lexer.STRUCTURAL[char], char, 1)
            else:
                raise UnexpectedCharacter(char, self.source, self.pos)

        return self.tokens

    def _emit(self, kind, value, length):
        self.tokens.append(Token(kind, value, self.pos, self.pos + length))
        self.pos += length

    def _run(self, alphabet):
        """Returns the longest run of characters in alphabet starting at the cursor."""
        end = self.pos
        while end < len(self.source) and self.source[end] in alphabet:
            end += 1
        return self.source[self.pos:end]

    def _integer(self):
        literal = self._run(Lexer.DIGITS)

        # compared as digit strings: int() refuses very long literals
        digits, limit = literal.lstrip("0"), str(INT_MAX)
        if (len(digits), digits) > (len(limit), limit):
            raise IntegerOutOfRange(literal, self.source, self.pos)
        self._emit(TokenKind.INTEGER, int(literal), len(literal))

    def _word(self):
        word = self._run(Lexer.LETTERS)
        if word in Lexer.KEYWORDS:
            self._emit(Lexer.KEYWORDS[word], word, len(word))
        else:
            self._emit(TokenKind.VARIABLE, word, len(word))


def lex(source):
    """Returns the list of Tokens in source. Raises a LexError if source contains a character outside the language."""
    return Lexer(source).tokenize()
