import unittest

from minilambda.lang.error import IntegerOutOfRange, LexError, UnexpectedCharacter
from minilambda.pure.lexical import BinaryOperator, Token, TokenKind, UnaryOperator, lex


def kinds(source):
    return [token.kind for token in lex(source)]


class LexTestCase(unittest.TestCase):

    def test_literals(self):
        cases = {
            "0": [Token(TokenKind.INTEGER, 0)],
            "123": [Token(TokenKind.INTEGER, 123)],
            "9223372036854775807": [Token(TokenKind.INTEGER, 2 ** 63 - 1)],
            "T": [Token(TokenKind.BOOLEAN, True)],
            "F": [Token(TokenKind.BOOLEAN, False)],
            "x": [Token(TokenKind.VARIABLE, "x")],
            "abc": [Token(TokenKind.VARIABLE, "abc")],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, lex(case), case)

    def test_keywords(self):
        cases = {
            "if": TokenKind.IF,
            "then": TokenKind.THEN,
            "else": TokenKind.ELSE,
            "func": TokenKind.FUNC,
            "apply": TokenKind.APPLY,
        }
        for case, kind in cases.items():
            self.assertEqual([kind], kinds(case), case)

        # keywords only match exactly
        should_be_variables = ["iff", "thenx", "elsewhere", "funcs", "applied", "i", "fun"]
        for case in should_be_variables:
            self.assertEqual([Token(TokenKind.VARIABLE, case)], lex(case), case)

    def test_operators(self):
        cases = {
            "+": BinaryOperator.ADD,
            "-": BinaryOperator.SUBTRACT,
            "*": BinaryOperator.MULTIPLY,
            "/": BinaryOperator.DIVIDE,
            "<": BinaryOperator.LESS_THAN,
            "=": BinaryOperator.EQUALS,
            "&": BinaryOperator.AND,
            "|": BinaryOperator.OR,
        }
        for case, op in cases.items():
            self.assertEqual([Token(TokenKind.BINARY_OP, op)], lex(case), case)

        self.assertEqual([Token(TokenKind.UNARY_OP, UnaryOperator.NOT)], lex("!"))

    def test_arrow_lookahead(self):
        self.assertEqual([TokenKind.ARROW], kinds("=>"))
        self.assertEqual([TokenKind.BINARY_OP, TokenKind.OPEN_PAREN], kinds("=("))
        self.assertEqual([TokenKind.BINARY_OP, TokenKind.INTEGER], kinds("= 1"))

        # ">" only exists as part of "=>"
        with self.assertRaises(UnexpectedCharacter) as context:
            lex("= >")
        self.assertEqual((">", 2), (context.exception.char, context.exception.start))

        # a lone trailing "=" is the equals operator
        self.assertEqual([Token(TokenKind.BINARY_OP, BinaryOperator.EQUALS)], lex("="))
        self.assertEqual([TokenKind.INTEGER, TokenKind.BINARY_OP], kinds("1 ="))

    def test_booleans_before_identifiers(self):
        self.assertEqual([TokenKind.BOOLEAN, TokenKind.VARIABLE], kinds("Tx"))
        self.assertEqual([TokenKind.VARIABLE, TokenKind.BOOLEAN], kinds("xF"))
        self.assertEqual([TokenKind.BOOLEAN, TokenKind.BOOLEAN], kinds("TF"))

    def test_runs(self):
        self.assertEqual([Token(TokenKind.INTEGER, 12), Token(TokenKind.VARIABLE, "ab")], lex("12ab"))
        self.assertEqual([Token(TokenKind.VARIABLE, "ab"), Token(TokenKind.INTEGER, 12)], lex("ab12"))

    def test_whitespace(self):
        cases = ["+(1,1)", "+( 1 , 1 )", "\t+(1,\t1)", "+(1,\n1)\r\n", "  +(1, 1)  "]
        expected = kinds("+(1, 1)")
        for case in cases:
            self.assertEqual(expected, kinds(case), repr(case))

        self.assertEqual([], lex(""))
        self.assertEqual([], lex(" \t\n"))

    def test_program(self):
        expected = [
            Token(TokenKind.APPLY, "apply"),
            Token(TokenKind.OPEN_PAREN, "("),
            Token(TokenKind.FUNC, "func"),
            Token(TokenKind.VARIABLE, "x"),
            Token(TokenKind.ARROW, "=>"),
            Token(TokenKind.BINARY_OP, BinaryOperator.ADD),
            Token(TokenKind.OPEN_PAREN, "("),
            Token(TokenKind.VARIABLE, "x"),
            Token(TokenKind.COMMA, ","),
            Token(TokenKind.INTEGER, 1),
            Token(TokenKind.CLOSE_PAREN, ")"),
            Token(TokenKind.COMMA, ","),
            Token(TokenKind.INTEGER, 41),
            Token(TokenKind.CLOSE_PAREN, ")"),
        ]
        self.assertEqual(expected, lex("apply(func x => +(x, 1), 41)"))

    def test_positions(self):
        tokens = lex("if x  then 10")
        self.assertEqual([(0, 2), (3, 4), (6, 10), (11, 13)], [(token.start, token.end) for token in tokens])
        self.assertEqual(["if", "x", "then", "10"], [str(token) for token in tokens])

    def test_unexpected_character(self):
        should_raise = {"X": 0, "+(1, 2)?": 7, "a_b": 1, "1.5": 1, "λx.x": 0, ";": 0, "G": 0}
        for case, pos in should_raise.items():
            with self.assertRaises(UnexpectedCharacter, msg=case) as context:
                lex(case)
            self.assertEqual(case[pos], context.exception.char, case)
            self.assertEqual(pos, context.exception.start, case)
            self.assertEqual(case, context.exception.expr, case)
            self.assertIsInstance(context.exception, LexError)

    def test_integer_out_of_range(self):
        with self.assertRaises(IntegerOutOfRange) as context:
            lex("+(9223372036854775808, 1)")
        self.assertEqual("9223372036854775808", context.exception.literal)
        self.assertEqual((2, 21), (context.exception.start, context.exception.end))

        should_raise = ["9" * 5000, "10000000000000000000", "0" + "9" * 19]
        for case in should_raise:
            self.assertRaises(IntegerOutOfRange, lex, case)

        should_pass = {"0000000000000000000009223372036854775807": 2 ** 63 - 1, "000": 0}
        for case, expected in should_pass.items():
            self.assertEqual([Token(TokenKind.INTEGER, expected)], lex(case), case)


if __name__ == '__main__':
    unittest.main()
