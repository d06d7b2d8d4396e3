"""minilambda: interpreter for a tiny expression language of integers, booleans, prefix operators, conditionals and
single-argument closures.

Basic program flow:
    1. Lexer: turns a line of source into Tokens (see pure/lexical.py)
    2. Parser: builds an Expression tree by recursive descent over the tokens (see pure/syntax.py)
    3. Evaluator: walks the tree in an Environment and produces a Value (see pure/evaluation.py)

lang/ holds everything around the core: error reporting, sessions and the interactive shell.
"""

from minilambda.pure.evaluation import Environment, Evaluator, evaluate
from minilambda.pure.lexical import lex
from minilambda.pure.syntax import parse, parse_source

__all__ = ["Environment", "Evaluator", "evaluate", "lex", "parse", "parse_source"]
