"""Session control for the minilambda language. Runs source lines through the lexer, parser and evaluator, either in
command-line mode or file interpretation mode.

A file is a sequence of expressions, one per line. Blank lines are skipped and ";;" starts a comment that runs to the
end of the line:

```
;; doubling
apply(func x => *(x, 2), 21)  ;; 42
```
"""

from minilambda.lang.error import GenericException
from minilambda.pure.evaluation import Evaluator
from minilambda.pure.lexical import lex
from minilambda.pure.syntax import parse


class Session:
    """Governs a minilambda session. Every line is evaluated on its own, starting from an empty environment."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path, cmd_line, tree=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.tree = tree          # whether or not to display parsed trees with results

        self.evaluator = Evaluator(error_handler)
        self.to_exec = {}  # dict of line num: (line, Expression) to evaluate
        self.results = []  # list of (Expression, Value), in evaluation order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    lines = file.read().splitlines()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for line_num, line in enumerate(lines):
                self.add(line, line_num + 1)

        elif not cmd_line:
            raise GenericException("'{}' is a reserved filename", Session.SH_FILE, diagnosis=False)

    @staticmethod
    def preprocess_line(line):
        """Strips comments and surrounding whitespace from line."""
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments
        return line.strip()

    def add(self, line, line_num):
        """Parses line and queues it for evaluation. Evaluation is delayed until run is called. Returns the parsed
        Expression, or None if line was blank.
        """
        line = Session.preprocess_line(line)
        if not line:
            return None

        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised
        expr = parse(lex(line), line)
        self.to_exec[line_num] = (line, expr)
        self.error_handler.remove_line(self.path)  # error was not raised

        return expr

    def run(self):
        """Evaluates this session's queued expressions in order. Will raise any errors that are encountered."""
        for line_num, (line, expr) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, line, line_num)

            try:
                value = self.evaluator.evaluate(expr)
            finally:
                del self.to_exec[line_num]

            self.results.append((expr, value))
            self.error_handler.remove_line(self.path)

    def render(self, expr, value):
        """Returns the printed form of one result."""
        rendered = f"Problem: {expr}\nAnswer: {value}"
        if self.tree:
            rendered = expr.display() + "\n" + rendered
        return rendered

    def pop(self):
        """Removes the latest result and returns its printed form."""
        return self.render(*self.results.pop())
