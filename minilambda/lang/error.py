"""Error handling for the minilambda language. Only GenericExceptions should be encountered during running: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

GenericExceptions are grouped by the phase that raises them:

```
GenericException
├── LexError         UnexpectedCharacter, IntegerOutOfRange
├── ParseError       UnexpectedEndOfInput, ExpectedExpression, ExpectedToken
└── EvalError        UnboundVariable, TypeMismatch, DivisionByZero, NotCallable
```
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a minilambda error/warning.

    msg is a format string whose fields are filled with args (bolded when displayed). source is the line the error
    originated from and [start, end) is the span of source to highlight.
    """

    def __init__(self, msg, args=(), source="", start=0, end=-1, diagnosis=True, internal=False):
        if isinstance(args, str):
            args = [args]

        self.plain = msg.format(*args)
        self.msg = msg.format(*(colored(str(arg), attrs=["bold"]) for arg in args))  # color expr snippets
        super().__init__(self.plain)

        self.expr = source
        self.start = start
        self._end = end
        self.diagnosis = diagnosis
        self.internal = internal

    @property
    def end(self):
        """End of the highlighted span. Defaults to the end of the source line."""
        return self._end if self._end != -1 else len(self.expr)

    def locate(self, source):
        """Attaches source to this error if it was raised without one. Returns self."""
        if not self.expr:
            self.expr = source
        return self

    def __str__(self):
        return self.plain


class LexError(GenericException):
    """Raised by the lexer."""


class UnexpectedCharacter(LexError):

    def __init__(self, char, source="", pos=0):
        super().__init__("unexpected character '{}'", char, source, start=pos, end=pos + 1)
        self.char = char


class IntegerOutOfRange(LexError):

    def __init__(self, literal, source="", pos=0):
        super().__init__("integer literal '{}' does not fit in 64 bits", literal, source, pos, pos + len(literal))
        self.literal = literal


class ParseError(GenericException):
    """Raised by the parser."""


class UnexpectedEndOfInput(ParseError):

    def __init__(self, source="", pos=0):
        super().__init__("unexpected end of input", source=source, start=pos, end=pos + 1)


class ExpectedExpression(ParseError):

    def __init__(self, found, source="", start=0, end=-1):
        super().__init__("expected expression, found '{}'", found, source, start, end)
        self.found = found


class ExpectedToken(ParseError):

    def __init__(self, expected, found, source="", start=0, end=-1):
        super().__init__("expected {}, found {}", (expected, found), source, start, end)
        self.expected = expected
        self.found = found


class EvalError(GenericException):
    """Raised by the evaluator. span is the (start, end) of the offending expression, if known."""

    def __init__(self, msg, args=(), span=None):
        start, end = span if span else (0, -1)
        super().__init__(msg, args, start=start, end=end, diagnosis=span is not None)


class UnboundVariable(EvalError):

    def __init__(self, name, span=None):
        super().__init__("unbound variable '{}'", name, span)
        self.name = name


class TypeMismatch(EvalError):

    def __init__(self, construct, description, span=None):
        super().__init__("type mismatch in '{}': {}", (construct, description), span)
        self.construct = construct
        self.description = description


class DivisionByZero(EvalError):

    def __init__(self, span=None):
        super().__init__("division by zero", span=span)


class NotCallable(EvalError):

    def __init__(self, description, span=None):
        super().__init__("'{}' is not callable", description, span)
        self.description = description


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom minilambda errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    STEP = "cyan"

    def __init__(self, fatal=True, verbose=False):
        self.fatal = fatal
        self.verbose = verbose
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def register_step(self, label, expr):
        """Prints an evaluation step if in verbose mode."""
        if self.verbose:
            print(colored(f"  {label} ", ErrorHandler.STEP, attrs=["bold"]) + expr)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded, with a caret line underneath."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self):
        """Returns 'file:line: ' for the innermost registered line, or an empty string."""
        for file, (line, line_num) in reversed(self.traceback.items()):
            if line is not None:
                return f"{file}:{line_num}: "
        return ""

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = colored(self._location(), attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error, fatal=None):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        if fatal is None:
            fatal = self.fatal

        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # dicts are insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                error.locate(line)
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # if error occurred, reset traceback

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            # stack exhaustion is unrecoverable, even in the shell
            self.throw(GenericException("maximum recursion depth exceeded", internal=True), fatal=True)
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            error = GenericException("unknown error: '{}: {}'", (exc_type.__name__, exc_val), internal=True)
            self.throw(error, fatal=True)

        return not do_exit
