"""Eager, environment-based evaluation of minilambda syntax trees.

Evaluation is call-by-value: the operands of an operator and the argument of an application are always evaluated before
they are used. Only `if` short-circuits: the branch not selected by the condition is never evaluated. Functions are
closures that capture the environment at the point their `func` expression is evaluated, so free variables resolve
lexically:

```
apply(func y => apply(apply(func y => func x => y, 1), 2), 3)   ; 1, not 3
```

Integers behave like signed 64-bit machine integers: results wrap around and division truncates toward zero.

There is no protection against non-termination other than Python's recursion limit: a self-applying program ends in a
RecursionError, which is deliberately not a minilambda error (see lang/error.py).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from minilambda.lang.error import DivisionByZero, NotCallable, TypeMismatch, UnboundVariable
from minilambda.pure.lexical import BinaryOperator, UnaryOperator
from minilambda.pure.syntax import Apply, BinaryOp, Boolean, Expression, Func, If, Integer, UnaryOp, Variable


def wrap(num):
    """Wraps num into the signed 64-bit range."""
    return (num + 2 ** 63) % 2 ** 64 - 2 ** 63


def truncated_div(dividend, divisor):
    """Integer division rounding toward zero (Python's // rounds toward negative infinity)."""
    quotient = abs(dividend) // abs(divisor)
    return -quotient if (dividend < 0) != (divisor < 0) else quotient


class Environment:
    """Persistent mapping of variable names to Values, stored as a linked list of single-binding frames. Extending an
    environment never changes it, so closures can share their defining environment safely.
    """

    def __init__(self, _frame=None):
        self._frame = _frame  # (name, value, parent frame), or None if empty

    def extend(self, name, value):
        """Returns a new Environment with name bound to value, shadowing any outer binding of name."""
        return Environment((name, value, self._frame))

    def lookup(self, name):
        """Returns the innermost value bound to name. Raises KeyError if name is unbound."""
        frame = self._frame
        while frame is not None:
            bound, value, frame = frame
            if bound == name:
                return value
        raise KeyError(name)

    def names(self):
        """Visible names, innermost first."""
        names = []
        frame = self._frame
        while frame is not None:
            name, __, frame = frame
            if name not in names:
                names.append(name)
        return names

    def __contains__(self, name):
        try:
            self.lookup(name)
        except KeyError:
            return False
        return True

    def __len__(self):
        return len(self.names())

    def __repr__(self):
        bindings = ", ".join(f"{name}={self.lookup(name)}" for name in self.names())
        return f"Environment({bindings})"


class Value(ABC):
    """Superclass of evaluation results. TYPE names the value's type in error messages."""
    TYPE = "value"

    @abstractmethod
    def to_expression(self):
        """Returns the literal Expression equivalent to this value."""

    def __str__(self):
        return str(self.to_expression())


@dataclass(frozen=True)
class IntValue(Value):
    value: int

    TYPE = "integer"

    def to_expression(self):
        return Integer(self.value)


@dataclass(frozen=True)
class BoolValue(Value):
    value: bool

    TYPE = "boolean"

    def to_expression(self):
        return Boolean(self.value)


@dataclass(frozen=True)
class Closure(Value):
    """A func paired with the environment it was defined in. Closures compare by parameter and body only."""
    param: str
    body: Expression
    env: Environment = field(compare=False, repr=False)

    TYPE = "function"

    def to_expression(self):
        return Func(self.param, self.body)


class Evaluator:
    """Tree-walking evaluator. If error_handler is given, every function application is reported to it as a step."""

    ARITHMETIC = {
        BinaryOperator.ADD: lambda a, b: wrap(a + b),
        BinaryOperator.SUBTRACT: lambda a, b: wrap(a - b),
        BinaryOperator.MULTIPLY: lambda a, b: wrap(a * b),
        BinaryOperator.DIVIDE: lambda a, b: wrap(truncated_div(a, b)),
    }
    COMPARISON = {
        BinaryOperator.LESS_THAN: lambda a, b: a < b,
        BinaryOperator.EQUALS: lambda a, b: a == b,
    }
    LOGICAL = {
        BinaryOperator.AND: lambda a, b: a and b,
        BinaryOperator.OR: lambda a, b: a or b,
    }

    def __init__(self, error_handler=None):
        self.error_handler = error_handler
        self._rules = {
            Integer: self._integer,
            Boolean: self._boolean,
            Variable: self._variable,
            UnaryOp: self._unary_op,
            BinaryOp: self._binary_op,
            Func: self._func,
            If: self._if,
            Apply: self._apply,
        }

    def evaluate(self, expr, env=None):
        """Evaluates expr in env (empty if None) and returns a Value. Raises an EvalError on failure."""
        if env is None:
            env = Environment()
        return self._rules[type(expr)](expr, env)

    def _integer(self, expr, env):
        return IntValue(expr.value)

    def _boolean(self, expr, env):
        return BoolValue(expr.value)

    def _variable(self, expr, env):
        try:
            return env.lookup(expr.name)
        except KeyError:
            raise UnboundVariable(expr.name, expr.span) from None

    def _unary_op(self, expr, env):
        child = self.evaluate(expr.child, env)
        if expr.op is UnaryOperator.NOT:
            if not isinstance(child, BoolValue):
                raise TypeMismatch(str(expr.op), f"expected boolean operand, got {child.TYPE}", expr.span)
            return BoolValue(not child.value)
        raise TypeMismatch(str(expr.op), "unknown unary operator", expr.span)

    def _binary_op(self, expr, env):
        left = self.evaluate(expr.left, env)
        right = self.evaluate(expr.right, env)

        if expr.op in Evaluator.LOGICAL:
            self._check_operands(expr, BoolValue, left, right)
            return BoolValue(Evaluator.LOGICAL[expr.op](left.value, right.value))

        self._check_operands(expr, IntValue, left, right)
        if expr.op in Evaluator.COMPARISON:
            return BoolValue(Evaluator.COMPARISON[expr.op](left.value, right.value))

        if expr.op is BinaryOperator.DIVIDE and right.value == 0:
            raise DivisionByZero(expr.span)
        return IntValue(Evaluator.ARITHMETIC[expr.op](left.value, right.value))

    @staticmethod
    def _check_operands(expr, expected, left, right):
        """Raises TypeMismatch naming the first operand of expr that isn't an instance of expected."""
        for side, operand in (("left", left), ("right", right)):
            if not isinstance(operand, expected):
                msg = f"expected {expected.TYPE} {side} operand, got {operand.TYPE}"
                raise TypeMismatch(str(expr.op), msg, expr.span)

    def _func(self, expr, env):
        return Closure(expr.param, expr.body, env)

    def _if(self, expr, env):
        condition = self.evaluate(expr.condition, env)
        if not isinstance(condition, BoolValue):
            raise TypeMismatch("if", f"expected boolean condition, got {condition.TYPE}", expr.span)

        if condition.value:
            return self.evaluate(expr.then_branch, env)
        return self.evaluate(expr.else_branch, env)

    def _apply(self, expr, env):
        closure = self.evaluate(expr.func, env)
        if not isinstance(closure, Closure):
            raise NotCallable(f"{closure} ({closure.TYPE})", expr.span)

        arg = self.evaluate(expr.arg, env)
        if self.error_handler is not None:
            self.error_handler.register_step("β", f"{closure} ({arg})")

        return self.evaluate(closure.body, closure.env.extend(closure.param, arg))


def evaluate(expr, env=None):
    """Evaluates expr in env (empty if None) and returns its Value."""
    return Evaluator().evaluate(expr, env)
