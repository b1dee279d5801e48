"""
entmoot

Copyright (C) 2026 the entmoot authors

This library is free software; you can redistribute it and/or modify
it under the terms of the GNU Lesser General Public License as
published by the Free Software Foundation; either version 2 of the
License, or (at your option) any later version.

This library is distributed in the hope that it will be useful, but
WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
Lesser General Public License for more details.

You should have received a copy of the GNU Lesser General Public
License along with this library; if not, write to the Free Software
Foundation, Inc.  51 Franklin St, Fifth Floor, Boston, MA 02110-1301
USA
"""

"""
Evaluation of expressions to constants, and the arithmetic of dice.

evaluate(expression, env, group) reduces an expression to a Constant, where
env maps variable names to constants, and group is the list of variable
mappings over which aggregate calls are computed (by default, [env]).
Evaluation is pure : sampling a roll is done by sample(), with the random
generator of the interpreter.
"""

from fractions import Fraction
import math

from . import Aggregate
from . import util
from .model import (Boolean, BinaryOperation, Comparison, Constant, FunctionCall,
                    Number, Roll, Variable)


def evaluate(expression, env, group=None):
    if isinstance(expression, Constant):
        return expression
    if isinstance(expression, Variable):
        if expression.is_wildcard() or expression.name not in env:
            raise util.UnboundVariableError("variable %s missing from binding" % expression)
        return env[expression.name]
    if isinstance(expression, BinaryOperation):
        left = evaluate(expression.left, env, group)
        if not isinstance(left, Number):
            raise util.OperandTypeError("binary operation requires number on left-hand side, got %s : %s"
                                        % (left.kind, expression))
        right = evaluate(expression.right, env, group)
        if not isinstance(right, Number):
            raise util.OperandTypeError("binary operation requires number on right-hand side, got %s : %s"
                                        % (right.kind, expression))
        return Number(arithmetic(left.value, expression.operator, right.value))
    if isinstance(expression, Comparison):
        return Boolean(compare(evaluate(expression.left, env, group), expression.operator,
                               evaluate(expression.right, env, group)))
    if isinstance(expression, FunctionCall):
        return evaluate_function(expression, env, group)
    raise util.UsageError("unhandled expression type %s : %s"
                          % (expression.__class__.__name__, expression))


def evaluate_function(call, env, group=None):
    name = call.name
    if call.is_aggregate():
        return Aggregate.make_for(call).compute([env] if group is None else group, evaluate)
    if len(call.arguments) != 1:
        raise util.UsageError("%s requires a single argument : %s" % (call.function, call))
    if name in ('floor', 'ceil'):
        arg = evaluate(call.arguments[0], env, group)
        if not isinstance(arg, Number):
            raise util.OperandTypeError("%s requires numeric argument, got %s" % (call.function, arg.kind))
        if not math.isfinite(arg.value):
            return arg
        return Number(math.floor(arg.value) if name == 'floor' else math.ceil(arg.value))
    if name == 'pr':
        arg = call.arguments[0]
        if isinstance(arg, Comparison):
            roll = evaluate(arg.left, env, group)
            target = evaluate(arg.right, env, group)
            if not isinstance(roll, Roll) or not isinstance(target, Number):
                raise util.OperandTypeError("can't compute probability for %s" % arg)
            return Number(probability(roll, arg.operator, target.value))
        roll = evaluate(arg, env, group)
        if not isinstance(roll, Roll):
            raise util.OperandTypeError("first argument to probability function must be a roll, got %s"
                                        % roll.kind)
        return roll
    raise util.UsageError("can't handle function %s" % call.function)


# ARITHMETIC   ##################################################

def arithmetic(l, op, r):
    """ IEEE double arithmetic : no exception for a division by zero or an overflow """
    if op == '+':
        return l + r
    if op == '-':
        return l - r
    if op == '*':
        return l * r
    if op == '/':
        return divide(l, r)
    if op == '^':
        return power(l, r)
    raise util.UsageError("Unknown operator : %s" % op)

def divide(l, r):
    if r == 0:
        if l == 0 or math.isnan(l):
            return math.nan
        return math.copysign(math.inf, l) * math.copysign(1.0, r)
    return l / r

def power(l, r):
    try:
        return math.pow(l, r)
    except OverflowError:
        odd = r.is_integer() and int(r) % 2 == 1
        return math.copysign(math.inf, l) if odd else math.inf
    except ValueError: # 0 ^ negative, or negative ^ fraction
        return math.inf if l == 0 else math.nan


# COMPARISON   ##################################################

def comparable(constant):
    """ rolls are compared by their expected value """
    return Number(expected_value(constant)) if isinstance(constant, Roll) else constant

def compare(left, op, right):
    left, right = comparable(left), comparable(right)
    if op == '=':
        return left == right
    if op == '!=':
        return left != right
    if left.kind != right.kind or left.kind not in ('number', 'string'):
        raise util.OperandTypeError("can't compare %s and %s with %s" % (left.kind, right.kind, op))
    return compare_values(left.value, op, right.value)

# generic comparison function
def compare_values(l, op, r):
    return l == r if op == '=' else l != r if op == '!=' else l < r if op == '<' \
        else l <= r if op == '<=' else l >= r if op == '>=' else l > r if op == '>' else None


# DICE   ##################################################

def expected_value(roll):
    """ floor(die/2) + 1 + modifier, for each die. 2d6 is 8 """
    return roll.count * (roll.die // 2 + 1 + roll.modifier)

def distribution(roll):
    """ returns {total: number of ways}, enumerating the faces of every die """
    if roll.die < 1:
        raise util.OperandTypeError("can't roll a die without faces : %s" % roll)
    ways = {0: 1}
    for _ in range(roll.count):
        step = {}
        for total, n in ways.items():
            for face in range(1, roll.die + 1):
                t = total + face + roll.modifier
                step[t] = step.get(t, 0) + n
        ways = step
    return ways

def probability(roll, op, target):
    """ exact probability that the total of roll compares to target """
    ways = distribution(roll)
    positive = sum(n for total, n in ways.items() if compare_values(total, op, target))
    return float(Fraction(positive, sum(ways.values())))

def sample(roll, rng):
    """ returns a Number drawn from rng, a random.Random """
    total = 0
    for _ in range(roll.count):
        total += math.floor(rng.random() * roll.die) + 1 + roll.modifier
    return Number(total)
