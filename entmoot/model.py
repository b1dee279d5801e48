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
Abstract syntax of Entish statements, as produced by a parser.

The engine never parses text : statements are built by a parser (an external
collaborator) or directly in python, using the operators defined on
Expression and Clause, e.g.
    make_fact('load', Variable('c'), FunctionCall('sum', [Variable('w')]))
    make_fact('wearing', c, g) & make_fact('weight', g, w)
    Variable('x') + 1

Classes hierarchy contained in this file:
* Expression : base class for objects that can be evaluated to a Constant
    * Constant
        * String, Number, Boolean, Roll
    * Variable
    * BinaryOperation : made of an operator and 2 operands
    * FunctionCall : floor, ceil, Pr, and the aggregates sum, count, min, max
    * Comparison : also a Clause
* Clause : base class for the boolean-valued patterns
    * Fact : a fact pattern, or a grounded fact when all its fields are constants
    * Junction
        * Conjunction, Disjunction, ExclusiveDisjunction
    * Comparison
* Statements : Comment, Fact, Inference, Claim, Query, Rolling, Verify, FunctionCall

str() of every node gives its canonical text. It is used as a key to compare
inferences, and in error messages.
"""

import math
import numbers
import re

from . import util

WILDCARD = '?'
AGGREGATES = ('sum', 'count', 'min', 'max')


#       EXPRESSIONS          #####################################

def expression_of(value):
    """ factory that converts a python value to an Expression """
    if isinstance(value, Expression):
        return value
    if isinstance(value, bool): # before numbers, as bool is an int
        return Boolean(value)
    if isinstance(value, numbers.Number):
        return Number(value)
    if isinstance(value, str):
        return String(value)
    raise util.UsageError("Cannot use %r in an expression" % (value,))


class Expression(object):
    """ base class for objects that can be part of an operation, a function call or a comparison """
    __slots__ = ()

    def variables(self):
        """ names of the variables in the expression, in order of first appearance """
        return []

    def has_aggregate(self):
        return False

    # handlers of arithmetic operations
    def __add__(self, other):
        return BinaryOperation('+', self, other)
    def __sub__(self, other):
        return BinaryOperation('-', self, other)
    def __mul__(self, other):
        return BinaryOperation('*', self, other)
    def __truediv__(self, other):
        return BinaryOperation('/', self, other)
    def __pow__(self, other):
        return BinaryOperation('^', self, other)
    def __neg__(self):
        """ called when evaluating -X """
        return 0 - self

    # called by constant + Expression
    def __radd__(self, other):
        return BinaryOperation('+', other, self)
    def __rsub__(self, other):
        return BinaryOperation('-', other, self)
    def __rmul__(self, other):
        return BinaryOperation('*', other, self)
    def __rtruediv__(self, other):
        return BinaryOperation('/', other, self)
    def __rpow__(self, other):
        return BinaryOperation('^', other, self)


class Constant(Expression):
    """ a grounded value. Two constants are equal if they have the same key """
    __slots__ = ()
    kind = None

    @property
    def key(self):
        return (self.kind, self.value)

    def __eq__(self, other):
        return isinstance(other, Constant) and self.key == other.key
    def __ne__(self, other):
        return not self.__eq__(other)
    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__, self)


class String(Constant):
    __slots__ = ['value']
    kind = 'string'

    def __init__(self, value):
        self.value = value

    def __str__(self):
        return self.value


class Number(Constant):
    """ a double-precision number """
    __slots__ = ['value']
    kind = 'number'

    def __init__(self, value):
        self.value = float(value)

    def __str__(self):
        v = self.value
        if math.isnan(v):
            return 'NaN'
        if math.isinf(v):
            return 'Infinity' if 0 < v else '-Infinity'
        if v.is_integer():
            return str(int(v))
        return repr(v)


class Boolean(Constant):
    __slots__ = ['value']
    kind = 'boolean'

    def __init__(self, value):
        self.value = bool(value)

    def __str__(self):
        return 'true' if self.value else 'false'


class Roll(Constant):
    """ a roll of count dice with die faces each, e.g. 2d6+1.
        The modifier is added to each die """
    __slots__ = ['count', 'die', 'modifier']
    kind = 'roll'

    def __init__(self, count, die, modifier=0):
        self.count = int(count)
        self.die = int(die)
        self.modifier = int(modifier)

    @property
    def key(self):
        return (self.kind, str(self))

    def __str__(self):
        if 0 < self.modifier:
            mod = '+%d' % self.modifier
        elif self.modifier < 0:
            mod = '-%d' % -self.modifier
        else:
            mod = ''
        return '%dd%d%s' % (self.count, self.die, mod)


DICE = re.compile(r'^\s*(\d*)\s*d\s*(\d+)\s*(?:([+-])\s*(\d+))?\s*$')

def make_roll(notation):
    """ returns the Roll for a dice notation such as 'd20', '2d6' or '3d4-1' """
    match = DICE.match(notation)
    if not match:
        raise util.UsageError("Invalid dice notation : %s" % notation)
    count, die, sign, modifier = match.groups()
    modifier = int(modifier or 0)
    return Roll(int(count or 1), int(die), -modifier if sign == '-' else modifier)


TRUE = Boolean(True)
FALSE = Boolean(False)


class Variable(Expression):
    """ A variable in a clause. '?' is a wildcard that is never bound """
    __slots__ = ['name']

    def __init__(self, name):
        self.name = name

    def is_wildcard(self):
        return self.name == WILDCARD

    def variables(self):
        return [] if self.is_wildcard() else [self.name]

    def __eq__(self, other):
        return isinstance(other, Variable) and self.name == other.name
    def __ne__(self, other):
        return not self.__eq__(other)
    def __hash__(self):
        return hash(('variable', self.name))

    def __str__(self):
        return self.name
    def __repr__(self):
        return "Variable(%s)" % self.name


def _merge_variables(*expressions):
    result = []
    for expression in expressions:
        for name in expression.variables():
            if name not in result:
                result.append(name)
    return result


class BinaryOperation(Expression):
    """ an arithmetic operation : + - * / ^ """
    __slots__ = ['operator', 'left', 'right']
    OPERATORS = ('+', '-', '*', '/', '^')
    PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2, '^': 3}

    def __init__(self, operator, left, right):
        if operator not in self.OPERATORS:
            raise util.UsageError("Unknown operator : %s" % operator)
        self.operator = operator
        self.left = expression_of(left)
        self.right = expression_of(right)

    def variables(self):
        return _merge_variables(self.left, self.right)

    def has_aggregate(self):
        return self.left.has_aggregate() or self.right.has_aggregate()

    def _operand(self, operand, right_hand):
        """ renders an operand, with parenthesis if precedence requires it """
        text = str(operand)
        if not isinstance(operand, BinaryOperation):
            return text
        mine = self.PRECEDENCE[self.operator]
        its = self.PRECEDENCE[operand.operator]
        # ^ is right-associative, the others are left-associative
        if its < mine or (its == mine and right_hand != (self.operator == '^')):
            return '(%s)' % text
        return text

    def __str__(self):
        return "%s %s %s" % (self._operand(self.left, False), self.operator,
                             self._operand(self.right, True))


class FunctionCall(Expression):
    """ a call to floor, ceil, Pr, or to an aggregate function.
        Function names are not case sensitive : Floor is floor """
    __slots__ = ['function', 'arguments']

    def __init__(self, function, arguments):
        self.function = function
        self.arguments = [expression_of(argument) for argument in arguments]

    @property
    def name(self):
        return self.function.lower()

    def is_aggregate(self):
        return self.name in AGGREGATES

    def variables(self):
        return _merge_variables(*self.arguments)

    def has_aggregate(self):
        return self.is_aggregate() or any(a.has_aggregate() for a in self.arguments)

    def __str__(self):
        return "%s(%s)" % (self.function, ', '.join(str(a) for a in self.arguments))


def outer_variables(expression):
    """ names of the variables of expression that do not appear in an aggregate call """
    if isinstance(expression, FunctionCall) and expression.is_aggregate():
        return []
    if isinstance(expression, BinaryOperation):
        children = (expression.left, expression.right)
    elif isinstance(expression, Comparison):
        children = (expression.left, expression.right)
    elif isinstance(expression, FunctionCall):
        children = expression.arguments
    else:
        return expression.variables()
    result = []
    for child in children:
        for name in outer_variables(child):
            if name not in result:
                result.append(name)
    return result


#       CLAUSES          #####################################

class Clause(object):
    """ base class for boolean-valued patterns, used as rule bodies, claims and queries """
    __slots__ = ()

    def variables(self):
        return []

    def __and__(self, other):
        return Conjunction._of(self, other)
    def __or__(self, other):
        return Disjunction._of(self, other)
    def __xor__(self, other):
        # not flattened : exactly one of (a ^ b) and c is not exactly one of a, b, c
        return ExclusiveDisjunction([self, other])


class Fact(Clause):
    """ A table name and a list of fields.
        A stored fact has constant fields only. A pattern may have variables.
        A negative fact retracts, or denies, the tuple """

    def __init__(self, table, fields, negative=False):
        self.table = table
        self.fields = [expression_of(field) for field in fields]
        self.negative = negative

    @util.lazy_property
    def id(self):
        """ two grounded facts are structurally equal if they have the same id """
        return (self.table,) + tuple(f.key if isinstance(f, Constant) else str(f)
                                     for f in self.fields)

    def is_grounded(self):
        return all(isinstance(field, Constant) for field in self.fields)

    def variables(self):
        return _merge_variables(*self.fields)

    def has_aggregate(self):
        return any(field.has_aggregate() for field in self.fields)

    def positive(self):
        return self if not self.negative else Fact(self.table, self.fields)

    def __invert__(self):
        """ called when evaluating ~p(X) """
        return Fact(self.table, self.fields, not self.negative)

    def __eq__(self, other):
        return isinstance(other, Fact) and self.negative == other.negative \
            and self.id == other.id
    def __ne__(self, other):
        return not self.__eq__(other)
    def __hash__(self):
        return hash((self.negative, self.id))

    def __str__(self):
        return "%s%s(%s)" % ('~' if self.negative else '', self.table,
                             ', '.join(str(f) for f in self.fields))
    def __repr__(self):
        return "Fact(%s)" % self


def make_fact(table, *fields):
    """ convenience factory : make_fact('parent', 'Bin', 'Paula') """
    return Fact(table, fields)


class Junction(Clause):
    """ base class for conjunction, disjunction and exclusive disjunction """
    __slots__ = ['clauses']
    operator = None

    def __init__(self, clauses):
        self.clauses = list(clauses)

    @classmethod
    def _of(cls, left, right):
        """ flattens a & b & c in one junction """
        clauses = left.clauses[:] if type(left) is cls else [left]
        clauses.extend(right.clauses if type(right) is cls else [right])
        return cls(clauses)

    def variables(self):
        return _merge_variables(*self.clauses)

    def __str__(self):
        return "(%s)" % (' %s ' % self.operator).join(str(c) for c in self.clauses)
    def __repr__(self):
        return "%s%s" % (self.__class__.__name__, self)


class Conjunction(Junction):
    __slots__ = ()
    operator = '&'


class Disjunction(Junction):
    __slots__ = ()
    operator = '|'


class ExclusiveDisjunction(Junction):
    __slots__ = ()
    operator = '^'


class Comparison(Expression, Clause):
    """ left operator right, where operator is one of = != > >= < <= """
    __slots__ = ['operator', 'left', 'right']
    OPERATORS = ('=', '!=', '>', '>=', '<', '<=')

    def __init__(self, operator, left, right):
        if operator not in self.OPERATORS:
            raise util.UsageError("Unknown comparison operator : %s" % operator)
        self.operator = operator
        self.left = expression_of(left)
        self.right = expression_of(right)

    def variables(self):
        return _merge_variables(self.left, self.right)

    def has_aggregate(self):
        return self.left.has_aggregate() or self.right.has_aggregate()

    def __str__(self):
        return "%s %s %s" % (self.left, self.operator, self.right)
    def __repr__(self):
        return "Comparison(%s)" % self


#       STATEMENTS          #####################################

class Comment(object):
    def __init__(self, value):
        self.value = value

    def __str__(self):
        return "// %s" % self.value


class Inference(object):
    """ head :- body.
        The head is a fact pattern; if it is negative, the inferred tuples are retracted """

    def __init__(self, head, body):
        self.head = head
        self.body = body

    @util.lazy_property
    def id(self):
        return str(self)

    def __str__(self):
        return "%s :- %s." % (self.head, self.body)
    def __repr__(self):
        return "Inference(%s)" % self


class Claim(object):
    """ ergo clause. : a clause checked for truth against the database """
    def __init__(self, clause):
        self.clause = clause

    def __str__(self):
        return "ergo %s." % self.clause


class Query(object):
    def __init__(self, clause):
        self.clause = clause

    def __str__(self):
        return "? %s." % self.clause


class Rolling(object):
    """ roll clause. : samples the rolls in the facts matching clause """
    def __init__(self, clause):
        self.clause = clause

    def __str__(self):
        return "roll %s." % self.clause


class Verify(object):
    """ verify. : checks again all the claims made so far """
    def __str__(self):
        return "verify."
