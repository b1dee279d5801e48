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
* Aggregate : represents calls to aggregation functions, e.g. sum(w)
    * Sum
    * Count
    * Min
    * Max
"""
##################################### Aggregation #####################################

from . import util
from .model import Number, Roll, String


class Aggregate(object):
    """
    represents a generic aggregation_function(Y),
    e.g. 'sum(w)' in 'load(c, sum(w)) :- wearing(c, g) & weight(g, w).'
    The engine groups the bindings of the body, then calls compute() once per group.
    compute() calls reset(), add() for each binding of the group, and value.
    """

    def __init__(self, call):
        if len(call.arguments) != 1:
            raise util.UsageError("%s function requires a single argument : %s"
                                  % (call.function, call))
        self.call = call
        self.Y = call.arguments[0]

    def compute(self, group, evaluate):
        """ returns the aggregated constant for a group of variable mappings """
        self.reset()
        for env in group:
            self.add(evaluate(self.Y, env))
        return self.value

    def reset(self):
        """ by default, _value is 0 """
        self._value = 0

    @property
    def value(self):
        """ by default, value is _value, as a number """
        return Number(self._value)


class Sum(Aggregate):
    """ represents sum(Y). Rolls do not count in the sum """

    def add(self, constant):
        if isinstance(constant, Roll):
            return
        if not isinstance(constant, Number):
            raise util.OperandTypeError("%s got a non-numerical argument, %s = %s"
                                        % (self.call.function, self.Y, constant))
        self._value += constant.value


class Count(Aggregate):
    """ represents count(Y) : the number of bindings in the group """

    def add(self, constant):
        self._value += 1


class Min(Aggregate):
    """ represents min(Y), over numbers or over strings """

    def reset(self):
        self._value = None

    def better(self, candidate, current):
        return candidate.value < current.value

    def add(self, constant):
        if not isinstance(constant, (Number, String)):
            raise util.OperandTypeError("%s requires numbers or strings, got %s"
                                        % (self.call.function, constant.kind))
        if self._value is None:
            self._value = constant
        elif constant.kind != self._value.kind:
            raise util.OperandTypeError("%s cannot compare %s and %s"
                                        % (self.call.function, constant.kind, self._value.kind))
        elif self.better(constant, self._value):
            self._value = constant

    @property
    def value(self):
        return self._value


class Max(Min):
    """ represents max(Y) """

    def better(self, candidate, current):
        return current.value < candidate.value


Aggregates = {'sum': Sum, 'count': Count, 'min': Min, 'max': Max}

def make_for(call):
    """ factory that returns the Aggregate for a function call """
    return Aggregates[call.name](call)
