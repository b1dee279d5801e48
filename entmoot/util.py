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
Errors raised by the engine, and small helpers shared by its modules.

EntmootError
    * GroundingError : a fact to assert or retract contains a non-constant field
    * OperandTypeError : an operator or function received the wrong kind of operand
    * UnboundVariableError : evaluation references a variable absent from the binding
    * UsageError : an operation was applied to a kind of node it does not support
    * UnverifiedClaimError : a claim was false in strict mode
"""


class EntmootError(Exception):
    """ base class of the errors raised by the engine.
        lineno and source are left empty by the engine; a loader may fill them in """
    def __init__(self, value, lineno=None, source=None):
        Exception.__init__(self, value)
        self.value = value
        self.lineno = lineno
        self.source = source

    def __str__(self):
        if self.lineno is None and self.source is None:
            return str(self.value)
        return "%s\nin line %s of %s" % (self.value, self.lineno, self.source)


class GroundingError(EntmootError):
    pass


class OperandTypeError(EntmootError, TypeError):
    pass


class UnboundVariableError(EntmootError):
    pass


class UsageError(EntmootError):
    pass


class UnverifiedClaimError(EntmootError):
    def __init__(self, value, clause=None, lineno=None, source=None):
        EntmootError.__init__(self, value, lineno, source)
        self.clause = clause


class lazy_property(object):
    '''
    meant to be used for lazy evaluation of an object attribute.
    property should represent non-mutable data, as it replaces itself.
    '''

    def __init__(self, fget):
        self.fget = fget
        self.func_name = fget.__name__

    def __get__(self, obj, cls):
        if obj is None:
            return None
        value = self.fget(obj)
        setattr(obj, self.func_name, value)
        return value


def unique(items, key=id):
    """ returns the items in order, without the ones whose key was seen already """
    seen, result = set(), []
    for item in items:
        k = key(item)
        if k not in seen:
            seen.add(k)
            result.append(item)
    return result
