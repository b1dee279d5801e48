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
The binding search : computes, for a clause, the bindings of its variables
that satisfy it in a FactStore, and grounds the heads of inferences.

The search is a naive nested join :
* a fact pattern yields one binding per matching fact
* a conjunction joins the bindings of its clauses on their common variables
* a disjunction concatenates the bindings of its clauses
* an exclusive disjunction yields the bindings of its only satisfied clause
* a comparison, or a negated fact pattern, yields a binding with a pending guard,
  checked once its variables are bound by an enclosing conjunction
"""

from collections import OrderedDict
import itertools
import logging

from . import util
from .evaluator import evaluate
from .model import (Comparison, Conjunction, Disjunction, ExclusiveDisjunction,
                    Fact, Variable, outer_variables)
from .store import matches

Logging = False # True --> Logging is activated.  Kept for performance reason

Logger = logging.getLogger(__name__)


class Binding(object):
    """ A mapping of variable names to constants, the grounded facts that produced it,
        and the guards (comparisons and negated fact patterns) still to be checked """
    __slots__ = ['values', 'facts', 'guards']

    def __init__(self, values=None, facts=(), guards=()):
        self.values = OrderedDict() if values is None else values
        self.facts = list(facts)
        self.guards = list(guards)

    def merge(self, other):
        """ returns the join of two bindings, or None if they disagree on a variable """
        values = OrderedDict(self.values)
        for name, value in other.values.items():
            if name not in values:
                values[name] = value
            elif values[name] != value:
                if Logging and Logger.isEnabledFor(logging.DEBUG):
                    Logger.debug("bindings disagree: %s != %s" % (values[name], value))
                return None
        return Binding(values, util.unique(self.facts + other.facts, key=lambda f: f.id),
                       self.guards + other.guards)

    def __repr__(self):
        return "{%s}" % ', '.join("%s: %s" % item for item in self.values.items())


def search(store, clause):
    """ returns the list of bindings satisfying clause, with all guards resolved """
    if Logging and Logger.isEnabledFor(logging.DEBUG):
        Logger.debug("entmoot will search %s" % clause)
    return resolve(store, _search(store, clause), final=True)


def _search(store, clause):
    if isinstance(clause, Fact):
        if clause.negative:
            return [Binding(guards=[clause])]
        result = []
        for fact in store.scan(clause.table):
            env = matches(clause, fact)
            if env is not None:
                result.append(Binding(env, [fact]))
        return result
    if isinstance(clause, Conjunction):
        children = [_search(store, child) for child in clause.clauses]
        result = []
        for combination in itertools.product(*children):
            merged = Binding()
            for binding in combination:
                merged = merged.merge(binding)
                if merged is None:
                    break
            if merged is not None:
                result.append(merged)
        return resolve(store, result, final=False)
    if isinstance(clause, Disjunction):
        result = []
        for child in clause.clauses:
            result.extend(_search(store, child))
        return result
    if isinstance(clause, ExclusiveDisjunction):
        satisfied = []
        for child in clause.clauses:
            bindings = resolve(store, _search(store, child), final=False)
            if bindings:
                satisfied.append(bindings)
        return satisfied[0] if len(satisfied) == 1 else []
    if isinstance(clause, Comparison):
        return [Binding(guards=[clause])]
    raise util.UsageError("can't handle %s in clause : %s" % (clause.__class__.__name__, clause))


# GUARDS  #####################################################

def _bound(guard, values):
    return all(name in values for name in guard.variables())

def holds(store, guard, values, group=None):
    """ is the guard true for the variable mapping ? """
    if isinstance(guard, Comparison):
        return evaluate(guard, values, group).value
    # a negated fact pattern : unbound variables act as wildcards
    pattern = Fact(guard.table, [values.get(f.name, f) if isinstance(f, Variable) else f
                                 for f in guard.fields])
    return not any(matches(pattern, fact) is not None for fact in store.scan(guard.table))

def resolve(store, bindings, final):
    """ checks the guards whose variables are bound, and drops the bindings that fail them.
        Guards with unbound variables stay pending, unless final is True """
    result, aggregates = [], []
    for binding in bindings:
        pending, ok = [], True
        for guard in binding.guards:
            if isinstance(guard, Comparison) and guard.has_aggregate():
                pending.append(guard)
                if all(g is not guard for g in aggregates):
                    aggregates.append(guard)
            elif final or _bound(guard, binding.values):
                if not holds(store, guard, binding.values):
                    ok = False
                    break
            else:
                pending.append(guard)
        if ok:
            result.append(Binding(binding.values, binding.facts, pending))

    # comparisons with aggregates, e.g. count(x) = 2, are checked per group of bindings
    for guard in aggregates:
        carriers = [b for b in result if any(g is guard for g in b.guards)
                    and (final or _bound(guard, b.values))]
        rejected = set()
        for members in group_by(carriers, outer_variables(guard)):
            if not holds(store, guard, members[0].values, [m.values for m in members]):
                rejected.update(id(m) for m in members)
        for binding in carriers:
            binding.guards = [g for g in binding.guards if g is not guard]
        result = [b for b in result if id(b) not in rejected]
    return result


# INFERENCES  #####################################################

def group_by(bindings, names):
    """ returns the lists of bindings having the same values for names, in order of appearance """
    groups = OrderedDict()
    for binding in bindings:
        key = tuple(binding.values.get(name) for name in names)
        groups.setdefault(key, []).append(binding)
    return list(groups.values())

def key_positions(head):
    """ positions of the fields of head without aggregate """
    return [i for i, field in enumerate(head.fields) if not field.has_aggregate()]

def ground_head(head, bindings):
    """ returns the grounded facts of head, one per binding,
        or one per group of bindings if head has an aggregate """
    if not head.has_aggregate():
        return [Fact(head.table, [evaluate(field, b.values) for field in head.fields], head.negative)
                for b in bindings]
    names = []
    for field in head.fields:
        for name in outer_variables(field):
            if name not in names:
                names.append(name)
    result = []
    for members in group_by(bindings, names):
        env, group = members[0].values, [m.values for m in members]
        result.append(Fact(head.table, [evaluate(field, env, group) for field in head.fields],
                           head.negative))
    return result
