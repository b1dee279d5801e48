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

from collections import OrderedDict
import logging

from . import util
from .model import Constant, Variable

Logger = logging.getLogger(__name__)


# DATABASE  #####################################################

# The database stores tables that contain grounded facts, keyed by fact id.
# The id's encoding ensures that two facts are structurally equal if they
# have the same id, so that a table never holds the same tuple twice.

class FactStore(object):
    """ mapping from table name to an ordered, duplicate-free set of grounded facts """

    def __init__(self):
        self.db = OrderedDict()

    def _grounded(self, fact, action):
        if not fact.is_grounded():
            raise util.GroundingError("Cannot %s a fact containing variables or expressions, "
                                      "facts must be grounded : %s" % (action, fact))
        return fact.positive()

    def insert(self, fact):
        """ Add a grounded fact. Returns [fact] if it is new, [] otherwise """
        fact = self._grounded(fact, 'assert')
        table = self.db.setdefault(fact.table, OrderedDict())
        if fact.id in table:
            return []
        table[fact.id] = fact
        return [fact]

    def replace(self, fact, key_positions):
        """ Add a grounded fact, removing first the facts of its table that
            have the same fields at key_positions, i.e. the previous value of a function.
            Returns [fact] if it is new, [] otherwise """
        fact = self._grounded(fact, 'assert')
        table = self.db.get(fact.table, {})
        if fact.id in table:
            return []
        key = [fact.fields[i] for i in key_positions]
        for id_, stored in list(table.items()):
            if len(stored.fields) == len(fact.fields) \
            and [stored.fields[i] for i in key_positions] == key:
                Logger.debug("%s replaces %s", fact, stored)
                del table[id_]
        return self.insert(fact)

    def retract(self, fact):
        """ retract a grounded fact from the database. Returns the removed facts """
        fact = self._grounded(fact, 'retract')
        table = self.db.get(fact.table)
        if table is None or fact.id not in table:
            return []
        return [table.pop(fact.id)]

    def scan(self, table):
        """ returns the facts of table, in insertion order """
        return list(self.db.get(table, {}).values())

    def contains(self, fact):
        return fact.positive().id in self.db.get(fact.table, {})

    @property
    def tables(self):
        return OrderedDict((name, list(table.values())) for name, table in self.db.items())

    def __len__(self):
        return sum(len(table) for table in self.db.values())


def matches(pattern, fact, env=None):
    """ Does a pattern unify with a fact known to contain only constant terms?
        Returns the extended variable mapping, or None.
        The pattern matches the first fields of the fact : carrying(c, g) matches
        carrying(Auric, DungeonRations, 5), but a pattern longer than the fact does not match """
    if len(fact.fields) < len(pattern.fields):
        return None
    env = OrderedDict() if env is None else OrderedDict(env)
    for field, value in zip(pattern.fields, fact.fields):
        if isinstance(field, Constant):
            if field != value:
                return None
        elif not isinstance(field, Variable):
            raise util.UsageError("Fact patterns can only contain constants and variables : %s" % pattern)
        elif field.is_wildcard():
            continue
        elif field.name in env:
            if env[field.name] != value:
                return None
        else:
            env[field.name] = value
    return env
