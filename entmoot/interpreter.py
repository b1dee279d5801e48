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
methods exposed by the Interpreter class:
  * exec(statement) : executes a parsed statement, and returns its result
  * run(statements) : executes statements in order, and returns their results
  * assert_(fact) : adds a grounded fact, and applies the inferences
  * retract(fact) : removes a grounded fact
  * infer(inference) : registers an inference, and applies it
  * query(clause) : returns the facts matching clause
  * claim(clause) : checks that clause is true
  * roll(clause) : samples the rolls in the facts matching clause
  * evaluate(expression) : evaluates an expression without variables
  * verify() : checks again all the claims executed so far
  * clear() : resets the database
tables and inferences can be read for display.

Propagation of inferences:
When an assertion adds a new fact, every registered inference is applied, and
the facts it adds are propagated in turn. Within one such cascade, an inference
is applied at most once : foo(x+1) :- foo(x). derives foo(1) from foo(0), not
foo(2), and every cascade terminates.
"""

from collections import OrderedDict
import logging
import random

from . import engine
from . import evaluator
from . import util
from .model import (Claim, Clause, Comment, Comparison, Conjunction, Fact, FunctionCall,
                    Inference, Query, Roll, Rolling, Verify)
from .store import FactStore

Logger = logging.getLogger(__name__)


class Interpreter(object):
    """
    A logic-program session : a fact database and the inferences registered on it.
    seed : drives the deterministic sampling of rolls
    strict : if True, a false claim raises UnverifiedClaimError; otherwise it returns False
    An interpreter must not be shared by threads : use one interpreter per thread.
    """

    def __init__(self, seed, strict=True):
        self.seed = seed
        self.strict = strict
        self.clear()

    def clear(self):
        """ clears the logic """
        self.store = FactStore()
        self.registry = OrderedDict() # inferences, by canonical text
        self.claims = []
        self.rng = random.Random(self.seed)

    @property
    def tables(self):
        return self.store.tables

    @property
    def inferences(self):
        return list(self.registry.values())

    # STATEMENTS  #####################################################

    def exec(self, statement):
        if isinstance(statement, Comment):
            return []
        if isinstance(statement, Fact):
            return self.retract(statement) if statement.negative else self.assert_(statement)
        if isinstance(statement, Inference):
            return self.infer(statement)
        if isinstance(statement, Claim):
            return self.claim(statement.clause)
        if isinstance(statement, Query):
            return self.query(statement.clause)
        if isinstance(statement, Rolling):
            return self.roll(statement.clause)
        if isinstance(statement, Verify):
            return self.verify()
        if isinstance(statement, FunctionCall):
            return self.evaluate(statement)
        raise util.UsageError("unhandled statement type: %s" % statement.__class__.__name__)

    def run(self, statements):
        """ executes statements in order. An error stops the execution of the remaining ones """
        return [self.exec(statement) for statement in statements]

    # DATABASE  #####################################################

    def assert_(self, fact):
        """ adds fact to the database. Returns the new facts, including the inferred ones """
        if fact.negative:
            raise util.UsageError("Cannot assert a negative fact : %s" % fact)
        added = self.store.insert(fact)
        if not added:
            return []
        self._log_new(added)
        return added + self._cascade(set())

    def retract(self, fact):
        """ removes fact from the database. Returns the removed facts """
        removed = self.store.retract(fact)
        if engine.Logging and Logger.isEnabledFor(logging.INFO):
            for f in removed:
                Logger.info("Retracted fact : %s" % f)
        return removed

    def infer(self, inference):
        """ registers inference, unless an identical one exists, and applies it """
        if inference.id not in self.registry:
            self.registry[inference.id] = inference
        return self._apply(inference, set())

    def _apply(self, inference, fired):
        """ adds the facts inferred by inference, then propagates them """
        if engine.Logging and Logger.isEnabledFor(logging.DEBUG):
            Logger.debug("entmoot will use inference : %s" % inference)
        head = inference.head
        facts = engine.ground_head(head, engine.search(self.store, inference.body))
        fired.add(inference.id)
        added = []
        for fact in facts:
            if fact.negative:
                self.retract(fact)
            elif head.has_aggregate():
                added.extend(self.store.replace(fact, engine.key_positions(head)))
            else:
                added.extend(self.store.insert(fact))
        if not added:
            return []
        self._log_new(added)
        return added + self._cascade(fired)

    def _cascade(self, fired):
        """ applies the inferences that have not been applied yet in this cascade """
        result = []
        for inference in list(self.registry.values()):
            if inference.id not in fired:
                result.extend(self._apply(inference, fired))
        return result

    def _log_new(self, facts):
        if engine.Logging and Logger.isEnabledFor(logging.INFO):
            for fact in facts:
                Logger.info("New fact : %s" % fact)

    # QUERIES  #####################################################

    def query(self, clause):
        """ returns the facts that satisfy clause, without changing the database """
        if not isinstance(clause, Clause):
            raise util.UsageError("can't query %s" % clause)
        return [fact for binding in engine.search(self.store, clause) for fact in binding.facts]

    def holds(self, clause):
        """ is clause true in the database ? """
        if isinstance(clause, Fact):
            return bool(engine.search(self.store, clause.positive())) != clause.negative
        if isinstance(clause, Conjunction):
            return bool(engine.search(self.store, clause))
        if isinstance(clause, Comparison):
            return evaluator.evaluate(clause, {}).value
        raise util.UsageError("can't verify a claim of type %s : %s"
                              % (clause.__class__.__name__, clause))

    def claim(self, clause):
        """ returns True if clause is true. Otherwise raises UnverifiedClaimError in strict mode.
            The clause is recorded for verify(), unless it cannot be evaluated """
        verified = self.holds(clause)
        self.claims.append(clause)
        if verified:
            return True
        if self.strict:
            raise util.UnverifiedClaimError("unable to verify %s" % clause, clause)
        return False

    def verify(self):
        """ checks again every claim executed so far, against the current database """
        return all([self.holds(clause) for clause in self.claims])

    def evaluate(self, expression):
        return evaluator.evaluate(expression, {})

    def roll(self, clause):
        """ replaces each roll of the distinct facts matching clause by a sample, and asserts the result """
        sampled = []
        facts = util.unique(self.query(clause), key=lambda f: f.id)
        for fact in facts:
            if not any(isinstance(f, Roll) for f in fact.fields):
                continue
            fields = [evaluator.sample(f, self.rng) if isinstance(f, Roll) else f for f in fact.fields]
            sampled.append(Fact(fact.table, fields))
        for fact in sampled:
            self.assert_(fact)
        return sampled
