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
import logging

import pytest

import entmoot
from entmoot import engine
from entmoot import (Claim, Comment, Comparison, FunctionCall, Inference, Interpreter, Number,
                     Query, Rolling, String, Variable, Verify, make_fact, make_roll)
from entmoot.util import (GroundingError, UnboundVariableError, UnverifiedClaimError,
                          UsageError)

x, y, p, c, g, w = (Variable(name) for name in ('x', 'y', 'p', 'c', 'g', 'w'))


def test_database():
    """ assert and retract                                                 """
    interpreter = Interpreter('seed')
    fact = make_fact('parent', 'Bin', 'Paula')
    assert interpreter.exec(fact) == [fact]
    assert interpreter.exec(make_fact('parent', 'Bin', 'Paula')) == []
    assert interpreter.tables == {'parent': [fact]}

    assert interpreter.exec(~fact) == [fact]
    assert interpreter.tables['parent'] == []
    assert interpreter.exec(~fact) == []
    assert interpreter.exec(Comment('nothing happens')) == []

    with pytest.raises(GroundingError):
        interpreter.exec(make_fact('parent', x, 'Paula'))
    with pytest.raises(GroundingError):
        interpreter.exec(~make_fact('parent', 'Bin', p))
    with pytest.raises(UsageError):
        interpreter.assert_(~fact)
    with pytest.raises(UsageError):
        interpreter.exec('parent(Bin, Paula).')
    with pytest.raises(TypeError): # the seed of the rolls is required
        Interpreter()


def test_join():
    """ sibling(x, y) :- parent(x, p) & parent(y, p) & x != y.              """
    interpreter = Interpreter('seed')
    rule = Inference(make_fact('sibling', x, y),
                     make_fact('parent', x, p) & make_fact('parent', y, p) & Comparison('!=', x, y))
    assert interpreter.exec(rule) == []
    assert interpreter.exec(make_fact('parent', 'Bin', 'Paula')) == [make_fact('parent', 'Bin', 'Paula')]
    assert interpreter.exec(make_fact('parent', 'Jane', 'Paula')) == [
        make_fact('parent', 'Jane', 'Paula'),
        make_fact('sibling', 'Bin', 'Jane'),
        make_fact('sibling', 'Jane', 'Bin')]
    assert interpreter.tables['sibling'] == [make_fact('sibling', 'Bin', 'Jane'),
                                             make_fact('sibling', 'Jane', 'Bin')]
    assert interpreter.exec(Claim(~make_fact('sibling', 'Bin', 'Bin'))) is True
    assert interpreter.exec(Query(make_fact('sibling', x, 'Jane'))) == [make_fact('sibling', 'Bin', 'Jane')]

    # a textually identical inference is registered once
    interpreter.exec(Inference(make_fact('sibling', x, y),
                     make_fact('parent', x, p) & make_fact('parent', y, p) & Comparison('!=', x, y)))
    assert len(interpreter.inferences) == 1
    assert interpreter.inferences[0] is rule


def test_recursion():
    """ self-referential and mutually referential inferences               """
    interpreter = Interpreter('seed')
    assert interpreter.exec(make_fact('foo', 0)) == [make_fact('foo', 0)]
    assert interpreter.exec(Inference(make_fact('foo', x + 1), make_fact('foo', x))) == [make_fact('foo', 1)]
    assert interpreter.exec(Claim(make_fact('foo', 1))) is True
    assert interpreter.exec(Claim(~make_fact('foo', 2))) is True

    # the inference is applied once per assertion
    interpreter = Interpreter('seed')
    interpreter.exec(Inference(make_fact('foo', x + 1), make_fact('foo', x)))
    assert interpreter.exec(make_fact('foo', 0)) == [make_fact('foo', 0), make_fact('foo', 1)]
    assert interpreter.exec(Claim(~make_fact('foo', 2))) is True

    interpreter = Interpreter('seed')
    interpreter.exec(Inference(make_fact('foo', x + 1), make_fact('bar', x)))
    interpreter.exec(Inference(make_fact('bar', x + 1), make_fact('foo', x)))
    assert interpreter.exec(make_fact('foo', 0)) == [make_fact('foo', 0), make_fact('bar', 1)]
    assert interpreter.tables['foo'] == [make_fact('foo', 0)]

    # a chain of inferences
    interpreter = Interpreter('seed')
    interpreter.exec(Inference(make_fact('b', x), make_fact('a', x)))
    interpreter.exec(Inference(make_fact('c', x), make_fact('b', x)))
    assert interpreter.exec(make_fact('a', 1)) == [make_fact('a', 1), make_fact('b', 1), make_fact('c', 1)]


def test_aggregates():
    """ load(c, sum(w)) :- (wearing(c, g) | wielding(c, g)) & weight(g, w). """
    interpreter = Interpreter('seed')
    interpreter.run([
        make_fact('wearing', 'Auric', 'Helm'),
        make_fact('wearing', 'Auric', 'Mail'),
        make_fact('wielding', 'Auric', 'Sword'),
        make_fact('wearing', 'Bram', 'Cloak'),
        make_fact('weight', 'Helm', 4),
        make_fact('weight', 'Mail', 1),
        make_fact('weight', 'Sword', 2),
        make_fact('weight', 'Cloak', 3),
        make_fact('weight', 'Dagger', 2),
        ])
    body = (make_fact('wearing', c, g) | make_fact('wielding', c, g)) & make_fact('weight', g, w)
    load = Inference(make_fact('load', c, FunctionCall('sum', [w])), body)
    assert interpreter.exec(load) == [make_fact('load', 'Auric', 7), make_fact('load', 'Bram', 3)]

    # the aggregated tuple is replaced, one per character
    assert interpreter.exec(make_fact('wielding', 'Bram', 'Dagger')) == [
        make_fact('wielding', 'Bram', 'Dagger'), make_fact('load', 'Bram', 5)]
    assert interpreter.tables['load'] == [make_fact('load', 'Auric', 7), make_fact('load', 'Bram', 5)]

    gear = Inference(make_fact('gear', c, FunctionCall('count', [g])), make_fact('wearing', c, g))
    assert interpreter.exec(gear) == [make_fact('gear', 'Auric', 2), make_fact('gear', 'Bram', 1)]
    heaviest = Inference(make_fact('heaviest', FunctionCall('max', [w])), make_fact('weight', g, w))
    assert interpreter.exec(heaviest) == [make_fact('heaviest', 4)]


def test_negation():
    """ negative heads retract the inferred tuples                         """
    interpreter = Interpreter('seed')
    interpreter.run([make_fact('person', 'Auric'), make_fact('person', 'Bram'),
                     make_fact('noble', 'Bram')])
    assert interpreter.exec(Inference(make_fact('tag', x, 'Commoner'), make_fact('person', x))) == [
        make_fact('tag', 'Auric', 'Commoner'), make_fact('tag', 'Bram', 'Commoner')]
    assert interpreter.exec(Inference(~make_fact('tag', x, 'Commoner'), make_fact('noble', x))) == []
    assert interpreter.tables['tag'] == [make_fact('tag', 'Auric', 'Commoner')]

    interpreter.exec(make_fact('person', 'Cora'))
    assert interpreter.tables['tag'] == [make_fact('tag', 'Auric', 'Commoner'),
                                         make_fact('tag', 'Cora', 'Commoner')]

    # negated patterns in a body
    rule = Inference(make_fact('free', x), make_fact('person', x) & ~make_fact('noble', x))
    interpreter.exec(rule)
    assert interpreter.tables['free'] == [make_fact('free', 'Auric'), make_fact('free', 'Cora')]


def test_claims():
    """ ergo, in strict and non-strict mode                                """
    interpreter = Interpreter('seed')
    interpreter.run([make_fact('class', 'Auric', 'Barbarian'),
                     make_fact('wielding', 'Auric', 'Axe'),
                     make_fact('wielding', 'Auric', 'TwoHandedSword')])
    barbarian = make_fact('class', 'Auric', 'Barbarian') & (
        make_fact('wielding', 'Auric', 'Axe') ^ make_fact('wielding', 'Auric', 'TwoHandedSword'))
    with pytest.raises(UnverifiedClaimError) as error:
        interpreter.exec(Claim(barbarian))
    assert error.value.clause is barbarian
    assert 'unable to verify' in str(error.value)

    interpreter.exec(~make_fact('wielding', 'Auric', 'Axe'))
    assert interpreter.exec(Claim(barbarian)) is True
    assert interpreter.exec(Claim(make_fact('wielding', 'Auric', x))) is True
    assert interpreter.exec(Claim(Comparison('<', Number(1) + 1, 3))) is True
    assert interpreter.exec(Claim(~make_fact('wielding', 'Auric', 'Axe') & ~make_fact('class', 'Auric', 'Bard'))) is True

    with pytest.raises(UsageError):
        interpreter.exec(Claim(make_fact('a', 1) | make_fact('b', 1)))
    with pytest.raises(UsageError):
        interpreter.exec(Claim(make_fact('a', 1) ^ make_fact('b', 1)))
    with pytest.raises(UsageError):
        interpreter.query(Number(1))

    lenient = Interpreter('seed', strict=False)
    assert lenient.exec(Claim(make_fact('foo', 1))) is False
    assert lenient.exec(Claim(~make_fact('foo', 1))) is True
    with pytest.raises(UnboundVariableError):
        lenient.exec(Claim(Comparison('<', x, 1)))


def test_run():
    """ a false claim stops the execution of the remaining statements      """
    interpreter = Interpreter('seed')
    with pytest.raises(UnverifiedClaimError):
        interpreter.run([make_fact('foo', 1), Claim(make_fact('foo', 2)), make_fact('foo', 3)])
    assert interpreter.tables['foo'] == [make_fact('foo', 1)]

    results = Interpreter('seed', strict=False).run([make_fact('foo', 1), Claim(make_fact('foo', 2)),
                                                      Query(make_fact('foo', x))])
    assert results == [[make_fact('foo', 1)], False, [make_fact('foo', 1)]]

    # an unbound variable in the head is an error, and nothing is rolled back
    interpreter = Interpreter('seed')
    interpreter.exec(make_fact('foo', 1))
    with pytest.raises(UnboundVariableError):
        interpreter.exec(Inference(make_fact('bar', x, y), make_fact('foo', x)))
    assert interpreter.tables['foo'] == [make_fact('foo', 1)]


def test_verify():
    """ claims are checked again against the current database              """
    interpreter = Interpreter('seed', strict=False)
    interpreter.exec(make_fact('foo', 1))
    assert interpreter.exec(Claim(make_fact('foo', 1))) is True
    assert interpreter.exec(Verify()) is True
    interpreter.exec(~make_fact('foo', 1))
    assert interpreter.verify() is False
    interpreter.exec(make_fact('foo', 1))
    assert interpreter.verify() is True

    # a claim that cannot be evaluated is not recorded
    with pytest.raises(UnboundVariableError):
        interpreter.exec(Claim(Comparison('<', x, 1)))
    with pytest.raises(UsageError):
        interpreter.exec(Claim(make_fact('foo', 1) | make_fact('bar', 1)))
    assert interpreter.claims == [make_fact('foo', 1)]
    assert interpreter.verify() is True


def test_dice():
    """ expected values, probabilities and rolls                           """
    interpreter = Interpreter('seed')
    assert interpreter.exec(FunctionCall('Pr', [Comparison('=', make_roll('2d6'), 7)])) == Number(6 / 36)
    assert interpreter.exec(Claim(Comparison('=', make_roll('2d6'), 8))) is True
    assert interpreter.evaluate(FunctionCall('floor', [Number(7) / 2])) == Number(3)

    attack = make_fact('attack', 'Auric', make_roll('2d6'))
    campaigns = []
    for _ in range(2):
        interpreter = Interpreter(seed='campaign')
        interpreter.exec(attack)
        campaigns.append(interpreter.exec(Rolling(make_fact('attack', 'Auric', x))))
    assert campaigns[0] == campaigns[1]
    sampled = campaigns[0][0]
    assert sampled.fields[0] == String('Auric')
    assert 2 <= sampled.fields[1].value <= 12
    assert interpreter.store.contains(sampled)
    assert interpreter.store.contains(attack)

    # the sampled facts trigger the inferences
    interpreter = Interpreter(seed='campaign')
    interpreter.exec(Inference(make_fact('damage', c, x), make_fact('attack', c, x)))
    interpreter.exec(attack)
    interpreter.exec(Rolling(make_fact('attack', 'Auric', x)))
    assert interpreter.tables['damage'] == [make_fact('damage', 'Auric', make_roll('2d6')),
                                            make_fact('damage', 'Auric', sampled.fields[1])]

    # a fact matched by several bindings is sampled once, and facts without rolls are left alone
    interpreter = Interpreter('campaign')
    interpreter.run([make_fact('attack', 'Auric', make_roll('1d1000')),
                     make_fact('class', 'Auric', 'Barbarian'),
                     make_fact('class', 'Auric', 'Fighter')])
    rolled = interpreter.exec(Rolling(make_fact('attack', c, x) & make_fact('class', c, '?')))
    assert len(rolled) == 1
    assert rolled[0].table == 'attack' and 1 <= rolled[0].fields[1].value <= 1000
    assert interpreter.tables['attack'] == [make_fact('attack', 'Auric', make_roll('1d1000')), rolled[0]]
    assert len(interpreter.tables['class']) == 2
    assert interpreter.exec(Rolling(make_fact('class', c, '?'))) == []


def test_clear():
    interpreter = Interpreter(seed='campaign', strict=False)
    interpreter.run([make_fact('attack', 'Auric', make_roll('1d20')),
                     Inference(make_fact('b', x), make_fact('a', x)),
                     Claim(make_fact('a', 1))])
    first = interpreter.roll(make_fact('attack', 'Auric', x))
    interpreter.clear()
    assert interpreter.tables == {}
    assert interpreter.inferences == []
    assert interpreter.claims == []

    # the random generator starts again
    interpreter.exec(make_fact('attack', 'Auric', make_roll('1d20')))
    assert interpreter.roll(make_fact('attack', 'Auric', x)) == first


def test_logging(caplog):
    interpreter = entmoot.Interpreter('seed')
    engine.Logging = True
    try:
        with caplog.at_level(logging.INFO, logger='entmoot.interpreter'):
            interpreter.exec(make_fact('foo', 1))
            interpreter.exec(~make_fact('foo', 1))
    finally:
        engine.Logging = False
    assert 'New fact : foo(1)' in caplog.text
    assert 'Retracted fact : foo(1)' in caplog.text

    caplog.clear()
    with caplog.at_level(logging.INFO, logger='entmoot.interpreter'):
        interpreter.exec(make_fact('foo', 2))
    assert caplog.text == ''
