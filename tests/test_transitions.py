import pickle

import pytest

from nfapaths import Event, State, Transition, fire

s0 = State("S0")
s1 = State("S1")
a = Event("a")


def test_state_equality():
    assert State("S0") == s0
    assert State("S0", 25) == s0
    assert State("S0") != State("S1")
    assert State("S0") != "S0"
    assert len({State("S0"), s0, s1}) == 2
    assert repr(s0) == "<S0>"


def test_event_equality_ignores_hook():
    assert Event("a", on_taken=print) == a
    assert hash(Event("a", on_taken=print)) == hash(a)
    assert repr(a) == "[a]"


def test_event_hook():
    taken = []
    ev = Event("x", on_taken=lambda src, dest: taken.append((src, dest)))
    ev.on_taken(s0, s1)
    fire(ev, s1, s0)
    assert taken == [(s0, s1), (s1, s0)]


def test_event_subclass_hook():
    class Coin(Event):
        def __init__(self, cents):
            super().__init__(f"c{cents}")
            self.cents = cents
            self.total = 0

        def on_taken(self, from_state, to_state):
            self.total += self.cents

    coin = Coin(25)
    fire(coin, s0, s1)
    fire(coin, s1, s1)
    assert coin.total == 50


def test_fire_plain_values():
    # Strings have no hook
    fire("a", "S0", "S1")


def test_transition_equality():
    t = Transition(s0, a, s1)
    assert t == Transition(State("S0"), Event("a"), State("S1"))
    assert t != Transition(s0, a, s0)
    assert t != Transition(s0, a, s1, terminal=True)
    assert hash(t) == hash(Transition(s0, a, s1))
    assert len({t, Transition(s0, a, s1), Transition(s1, a, s1)}) == 2
    assert t != (s0, a, s1, False)


def test_transition_constructors():
    t = Transition(s0, a, s1)
    assert Transition.new(a, s0, s1) == t
    assert Transition.from_(s0).through(a).to(s1) == t

    term = Transition.new_terminal(a, s0, s1)
    assert term.terminal
    assert term.from_state == s0
    assert term.event == a
    assert term.to_state == s1
    assert term.tuple() == (s0, a, s1, True)
    assert not t.terminal


def test_transition_is_immutable():
    t = Transition(s0, a, s1)
    with pytest.raises(AttributeError):
        t.to_state = s0
    with pytest.raises(AttributeError):
        del t.event
    assert t.to_state == s1


def test_transition_repr():
    assert repr(Transition(s0, a, s1)) == "<S0>-[a]-><S1>"
    assert repr(Transition("x", "y", "z")) == "'x'-'y'->'z'"


def test_transition_requires_hashable():
    with pytest.raises(TypeError):
        Transition([], a, s1)
    with pytest.raises(TypeError):
        Transition(s0, {}, s1)


def test_transition_pickles():
    t = Transition.new_terminal(a, s0, s1)
    assert pickle.loads(pickle.dumps(t)) == t
