from collections import Counter

import pytest
from loguru import logger

from nfapaths import NFA, Automaton, Builder, Event, Frontier, State, Transition

s0 = State("S0")
s1 = State("S1")
a = Event("a")
b = Event("b")

TRANSITION_S0_A_S0 = Transition(s0, a, s0)
TRANSITION_S1_A_S1 = Transition(s1, a, s1)
TRANSITION_S0_A_S1 = Transition(s0, a, s1)


def self_loop_nfa():
    return (
        Builder()
        .add_transition(TRANSITION_S0_A_S0)
        .add_transition(TRANSITION_S1_A_S1)
        .add_transition(TRANSITION_S0_A_S1)
        .build()
    )


class Coin(Event):
    def __init__(self, cents, meter):
        super().__init__(f"c{cents}")
        self.cents = cents
        self.meter = meter

    def on_taken(self, from_state, to_state):
        self.meter.append((self.cents, from_state.value, to_state.value))


def parking_meter():
    paid_0 = State("PAID_0", 0)
    paid_25 = State("PAID_25", 25)
    paid_50 = State("PAID_50", 50)
    paid_75 = State("PAID_75", 75)
    meter = []
    c25 = Coin(25, meter)
    c50 = Coin(50, meter)

    nfa = (
        Builder()
        .add_transition(paid_0, c25, paid_25)
        .add_transition(paid_0, c50, paid_50)
        .add_transition(paid_25, c25, paid_50)
        .add_transition(paid_25, c50, paid_75)
        .add_transition(paid_50, c25, paid_75)
        .add_transition(paid_50, c50, paid_0)
        .add_transition(paid_75, c25, paid_0)
        # Paid too much, no money back
        .add_transition(paid_75, c50, paid_0)
        .build()
    )
    return nfa, meter, c25, c50


def test_automaton_alias():
    assert Automaton is NFA
    assert isinstance(self_loop_nfa(), Automaton)


def test_transitions_from():
    nfa = self_loop_nfa()
    assert nfa.transitions_from(s0, a) == {TRANSITION_S0_A_S0, TRANSITION_S0_A_S1}
    assert list(nfa.transitions_from(s0, a)) == [TRANSITION_S0_A_S0, TRANSITION_S0_A_S1]
    assert nfa.transitions_from(s1, a) == {TRANSITION_S1_A_S1}
    assert nfa.transitions_from(s0, b) == set()
    assert nfa.transitions_from(s1, b) == set()
    assert nfa.transitions_from(State("nowhere"), a) == set()
    assert len(nfa.transitions_from(State("nowhere"), Event("never"))) == 0


def test_index_projection():
    nfa = self_loop_nfa()
    assert nfa.sources_allowing(a) == {s0, s1}
    assert nfa.sources_allowing(b) == set()
    assert nfa.events == {a}
    assert nfa.events is nfa.events
    assert set(nfa.transitions()) == {
        TRANSITION_S0_A_S0,
        TRANSITION_S1_A_S1,
        TRANSITION_S0_A_S1,
    }
    for event in nfa.events:
        for src in nfa.sources_allowing(event):
            for t in nfa.transitions_from(src, event):
                assert t.from_state == src
                assert t.event == event


def test_isolated_state():
    nfa = Builder().add_state(s1).add_transition(s0, a, s0).build()
    assert nfa.states() == {s0, s1}
    assert nfa.sources_allowing(a) == {s0}
    assert nfa.transitions_from(s1, a) == set()


def test_step():
    nfa = self_loop_nfa()
    frontier = nfa.step(s0)
    assert isinstance(frontier, Frontier)
    assert list(frontier.states()) == [s0]

    frontier = frontier.then(a)
    assert Counter(frontier.states()) == Counter([s0, s1])
    frontier = frontier.then(a)
    assert Counter(frontier.states()) == Counter({s1: 2, s0: 1})
    assert len(frontier) == 3

    assert list(frontier.then(b).states()) == []


def test_frontier_is_immutable():
    nfa = self_loop_nfa()
    start = nfa.step(s0)
    start.then(a)
    assert list(start) == [s0]


def test_frontier_fires_hooks():
    taken = []
    x = Event("x", on_taken=lambda src, dest: taken.append((src, dest)))
    nfa = Builder().add_transition(s0, x, s0).add_transition(s0, x, s1).build()
    nfa.step(s0).then(x).then(x)
    # s1 has no transitions on x
    assert taken == [(s0, s0), (s0, s1), (s0, s0), (s0, s1)]


def test_parking_meter_stepwise():
    nfa, meter, c25, c50 = parking_meter()
    paid_0 = State("PAID_0")
    frontier = nfa.start(paid_0).and_then(c25).and_then(c50)
    assert list(frontier.states()) == [State("PAID_75")]
    assert meter == [(25, 0, 25), (50, 25, 75)]

    frontier = frontier.then(c50).then(c25)
    assert list(frontier.states()) == [State("PAID_25")]
    assert sum(cents for cents, _, _ in meter) == 150


def test_parking_meter_bulk():
    nfa, meter, c25, c50 = parking_meter()
    paid_0 = State("PAID_0")

    node = nfa.precompute(paid_0, [c25, c50])
    assert node.branch_count == 1
    assert node.transition_count == 2
    assert meter == []
    assert nfa.apply(paid_0, [c25, c50]) == [State("PAID_75")]
    assert meter == [(25, 0, 25), (50, 25, 75)]

    del meter[:]
    node = nfa.precompute(paid_0, [c25, c50, c50, c25])
    assert node.branch_count == 1
    assert node.transition_count == 4
    assert nfa.apply(paid_0, [c25, c50, c50, c25]) == [State("PAID_25")]
    assert meter == [(25, 0, 25), (50, 25, 75), (50, 75, 0), (25, 0, 25)]


def test_apply_matches_frontier():
    nfa = self_loop_nfa()
    for n in range(1, 8):
        events = [a] * n
        frontier = nfa.step(s0)
        for event in events:
            frontier = frontier.then(event)
        assert Counter(nfa.apply(s0, events)) == Counter(frontier.states())


def test_no_start_transition():
    nfa = Builder().add_transition(s0, a, s0).build()
    node = nfa.precompute(s0, [b])
    assert node.branch_count == 0
    assert node.transition_count == 0
    assert list(node.iterate()) == []
    assert nfa.apply(s0, [b]) == []

    node = nfa.paths_for_input(State("nowhere"), [a])
    assert node.is_empty


def test_empty_input():
    nfa = self_loop_nfa()
    node = nfa.precompute(s0, [])
    assert node.branch_count == 0
    assert node.transition_count == 0
    assert node.events == ()
    assert nfa.apply(s0, []) == []


def test_hook_exception_propagates():
    class Stop(Exception):
        pass

    calls = []

    def hook(src, dest):
        calls.append(dest)
        if len(calls) == 3:
            raise Stop()

    x = Event("x", on_taken=hook)
    nfa = Builder().add_transition(s0, x, s0).add_transition(s0, x, s1).build()
    with pytest.raises(Stop):
        nfa.apply(s0, [x, x, x])
    assert len(calls) == 3

    del calls[:]
    with pytest.raises(Stop):
        nfa.step(s0).then(x).then(x)


def test_build_logs():
    messages = []
    logger.enable("nfapaths")
    handler = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        nfa = self_loop_nfa()
        nfa.precompute(s0, [a, a])
    finally:
        logger.remove(handler)
        logger.disable("nfapaths")

    assert any("Built NFA: 2 states, 1 events, 3 transitions" in m for m in messages)
    assert any("Precomputed 4 path nodes" in m for m in messages)


def test_repr():
    assert repr(self_loop_nfa()) == "<NFA states=2 transitions=3>"
