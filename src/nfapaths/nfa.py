# Copyright 2007 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

"""
This module contains the immutable nondeterministic automaton and the builder
used to populate it.

An automaton is assembled with a :class:`Builder` and frozen with
:meth:`Builder.build`::

    nfa = (
        Builder()
        .add_transition(s0, a, s0)
        .add_transition(s0, a, s1)
        .add_transition(s1, a, s1)
        .build()
    )

The frozen :class:`NFA` answers per-(state, event) transition lookups, can be
fed one event at a time through a :class:`Frontier`, and can enumerate every
transition path for a whole input at once (:meth:`NFA.precompute`,
:meth:`NFA.apply`).
"""

from cached_property import cached_property
from loguru import logger

from nfapaths.paths import PathTreeNode, paths_for_input, precompute_paths
from nfapaths.transitions import Transition, check_hashable, fire
from nfapaths.util import EMPTY, OrderedFrozenSet

# Exceptions


class BuilderInconsistentError(AssertionError):
    """
    Raised by :meth:`Builder.build` when a transition is filed under a state
    or event other than its own. This means the builder itself is broken.

    Attributes:
        message (str): Explanation of the error.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)


# Builder


class Builder:
    """
    Collects states and transitions for an :class:`NFA`.

    Every ``add_*`` method returns the builder so calls can be chained. States
    mentioned by a transition are added automatically. Adding the same
    transition twice has no further effect.
    """

    def __init__(self):
        self.states = {}
        # from_state -> event -> {Transition: None}
        self.transitions = {}

    def add_state(self, state):
        check_hashable(state, "State")
        self.states.setdefault(state, None)
        return self

    def add_states(self, states):
        for state in states:
            self.add_state(state)
        return self

    def add_transition(self, *args):
        """
        Adds one transition.

        Accepts either a :class:`~nfapaths.transitions.Transition` object or
        the three values ``from_state, event, to_state``.

        Example:
            >>> b = Builder()
            >>> b.add_transition(s0, a, s1)
            >>> b.add_transition(Transition(s1, a, s1))
        """
        if len(args) == 1:
            transition = args[0]
            if not isinstance(transition, Transition):
                raise TypeError(f"Expected a Transition, got {transition!r}")
        elif len(args) == 3:
            transition = Transition(*args)
        else:
            raise TypeError(
                "add_transition() takes a Transition or (from_state, event, to_state)"
            )

        self.add_state(transition.from_state)
        self.add_state(transition.to_state)
        bylabel = self.transitions.setdefault(transition.from_state, {})
        bylabel.setdefault(transition.event, {})[transition] = None
        return self

    def add_transitions(self, transitions):
        for transition in transitions:
            self.add_transition(transition)
        return self

    def build(self, validate=True):
        """
        Freezes the collected states and transitions into an :class:`NFA`.

        Args:
            validate (bool): Check that every transition is filed under its
                own source state and event. Defaults to True.

        Raises:
            BuilderInconsistentError: If the check fails.
        """
        if validate:
            for src, bylabel in self.transitions.items():
                for label, trans in bylabel.items():
                    for t in trans:
                        if t.from_state != src or t.event != label:
                            raise BuilderInconsistentError(
                                f"Transition {t!r} filed under state {src!r} "
                                f"and event {label!r}. This is a bug."
                            )
        return NFA(self.states, self.transitions)


# Automaton


class NFA:
    """
    An immutable nondeterministic finite automaton.

    Instances are made by :meth:`Builder.build`. All methods are read-only so
    an NFA can be shared freely between threads.

    Lookups for states or events the automaton has never seen return empty
    collections rather than raising.
    """

    def __init__(self, states, transitions):
        self._states = OrderedFrozenSet(states)

        out = {}
        sources = {}
        count = 0
        # One pass over the transitions fills both indexes
        for src, bylabel in transitions.items():
            frozen = {}
            for label, trans in bylabel.items():
                if not trans:
                    continue
                frozen[label] = OrderedFrozenSet(trans)
                sources.setdefault(label, {})[src] = None
                count += len(trans)
            if frozen:
                out[src] = frozen

        self._out = out
        self._sources = {
            label: OrderedFrozenSet(srcs) for label, srcs in sources.items()
        }
        self._count = count
        logger.debug(
            "Built NFA: {} states, {} events, {} transitions",
            len(self._states),
            len(self._sources),
            count,
        )

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} states={len(self._states)} "
            f"transitions={self._count}>"
        )

    def __len__(self):
        return len(self._states)

    def __eq__(self, other):
        if not isinstance(other, NFA):
            return NotImplemented
        if self._states != other._states:
            return False
        if self._out.keys() != other._out.keys():
            return False
        for src, bylabel in self._out.items():
            otherlabels = other._out[src]
            if bylabel.keys() != otherlabels.keys():
                return False
            for label, trans in bylabel.items():
                if trans != otherlabels[label]:
                    return False
        return True

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    __hash__ = None

    def states(self):
        return self._states

    @cached_property
    def events(self):
        """Every event that labels at least one transition."""
        return OrderedFrozenSet(self._sources)

    def transition_count(self):
        return self._count

    def transitions(self):
        """Yields every transition in the automaton."""
        for bylabel in self._out.values():
            for trans in bylabel.values():
                yield from trans

    def transitions_from(self, state, event):
        """
        Returns the transitions leaving ``state`` on ``event``.

        Args:
            state: The source state.
            event: The event.

        Returns:
            OrderedFrozenSet: The matching transitions; empty if either the
            state or the event is unknown.
        """
        bylabel = self._out.get(state)
        if bylabel is None:
            return EMPTY
        return bylabel.get(event, EMPTY)

    def sources_allowing(self, event):
        """Returns the set of states with at least one transition on
        ``event``.
        """
        return self._sources.get(event, EMPTY)

    def precompute_paths(self, events, check=False):
        """
        Builds the path trees of ``events`` for every state that can start
        them.

        Returns:
            dict: ``{state: {Suffix: PathTreeNode}}`` covering every suffix
            of ``events``. See :func:`nfapaths.paths.precompute_paths`.
        """
        return precompute_paths(self, events, check=check)

    def precompute(self, start, events, check=False):
        """
        Returns the :class:`~nfapaths.paths.PathTreeNode` holding every
        transition path that consumes all of ``events`` starting at ``start``.

        If no such path exists (including when ``events`` is empty) the
        returned node is empty: its ``branch_count`` and ``transition_count``
        are both 0.
        """
        return paths_for_input(self, start, events, check=check)

    # Alias for precompute()
    paths_for_input = precompute

    def apply(self, start, events):
        """
        Takes every transition path for ``events`` from ``start``, calling the
        ``on_taken`` hook of each transition's event as it goes.

        Returns:
            list: The state each path ends in, one entry per path, in
            depth-first order.
        """
        return list(self.precompute(start, events).apply())

    def step(self, start):
        """Returns a :class:`Frontier` holding only ``start``."""
        return Frontier(self, [start])

    # Alias for step()
    start = step


class Frontier:
    """
    The multiset of states currently reachable while feeding an automaton
    one event at a time.

    Frontiers are immutable: :meth:`then` returns a new frontier.

    Example:
        >>> nfa.step(s0).then(a).then(b).states()
    """

    __slots__ = ("nfa", "_states")

    def __init__(self, nfa, states):
        self.nfa = nfa
        self._states = tuple(states)

    def __repr__(self):
        return f"{self.__class__.__name__}({list(self._states)!r})"

    def __iter__(self):
        return iter(self._states)

    def __len__(self):
        return len(self._states)

    def then(self, event):
        """
        Follows every transition on ``event`` from every state in the
        frontier, firing the event hook once per transition taken.
        """
        transitions_from = self.nfa.transitions_from
        dests = []
        for state in self._states:
            for t in transitions_from(state, event):
                fire(t.event, t.from_state, t.to_state)
                dests.append(t.to_state)
        return Frontier(self.nfa, dests)

    # Alias for then()
    and_then = then

    def states(self):
        return iter(self._states)


Automaton = NFA
