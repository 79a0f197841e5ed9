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
Value types for the automaton's alphabets, and the transition record that
connects them.

States and events can be any hashable objects. The :class:`State` and
:class:`Event` classes here are convenient named values; an event may carry an
``on_taken(from_state, to_state)`` hook which is invoked whenever a transition
labelled with that event is actually taken (see :func:`fire`).
"""


class State:
    """
    A named automaton state.

    Two states are equal when their names are equal. The optional ``value``
    is user data (for example, the amount of money in a parking meter) and
    does not take part in equality.

    Example:
        >>> paid = State("PAID_25", 25)
        >>> paid == State("PAID_25")
        True
        >>> paid
        <PAID_25>
    """

    __slots__ = ("name", "value")

    def __init__(self, name, value=None):
        self.name = name
        self.value = value

    def __repr__(self):
        return f"<{self.name}>"

    def __eq__(self, other):
        return type(other) is type(self) and other.name == self.name

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((self.__class__.__name__, self.name))


class Event:
    """
    A named input event.

    Subclasses may override :meth:`on_taken`, or a callable may be passed in
    as ``on_taken``. The hook is called with the source and destination state
    of every transition taken on this event during an eager traversal
    (:meth:`nfapaths.nfa.NFA.apply`, :meth:`nfapaths.paths.PathTreeNode.apply`)
    or a stepwise one (:class:`nfapaths.nfa.Frontier`). It is never called
    while path trees are being constructed or lazily iterated.

    Equality is by name, so the hook does not affect hashing.
    """

    __slots__ = ("name", "_hook")

    def __init__(self, name, on_taken=None):
        self.name = name
        self._hook = on_taken

    def __repr__(self):
        return f"[{self.name}]"

    def __eq__(self, other):
        return type(other) is type(self) and other.name == self.name

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((self.__class__.__name__, self.name))

    def on_taken(self, from_state, to_state):
        if self._hook is not None:
            self._hook(from_state, to_state)


def fire(event, from_state, to_state):
    """Invokes the ``on_taken`` hook of ``event``, if it has one.

    Plain hashable values (strings, ints, enum members) have no hook and are
    silently skipped. Whatever the hook raises is propagated to the caller.
    """

    hook = getattr(event, "on_taken", None)
    if hook is not None:
        hook(from_state, to_state)


def check_hashable(obj, what):
    """Raises ``TypeError`` if ``obj`` cannot be used as a state or event."""

    try:
        hash(obj)
    except TypeError:
        raise TypeError(f"{what} {obj!r} is not hashable") from None


class Transition:
    """
    An immutable ``(from_state, event, to_state, terminal)`` record.

    Two transitions are equal iff all four fields are equal. ``terminal`` is
    metadata for the user; the path engine never looks at it.

    Transitions can be made three ways::

        Transition(s0, a, s1)
        Transition.new(a, s0, s1)  # event first
        Transition.from_(s0).through(a).to(s1)

    Attributes:
        from_state: The state the transition leaves.
        event: The event that labels the transition.
        to_state: The state the transition enters.
        terminal (bool): User supplied flag.
    """

    __slots__ = ("from_state", "event", "to_state", "terminal", "_hash")

    def __init__(self, from_state, event, to_state, terminal=False):
        check_hashable(from_state, "State")
        check_hashable(event, "Event")
        check_hashable(to_state, "State")
        terminal = bool(terminal)
        setter = super().__setattr__
        setter("from_state", from_state)
        setter("event", event)
        setter("to_state", to_state)
        setter("terminal", terminal)
        setter("_hash", hash((from_state, event, to_state, terminal)))

    @classmethod
    def new(cls, event, from_state, to_state):
        return cls(from_state, event, to_state)

    @classmethod
    def new_terminal(cls, event, from_state, to_state):
        return cls(from_state, event, to_state, terminal=True)

    @staticmethod
    def from_(from_state):
        """Starts a ``from_(s).through(e).to(t)`` chain."""
        return _FromHolder(from_state)

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Transition):
            return NotImplemented
        return (
            self._hash == other._hash
            and self.terminal == other.terminal
            and self.event == other.event
            and self.from_state == other.from_state
            and self.to_state == other.to_state
        )

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __hash__(self):
        return self._hash

    def __repr__(self):
        mark = "!" if self.terminal else ""
        return f"{self.from_state!r}-{self.event!r}->{self.to_state!r}{mark}"

    def __reduce__(self):
        return (
            self.__class__,
            (self.from_state, self.event, self.to_state, self.terminal),
        )

    def tuple(self):
        return (self.from_state, self.event, self.to_state, self.terminal)


class _FromHolder:
    __slots__ = ("from_state",)

    def __init__(self, from_state):
        self.from_state = from_state

    def through(self, event):
        return _ThroughHolder(self.from_state, event)


class _ThroughHolder:
    __slots__ = ("from_state", "event")

    def __init__(self, from_state, event):
        self.from_state = from_state
        self.event = event

    def to(self, to_state):
        return Transition(self.from_state, self.event, to_state)
