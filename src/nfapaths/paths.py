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
This module builds the structure holding every transition path an automaton
admits for a fixed input.

The structure is a tree of :class:`PathTreeNode` objects, one per
``(state, remaining input)`` pair. It is built right to left over the input
and memoised on that pair, so nodes for a shared suffix are shared between
parents and the "tree" is really a directed acyclic graph. Each node knows the
number of paths below it and the number of transitions an enumeration of
those paths visits, without walking anything.

Dead ends are pruned: a transition whose destination cannot consume the rest
of the input is left out of its node, and a state with no surviving
transitions gets no node at all.
"""

from cached_property import cached_property
from loguru import logger

from nfapaths.traversal import BranchIterator, apply_paths

# Exceptions


class MemoMissError(AssertionError):
    """
    Raised when path construction cannot find a node it has already built,
    or builds the same node twice. Either way this is a bug in the library,
    not in the automaton.

    Attributes:
        message (str): Explanation of the error.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class UnsupportedMutationError(Exception):
    """
    Raised when trying to add or remove transitions from a
    :class:`PathTreeNode`. Path trees are read-only.

    Attributes:
        message (str): Explanation of the error.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)


# Suffixes


class Suffix:
    """
    An immutable singly linked list of events, used as the memo key for path
    nodes.

    :meth:`prepend` is O(1) and shares the existing list as its tail. The hash
    is computed once from the head and the tail's hash. Equal lists built
    independently compare equal; the common case of comparing a list with
    itself is a single identity check.

    Example:
        >>> s = Suffix.EMPTY.prepend("b").prepend("a")
        >>> list(s)
        ['a', 'b']
        >>> s.tail == Suffix.EMPTY.prepend("b")
        True
    """

    __slots__ = ("head", "tail", "length", "_hash")

    EMPTY = None  # Filled in below the class

    def __init__(self, head, tail):
        self.head = head
        self.tail = tail
        if tail is None:
            self.length = 0
            self._hash = 0
        else:
            self.length = tail.length + 1
            self._hash = hash((head, tail._hash))

    @classmethod
    def from_events(cls, events):
        s = cls.EMPTY
        for event in reversed(tuple(events)):
            s = s.prepend(event)
        return s

    def prepend(self, event):
        return Suffix(event, self)

    def __len__(self):
        return self.length

    def __bool__(self):
        return self.length > 0

    def __iter__(self):
        s = self
        while s.length:
            yield s.head
            s = s.tail

    def __hash__(self):
        return self._hash

    def __eq__(self, other):
        if not isinstance(other, Suffix):
            return NotImplemented
        a, b = self, other
        while a is not b:
            if a.length != b.length or a._hash != b._hash or a.head != b.head:
                return False
            a, b = a.tail, b.tail
        return True

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __repr__(self):
        return f"{self.__class__.__name__}({list(self)!r})"


Suffix.EMPTY = Suffix(None, None)


# Path tree


class PathTreeNode:
    """
    Every transition path from one state along one suffix of the input.

    A node's :attr:`direct_transitions` all leave :attr:`from_state` on
    :attr:`head_event`. If the suffix is longer than one event,
    :attr:`further` maps each destination of those transitions to the node
    for the rest of the suffix; otherwise it is None and the node is a leaf.

    The node is a read-only collection of transitions: ``len(node)`` is the
    transition count, iterating it yields every transition of the
    enumeration (see :class:`nfapaths.traversal.BranchIterator`), and
    ``path in node`` tests whether a sequence of transitions is one of its
    complete paths. Mutating methods raise :class:`UnsupportedMutationError`.

    Attributes:
        from_state: The state every path starts in.
        suffix (Suffix): The events this node consumes.
        head_event: The first event of the suffix.
        direct_transitions (tuple): The live transitions for the head event.
        further (dict or None): Destination state -> node for the suffix's
            tail.
        branch_count (int): Number of complete paths.
        transition_count (int): Number of transitions an enumeration visits.
    """

    def __init__(self, from_state, suffix, direct_transitions, further=None):
        self.from_state = from_state
        self.suffix = suffix
        self.head_event = suffix.head
        self.direct_transitions = tuple(direct_transitions)
        self.further = further

        transitions = len(self.direct_transitions)
        if further is None:
            branches = transitions
        else:
            branches = 0
            for t in self.direct_transitions:
                child = further[t.to_state]
                branches += child.branch_count
                transitions += child.transition_count
        self.branch_count = branches
        self.transition_count = transitions

    @classmethod
    def empty(cls, from_state, suffix=Suffix.EMPTY):
        """Returns a node with no paths."""
        return cls(from_state, suffix, ())

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} {self.from_state!r} {list(self.suffix)!r} "
            f"branches={self.branch_count} transitions={self.transition_count}>"
        )

    @property
    def is_leaf(self):
        return self.further is None

    @property
    def is_empty(self):
        return self.branch_count == 0

    @cached_property
    def events(self):
        return tuple(self.suffix)

    def __len__(self):
        return self.transition_count

    def __iter__(self):
        return self.iterate()

    def iterate(self):
        """Returns a :class:`~nfapaths.traversal.BranchIterator` over every
        transition of every path below this node.
        """
        return BranchIterator(self)

    def apply(self):
        """Walks every path, firing event hooks, and yields the end state of
        each. See :func:`nfapaths.traversal.apply_paths`.
        """
        return apply_paths(self)

    def to_list(self):
        return list(self.iterate())

    def paths(self):
        """
        Yields every complete path as a tuple of transitions, depth first.
        """
        if not self.direct_transitions:
            return
        stack = [(self, 0, ())]
        while stack:
            node, pos, sofar = stack.pop()
            if pos + 1 < len(node.direct_transitions):
                stack.append((node, pos + 1, sofar))
            t = node.direct_transitions[pos]
            path = sofar + (t,)
            if node.further is None:
                yield path
            else:
                stack.append((node.further[t.to_state], 0, path))

    def __contains__(self, path):
        try:
            path = tuple(path)
        except TypeError:
            return False
        if not path or len(path) != self.suffix.length:
            return False

        node = self
        for i, t in enumerate(path):
            if t not in node.direct_transitions:
                return False
            if i + 1 < len(path):
                node = node.further[t.to_state]
        return True

    def sanity_check(self):
        """
        Checks this node's own structure against its children.

        Raises:
            MemoMissError: If the node is malformed.
        """
        if not self.direct_transitions:
            return
        for t in self.direct_transitions:
            if t.from_state != self.from_state or t.event != self.head_event:
                raise MemoMissError(f"{t!r} does not belong in {self!r}")
        if self.suffix.length > 1:
            if self.further is None:
                raise MemoMissError(f"{self!r} has no further paths")
            targets = {t.to_state for t in self.direct_transitions}
            if set(self.further) != targets:
                raise MemoMissError(
                    f"{self!r} further paths do not match targets"
                )
            for state, child in self.further.items():
                if child.suffix.length != self.suffix.length - 1:
                    raise MemoMissError(f"{child!r} is not the tail of {self!r}")
                if child.from_state != state:
                    raise MemoMissError(f"{child!r} is filed under {state!r}")
        elif self.further is not None:
            raise MemoMissError(f"Leaf {self!r} has further paths")

    # Read-only collection

    def _read_only(self, *args, **kwargs):
        raise UnsupportedMutationError(f"{self.__class__.__name__} is read-only")

    add = discard = remove = clear = update = pop = _read_only


def precompute_paths(nfa, events, check=False):
    """
    Builds path nodes for every suffix of ``events`` and every state that can
    consume that suffix.

    Works right to left over the input. At each step the suffix grows by one
    event at the front, and each state with transitions on that event gets a
    node whose children are looked up in the nodes made on the previous step.

    Args:
        nfa (NFA): The automaton.
        events (iterable): The input events.
        check (bool): Run :meth:`PathTreeNode.sanity_check` on every node.

    Returns:
        dict: ``{state: {Suffix: PathTreeNode}}``.

    Raises:
        MemoMissError: If a child node that must exist is missing.
    """
    events = tuple(events)
    memo = {}
    suffix = Suffix.EMPTY
    # (state, suffix) pairs with transitions but no complete path
    pruned = set()
    nodecount = 0

    for event in reversed(events):
        tail = suffix
        suffix = tail.prepend(event)

        for src in nfa.sources_allowing(event):
            direct = nfa.transitions_from(src, event)
            if tail:
                further = {}
                live = []
                for t in direct:
                    dest = t.to_state
                    child = further.get(dest)
                    if child is None:
                        child = memo.get(dest, {}).get(tail)
                        if child is None:
                            if (
                                dest in nfa.sources_allowing(tail.head)
                                and (dest, tail) not in pruned
                            ):
                                raise MemoMissError(
                                    f"No paths were computed for {dest!r} "
                                    f"along {tail!r}"
                                )
                            # Dead end
                            continue
                        further[dest] = child
                    live.append(t)

                if not live:
                    pruned.add((src, suffix))
                    continue
                node = PathTreeNode(src, suffix, live, further)
            else:
                node = PathTreeNode(src, suffix, direct)

            if check:
                node.sanity_check()
            bysuffix = memo.setdefault(src, {})
            if suffix in bysuffix:
                raise MemoMissError(
                    f"Already computed paths for {src!r} along {suffix!r}"
                )
            bysuffix[suffix] = node
            nodecount += 1

    logger.debug(
        "Precomputed {} path nodes ({} pruned) for {} events",
        nodecount,
        len(pruned),
        len(events),
    )
    return memo


def paths_for_input(nfa, start, events, check=False):
    """
    Returns the path node for ``events`` starting at ``start``, or an empty
    node if there is no complete path.
    """
    events = tuple(events)
    if not events:
        return PathTreeNode.empty(start)

    memo = precompute_paths(nfa, events, check=check)
    suffix = Suffix.from_events(events)
    node = memo.get(start, {}).get(suffix)
    if node is None:
        logger.debug("No paths from {!r} for {} events", start, len(events))
        return PathTreeNode.empty(start, suffix)
    return node
