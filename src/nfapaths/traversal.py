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
Walking a path tree.

:class:`BranchIterator` streams the transitions of a
:class:`~nfapaths.paths.PathTreeNode` one at a time and can be split so that
separate threads consume separate parts of the tree. :func:`apply_paths`
walks the tree eagerly, firing event hooks, and yields where each path ends.
"""

import threading
from collections import deque

from loguru import logger

from nfapaths.transitions import fire
from nfapaths.util import synchronized


class BranchIterator:
    """
    A splittable iterator over every transition of a path tree.

    The iterator keeps a stack of ``[node, position]`` frames, starting with
    the root. Each step yields the next direct transition of the top frame.
    When a frame runs out, it is replaced by one fresh frame for the child of
    each of its transitions, so a shared child is visited once per
    transition that leads to it. The iterator yields exactly
    ``root.transition_count`` transitions.

    :meth:`split` hands the bottom frame to a new iterator. Frames below the
    top have never been started, so the two iterators never yield the same
    occurrence of a transition and between them yield everything the
    unsplit iterator would have.

    Advancing and splitting hold a lock, but the intended pattern is still to
    split first and give each iterator to one thread.

    Example:
        >>> it = node.iterate()
        >>> other = it.split()
        >>> # consume ``it`` and ``other`` on different threads
    """

    def __init__(self, root=None, frames=None):
        self._sync_lock = threading.Lock()
        if frames is not None:
            self._frames = deque(frames)
        elif root is not None and root.direct_transitions:
            self._frames = deque([[root, 0]])
        else:
            self._frames = deque()
        self._remaining = sum(node.transition_count - pos for node, pos in self._frames)

    def __iter__(self):
        return self

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} frames={len(self._frames)} "
            f"remaining={self._remaining}>"
        )

    @synchronized
    def __next__(self):
        frames = self._frames
        if not frames:
            raise StopIteration

        frame = frames[-1]
        node, pos = frame
        direct = node.direct_transitions
        transition = direct[pos]
        pos += 1
        if pos < len(direct):
            frame[1] = pos
        else:
            # Exhausted this frame: go on to the paths after it
            frames.pop()
            further = node.further
            if further is not None:
                for t in reversed(direct):
                    frames.append([further[t.to_state], 0])
        self._remaining -= 1
        return transition

    def is_done(self):
        return not self._frames

    def exact_size(self):
        """Returns the number of transitions this iterator has yet to
        yield.
        """
        return self._remaining

    def estimate_size(self):
        return self._remaining

    def __length_hint__(self):
        return self._remaining

    @synchronized
    def split(self):
        """
        Moves the bottom frame of this iterator to a new iterator.

        Returns:
            BranchIterator: The new iterator, or None if this iterator has
            fewer than two frames.
        """
        if len(self._frames) < 2:
            return None
        frame = self._frames.popleft()
        sibling = self.__class__(frames=[frame])
        self._remaining -= sibling._remaining
        logger.debug("Split off {} transitions", sibling._remaining)
        return sibling


def partition(source, n):
    """
    Splits a path tree node, or an iterator already advanced over part of
    one, into at most ``n`` independent iterators.

    Only frames below the top of a stack can be split off, so a fresh
    iterator (one frame) cannot be split at all. Fewer than ``n`` iterators
    are returned when the stacks run out of frames. The iterators together
    yield exactly what ``source`` would have, in some order.
    """
    if isinstance(source, BranchIterator):
        iterators = [source]
    else:
        iterators = [BranchIterator(source)]
    while len(iterators) < n:
        # Split the largest iterator that still can be split
        for it in sorted(iterators, key=BranchIterator.exact_size, reverse=True):
            sibling = it.split()
            if sibling is not None:
                iterators.append(sibling)
                break
        else:
            break
    return iterators


def apply_paths(node):
    """
    Walks every path below ``node`` depth first, firing the ``on_taken``
    hook of each transition's event, and yields the state each path ends in.

    Transitions are taken left to right. After a transition is taken, the
    whole subtree behind it is walked before the next sibling transition.
    Exceptions from hooks propagate out of the generator and end the walk.
    """
    if not node.direct_transitions:
        return
    stack = [[node, 0]]
    while stack:
        frame = stack[-1]
        current, pos = frame
        direct = current.direct_transitions
        if pos >= len(direct):
            stack.pop()
            continue
        frame[1] = pos + 1

        t = direct[pos]
        fire(t.event, t.from_state, t.to_state)
        if current.further is None:
            yield t.to_state
        else:
            stack.append([current.further[t.to_state], 0])
