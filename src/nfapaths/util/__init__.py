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

from collections.abc import Set
from functools import wraps


class OrderedFrozenSet(Set):
    """
    A read-only set that remembers insertion order.

    The automaton hands these out for its states, for the transitions
    leaving a (state, event) pair, and for the sources of an event. Iteration
    order is the order in which the items were first added to the builder,
    which keeps traversals stable from run to run.

    Comparison with ordinary ``set`` and ``frozenset`` objects works through
    the ``collections.abc.Set`` mixins.

    Example:
        >>> s = OrderedFrozenSet(["b", "a", "b"])
        >>> list(s)
        ['b', 'a']
        >>> s == {"a", "b"}
        True
    """

    __slots__ = ("_items",)

    def __init__(self, items=()):
        self._items = dict.fromkeys(items)

    def __contains__(self, item):
        return item in self._items

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __repr__(self):
        return f"{self.__class__.__name__}({list(self._items)!r})"

    def __hash__(self):
        return self._hash()

    @classmethod
    def _from_iterable(cls, it):
        return cls(it)


EMPTY = OrderedFrozenSet()


# Decorators


def synchronized(func):
    """Decorator for methods which synchronizes on a threading lock. The
    parent object must have a '_sync_lock' attribute.

    Args:
        func (callable): The function to be decorated.

    Returns:
        callable: The decorated function.

    Example:
        >>> class MyClass:
        ...     def __init__(self):
        ...         self._sync_lock = threading.Lock()
        ...
        ...     @synchronized
        ...     def my_method(self):
        ...         pass

    """

    @wraps(func)
    def synchronized_wrapper(self, *args, **kwargs):
        with self._sync_lock:
            return func(self, *args, **kwargs)

    return synchronized_wrapper
