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

from loguru import logger

from nfapaths.nfa import NFA, Automaton, Builder, BuilderInconsistentError, Frontier
from nfapaths.paths import (
    MemoMissError,
    PathTreeNode,
    Suffix,
    UnsupportedMutationError,
    paths_for_input,
    precompute_paths,
)
from nfapaths.transitions import Event, State, Transition, fire
from nfapaths.traversal import BranchIterator, apply_paths, partition
from nfapaths.version import __version__, versionstring

# Silent until logger.enable("nfapaths")
logger.disable("nfapaths")

__all__ = [
    "Automaton",
    "BranchIterator",
    "Builder",
    "BuilderInconsistentError",
    "Event",
    "Frontier",
    "MemoMissError",
    "NFA",
    "PathTreeNode",
    "State",
    "Suffix",
    "Transition",
    "UnsupportedMutationError",
    "__version__",
    "apply_paths",
    "fire",
    "partition",
    "paths_for_input",
    "precompute_paths",
    "versionstring",
]
