"""
Document matching for watcher and sampler probes.

Matcher is the interface the engine depends on; SimpleMatcher is the
in-process implementation used by the command line and the tests.
"""

from .base import Matcher
from .simple import SimpleMatcher, compile_filter, filter_id_for

__all__ = ["Matcher", "SimpleMatcher", "compile_filter", "filter_id_for"]
