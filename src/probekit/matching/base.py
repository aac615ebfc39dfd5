"""
Abstract matcher interface.

Watcher and sampler probes rely on a matcher to decide which documents they
watch. A probe registers its ``(index, collection, filter)`` triple once at
startup and gets a filter id back; at runtime the matcher reports the ids of
the filters a document matches.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, List, Mapping, Optional, Union


class Matcher(ABC):
    """Abstract base class for document matchers."""

    @abstractmethod
    def register(
        self, index: str, collection: str, filter: Mapping[str, Any]
    ) -> Union[str, Awaitable[str]]:
        """
        Register a filter on an index/collection pair.

        Args:
            index: Watched index
            collection: Watched collection
            filter: Filter expression, an empty filter matches everything

        Returns:
            The filter id, or an awaitable resolving to it
        """
        pass

    @abstractmethod
    def test(
        self,
        index: str,
        collection: str,
        body: Any,
        document_id: Optional[str] = None
    ) -> Union[List[str], Awaitable[List[str]]]:
        """
        Test a document against the registered filters.

        Args:
            index: Index the document belongs to
            collection: Collection the document belongs to
            body: Document body
            document_id: Document identifier, if any

        Returns:
            Ids of the matched filters (empty when none match), or an
            awaitable resolving to them
        """
        pass
