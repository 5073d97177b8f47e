"""Pattern Source interface."""

from abc import ABC, abstractmethod

from pdojo.state import Challenge


class PatternSource(ABC):
    """Supplies one challenge per request. May be a static list or a remote service."""

    @abstractmethod
    async def fetch_challenge(self) -> Challenge:
        """
        Fetch a challenge.

        No ordering guarantee between calls: the same pattern may come back
        twice, but each call returns a Challenge with a fresh id.

        Raises:
            SourceUnavailable: the source could not produce a challenge
        """
        pass
