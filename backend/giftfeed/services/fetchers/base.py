"""
Fetch outcomes and the strategy interface shared by all listing fetchers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Union

from giftfeed.services.parsers.base import ListingRecord


@dataclass(frozen=True)
class Success:
    records: tuple[ListingRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Blocked:
    reason: str


@dataclass(frozen=True)
class TransportError:
    cause: str


@dataclass(frozen=True)
class TimedOut:
    after: float  # seconds


FetchOutcome = Union[Success, Blocked, TransportError, TimedOut]


class FetchStrategy(ABC):
    """A way of turning a listing page URL into listing records."""

    name: str = ""
    timeout: float = 1.0  # default budget in seconds

    @abstractmethod
    async def fetch(self, url: str, limit: int, timeout: float) -> FetchOutcome:
        """
        Fetch ``url`` and parse up to ``limit`` records within ``timeout`` seconds.

        Expected failures are returned as outcomes, not raised.
        """
        ...

    async def close(self) -> None:
        """Release any pooled resources."""
        return None
