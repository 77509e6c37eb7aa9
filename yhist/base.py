"""Abstract data-fetcher interface every provider session hands out."""

from __future__ import annotations

import abc
import io
from enum import Enum


class Resolution(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class DataFetcher(abc.ABC):
    """A (symbol, resolution) pair that can produce a CSV stream on demand.

    Subclasses hold no durable state of their own; anything worth keeping
    between fetches lives in the provider session that created them.
    """

    @property
    @abc.abstractmethod
    def symbol(self) -> str:
        """Ticker symbol, e.g. 'AAPL'."""

    @property
    @abc.abstractmethod
    def resolution(self) -> Resolution:
        """Bar size of the requested history."""

    @abc.abstractmethod
    async def get_stream_of_csv(self) -> io.StringIO:
        """Download the full history and return the unparsed CSV body."""
