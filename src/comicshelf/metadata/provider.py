# ABOUTME: LookupClient protocol defining the contract for external bibliographic lookups.
# ABOUTME: Any search API (Google Books, test fakes) used by the resolver implements this.

from typing import Protocol, runtime_checkable

from comicshelf.metadata.types import LookupResult


@runtime_checkable
class LookupClient(Protocol):
    """Protocol for external title lookups.

    lookup() must never raise: transport and parse failures are reported as
    None, the same as "no result".
    """

    @property
    def name(self) -> str: ...

    def lookup(self, query: str) -> LookupResult | None: ...
