"""Core protocol and interface definitions.

Defines the collaborator capabilities the resolvers depend on (cache,
HTTP fetch, runtime version source, validator rules provider) so real
clients and test doubles are interchangeable.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from clients.validator_rules import ValidatorRules


class Cache(Protocol):
    """Contract for the shared key/value cache."""
    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...


class Fetcher(Protocol):
    async def fetch(self, url: str) -> httpx.Response:
        ...


class RuntimeVersionSource(Protocol):
    async def current_version(
        self,
        *,
        amp_url_prefix: Optional[str] = None,
        lts: bool = False,
    ) -> str:
        ...


class RulesProvider(Protocol):
    async def fetch(self, *, rules: Optional[Any] = None) -> "ValidatorRules":
        ...
