"""Runtime parameter resolution for the AMP optimizer pipeline.

Initializes the runtime parameters used by the transformers from the given
config and caller-supplied values. Missing values are fetched from
cdn.ampproject.org (or the configured ampUrlPrefix):

- validatorRules: the latest AMP validator rules (v0/validator.json)
- ampRuntimeVersion: the latest runtime version, or the latest LTS version
- ampRuntimeStyles: the runtime CSS matching ampRuntimeVersion

Resolution never fails as a whole: each field is attempted independently,
failures are logged through `config.log` and leave the field unset.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Awaitable, Callable, Mapping, Optional, Set, TypeVar

from clients.validator_rules import ValidatorRules, ValidatorRulesProvider
from config import AMP_CACHE_DIR, AMP_CACHE_MAX_ITEMS, AMP_RUNTIME_MAX_AGE, HTTP_TIMEOUT, HTTP_VERIFY
from core.cache import FileSystemCache
from core.interfaces import Cache, RulesProvider
from core.models import RuntimeConfig, RuntimeParameters
from resolvers.rules import RuleResolver
from resolvers.styles import StyleResolver
from resolvers.version import VersionResolver

T = TypeVar("T")


class ParameterResolver:
    """Resolve RuntimeParameters with precedence explicit > config > fetched.

    One instance shares a cache and rules provider across calls; the network
    capabilities and logger come from the RuntimeConfig passed to `resolve`.
    """

    def __init__(
        self,
        *,
        cache: Cache,
        rules_provider: RulesProvider,
        max_age_seconds: float = AMP_RUNTIME_MAX_AGE,
    ) -> None:
        self._cache = cache
        self._rules = RuleResolver(cache=cache, provider=rules_provider)
        self._max_age_seconds = float(max_age_seconds)
        self._background: Set[asyncio.Task] = set()

    async def resolve(
        self,
        config: RuntimeConfig,
        custom_parameters: Optional[Mapping[str, Any]] = None,
    ) -> RuntimeParameters:
        params = RuntimeParameters.from_mapping(custom_parameters)
        # Flags: caller value, then static config; all disabled by default
        params.verbose = bool(params.verbose or config.verbose)
        params.lts = bool(params.lts or config.lts)
        params.rtv = bool(params.rtv or config.rtv)

        # Rules do not depend on the runtime version, so resolve them alongside
        rules, _ = await asyncio.gather(
            self._resolve_rules(config, params),
            self._resolve_version_and_styles(config, params),
        )
        params.validator_rules = rules
        return params

    async def drain(self) -> None:
        """Wait for background version refreshes spawned by earlier calls."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _resolve_rules(
        self, config: RuntimeConfig, params: RuntimeParameters
    ) -> Optional[ValidatorRules]:
        existing = params.validator_rules or config.validator_rules
        if existing is not None:
            return existing
        return await _attempt(config, "Could not fetch validator rules", self._rules.resolve_rules)

    async def _resolve_version_and_styles(self, config: RuntimeConfig, params: RuntimeParameters) -> None:
        versions = VersionResolver(
            cache=self._cache,
            runtime_version=config.runtime_version,
            max_age_seconds=self._max_age_seconds,
            log=config.log,
            background_tasks=self._background,
        )
        styles = StyleResolver(
            cache=self._cache,
            fetcher=config.fetch,
            runtime_version=config.runtime_version,
            log=config.log,
        )

        # Use the existing runtime version or fetch the latest (or LTS) one
        if not params.amp_runtime_version:
            params.amp_runtime_version = await _attempt(
                config,
                "Could not fetch latest AMP runtime version",
                functools.partial(versions.resolve_version, params.amp_url_prefix, params.lts),
            )

        # Runtime styles follow the resolved runtime version
        if not params.amp_runtime_styles:
            params.amp_runtime_styles = await _attempt(
                config,
                "Could not fetch AMP runtime CSS",
                functools.partial(styles.resolve_styles, params.amp_url_prefix, params.amp_runtime_version),
            )


async def _attempt(config: RuntimeConfig, message: str, op: Callable[[], Awaitable[T]]) -> Optional[T]:
    try:
        return await op()
    except Exception as e:  # one field failing must not abort the others
        config.log.error("%s: %s", message, e, exc_info=config.verbose)
        return None


@functools.lru_cache(maxsize=None)
def default_cache() -> FileSystemCache:
    """Process-wide persistent cache, created on first use."""
    return FileSystemCache(base_dir=AMP_CACHE_DIR, max_items=AMP_CACHE_MAX_ITEMS)


@functools.lru_cache(maxsize=None)
def default_resolver() -> ParameterResolver:
    return ParameterResolver(
        cache=default_cache(),
        rules_provider=ValidatorRulesProvider(timeout=HTTP_TIMEOUT, verify=HTTP_VERIFY),
    )


async def fetch_runtime_parameters(
    config: RuntimeConfig,
    custom_parameters: Optional[Mapping[str, Any]] = None,
) -> RuntimeParameters:
    """Resolve runtime parameters with the process-wide cache."""
    return await default_resolver().resolve(config, custom_parameters)
