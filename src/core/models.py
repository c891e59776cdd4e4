"""Dataclasses shared by the resolvers.

- RuntimeConfig: the pipeline configuration handed to `resolve`.
- RuntimeParameters: the resolved parameters returned to the pipeline.
- VersionCacheRecord: the cached runtime version plus its max-age stamp.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from core.errors import ValidationError
from core.interfaces import Fetcher, RuntimeVersionSource
from core.max_age import MaxAge

if TYPE_CHECKING:
    from clients.validator_rules import ValidatorRules


DEFAULT_LOGGER_NAME = "amp_runtime"


@dataclass
class RuntimeConfig:
    """Static configuration for runtime parameter resolution.

    `fetch` and `runtime_version` are the network capabilities; `log` receives
    every warning and error raised while resolving.
    """

    fetch: Fetcher
    runtime_version: RuntimeVersionSource

    verbose: bool = False
    lts: bool = False
    rtv: bool = False
    validator_rules: Optional["ValidatorRules"] = None

    log: logging.Logger = field(default_factory=lambda: logging.getLogger(DEFAULT_LOGGER_NAME))

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        # Local imports: clients depend on core, not the other way around
        from clients.http_fetcher import HttpFetcher
        from clients.runtime_version import RuntimeVersionClient
        from config import AMP_LTS, AMP_VERBOSE, HTTP_TIMEOUT, HTTP_VERIFY

        return cls(
            fetch=HttpFetcher(timeout=HTTP_TIMEOUT, verify=HTTP_VERIFY),
            runtime_version=RuntimeVersionClient(timeout=HTTP_TIMEOUT, verify=HTTP_VERIFY),
            verbose=AMP_VERBOSE,
            lts=AMP_LTS,
        )


# camelCase keys used by the optimizer pipeline -> dataclass field names
_FIELD_ALIASES = {
    "verbose": "verbose",
    "lts": "lts",
    "rtv": "rtv",
    "validatorRules": "validator_rules",
    "validator_rules": "validator_rules",
    "ampUrlPrefix": "amp_url_prefix",
    "amp_url_prefix": "amp_url_prefix",
    "ampRuntimeVersion": "amp_runtime_version",
    "amp_runtime_version": "amp_runtime_version",
    "ampRuntimeStyles": "amp_runtime_styles",
    "amp_runtime_styles": "amp_runtime_styles",
}


@dataclass
class RuntimeParameters:
    verbose: bool = False
    lts: bool = False
    rtv: bool = False
    validator_rules: Optional["ValidatorRules"] = None
    amp_url_prefix: Optional[str] = None
    amp_runtime_version: Optional[str] = None
    amp_runtime_styles: Optional[str] = None

    # Caller-supplied keys this module does not interpret
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "RuntimeParameters":
        params = cls()
        for key, value in (data or {}).items():
            name = _FIELD_ALIASES.get(key)
            if name is None:
                params.extras[key] = value
            else:
                setattr(params, name, value)
        return params

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extras)
        out.update(
            {
                "verbose": self.verbose,
                "lts": self.lts,
                "rtv": self.rtv,
                "validatorRules": self.validator_rules,
                "ampUrlPrefix": self.amp_url_prefix,
                "ampRuntimeVersion": self.amp_runtime_version,
                "ampRuntimeStyles": self.amp_runtime_styles,
            }
        )
        return out


@dataclass(frozen=True)
class VersionCacheRecord:
    version: str
    max_age: MaxAge

    def is_stale(self, now: Optional[float] = None) -> bool:
        return self.max_age.is_expired(now)

    def to_json(self) -> Dict[str, Any]:
        return {"version": self.version, "maxAge": self.max_age.to_json()}

    @classmethod
    def from_json(cls, data: Any) -> "VersionCacheRecord":
        if not isinstance(data, Mapping):
            raise ValidationError(f"Invalid version cache record: {data!r}")
        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise ValidationError(f"Invalid version cache record: {data!r}")
        return cls(version=version, max_age=MaxAge.from_json(data.get("maxAge") or {}))


def version_cache_key(amp_url_prefix: Optional[str], lts: bool) -> str:
    # The prefix/lts combination partitions the version cache; no prefix is its own partition
    return f"{amp_url_prefix or ''}-{'true' if lts else 'false'}"
