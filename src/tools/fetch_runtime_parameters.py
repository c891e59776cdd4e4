"""MCP tool that resolves AMP runtime parameters.

Registers 'fetch_runtime_parameters' which runs the ParameterResolver and
returns a JSON-friendly view of the result (validator rules summarised).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from core.models import RuntimeConfig, RuntimeParameters
from resolvers.parameters import ParameterResolver, default_resolver


def summarize(params: RuntimeParameters) -> Dict[str, Any]:
    out = params.to_dict()
    rules = params.validator_rules
    out["validatorRules"] = (
        None if rules is None else {"tags": len(rules.tags), "extensions": len(rules.extensions)}
    )
    return out


def register(
    mcp: FastMCP,
    *,
    resolver: Optional[ParameterResolver] = None,
    config: Optional[RuntimeConfig] = None,
) -> None:
    @mcp.tool(name="fetch_runtime_parameters")
    async def fetch_runtime_parameters(
        amp_url_prefix: Optional[str] = None,
        amp_runtime_version: Optional[str] = None,
        lts: bool = False,
        rtv: bool = False,
    ) -> Dict[str, Any]:
        """Resolve validator rules, runtime version and runtime CSS.

        Params:
          - amp_url_prefix: optional self-hosted runtime origin.
          - amp_runtime_version: optional pinned runtime version.
          - lts: use the long-term-stable runtime.
          - rtv: request version-qualified runtime URLs downstream.

        Returns:
          The resolved parameters; fields that could not be resolved are null.
        """
        if amp_runtime_version is not None and not amp_runtime_version.strip():
            raise ValidationError("amp_runtime_version must be non-empty when given")

        custom: Dict[str, Any] = {"lts": lts, "rtv": rtv}
        if amp_url_prefix:
            custom["ampUrlPrefix"] = amp_url_prefix.strip()
        if amp_runtime_version:
            custom["ampRuntimeVersion"] = amp_runtime_version.strip()

        params = await (resolver or default_resolver()).resolve(config or RuntimeConfig.from_env(), custom)
        return summarize(params)
