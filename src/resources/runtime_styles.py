from typing import Optional

from mcp.server.fastmcp import FastMCP

from core.models import RuntimeConfig
from resolvers.parameters import ParameterResolver, default_resolver


def register_resources(
    mcp: FastMCP,
    *,
    resolver: Optional[ParameterResolver] = None,
    config: Optional[RuntimeConfig] = None,
) -> None:
    """
    Register AMP runtime resources for the MCP server.
    """

    @mcp.resource(
        "amp://runtime/v0.css",
        mime_type="text/css",
        description="AMP runtime CSS for the current runtime version"
    )
    async def runtime_styles() -> str:
        params = await (resolver or default_resolver()).resolve(config or RuntimeConfig.from_env(), {})
        return params.amp_runtime_styles or ""
