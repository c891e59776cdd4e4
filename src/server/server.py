"""Server bootstrap for the AMP runtime parameters service.

Creates the FastMCP instance, wires the shared resolver and runtime config
into the tools and resources, and starts the MCP server (stdio transport).
"""

from mcp.server.fastmcp import FastMCP

from config import AMP_VERBOSE, configure_logging
from core.models import RuntimeConfig
from resolvers.parameters import default_resolver

from tools.fetch_runtime_parameters import register as register_fetch_runtime_parameters

from resources.runtime_styles import register_resources

mcp = FastMCP("amp-runtime-parameters")


def register_all() -> None:
    resolver = default_resolver()
    config = RuntimeConfig.from_env()

    register_fetch_runtime_parameters(mcp, resolver=resolver, config=config)
    register_resources(mcp, resolver=resolver, config=config)


register_all()


def main() -> None:
    configure_logging(verbose=AMP_VERBOSE)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
