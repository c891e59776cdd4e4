import sys
import types
import uuid
import importlib.util
from pathlib import Path


def _find_server_py() -> Path:
    root = Path(__file__).resolve().parents[2]
    candidates = [
        root / "server.py",
        root / "server" / "server.py",
        root / "src" / "server" / "server.py",
    ]
    for p in candidates:
        if p.exists():
            return p
    raise FileNotFoundError(f"Could not find server.py. Tried: {candidates}")


def _install_fake_modules(monkeypatch, captures: dict):
    # ---- Fake mcp.server.fastmcp.FastMCP ----
    mcp_mod = types.ModuleType("mcp")
    mcp_server_mod = types.ModuleType("mcp.server")
    fastmcp_mod = types.ModuleType("mcp.server.fastmcp")

    class DummyFastMCP:
        def __init__(self, name: str):
            captures["fastmcp_name"] = name
            captures["mcp_instance"] = self
            self.run_calls = []

        def run(self, *, transport: str):
            self.run_calls.append({"transport": transport})
            captures["run_calls"] = list(self.run_calls)

    fastmcp_mod.FastMCP = DummyFastMCP

    # Mark package structure
    mcp_mod.__path__ = []
    mcp_server_mod.__path__ = []

    monkeypatch.setitem(sys.modules, "mcp", mcp_mod)
    monkeypatch.setitem(sys.modules, "mcp.server", mcp_server_mod)
    monkeypatch.setitem(sys.modules, "mcp.server.fastmcp", fastmcp_mod)

    # ---- Fake config ----
    config_mod = types.ModuleType("config")
    config_mod.AMP_VERBOSE = True

    def configure_logging(*, verbose=False):
        captures["configure_logging_calls"] = captures.get("configure_logging_calls", []) + [verbose]

    config_mod.configure_logging = configure_logging
    monkeypatch.setitem(sys.modules, "config", config_mod)

    # ---- Fake runtime config + resolver ----
    models_mod = types.ModuleType("core.models")
    params_mod = types.ModuleType("resolvers.parameters")

    class FakeRuntimeConfig:
        @classmethod
        def from_env(cls):
            captures["config_ctor_calls"] = captures.get("config_ctor_calls", 0) + 1
            captures["config_instance"] = cls()
            return captures["config_instance"]

    def default_resolver():
        captures["resolver_instance"] = captures.get("resolver_instance") or object()
        return captures["resolver_instance"]

    models_mod.RuntimeConfig = FakeRuntimeConfig
    params_mod.default_resolver = default_resolver
    monkeypatch.setitem(sys.modules, "core.models", models_mod)
    monkeypatch.setitem(sys.modules, "resolvers.parameters", params_mod)

    # ---- Fake tools + resources ----
    def _ensure_pkg(name: str):
        pkg = types.ModuleType(name)
        pkg.__path__ = []
        monkeypatch.setitem(sys.modules, name, pkg)

    _ensure_pkg("tools")
    _ensure_pkg("resources")

    tools_mod = types.ModuleType("tools.fetch_runtime_parameters")
    res_mod = types.ModuleType("resources.runtime_styles")

    def register_tool(mcp, *, resolver=None, config=None):
        captures["register_tool_calls"] = captures.get("register_tool_calls", []) + [
            {"mcp": mcp, "resolver": resolver, "config": config}
        ]

    def register_resources(mcp, *, resolver=None, config=None):
        captures["register_resources_calls"] = captures.get("register_resources_calls", []) + [
            {"mcp": mcp, "resolver": resolver, "config": config}
        ]

    tools_mod.register = register_tool
    res_mod.register_resources = register_resources

    monkeypatch.setitem(sys.modules, "tools.fetch_runtime_parameters", tools_mod)
    monkeypatch.setitem(sys.modules, "resources.runtime_styles", res_mod)


def _load_server_module(monkeypatch, captures: dict):
    _install_fake_modules(monkeypatch, captures)

    server_path = _find_server_py()
    mod_name = f"server_under_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, server_path)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    sys.modules[mod_name] = module
    spec.loader.exec_module(module)
    return module


def test_server_register_all_and_di(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)

    # FastMCP created with correct name
    assert captures["fastmcp_name"] == "amp-runtime-parameters"
    mcp = captures["mcp_instance"]

    # Config is built once in register_all()
    assert captures["config_ctor_calls"] == 1

    # Tool and resource share the SAME resolver and config (shared cache)
    (tool_call,) = captures["register_tool_calls"]
    (res_call,) = captures["register_resources_calls"]
    assert tool_call["mcp"] is mcp and res_call["mcp"] is mcp
    assert tool_call["resolver"] is res_call["resolver"] is captures["resolver_instance"]
    assert tool_call["config"] is res_call["config"] is captures["config_instance"]

    # main() configures logging and runs stdio transport
    module.main()
    assert captures["configure_logging_calls"] == [True]
    assert captures["run_calls"] == [{"transport": "stdio"}]
