# file: endpoints/config.py
from __future__ import annotations
"""
Endpoint map: named tool servers and how to launch them.

Usage
-----
from endpoints import default_endpoints, load_endpoint_file
endpoints = default_endpoints(root=Path.cwd())
endpoints = load_endpoint_file("servers.json")

File format
-----------
The usual MCP client config shape (the inner mapping alone is accepted too):

{
  "mcpServers": {
    "filesystem": {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-filesystem", "."]},
    "memory":     {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-memory"]}
  }
}

Design
------
- EndpointConfig is a frozen pydantic model; the map itself is a read-only
  MappingProxyType so nothing mutates endpoints after loading.
- Keys are unique by construction (dict keys); the map preserves file order,
  which is also the order sessions are opened in.
"""
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError


FILESYSTEM_SERVER = "@modelcontextprotocol/server-filesystem"
MEMORY_SERVER = "@modelcontextprotocol/server-memory"


class EndpointConfigError(ValueError):
    """Endpoint map is missing, malformed or empty."""


class EndpointConfig(BaseModel):
    """Launch descriptor for one tool server subprocess."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)
    command: str = Field(..., min_length=1)
    args: List[str] = Field(default_factory=list)
    env: Optional[Dict[str, str]] = None
    cwd: Optional[str] = None


EndpointMap = Mapping[str, EndpointConfig]


def default_endpoints(root: str | Path = ".") -> EndpointMap:
    """The two fixed demo endpoints: a filesystem server rooted at `root`, and a memory server."""
    r = str(Path(root).expanduser().resolve())
    return MappingProxyType(
        {
            "filesystem": EndpointConfig(
                name="filesystem",
                command="npx",
                args=["-y", FILESYSTEM_SERVER, r],
                # relative tool paths ("package.json", ".") resolve against root
                cwd=r,
            ),
            "memory": EndpointConfig(
                name="memory",
                command="npx",
                args=["-y", MEMORY_SERVER],
            ),
        }
    )


def endpoints_from_dict(data: Mapping[str, Any]) -> EndpointMap:
    """Build an endpoint map from a config dict (with or without the `mcpServers` wrapper)."""
    if not isinstance(data, Mapping):
        raise EndpointConfigError(f"endpoint config must be an object, got {type(data).__name__}")
    servers = data.get("mcpServers", data)
    if not isinstance(servers, Mapping):
        raise EndpointConfigError("'mcpServers' must be an object")
    if not servers:
        raise EndpointConfigError("endpoint config declares no servers")

    out: Dict[str, EndpointConfig] = {}
    for name, desc in servers.items():
        if not isinstance(desc, Mapping):
            raise EndpointConfigError(f"server {name!r}: descriptor must be an object")
        try:
            out[name] = EndpointConfig(**{**desc, "name": name})
        except ValidationError as e:
            raise EndpointConfigError(f"server {name!r}: {e}") from e
    return MappingProxyType(out)


def load_endpoint_file(path: str | Path) -> EndpointMap:
    p = Path(path).expanduser()
    try:
        data = orjson.loads(p.read_bytes())
    except FileNotFoundError as e:
        raise EndpointConfigError(f"endpoint file not found: {p}") from e
    except orjson.JSONDecodeError as e:
        raise EndpointConfigError(f"endpoint file is not valid JSON: {p}: {e}") from e
    return endpoints_from_dict(data)
