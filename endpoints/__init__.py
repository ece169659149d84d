# file: endpoints/__init__.py
"""
Endpoint map loading: the named tool servers a run connects to.
See: endpoints/config.py
"""
from .config import (
    EndpointConfig,
    EndpointConfigError,
    EndpointMap,
    default_endpoints,
    endpoints_from_dict,
    load_endpoint_file,
)

__all__ = [
    "EndpointConfig",
    "EndpointConfigError",
    "EndpointMap",
    "default_endpoints",
    "endpoints_from_dict",
    "load_endpoint_file",
]
