"""
Hosted REST backend.

Serves the repository protocols over the hosted service's HTTP API.
"""

from src.integrations.base import Backend
from src.integrations.repositories import build_gateway_backend
from src.integrations.rest.client import RestClient
from src.integrations.rest.gateway import RestAuthProvider, RestTableGateway


def build_rest_backend(client: RestClient) -> Backend:
    """Build a Backend whose tables and session come from the REST client."""
    return build_gateway_backend(
        RestAuthProvider(client),
        lambda table: RestTableGateway(client, table),
    )


__all__ = [
    "RestAuthProvider",
    "RestClient",
    "RestTableGateway",
    "build_rest_backend",
]
