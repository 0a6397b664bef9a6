"""HTTP clients and helpers."""

from .client import Clients, GenericClient, SuppressedClient
from .media import guess_mime_from_url

__all__ = [
    "Clients",
    "GenericClient",
    "SuppressedClient",
    "guess_mime_from_url",
]
