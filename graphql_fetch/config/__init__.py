"""
Configuration for graphql_fetch clients.
"""

from .loader import ConfigLoader, load_settings
from .models import ClientSettings

__all__ = [
    "ClientSettings",
    "ConfigLoader",
    "load_settings",
]
