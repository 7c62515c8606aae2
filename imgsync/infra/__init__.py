"""
Infrastructure layer for imgsync.

Contains abstractions for external systems:
- RegistryClient: Container registry access (tags, copy, credentials,
  healthcheck)

These provide clean interfaces that can be mocked for testing.
"""

from .registry_client import RegistryClient

__all__ = [
    'RegistryClient',
]
