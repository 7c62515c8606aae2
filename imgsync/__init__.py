"""
imgsync - Sync container images to a target registry.

imgsync copies a selection of tags from one or more source repositories
into a single target repository, driven by a YAML configuration.

Quick Start:
    import imgsync

    config = imgsync.load_config("mirror.yaml")
    service = imgsync.SyncService(config, imgsync.RegistryClient())

    for progress in service.sync():
        print(progress)

    print(service.last_result.tags_copied)

Tag selection can also be used on its own:

    imgsync.filter_tags(["1.0.0", "latest"], spec)
"""

__version__ = "0.1.0"

# Domain objects
from .domain import (
    Auth,
    Repository,
    SourceSpec,
    RunConfig,
    SyncStatus,
    SyncSummary,
)

# Services
from .services import (
    SyncService,
    filter_tags,
    missing_tags,
    sync_set,
)

# Infrastructure
from .infra import RegistryClient

# Configuration
from .config import load_config

# Errors
from .exit_codes import (
    ImgsyncError,
    ConfigError,
    AuthError,
    HealthcheckError,
    FilterError,
    ListError,
    CopyError,
)

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Auth",
    "Repository",
    "SourceSpec",
    "RunConfig",
    "SyncStatus",
    "SyncSummary",
    # Services
    "SyncService",
    "filter_tags",
    "missing_tags",
    "sync_set",
    # Infrastructure
    "RegistryClient",
    # Configuration
    "load_config",
    # Errors
    "ImgsyncError",
    "ConfigError",
    "AuthError",
    "HealthcheckError",
    "FilterError",
    "ListError",
    "CopyError",
]
