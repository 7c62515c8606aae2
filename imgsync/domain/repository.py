"""
Repository domain object for imgsync.

A Repository identifies one container-image repository in a registry,
either the sync target or one of the sources. Pure value object: address
and capability resolution only, no I/O.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

# Registry used when a repository has no host.
DEFAULT_REGISTRY = "index.docker.io"

# Hosts known to only accept single-segment repository paths.
FLAT_NAMESPACE_HOSTS: Tuple[str, ...] = ("quay.io", "docker.io")


@dataclass(frozen=True)
class Auth:
    """Username and password used to authenticate to a registry."""
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def is_set(self) -> bool:
        return self.username != ""


def supports_nested_repositories(host: str) -> bool:
    """
    Default capability lookup for nested repository paths.

    An empty host is Docker Hub, which is flat.
    """
    if host == "":
        return False
    return not any(flat in host for flat in FLAT_NAMESPACE_HOSTS)


@dataclass(frozen=True)
class Repository:
    """
    A repository in a registry.

    Attributes:
        repository: Repository path (e.g., "library/busybox")
        host: Registry host, empty for Docker Hub
        scheme: Scheme used for the healthcheck (defaults to http)
        auth: Optional credentials
        nested_repositories: Explicit nested-path capability; None means
            use the host lookup
    """

    repository: str
    host: str = ""
    scheme: str = ""
    auth: Auth = field(default_factory=Auth)
    nested_repositories: Optional[bool] = None

    @property
    def registry_host(self) -> str:
        return self.host or DEFAULT_REGISTRY

    @property
    def address(self) -> str:
        """Full repository address, host/repository."""
        return f"{self.registry_host}/{self.repository}"

    @property
    def basename(self) -> str:
        return self.repository.rstrip("/").rsplit("/", 1)[-1]

    @property
    def healthcheck_url(self) -> str:
        """Registry API base URL checked by the healthcheck."""
        if not self.host:
            return f"https://{DEFAULT_REGISTRY}/v2/"
        scheme = self.scheme or "http"
        return f"{scheme}://{self.host}/v2/"

    def supports_nested_repositories(self) -> bool:
        if self.nested_repositories is not None:
            return self.nested_repositories
        return supports_nested_repositories(self.host)

    def child_address(self, source: "Repository") -> str:
        """
        Address under this repository that receives `source`.

        Registries with a flat namespace only get the last path segment.
        """
        if self.supports_nested_repositories():
            suffix = source.repository.strip("/")
        else:
            suffix = source.basename
        return f"{self.address.rstrip('/')}/{suffix}"
