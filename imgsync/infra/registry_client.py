"""
Registry client infrastructure for imgsync.

Provides a clean abstraction over container registry access:
- Tag listing, image copy and credential storage go through the `crane`
  CLI (go-containerregistry), which reads and writes the docker config
  like `docker login` does
- The target healthcheck is a plain HTTP request to the registry API

All registry operations go through this client so that the sync service
can be tested with a mock.
"""

import logging
import subprocess
from typing import List, Optional, Sequence

import requests

from ..domain.repository import DEFAULT_REGISTRY, Repository
from ..exit_codes import AuthError, CopyError, HealthcheckError, ListError

logger = logging.getLogger(__name__)

# Hosts that crane stores under the Docker Hub credential key
DOCKER_HUB_HOSTS = ("docker.io", "registry-1.docker.io", "index.docker.io")


class RegistryClient:
    """
    Client for container registries.

    Example:
        client = RegistryClient()
        tags = client.list_tags("index.docker.io/library/busybox")
        client.copy_tag("1.36", "index.docker.io/library/busybox",
                        "registry.example.com/mirror/busybox")
        client.close()
    """

    def __init__(
        self,
        crane: str = "crane",
        timeout: Optional[float] = None,
        http_timeout: float = 30.0,
    ):
        """
        Initialize RegistryClient.

        Args:
            crane: crane executable name or path
            timeout: Timeout for crane commands in seconds (None = no timeout)
            http_timeout: Timeout for the healthcheck request in seconds
        """
        self.crane = crane
        self.timeout = timeout
        self.http_timeout = http_timeout
        self.session = requests.Session()

    def close(self) -> None:
        """Release the HTTP connection pool."""
        self.session.close()

    def _run(self, args: Sequence[str], input: Optional[str] = None) -> str:
        """
        Run a crane command.

        Returns:
            Command stdout

        Raises:
            subprocess.CalledProcessError: On non-zero exit
            OSError: If crane cannot be executed
            subprocess.TimeoutExpired: If the command times out
        """
        cmd = [self.crane, *args]
        logger.debug(f"Running: {' '.join(cmd[:3])}")
        result = subprocess.run(
            cmd,
            input=input,
            capture_output=True,
            text=True,
            timeout=self.timeout,
            check=True,
        )
        return result.stdout

    @staticmethod
    def _describe(e: Exception) -> str:
        if isinstance(e, subprocess.CalledProcessError):
            detail = (e.stderr or e.stdout or "").strip()
            return detail or f"exit status {e.returncode}"
        return str(e)

    def list_tags(self, address: str) -> List[str]:
        """
        List all tags of a repository.

        Args:
            address: Repository address (host/path)

        Raises:
            ListError: If the tags cannot be listed
        """
        try:
            output = self._run(["ls", address])
        except (subprocess.SubprocessError, OSError) as e:
            raise ListError(f"repo list tags {address}: {self._describe(e)}") from e

        return [line.strip() for line in output.splitlines()]

    def copy(self, source_ref: str, target_ref: str) -> None:
        """
        Copy an image reference to another reference.

        Raises:
            CopyError: If the copy fails
        """
        try:
            self._run(["copy", source_ref, target_ref])
        except (subprocess.SubprocessError, OSError) as e:
            raise CopyError(
                f"repo copy tag {source_ref} -> {target_ref}: {self._describe(e)}"
            ) from e

    def copy_tag(self, tag: str, source: str, target: str) -> None:
        """Copy `source:tag` to `target:tag`."""
        self.copy(f"{source}:{tag}", f"{target}:{tag}")

    def set_credentials(self, host: str, username: str, password: str) -> None:
        """
        Store credentials for a registry host.

        Credentials are persisted in the user's docker config (as the
        docker CLI would do).

        Raises:
            AuthError: If credentials are incomplete or cannot be stored
        """
        if not username or not password:
            raise AuthError("host login: username and password required")

        server = host or DEFAULT_REGISTRY
        if server in DOCKER_HUB_HOSTS:
            server = DEFAULT_REGISTRY

        try:
            self._run(
                ["auth", "login", server, "--username", username, "--password-stdin"],
                input=password,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise AuthError(f"host auth {server}: {self._describe(e)}") from e

    def healthcheck(self, repository: Repository) -> None:
        """
        Check that the registry hosting `repository` is reachable.

        2xx and 401 (reachable, authentication required) are healthy.

        Raises:
            HealthcheckError: On connection failure or any other status
        """
        url = repository.healthcheck_url
        try:
            response = self.session.get(url, timeout=self.http_timeout)
        except requests.RequestException as e:
            raise HealthcheckError(f"Repo host healthcheck: {url}: {e}") from e

        status = response.status_code
        if 200 <= status <= 299 or status == 401:
            logger.debug(f"Healthcheck {url}: status {status}")
            return

        raise HealthcheckError(
            f"Repo host healthcheck: {url} status code {status} must be 2xx or 401"
        )
