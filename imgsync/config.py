#!/usr/bin/env python3
"""
Configuration loading for imgsync.

The configuration is a YAML document describing the target repository,
the source repositories with their tag selectors, and the error policy:

    target:
      repository: mirror
      host: registry.example.com
    sources:
      - source:
          repository: library/busybox
        tags: ["latest"]
        latestSemverSync: true
    continueOnSyncError: false
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .domain.repository import Auth, Repository
from .domain.source import RunConfig, SourceSpec
from .exit_codes import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".imgsync.yaml"

_TRUE_VALUES = {"true", "yes", "on", "y"}
_FALSE_VALUES = {"false", "no", "off", "n", ""}


def get_config_location(path: Union[str, Path, None]) -> str:
    """
    Resolve the configuration file location.

    A path naming a .yaml/.yml file is used as-is, anything else is taken
    as the directory holding `.imgsync.yaml`.
    """
    location = str(path or "")
    if ".yaml" in location or ".yml" in location:
        return location
    return os.path.normpath(os.path.join(location, DEFAULT_CONFIG_FILENAME))


def load_config(path: Union[str, Path, None] = None) -> RunConfig:
    """
    Load and validate the configuration found at `path`.

    Raises:
        ConfigError: If the file cannot be read or is malformed
    """
    location = get_config_location(path)
    logger.debug(f"Loading configuration from {location}")

    try:
        with open(location, 'r') as f:
            # BaseLoader keeps every scalar as a string so tags such as
            # 1.10 are not turned into numbers
            document = yaml.load(f, Loader=yaml.BaseLoader)
    except OSError as e:
        raise ConfigError(f"reading config: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"unmarshal config: {e}") from e

    return parse_config(document)


def parse_config(document: Any) -> RunConfig:
    """
    Build a RunConfig from a parsed YAML document.

    Raises:
        ConfigError: If the document does not describe a valid configuration
    """
    if document is None or document == "":
        document = {}
    root = _as_mapping(document, "config")

    target = _parse_repository(root.get("target"), "target")

    sources = root.get("sources")
    if sources is None or sources == "":
        sources = []
    if not isinstance(sources, list):
        raise ConfigError("sources: expected a list")

    return RunConfig(
        target=target,
        sources=tuple(_parse_source(s, f"sources[{i}]") for i, s in enumerate(sources)),
        continue_on_sync_error=_as_bool(root.get("continueOnSyncError"), "continueOnSyncError"),
    )


def _parse_repository(value: Any, where: str) -> Repository:
    data = _as_mapping(value, where)

    repository = _as_str(data.get("repository"), f"{where}.repository")
    if not repository:
        raise ConfigError(f"{where}.repository: required")

    auth = _as_mapping(data.get("auth"), f"{where}.auth")
    nested = data.get("nestedRepositories")

    return Repository(
        repository=repository,
        host=_as_str(data.get("host"), f"{where}.host"),
        scheme=_as_str(data.get("scheme"), f"{where}.scheme"),
        auth=Auth(
            username=_as_str(auth.get("username"), f"{where}.auth.username"),
            password=_as_str(auth.get("password"), f"{where}.auth.password"),
        ),
        nested_repositories=None if nested in (None, "") else _as_bool(
            nested, f"{where}.nestedRepositories"
        ),
    )


def _parse_source(value: Any, where: str) -> SourceSpec:
    data = _as_mapping(value, where)
    semver_regex = _as_str(data.get("latestSemverRegex"), f"{where}.latestSemverRegex")

    return SourceSpec(
        source=_parse_repository(data.get("source"), f"{where}.source"),
        tags=_as_str_tuple(data.get("tags"), f"{where}.tags"),
        mutable_tags=_as_str_tuple(data.get("mutableTags"), f"{where}.mutableTags"),
        regex_tags=_as_str_tuple(data.get("regexTags"), f"{where}.regexTags"),
        latest_semver_sync=_as_bool(data.get("latestSemverSync"), f"{where}.latestSemverSync"),
        latest_semver_regex=semver_regex or None,
        omit_pre_release_tags=_as_bool(
            data.get("omitPreReleaseTags"), f"{where}.omitPreReleaseTags"
        ),
        omit_dashed_tags=_as_bool(data.get("omitDashedTags"), f"{where}.omitDashedTags"),
    )


def _as_mapping(value: Any, where: str) -> Dict[str, Any]:
    if value is None or value == "":
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where}: expected a mapping")
    return value


def _as_str(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        raise ConfigError(f"{where}: expected a string")
    return str(value)


def _as_str_tuple(value: Any, where: str) -> Tuple[str, ...]:
    if value is None or value == "":
        return ()
    if not isinstance(value, list):
        raise ConfigError(f"{where}: expected a list of strings")
    return tuple(_as_str(item, where) for item in value)


def _as_bool(value: Optional[Any], where: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower() if not isinstance(value, (list, dict)) else None
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{where}: expected a boolean, got {value!r}")
