"""Configuration loading: YAML document of named configurations.

The document maps configuration names to settings. ``default`` is required;
a named configuration is layered over it one top-level key at a time, so a
nested mapping such as ``limits`` replaces the default's mapping wholesale.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

import jsonschema
import yaml

from nginx_digest.filters import TimeWindow
from nginx_digest.stats import RankingConfig
from nginx_digest.timeparse import TimeParseError, parse_bound

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "default"
DEFAULT_CONFIG_FILE = "config.yml"

_NON_EMPTY_STRING = {"type": "string", "minLength": 1}

CONFIG_SCHEMA = {
    "type": "object",
    "required": ["format", "source", "template"],
    "properties": {
        "format": _NON_EMPTY_STRING,
        "source": {
            "oneOf": [
                _NON_EMPTY_STRING,
                {"type": "array", "items": _NON_EMPTY_STRING, "minItems": 1},
            ]
        },
        "template": _NON_EMPTY_STRING,
        "time_local": {
            "type": ["object", "null"],
            "properties": {"from": {}, "to": {}},
            "additionalProperties": False,
        },
        "limits": {
            "type": ["object", "null"],
            "properties": {
                "top_problems": {"type": ["integer", "null"], "minimum": 0},
                "min_count": {"type": ["integer", "null"], "minimum": 1},
            },
            "additionalProperties": False,
        },
    },
}


class ConfigLoadError(Exception):
    """Raised when the configuration file cannot be read or selected from."""


class ConfigValidationError(Exception):
    """Raised when the selected configuration has an invalid shape or value."""

    def __init__(self, name: str, errors: list[str]):
        super().__init__(f"Configuration '{name}' is invalid: " + "; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class DigestConfig:
    name: str
    log_format: str
    sources: tuple[str, ...]
    template: str
    window: TimeWindow = field(default_factory=TimeWindow)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    settings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


def load_yaml(path: str) -> dict:
    """Read the configuration document; it must be a mapping with a default entry."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read configuration file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(document, dict):
        raise ConfigLoadError(f"Configuration file {path} must contain a mapping of named configurations")
    if DEFAULT_CONFIG_NAME not in document:
        raise ConfigLoadError(f"No '{DEFAULT_CONFIG_NAME}' configuration found in {path}")
    logger.debug("Loaded configuration file %s", path)
    return document


def select_configuration(document: Mapping[str, Any], name: str) -> dict:
    """Shallow-merge the named configuration over the default one."""
    if name not in document:
        available = "\n".join(str(k) for k in document)
        raise ConfigLoadError(f"No configuration named {name}, available configurations are:\n{available}")

    merged = {}
    for key in dict.fromkeys([DEFAULT_CONFIG_NAME, name]):
        section = document[key]
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ConfigValidationError(key, ["configuration must be a mapping"])
        merged.update(section)
    return merged


def validate_settings(settings: Mapping[str, Any], name: str) -> None:
    validator = jsonschema.Draft202012Validator(CONFIG_SCHEMA)
    errors = []
    for error in sorted(validator.iter_errors(settings), key=lambda e: [str(p) for p in e.path]):
        where = ".".join(str(p) for p in error.path)
        errors.append(f"{where}: {error.message}" if where else error.message)
    if errors:
        raise ConfigValidationError(name, errors)


def build_config(settings: Mapping[str, Any], name: str, now: datetime | None = None) -> DigestConfig:
    """Validate merged settings and turn them into a DigestConfig."""
    validate_settings(settings, name)

    time_local = dict(settings.get("time_local") or {})
    try:
        since = parse_bound(time_local.get("from"), now)
        until = parse_bound(time_local.get("to"), now)
    except TimeParseError as exc:
        raise ConfigValidationError(name, [f"time_local: {exc}"]) from exc
    if since is not None and until is not None and since > until:
        logger.warning("time_local.from (%s) is later than time_local.to (%s)", since, until)

    limits = settings.get("limits") or {}
    source = settings["source"]
    resolved = dict(settings)
    resolved["time_local"] = {"from": since, "to": until}

    return DigestConfig(
        name=name,
        log_format=settings["format"],
        sources=(source,) if isinstance(source, str) else tuple(source),
        template=settings["template"],
        window=TimeWindow(since=since, until=until),
        ranking=RankingConfig(limit=limits.get("top_problems"), min_count=limits.get("min_count")),
        settings=MappingProxyType(resolved),
    )


def load_config(path: str = DEFAULT_CONFIG_FILE, name: str = DEFAULT_CONFIG_NAME, now: datetime | None = None) -> DigestConfig:
    document = load_yaml(path)
    return build_config(select_configuration(document, name), name, now)
