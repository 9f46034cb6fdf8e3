"""
Packwright Config - layered settings for builders and resolvers.

Sources, lowest precedence first:

1. YAML / JSON files (``packwright.yaml`` in the working directory
   when no paths are given)
2. a ``.env`` file
3. ``PW_*`` environment variables (``__`` separates nested keys)
4. explicit overrides

Example::

    config = load_config(env_file=".env", overrides={"strict_resolution": True})
    config.repository_path  # ~/.m2/repository, expanded
"""

from dataclasses import dataclass, fields
from glob import glob
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional
import copy
import json
import logging
import os

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault

logger = logging.getLogger("packwright.config")

DEFAULT_CONFIG_FILE = "packwright.yaml"
DEFAULT_ENV_PREFIX = "PW_"

_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})


@dataclass
class PackwrightConfig:
    """Settings consumed by builders and dependency resolvers."""

    local_repository: str = "~/.m2/repository"
    strict_resolution: bool = False
    manifest_created_by: str = "packwright"

    @property
    def repository_path(self) -> Path:
        return Path(os.path.expanduser(self.local_repository))


class ConfigLoader:
    """
    Collects raw settings from every source into one nested mapping.

    The mapping may hold keys :class:`PackwrightConfig` does not know;
    they stay reachable through :meth:`get`.
    """

    def __init__(self, env_prefix: str = DEFAULT_ENV_PREFIX):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}
        # Unparsed text of top-level keys that last came from variables
        self._variable_text: Dict[str, str] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[Iterable[str]] = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        env_file: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Build a loader from all sources.

        Args:
            paths: File paths or glob patterns, applied in order.
            env_prefix: Prefix selecting environment variables.
            env_file: Optional ``.env`` file; ignored when missing.
            overrides: Values applied last.
        """
        loader = cls(env_prefix=env_prefix)
        patterns = list(paths or [])
        if not patterns and Path(DEFAULT_CONFIG_FILE).is_file():
            patterns = [DEFAULT_CONFIG_FILE]

        for pattern in patterns:
            for match in sorted(glob(pattern)):
                loader.merge(loader._read_file(Path(match)))
        if env_file and Path(env_file).is_file():
            loader.merge_variables(dotenv_values(env_file))
        loader.merge_variables(os.environ)
        if overrides:
            loader.merge(overrides)
        return loader

    # ── Sources ──────────────────────────────────────────────────────

    def _read_file(self, path: Path) -> Mapping[str, Any]:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            data = json.loads(text)
        elif path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            logger.debug("Ignoring config file with unknown suffix: %s", path)
            return {}
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), "top level must be a mapping")
        logger.debug("Loaded config file %s", path)
        return data

    def merge_variables(self, variables: Mapping[str, Optional[str]]) -> None:
        """Merge ``PREFIX_SECTION__KEY=value`` style variables."""
        for name, raw in variables.items():
            if raw is None or not name.startswith(self.env_prefix):
                continue
            *sections, leaf = name[len(self.env_prefix):].lower().split("__")
            if sections:
                self._variable_text.pop(sections[0], None)
            else:
                self._variable_text[leaf] = raw
            node = self.config_data
            for section in sections:
                child = node.get(section)
                if not isinstance(child, dict):
                    child = node[section] = {}
                node = child
            node[leaf] = self._parse_value(raw)

    def merge(self, data: Mapping[str, Any]) -> None:
        """Deep-merge *data* over the current settings."""
        for key in data:
            self._variable_text.pop(key, None)
        _deep_merge(self.config_data, data)

    @staticmethod
    def _parse_value(raw: str) -> Any:
        """Interpret an environment string as bool, number, JSON or text."""
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        for number in (int, float):
            try:
                return number(raw)
            except ValueError:
                pass
        if raw[:1] in ("{", "["):
            try:
                return json.loads(raw)
            except json.JSONDecodeError:
                return raw
        return raw

    # ── Access ───────────────────────────────────────────────────────

    def get(self, path: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``resolver.timeout``."""
        node: Any = self.config_data
        for key in path.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def packwright_config(self) -> PackwrightConfig:
        """
        Build a validated :class:`PackwrightConfig`.

        Values are converted to the field's type where that is lossless:
        a string field keeps the variable text as written, a bool field
        accepts 0/1 and the usual yes/no words.

        Raises:
            ConfigInvalidFault: If a known key holds a value that cannot
                be converted to its field's type.
        """
        values = {}
        for field_info in fields(PackwrightConfig):
            name = field_info.name
            if name not in self.config_data:
                continue
            values[name] = self._convert(name, self.config_data[name], field_info.type)
        return PackwrightConfig(**values)

    def _convert(self, name: str, value: Any, expected: Any) -> Any:
        if not isinstance(expected, type) or isinstance(value, expected):
            return value
        if expected is str and isinstance(value, (bool, int, float)):
            return self._variable_text.get(name, str(value))
        if expected is bool:
            if isinstance(value, int) and value in (0, 1):
                return bool(value)
            word = value.strip().lower() if isinstance(value, str) else None
            if word in _TRUE or word == "1":
                return True
            if word in _FALSE or word == "0":
                return False
        raise ConfigInvalidFault(
            name,
            f"expected {expected.__name__}, got {type(value).__name__}",
        )

    def to_dict(self) -> dict:
        return copy.deepcopy(self.config_data)


def _deep_merge(target: Dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            target[key] = dict(value) if isinstance(value, Mapping) else value


def load_config(**kwargs: Any) -> PackwrightConfig:
    """Load :class:`PackwrightConfig` from the default sources."""
    return ConfigLoader.load(**kwargs).packwright_config()
