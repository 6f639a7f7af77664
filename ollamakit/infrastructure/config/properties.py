"""
Properties-file support for the settings loader.

Reads the Java ``.properties`` subset used by ``ollamakit.properties`` and
exposes it to pydantic-settings as a settings source. Field ``foo_bar`` maps
to key ``ollama.foo.bar`` and to environment variable ``OLLAMAKIT_FOO_BAR``.
"""

from __future__ import annotations
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "ollamakit.properties"
CONFIG_FILE_ENV = "OLLAMAKIT_CONFIG_FILE"
ENV_PREFIX = "OLLAMAKIT_"
KEY_PREFIX = "ollama."

_PAIR_RE = re.compile(r"^(?P<key>(?:\\.|[^=:\s\\])+)\s*(?:[=:]\s*|\s+|$)(?P<value>.*)$", re.DOTALL)
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def property_key(field_name: str) -> str:
    """``connection_timeout`` -> ``ollama.connection.timeout``."""
    return KEY_PREFIX + field_name.replace("_", ".")


def env_name(key: str) -> str:
    """``ollama.connection.timeout`` -> ``OLLAMAKIT_CONNECTION_TIMEOUT``."""
    if key.startswith(KEY_PREFIX):
        key = key[len(KEY_PREFIX):]
    return ENV_PREFIX + key.replace(".", "_").upper()


def key_from_env(name: str) -> str:
    """Inverse of :func:`env_name`."""
    return KEY_PREFIX + name[len(ENV_PREFIX):].lower().replace("_", ".")


def _unescape(text: str) -> str:
    def _sub(match: "re.Match[str]") -> str:
        ch = match.group(1)
        return _ESCAPES.get(ch, ch)
    return re.sub(r"\\(.)", _sub, text)


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def parse_properties(text: str) -> Dict[str, str]:
    """Parse ``.properties`` text into a dict. Later keys win."""
    props: Dict[str, str] = {}
    pending = ""
    for raw in text.splitlines():
        line = raw.strip()
        if not pending and (not line or line[0] in "#!"):
            continue
        if _continues(line):
            pending += line[:-1]
            continue
        logical = pending + line
        pending = ""
        match = _PAIR_RE.match(logical)
        if not match:
            continue
        props[_unescape(match.group("key"))] = _unescape(match.group("value").strip())
    if pending:
        match = _PAIR_RE.match(pending)
        if match:
            props[_unescape(match.group("key"))] = _unescape(match.group("value").strip())
    return props


def config_file_path() -> Tuple[Path, bool]:
    """Return the properties path and whether it was named explicitly."""
    explicit = os.getenv(CONFIG_FILE_ENV)
    if explicit and explicit.strip():
        return Path(explicit.strip()), True
    return Path(DEFAULT_CONFIG_FILE), False


def load_properties(path: Optional[Path] = None) -> Dict[str, str]:
    """Read the properties file; a missing or unreadable file yields ``{}``."""
    explicit = path is not None
    if path is None:
        path, explicit = config_file_path()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        if explicit:
            logger.warning(f"Could not load configuration file {path}, using defaults: {exc}")
        else:
            logger.debug(f"No configuration file at {path}, using defaults")
        return {}
    return parse_properties(text)


class PropertiesFileSource(PydanticBaseSettingsSource):
    """Settings source backed by the properties file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Optional[Path] = None):
        super().__init__(settings_cls)
        self._properties = load_properties(path)

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self._properties.get(property_key(field_name)), field_name, False

    def __call__(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[key] = value
        return data
