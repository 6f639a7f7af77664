"""
Utility functions for ollamakit.
"""

import logging
import sys
from typing import Tuple

# Accept the library's WARN spelling alongside stdlib names.
_LEVEL_ALIASES = {"WARN": "WARNING"}


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    name = level.upper()
    name = _LEVEL_ALIASES.get(name, name)
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    # Reduce noise from third-party libraries unless debugging
    if name != "DEBUG":
        for noisy in ("httpx", "httpcore"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_length:
        return text
    return text[:max_length-3] + "..."


def parse_header(value: str) -> Tuple[str, str]:
    """Split ``NAME=VALUE`` (or ``NAME: VALUE``) into a stripped pair."""
    positions = [i for i in (value.find("="), value.find(":")) if i > 0]
    if not positions:
        raise ValueError(f"Invalid header {value!r}, expected NAME=VALUE")
    cut = min(positions)
    name, rest = value[:cut].strip(), value[cut + 1:].strip()
    if not name:
        raise ValueError(f"Invalid header {value!r}, expected NAME=VALUE")
    return name, rest
