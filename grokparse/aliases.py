from __future__ import annotations

import logging
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)


def load_aliases(directory: str | Path) -> dict[str, str]:
    """Read every regular file in ``directory`` as ``<name> <definition>`` lines.

    Files are visited in sorted name order and later definitions replace
    earlier ones with the same name. Blank lines are ignored; any other line
    without a space is a malformed file and raises ConfigError.
    """
    path = Path(directory)
    if not path.exists():
        raise ConfigError(f"{path} patterns directory does not exist.")
    if not path.is_dir():
        raise ConfigError(f"{path} is not a directory.")

    aliases: dict[str, str] = {}
    for entry in sorted(path.iterdir(), key=lambda p: p.name):
        if not entry.is_file():
            continue
        loaded = _read_alias_file(entry)
        logger.debug("Loaded %d pattern(s) from %s", len(loaded), entry)
        aliases.update(loaded)
    logger.info("Loaded %d custom pattern(s) from %s", len(aliases), path)
    return aliases


def _read_alias_file(file_path: Path) -> dict[str, str]:
    aliases: dict[str, str] = {}
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            for line_number, raw_line in enumerate(f, start=1):
                line = raw_line.rstrip("\r\n")
                if not line.strip():
                    continue
                name, sep, definition = line.partition(" ")
                if not sep:
                    raise ConfigError(
                        f"{file_path}:{line_number}: expected '<name> <definition>', got {line!r}"
                    )
                aliases[name] = definition.lstrip()
    except UnicodeDecodeError as e:
        raise ConfigError(f"{file_path}: not valid UTF-8 ({e.reason})") from e
    return aliases
