"""
JSON Snapshot Files
===================

Read and write whole-state JSON snapshots.

Writes are atomic: the payload goes to a sibling ``.tmp`` file which then
replaces the target with ``os.replace``. A crash at any point leaves either
the previous complete file or the new complete file on disk.

Nothing here raises. Reads fall back to a default (cold cache) and failed
writes are logged; the caller's in-memory state stays authoritative.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def temp_path_for(path: PathLike) -> Path:
    """Sibling temp file used while writing ``path``."""
    path = Path(path)
    return path.with_name(path.name + ".tmp")


def read_snapshot(path: PathLike, default: Any = None) -> Any:
    """
    Load a JSON snapshot.

    Args:
        path: Snapshot file path
        default: Value returned when the file is missing or unreadable

    Returns:
        Decoded JSON, or ``default`` on any I/O or parse error
    """
    path = Path(path)

    if not path.exists():
        logger.info(f"Snapshot file does not exist, starting with empty state file={path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse snapshot file={path}: {e}")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read snapshot file={path}: {e}")

    return default


def write_snapshot(path: PathLike, payload: Any) -> bool:
    """
    Atomically replace ``path`` with the JSON encoding of ``payload``.

    Args:
        path: Snapshot file path
        payload: JSON-serializable value

    Returns:
        True if the new snapshot is in place, False otherwise
    """
    path = Path(path)
    temp_file = temp_path_for(path)

    try:
        data = json.dumps(payload, indent=2)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize snapshot file={path}: {e}")
        return False

    # Write to temp file first
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except OSError as e:
        logger.error(f"Failed to write temp file file={temp_file}: {e}")
        return False

    try:
        os.replace(temp_file, path)
    except OSError as e:
        logger.error(f"Failed to replace {path} with temp file: {e}")
        try:
            temp_file.unlink()
        except OSError:
            logger.warning(f"Could not remove orphaned temp file file={temp_file}")
        return False

    logger.debug(f"Snapshot saved file={path}")
    return True
