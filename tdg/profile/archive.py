"""
Archive Codec

Versioned JSON archives for profiles and data sample parsers. Archives hold
only aggregate statistics, never the analyzed samples themselves.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from ..exceptions import FormatError
from .frequency import FrequencyModel, PatternEntry

logger = logging.getLogger(__name__)

ARCHIVE_VERSION = 1
ARCHIVE_SUFFIX = ".json"


def archive_path(path: Union[str, Path]) -> Path:
    """Append the archive suffix unless the path already carries it"""
    path = Path(path)
    if path.suffix.lower() != ARCHIVE_SUFFIX:
        path = path.with_name(path.name + ARCHIVE_SUFFIX)
    return path


def model_to_dict(model: FrequencyModel) -> Dict[str, Any]:
    return {"patterns": [entry.to_dict() for entry in model]}


def model_from_dict(data: Dict[str, Any]) -> FrequencyModel:
    if not isinstance(data, dict) or not isinstance(data.get("patterns"), list):
        raise FormatError("profile archive must contain a 'patterns' list")

    model = FrequencyModel()
    for raw in data["patterns"]:
        model.append_entry(PatternEntry.from_dict(raw))
    return model


def check_version(document: Any) -> Dict[str, Any]:
    if not isinstance(document, dict):
        raise FormatError("archive root must be a JSON object")

    version = document.get("version")
    if type(version) is not int or version != ARCHIVE_VERSION:
        raise FormatError(
            f"unsupported archive version {version!r}, expected {ARCHIVE_VERSION}"
        )
    return document


def write_archive(document: Dict[str, Any], path: Union[str, Path]) -> Path:
    """
    Write an archive document to disk

    Args:
        document: Archive body without the version key
        path: Target path, the archive suffix is appended when missing

    Returns:
        The path actually written

    Raises:
        OSError: The target cannot be created or written
    """
    target = archive_path(path)
    payload = {"version": ARCHIVE_VERSION, **document}

    try:
        with open(target, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
    except OSError as e:
        logger.error(f"Could not write archive {target}: {e}")
        raise

    logger.info(f"Successfully exported to {target}")
    return target


def read_archive(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read and version-check an archive document

    Raises:
        FormatError: The archive is absent, unreadable, truncated or of
            another version
    """
    target = archive_path(path)

    try:
        with open(target, "r", encoding="utf-8") as f:
            document = json.load(f)
    except FileNotFoundError as e:
        logger.error(f"Could not open archive {target}")
        raise FormatError(f"archive not found: {target}") from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read archive {target} because of {e}")
        raise FormatError(f"archive could not be read: {target}") from e
    except json.JSONDecodeError as e:
        logger.error(f"Archive {target} is not valid JSON: {e}")
        raise FormatError(f"archive is truncated or corrupt: {target}") from e

    logger.info(f"Successfully read archive {target}")
    return check_version(document)
