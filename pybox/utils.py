"""Utility functions for pybox."""

import os
import re
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

Content = Union[bytes, str, os.PathLike, BinaryIO]

# =============================================================================
# Attribute key normalization
# =============================================================================

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Server field names that denote the same attribute
KEY_ALIASES: dict[str, str] = {
    "parent_folder": "parent",
    "item_collection": "items",
}


def normalize_key(key: Any) -> str:
    """Normalize a server field name to its canonical attribute name.

    Args:
        key: Field name as sent by the server

    Returns:
        Lower snake_case name, with known aliases resolved

    Examples:
        >>> normalize_key("parentFolder")
        'parent'
        >>> normalize_key("created-at")
        'created_at'
        >>> normalize_key("sha1")
        'sha1'
    """
    name = str(key).strip()
    name = _CAMEL_BOUNDARY.sub("_", name)
    name = name.replace("-", "_").replace(" ", "_").lower()
    return KEY_ALIASES.get(name, name)


# =============================================================================
# Timestamp parsing utilities
# =============================================================================


def parse_iso_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO format timestamp from the Box API.

    Args:
        timestamp_str: ISO format timestamp (e.g., "2012-03-14T10:30:00-07:00")

    Returns:
        Timezone-aware datetime when the string carries an offset, naive
        datetime otherwise, or None if parsing fails
    """
    if not timestamp_str or not isinstance(timestamp_str, str):
        return None

    # The 'Z' suffix indicates UTC time
    if timestamp_str.endswith("Z"):
        timestamp_str = timestamp_str[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(timestamp_str)
    except ValueError:
        # Try without fractional seconds
        if "." in timestamp_str:
            head, _, tail = timestamp_str.partition(".")
            offset = re.search(r"[+-]\d{2}:\d{2}$", tail)
            try:
                return datetime.fromisoformat(head + (offset.group(0) if offset else ""))
            except ValueError:
                return None
        return None


# =============================================================================
# Upload content helpers
# =============================================================================


def read_content(content: Content, name: Optional[str] = None) -> tuple[str, bytes]:
    """Read upload content into memory.

    Args:
        content: Raw bytes, a path to a local file, or a binary file object
        name: File name to use (defaults to the path's or file object's name)

    Returns:
        Tuple of (file_name, data)

    Raises:
        TypeError: If content is of an unsupported type
        OSError: If a local file cannot be read
    """
    if isinstance(content, (bytes, bytearray)):
        return (name or "upload.bin", bytes(content))

    if isinstance(content, (str, os.PathLike)):
        path = Path(content)
        with open(path, "rb") as f:
            return (name or path.name, f.read())

    if hasattr(content, "read"):
        data = content.read()
        if isinstance(data, str):
            raise TypeError("File object must be opened in binary mode")
        file_name = name or os.path.basename(getattr(content, "name", "") or "")
        return (file_name or "upload.bin", data)

    raise TypeError(f"Unsupported upload content type: {type(content).__name__}")


# =============================================================================
# XML response parsing (v1 REST endpoint)
# =============================================================================


def xml_to_dict(element: ET.Element) -> Any:
    """Convert an XML element into plain Python values.

    Leaf elements become their text (or None when empty). Elements with
    children become dicts; a tag repeated among siblings becomes a list.

    Examples:
        >>> xml_to_dict(ET.fromstring("<r><status>ok</status></r>"))
        {'status': 'ok'}
    """
    children = list(element)
    if not children:
        text = element.text.strip() if element.text else ""
        return text or None

    result: dict[str, Any] = {}
    for child in children:
        value = xml_to_dict(child)
        if child.tag in result:
            existing = result[child.tag]
            if not isinstance(existing, list):
                result[child.tag] = [existing]
            result[child.tag].append(value)
        else:
            result[child.tag] = value
    return result
