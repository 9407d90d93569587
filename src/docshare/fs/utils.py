"""File type classification, listing-route mapping, and email cleanup."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable

# =============================================================================
# File types
# =============================================================================

FILE_TYPES: tuple[str, ...] = ("document", "image", "video", "audio", "other")

DOCUMENT_EXTENSIONS = {
    "pdf", "doc", "docx", "txt", "xls", "xlsx", "csv", "rtf", "ods", "ppt",
    "odp", "md", "html", "htm", "epub", "pages", "fig", "psd", "ai", "indd",
    "xd", "sketch", "afdesign", "afphoto",
}

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp", "svg", "webp"}

VIDEO_EXTENSIONS = {"mp4", "avi", "mov", "mkv", "webm"}

AUDIO_EXTENSIONS = {"mp3", "wav", "ogg", "flac"}

# Listing routes map to one or more stored file types.
ROUTE_TYPES: dict[str, tuple[str, ...]] = {
    "documents": ("document",),
    "images": ("image",),
    "media": ("video", "audio"),
    "others": ("other",),
}


def get_extension(name: str) -> str:
    """Return the lowercase extension of *name* without the dot."""
    _, ext = posixpath.splitext(name)
    return ext[1:].lower()


def get_file_type(name: str) -> tuple[str, str]:
    """Classify *name* and return ``(type, extension)``."""
    extension = get_extension(name)
    if not extension:
        return "other", ""
    if extension in DOCUMENT_EXTENSIONS:
        return "document", extension
    if extension in IMAGE_EXTENSIONS:
        return "image", extension
    if extension in VIDEO_EXTENSIONS:
        return "video", extension
    if extension in AUDIO_EXTENSIONS:
        return "audio", extension
    return "other", extension


def resolve_types(types: Iterable[str]) -> tuple[str, ...]:
    """Expand route names (``media`` etc.) into stored file types.

    A single name may be passed as a plain string.  Unknown values raise
    ``ValueError``.  Order is preserved and duplicates are dropped.
    """
    if isinstance(types, str):
        types = (types,)
    resolved: list[str] = []
    for value in types:
        expanded = ROUTE_TYPES.get(value, (value,))
        for t in expanded:
            if t not in FILE_TYPES:
                raise ValueError(f"Unknown file type: {value!r}")
            if t not in resolved:
                resolved.append(t)
    return tuple(resolved)


# =============================================================================
# Names
# =============================================================================


def apply_extension(name: str, extension: str) -> str:
    """Append ``.extension`` to *name* unless it already ends with it.

    The extension may be given with or without its leading dot.
    """
    ext = extension.lstrip(".")
    if not ext:
        return name
    suffix = f".{ext}"
    if name.endswith(suffix):
        return name
    return name + suffix


def normalize_emails(emails: Iterable[str]) -> list[str]:
    """Strip whitespace, drop blanks, and remove duplicates (first one wins)."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in emails:
        email = raw.strip()
        if not email or email in seen:
            continue
        seen.add(email)
        result.append(email)
    return result


def split_emails(text: str) -> list[str]:
    """Parse a comma separated email field into a clean list."""
    return normalize_emails(text.split(","))
