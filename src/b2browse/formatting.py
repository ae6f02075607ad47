"""
Pure formatting helpers for listing pages.
Created: 2026-10-17

Byte sizes, timestamps, breadcrumbs, icon classes and HTML escaping.
None of these do any I/O.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime
from urllib.parse import quote

SEPARATOR = "/"
ROOT_LABEL = "/"

# ---------------------------------------------------------------------------
# Sizes
# ---------------------------------------------------------------------------
KIB = 1024
MIB = 1048576
GIB = 1073741824
TIB = 1099511627776

# Thresholds are strict: exactly 1 MiB still renders as KiB.
_SIZE_STEPS: tuple[tuple[int, int, int, str], ...] = (
    # (threshold, divisor, decimals, unit)
    (TIB, TIB, 2, "TiB"),
    (GIB, GIB, 2, "GiB"),
    (MIB, MIB, 1, "MiB"),
    (4 * KIB, KIB, 1, "KiB"),
)


def human_size(num_bytes: int) -> str:
    """Round *num_bytes* to a binary unit.

    ``4404019`` → ``"4.2 MiB"``, ``5001708000`` → ``"4.66 GiB"``.
    Anything up to and including 4 KiB is shown as plain bytes.
    """
    for threshold, divisor, decimals, unit in _SIZE_STEPS:
        if num_bytes > threshold:
            return f"{num_bytes / divisor:.{decimals}f} {unit}"
    return f"{num_bytes} B"


def exact_size(num_bytes: int) -> str:
    """``1234`` → ``"1,234 bytes"``; ``1`` → ``"1 byte"``."""
    unit = "byte" if num_bytes == 1 else "bytes"
    return f"{num_bytes:,} {unit}"


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------
def format_timestamp(epoch_ms: int) -> str:
    """Epoch milliseconds → ``YYYY-MM-DD HH:MM:SS`` in UTC."""
    ts = datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)
    return ts.strftime("%Y-%m-%d %H:%M:%S")


# ---------------------------------------------------------------------------
# Breadcrumbs
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Breadcrumb:
    label: str
    href: str  # cumulative path, "/" for the root

    @property
    def link(self) -> str:
        """Root-relative URL for the crumb."""
        if self.href == SEPARATOR:
            return SEPARATOR
        return SEPARATOR + quote(self.href, safe=SEPARATOR)


def build_breadcrumbs(full_path: str) -> list[Breadcrumb]:
    """Split *full_path* into cumulative links, starting at the root.

    ``"a/b/"`` → ``[("/", "/"), ("a", "a/"), ("b", "a/b/")]``.
    """
    crumbs = [Breadcrumb(label=ROOT_LABEL, href=SEPARATOR)]
    cumulative = ""
    for segment in full_path.split(SEPARATOR):
        if not segment:
            continue
        cumulative += segment + SEPARATOR
        crumbs.append(Breadcrumb(label=segment, href=cumulative))
    return crumbs


def current_label(full_path: str) -> str:
    """Last path segment of *full_path*, or the root label."""
    segments = [s for s in full_path.split(SEPARATOR) if s]
    return segments[-1] if segments else ROOT_LABEL


# ---------------------------------------------------------------------------
# Icons (Font Awesome 4.7 names, without the "fa-" prefix)
# ---------------------------------------------------------------------------
ICON_UP = "level-up"
ICON_FOLDER = "folder-o"
ICON_FILE = "file-o"

ICON_FAMILIES: dict[str, frozenset[str]] = {
    "file-image-o": frozenset(
        {"jpg", "jpeg", "png", "bmp", "tif", "tiff", "gif", "webp", "tga", "cr2", "nef",
         "ico", "svg", "heic"}
    ),
    "file-text-o": frozenset({"pub", "txt", "ini", "cfg", "conf", "md", "log", "nfo"}),
    "file-video-o": frozenset({"mp4", "mkv", "wmv", "flv", "hls", "ogv", "avi", "mov", "webm"}),
    "file-audio-o": frozenset({"mp3", "wma", "flac", "ogg", "aac", "m4a", "wav", "opus"}),
    "file-archive-o": frozenset({"zip", "tgz", "gz", "tar", "7z", "rar", "xz", "bz2", "zst"}),
    "file-word-o": frozenset({"doc", "docx", "odt", "rtf"}),
    "file-excel-o": frozenset({"xls", "xlsx", "ods"}),
    "file-powerpoint-o": frozenset({"ppt", "pptx", "odp"}),
    "file-pdf-o": frozenset({"pdf"}),
    "file-code-o": frozenset(
        {"css", "js", "ts", "html", "htm", "json", "xml", "yml", "yaml", "py", "sh", "c",
         "h", "cpp", "go", "rs", "java", "rb", "php"}
    ),
    "table": frozenset({"csv", "tsv"}),
    "certificate": frozenset({"sig", "asc", "gpg", "sha1", "sha256", "sha512", "md5"}),
}

_ICON_BY_EXTENSION: dict[str, str] = {
    ext: icon for icon, extensions in ICON_FAMILIES.items() for ext in extensions
}


def icon_for(basename: str) -> str:
    """Icon class for a file *basename*, by extension (case-insensitive)."""
    ext = os.path.splitext(basename)[1].lstrip(".").lower()
    return _ICON_BY_EXTENSION.get(ext, ICON_FILE)


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------
_HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_ESCAPE_TABLE = str.maketrans(_HTML_ENTITIES)


def escape_html(value: object) -> str:
    """Escape *value* for element text or quoted attribute values."""
    if value is None:
        return ""
    return str(value).translate(_ESCAPE_TABLE)
