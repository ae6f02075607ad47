# Listing renderer — turns provider entries into an HTML directory page.
# Created: 2026-10-17
#
# render_listing() filters and orders the entries, builds Row and Breadcrumb
# values, then serializes a ListingPage through a single Jinja2 template.
# The template environment escapes every interpolated value, so nothing
# upstream of serialize_page() produces markup.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from jinja2 import Environment, PackageLoader, StrictUndefined

from b2browse.config import BrowseConfig
from b2browse.entries import FileEntry, FolderEntry, RawEntry
from b2browse.errors import ListingNotFound
from b2browse.formatting import (
    ICON_FOLDER,
    ICON_UP,
    SEPARATOR,
    Breadcrumb,
    build_breadcrumbs,
    current_label,
    escape_html,
    exact_size,
    format_timestamp,
    human_size,
    icon_for,
)

logger = logging.getLogger(__name__)

HIDDEN_MARKER = "."
UP_HREF = ".."
UP_LABEL = "Up a Level"

ROW_UP = "up"
ROW_FOLDER = "folder"
ROW_FILE = "file"


@dataclass(frozen=True)
class Row:
    """One table row of the listing. All fields are plain text."""

    kind: str  # "up" | "folder" | "file"
    basename: str
    href: str
    icon: str
    display_size: str = ""
    exact_size: str = ""
    display_date: str = ""


@dataclass(frozen=True)
class ListingPage:
    title: str
    full_path: str
    breadcrumbs: list[Breadcrumb] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    site_title: str = "Index"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------
def is_hidden(basename: str) -> bool:
    """True if any segment of *basename* starts with the hidden marker."""
    return any(seg.startswith(HIDDEN_MARKER) for seg in basename.split(SEPARATOR))


def partition_entries(
    full_path: str, entries: list[RawEntry]
) -> tuple[list[FolderEntry], list[FileEntry]]:
    """Split *entries* into visible folders and files, keeping provider order.

    Entries whose basename is empty (the prefix's own marker object) or
    hidden are dropped.
    """
    prefix_length = len(full_path)
    folders: list[FolderEntry] = []
    files: list[FileEntry] = []

    for entry in entries:
        basename = entry.name[prefix_length:]
        if not basename:
            continue
        if is_hidden(basename):
            continue
        if isinstance(entry, FolderEntry):
            folders.append(entry)
        else:
            files.append(entry)

    return folders, files


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------
def _quote_key(key: str) -> str:
    return quote(key, safe="/")


def file_href(entry: FileEntry, config: BrowseConfig) -> str:
    """Absolute link to the object on the content host.

    Without a content host the link is root-relative to the listing host.
    """
    path = SEPARATOR + _quote_key(entry.name)
    if config.content_base_url:
        return config.content_base_url + path
    return path


def folder_row(entry: FolderEntry, prefix_length: int) -> Row:
    basename = entry.name[prefix_length:]
    return Row(kind=ROW_FOLDER, basename=basename, href=_quote_key(basename), icon=ICON_FOLDER)


def file_row(entry: FileEntry, prefix_length: int, config: BrowseConfig) -> Row:
    basename = entry.name[prefix_length:]
    return Row(
        kind=ROW_FILE,
        basename=basename,
        href=file_href(entry, config),
        icon=icon_for(basename),
        display_size=human_size(entry.size_bytes),
        exact_size=exact_size(entry.size_bytes),
        display_date=format_timestamp(entry.uploaded_at),
    )


def build_rows(full_path: str, entries: list[RawEntry], config: BrowseConfig) -> list[Row]:
    """Ordered rows for *full_path*: up-row, folders, then files.

    Raises ``ListingNotFound`` when nothing is left after filtering.
    """
    folders, files = partition_entries(full_path, entries)
    if not (folders or files):
        raise ListingNotFound(full_path)

    prefix_length = len(full_path)
    rows: list[Row] = []
    if full_path:
        rows.append(Row(kind=ROW_UP, basename=UP_LABEL, href=UP_HREF, icon=ICON_UP))
    rows.extend(folder_row(f, prefix_length) for f in folders)
    rows.extend(file_row(f, prefix_length, config) for f in files)
    return rows


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
_env = Environment(
    loader=PackageLoader("b2browse", "templates"),
    autoescape=False,
    finalize=escape_html,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def serialize_page(page: ListingPage) -> str:
    """Render *page* to a complete HTML document."""
    return _env.get_template("listing.html").render(page=page)


def render_listing(full_path: str, entries: list[RawEntry], config: BrowseConfig) -> str:
    """Build the HTML directory page for *full_path*.

    *full_path* is the decoded prefix without its leading separator
    (``""`` for the bucket root, otherwise ending in ``/``).
    """
    rows = build_rows(full_path, entries, config)
    page = ListingPage(
        title=current_label(full_path),
        full_path=full_path,
        breadcrumbs=build_breadcrumbs(full_path),
        rows=rows,
        site_title=config.site_title,
    )
    logger.debug("Rendering %d rows for %r", len(rows), full_path)
    return serialize_page(page)
