# Listing entries — wire schema and the folder/file union.
# Created: 2026-10-17
#
# b2_list_file_names returns one object per key. With a delimiter set,
# deeper keys are collapsed into synthetic entries whose action is "folder".
# Everything else ("upload", "hide", "start") is treated as a file.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, TypeAdapter, ValidationError

from b2browse.errors import UpstreamFailure

logger = logging.getLogger(__name__)

FOLDER_ACTION = "folder"


class B2FileInfo(BaseModel):
    """One entry of a ``b2_list_file_names`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    file_name: str = Field(alias="fileName")
    action: str = "upload"
    # Only meaningful for files; checked in to_entry()
    content_length: Any = Field(default=None, alias="contentLength")
    upload_timestamp: Any = Field(default=None, alias="uploadTimestamp")


class B2ListFileNamesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    files: list[B2FileInfo]
    next_file_name: str | None = Field(default=None, alias="nextFileName")


@dataclass(frozen=True)
class FolderEntry:
    """A synthetic prefix grouping."""

    name: str


@dataclass(frozen=True)
class FileEntry:
    """A stored object."""

    name: str
    size_bytes: int
    uploaded_at: int  # epoch milliseconds


RawEntry = Union[FolderEntry, FileEntry]

_SIZE = TypeAdapter(NonNegativeInt)
_TIMESTAMP = TypeAdapter(int)


def to_entry(info: B2FileInfo) -> RawEntry:
    """Folder entries drop whatever size or date the provider sent.

    Raises ``ValidationError`` when a file has an invalid size or date.
    """
    if info.action == FOLDER_ACTION:
        return FolderEntry(name=info.file_name)
    return FileEntry(
        name=info.file_name,
        size_bytes=_SIZE.validate_python(info.content_length or 0),
        uploaded_at=_TIMESTAMP.validate_python(info.upload_timestamp or 0),
    )


def parse_listing(payload: Any) -> list[RawEntry]:
    """Convert a decoded ``b2_list_file_names`` body into entries.

    Provider order is preserved. Raises ``UpstreamFailure`` (502) when the
    body does not have the expected shape.
    """
    try:
        response = B2ListFileNamesResponse.model_validate(payload)
        entries = [to_entry(info) for info in response.files]
    except ValidationError as e:
        logger.warning("Malformed listing response: %s", e)
        raise UpstreamFailure(502, "malformed_response", "Unexpected listing format") from e

    if response.next_file_name:
        logger.debug("Listing truncated, next file name %r ignored", response.next_file_name)

    return entries
