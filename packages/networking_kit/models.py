"""Value types shared by the request executor and the multipart builder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, NamedTuple, Sequence, Union

import httpx


class DocumentKind(str, Enum):
    """Attachment content category controlling filename suffix and MIME type."""

    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    GIF = "GIF"
    PDF = "PDF"
    TEXT = "TEXT"

    @property
    def extension(self) -> str:
        """Return the filename extension, without the dot."""
        return _KIND_FORMATS[self][0]

    @property
    def mime_type(self) -> str:
        """Return the part content type."""
        return _KIND_FORMATS[self][1]


_KIND_FORMATS: dict[DocumentKind, tuple[str, str]] = {
    DocumentKind.IMAGE: ("jpg", "image/jpg"),
    DocumentKind.VIDEO: ("mp4", "video/mp4"),
    DocumentKind.GIF: ("gif", "image/gif"),
    DocumentKind.PDF: ("pdf", "application/pdf"),
    DocumentKind.TEXT: ("txt", "text/plain"),
}


@dataclass(frozen=True, slots=True)
class Attachment:
    """One file payload for a multipart upload."""

    data: bytes
    kind: DocumentKind


class MultipartResult(NamedTuple):
    """Raw outcome of one upload; status and body are left to the caller."""

    body: bytes | None
    response: httpx.Response | None


Primitive = Union[str, int, float, bool, None]
ParameterValue = Union[Primitive, bytes, bytearray, Attachment, Sequence[Attachment]]
RequestParameters = Mapping[str, ParameterValue]
Headers = Mapping[str, str]
ProgressObserver = Callable[[float], None]
