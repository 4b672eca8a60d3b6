"""
Parse Errors
============
Every failure of a parse is reported as an ``MshError``. The base class
carries the error kind plus the diagnostic payload (byte offset into the
input and an excerpt of the offending text) so callers can either catch one
specific subclass or catch ``MshError`` and switch on ``kind``.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

EXCERPT_LENGTH = 40


class MshErrorKind(Enum):
    HEADER_MISSING = "HeaderMissing"
    UNSUPPORTED_VERSION = "UnsupportedVersion"
    INVALID_ENCODING_FLAG = "InvalidEncodingFlag"
    INVALID_FLOAT_WIDTH = "InvalidFloatWidth"
    SECTION_SYNTAX_ERROR = "SectionSyntaxError"
    SECTION_MISSING = "SectionMissing"
    UNKNOWN_ELEMENT_TYPE = "UnknownElementType"
    DANGLING_NODE_REFERENCE = "DanglingNodeReference"
    DUPLICATE_NODE_ID = "DuplicateNodeId"
    TRUNCATED_BINARY_DATA = "TruncatedBinaryData"


def make_excerpt(text: str | bytes, limit: int = EXCERPT_LENGTH) -> str:
    """Shorten offending input to a printable one-line excerpt."""
    if isinstance(text, (bytes, bytearray, memoryview)):
        text = bytes(text[:limit]).decode("latin-1")
    excerpt = text[:limit]
    if len(text) > limit:
        excerpt += "..."
    return repr(excerpt)


class MshError(ValueError):
    """Base class for every error raised while parsing an MSH file."""

    kind: MshErrorKind = MshErrorKind.SECTION_SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        excerpt: Optional[str | bytes] = None,
    ) -> None:
        self.message = message
        self.offset = offset
        self.excerpt = make_excerpt(excerpt) if excerpt is not None else None
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"[{self.kind.value}] {self.message}"
        if self.offset is not None:
            text += f" (at byte {self.offset})"
        if self.excerpt is not None:
            text += f": {self.excerpt}"
        return text


class HeaderMissingError(MshError):
    kind = MshErrorKind.HEADER_MISSING


class UnsupportedVersionError(MshError):
    kind = MshErrorKind.UNSUPPORTED_VERSION


class InvalidEncodingFlagError(MshError):
    kind = MshErrorKind.INVALID_ENCODING_FLAG


class InvalidFloatWidthError(MshError):
    kind = MshErrorKind.INVALID_FLOAT_WIDTH


class SectionSyntaxError(MshError):
    kind = MshErrorKind.SECTION_SYNTAX_ERROR


class SectionMissingError(MshError):
    kind = MshErrorKind.SECTION_MISSING


class UnknownElementTypeError(MshError):
    kind = MshErrorKind.UNKNOWN_ELEMENT_TYPE


class DanglingNodeReferenceError(MshError):
    kind = MshErrorKind.DANGLING_NODE_REFERENCE


class DuplicateNodeIdError(MshError):
    kind = MshErrorKind.DUPLICATE_NODE_ID


class TruncatedBinaryDataError(MshError):
    kind = MshErrorKind.TRUNCATED_BINARY_DATA
