"""
MeshFormat Header
=================
Reads the leading ``$MeshFormat`` block of an MSH file and decides how the
rest of the buffer has to be decoded.

The header is plain text in both encodings. In binary files it is followed by
the integer 1 written as four raw bytes, which tells the reader the byte order
of every binary record that follows.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from meshpreview.model.errors import (
    HeaderMissingError,
    InvalidEncodingFlagError,
    InvalidFloatWidthError,
    SectionSyntaxError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

MSH_VERSION = "2.2"
DATA_SIZE = 8

FILE_TYPE_ASCII = 0
FILE_TYPE_BINARY = 1

HEADER_START = b"$MeshFormat"
HEADER_END = b"$EndMeshFormat"

# TAB, LF, VT, FF, CR, SPACE
WHITESPACE = frozenset(b"\t\n\x0b\x0c\r ")


class Endianness(Enum):
    NONE = "none"
    LITTLE = "little"
    BIG = "big"

    @property
    def struct_prefix(self) -> str:
        """Byte order character understood by ``struct`` and NumPy dtypes."""
        return ">" if self is Endianness.BIG else "<"


@dataclass(frozen=True)
class MeshFormatHeader:
    """Decoded contents of the ``$MeshFormat`` block."""
    version: str
    is_ascii: bool
    float_byte_width: int
    endianness: Endianness = Endianness.NONE


def skip_whitespace(data: bytes, offset: int) -> int:
    """Return the first offset at or after ``offset`` that is not whitespace."""
    end = len(data)
    while offset < end and data[offset] in WHITESPACE:
        offset += 1
    return offset


def parse_header(data: bytes) -> tuple[MeshFormatHeader, int]:
    """
    Parse the ``$MeshFormat`` block at the start of ``data``.

    Args:
        data: The complete file contents.

    Returns:
        The decoded header and the offset of the first byte after
        ``$EndMeshFormat``.

    Raises:
        HeaderMissingError: If the buffer does not start with a MeshFormat block.
        UnsupportedVersionError: If the version is not 2.2.
        InvalidEncodingFlagError: If the file type is neither 0 nor 1.
        InvalidFloatWidthError: If the data size is not 8.
        SectionSyntaxError: If the block has the wrong number of fields.
    """
    start = skip_whitespace(data, 0)
    if not data.startswith(HEADER_START, start):
        raise HeaderMissingError(
            "Did not find header in msh file!", offset=start, excerpt=data[start:start + 40]
        )

    body_start = start + len(HEADER_START)
    if body_start < len(data) and data[body_start] not in WHITESPACE:
        raise HeaderMissingError(
            "Did not find header in msh file!", offset=start, excerpt=data[start:start + 40]
        )

    end = data.find(HEADER_END, body_start)
    if end < 0:
        raise HeaderMissingError("MeshFormat block is not terminated by $EndMeshFormat.", offset=start)

    fields = data[body_start:end].split()
    if len(fields) not in (3, 4):
        raise SectionSyntaxError(
            f"Header must contain exactly three or four fields, but has {len(fields)}.",
            offset=body_start,
            excerpt=data[body_start:end],
        )

    version = fields[0].decode("latin-1")
    if version != MSH_VERSION:
        raise UnsupportedVersionError(
            f"Only MSH version {MSH_VERSION} is supported, but file is {version}.", offset=body_start
        )

    try:
        file_type = int(fields[1])
    except ValueError:
        file_type = None
    if file_type not in (FILE_TYPE_ASCII, FILE_TYPE_BINARY):
        raise InvalidEncodingFlagError(
            "File type must be either 0 or 1.", offset=body_start, excerpt=fields[1]
        )

    try:
        data_size = int(fields[2])
    except ValueError:
        data_size = None
    if data_size != DATA_SIZE:
        raise InvalidFloatWidthError(
            f"Data size must be {DATA_SIZE}.", offset=body_start, excerpt=fields[2]
        )

    endianness = Endianness.NONE
    if file_type == FILE_TYPE_BINARY:
        if len(fields) != 4:
            raise SectionSyntaxError(
                "Binary header lacks the endianness marker.", offset=body_start, excerpt=data[body_start:end]
            )
        # The marker is the integer 1; its first byte is 1 only when little-endian.
        endianness = Endianness.LITTLE if fields[3][0] == 1 else Endianness.BIG

    header = MeshFormatHeader(
        version=version,
        is_ascii=file_type == FILE_TYPE_ASCII,
        float_byte_width=data_size,
        endianness=endianness,
    )
    rest = end + len(HEADER_END)
    logger.debug(f"Header {header} ends at byte {rest}")
    return header, rest
