"""
Reading and writing the thumbnail provenance records of a PNG file.

A PNG file is the 8-byte signature followed by chunks, each one a 4-byte
big-endian payload length, a 4-byte ASCII type, the payload, and a CRC-32
taken over type and payload. Cached thumbnails carry two ``tEXt`` chunks,
``Thumb::URI`` and ``Thumb::MTime``, whose payload is ``key NUL value``.
See https://specifications.freedesktop.org/thumbnail-spec/ and
https://www.w3.org/TR/PNG/.

Neither direction decodes pixel data.
"""
import os
import struct
import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional, Union

from core.crc import Crc32, default_crc

logger = logging.getLogger(__name__)

PNG_SIGNATURE = bytes([137, 80, 78, 71, 13, 10, 26, 10])
TEXT_CHUNK_TYPE = b"tEXt"
URI_KEY = "Thumb::URI"
MTIME_KEY = "Thumb::MTime"

# Signature + IHDR (length, type, 13-byte payload, CRC).
INJECT_POS = len(PNG_SIGNATURE) + (4 + 4 + 13 + 4)

_CHUNK_HEADER = struct.Struct(">I4s")
_CRC = struct.Struct(">I")


class PngFormatError(ValueError):
    """The file does not start with a PNG signature."""


class ShortWriteError(OSError):
    """The underlying sink accepted fewer bytes than it was given."""


@dataclass(frozen=True)
class TextChunk:
    key: str
    value: str
    crc_ok: bool


def _encode(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    # why: local paths may hold undecodable bytes; surrogateescape restores them verbatim
    return value.encode("utf-8", "surrogateescape")


def text_chunk_crc(payload: bytes, crc: Crc32 = default_crc) -> int:
    return crc.checksum(crc.checksum(0, TEXT_CHUNK_TYPE), payload)


def build_text_chunk(key: Union[str, bytes], value: Union[str, bytes], crc: Crc32 = default_crc) -> bytes:
    """Serialise one complete ``tEXt`` chunk holding ``key NUL value``."""
    payload = _encode(key) + b"\0" + _encode(value)
    return (_CHUNK_HEADER.pack(len(payload), TEXT_CHUNK_TYPE)
            + payload
            + _CRC.pack(text_chunk_crc(payload, crc)))


def _read_exact(f: BinaryIO, n: int) -> Optional[bytes]:
    data = f.read(n)
    if data is None or len(data) != n:
        return None
    return data


def _remaining(f: BinaryIO) -> int:
    return os.fstat(f.fileno()).st_size - f.tell()


def verify_provenance(path: str, expected_uri: Union[str, bytes], expected_mtime: int,
                      crc: Crc32 = default_crc) -> bool:
    """
    True if ``path`` holds CRC-valid ``Thumb::URI`` and ``Thumb::MTime`` records
    whose values start with ``expected_uri`` and the decimal ``expected_mtime``.

    Returns as soon as both records have matched. Any I/O error, truncation or
    bad signature yields False.
    """
    uri_expected = _encode(expected_uri)
    mtime_expected = str(int(expected_mtime)).encode("ascii")
    uri_key = URI_KEY.encode("ascii")
    mtime_key = MTIME_KEY.encode("ascii")
    uri_match = False
    mtime_match = False

    try:
        with open(path, "rb") as f:
            if _read_exact(f, len(PNG_SIGNATURE)) != PNG_SIGNATURE:
                return False

            while True:
                header = _read_exact(f, _CHUNK_HEADER.size)
                if header is None:
                    return False
                length, chunk_type = _CHUNK_HEADER.unpack(header)

                if chunk_type != TEXT_CHUNK_TYPE:
                    f.seek(length + _CRC.size, os.SEEK_CUR)
                    continue

                if length + _CRC.size > _remaining(f):
                    return False
                payload = _read_exact(f, length)
                stored_crc = _read_exact(f, _CRC.size)
                if payload is None or stored_crc is None:
                    return False
                if _CRC.unpack(stored_crc)[0] != text_chunk_crc(payload, crc):
                    continue

                key, sep, value = payload.partition(b"\0")
                if not sep:
                    continue
                # Prefix comparison: trailing bytes after the expected value are not checked.
                if key == uri_key:
                    uri_match = value.startswith(uri_expected)
                elif key == mtime_key:
                    mtime_match = value.startswith(mtime_expected)

                if uri_match and mtime_match:
                    return True
    except OSError as e:
        logger.debug(f"Could not read provenance from {path}: {e}")
        return False


def iter_text_chunks(path: str, crc: Crc32 = default_crc) -> Iterator[TextChunk]:
    """Yield every ``tEXt`` chunk of a PNG file. Stops quietly at a truncated chunk."""
    with open(path, "rb") as f:
        if _read_exact(f, len(PNG_SIGNATURE)) != PNG_SIGNATURE:
            raise PngFormatError(f"Not a PNG file: {path}")
        while True:
            header = _read_exact(f, _CHUNK_HEADER.size)
            if header is None:
                return
            length, chunk_type = _CHUNK_HEADER.unpack(header)
            if chunk_type != TEXT_CHUNK_TYPE:
                f.seek(length + _CRC.size, os.SEEK_CUR)
                continue
            if length + _CRC.size > _remaining(f):
                return
            payload = _read_exact(f, length)
            stored_crc = _read_exact(f, _CRC.size)
            if payload is None or stored_crc is None:
                return
            key, _, value = payload.partition(b"\0")
            yield TextChunk(
                key=key.decode("latin-1"),
                value=value.decode("utf-8", "replace"),
                crc_ok=_CRC.unpack(stored_crc)[0] == text_chunk_crc(payload, crc),
            )


class ProvenanceWriter:
    """
    Write-only byte stream that forwards an encoder's PNG output to ``sink``
    and splices the ``Thumb::URI`` and ``Thumb::MTime`` chunks in right after
    IHDR.

    Precondition: the encoder writes the PNG signature and then a 13-byte
    IHDR chunk before anything else. This is not re-validated; the chunks are
    inserted at byte offset ``INJECT_POS`` of the encoder's output however its
    writes happen to be split.

    No ``fileno()`` is exposed, so encoders cannot write around the splice.
    """

    def __init__(self, sink: BinaryIO, uri: Union[str, bytes], mtime: Union[int, str],
                 crc: Crc32 = default_crc):
        self._sink = sink
        self._records = (
            build_text_chunk(URI_KEY, uri, crc)
            + build_text_chunk(MTIME_KEY, str(mtime), crc)
        )
        self.bytes_written = 0
        self.injected = False

    def _write_all(self, data) -> None:
        written = self._sink.write(data)
        if written != len(data):
            raise ShortWriteError(f"Short write: {written} of {len(data)} bytes")

    def write(self, data) -> int:
        view = memoryview(data).cast("B")
        length = len(view)

        if not self.injected and self.bytes_written + length >= INJECT_POS:
            head = INJECT_POS - self.bytes_written
            if head:
                self._write_all(view[:head])
            self._write_all(self._records)
            self.bytes_written = INJECT_POS
            self.injected = True
            view = view[head:]

        if len(view):
            self._write_all(view)
            self.bytes_written += len(view)
        return length

    def writable(self) -> bool:
        return True

    def flush(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()
