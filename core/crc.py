"""Table-driven CRC-32 as used for PNG chunk integrity (PNG spec, Annex D)."""
import threading
from typing import List, Optional

_POLYNOMIAL = 0xEDB88320
_MASK = 0xFFFFFFFF


class Crc32:
    """Reflected CRC-32 with a lazily built 256-entry lookup table.

    ``checksum`` takes a seed so a region split across two buffers can be
    checksummed in two calls::

        crc.checksum(crc.checksum(0, b"tEXt"), payload) == crc.checksum(0, b"tEXt" + payload)
    """

    def __init__(self):
        self._table: Optional[List[int]] = None
        self._lock = threading.Lock()

    @property
    def table_built(self) -> bool:
        return self._table is not None

    def _get_table(self) -> List[int]:
        table = self._table
        if table is not None:
            return table
        with self._lock:
            if self._table is None:
                self._table = self._build_table()
            return self._table

    @staticmethod
    def _build_table() -> List[int]:
        table = []
        for n in range(256):
            c = n
            for _ in range(8):
                if c & 1:
                    c = _POLYNOMIAL ^ (c >> 1)
                else:
                    c >>= 1
            table.append(c)
        return table

    def checksum(self, seed: int, data: bytes) -> int:
        table = self._get_table()
        c = (seed ^ _MASK) & _MASK
        for byte in data:
            c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
        return c ^ _MASK


# Shared engine for callers that do not bring their own.
default_crc = Crc32()


def crc32(seed: int, data: bytes) -> int:
    return default_crc.checksum(seed, data)
