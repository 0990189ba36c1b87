import logging
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Optional


class CodecError(Exception):
    """Raised by a codec when it cannot produce a usable image."""


class BasePlugin(ABC):
    """Base class for image codecs used by the thumbnail cache.

    A codec turns PNG files into in-memory surfaces and back, and produces
    scaled copies of surfaces. The cache never touches pixels itself.
    """

    def __init__(self, compress_level: Optional[int] = None):
        self.compress_level = compress_level
        if self.is_available():
            logging.debug(f"Codec {self.__class__.__name__} loaded successfully")
        else:
            logging.warning(f"Codec {self.__class__.__name__} not available - missing dependencies")

    @abstractmethod
    def is_available(self) -> bool:
        """Check if all required dependencies for this codec are available."""
        pass

    @abstractmethod
    def decode(self, path: str) -> Any:
        """
        Decode the PNG file at ``path`` into a surface.
        Raises CodecError (or OSError) if the file cannot be decoded.
        """
        pass

    @abstractmethod
    def encode(self, surface: Any, sink: BinaryIO) -> None:
        """
        Encode ``surface`` as PNG, streaming the bytes into ``sink.write``.
        Raises CodecError (or OSError) on failure.
        """
        pass

    @abstractmethod
    def scale(self, surface: Any, factor: float, width: int, height: int) -> Any:
        """
        Return a new ``width`` x ``height`` surface onto which ``surface`` is
        painted from the origin, scaled uniformly by ``factor``. Whatever the
        painted image does not cover stays transparent.
        """
        pass

    @abstractmethod
    def size(self, surface: Any) -> tuple:
        """Pixel ``(width, height)`` of a surface."""
        pass
