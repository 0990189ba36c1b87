import os
from typing import Optional
from urllib.parse import unquote, urlsplit

_SCHEME_SEPARATOR = "://"


def _has_uri_scheme(reference: str) -> bool:
    scheme, sep, _ = reference.partition(_SCHEME_SEPARATOR)
    return bool(sep) and scheme.isascii() and scheme[:1].isalpha() and all(
        c.isalnum() or c in "+-." for c in scheme)


def resolve_local_path(reference: str) -> Optional[str]:
    """Map a command-line style file reference to an absolute local path.

    Plain paths are made absolute against the working directory. ``file://``
    URIs map to their unquoted path. References with any other URI scheme
    have no local path and yield None.
    """
    if not reference:
        return None
    if _has_uri_scheme(reference):
        parts = urlsplit(reference)
        if parts.scheme.lower() != "file" or parts.netloc not in ("", "localhost"):
            return None
        return os.path.normpath(unquote(parts.path, errors="surrogateescape")) if parts.path else None
    return os.path.abspath(reference)


def basename(path: str) -> str:
    """Last path component, splitting on ``os.sep`` only."""
    return path.rsplit(os.sep, 1)[-1]
