import os
import hashlib
import logging
import threading
from typing import Optional, List, Mapping

from core.cache_types import CacheTier, CandidatePath

logger = logging.getLogger(__name__)

SHARED_DIR_NAME = ".sh_thumbnails"
DEFAULT_DIR_MODE = 0o700


class CacheRootResolver:
    """Resolves the user-wide thumbnail directory once and remembers it.

    The environment is consulted on the first ``resolve()`` only; later calls
    return the memoised path even if ``XDG_CACHE_HOME`` changed meanwhile.
    """

    def __init__(self, root_dir: Optional[str] = None, environ: Optional[Mapping[str, str]] = None,
                 dir_mode: int = DEFAULT_DIR_MODE):
        self._configured_root = root_dir
        self._environ = environ
        self._dir_mode = dir_mode
        self._root: Optional[str] = None
        self._lock = threading.Lock()

    def _compute_root(self) -> str:
        if self._configured_root:
            return os.path.abspath(os.path.expanduser(self._configured_root))
        environ = os.environ if self._environ is None else self._environ
        cache_home = environ.get("XDG_CACHE_HOME")
        if not cache_home:
            home = environ.get("HOME") or os.path.expanduser("~")
            cache_home = os.path.join(home, ".cache")
        return os.path.join(cache_home, "thumbnails")

    def resolve(self) -> str:
        root = self._root
        if root is not None:
            return root
        with self._lock:
            if self._root is None:
                root = self._compute_root()
                if not os.path.isdir(root):
                    try:
                        os.makedirs(root, mode=self._dir_mode, exist_ok=True)
                        logger.info(f"Created thumbnail cache directory: {root}")
                    except OSError as e:
                        # why: lookups against a missing root just miss; store reports its own failure
                        logger.warning(f"Could not create thumbnail cache directory {root}: {e}")
                self._root = root
            return self._root


def cache_key(value: str) -> str:
    """Hex MD5 of the UTF-8 encoding of ``value``."""
    return hashlib.md5(value.encode("utf-8", "surrogateescape")).hexdigest()


def file_uri(local_path: str) -> str:
    # Not percent-encoded: existing cache entries are keyed on the raw path.
    return f"file://{local_path}"


def entry_path(cache_root: str, tier: CacheTier, key: str) -> str:
    return os.path.join(cache_root, tier.directory, f"{key}.png")


def tiers_for_request(width: int, height: int) -> List[CacheTier]:
    """Large is only worth trying when the request exceeds the normal bound."""
    if width > CacheTier.NORMAL.max_dimension or height > CacheTier.NORMAL.max_dimension:
        return [CacheTier.LARGE, CacheTier.NORMAL]
    return [CacheTier.NORMAL]


def shared_cache_dir(local_path: str, shared_dir_name: str = SHARED_DIR_NAME) -> str:
    return os.path.join(os.path.dirname(local_path), shared_dir_name)


def candidate_paths(cache_root: str, local_path: str, width: int, height: int,
                    shared_dir_name: str = SHARED_DIR_NAME) -> List[CandidatePath]:
    """
    Cache files to try for ``local_path``, in precedence order.

    Primary root entries are keyed and validated by the full ``file://`` URI.
    Entries in a ``.sh_thumbnails`` directory next to the file are keyed by
    MD5 of the base name and carry the bare base name as their URI.
    """
    tiers = tiers_for_request(width, height)

    uri = file_uri(local_path)
    primary_key = cache_key(uri)
    candidates = [CandidatePath(entry_path(cache_root, tier, primary_key), uri, tier)
                  for tier in tiers]

    shared_root = shared_cache_dir(local_path, shared_dir_name)
    if os.path.isdir(shared_root):
        basename = os.path.basename(local_path)
        shared_key = cache_key(basename)
        candidates.extend(CandidatePath(entry_path(shared_root, tier, shared_key), basename, tier, shared=True)
                          for tier in tiers)

    return candidates
