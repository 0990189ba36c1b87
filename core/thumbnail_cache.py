"""
Thumbnail cache following the freedesktop.org Thumbnail Managing Standard.

https://specifications.freedesktop.org/thumbnail-spec/thumbnail-spec-latest.html

``ThumbnailCache.load`` finds a fresh cached preview for a file and decodes
it; ``ThumbnailCache.store`` persists a rendered preview so that any
conforming application can pick it up. Both report plain booleans; nothing
in here raises for a missing, stale or broken cache entry.
"""
import os
import logging
from typing import Callable, List, Optional

from core.cache_paths import (
    CacheRootResolver,
    SHARED_DIR_NAME,
    DEFAULT_DIR_MODE,
    cache_key,
    candidate_paths,
    entry_path,
    file_uri,
)
from core.cache_types import CacheTier, CandidatePath, LookupResult, Outcome, SourceFile
from core.crc import Crc32, default_crc
from core.png_metadata import ProvenanceWriter, verify_provenance
from plugins.base_plugin import BasePlugin, CodecError
from utils.paths import basename, resolve_local_path

logger = logging.getLogger(__name__)

MAX_REQUEST_DIMENSION = CacheTier.LARGE.max_dimension
DEFAULT_FILE_MODE = 0o600

# Errors a decode or scale attempt may surface; each one makes that candidate a miss.
_DECODE_ERRORS = (OSError, CodecError, SyntaxError, ValueError)


class ThumbnailCache:
    def __init__(self, config_manager=None, codec: Optional[BasePlugin] = None,
                 root_resolver: Optional[CacheRootResolver] = None,
                 path_resolver: Callable[[str], Optional[str]] = resolve_local_path,
                 crc: Crc32 = default_crc):
        get = config_manager.get if config_manager is not None else (lambda key, default=None: default)

        self.shared_dir_name = get("cache.shared_dir_name", SHARED_DIR_NAME)
        self.file_mode = get("cache.file_mode", DEFAULT_FILE_MODE)
        self.dir_mode = get("cache.dir_mode", DEFAULT_DIR_MODE)

        if codec is None:
            from plugins.pil_plugin import PILPlugin
            codec = PILPlugin(compress_level=get("codec.compress_level"))
        self.codec = codec

        self.root_resolver = root_resolver or CacheRootResolver(
            root_dir=get("cache.root_dir"), dir_mode=self.dir_mode)
        self.path_resolver = path_resolver
        self.crc = crc

    @property
    def cache_root(self) -> str:
        return self.root_resolver.resolve()

    def local_path(self, file: SourceFile) -> Optional[str]:
        """Absolute local path usable as a cache identity, or None.

        In-memory images have no path. Files whose display name differs from
        their file name (pages of a document, archive members) have no URI the
        thumbnail standard defines, so they are not cached either.
        """
        if file.is_memory:
            return None
        if basename(file.display_name or "") != basename(file.file_name):
            return None
        return self.path_resolver(file.file_name)

    def candidates(self, local_path: str, width: int, height: int) -> List[CandidatePath]:
        return candidate_paths(self.cache_root, local_path, width, height, self.shared_dir_name)

    def entry_path(self, local_path: str, tier: CacheTier) -> str:
        return entry_path(self.cache_root, tier, cache_key(file_uri(local_path)))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, file: SourceFile, width: int, height: int) -> LookupResult:
        if width > MAX_REQUEST_DIMENSION or height > MAX_REQUEST_DIMENSION:
            return LookupResult.miss(f"requested {width}x{height} exceeds {MAX_REQUEST_DIMENSION}")
        if width <= 0 or height <= 0:
            return LookupResult.miss(f"requested {width}x{height} is empty")

        local_path = self.local_path(file)
        if not local_path:
            return LookupResult.miss("no local path")

        try:
            mtime = int(os.stat(local_path).st_mtime)
        except OSError as e:
            return LookupResult.miss(f"cannot stat {local_path}: {e}")

        for candidate in self.candidates(local_path, width, height):
            if not os.path.exists(candidate.path):
                continue
            result = self._load_candidate(candidate, mtime, width, height)
            if result.outcome is Outcome.HIT:
                return result
            logger.debug(f"Thumbnail candidate {candidate.path} rejected: {result.reason}")

        return LookupResult.miss("no valid cache entry")

    def _load_candidate(self, candidate: CandidatePath, mtime: int, width: int, height: int) -> LookupResult:
        if not verify_provenance(candidate.path, candidate.expected_uri, mtime, self.crc):
            return LookupResult.fault("stale or missing provenance", candidate)

        try:
            image = self.codec.decode(candidate.path)
        except _DECODE_ERRORS as e:
            return LookupResult.fault(f"decode failed: {e}", candidate)

        actual_width, actual_height = self.codec.size(image)
        if actual_width == width or actual_height == height:
            return LookupResult.hit(image, candidate)

        # why: ratio is decoded/requested, not requested/decoded; kept as-is for
        # compatibility with existing readers of this cache
        scale_factor = min(1.0, min(actual_width / width, actual_height / height))
        target_width = int(width * scale_factor)
        target_height = int(height * scale_factor)

        try:
            scaled = self.codec.scale(image, scale_factor, target_width, target_height)
        except _DECODE_ERRORS as e:
            return LookupResult.fault(f"scale to {target_width}x{target_height} failed: {e}", candidate)
        return LookupResult.hit(scaled, candidate)

    def load(self, file: SourceFile, width: int, height: int) -> bool:
        """Fill ``file.thumbnail`` from the cache. True on a hit."""
        result = self.lookup(file, width, height)
        if not result:
            logger.debug(f"Thumbnail cache miss for {file.file_name}: {result.reason}")
            return False
        file.thumbnail = result.image
        logger.debug(f"Thumbnail cache hit for {file.file_name}: {result.candidate.path}")
        return True

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def store(self, file: SourceFile) -> bool:
        """Write ``file.thumbnail`` to the user cache. True on success."""
        if file.thumbnail is None:
            logger.debug(f"No thumbnail to store for {file.file_name}")
            return False

        width, height = self.codec.size(file.thumbnail)
        tier = CacheTier.for_dimensions(width, height)
        if tier is None:
            logger.debug(f"Not storing {width}x{height} thumbnail for {file.file_name}: no matching tier")
            return False

        local_path = self.local_path(file)
        if not local_path:
            return False

        try:
            mtime = int(os.stat(local_path).st_mtime)
        except OSError as e:
            logger.warning(f"Cannot stat {local_path}, not storing thumbnail: {e}")
            return False

        uri = file_uri(local_path)
        target = entry_path(self.cache_root, tier, cache_key(uri))

        try:
            os.makedirs(os.path.dirname(target), mode=self.dir_mode, exist_ok=True)
            fd = os.open(target, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, self.file_mode)
        except OSError as e:
            logger.warning(f"Cannot open thumbnail cache file {target}: {e}")
            return False

        try:
            with os.fdopen(fd, "wb", buffering=0) as sink:
                self.codec.encode(file.thumbnail, ProvenanceWriter(sink, uri, mtime, self.crc))
        except (OSError, CodecError, ValueError) as e:
            logger.warning(f"Failed to write thumbnail {target} for {local_path}: {e}")
            try:
                os.unlink(target)
            except OSError as unlink_error:
                logger.error(f"Could not remove partial thumbnail {target}: {unlink_error}")
            return False

        logger.debug(f"Stored {tier.directory} thumbnail for {local_path}: {target}")
        return True
