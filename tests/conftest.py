"""
Shared pytest fixtures for thumbcache tests.
"""
import os
import sys

# Ensure project root is on path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from PIL import Image

from core.cache_paths import CacheRootResolver
from core.thumbnail_cache import ThumbnailCache
from plugins.pil_plugin import PILPlugin

# Fixed source mtime so provenance values are predictable.
SOURCE_MTIME = 1_600_000_000


class MockConfigManager:
    """Minimal ConfigManager substitute that accepts a plain dict.

    Only implements the interface used by ThumbnailCache.
    """

    def __init__(self, overrides: dict | None = None):
        self._cfg: dict = {
            "logging_level": "DEBUG",
            "cache": {
                "root_dir": None,  # must be overridden per fixture
                "shared_dir_name": ".sh_thumbnails",
            },
        }
        if overrides:
            for key, value in overrides.items():
                node = self._cfg
                parts = key.split(".")
                for k in parts[:-1]:
                    node = node.setdefault(k, {})
                node[parts[-1]] = value

    def get(self, key: str, default=None):
        keys = key.split(".")
        val = self._cfg
        for k in keys:
            if isinstance(val, dict):
                val = val.get(k)
            else:
                return default
        return val if val is not None else default


@pytest.fixture()
def cache_env(tmp_path, monkeypatch):
    """Isolated cache environment.

    Yields a dict with:
      tmp_path   — pathlib.Path temp directory (unique per test)
      cache_root — pathlib.Path of the user thumbnail directory (not yet created)
      source     — str path of a small source image with a fixed mtime
      cache      — ThumbnailCache bound to cache_root
      mtime      — the source file mtime, in whole seconds
    """
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))

    photos = tmp_path / "photos"
    photos.mkdir()
    source = photos / "holiday.jpg"
    Image.new("RGB", (640, 480), color=(10, 120, 200)).save(str(source), "JPEG")
    os.utime(source, (SOURCE_MTIME, SOURCE_MTIME))

    cache_root = tmp_path / "xdg-cache" / "thumbnails"
    config = MockConfigManager({"cache.root_dir": str(cache_root)})
    cache = ThumbnailCache(config, codec=PILPlugin())

    yield {
        "tmp_path": tmp_path,
        "cache_root": cache_root,
        "source": str(source),
        "cache": cache,
        "config": config,
        "mtime": SOURCE_MTIME,
    }


@pytest.fixture()
def fresh_resolver(tmp_path):
    return CacheRootResolver(environ={"XDG_CACHE_HOME": str(tmp_path / "env-cache")})
