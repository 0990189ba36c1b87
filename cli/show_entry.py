"""Show the cache paths for a source file, or the text chunks of a cache entry."""

import argparse
import logging
import os
import sys

from cli._common import add_common_arguments, build_cache
from core.cache_types import CacheTier
from core.png_metadata import PNG_SIGNATURE, PngFormatError, iter_text_chunks


def _is_png(path: str) -> bool:
    try:
        with open(path, "rb") as f:
            return f.read(len(PNG_SIGNATURE)) == PNG_SIGNATURE
    except OSError:
        return False


def _is_cache_entry(cache, path: str) -> bool:
    absolute = os.path.abspath(path)
    if absolute.startswith(cache.cache_root + os.sep):
        return True
    return cache.shared_dir_name in absolute.split(os.sep)


def show_chunks(path: str) -> int:
    try:
        for chunk in iter_text_chunks(path):
            status = "ok" if chunk.crc_ok else "BAD CRC"
            print(f"{chunk.key}\t{chunk.value}\t{status}")
    except (OSError, PngFormatError) as e:
        logging.error(f"Cannot read {path}: {e}")
        return 1
    return 0


def show_paths(cache, reference: str) -> int:
    local_path = cache.path_resolver(reference)
    if not local_path:
        logging.error(f"{reference} has no local path")
        return 1
    largest = CacheTier.LARGE.max_dimension
    for candidate in cache.candidates(local_path, largest, largest):
        state = "present" if os.path.exists(candidate.path) else "absent"
        origin = "shared" if candidate.shared else "primary"
        print(f"{origin}\t{candidate.tier.directory}\t{candidate.path}\t{state}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="thumbcache show-entry", description=__doc__)
    parser.add_argument('path', help='A source file, or a cached thumbnail PNG.')
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    cache = build_cache(args)
    if _is_cache_entry(cache, args.path) and _is_png(args.path):
        return show_chunks(args.path)
    return show_paths(cache, args.path)


if __name__ == "__main__":
    sys.exit(main())
