"""Render a thumbnail for an image file with Pillow and store it in the cache."""

import argparse
import logging
import sys

from PIL import Image, ImageOps

from cli._common import add_common_arguments, build_cache
from core.cache_types import CacheTier, SourceFile


def render_thumbnail(image_path: str, tier: CacheTier) -> Image.Image:
    """Downscale an image so its longer side equals the tier's bound."""
    with Image.open(image_path) as img:
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGBA")
    bound = tier.max_dimension
    # Long side lands exactly on the bound so the result fits the tier.
    if img.width >= img.height:
        size = (bound, max(1, round(img.height * bound / img.width)))
    else:
        size = (max(1, round(img.width * bound / img.height)), bound)
    return img.resize(size, Image.Resampling.LANCZOS)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="thumbcache store", description=__doc__)
    parser.add_argument('file', help='Path of the source image.')
    parser.add_argument('--tier', choices=[t.directory for t in CacheTier], default=CacheTier.NORMAL.directory,
                        help='Thumbnail size class (default: normal).')
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    cache = build_cache(args)
    tier = CacheTier.from_name(args.tier)

    try:
        thumbnail = render_thumbnail(args.file, tier)
    except (OSError, ValueError) as e:
        logging.error(f"Could not render a thumbnail for {args.file}: {e}")
        return 1

    source = SourceFile(file_name=args.file, thumbnail=thumbnail)
    if not cache.store(source):
        logging.error(f"Storing the thumbnail for {args.file} failed")
        return 1

    local_path = cache.local_path(source)
    print(cache.entry_path(local_path, tier))
    return 0


if __name__ == "__main__":
    sys.exit(main())
