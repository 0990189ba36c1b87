"""Look up a cached thumbnail for a file (exit 0 on hit, 1 on miss)."""

import argparse
import logging
import sys

from cli._common import add_common_arguments, build_cache
from core.cache_types import SourceFile
from plugins.base_plugin import CodecError


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="thumbcache lookup", description=__doc__)
    parser.add_argument('file', help='Path or file:// URI of the source file.')
    parser.add_argument('--size', nargs=2, type=int, metavar=('WIDTH', 'HEIGHT'), default=(128, 128),
                        help='Requested bounding box, at most 256x256 (default: 128 128).')
    parser.add_argument('--output', default=None, help='Save the cached thumbnail to this PNG file.')
    parser.add_argument('--display-name', default=None, help='Display name, if it differs from the file name.')
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    cache = build_cache(args)
    source = SourceFile(file_name=args.file, display_name=args.display_name)
    width, height = args.size

    result = cache.lookup(source, width, height)
    if not result:
        logging.info(f"Miss for {args.file}: {result.reason}")
        return 1

    image_width, image_height = cache.codec.size(result.image)
    print(f"{result.candidate.path}\t{image_width}x{image_height}")
    if args.output:
        try:
            with open(args.output, "wb") as out:
                cache.codec.encode(result.image, out)
        except (OSError, CodecError) as e:
            logging.error(f"Could not write {args.output}: {e}")
            return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
