"""Helpers shared by the thumbcache subcommands."""
import logging
import os
import sys

from config.config_manager import ConfigManager
from core.thumbnail_cache import ThumbnailCache


def setup_logging(log_level, log_file=None):
    numeric_level = getattr(logging, str(log_level).upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file = os.path.expanduser(log_file)
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a"))
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def add_common_arguments(parser):
    parser.add_argument('--config', default=None, help='Path to config.yaml (default: $XDG_CONFIG_HOME/thumbcache/config.yaml).')
    parser.add_argument('--log-level', default=None, help='Override the configured logging level.')


def build_cache(args) -> ThumbnailCache:
    """Load config, set up logging and construct the cache for a subcommand."""
    config_manager = ConfigManager(args.config)
    setup_logging(args.log_level or config_manager.logging_level, config_manager.get("log_file"))
    return ThumbnailCache(config_manager)
