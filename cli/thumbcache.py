#!/usr/bin/env python3
"""Dispatch CLI for thumbcache.

Discovers subcommands from sibling .py files in the cli/ directory.
File names are converted to subcommand names by replacing underscores
with hyphens (e.g. show_entry.py → show-entry).
"""

import importlib.util
import sys
from pathlib import Path

CLI_DIR = Path(__file__).resolve().parent
_SELF = Path(__file__).resolve().name


def _discover_commands() -> dict[str, Path]:
    """Return {subcommand-name: path} for every .py file in cli/."""
    cmds: dict[str, Path] = {}
    for p in sorted(CLI_DIR.glob("*.py")):
        if p.name.startswith("_") or p.name == _SELF:
            continue
        name = p.stem.replace("_", "-")
        cmds[name] = p
    return cmds


def _print_usage(commands: dict[str, Path]) -> None:
    print("usage: thumbcache <command> [args ...]\n")
    print("Available commands:")
    for name, path in commands.items():
        # Grab the module docstring's first line as a description.
        desc = ""
        try:
            mod = compile(path.read_text(), str(path), "exec")
            if mod.co_consts and isinstance(mod.co_consts[0], str):
                desc = mod.co_consts[0].strip().split("\n")[0]
        except (OSError, SyntaxError):
            pass
        print(f"  {name:24s} {desc}")
    print()


def main() -> None:
    commands = _discover_commands()

    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        _print_usage(commands)
        sys.exit(0)

    cmd = sys.argv[1].replace("_", "-")
    if cmd not in commands:
        print(f"thumbcache: unknown command '{sys.argv[1]}'\n", file=sys.stderr)
        _print_usage(commands)
        sys.exit(2)

    module_name = f"cli.{commands[cmd].stem}"
    spec = importlib.util.spec_from_file_location(module_name, commands[cmd])
    if spec is None or spec.loader is None:
        print(f"thumbcache: failed to load '{cmd}'", file=sys.stderr)
        sys.exit(1)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    sys.exit(mod.main(sys.argv[2:]))


if __name__ == "__main__":
    main()
