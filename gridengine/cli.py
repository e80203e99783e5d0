#!/usr/bin/env python3
"""
gridengine CLI

Command-line shell for driving a grid engine by hand or from a script.

Usage:
    gridengine shell [--width W] [--height H] [--max-height M] [--config FILE]
    gridengine run <script> [options]
"""

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

from . import __version__
from .config import GridConfig, load_config
from .engine import ChangeRecord, GridEngine, MoveChange, ResizeChange
from .errors import ConfigError, GridEngineError

logger = logging.getLogger(__name__)

HELP_TEXT = """
Commands:
  add <id> <x> <y> <w> <h>   Add an item (relocated if the spot is taken)
  mv <id> <x> <y>            Move an item, pushing others down
  resize <id> <w> <h>        Resize an item, pushing others down
  rm <id>                    Remove an item
  get <id>                   Show an item
  at <x> <y>                 Show which item covers a cell
  list                       List all items
  show                       Print the grid
  help                       Show this help
  quit                       Exit
"""


class CommandError(Exception):
    """A shell command could not be parsed."""


def format_record(record: ChangeRecord) -> str:
    """One line per change in a record."""
    lines = [f"{record.operation}: {len(record)} change(s)"]
    for change in record:
        node = change.node
        if isinstance(change, MoveChange):
            detail = f"{change.old_position} -> {change.new_position}"
        elif isinstance(change, ResizeChange):
            detail = f"{change.old_size[0]}x{change.old_size[1]} -> {change.new_size[0]}x{change.new_size[1]}"
        else:
            detail = f"at ({node.x}, {node.y}) size {node.w}x{node.h}"
        lines.append(f"  {change.kind.value:<6} {node.id} {detail}")
    return "\n".join(lines)


class GridShell:
    """Parses shell commands and runs them against an engine."""

    def __init__(self, engine: GridEngine, out: Optional[TextIO] = None,
                 show_grid: bool = True):
        self.engine = engine
        self.out = out
        self.show_grid = show_grid
        self._commands: Dict[str, Callable[[List[str]], None]] = {
            'add': self._cmd_add,
            'mv': self._cmd_move,
            'move': self._cmd_move,
            'resize': self._cmd_resize,
            'rm': self._cmd_remove,
            'remove': self._cmd_remove,
            'get': self._cmd_get,
            'at': self._cmd_at,
            'list': self._cmd_list,
            'show': self._cmd_show,
            'help': self._cmd_help,
        }
        engine.events.add_changes_listener(self._on_changes)

    def _print(self, text: str = ""):
        print(text, file=self.out or sys.stdout)

    def _on_changes(self, record: ChangeRecord):
        self._print(format_record(record))

    def execute(self, line: str) -> bool:
        """
        Run one command line.

        Returns:
            False if the command asks to quit, True otherwise

        Raises:
            CommandError: If the command is unknown or malformed
            GridEngineError: If the engine rejects the operation
        """
        try:
            parts = shlex.split(line, comments=True)
        except ValueError as e:
            raise CommandError(f"Could not parse {line.strip()!r}: {e}") from None
        if not parts:
            return True

        action = parts[0].lower()
        if action in ('quit', 'exit'):
            return False

        handler = self._commands.get(action)
        if handler is None:
            raise CommandError(f"Unknown command: {action}. Try 'help'.")
        handler(parts[1:])
        return True

    @staticmethod
    def _ints(args: List[str], names: List[str]) -> List[int]:
        if len(args) != len(names):
            raise CommandError(f"Expected {len(names)} argument(s): {' '.join(names)}")
        values = []
        for name, raw in zip(names, args):
            try:
                values.append(int(raw))
            except ValueError:
                raise CommandError(f"Expected {name} to be a number, got {raw!r}") from None
        return values

    @staticmethod
    def _one(args: List[str], name: str) -> str:
        if len(args) != 1:
            raise CommandError(f"Expected 1 argument: {name}")
        return args[0]

    def _after_mutation(self):
        if self.show_grid:
            self._print(self.engine.view().format())

    def _cmd_add(self, args: List[str]):
        if not args:
            raise CommandError("Expected 5 argument(s): id x y w h")
        x, y, w, h = self._ints(args[1:], ['x', 'y', 'w', 'h'])
        self.engine.add_item(args[0], x, y, w, h)
        self._after_mutation()

    def _cmd_move(self, args: List[str]):
        if not args:
            raise CommandError("Expected 3 argument(s): id x y")
        x, y = self._ints(args[1:], ['x', 'y'])
        self.engine.move_item(args[0], x, y)
        self._after_mutation()

    def _cmd_resize(self, args: List[str]):
        if not args:
            raise CommandError("Expected 3 argument(s): id w h")
        w, h = self._ints(args[1:], ['w', 'h'])
        self.engine.resize_item(args[0], w, h)
        self._after_mutation()

    def _cmd_remove(self, args: List[str]):
        self.engine.remove_item(self._one(args, 'id'))
        self._after_mutation()

    def _cmd_get(self, args: List[str]):
        node = self.engine.get_item(self._one(args, 'id'))
        self._print(f"{node.id}: ({node.x}, {node.y}) size {node.w}x{node.h}")

    def _cmd_at(self, args: List[str]):
        x, y = self._ints(args, ['x', 'y'])
        item_id = self.engine.item_at(x, y)
        self._print(item_id if item_id is not None else "(empty)")

    def _cmd_list(self, args: List[str]):
        nodes = self.engine.get_nodes()
        if not nodes:
            self._print("No items.")
        for node in nodes:
            self._print(f"  {node.id}: ({node.x}, {node.y}) size {node.w}x{node.h}")

    def _cmd_show(self, args: List[str]):
        width, height = self.engine.bounds()
        self._print(f"Grid {width}x{height}, {len(self.engine)} item(s)")
        self._print(self.engine.view().format())

    def _cmd_help(self, args: List[str]):
        self._print(HELP_TEXT)


def build_config(args) -> GridConfig:
    """Merge the config file (or defaults) with command-line overrides."""
    config = load_config(args.config)
    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    if args.max_height is not None:
        config.max_height = args.max_height
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.verbose:
        config.log_level = "DEBUG"
    return config.validate()


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def cmd_shell(args, config: GridConfig, stdin: Optional[TextIO] = None) -> int:
    """Run an interactive session."""
    stdin = stdin or sys.stdin
    engine = GridEngine.from_config(config)
    shell = GridShell(engine)
    interactive = stdin.isatty()

    print(f"Grid {config.width}x{config.height}. Type 'help' for commands, 'quit' to exit.")

    with engine:
        while True:
            if interactive:
                try:
                    line = input("grid> ")
                except (EOFError, KeyboardInterrupt):
                    print("\nExiting...")
                    break
            else:
                line = stdin.readline()
                if not line:
                    break

            try:
                if not shell.execute(line):
                    break
            except (CommandError, GridEngineError) as e:
                print(f"Error: {e}")

    return 0


def cmd_run(args, config: GridConfig) -> int:
    """Run commands from a script file, stopping at the first failure."""
    script = Path(args.script)
    if not script.exists():
        print(f"Error: Script not found: {script}")
        return 1

    engine = GridEngine.from_config(config)
    shell = GridShell(engine, show_grid=not args.quiet)

    with engine:
        for line_number, line in enumerate(script.read_text().splitlines(), start=1):
            try:
                if not shell.execute(line):
                    break
            except (CommandError, GridEngineError) as e:
                print(f"Error on line {line_number}: {e}")
                return 1

        if args.quiet:
            print(engine.view().format())

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--width', type=int, help='Grid width (default: from config)')
    common.add_argument('--height', type=int, help='Initial grid height (default: from config)')
    common.add_argument('--max-height', type=int, help='Cap on grid growth (default: unbounded)')
    common.add_argument('--config', help='Path to a YAML grid configuration file')
    common.add_argument('--log-level', help='Logging level (default: from config)')
    common.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    parser = argparse.ArgumentParser(
        prog='gridengine',
        description="gridengine - collision-resolving grid layout shell",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gridengine shell --width 10 --height 12
  gridengine run layout.txt --max-height 40
        """,
    )
    parser.add_argument('--version', action='version', version=f'gridengine {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('shell', parents=[common], help='Interactive grid session')

    run_parser = subparsers.add_parser('run', parents=[common], help='Run commands from a file')
    run_parser.add_argument('script', help='File with one command per line')
    run_parser.add_argument('-q', '--quiet', action='store_true',
                            help='Only print the final grid')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = build_config(args)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    configure_logging(config.log_level)
    logger.debug("Starting %s with %s", args.command, config)

    commands = {
        'shell': cmd_shell,
        'run': cmd_run,
    }

    return commands[args.command](args, config)


if __name__ == '__main__':
    sys.exit(main())
