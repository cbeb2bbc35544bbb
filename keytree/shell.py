#!/usr/bin/env python3
"""
keytree Interactive Shell (Command-line shell for keytree)

A command-line interface for building and inspecting a B-Tree by hand.
Tree operations are typed as plain words, shell commands start with a dot:

    keytree> insert 10 20 30 5 6 7
    keytree> search 7
    keytree> delete 10
    keytree> .print

Version: 1.0.0
"""

import sys
import time
import signal
import logging
import argparse
from datetime import datetime
from typing import Any, List, Optional

try:
    import readline
except ImportError:  # pragma: no cover - not available on Windows
    readline = None

from keytree.config import TreeConfig, configure_logging
from keytree.errors import KeyTreeError
from keytree.tree import BTree
from keytree.validation import check_invariants

logger = logging.getLogger(__name__)

OPERATIONS = {
    'insert': 'insert',
    'i': 'insert',
    'search': 'search',
    's': 'search',
    'delete': 'delete',
    'd': 'delete',
}


def parse_key(token: str) -> Any:
    """Keys that look like integers are stored as integers, anything else as text"""
    try:
        return int(token)
    except ValueError:
        return token


class KeyTreeShell:
    """Interactive keytree Command Shell"""

    def __init__(self, config: Optional[TreeConfig] = None):
        self.config = config or TreeConfig()
        self.tree = BTree(self.config.branch_factor)
        self.history: List[dict] = []
        self.debug_mode = self.config.debug_mode
        self.check_after_mutation = self.config.check_invariants

        # Command aliases
        self.commands = {
            'help': self.show_help,
            'h': self.show_help,
            '?': self.show_help,
            'quit': self.quit_shell,
            'exit': self.quit_shell,
            'q': self.quit_shell,
            'print': self.show_tree,
            'p': self.show_tree,
            'stats': self.show_stats,
            'check': self.check_tree,
            'debug': self.toggle_debug,
            'history': self.show_history,
            'clear': self.clear_tree,
        }

    def setup_readline(self):
        """Configure readline for command history and completion"""
        if readline is None:
            return
        readline.set_completer(self.completer)
        readline.parse_and_bind("tab: complete")

        history_file = self.config.history_file
        if history_file.exists():
            try:
                readline.read_history_file(str(history_file))
            except OSError as e:
                logger.warning(f"Could not read history file {history_file}: {e}")

    def completer(self, text: str, state: int) -> Optional[str]:
        """Auto-completion for commands and operations"""
        if text.startswith('.'):
            options = [f".{cmd}" for cmd in self.commands if cmd.startswith(text[1:])]
        else:
            options = [op for op in ('insert', 'search', 'delete') if op.startswith(text)]

        try:
            return options[state]
        except IndexError:
            return None

    def signal_handler(self, signum, frame):
        """Handle Ctrl+C gracefully"""
        print("\n\nkeytree shell interrupted. Use .quit to exit gracefully.")

    def display_banner(self):
        """Display startup banner"""
        print(f"""
===============================================================
                  keytree Interactive Shell

  B-Tree with branch factor {self.tree.branch_factor} (up to {self.tree.props.max_keys} keys per node)
  Type .help for commands or try: insert 10 20 30
===============================================================
""")

    def display_prompt(self) -> str:
        """Input prompt"""
        return "keytree> "

    def parse_command(self, input_line: str) -> tuple:
        """Parse input line into (kind, name, args)"""
        input_line = input_line.strip()

        if input_line.startswith('.'):
            parts = input_line[1:].split(' ', 1)
            command = parts[0].lower()
            args = parts[1] if len(parts) > 1 else ""
            return ('command', command, args)
        elif input_line == "":
            return ('empty', "", "")
        else:
            parts = input_line.split()
            return ('operation', parts[0].lower(), parts[1:])

    def execute_line(self, input_line: str) -> None:
        """Run one line of shell input"""
        kind, name, args = self.parse_command(input_line)

        if kind == 'empty':
            return
        if kind == 'command':
            if name in self.commands:
                self.commands[name](args)
            else:
                print(f"Unknown command: .{name}")
                print("Type .help for available commands")
            return

        if name not in OPERATIONS:
            logger.warning(f"Rejected unknown operation {name!r}")
            print(f"Unknown operation: {name}")
            print("Operations are insert, search and delete")
            return
        if not args:
            print(f"Usage: {OPERATIONS[name]} KEY [KEY ...]")
            return

        self.execute_operation(OPERATIONS[name], [parse_key(token) for token in args])

    def execute_operation(self, operation: str, keys: List[Any]) -> None:
        """Apply one tree operation to each key and report the outcome"""
        for key in keys:
            start = time.perf_counter()
            try:
                if operation == 'insert':
                    result = self.tree.insert(key)
                    outcome = "inserted" if result else "already present"
                elif operation == 'delete':
                    result = self.tree.delete(key)
                    outcome = "deleted" if result else "not found"
                else:
                    result = self.tree.search(key)
                    outcome = "found" if result else "not found"
            except TypeError as e:
                logger.warning(f"Rejected key {key!r}: {e}")
                print(f"Error: key {key!r} cannot be compared with the keys in the tree")
                continue
            elapsed = time.perf_counter() - start

            print(f"{operation} {key!r}: {outcome}")
            self.history.append({
                'timestamp': datetime.now().isoformat(),
                'operation': operation,
                'key': key,
                'result': result,
                'execution_time': elapsed
            })

            if result and operation != 'search' and self.check_after_mutation:
                check_invariants(self.tree)

    def show_help(self, args: str = ""):
        """Display help information"""
        print("""
keytree Interactive Shell - Help

OPERATIONS:
  insert KEY [KEY ...]   (i)  - Add keys, duplicates are rejected
  search KEY [KEY ...]   (s)  - Report whether keys are present
  delete KEY [KEY ...]   (d)  - Remove keys

  Integer-looking keys are stored as integers, everything else as text.
  Keys in one tree must be comparable with each other.

SHELL COMMANDS:
  .help, .h, .?          - Show this help
  .print, .p             - Print the tree (indentation = depth)
  .stats                 - Show size, height and node counts
  .check                 - Audit all structural invariants
  .debug                 - Toggle debug logging
  .history               - Show recent operations
  .clear                 - Remove all keys
  .quit, .exit, .q       - Exit the shell
""")

    def show_tree(self, args: str = ""):
        """Print the tree"""
        if len(self.tree) == 0:
            print("(empty tree)")
            return
        print(self.tree.render())

    def show_stats(self, args: str = ""):
        """Display tree statistics"""
        stats = check_invariants(self.tree)
        props = self.tree.props
        print(f"Branch factor: {self.tree.branch_factor} (degree {props.degree})")
        print(f"Keys per node: {props.min_keys}-{props.max_keys}")
        print(f"Keys:          {stats.key_count}")
        print(f"Height:        {stats.height}")
        print(f"Nodes:         {stats.node_count} ({stats.leaf_count} leaves)")
        print(f"Operations:    {len(self.history)}")

    def check_tree(self, args: str = ""):
        """Audit the tree and report"""
        try:
            stats = check_invariants(self.tree)
        except KeyTreeError as e:
            print(f"[ERROR] {e}")
            return
        print(f"[OK] {stats.key_count} keys, height {stats.height}, all invariants hold")

    def toggle_debug(self, args: str = ""):
        """Toggle debug logging"""
        self.debug_mode = not self.debug_mode
        level = logging.DEBUG if self.debug_mode else logging.getLevelName(self.config.log_level)
        logging.getLogger('keytree').setLevel(level)
        print(f"Debug mode: {'ON' if self.debug_mode else 'OFF'}")

    def show_history(self, args: str = ""):
        """Display recent operations"""
        if not self.history:
            print("No operations yet")
            return
        for i, entry in enumerate(self.history[-20:], 1):
            print(f"{i:2d}. {entry['operation']} {entry['key']!r} -> {entry['result']} "
                  f"({entry['execution_time'] * 1000:.3f} ms)")

    def clear_tree(self, args: str = ""):
        """Remove all keys"""
        self.tree.clear()
        print("Tree cleared")

    def save_history(self):
        if readline is None:
            return
        try:
            readline.write_history_file(str(self.config.history_file))
        except OSError as e:
            logger.warning(f"Could not write history file {self.config.history_file}: {e}")

    def quit_shell(self, args: str = ""):
        """Exit the keytree shell"""
        self.save_history()
        print("\nGoodbye! keytree shell terminated.")
        sys.exit(0)

    def run(self):
        """Main shell loop"""
        signal.signal(signal.SIGINT, self.signal_handler)
        self.setup_readline()
        self.display_banner()

        while True:
            try:
                user_input = input(self.display_prompt())
                self.execute_line(user_input)
            except EOFError:
                # Handle Ctrl+D
                self.save_history()
                print("\nGoodbye!")
                break
            except KeyboardInterrupt:
                print("\nUse .quit to exit")
                continue


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="keytree B-Tree shell")
    parser.add_argument("--branch-factor", "-b", type=int,
                        help="Branch factor of the tree (overrides KEYTREE_BRANCH_FACTOR)")
    parser.add_argument("--log-level", type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help="Logging level (overrides KEYTREE_LOG_LEVEL)")
    parser.add_argument("--check", action="store_true",
                        help="Audit all invariants after every insert and delete")
    parser.add_argument("--command", "-c", type=str,
                        help="Run ';'-separated lines and exit instead of starting the shell")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for keytree shell"""
    args = build_arg_parser().parse_args(argv)

    config = TreeConfig()
    if args.branch_factor is not None:
        config.branch_factor = args.branch_factor
    if args.log_level:
        config.log_level = args.log_level
    if args.check:
        config.check_invariants = True

    configure_logging(config.log_level)

    try:
        shell = KeyTreeShell(config)
    except KeyTreeError as e:
        print(f"Error: {e}")
        return 2

    if args.command is not None:
        for line in args.command.split(';'):
            shell.execute_line(line)
        return 0

    shell.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
