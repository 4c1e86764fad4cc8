"""CLI entry point for the oxisql shell.

Connects to a MySQL server, then either runs one statement (``--execute``)
or enters the interactive loop: read a query with the line editor, handle
the shell's control commands, dispatch everything else to the database and
print the result.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
import time

from sqlalchemy.exc import SQLAlchemyError

from oxisql.connector import Connector, build_url
from oxisql.editor import EditorSession
from oxisql.formatter import format_result
from oxisql.settings import SettingsManager
from oxisql.terminal import ProcessTerminal, Terminal
from oxisql.trie import PrefixTrie

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit;", "quit;")
CLEAR_COMMAND = "clear;"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    # -h is the host, so help is only available as --help.
    parser = argparse.ArgumentParser(
        prog="oxisql",
        description="Interactive MySQL shell with history recall and schema completion",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", "--host", required=True, help="Server host")
    parser.add_argument("-P", "--port", type=int, default=3306, help="Server port (default: 3306)")
    parser.add_argument("-u", "--user", required=True, help="User name")
    parser.add_argument("-p", "--password", default="", help="Password (prompted for when omitted)")
    parser.add_argument("-D", "--database", required=True, help="Database to use")
    parser.add_argument("-e", "--execute", help="Run one statement and exit")
    parser.add_argument("--settings", help="Settings file (default: ~/.oxisql/settings.json)")
    parser.add_argument("--no-history", action="store_true", help="Do not load or save command history")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--log-file", help="Write log messages to this file instead of stderr")
    return parser.parse_args(argv)


def execute_and_report(connector: Connector, sql: str) -> bool:
    """Run *sql*, print its result and timing. Returns ``False`` on error."""
    start_time = time.perf_counter()
    try:
        result = connector.run_query(sql)
    except SQLAlchemyError as e:
        print(f"Error: {e}", file=sys.stderr)
        return False
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)

    print(format_result(result))
    print(f"Elapsed time: {elapsed_ms}ms")
    return True


def load_symbol_trie(connector: Connector) -> PrefixTrie:
    """Seed a symbol trie from the schema; an empty trie if that fails."""
    print("[+] Loading Symbols from Database")
    try:
        symbols = connector.get_symbols()
    except SQLAlchemyError as e:
        print(f"[-] Could not get symbols: {e}", file=sys.stderr)
        return PrefixTrie()
    return PrefixTrie.from_words(symbols)


def save_history(trie: PrefixTrie, path: str) -> bool:
    try:
        trie.save(path)
    except OSError as e:
        logger.warning("Could not save history to %s: %s", path, e)
        print(f"[-] Could not save history: {e}", file=sys.stderr)
        return False
    return True


def run_interactive(
    connector: Connector,
    settings: SettingsManager,
    terminal: Terminal,
    symbol_trie: PrefixTrie,
) -> None:
    """Read and dispatch queries until the user leaves the shell."""
    history_enabled = settings.get_history_enabled()
    history_path = settings.get_history_path()
    history_trie = PrefixTrie.load_or_new(history_path) if history_enabled else PrefixTrie()

    session = EditorSession(terminal, history_trie, symbol_trie, settings.editor_config())

    while True:
        query = session.read_query()
        if query is None:
            break

        query = query.strip()
        if query in EXIT_COMMANDS:
            break
        if query == CLEAR_COMMAND:
            terminal.clear_screen()
            continue

        history_trie.insert(query)
        execute_and_report(connector, query)

    if history_enabled:
        save_history(history_trie, history_path)
    print("Bye!")


def _configure_logging(level: str, log_file: str | None) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=log_file,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.log_level, args.log_file)

    settings = SettingsManager.create(args.settings)
    if args.no_history:
        settings.apply_overrides({"historyEnabled": False})

    password = args.password
    if password == "":
        try:
            password = getpass.getpass("Password: ")
        except (EOFError, KeyboardInterrupt):
            print(file=sys.stderr)
            sys.exit(1)
    else:
        print(
            "[!] Warning: password is being passed as a command line argument, this is not secure",
            file=sys.stderr,
        )

    try:
        connector = Connector.connect(
            build_url(args.host, args.port, args.user, password, args.database)
        )
    except SQLAlchemyError as e:
        print(f"[-] Could not connect to MySQL server: {e}", file=sys.stderr)
        sys.exit(1)
    print("[+] Connected to MySQL server")

    try:
        if args.execute is not None:
            ok = execute_and_report(connector, args.execute)
            if not ok:
                sys.exit(1)
        else:
            symbol_trie = load_symbol_trie(connector)
            run_interactive(connector, settings, ProcessTerminal(), symbol_trie)
    except OSError as e:
        # A terminal that cannot be read or written cannot continue interactively.
        print(f"[-] Terminal error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        connector.close()


if __name__ == "__main__":
    main()
