#!/usr/bin/env python3
"""
cli.py - Entry point for torrentrepo
Browse, search and publish torrent metadata in a data-contract document store.
"""

try:
    import argparse
    import asyncio
    import sys
    import time
    from dataclasses import dataclass
    from pathlib import Path
    from typing import Awaitable, Callable, Optional

    from rich.console import Console
    from rich.markup import escape
    from rich.panel import Panel
    from rich.prompt import Prompt
    from rich.table import Table

    import torrentrepo as pkg
    from . import logger
    from . import registry
    from .browse.engine import BrowsePage, QueryEngine
    from .browse.state import InvalidSearchTerm
    from .codec.magnet import parse_magnet_link
    from .config import RepoConfig, load_config
    from .documents.display import build_document_view, format_bytes
    from .documents.prepare import DocumentValidationError, form_from_magnet
    from .documents.schema import COLLECTIONS, resolve_collection
    from .settings import (
        DEFAULT_SETTINGS_PATH,
        BrowseSettings,
        apply_settings,
        clear_settings,
        load_settings,
        save_settings,
    )
    from .store.errors import StoreError
    from .store.gateway_client import GatewayStoreAdapter
    from .store.protocols import DocumentStore
    from .verification import verify_store
except ImportError as e:
    print(f"Error: Missing required dependency: {e}")
    print("Please install required dependencies: pip install -e .")
    sys.exit(1)

console = Console()
_CLI_SESSION_START_MONOTONIC = time.monotonic()
TAB_KEYS: dict[str, str] = {str(idx): collection_id for idx, collection_id in enumerate(COLLECTIONS, start=1)}
MAIN_MENU_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Browse",
        tuple((key, COLLECTIONS[collection_id].label) for key, collection_id in TAB_KEYS.items()),
    ),
    (
        "Navigate",
        (
            ("S", "Search current collection"),
            ("C", "Clear search"),
            ("N", "Next page"),
            ("P", "Previous page"),
            ("R", "Retry / refresh"),
        ),
    ),
    (
        "Tools",
        (
            ("M", "Parse a magnet link"),
            ("U", "Submit a document"),
            ("G", "Register a new contract"),
            ("V", "Verify gateway and contract"),
            ("T", "Settings"),
        ),
    ),
    (
        "torrentrepo",
        (
            ("Q", "Quit"),
        ),
    ),
)


def _ui_info(message: str) -> None:
    console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_warn(message: str) -> None:
    console.print(f"[yellow][WARNING][/yellow] {message}")


def _ui_error(message: str) -> None:
    console.print(f"[red][ERROR][/red] {message}")


def _ui_prompt(label: str, default: str | None = None) -> str:
    if default is None:
        return Prompt.ask(label)
    return Prompt.ask(label, default=default)


def _ui_prompt_yesno(label: str, *, default_yes: bool) -> bool:
    suffix = "[Y/n]" if default_yes else "[y/N]"
    choice = _ui_prompt(f"{label} {suffix}", default="Y" if default_yes else "N").strip().lower()
    if not choice:
        return default_yes
    if choice[0] == "y":
        return True
    if choice[0] == "n":
        return False
    return default_yes


def _reset_cli_session_timer() -> None:
    global _CLI_SESSION_START_MONOTONIC
    _CLI_SESSION_START_MONOTONIC = time.monotonic()


def _format_elapsed_runtime(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3_600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3_600:.1f}h"


def _ui_goodbye_with_elapsed() -> None:
    elapsed = max(0.0, time.monotonic() - _CLI_SESSION_START_MONOTONIC)
    _ui_info(f"Goodbye! Elapsed {_format_elapsed_runtime(elapsed)}")


def redact_secret(key: str) -> str:
    """Show only the first and last 2 characters"""
    if not key:
        return ""
    if len(key) <= 4:
        return "****"
    return f"{key[:2]}....{key[-2:]}"


def short_id(value: str | None, keep: int = 12) -> str:
    if not value:
        return "-"
    return value if len(value) <= keep else f"{value[:keep]}..."


def render_page(page: BrowsePage, page_size: int) -> None:
    state = page.state
    spec = COLLECTIONS[state.collection_id]
    title = f"{spec.label} - Page {state.page_number}"
    if state.is_filtered:
        title += f" - {state.filter.field} {state.filter.operator} {state.filter.value!r}"

    if page.is_empty:
        console.print(Panel("No documents found", title=escape(title)))
        return

    table = Table(title=escape(title))
    table.add_column("#", style="grey50", justify="right")
    table.add_column("Torrent", style="bold")
    table.add_column(spec.search_field, style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Trackers", justify="right")
    table.add_column("Infohash", style="grey50")
    offset = (state.page_number - 1) * page_size
    for idx, document in enumerate(page.documents, start=offset + 1):
        view = build_document_view(document)
        meta = dict(view.meta_items)
        table.add_row(
            str(idx),
            escape(view.torrent_name),
            escape(view.meta_items[0][1]),
            format_bytes(document.size_bytes),
            meta.get("Trackers", "0"),
            view.info_hash_hex,
        )
    console.print(table)
    if page.skipped:
        _ui_warn(f"{page.skipped} malformed document(s) on this page were skipped.")
    nav = []
    if state.page_number > 1:
        nav.append("[P] previous")
    if state.has_next_page(page_size):
        nav.append("[N] next")
    if nav:
        console.print("  " + escape("  ".join(nav)))


def render_magnet(uri: str) -> bool:
    parsed = parse_magnet_link(uri)
    if parsed.info_hash is None:
        _ui_error("Not a magnet link with a usable btih infohash.")
        return False
    table = Table(title="Magnet link")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Infohash", parsed.info_hash)
    table.add_row("Name", escape(parsed.display_name or "-"))
    for tracker in parsed.tracker_list or ["-"]:
        table.add_row("Tracker", escape(tracker))
    console.print(table)
    return True


@dataclass
class CliSession:
    config: RepoConfig
    settings_path: Path
    store: DocumentStore
    engine: QueryEngine

    @classmethod
    def open(cls, config: RepoConfig, settings_path: Path) -> "CliSession":
        store = GatewayStoreAdapter.from_config(config)
        return cls(config, settings_path, store, _build_engine(config, store))

    async def reopen(self, config: RepoConfig) -> None:
        await self.store.close()
        self.config = config
        self.store = GatewayStoreAdapter.from_config(config)
        self.engine = _build_engine(config, self.store)

    async def close(self) -> None:
        await self.store.close()


def _build_engine(config: RepoConfig, store: DocumentStore) -> QueryEngine:
    return QueryEngine(
        store,
        config.browse.contract_id,
        page_size=config.browse.page_size,
        default_collection=config.browse.default_collection,
    )


async def run_browse_action(session: CliSession, action: Callable[[], Awaitable[Optional[BrowsePage]]]) -> None:
    """Run one engine transition; failures keep the previous page on screen."""
    log = logger.get_logger()
    try:
        log.status("Querying store...")
        try:
            page = await action()
        finally:
            log.clear_status()
    except InvalidSearchTerm as exc:
        _ui_warn(str(exc))
        return
    except StoreError as exc:
        _ui_error(f"Query failed: {exc}. Press R to retry.")
        return
    if page is None:
        return
    if not page.fetched:
        _ui_info("No more pages in that direction.")
    render_page(page, session.engine.page_size)


def _render_main_menu(session: CliSession) -> None:
    config = session.config
    console.print()
    console.print(
        Panel(
            "[bold blue]torrentrepo[/bold blue]\n"
            f"Network {escape(config.browse.network)} - contract {escape(short_id(session.engine.contract_id))}"
        )
    )
    for section_idx, (section_title, items) in enumerate(MAIN_MENU_SECTIONS):
        console.print(section_title)
        for key, label in items:
            console.print(f"    [{key}] {label}")
        if section_idx < len(MAIN_MENU_SECTIONS) - 1:
            console.print()
    console.print()


async def _handle_search(session: CliSession) -> None:
    spec = session.engine.collection
    term = _ui_prompt(spec.search_placeholder, default="")
    await run_browse_action(session, lambda: session.engine.search(term))


async def _handle_magnet() -> None:
    render_magnet(_ui_prompt("Magnet link").strip())


def _prompt_document_form(collection_id: str) -> dict[str, str]:
    spec = resolve_collection(collection_id)
    magnet = _ui_prompt("Magnet link to pre-fill (blank to skip)", default="").strip()
    prefilled = form_from_magnet(magnet) if magnet else {}
    if magnet and not prefilled:
        _ui_warn("Magnet link not recognised; enter fields manually.")

    form: dict[str, str] = {}
    form["infoHash"] = _ui_prompt("Infohash (40 hex)", default=prefilled.get("infoHash", ""))
    form["torrentName"] = _ui_prompt("Torrent name", default=prefilled.get("torrentName", ""))
    form[spec.search_field] = _ui_prompt(spec.search_placeholder, default="")
    form["trackers"] = _ui_prompt("Trackers (comma separated)", default=prefilled.get("trackers", "").replace("\n", ","))
    form["sizeBytes"] = _ui_prompt("Size in bytes (blank if unknown)", default="")
    return form


async def _handle_submit(session: CliSession) -> None:
    try:
        credentials = registry.credentials_from_identity(session.config.identity)
    except ValueError as exc:
        _ui_error(str(exc))
        return
    collection_id = _ui_prompt("Collection", default=session.engine.state.collection_id).strip().lower()
    try:
        form = _prompt_document_form(collection_id)
        submitted = await registry.submit_document(
            session.store,
            session.engine.contract_id,
            collection_id,
            form,
            credentials,
        )
    except DocumentValidationError as exc:
        _ui_error("Document is not valid:")
        for problem in exc.errors:
            console.print(f"  - {escape(problem)}")
        return
    except (StoreError, ValueError) as exc:
        _ui_error(f"Submission failed: {exc}")
        return
    _ui_info(f"Document submitted: {submitted.document_id}")
    view = build_document_view(submitted.document)
    console.print(f"  {escape(view.magnet_uri)}")


async def _handle_register(session: CliSession) -> None:
    try:
        credentials = registry.credentials_from_identity(session.config.identity)
    except ValueError as exc:
        _ui_error(str(exc))
        return
    _ui_info(f"Identity {short_id(credentials.identity_id)} key {redact_secret(credentials.private_key_wif)}")
    if not _ui_prompt_yesno("Register a new five-collection contract?", default_yes=False):
        return
    try:
        registration = await registry.register_contract(session.store, credentials)
    except StoreError as exc:
        _ui_error(f"Registration failed: {exc}")
        return
    _ui_info(f"Contract ID: {registration.contract_id}")
    if _ui_prompt_yesno("Browse this contract from now on?", default_yes=True):
        await _update_settings(session, contract_id=registration.contract_id)


async def _update_settings(
    session: CliSession,
    *,
    network: str | None = None,
    contract_id: str | None = None,
) -> None:
    saved = load_settings(session.settings_path)
    updated = BrowseSettings(
        network=network or saved.network,
        contract_id=contract_id or saved.contract_id,
    )
    config = apply_settings(session.config, updated)
    config.resolve_network()
    save_settings(updated, session.settings_path)
    await session.reopen(config)
    _ui_info(f"Settings saved to {session.settings_path}")


async def _handle_settings(session: CliSession, base_config: RepoConfig) -> None:
    saved = load_settings(session.settings_path)
    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Active")
    table.add_column("Saved", style="grey50")
    table.add_row("Network", session.config.browse.network, saved.network or "-")
    table.add_row("Contract", session.config.browse.contract_id, saved.contract_id or "-")
    table.add_row("Page size", str(session.config.browse.page_size), "-")
    console.print(table)
    console.print("  [N] Change network  [C] Change contract  [X] Clear saved settings  [B] Back")

    choice = _ui_prompt("Choice", default="B").strip().upper()
    try:
        if choice == "N":
            await _update_settings(session, network=_ui_prompt("Network", default=session.config.browse.network))
        elif choice == "C":
            await _update_settings(session, contract_id=_ui_prompt("Contract ID").strip())
        elif choice == "X":
            if clear_settings(session.settings_path):
                _ui_info("Saved settings cleared.")
            await session.reopen(base_config)
    except ValueError as exc:
        _ui_error(str(exc))


async def _handle_main_menu_choice(session: CliSession, base_config: RepoConfig, choice: str) -> bool:
    if choice == "Q":
        _ui_goodbye_with_elapsed()
        return False

    engine = session.engine
    if choice in TAB_KEYS:
        await run_browse_action(session, lambda: engine.select_collection(TAB_KEYS[choice]))
        return True

    handlers: dict[str, Callable[[], Awaitable[None]]] = {
        "S": lambda: _handle_search(session),
        "C": lambda: run_browse_action(session, engine.clear_search),
        "N": lambda: run_browse_action(session, engine.next_page),
        "P": lambda: run_browse_action(session, engine.previous_page),
        "R": lambda: run_browse_action(session, engine.refresh),
        "M": _handle_magnet,
        "U": lambda: _handle_submit(session),
        "G": lambda: _handle_register(session),
        "V": lambda: verify_store(session.config, session.store),
        "T": lambda: _handle_settings(session, base_config),
    }
    handler = handlers.get(choice)
    if handler is None:
        _ui_warn("Unknown choice. Please select a listed option.")
        return True
    await handler()
    return True


async def main_menu(config: RepoConfig, settings_path: Path) -> None:
    """Interactive browse loop; one store session for the whole run."""
    session = CliSession.open(apply_settings(config, load_settings(settings_path)), settings_path)
    try:
        await run_browse_action(session, session.engine.refresh)
        while True:
            _render_main_menu(session)
            choice = _ui_prompt("Choice", default="N").strip().upper()
            if not await _handle_main_menu_choice(session, config, choice):
                return
    finally:
        await session.close()


async def run_one_shot_browse(config: RepoConfig, collection_id: str | None, search: str | None) -> bool:
    store = GatewayStoreAdapter.from_config(config)
    engine = QueryEngine(
        store,
        config.browse.contract_id,
        page_size=config.browse.page_size,
        default_collection=collection_id or config.browse.default_collection,
    )
    try:
        page = await (engine.search(search) if search else engine.refresh())
    except (InvalidSearchTerm, StoreError) as exc:
        _ui_error(str(exc))
        return False
    finally:
        await store.close()
    if page is not None:
        render_page(page, engine.page_size)
    return True


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"torrentrepo v{getattr(pkg, '__version__', '0.0.0')} - Browse torrent metadata in a data-contract store")
    print()
    parser.print_help()


def resolve_config_path(args_config: Optional[str]) -> Path:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        return p

    cwd_candidate = Path.cwd() / "config.toml"
    if cwd_candidate.exists():
        return cwd_candidate

    repo_root = Path(__file__).resolve().parent.parent
    root_candidate = repo_root / "config.toml"
    if root_candidate.exists() and (repo_root / "pyproject.toml").exists():
        return root_candidate
    return cwd_candidate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("--verify",), {"action": "store_true", "help": "Check gateway and contract, then exit"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("--settings",), {"metavar": "PATH", "help": f"Settings file (default: {DEFAULT_SETTINGS_PATH})"}),
        (("--log-file",), {"metavar": "PATH", "help": "Also write log output to this file"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with store requests and timestamps"}),
        (("--magnet",), {"metavar": "URI", "help": "Parse a magnet link and exit"}),
        (("--collection",), {"metavar": "ID", "help": f"Collection for one-shot browse ({', '.join(COLLECTIONS)})"}),
        (("--search",), {"metavar": "TERM", "help": "Search term for one-shot browse"}),
    ):
        parser.add_argument(*args, **kwargs)
    return parser


def main():
    """Entry point"""
    _reset_cli_session_timer()
    parser = build_parser()

    repo_log = None
    try:
        args = parser.parse_args()
        if args.help:
            show_help(parser)
            sys.exit(0)

        if args.magnet:
            sys.exit(0 if render_magnet(args.magnet) else 1)

        log_file = Path(args.log_file).expanduser() if args.log_file else None
        repo_log = logger.RepoLogger(log_file=log_file, debug=args.debug)
        logger.set_logger(repo_log)

        config = load_config(resolve_config_path(args.config))
        settings_path = Path(args.settings).expanduser() if args.settings else DEFAULT_SETTINGS_PATH
        active_config = apply_settings(config, load_settings(settings_path))

        if args.verify:
            result = asyncio.run(verify_store(active_config))
            sys.exit(0 if result else 1)

        if args.collection or args.search:
            ok = asyncio.run(run_one_shot_browse(active_config, args.collection, args.search))
            sys.exit(0 if ok else 1)

        asyncio.run(main_menu(config, settings_path))
        sys.exit(0)
    except KeyboardInterrupt:
        _ui_goodbye_with_elapsed()
        sys.exit(0)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        if repo_log is not None:
            repo_log.close()


if __name__ == "__main__":
    main()
