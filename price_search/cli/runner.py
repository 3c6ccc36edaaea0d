# price_search/cli/runner.py

"""Headless CLI runner built on the async orchestrator."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from price_search.models.external_source import ExternalSource
from price_search.models.search_result import (
    ResultStatus,
    UnifiedSearchResult,
)
from price_search.services.search_orchestrator import (
    SearchMode,
    SearchOrchestrator,
    mark_best_price,
)
from price_search.services.session_manager import SessionManager
from price_search.storage.json_store import (
    CatalogStore,
    JsonStore,
    SourceRegistry,
    StoreError,
)

logger = logging.getLogger("price_search.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def resolve_sources(
    all_sources: list[ExternalSource],
    source_csv: str | None,
) -> list[ExternalSource]:
    """Restrict *all_sources* to a comma-separated list of ids.

    Returns every source when *source_csv* is ``None``.
    Raises ``SystemExit`` on unknown IDs.
    """
    if source_csv is None:
        return all_sources

    available = {s.id: s for s in all_sources}
    requested = [
        s.strip() for s in source_csv.split(",") if s.strip()
    ]
    unknown = [r for r in requested if r not in available]
    if unknown:
        valid = ", ".join(sorted(available)) or "none configured"
        _err.print(
            f"[red]Unknown source(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)

    return [available[r] for r in requested]


def _format_price(result: UnifiedSearchResult) -> str:
    if result.has_numeric_price:
        return f"{float(result.price):,.2f}"
    return str(result.price)


_STATUS_STYLES: dict[ResultStatus, str] = {
    ResultStatus.OK: "[green]ok[/green]",
    ResultStatus.REQUIRES_LOGIN: "[yellow]login[/yellow]",
    ResultStatus.ERROR: "[red]error[/red]",
}


def _print_table(results: list[UnifiedSearchResult]) -> None:
    """Render a Rich table of results to stdout."""
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=50)
    table.add_column("Price", justify="right")
    table.add_column("Status", justify="center")
    table.add_column("Source", style="magenta")
    table.add_column("SKU", style="dim")
    table.add_column("Stock", justify="right")
    table.add_column("Link", overflow="fold", style="dim")

    for idx, r in enumerate(results, 1):
        price = _format_price(r)
        if r.is_best_price:
            price = f"[bold green]★ {price}[/bold green]"
        table.add_row(
            str(idx),
            r.name[:50],
            price,
            _STATUS_STYLES[r.status],
            r.origin,
            r.sku,
            "" if r.stock is None else str(r.stock),
            r.link,
        )

    Console().print(table)


async def cli_search(
    query: str,
    source_csv: str | None,
    mode: str,
    output_format: str,
    data_dir: str | None,
) -> int:
    """Run a headless search and return an exit code (0=ok, 1=fail)."""
    store = JsonStore(Path(data_dir) if data_dir else None)
    try:
        catalog = CatalogStore(store).all_products()
        sources = resolve_sources(
            SourceRegistry(store).all_sources(), source_csv
        )
    except StoreError as exc:
        logger.error("Cannot load data: %s", exc, exc_info=True)
        _err.print(f"[red]{exc}[/red]")
        return 1

    search_mode = SearchMode(mode)
    active = [s for s in sources if s.active]
    _err.print(
        f"[bold]Searching:[/bold] {query}  "
        f"[dim]mode={search_mode.value} catalog={len(catalog)} "
        f"sources={len(active)}[/dim]"
    )

    orchestrator = SearchOrchestrator()
    results = mark_best_price(
        await orchestrator.search(query, catalog, sources, search_mode)
    )

    if not results:
        _err.print("[yellow]No results found.[/yellow]")
        return 1

    failed = sum(1 for r in results if r.status is ResultStatus.ERROR)
    gated = sum(
        1 for r in results if r.status is ResultStatus.REQUIRES_LOGIN
    )
    parts: list[str] = []
    if gated:
        parts.append(f"{gated} need login")
    if failed:
        parts.append(f"{failed} failed")
    detail = f" ({', '.join(parts)})" if parts else ""
    _err.print(f"[green]✓ {len(results)} results{detail}[/green]")

    if output_format == "table":
        _print_table(results)
    else:
        json.dump(
            [r.to_dict() for r in results],
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


def list_sources(data_dir: str | None) -> int:
    """Print the configured sources, flagging unusable URL templates."""
    try:
        sources = SourceRegistry(
            JsonStore(Path(data_dir) if data_dir else None)
        ).all_sources()
    except StoreError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    table = Table(
        title="Configured Sources",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Active", justify="center")
    table.add_column("Login", justify="center")
    table.add_column("Cookies", justify="center")
    table.add_column("URL template", overflow="fold", style="dim")

    for s in sources:
        template = s.url_template
        if not s.has_placeholder:
            template = f"[red]{template or '—'} (no placeholder)[/red]"
        table.add_row(
            s.id,
            s.name,
            "yes" if s.active else "no",
            "required" if s.requires_login else "—",
            "yes" if s.cookie_header() else "—",
            template,
        )

    Console().print(table)
    return 0


async def run_login(source_id: str, data_dir: str | None) -> int:
    """Open the login window for a source and store its cookies."""
    try:
        registry = SourceRegistry(
            JsonStore(Path(data_dir) if data_dir else None)
        )
        source = registry.get(source_id)
    except StoreError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1
    if source is None:
        _err.print(f"[red]Unknown source: {source_id}[/red]")
        return 1

    manager = SessionManager(on_cookies=registry.save_cookies)
    handle = manager.manage_session(source)
    if handle is None:
        _err.print(f"[red]{source.name} has no URL configured[/red]")
        return 1

    _err.print(
        f"[bold]Log in to {source.name} and close the window "
        "when done.[/bold]"
    )
    if not await handle:
        _err.print(
            f"[yellow]No session cookies stored for {source.name}; "
            "see the run log for details.[/yellow]"
        )
        return 1
    _err.print(f"[green]✓ Session for {source.name} synced[/green]")
    return 0
