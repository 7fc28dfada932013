"""Main CLI interface using Typer."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from transgate import __version__
from transgate.core.exceptions import ConfigurationError
from transgate.core.gateway import GatewayConfig, create_gateway
from transgate.utils.cache import PersistentTranslationCache
from transgate.utils.config_loader import get_default_config, load_config, save_config
from transgate.utils.logger import get_logger, setup_logger

app = typer.Typer(
    name="transgate",
    help="TransGate: caching, coalescing translation gateway",
    add_completion=False
)

console = Console()
log = get_logger("transgate.cli")


def _load(config_path: Optional[Path]) -> dict:
    try:
        return load_config(str(config_path) if config_path else None)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def translate(
    texts: List[str] = typer.Argument(..., help="Texts to translate"),
    target_lang: str = typer.Option("en", "-t", "--target", help="Target language code"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="YAML config file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response body"),
    debug_mode: bool = typer.Option(False, "--debug/--no-debug", help="Enable debug logging"),
):
    """Translate one or more texts through the gateway."""
    config = _load(config_path)
    setup_logger(level="DEBUG" if debug_mode else config["logging"].get("level", "INFO"),
                 log_file=config["logging"].get("file"))

    try:
        gateway = create_gateway(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    async def _run():
        async with gateway:
            return await gateway.handle_request({"texts": texts, "target": target_lang})

    response = asyncio.run(_run())
    log.info(f"{len(texts)} texts -> {target_lang}: HTTP {response.status_code}")

    if as_json:
        console.print_json(json.dumps(response.body, ensure_ascii=False))
    elif response.ok:
        table = Table(title=f"Translations → {target_lang}")
        table.add_column("#", style="dim")
        table.add_column("Source")
        table.add_column("Translation", style="green")
        for i, (source, translated) in enumerate(zip(texts, response.body["translations"]), 1):
            table.add_row(str(i), source, translated)
        console.print(table)
    else:
        console.print(f"[red]Error ({response.status_code}): {response.body.get('error')}[/red]")

    if not response.ok:
        raise typer.Exit(1)


@app.command()
def cache(
    action: str = typer.Argument("stats", help="Action: stats, clear"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="YAML config file"),
):
    """Inspect or clear the persistent translation cache."""
    config = _load(config_path)
    try:
        gateway_config = GatewayConfig.from_dict(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    store = PersistentTranslationCache(gateway_config.cache_path, ttl_days=gateway_config.cache_ttl_days)
    store.load()

    if action == "stats":
        table = Table(title="Translation cache")
        table.add_column("Property", style="cyan")
        table.add_column("Value")
        for key, value in store.get_stats().items():
            table.add_row(key, str(value))
        console.print(table)
    elif action == "clear":
        store.clear()
        if asyncio.run(store.flush()):
            console.print(f"[green]✓ Cleared cache at {store.cache_path}[/green]")
        else:
            console.print(f"[red]Could not write {store.cache_path}[/red]")
            raise typer.Exit(1)
    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: stats, clear")
        raise typer.Exit(1)


@app.command("init-config")
def init_config(
    output: Path = typer.Argument(Path("configs/local.yaml"), help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write the default configuration to a YAML file."""
    if output.exists() and not force:
        console.print(f"[red]{output} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    save_config(get_default_config(), str(output))
    log.info(f"Wrote default config to {output}")
    console.print(f"[green]✓ Wrote default configuration to {output}[/green]")


@app.command()
def info(
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="YAML config file"),
):
    """Show effective configuration and provider status."""
    config = _load(config_path)
    try:
        gateway = create_gateway(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    backend = gateway.backend.get_info()
    status = "✓ Available" if backend["available"] else "✗ Not configured (set OPENAI_API_KEY)"
    color = "green" if backend["available"] else "yellow"

    console.print(f"\n[bold blue]TransGate {__version__}[/bold blue]\n")
    console.print(f"Provider: {backend['name']} ({backend['model']}) [{color}]{status}[/{color}]")
    console.print(f"Max concurrent calls: {gateway.config.max_concurrent}")
    console.print(f"Retry batch limit: {gateway.config.max_retry_batch}")
    console.print(f"Provider timeout: {gateway.config.provider_timeout}s")
    console.print(f"Cache: {gateway.config.cache_path} (TTL {gateway.config.cache_ttl_days:g} days)")


def cli():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
