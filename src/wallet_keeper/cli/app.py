"""CLI for wallet-keeper - run and inspect the keeper from the terminal."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from wallet_keeper.config import DEFAULT_CONFIG_NAME

app = typer.Typer(
    name="wallet-keeper",
    help="A bitcoind-style wallet service for account-based ledgers.",
    no_args_is_help=True,
)
console = Console()

_config_path: Path = Path(DEFAULT_CONFIG_NAME)


def _version_callback(value: bool):
    if value:
        from wallet_keeper import __version__
        console.print(f"wallet-keeper {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME),
        "--config",
        "-c",
        help="Path to the keeper config file",
        envvar="WALLET_KEEPER_CONFIG",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """A bitcoind-style wallet service for account-based ledgers."""
    global _config_path
    _config_path = config


def _load_keeper():
    """Load config, set up logging, and build the keeper. Exits on failure."""
    from wallet_keeper.config import load_config
    from wallet_keeper.errors import ConfigError
    from wallet_keeper.eth.client import EthKeeper
    from wallet_keeper.logging_config import setup_logging

    try:
        config = load_config(_config_path)
        setup_logging(config.log_level, config.log_file)
        return config, EthKeeper.from_config(config)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        console.print("[dim]Run 'wallet-keeper init' to create a default setup.[/dim]")
        raise typer.Exit(1)


# ------------------------------------------------------------------
# init
# ------------------------------------------------------------------


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
):
    """Write a default config and create the wallet, log and binding files."""
    from wallet_keeper.config import KeeperConfig, save_config
    from wallet_keeper.eth.store import AddressStore

    if _config_path.exists() and not force:
        console.print(f"[yellow]{_config_path} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)

    config = KeeperConfig()
    save_config(config, _config_path)

    resolved = config.resolve_paths(_config_path.resolve().parent)
    resolved.wallet_dir.mkdir(parents=True, exist_ok=True)
    resolved.log_dir.mkdir(parents=True, exist_ok=True)
    created = AddressStore.initialize(resolved.account_path)

    bindings_line = "created" if created else "kept existing file"
    console.print(Panel(
        f"[bold green]wallet-keeper initialized![/bold green]\n\n"
        f"Config: {_config_path}\n"
        f"Wallet dir: {resolved.wallet_dir}\n"
        f"Bindings: {resolved.account_path} ({bindings_line})\n\n"
        f"[dim]Set keystore.passphrase before creating accounts.[/dim]\n\n"
        f"Next steps:\n"
        f"  wallet-keeper create-account alice\n"
        f"  wallet-keeper serve",
        title="wallet-keeper",
    ))


# ------------------------------------------------------------------
# serve
# ------------------------------------------------------------------


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int = typer.Option(None, "--port", "-p", help="Port (default from config)"),
):
    """Serve the keeper over HTTP."""
    from wallet_keeper.server import run_server

    config, keeper = _load_keeper()
    run_server(keeper, host=host or config.server.host, port=port or config.server.port)


# ------------------------------------------------------------------
# accounts
# ------------------------------------------------------------------


@app.command("create-account")
def create_account(
    account: str = typer.Argument(help="Name of the account to create"),
):
    """Generate a key for a new account and bind it."""
    from wallet_keeper.errors import KeeperError

    _, keeper = _load_keeper()
    try:
        record = keeper.create_account(account)
    except KeeperError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold green]Account '{record.account}' created![/bold green]\n\n"
        f"Address: [cyan]{record.addresses[0]}[/cyan]",
        title="New Account",
    ))


@app.command()
def address(
    account: str = typer.Argument(help="Account name"),
):
    """Show the address bound to an account."""
    from wallet_keeper.errors import KeeperError

    _, keeper = _load_keeper()
    try:
        addr = keeper.get_address(account)
    except KeeperError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[cyan]{addr}[/cyan]")


@app.command()
def accounts():
    """List all account bindings."""
    _, keeper = _load_keeper()
    bindings = keeper.store.snapshot()
    if not bindings:
        console.print("[dim]No accounts yet.[/dim]")
        return

    known_keys = set(keeper.key_provider.list_addresses())

    table = Table(title="Accounts")
    table.add_column("Account", style="cyan")
    table.add_column("Address")
    table.add_column("Keystore", style="dim")
    for name in sorted(bindings):
        addr = bindings[name]
        table.add_row(
            name,
            addr,
            "[green]OK[/green]" if addr in known_keys else "[red]missing[/red]",
        )
    console.print(table)


# ------------------------------------------------------------------
# node
# ------------------------------------------------------------------


@app.command("block-count")
def block_count(
    timeout: float = typer.Option(None, "--timeout", "-t", help="Seconds to wait for the node (default from config)"),
):
    """Show the current block number of the node."""
    from wallet_keeper.errors import KeeperError

    _, keeper = _load_keeper()
    try:
        height = keeper.get_block_count(timeout=timeout)
    except KeeperError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[bold]Block:[/bold] {height}")
