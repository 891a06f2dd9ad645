"""sshconfman CLI."""

import logging
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from sshconfman.config import ManagerConfig, default_config_path, get_config_template, load_config
from sshconfman.document import ConfigDocument, read_config
from sshconfman.errors import SSHConfigError
from sshconfman.parser.record import HostRecord
from sshconfman.resolve import resolve_host
from sshconfman.writer import list_backups, restore_backup, update_config

app = typer.Typer(help="sshconfman - Manage Host entries in your SSH client config")
console = Console()

SETTINGS_FILE = Path("~/.config/sshconfman.yaml")

ConfigOption = typer.Option(None, "--config", "-c", help="SSH config file (default: ~/.ssh/config)")
SettingsOption = typer.Option(None, "--settings", help="sshconfman settings YAML file")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")


def setup_logging(verbose: bool = False):
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )
    logging.getLogger("paramiko").setLevel(logging.WARNING)


def get_settings(config: Path | None, settings: Path | None) -> ManagerConfig:
    """Load settings, letting --config override the configured path."""
    settings_path = settings or SETTINGS_FILE.expanduser()
    if settings is not None and not settings_path.exists():
        console.print(f"[red]Error:[/red] Settings file {settings_path} not found.")
        raise typer.Exit(1)

    try:
        manager_config = load_config(settings_path) if settings_path.exists() else ManagerConfig()
    except (OSError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Error:[/red] Cannot load settings file {settings_path}: {escape(str(e))}")
        raise typer.Exit(1)
    if config is not None:
        manager_config = manager_config.model_copy(update={"config_path": config.expanduser()})
    return manager_config


def load_document(manager_config: ManagerConfig) -> ConfigDocument:
    try:
        return read_config(manager_config)
    except SSHConfigError as e:
        fail(e)


def fail(error: Exception):
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def select_record(document: ConfigDocument, name: str, identity: str | None) -> HostRecord:
    """Pick a record by identity if given, else the first with the name."""
    if identity is not None:
        try:
            record = document.get(identity)
        except SSHConfigError as e:
            fail(e)
        if record.name != name:
            console.print(f"[red]Error:[/red] Record {identity[:12]} is '{escape(record.name)}', not '{escape(name)}'.")
            raise typer.Exit(1)
        return record

    record = document.find(name)
    if record is None:
        console.print(f"[red]Error:[/red] Host '{escape(name)}' not found.")
        raise typer.Exit(1)
    return record


def save(document: ConfigDocument, manager_config: ManagerConfig):
    try:
        backup_path = update_config(document, document.file_version, manager_config)
    except SSHConfigError as e:
        fail(e)
    console.print(f"[green]Updated {manager_config.config_path}.[/green]")
    console.print(f"  Backup: {backup_path}")


@app.command()
def show(
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
):
    """Print every Host entry."""
    manager_config = get_settings(config, settings)
    document = load_document(manager_config)
    if not document.records:
        console.print("No Host entries.")
        return
    document.print(console, indent=manager_config.indent)


@app.command("list")
def list_hosts(
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
):
    """List Host entries with their identities."""
    manager_config = get_settings(config, settings)
    document = load_document(manager_config)

    table = Table()
    table.add_column("ID")
    table.add_column("Host")
    table.add_column("HostName")
    table.add_column("Port")
    table.add_column("User")
    table.add_column("Other")

    for record in document.records:
        table.add_row(
            record.identity[:12],
            escape(record.name),
            escape(record.host_name or ""),
            escape(record.port or ""),
            escape(record.user or ""),
            str(len(record.other_lines)),
        )
    console.print(table)
    console.print(f"File version: {document.file_version[:12]}")


@app.command()
def export(
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
):
    """Export all Host entries as JSON."""
    manager_config = get_settings(config, settings)
    document = load_document(manager_config)
    typer.echo(document.export_json())


@app.command("set")
def set_host(
    name: str = typer.Argument(..., help="Host entry to update"),
    hostname: str | None = typer.Option(None, "--hostname", help="New HostName"),
    port: str | None = typer.Option(None, "--port", help="New Port"),
    user: str | None = typer.Option(None, "--user", help="New User"),
    identity_file: str | None = typer.Option(None, "--identity-file", help="New IdentityFile"),
    identity: str | None = typer.Option(None, "--id", help="Identity of the entry as last seen"),
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
    verbose: bool = VerboseOption,
):
    """Update fields of a Host entry."""
    setup_logging(verbose)
    manager_config = get_settings(config, settings)
    document = load_document(manager_config)
    record = select_record(document, name, identity)

    changes = {
        "host_name": hostname,
        "port": port,
        "user": user,
        "identity_file": identity_file,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        raise typer.Exit(0)

    try:
        updated = record.with_changes(**changes)
    except ValueError as e:
        fail(e)
    document.replace(record.identity, updated)
    save(document, manager_config)


@app.command()
def add(
    name: str = typer.Argument(..., help="Host alias"),
    hostname: str | None = typer.Option(None, "--hostname", help="HostName"),
    port: str | None = typer.Option(None, "--port", help="Port"),
    user: str | None = typer.Option(None, "--user", help="User"),
    identity_file: str | None = typer.Option(None, "--identity-file", help="IdentityFile"),
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
    verbose: bool = VerboseOption,
):
    """Append a new Host entry."""
    setup_logging(verbose)
    manager_config = get_settings(config, settings)
    document = load_document(manager_config)

    if document.find(name) is not None:
        console.print(f"[red]Error:[/red] Host '{escape(name)}' already exists. Use 'sshconfman set'.")
        raise typer.Exit(1)

    try:
        record = HostRecord(
            name=name,
            host_name=hostname,
            port=port,
            user=user,
            identity_file=identity_file,
        )
    except ValueError as e:
        fail(e)
    document.add(record)
    save(document, manager_config)


@app.command()
def remove(
    name: str = typer.Argument(..., help="Host entry to remove"),
    identity: str | None = typer.Option(None, "--id", help="Identity of the entry as last seen"),
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
    verbose: bool = VerboseOption,
):
    """Remove a Host entry."""
    setup_logging(verbose)
    manager_config = get_settings(config, settings)
    document = load_document(manager_config)
    record = select_record(document, name, identity)

    document.remove(record.identity)
    save(document, manager_config)


@app.command()
def backups(
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
):
    """List backups of the SSH config, oldest first."""
    manager_config = get_settings(config, settings)
    paths = list_backups(manager_config)
    if not paths:
        console.print("No backups.")
        return
    for path in paths:
        typer.echo(str(path))


@app.command()
def restore(
    backup: Path = typer.Argument(..., help="Backup file to restore"),
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
    verbose: bool = VerboseOption,
):
    """Restore the SSH config from a backup."""
    setup_logging(verbose)
    manager_config = get_settings(config, settings)

    if not typer.confirm(f"Replace {manager_config.config_path} with {backup}?"):
        raise typer.Exit(0)

    try:
        previous = restore_backup(backup, manager_config)
    except SSHConfigError as e:
        fail(e)

    console.print(f"[green]Restored {manager_config.config_path}.[/green]")
    if previous:
        console.print(f"  Previous content saved to: {previous}")


@app.command()
def resolve(
    alias: str = typer.Argument(..., help="Host alias to resolve"),
    config: Path | None = ConfigOption,
    settings: Path | None = SettingsOption,
):
    """Show the settings ssh would use for an alias."""
    manager_config = get_settings(config, settings)
    try:
        resolved = resolve_host(manager_config.config_path, alias)
    except SSHConfigError as e:
        fail(e)

    console.print(f"[bold]Alias:[/bold] {resolved.alias}")
    console.print(f"[bold]HostName:[/bold] {resolved.hostname}")
    console.print(f"[bold]Port:[/bold] {resolved.port}")
    console.print(f"[bold]User:[/bold] {resolved.user or '-'}")
    console.print(f"[bold]IdentityFile:[/bold] {resolved.identity_file or '-'}")


@app.command("init-settings")
def init_settings(
    path: Path = typer.Argument(SETTINGS_FILE, help="Where to write the settings file"),
):
    """Write a settings file template."""
    path = path.expanduser()
    if path.exists():
        console.print(f"[yellow]Warning:[/yellow] {path} already exists.")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit(0)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(get_config_template())
    console.print(f"[green]Wrote settings template to {path}.[/green]")
    console.print(f"  SSH config: {default_config_path()}")


if __name__ == "__main__":
    app()
