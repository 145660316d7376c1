"""Sidecar CLI entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sidecar_registry.config.models import SidecarConfig

app = typer.Typer(
    name="sidecar",
    help="Sidecar - container service registry",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(config: SidecarConfig) -> None:
    logging.basicConfig(
        level=config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(path: Path | None) -> SidecarConfig:
    from sidecar_registry.config.loader import load_config_or_default

    try:
        config = load_config_or_default(path=path)
    except (ValueError, yaml.YAMLError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    _setup_logging(config)
    return config


def _discover(config: SidecarConfig):
    from sidecar_registry.runtime.discovery import DockerDiscovery, RuntimeDiscoveryError

    try:
        return DockerDiscovery.from_config(config).discover()
    except RuntimeDiscoveryError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


@app.command()
def services(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .sidecar.yaml"),
) -> None:
    """List running containers as service records."""
    config = _load(path)
    found = _discover(config)

    table = Table(title="Services")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("Image")
    table.add_column("Version")
    table.add_column("Status")
    table.add_column("Ports")
    table.add_column("Proxy")

    for svc in found:
        ports = ", ".join(
            f"{p.ip}:{p.port}/{p.type}" + (f" ({p.service_port})" if p.service_port else "")
            for p in svc.ports
        )
        table.add_row(
            svc.id,
            svc.name,
            svc.image,
            svc.version() or "—",
            svc.status_label,
            ports or "—",
            svc.proxy_mode or "—",
        )

    console.print(table)


@app.command()
def resolve(
    service: str = typer.Argument(help="Service ID or name"),
    service_port: int = typer.Argument(help="Logical service port"),
    port_type: str = typer.Option("tcp", "--type", "-t", help="Transport type"),
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .sidecar.yaml"),
) -> None:
    """Print the concrete port behind a service port (-1 when unmapped)."""
    from sidecar_registry.service.models import PORT_NOT_FOUND

    config = _load(path)
    # docker reports names with a leading slash
    wanted = service.lstrip("/")
    matches = [
        s for s in _discover(config) if s.id == service or (wanted and s.name.lstrip("/") == wanted)
    ]
    if not matches:
        console.print(f"[red]Unknown service: {service}[/red]")
        raise typer.Exit(1)

    port = matches[0].port_for_service_port(service_port, port_type)
    if port is None:
        console.print(str(PORT_NOT_FOUND))
        raise typer.Exit(1)
    console.print(str(port))


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(7777, help="Bind port"),
) -> None:
    """Start the registry API server."""
    import uvicorn

    console.print(f"[bold]Sidecar[/bold] starting on http://{host}:{port}")
    uvicorn.run("sidecar_registry.api.app:create_app", factory=True, host=host, port=port, reload=False)


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("validate")
def config_validate(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .sidecar.yaml"),
) -> None:
    """Validate configuration file."""
    import ipaddress

    from sidecar_registry.config.loader import load_config

    try:
        config = load_config(path=path)
    except FileNotFoundError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)
    except yaml.YAMLError as exc:
        console.print(f"[red]✗ YAML parsing failed: {exc}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Configuration parses correctly")

    errors: list[str] = []
    try:
        ipaddress.ip_address(config.discovery.default_ip)
        console.print(f"[green]✓[/green] Default IP {config.discovery.default_ip} is valid")
    except ValueError:
        errors.append(f"discovery.default_ip is not an IP address: '{config.discovery.default_ip}'")

    if not errors:
        console.print("\n[green bold]Configuration is valid.[/green bold]")
        return
    for err in errors:
        console.print(f"[red]✗ {err}[/red]")
    console.print(f"\n[red bold]{len(errors)} validation error(s) found.[/red bold]")
    raise typer.Exit(1)


@config_app.command("show")
def config_show(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .sidecar.yaml"),
) -> None:
    """Print resolved configuration."""
    from sidecar_registry.config.loader import load_config

    try:
        config = load_config(path=path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]{config.sidecar.name}[/bold] v{config.sidecar.version}\n")

    console.print("[bold]Discovery:[/bold]")
    console.print(f"  Default IP: {config.discovery.default_ip}")
    console.print(f"  Docker URL: {config.discovery.docker_url or '(environment)'}")
    console.print(f"  Hostname: {config.discovery.hostname or '(local)'}\n")

    console.print("[bold]Registry:[/bold]")
    console.print(f"  Stale after: {config.registry.stale_after_seconds}s")
    console.print(f"  Sweep: {'on' if config.registry.sweep else 'off'}")
    console.print(f"\nLog level: {config.log_level}")


def main() -> None:
    app()
