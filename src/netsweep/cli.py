"""CLI entry point for netsweep."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .core.config import get_config
from .core.exceptions import NetSweepError, ValidationError
from .core.utils import get_interfaces, interface_range, parse_ip_range

console = Console()


def print_error(message: str) -> None:
    """Print error message in red."""
    console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print success message in green."""
    console.print(f"[green]✓[/green] {message}")


def _interface_table(interfaces: dict, numbered: bool = False) -> Table:
    table = Table(title="Network Interfaces")
    if numbered:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Interface", style="cyan")
    table.add_column("IPv4", style="green")
    table.add_column("Netmask", style="green")
    table.add_column("MAC", style="yellow")
    table.add_column("Status", style="magenta")

    for idx, (name, info) in enumerate(interfaces.items()):
        status = "[green]UP[/green]" if info.get("is_up") else "[red]DOWN[/red]"
        row = [
            name,
            info.get("ipv4") or "-",
            info.get("netmask") or "-",
            info.get("mac") or "-",
            status,
        ]
        if numbered:
            row.insert(0, str(idx))
        table.add_row(*row)

    return table


def _prompt_range() -> tuple[str, str]:
    """Ask for an interface by index, or a custom range when left blank."""
    interfaces = get_interfaces()
    console.print(_interface_table(interfaces, numbered=True))

    choice = click.prompt(
        "Select the interface number you want to scan (or press Enter for custom IP range)",
        default="",
        show_default=False,
    ).strip()

    if not choice:
        custom = click.prompt("Enter custom IP range (e.g., 192.168.1.1-192.168.1.254)")
        return parse_ip_range(custom)

    names = list(interfaces)
    try:
        name = names[int(choice)]
    except (ValueError, IndexError) as e:
        raise ValidationError(f"Invalid interface selection: {choice}") from e
    return interface_range(name)


@click.group()
@click.version_option(version=__version__, prog_name="netsweep")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """netsweep - ICMP host discovery across IPv4 address ranges."""
    ctx.ensure_object(dict)
    try:
        config = get_config()
    except NetSweepError as e:
        print_error(str(e))
        sys.exit(1)
    config.verbose = verbose or config.verbose
    ctx.obj["config"] = config

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@main.command()
@click.argument("ip_range", required=False)
@click.option("--interface", "-i", help="Sweep the IPv4 subnet of this interface")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Reply deadline per host in seconds",
)
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    default=None,
    help="Cap concurrent probes (default: one per address)",
)
@click.option(
    "--strict-match",
    is_flag=True,
    help="Only credit replies whose identifier/sequence match the probe",
)
@click.option("--output", "-o", type=click.Path(), help="Output file (JSON)")
@click.pass_context
def sweep(
    ctx: click.Context,
    ip_range: str | None,
    interface: str | None,
    timeout: float | None,
    max_workers: int | None,
    strict_match: bool,
    output: str | None,
) -> None:
    """Discover live hosts in IP_RANGE (e.g. 192.168.1.1-192.168.1.254)."""
    from .discovery import icmp_sweep

    if ip_range and interface:
        raise click.UsageError("Pass either IP_RANGE or --interface, not both.")

    try:
        if ip_range:
            start, end = parse_ip_range(ip_range)
        elif interface:
            start, end = interface_range(interface)
        else:
            start, end = _prompt_range()
    except NetSweepError as e:
        print_error(str(e))
        sys.exit(1)

    console.print(f"[bold]Scanning range: {start}-{end}[/bold]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Scanning...", total=None)
        found = 0

        def on_discovered(address: str) -> None:
            nonlocal found
            found += 1
            progress.update(task, description=f"Scanning... {found} found")

        try:
            result = icmp_sweep(
                start,
                end,
                timeout=timeout,
                max_workers=max_workers,
                strict_match=strict_match or None,
                on_discovered=on_discovered,
            )
            progress.update(task, completed=True)
        except NetSweepError as e:
            print_error(str(e))
            sys.exit(1)

    console.print(f"Unique IPs: {result.count}")
    if result.hosts:
        console.print("List of IPs in order:")
        for host in result.hosts:
            console.print(host)
    else:
        console.print("[yellow]No hosts discovered.[/yellow]")

    console.print(
        Panel(
            f"Probed: {result.probed} | "
            f"[green]Alive: {result.count}[/green] | "
            f"[red]Errors: {result.errors}[/red] | "
            f"Duration: {result.duration:.2f}s",
            title="Sweep Summary",
        )
    )

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        print_success(f"Results saved to {output_path}")


@main.command("list-interfaces")
def list_interfaces() -> None:
    """List available network interfaces."""
    console.print(_interface_table(get_interfaces()))


if __name__ == "__main__":
    main()
