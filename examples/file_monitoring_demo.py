#!/usr/bin/env python3
"""
Demonstration script for the workspace monitor.

Watches a directory, treats every file currently in it as part of the loaded
workspace, and periodically reports whether the workspace would need to be
reloaded. Writes made through the demo's own "save" step are registered as
expected changes and do not trigger a reload.

Usage:
    python examples/file_monitoring_demo.py [--watch-dir PATH] [--duration SECONDS]
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from workspace_monitor import FileMonitoringService, MonitorConfig, is_path_ignored

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Initialize rich console
console = Console()


def collect_known_files(directory: Path, config: MonitorConfig) -> set[str]:
    """Collect every file below ``directory`` outside ignored directories."""
    root = str(directory.resolve())
    known = set()
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            file_path = os.path.join(dirpath, name)
            if not is_path_ignored(root, file_path, ignored_names=config.ignored_directories):
                known.add(file_path)
    return known


def create_monitoring_stats_table(stats: dict) -> Table:
    """Create a rich table for monitoring statistics."""
    table = Table(title="📊 Workspace Monitoring Statistics", show_header=True)
    table.add_column("Metric", style="cyan", width=22)
    table.add_column("Value", style="white", width=15)

    session = stats["session"] or {}
    table.add_row("Monitoring Active", str(stats["monitoring_active"]))
    table.add_row("Session State", str(session.get("state", "-")))
    table.add_row("Known Files", str(session.get("known_file_count", 0)))
    table.add_row("Change Notifications", str(session.get("change_count", 0)))
    table.add_row("Pending Changes", str(session.get("pending_changes", 0)))
    table.add_row("Expected Changes", str(session.get("expected_changes", 0)))
    table.add_row("Reload Necessary", str(session.get("reload_necessary", True)))

    return table


async def demonstrate_monitoring(watch_directory: Path, duration: int, save_file: Path | None) -> None:
    """
    Run the monitoring loop for ``duration`` seconds.

    Args:
        watch_directory: Directory to monitor for changes
        duration: How long to run the demo (in seconds)
        save_file: Optional file the demo rewrites itself, as an expected change
    """
    config = MonitorConfig()

    console.print(
        Panel.fit(
            "🔍 [bold blue]Workspace Reload Detection Demo[/bold blue]\n"
            "Edit, create or delete files in the watched directory to see\n"
            "external changes detected. Changes under .git, bin and obj are ignored.\n\n"
            f"📁 Watching: [cyan]{watch_directory}[/cyan] | "
            f"⏱️  Duration: [yellow]{duration}s[/yellow]",
            title="Workspace Monitor Demo",
            border_style="blue",
        )
    )

    with FileMonitoringService(config) as service:
        service.start_monitoring(watch_directory)

        known_files = collect_known_files(watch_directory, config)
        service.set_known_file_paths(known_files)
        console.print(f"✅ [bold green]Monitoring {len(known_files)} known files[/bold green]")

        if save_file is not None:
            content = f"saved by the demo at {time.ctime()}\n"
            service.register_expected_change(save_file, content)
            save_file.write_text(content, encoding="utf-8")
            console.print(f"💾 Saved [cyan]{save_file}[/cyan] as an expected change")

        start_time = time.time()
        while time.time() - start_time < duration:
            await asyncio.sleep(2)

            if await service.assess_if_reload_necessary():
                console.print("🔄 [bold red]External change detected: reload necessary[/bold red]")
                console.print(create_monitoring_stats_table(service.get_monitoring_stats()))

                # A real owner would reload its model here before monitoring again.
                service.start_monitoring(watch_directory)
                known_files = collect_known_files(watch_directory, config)
                service.set_known_file_paths(known_files)
                console.print(f"✅ Restarted monitoring with {len(known_files)} known files")

        console.print(create_monitoring_stats_table(service.get_monitoring_stats()))

    console.print("✅ [bold green]Monitoring stopped[/bold green]")


@click.command()
@click.option(
    '--watch-dir',
    '-d',
    type=click.Path(path_type=Path, file_okay=False),
    default=Path('./test_workspace'),
    help='Directory to monitor (will be created if it doesn\'t exist)',
)
@click.option('--duration', '-t', type=int, default=60, help='Duration to run the demo in seconds')
@click.option('--save', 'save_name', type=str, default=None, help='File name the demo writes itself')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def main(watch_dir: Path, duration: int, save_name: str | None, verbose: bool):
    """
    Run the workspace monitor demonstration.

    Example usage:

        # Watch ./test_workspace for 60 seconds
        python examples/file_monitoring_demo.py

        # Watch a project for 2 minutes and write one file as an expected change
        python examples/file_monitoring_demo.py -d /path/to/project -t 120 --save notes.txt
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    watch_dir.mkdir(parents=True, exist_ok=True)
    save_file = (watch_dir / save_name).resolve() if save_name else None

    try:
        asyncio.run(demonstrate_monitoring(watch_dir.resolve(), duration, save_file))
    except KeyboardInterrupt:
        console.print("\n⚡ [yellow]Demo interrupted by user[/yellow]")
    except Exception as e:
        console.print(f"❌ [red]Demo failed:[/red] {e}")
        logger.exception("Full error details:")
        return 1


if __name__ == "__main__":
    main()
