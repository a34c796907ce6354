"""CLI entry point for fmodsync."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from fmodsync.config import FmodSyncConfig, ProjectConfig, load_config, load_state
from fmodsync.config.loader import DEFAULT_CONFIG_TEMPLATE
from fmodsync.errors import ExportValidationError, FmodSyncError, SyncInProgressError
from fmodsync.export import find_newer_export, read_export
from fmodsync.sync import ProjectSynchronizer, SyncProgress, SyncReport, SyncStats
from fmodsync.sync.watcher import ExportWatcher

app = typer.Typer(
    name="fmodsync",
    help="Sync FMOD Studio event exports into an Obsidian vault.",
)

config_app = typer.Typer(help="Manage fmodsync configuration.")
app.add_typer(config_app, name="config")

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _configure_logging(cfg: FmodSyncConfig) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(show_path=False, rich_tracebacks=False)
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


def _get_config(ctx: typer.Context) -> FmodSyncConfig:
    cfg = ctx.obj
    if isinstance(cfg, FmodSyncConfig):
        return cfg
    return load_config()


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to fmodsync.yaml")
    ] = None,
) -> None:
    """Global options."""
    try:
        cfg = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(cfg)
    ctx.obj = cfg


def _stats_table(title: str, stats: SyncStats, duration: float | None = None) -> Table:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Created", str(stats.created))
    table.add_row("Updated", str(stats.updated))
    table.add_row("Unchanged", str(stats.unchanged))
    table.add_row("Moved", str(stats.moved))
    table.add_row("Skipped", str(stats.skipped))
    table.add_row("Errors", str(stats.errors))
    if duration is not None:
        table.add_row("Duration", f"{duration:.2f}s")
    return table


def _relative(path: str, root: Path) -> str:
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return path


def _display_report(title: str, report: SyncReport, *, dry_run: bool, root: Path) -> None:
    if dry_run:
        if report.actions:
            plan = Table(title="Dry run: notes that would change")
            plan.add_column("Action", style="yellow")
            plan.add_column("Event", style="cyan")
            plan.add_column("Destination", style="green")
            for a in report.actions:
                dest = _relative(a.target, root)
                if a.action == "move" and a.source is not None:
                    dest = f"{_relative(a.source, root)} -> {dest}"
                plan.add_row(a.action, a.name, dest)
            rprint(plan)
        else:
            rprint("[yellow]Nothing to change.[/yellow]")

    rprint(_stats_table(title, report.stats, report.duration))
    for skip in report.skipped:
        rprint(f"  [yellow]skipped:[/yellow] {skip.name}: {skip.reason}")
    for err in report.errors:
        rprint(f"  [red]error:[/red] {err.name}: {err.error}")


def _select_projects(cfg: FmodSyncConfig, project_id: str | None, all_projects: bool) -> list[ProjectConfig]:
    if not cfg.projects:
        rprint("[red]Error:[/red] No projects configured. Add projects to fmodsync.yaml.")
        raise typer.Exit(1)
    if all_projects:
        return list(cfg.projects)
    if project_id is None:
        if len(cfg.projects) == 1:
            return [cfg.projects[0]]
        rprint("[red]Error:[/red] Several projects configured: pass a PROJECT_ID or --all")
        raise typer.Exit(1)
    try:
        return [cfg.get_project(project_id)]
    except KeyError as e:
        rprint(f"[red]Error:[/red] {e.args[0]}")
        raise typer.Exit(1)


@app.command()
def sync(
    ctx: typer.Context,
    project_id: Annotated[str | None, typer.Argument(help="Project id from fmodsync.yaml")] = None,
    all_projects: Annotated[bool, typer.Option("--all", help="Sync every configured project")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would change")] = False,
) -> None:
    """Sync FMOD export JSON into vault notes."""
    cfg = _get_config(ctx)
    projects = _select_projects(cfg, project_id, all_projects)
    synchronizer = ProjectSynchronizer(cfg)

    with Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("[dim]{task.fields[event]}"),
        transient=True,
    ) as bar:
        task = bar.add_task("Scanning", total=None, event="")

        def on_progress(p: SyncProgress) -> None:
            if p.phase == "processing":
                bar.update(task, description="Syncing", completed=p.current, total=p.total, event=p.name)
            elif p.phase == "scanning":
                bar.update(task, description="Scanning", completed=0, total=None, event="")

        try:
            summary = synchronizer.sync_all(projects, dry_run=dry_run, progress=on_progress)
        except SyncInProgressError as e:
            rprint(f"[yellow]{e}[/yellow]")
            raise typer.Exit(1)

    for pid, report in summary.reports.items():
        _display_report(f"FMOD Sync: {pid}", report, dry_run=dry_run, root=synchronizer.vault_path)
    for pid, error in summary.failures.items():
        rprint(f"[red]Project {pid} failed:[/red] {error}")

    if len(projects) > 1:
        rprint(_stats_table(
            f"Total ({len(summary.reports)} synced, {len(summary.failures)} failed)",
            summary.totals,
        ))
    if summary.failures:
        raise typer.Exit(1)


@app.command()
def validate(
    export: Annotated[str, typer.Argument(help="Path to an FMOD export JSON file")],
) -> None:
    """Validate an FMOD export file without syncing it."""
    try:
        data = read_export(export)
    except ExportValidationError as e:
        rprint(f"[red]INVALID[/red] {export}")
        for err in e.errors:
            rprint(f"  [red]error:[/red] {err}")
        raise typer.Exit(1)
    except FmodSyncError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    audio = {a.path or a.asset_path for ev in data.events for a in ev.audio_files} - {""}
    rprint(f"[green]VALID[/green] {export}")
    rprint(f"  project:  {data.project_name}")
    rprint(f"  exported: {data.exported_at}")
    rprint(f"  events:   {len(data.events)}")
    rprint(f"  audio:    {len(audio)}")
    if data.event_count is not None and data.event_count != len(data.events):
        rprint(f"  [dim]event_count says {data.event_count}[/dim]")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show configured projects and what was seen on their last sync."""
    cfg = _get_config(ctx)
    if not cfg.projects:
        rprint("[yellow]No projects configured.[/yellow]")
        raise typer.Exit(0)

    synchronizer = ProjectSynchronizer(cfg)
    state = load_state(Path(cfg.vault_path) / cfg.state_file)

    table = Table(title=f"Projects ({len(cfg.projects)})")
    table.add_column("Id", style="cyan")
    table.add_column("FMOD Project", style="green")
    table.add_column("Version")
    table.add_column("Exported")
    table.add_column("Output", style="magenta")
    table.add_column("Newer Export", style="yellow")
    for project in cfg.projects:
        seen = state.projects.get(project.id)
        newer = find_newer_export(synchronizer.resolve_export_path(project))
        table.add_row(
            project.id,
            (seen.project_name if seen else None) or "-",
            (seen.fmod_version if seen else None) or "-",
            (seen.exported_at if seen else None) or "never synced",
            project.output_folder,
            newer.path.name if newer else "-",
        )
    rprint(table)


@app.command()
def watch(
    ctx: typer.Context,
    project_id: Annotated[str | None, typer.Argument(help="Project id from fmodsync.yaml")] = None,
    debounce: Annotated[float, typer.Option("--debounce", help="Seconds between syncs")] = 1.0,
) -> None:
    """Re-sync a project every time its export file changes."""
    cfg = _get_config(ctx)
    project = _select_projects(cfg, project_id, False)[0]
    synchronizer = ProjectSynchronizer(cfg)
    export_path = synchronizer.resolve_export_path(project)

    log = logging.getLogger("fmodsync.watch")

    def on_change(path: Path) -> None:
        newer = find_newer_export(path)
        if newer is not None:
            log.warning("A newer export exists: %s", newer.path)
        try:
            report = synchronizer.sync(project)
        except SyncInProgressError:
            log.warning("Change to %s ignored: sync already in progress", path)
            return
        except FmodSyncError as e:
            log.error("Sync failed: %s", e)
            return
        s = report.stats
        log.info(
            "Synced %s: %d created, %d updated, %d moved, %d skipped, %d errors",
            project.id, s.created, s.updated, s.moved, s.skipped, s.errors,
        )

    watcher = ExportWatcher(export_path, on_change, debounce_seconds=debounce)
    rprint(f"[bold]Watching[/bold] {export_path} -> {synchronizer.output_path(project)}")
    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
        rprint("Watcher stopped.")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Print the effective configuration."""
    cfg = _get_config(ctx)
    dumped = yaml.safe_dump(cfg.model_dump(), default_flow_style=False, sort_keys=False)
    rprint(Syntax(dumped, "yaml"))


@config_app.command("init")
def config_init(
    path: Annotated[str, typer.Option("--path", help="Where to write the config")] = "fmodsync.yaml",
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Write a starter fmodsync.yaml."""
    dest = Path(path)
    if dest.exists() and not force:
        rprint(f"[yellow]{dest} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    dest.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {dest}")
