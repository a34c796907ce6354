"""ProjectSynchronizer: one sync run per configured FMOD project."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from fmodsync.config.models import FmodSyncConfig, ProjectConfig
from fmodsync.config.state import ProjectState, load_state, save_state
from fmodsync.errors import FmodSyncError, SyncInProgressError
from fmodsync.export.models import ExportData
from fmodsync.export.reader import read_export
from fmodsync.markdown.audio import AUDIO_ID_KEY, collect_audio_notes
from fmodsync.markdown.generator import EVENT_ID_KEY, EventNote
from fmodsync.sync.driver import ProgressCallback, SyncDriver
from fmodsync.sync.index import scan_documents
from fmodsync.sync.models import SyncProgress, SyncReport, SyncStats
from fmodsync.sync.reconciler import Reconciler
from fmodsync.sync.writer import VaultWriter

logger = logging.getLogger(__name__)


class MultiSyncReport(BaseModel):
    reports: dict[str, SyncReport] = Field(default_factory=dict)
    failures: dict[str, str] = Field(default_factory=dict)
    totals: SyncStats = Field(default_factory=SyncStats)


class ProjectSynchronizer:
    """Syncs FMOD exports into the vault described by ``config``.

    Only one run may be active per synchronizer; a trigger that arrives
    while a run is in progress raises SyncInProgressError instead of
    waiting.
    """

    def __init__(self, config: FmodSyncConfig) -> None:
        self.config = config
        self.vault_path = Path(config.vault_path)
        self._lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    # -- Public API ----------------------------------------------------------

    def sync(
        self,
        project: ProjectConfig,
        *,
        dry_run: bool = False,
        progress: ProgressCallback | None = None,
    ) -> SyncReport:
        with self._exclusive():
            return self._sync_project(project, dry_run=dry_run, progress=progress)

    def sync_all(
        self,
        projects: list[ProjectConfig] | None = None,
        *,
        dry_run: bool = False,
        progress: ProgressCallback | None = None,
    ) -> MultiSyncReport:
        """Sync several projects in turn; a failing project does not stop the rest."""
        summary = MultiSyncReport()
        with self._exclusive():
            for project in projects if projects is not None else self.config.projects:
                try:
                    report = self._sync_project(project, dry_run=dry_run, progress=progress)
                except FmodSyncError as e:
                    logger.error("Project %s failed: %s", project.id, e)
                    summary.failures[project.id] = str(e)
                    continue
                summary.reports[project.id] = report
                summary.totals.add(report.stats)
        return summary

    def output_path(self, project: ProjectConfig) -> Path:
        return self.vault_path / project.output_folder

    def resolve_export_path(self, project: ProjectConfig) -> Path:
        """Absolute paths as-is; relative ones against the vault first, then the cwd."""
        path = Path(project.export_path).expanduser()
        if path.is_absolute():
            return path
        in_vault = self.vault_path / path
        if in_vault.is_file():
            return in_vault
        return path

    # -- Internals -----------------------------------------------------------

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            if self._running:
                raise SyncInProgressError("Sync already in progress")
            self._running = True
        try:
            yield
        finally:
            with self._lock:
                self._running = False

    def _sync_project(
        self,
        project: ProjectConfig,
        *,
        dry_run: bool,
        progress: ProgressCallback | None,
    ) -> SyncReport:
        export = read_export(self.resolve_export_path(project))
        max_len = self.config.max_filename_length

        output = self.output_path(project)
        events_root = output / project.events_folder
        audio_root = output / project.audio_folder
        writer = VaultWriter(output)

        if progress is not None:
            progress(SyncProgress(phase="scanning"))
        # Notes directly under the output folder are picked up too, so older
        # layouts get moved into the events folder.
        corpus = scan_documents(output, EVENT_ID_KEY, exclude=[audio_root])

        events = [EventNote(e, export.project_name, export.exported_at, max_len) for e in export.events]
        report = SyncDriver(
            Reconciler(events_root), writer,
            dry_run=dry_run, progress=progress, max_filename_length=max_len,
        ).run(events, corpus)

        if project.audio_notes:
            audio = collect_audio_notes(export.events, export.project_name, export.exported_at, max_len)
            if audio:
                audio_corpus = scan_documents(audio_root, AUDIO_ID_KEY)
                report.merge(SyncDriver(
                    Reconciler(audio_root), writer,
                    dry_run=dry_run, progress=progress, max_filename_length=max_len,
                ).run(audio, audio_corpus))

        if progress is not None:
            progress(SyncProgress(phase="complete", current=len(events), total=len(events)))

        if report.skipped:
            logger.warning(
                "Skipped %d record(s) in project %s due to conflicts: %s",
                len(report.skipped), project.id,
                "; ".join(f"{s.name}: {s.reason}" for s in report.skipped),
            )

        s = report.stats
        logger.info(
            "Synced project %s (%s): %d created, %d updated, %d unchanged, %d moved, "
            "%d skipped, %d errors",
            project.id, export.project_name,
            s.created, s.updated, s.unchanged, s.moved, s.skipped, s.errors,
        )

        if not dry_run:
            self._remember(project, export)
        return report

    def _remember(self, project: ProjectConfig, export: ExportData) -> None:
        state_path = self.vault_path / self.config.state_file
        state = load_state(state_path)
        state.projects[project.id] = ProjectState(
            project_name=export.project_name,
            project_path=export.project_path,
            fmod_version=export.fmod_version,
            exported_at=export.exported_at,
            last_synced_at=datetime.now(timezone.utc),
        )
        try:
            save_state(state_path, state)
        except OSError as e:
            logger.warning("Could not save sync state to %s: %s", state_path, e)
