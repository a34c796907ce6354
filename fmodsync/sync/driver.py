"""SyncDriver: runs every record through the Reconciler and commits the effects."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from fmodsync.markdown.filename import MAX_FILENAME_LENGTH
from fmodsync.markdown.note import NoteSource
from fmodsync.sync.index import DocRef, IdentityIndex
from fmodsync.sync.models import PlannedAction, SkipReason, SyncError, SyncProgress, SyncReport
from fmodsync.sync.reconciler import Action, Reconciler
from fmodsync.sync.writer import VaultWriter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SyncProgress], None]


class SyncDriver:
    def __init__(
        self,
        reconciler: Reconciler,
        writer: VaultWriter,
        *,
        dry_run: bool = False,
        progress: ProgressCallback | None = None,
        max_filename_length: int = MAX_FILENAME_LENGTH,
    ) -> None:
        self.reconciler = reconciler
        self.writer = writer
        self.dry_run = dry_run
        self.progress = progress
        self.max_filename_length = max_filename_length

    def run(self, sources: Sequence[NoteSource], corpus: Iterable[DocRef]) -> SyncReport:
        """Reconcile ``sources`` in order against the existing ``corpus``.

        The identity index is built once. Each record's effect is applied as
        soon as it is computed; a failing record is counted and the run
        carries on with the next one.
        """
        start = time.monotonic()
        report = SyncReport()
        documents = list(corpus)
        index = IdentityIndex.build(documents, self.max_filename_length)
        live: dict[Path, DocRef] = {doc.path: doc for doc in documents}
        total = len(sources)

        for i, source in enumerate(sources, start=1):
            if self.progress is not None:
                self.progress(SyncProgress(phase="processing", current=i, total=total, name=source.display_name))
            try:
                result = self.reconciler.reconcile(source, index, live)

                if result.action is Action.skip:
                    report.stats.skipped += 1
                    report.skipped.append(SkipReason(
                        name=source.display_name,
                        identifier=source.identifier,
                        reason=result.skip_reason or "skipped",
                    ))
                    logger.debug("Skipped %s: %s", source.display_name, result.skip_reason)
                    continue

                changed = self.writer.apply(result, dry_run=self.dry_run)

                if result.action is Action.move and result.source_path is not None:
                    live.pop(result.source_path, None)
                live[result.target_path] = DocRef(
                    path=result.target_path, text=result.text or "", identifier=source.identifier
                )

                if result.action is Action.create:
                    report.stats.created += 1
                elif result.action is Action.move:
                    report.stats.moved += 1
                elif changed:
                    report.stats.updated += 1
                else:
                    report.stats.unchanged += 1

                if changed:
                    report.actions.append(PlannedAction(
                        action=result.action.value,
                        name=source.display_name,
                        target=str(result.target_path),
                        source=str(result.source_path) if result.source_path is not None else None,
                    ))
            except Exception as exc:
                report.stats.errors += 1
                report.errors.append(SyncError(name=source.display_name, error=str(exc)))
                logger.error("Error syncing %s: %s", source.display_name, exc, exc_info=True)

        report.duration = time.monotonic() - start
        return report
