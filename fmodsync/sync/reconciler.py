"""Per-record reconciliation: decide create, update, move or skip."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from fmodsync.errors import TargetOccupiedError
from fmodsync.markdown.note import NoteSource
from fmodsync.sync.index import DocRef, IdentityIndex

logger = logging.getLogger(__name__)


class Action(str, Enum):
    create = "create"
    update = "update"
    move = "move"
    skip = "skip"


@dataclass(frozen=True)
class ReconcileResult:
    action: Action
    name: str
    identifier: str
    target_path: Path
    text: str | None = None
    source_path: Path | None = None
    previous_text: str | None = None
    skip_reason: str | None = None


class Reconciler:
    """Maps one NoteSource onto the existing vault.

    ``index`` is the snapshot taken before the run. ``live`` maps paths to
    the notes as they are right now, including effects already applied in
    this run; filename claims and target occupancy are checked against it.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def target_path(self, source: NoteSource) -> Path:
        return self.root.joinpath(*source.relative_path().parts)

    def reconcile(
        self,
        source: NoteSource,
        index: IdentityIndex,
        live: Mapping[Path, DocRef],
    ) -> ReconcileResult:
        target = self.target_path(source)
        prior: DocRef | None = None

        by_id = index.by_identifier.get(source.identifier)
        if by_id is not None:
            prior = live.get(by_id.path)
            if prior is None:
                # Moved or removed earlier in this run; the snapshot is stale.
                logger.debug("Indexed note %s for %s is gone", by_id.path, source.display_name)
        else:
            by_name = index.by_filename.get(source.filename_stem)
            current = live.get(by_name.path) if by_name is not None else None
            if current is not None:
                if current.identifier is None:
                    logger.debug("Claiming unclaimed note %s for %s", current.path, source.display_name)
                    prior = current
                elif current.identifier != source.identifier:
                    return self._collision(source, target, current)
                else:
                    prior = current

        if prior is None:
            occupant = live.get(target)
            if occupant is not None:
                if occupant.identifier and occupant.identifier != source.identifier:
                    return self._collision(source, target, occupant)
                prior = occupant
        elif prior.path != target:
            occupant = live.get(target)
            if occupant is not None:
                raise TargetOccupiedError(str(target), occupant.identifier)

        text = source.render(prior.text if prior is not None else None)

        if prior is None:
            action = Action.create
        elif prior.path == target:
            action = Action.update
        else:
            action = Action.move

        return ReconcileResult(
            action=action,
            name=source.display_name,
            identifier=source.identifier,
            target_path=target,
            text=text,
            source_path=prior.path if prior is not None else None,
            previous_text=prior.text if prior is not None else None,
        )

    @staticmethod
    def _collision(source: NoteSource, target: Path, existing: DocRef) -> ReconcileResult:
        reason = (
            f"Name collision: existing note {existing.path} has different "
            f"{source.id_key} ({existing.identifier})"
        )
        return ReconcileResult(
            action=Action.skip,
            name=source.display_name,
            identifier=source.identifier,
            target_path=target,
            source_path=existing.path,
            skip_reason=reason,
        )
