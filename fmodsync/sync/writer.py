"""VaultWriter: applies reconciliation results to the filesystem."""

from __future__ import annotations

import logging
from pathlib import Path

from fmodsync.errors import PathTraversalError, TargetOccupiedError
from fmodsync.sync.reconciler import Action, ReconcileResult

logger = logging.getLogger(__name__)


class VaultWriter:
    """Writes, rewrites and relocates notes below ``root``.

    A move writes the new note before removing the old one, so a failure in
    between leaves two copies rather than none.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def apply(self, result: ReconcileResult, *, dry_run: bool = False) -> bool:
        """Apply one result. Returns False when nothing needed to change."""
        if result.action is Action.skip:
            return False
        if result.text is None:
            raise ValueError(f"No content to write for {result.name}")

        dest = result.target_path
        self._check_inside_root(dest)
        if result.source_path is not None:
            self._check_inside_root(result.source_path)

        if result.action is Action.update and result.text == result.previous_text:
            logger.debug("unchanged %s", dest)
            return False

        # Files the index could not read still occupy their path.
        if (
            result.action is not Action.update
            and dest.exists()
            and not self._same_file(dest, result.source_path)
        ):
            raise TargetOccupiedError(str(dest), None)

        if dry_run:
            logger.debug("dry-run: would %s %s", result.action.value, dest)
            return True

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(result.text, encoding="utf-8")

        if result.action is Action.move and result.source_path is not None:
            result.source_path.unlink(missing_ok=True)
            logger.info("moved %s -> %s", result.source_path, dest)
        else:
            logger.info("%s %s (%d bytes)", "wrote" if result.action is Action.create else "updated",
                        dest, len(result.text))
        return True

    @staticmethod
    def _same_file(dest: Path, source: Path | None) -> bool:
        return source is not None and source.exists() and dest.samefile(source)

    def _check_inside_root(self, path: Path) -> None:
        if not path.resolve().is_relative_to(self.root.resolve()):
            raise PathTraversalError(f"Path traversal detected: {path} is outside {self.root}")
