"""
Snapshot-based undo/redo history for the PrinSp editor.

The history owns the annotation list. Each committed edit stores a full
immutable copy of the list (a snapshot); undo and redo only move an index
over the stored snapshots.
"""

from typing import Tuple

from prinsp.editor.annotations import Annotation
from prinsp.services.logging_service import get_logger


Snapshot = Tuple[Annotation, ...]


class AnnotationHistory:
    """
    Linear undo/redo stack of annotation-list snapshots.

    Invariants:
    - 0 <= index < len(snapshots)
    - annotations == snapshots[index]
    - a fresh history holds exactly one empty snapshot

    Committing an edit (add, clear) drops every snapshot after the current
    index before appending, so redo is impossible right after a commit.
    """

    def __init__(self) -> None:
        self._logger = get_logger(__name__)
        self._snapshots: list = [()]
        self._index: int = 0

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def annotations(self) -> Snapshot:
        """The currently visible annotation list."""
        return self._snapshots[self._index]

    @property
    def index(self) -> int:
        return self._index

    @property
    def snapshots(self) -> Tuple[Snapshot, ...]:
        """Read-only view of all stored snapshots."""
        return tuple(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def __len__(self) -> int:
        return len(self.annotations)

    # ─── Edits ────────────────────────────────────────────────────────────

    def add(self, annotation: Annotation) -> None:
        """Append an annotation and commit the result as a new snapshot."""
        self._commit(self.annotations + (annotation,))
        self._logger.debug(
            f"Added {annotation.type.value} annotation, {len(self)} total"
        )

    def clear(self) -> None:
        """Commit an empty list. Undoable like any other edit."""
        self._commit(())
        self._logger.debug("Annotations cleared")

    def undo(self) -> None:
        if not self.can_undo:
            return
        self._index -= 1
        self._logger.debug(f"Undo -> snapshot {self._index}")

    def redo(self) -> None:
        if not self.can_redo:
            return
        self._index += 1
        self._logger.debug(f"Redo -> snapshot {self._index}")

    def reset(self) -> None:
        """Drop everything and return to the seeded single empty snapshot."""
        self._snapshots = [()]
        self._index = 0

    def _commit(self, snapshot: Snapshot) -> None:
        del self._snapshots[self._index + 1:]
        self._snapshots.append(snapshot)
        self._index = len(self._snapshots) - 1
