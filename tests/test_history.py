"""Tests for AnnotationHistory."""

from prinsp.editor.history import AnnotationHistory


def _check_invariants(history: AnnotationHistory) -> None:
    assert 0 <= history.index < len(history.snapshots)
    assert history.annotations == history.snapshots[history.index]


class TestAnnotationHistory:
    """Tests for the snapshot undo/redo stack."""

    def test_seeded_with_one_empty_snapshot(self):
        history = AnnotationHistory()

        assert history.snapshots == ((),)
        assert history.index == 0
        assert not history.can_undo
        assert not history.can_redo

    def test_add_appends_snapshot(self, make_rect):
        history = AnnotationHistory()
        a, b = make_rect(), make_rect(5, 5, 20, 20)

        history.add(a)
        history.add(b)

        assert history.annotations == (a, b)
        assert history.index == 2
        assert history.snapshots[1] == (a,)
        _check_invariants(history)

    def test_undo_redo_move_index_only(self, make_rect):
        history = AnnotationHistory()
        a = make_rect()
        history.add(a)

        history.undo()
        assert history.annotations == ()
        assert history.can_redo

        history.redo()
        assert history.annotations == (a,)
        assert len(history.snapshots) == 2
        _check_invariants(history)

    def test_undo_and_redo_are_noops_at_bounds(self, make_rect):
        history = AnnotationHistory()
        history.undo()
        assert history.index == 0

        history.add(make_rect())
        history.redo()
        assert history.index == 1
        _check_invariants(history)

    def test_commit_after_undo_drops_redo_branch(self, make_rect):
        """Test that a new edit after undo truncates the redo branch."""
        history = AnnotationHistory()
        a, b, c = make_rect(), make_rect(1, 1, 5, 5), make_rect(2, 2, 6, 6)
        history.add(a)
        history.add(b)
        history.undo()

        history.add(c)

        assert history.annotations == (a, c)
        assert not history.can_redo
        assert b not in history.annotations
        assert all(b not in snap for snap in history.snapshots)
        _check_invariants(history)

    def test_clear_is_undoable(self, make_rect):
        history = AnnotationHistory()
        a, b = make_rect(), make_rect(3, 3, 8, 8)
        history.add(a)
        history.add(b)

        history.clear()
        assert history.annotations == ()

        history.undo()
        assert history.annotations == (a, b)
        _check_invariants(history)

    def test_snapshots_are_independent_copies(self, make_rect):
        history = AnnotationHistory()
        history.add(make_rect())
        first = history.snapshots[1]

        history.add(make_rect(4, 4, 9, 9))

        assert len(first) == 1

    def test_reset(self, make_rect):
        history = AnnotationHistory()
        history.add(make_rect())

        history.reset()

        assert history.snapshots == ((),)
        assert history.index == 0
