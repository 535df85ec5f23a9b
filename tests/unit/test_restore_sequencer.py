"""
Unit tests for RestoreSequencer.

Tests cover ordering, missing documents, position application and focus.
"""

from unittest.mock import MagicMock

import pytest

from hide_and_seek.models import LineCol, Position, SelectionRange, Snapshot, TabRecord, TextRange
from hide_and_seek.services.restore_sequencer import RestoreSequencer


def _position(cursor_line: int, top_line=None, ranges=None) -> Position:
    anchor = LineCol(line=cursor_line - 1, character=0)
    active = LineCol(line=cursor_line, character=4)
    return Position(
        selection=SelectionRange(start=anchor, end=active, active=active),
        visible_ranges=ranges or [],
        top_visible_line=top_line,
    )


def _record(document_id: str, pane_index: int = 2, position=None) -> TabRecord:
    return TabRecord(document_id=document_id, pane_index=pane_index, position=position, label=document_id)


class TestRestoreOrderAndFailures:
    """Test batch behavior."""

    @pytest.mark.asyncio
    async def test_reopens_in_order_without_focus(self, host):
        host.files.update({"file:///a.py", "file:///b.py"})
        snapshot = Snapshot(tabs=[_record("file:///a.py"), _record("file:///b.py", pane_index=3)])

        result = await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=False)

        assert result.restored == 2
        assert host.open_calls == [
            ("file:///a.py", 2, True),
            ("file:///b.py", 3, True),
        ]

    @pytest.mark.asyncio
    async def test_missing_document_skipped(self, host):
        host.files.update({"file:///a.py", "file:///c.py"})
        snapshot = Snapshot(tabs=[_record("file:///a.py"), _record("file:///deleted.py"), _record("file:///c.py")])

        result = await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=False)

        assert result.restored == 2
        assert result.failures == [("file:///deleted.py", "missing")]
        assert [call[0] for call in host.open_calls] == ["file:///a.py", "file:///c.py"]

    @pytest.mark.asyncio
    async def test_open_failure_does_not_abort(self, host):
        host.files.update({"file:///a.py", "file:///b.py"})
        host.fail_open.add("file:///a.py")
        snapshot = Snapshot(tabs=[_record("file:///a.py"), _record("file:///b.py")])

        result = await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=False)

        assert result.restored == 1
        assert result.failed == 1
        assert result.restored_ids == ["file:///b.py"]

    @pytest.mark.asyncio
    async def test_existence_check_error_counts_as_missing(self, host):
        async def broken(document_id):
            raise OSError("stat failed")

        host.document_exists = broken
        snapshot = Snapshot(tabs=[_record("file:///a.py")])

        result = await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=False)

        assert result.restored == 0
        assert result.failures == [("file:///a.py", "missing")]


class TestApplyPosition:
    """Test selection and scroll application."""

    def test_selection_anchor_and_caret(self):
        view = MagicMock()

        RestoreSequencer.apply_position(view, _position(20))

        view.set_selection.assert_called_once_with(LineCol(line=19, character=0), LineCol(line=20, character=4))

    def test_top_line_revealed(self):
        view = MagicMock()
        ranges = [TextRange(start=LineCol(line=50), end=LineCol(line=90))]

        RestoreSequencer.apply_position(view, _position(20, top_line=8, ranges=ranges))

        view.reveal_range.assert_called_once_with(TextRange.at_line(8))

    def test_first_range_revealed_without_top_line(self):
        view = MagicMock()
        ranges = [TextRange(start=LineCol(line=50), end=LineCol(line=90))]

        RestoreSequencer.apply_position(view, _position(20, ranges=ranges))

        view.reveal_range.assert_called_once_with(ranges[0])

    def test_no_scroll_data(self):
        view = MagicMock()

        RestoreSequencer.apply_position(view, _position(20))

        view.reveal_range.assert_not_called()

    def test_no_position(self):
        view = MagicMock()

        RestoreSequencer.apply_position(view, None)

        view.set_selection.assert_not_called()
        view.reveal_range.assert_not_called()


class TestFocus:
    """Test the single focus change at the end of a restore."""

    @pytest.mark.asyncio
    async def test_focus_active_record(self, host):
        host.files.update({"file:///a.py", "file:///b.py"})
        snapshot = Snapshot(tabs=[_record("file:///a.py"), _record("file:///b.py")], active_index=1)

        await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=True)

        assert host.open_calls[-1] == ("file:///b.py", 2, False)
        assert host.active.document_id == "file:///b.py"
        assert [call[2] for call in host.open_calls[:-1]] == [True, True]

    @pytest.mark.asyncio
    async def test_focus_previous_view_without_active_record(self, host):
        host.add_document("file:///left.py", 1, focus=True)
        host.files.add("file:///a.py")
        snapshot = Snapshot(tabs=[_record("file:///a.py")])

        await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=True)

        assert host.open_calls[-1] == ("file:///left.py", 1, False)

    @pytest.mark.asyncio
    async def test_no_refocus_when_disabled(self, host):
        host.add_document("file:///left.py", 1, focus=True)
        host.files.add("file:///a.py")
        snapshot = Snapshot(tabs=[_record("file:///a.py")])

        await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=False)

        assert host.open_calls == [("file:///a.py", 2, True)]

    @pytest.mark.asyncio
    async def test_missing_active_record_falls_back(self, host):
        host.add_document("file:///left.py", 1, focus=True)
        snapshot = Snapshot(tabs=[_record("file:///gone.py")], active_index=0)

        result = await RestoreSequencer(host).restore(snapshot, auto_focus_remainder=True)

        assert result.restored == 0
        assert host.open_calls == [("file:///left.py", 1, False)]
