"""
Unit tests for the file-backed state store and settings source.
"""

import asyncio
import json
import os

import pytest

from hide_and_seek.config import DebouncedReloadHandler, JsonSettingsSource, SettingsFileWatcher
from hide_and_seek.errors import PersistenceError
from hide_and_seek.models import Config, PanePolicy
from hide_and_seek.persistence import JsonStateStore


class TestJsonStateStore:
    """Test JSON file persistence."""

    @pytest.mark.asyncio
    async def test_set_persists_to_disk(self, tmp_path):
        state_file = tmp_path / "state" / "state.json"
        store = JsonStateStore(state_file)

        await store.set("hidden", True)
        await store.set("positions", {"file:///a.py": {"top_visible_line": 1}})

        assert json.loads(state_file.read_text()) == {
            "hidden": True,
            "positions": {"file:///a.py": {"top_visible_line": 1}},
        }
        assert JsonStateStore(state_file).get("hidden") is True

    @pytest.mark.asyncio
    async def test_none_removes_key(self, tmp_path):
        store = JsonStateStore(tmp_path / "state.json")
        await store.set("snapshot", {"tabs": []})

        await store.set("snapshot", None)

        assert store.get("snapshot") is None
        assert "snapshot" not in json.loads((tmp_path / "state.json").read_text())

    def test_corrupt_file_loads_empty(self, tmp_path):
        state_file = tmp_path / "state.json"
        state_file.write_text("{not json")

        store = JsonStateStore(state_file)

        assert store.get("hidden", "missing") == "missing"

    @pytest.mark.asyncio
    async def test_unserializable_value_raises_persistence_error(self, tmp_path):
        store = JsonStateStore(tmp_path / "state.json")

        with pytest.raises(PersistenceError):
            await store.set("bad", object())

    @pytest.mark.asyncio
    async def test_failed_write_leaves_memory_unchanged(self, tmp_path):
        state_file = tmp_path / "state.json"
        store = JsonStateStore(state_file)
        await store.set("hidden", True)

        with pytest.raises(PersistenceError):
            await store.set("hidden", object())
        with pytest.raises(PersistenceError):
            await store.set("extra", object())

        assert store.get("hidden") is True
        assert store.get("extra") is None
        assert json.loads(state_file.read_text()) == {"hidden": True}

    @pytest.mark.asyncio
    async def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonStateStore(tmp_path / "state.json")

        await store.set("hidden", False)

        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


class TestJsonSettingsSource:
    """Test JSON settings loading and reload notification."""

    def test_missing_file_uses_defaults(self, tmp_path):
        source = JsonSettingsSource(tmp_path / "settings.json")

        assert Config.load(source) == Config()

    def test_values_read(self, tmp_path):
        settings_file = tmp_path / "settings.json"
        settings_file.write_text(json.dumps({"pane_policy": "left", "peek_duration_ms": 500}))

        config = Config.load(JsonSettingsSource(settings_file))

        assert config.pane_policy is PanePolicy.LEFT
        assert config.peek_duration_ms == 500

    def test_reload_notifies_on_change_only(self, tmp_path):
        settings_file = tmp_path / "settings.json"
        settings_file.write_text(json.dumps({"notify": True}))
        source = JsonSettingsSource(settings_file)
        calls = []
        subscription = source.on_did_change(lambda: calls.append(True))

        assert source.reload() is False
        settings_file.write_text(json.dumps({"notify": False}))
        assert source.reload() is True
        assert calls == [True]

        subscription.dispose()
        settings_file.write_text(json.dumps({"notify": True}))
        source.reload()
        assert calls == [True]


class _Event:
    def __init__(self, src_path, is_directory=False):
        self.src_path = src_path
        self.is_directory = is_directory


class TestDebouncedReloadHandler:
    """Test debounce of file system events."""

    @pytest.mark.asyncio
    async def test_burst_of_events_reloads_once(self, tmp_path):
        calls = []
        handler = DebouncedReloadHandler(lambda: calls.append(True), debounce_ms=30,
                                         target_filename="settings.json")
        handler.set_event_loop(asyncio.get_running_loop())

        for _ in range(5):
            handler.on_modified(_Event(str(tmp_path / "settings.json")))
        await asyncio.sleep(0.15)

        assert calls == [True]

    @pytest.mark.asyncio
    async def test_other_files_ignored(self, tmp_path):
        calls = []
        handler = DebouncedReloadHandler(lambda: calls.append(True), debounce_ms=10,
                                         target_filename="settings.json")
        handler.set_event_loop(asyncio.get_running_loop())

        handler.on_modified(_Event(str(tmp_path / "other.json")))
        handler.on_created(_Event(str(tmp_path), is_directory=True))
        await asyncio.sleep(0.05)

        assert calls == []


class TestSettingsFileWatcher:
    """Test watching the settings file on disk."""

    @pytest.mark.asyncio
    async def test_edit_triggers_reload(self, tmp_path):
        settings_file = tmp_path / "settings.json"
        settings_file.write_text(json.dumps({"pane_policy": "right"}))
        source = JsonSettingsSource(settings_file)
        changes = []
        source.on_did_change(lambda: changes.append(source.get("pane_policy")))

        watcher = SettingsFileWatcher(source, debounce_ms=20)
        watcher.start()
        try:
            staged = tmp_path / ".settings.json.tmp"
            staged.write_text(json.dumps({"pane_policy": "left"}))
            os.replace(staged, settings_file)
            for _ in range(100):
                if changes:
                    break
                await asyncio.sleep(0.05)
        finally:
            watcher.stop()

        assert changes == ["left"]
        assert Config.load(source).pane_policy is PanePolicy.LEFT

    @pytest.mark.asyncio
    async def test_stop_without_start(self, tmp_path):
        watcher = SettingsFileWatcher(JsonSettingsSource(tmp_path / "settings.json"))

        watcher.stop()

        assert not watcher._started
