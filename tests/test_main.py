"""Tests for the sync run entry point."""

import pytest

from playlistpulse import main as entry
from playlistpulse.config import Settings
from playlistpulse.core.schemas import Playlist, Video
from playlistpulse.pipeline.history import Action
from playlistpulse.scraper.base_strategy import BasePlaylistSource
from playlistpulse.storage.json_store import JsonPlaylistStore


def make_video(video_id, title="Some video"):
    return Video(video_id=video_id, title=title, published_at="2023-05-01T10:00:00Z")


class FakeSource(BasePlaylistSource):
    def __init__(self, settings, playlists):
        super().__init__(settings)
        self.playlists = list(playlists)

    async def fetch(self):
        return self.playlists.pop(0)


class FailingSource(BasePlaylistSource):
    async def fetch(self):
        raise RuntimeError("API unreachable")


def make_settings(tmp_path, keep_history=False):
    return Settings(api_key="k", playlist_id="PL1", dir_path=str(tmp_path), keep_history=keep_history)


class TestRunSync:
    @pytest.mark.asyncio
    async def test_first_then_second_run(self, tmp_path):
        settings = make_settings(tmp_path)
        source = FakeSource(settings, [
            Playlist(videos=[make_video("1", "A")]),
            Playlist(videos=[make_video("1", "A"), make_video("2", "B")]),
        ])

        first = await entry.run_sync(settings, source=source)
        assert first.action is Action.INITIALIZE

        second = await entry.run_sync(settings, source=source)
        assert second.action is Action.REPLACE_PLAYLIST_AND_DIFF
        assert [v.video_id for v in second.diff.videos] == ["2"]

        store = JsonPlaylistStore(tmp_path)
        assert [v.video_id for v in store.load("diff.json").videos] == ["2"]

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self, tmp_path):
        settings = make_settings(tmp_path)
        with pytest.raises(RuntimeError):
            await entry.run_sync(settings, source=FailingSource(settings))
        assert list(tmp_path.iterdir()) == []


class TestMain:
    def test_config_error_exits_nonzero(self, monkeypatch):
        def broken_settings():
            raise ValueError("No config found at config.json")

        monkeypatch.setattr(entry, "load_settings", broken_settings)
        with pytest.raises(SystemExit) as exc:
            entry.main()
        assert exc.value.code == 1

    def test_successful_run(self, tmp_path, monkeypatch):
        settings = make_settings(tmp_path)
        monkeypatch.setattr(entry, "load_settings", lambda: settings)
        real_run_sync = entry.run_sync

        async def fake_run_sync(s):
            return await real_run_sync(s, source=FakeSource(s, [Playlist(videos=[make_video("1")])]))

        monkeypatch.setattr(entry, "run_sync", fake_run_sync)
        entry.main()
        assert JsonPlaylistStore(tmp_path).exists("playlist.json")
