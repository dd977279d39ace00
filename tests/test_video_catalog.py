"""
Tests for the saved video list
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from collaborators import InMemoryKeyValueStore, JsonFileKeyValueStore
from video_catalog import VideoCatalog, VideoRecord


class TestVideoCatalog:

    def test_empty_store(self):
        assert VideoCatalog(InMemoryKeyValueStore()).load() == []

    def test_upsert_and_find(self):
        catalog = VideoCatalog(InMemoryKeyValueStore())
        catalog.upsert(VideoRecord(uri='file://a.mp4', title='A', duration=12.0))
        catalog.upsert(VideoRecord(uri='file://a.mp4', title='A2', duration=12.0))

        assert len(catalog.load()) == 1
        assert catalog.find('file://a.mp4').title == 'A2'
        assert catalog.find('file://b.mp4') is None

    def test_mark_uploaded(self):
        catalog = VideoCatalog(InMemoryKeyValueStore())
        catalog.upsert(VideoRecord(uri='file://a.mp4', flaggedForUpload=True))
        catalog.upsert(VideoRecord(uri='file://b.mp4', flaggedForUpload=True))

        updated = catalog.mark_uploaded('file://a.mp4', 'user-uploads/1-a.mp4')

        assert updated.uploaded
        assert updated.s3Key == 'user-uploads/1-a.mp4'
        assert [r.uri for r in catalog.flagged_for_upload()] == ['file://b.mp4']

    def test_mark_uploaded_unknown(self):
        assert VideoCatalog(InMemoryKeyValueStore()).mark_uploaded('file://x.mp4', 'k') is None

    def test_corrupt_list_is_empty(self):
        store = InMemoryKeyValueStore()
        store.set_item('saved_videos', '{not json')
        assert VideoCatalog(store).load() == []

    def test_invalid_entries_skipped(self):
        store = InMemoryKeyValueStore()
        store.set_item('saved_videos', '[{"uri": "file://a.mp4"}, {"title": "no uri"}]')
        assert [r.uri for r in VideoCatalog(store).load()] == ['file://a.mp4']

    def test_persists_to_json_file(self, tmp_path):
        path = tmp_path / 'store.json'
        VideoCatalog(JsonFileKeyValueStore(path)).upsert(VideoRecord(uri='file://a.mp4'))

        reloaded = VideoCatalog(JsonFileKeyValueStore(path))
        assert reloaded.find('file://a.mp4') is not None

    def test_corrupt_json_file(self, tmp_path):
        path = tmp_path / 'store.json'
        path.write_text('garbage', encoding='utf-8')
        assert VideoCatalog(JsonFileKeyValueStore(path)).load() == []
