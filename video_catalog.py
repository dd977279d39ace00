# Video Catalog - Saved video list persisted in a key-value store

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from collaborators import KeyValueStore

logger = logging.getLogger(__name__)

CATALOG_KEY = 'saved_videos'


class VideoRecord(BaseModel):
    """One recorded or imported pitch video"""
    uri: str
    title: str = ''
    duration: float = 0.0
    createdAt: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    flaggedForUpload: bool = False
    uploaded: bool = False
    s3Key: Optional[str] = None


class VideoCatalog:
    """Read/modify/write access to the saved video list"""

    def __init__(self, store: KeyValueStore, key: str = CATALOG_KEY):
        self.store = store
        self.key = key

    def load(self) -> List[VideoRecord]:
        raw = self.store.get_item(self.key)
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Saved video list is corrupt, ignoring it: {e}")
            return []

        records = []
        for item in items if isinstance(items, list) else []:
            try:
                records.append(VideoRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid saved video entry: {e}")
        return records

    def save(self, records: List[VideoRecord]) -> None:
        self.store.set_item(self.key, json.dumps([r.model_dump() for r in records]))

    def find(self, uri: str) -> Optional[VideoRecord]:
        return next((r for r in self.load() if r.uri == uri), None)

    def upsert(self, record: VideoRecord) -> VideoRecord:
        records = [r for r in self.load() if r.uri != record.uri]
        records.append(record)
        self.save(records)
        return record

    def mark_uploaded(self, uri: str, key: str) -> Optional[VideoRecord]:
        record = self.find(uri)
        if record is None:
            return None
        updated = record.model_copy(update={'uploaded': True, 'flaggedForUpload': False, 's3Key': key})
        self.upsert(updated)
        logger.info(f"☁️  {uri} marked uploaded as {key}")
        return updated

    def flagged_for_upload(self) -> List[VideoRecord]:
        return [r for r in self.load() if r.flaggedForUpload and not r.uploaded]
