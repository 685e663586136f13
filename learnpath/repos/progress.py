# repos/progress.py
from typing import List
from pymongo.database import Database
from pymongo import ASCENDING

from learnpath.services.unlock_types import CompletionRecord, UserId

def ensure_indexes(db: Database) -> None:
    db.progress.create_index([("user_id", ASCENDING), ("lesson_id", ASCENDING)], name="user_lesson")

def list_completion_records(db: Database, user_id: UserId) -> List[CompletionRecord]:
    # single find so the caller gets one consistent snapshot
    cursor = db.progress.find({"user_id": user_id}, {"_id": 0, "lesson_id": 1, "is_completed": 1})
    return [
        CompletionRecord(lesson_id=int(doc["lesson_id"]), is_completed=bool(doc.get("is_completed", False)))
        for doc in cursor
    ]
