from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import List

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.records import (
    ActivityLog,
    ActivitySeverity,
    AttendanceRecord,
    ExamResult,
    ExpenseRecord,
    FeeRecord,
    SchoolSettings,
    Student,
    Teacher,
)
from apps.core.utils.identifiers import new_record_id

from .seed import seed_document
from .store import DatabaseStore

logger = logging.getLogger(__name__)


class Collection(Enum):
    STUDENTS = 'students'
    TEACHERS = 'teachers'
    ATTENDANCE = 'attendance'
    FEES = 'fees'
    EXPENSES = 'expenses'
    GRADES = 'grades'
    ACTIVITIES = 'activities'
    SETTINGS = 'settings'
    ANNOUNCEMENT = 'announcement'


LIST_RECORD_TYPES = {
    Collection.STUDENTS: Student,
    Collection.TEACHERS: Teacher,
    Collection.ATTENDANCE: AttendanceRecord,
    Collection.FEES: FeeRecord,
    Collection.EXPENSES: ExpenseRecord,
    Collection.GRADES: ExamResult,
    Collection.ACTIVITIES: ActivityLog,
}


def decode_document(collection: Collection, document):
    """Parse a JSON-ready document into records; raises ValueError when malformed."""
    if collection is Collection.SETTINGS:
        return SchoolSettings.from_dict(document)
    if collection is Collection.ANNOUNCEMENT:
        if not isinstance(document, str):
            raise ValueError('Announcement must be text.')
        return document
    if not isinstance(document, list):
        raise ValueError(f'{collection.value} must be a list.')
    record_class = LIST_RECORD_TYPES[collection]
    return [record_class.from_dict(item) for item in document]


def encode_value(collection: Collection, value):
    if collection is Collection.SETTINGS:
        return value.to_dict()
    if collection is Collection.ANNOUNCEMENT:
        return str(value)
    return [record.to_dict() for record in value]


def _iso_date(value) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class SchoolSnapshot:
    students: List[Student]
    teachers: List[Teacher]
    attendance: List[AttendanceRecord]
    fees: List[FeeRecord]
    expenses: List[ExpenseRecord]
    grades: List[ExamResult]
    activities: List[ActivityLog]
    settings: SchoolSettings
    announcement: str


class SchoolRepository:
    """Owns every school collection in a key-value store.

    Reading a collection that has never been stored writes its seed document
    first, exactly once. Every save replaces the whole collection.
    """

    def __init__(self, store=None, *, today=None, prefix=None, activity_limit=None):
        self.store = store if store is not None else DatabaseStore()
        self.today = today
        self.prefix = prefix if prefix is not None else getattr(settings, 'SCHOOLBOOK_STORAGE_PREFIX', 'cim_')
        self.activity_limit = activity_limit or int(getattr(settings, 'SCHOOLBOOK_ACTIVITY_LOG_LIMIT', 50))

    def key_for(self, collection: Collection) -> str:
        return f'{self.prefix}{collection.value}'

    def reference_date(self) -> str:
        return _iso_date(self.today or timezone.localdate())

    def _seed(self, collection: Collection):
        now = timezone.now()
        document = seed_document(
            collection.value,
            today=self.reference_date(),
            now_iso=now.isoformat(),
            timestamp=int(now.timestamp() * 1000),
        )
        self.store.set(self.key_for(collection), json.dumps(document))
        logger.info('Seeded %s with %s initial entries.', self.key_for(collection), len(document) if isinstance(document, list) else 1)
        return document

    def get(self, collection: Collection):
        stored = self.store.get(self.key_for(collection))
        if stored is None:
            document = self._seed(collection)
        else:
            document = json.loads(stored)
        return decode_document(collection, document)

    def set(self, collection: Collection, value) -> None:
        self.store.set(self.key_for(collection), json.dumps(encode_value(collection, value)))

    @transaction.atomic
    def append_activity(self, action, details, severity=ActivitySeverity.INFO, *, now=None) -> List[ActivityLog]:
        now = now or timezone.now()
        entry = ActivityLog(
            id=new_record_id(),
            action=action,
            details=details,
            date=now.isoformat(),
            timestamp=int(now.timestamp() * 1000),
            type=ActivitySeverity(severity),
        )
        updated = [entry, *self.get(Collection.ACTIVITIES)][: self.activity_limit]
        self.set(Collection.ACTIVITIES, updated)
        return updated

    def clear_all(self) -> int:
        keys = {self.key_for(collection) for collection in Collection}
        if self.prefix:
            keys.update(self.store.keys(self.prefix))
        deleted = self.store.delete(keys)
        logger.warning('Cleared %s stored collections.', deleted)
        return deleted

    def snapshot(self) -> SchoolSnapshot:
        return SchoolSnapshot(**{collection.value: self.get(collection) for collection in Collection})

    def students(self) -> List[Student]:
        return self.get(Collection.STUDENTS)

    def save_students(self, students: List[Student]) -> None:
        self.set(Collection.STUDENTS, students)

    def teachers(self) -> List[Teacher]:
        return self.get(Collection.TEACHERS)

    def save_teachers(self, teachers: List[Teacher]) -> None:
        self.set(Collection.TEACHERS, teachers)

    def attendance(self) -> List[AttendanceRecord]:
        return self.get(Collection.ATTENDANCE)

    def save_attendance(self, records: List[AttendanceRecord]) -> None:
        self.set(Collection.ATTENDANCE, records)

    def fees(self) -> List[FeeRecord]:
        return self.get(Collection.FEES)

    def save_fees(self, fees: List[FeeRecord]) -> None:
        self.set(Collection.FEES, fees)

    def expenses(self) -> List[ExpenseRecord]:
        return self.get(Collection.EXPENSES)

    def save_expenses(self, expenses: List[ExpenseRecord]) -> None:
        self.set(Collection.EXPENSES, expenses)

    def grades(self) -> List[ExamResult]:
        return self.get(Collection.GRADES)

    def save_grades(self, grades: List[ExamResult]) -> None:
        self.set(Collection.GRADES, grades)

    def activities(self) -> List[ActivityLog]:
        return self.get(Collection.ACTIVITIES)

    def school_settings(self) -> SchoolSettings:
        return self.get(Collection.SETTINGS)

    def save_school_settings(self, school_settings: SchoolSettings) -> None:
        self.set(Collection.SETTINGS, school_settings)

    def announcement(self) -> str:
        return self.get(Collection.ANNOUNCEMENT)

    def save_announcement(self, text: str) -> None:
        self.set(Collection.ANNOUNCEMENT, text)
