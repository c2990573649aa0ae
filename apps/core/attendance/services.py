from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.records import ActivitySeverity, AttendanceRecord, AttendanceStatus, GradeLevel, Student
from apps.core.utils.numbers import round_half_up, weighted_percentage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceDay:
    date: str
    present: int
    late: int
    total: int
    percentage: int


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _tally(records: Iterable[AttendanceRecord]):
    present = late = total = 0
    for record in records:
        total += 1
        if record.status == AttendanceStatus.PRESENT:
            present += 1
        elif record.status == AttendanceStatus.LATE:
            late += 1
    return present, late, total


def attendance_rate(records, *, student_ids=None, date_from=None, date_to=None) -> int:
    """Weighted attendance rate for a student or cohort over an optional date range."""
    wanted = set(student_ids) if student_ids is not None else None
    start, end = _iso(date_from), _iso(date_to)
    selected = [
        record
        for record in records
        if (wanted is None or record.student_id in wanted)
        and (start is None or record.date >= start)
        and (end is None or record.date <= end)
    ]
    present, late, total = _tally(selected)
    return weighted_percentage(present, late, total)


def todays_attendance_rate(records, today) -> int:
    """Dashboard headline: share of today's marks that are Present. Late earns nothing here."""
    day = _iso(today)
    present, _, total = _tally(record for record in records if record.date == day)
    if total <= 0:
        return 0
    return round_half_up(present / total * 100)


def attendance_history(records, students, *, grade: GradeLevel | None = None) -> List[AttendanceDay]:
    """Per-date rollup, newest first. Records of deleted students are left out."""
    grades_by_student = {student.id: student.grade for student in students}
    groups: Dict[str, List[AttendanceRecord]] = {}
    for record in records:
        student_grade = grades_by_student.get(record.student_id)
        if student_grade is None:
            continue
        if grade is not None and student_grade != grade:
            continue
        groups.setdefault(record.date, []).append(record)

    history = []
    for day in sorted(groups, reverse=True):
        present, late, total = _tally(groups[day])
        history.append(
            AttendanceDay(
                date=day,
                present=present,
                late=late,
                total=total,
                percentage=weighted_percentage(present, late, total),
            )
        )
    return history


def merge_attendance(existing, batch) -> List[AttendanceRecord]:
    """Keep existing records whose (student, date) is not in ``batch``, then append ``batch``.

    Students missing from the batch keep their records for that date. Repeated
    keys inside the batch collapse to the last one.
    """
    latest = {}
    for record in batch:
        latest[record.key] = record
    return [record for record in existing if record.key not in latest] + list(latest.values())


@transaction.atomic
def save_attendance(repository, batch) -> List[AttendanceRecord]:
    batch = list(batch)
    merged = merge_attendance(repository.attendance(), batch)
    repository.save_attendance(merged)
    repository.append_activity(
        'Attendance Marked',
        f'Updated attendance for {len(batch)} students',
        ActivitySeverity.SUCCESS,
    )
    logger.info('Saved %s attendance marks; %s records stored.', len(batch), len(merged))
    return merged


def mark_attendance(repository, target_date, statuses: Dict[str, AttendanceStatus]) -> List[AttendanceRecord]:
    """Save one record per student for ``target_date`` from a student id to status map."""
    day = _iso(target_date)
    if not day:
        raise ValidationError('Attendance date is required.')

    batch = []
    for student_id, status in statuses.items():
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f'Unknown attendance status: {status}.')
        batch.append(
            AttendanceRecord(
                id=f'{day}-{student_id}',
                student_id=student_id,
                date=day,
                status=status,
            )
        )
    return save_attendance(repository, batch)


def student_attendance(records, student: Student) -> List[AttendanceRecord]:
    return sorted(
        (record for record in records if record.student_id == student.id),
        key=lambda record: record.date,
        reverse=True,
    )
