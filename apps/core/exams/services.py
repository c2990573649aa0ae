from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.records import ActivitySeverity, ExamResult, GradeLevel, Term
from apps.core.utils.exports import format_amount, rows_to_csv_text
from apps.core.utils.numbers import safe_average

logger = logging.getLogger(__name__)

MAX_SCORE = 100
UNKNOWN_STUDENT = 'Unknown'


@dataclass(frozen=True)
class ClassAnalytics:
    avg: int
    max: float
    count: int


@dataclass(frozen=True)
class RankedStudent:
    student_id: str
    name: str
    average: int


def class_analytics(grades, students, *, grade, subject, date, term) -> ClassAnalytics:
    """Average, best score and count for one grade level, subject, exam date and term.

    Only results whose student is currently in ``grade`` count.
    """
    grade = GradeLevel(grade)
    term = Term(term)
    cohort = {student.id for student in students if student.grade == grade}
    scores = [
        result.score
        for result in grades
        if result.student_id in cohort
        and result.subject == subject
        and result.date == str(date)
        and result.term == term
    ]
    if not scores:
        return ClassAnalytics(avg=0, max=0, count=0)
    return ClassAnalytics(avg=safe_average(sum(scores), len(scores)), max=max(scores), count=len(scores))


def top_students(grades, students, limit=None) -> List[RankedStudent]:
    """Rank students by their average over every recorded result."""
    if limit is None:
        limit = int(getattr(settings, 'SCHOOLBOOK_TOP_STUDENTS_LIMIT', 3))
    names = {student.id: student.full_name for student in students}
    totals: Dict[str, List[float]] = {}
    for result in grades:
        bucket = totals.setdefault(result.student_id, [0.0, 0])
        bucket[0] += result.score
        bucket[1] += 1

    ranked = [
        RankedStudent(
            student_id=student_id,
            name=names.get(student_id, UNKNOWN_STUDENT),
            average=safe_average(total, count),
        )
        for student_id, (total, count) in totals.items()
    ]
    ranked.sort(key=lambda entry: entry.average, reverse=True)
    return ranked[:limit]


def student_average(grades, student_id) -> int:
    scores = [result.score for result in grades if result.student_id == student_id]
    return safe_average(sum(scores), len(scores))


def merge_grades(existing, batch) -> List[ExamResult]:
    """Upsert keyed on (student, subject, date, term); the batch wins."""
    latest = {}
    for result in batch:
        latest[result.key] = result
    return [result for result in existing if result.key not in latest] + list(latest.values())


def _validate_score(result: ExamResult):
    if result.score < 0 or result.score > MAX_SCORE:
        raise ValidationError(
            f'Score {format_amount(result.score)} for student {result.student_id} must be between 0 and {MAX_SCORE}.'
        )


@transaction.atomic
def save_grades(repository, batch) -> List[ExamResult]:
    batch = list(batch)
    for result in batch:
        _validate_score(result)

    merged = merge_grades(repository.grades(), batch)
    repository.save_grades(merged)
    repository.append_activity(
        'Grades Updated',
        f'Entered {len(batch)} exam scores',
        ActivitySeverity.SUCCESS,
    )
    logger.info('Saved %s exam scores; %s results stored.', len(batch), len(merged))
    return merged


def record_scores(repository, *, subject, date, term, scores) -> List[ExamResult]:
    """Build results from a student id to score map; blank scores are skipped.

    Returns the stored results, or an empty list when nothing was entered.
    """
    term = Term(term)
    batch = []
    for student_id, raw in scores.items():
        if raw is None or str(raw).strip() == '':
            continue
        try:
            score = float(raw)
        except (TypeError, ValueError):
            raise ValidationError(f'Score for student {student_id} is not a number.')
        batch.append(
            ExamResult(
                id=f'{date}-{student_id}-{subject}',
                student_id=student_id,
                subject=subject,
                score=score,
                max_score=MAX_SCORE,
                date=str(date),
                term=term,
            )
        )
    if not batch:
        return []
    return save_grades(repository, batch)


def grades_sheet_csv(grades, students, *, grade, subject, date, term) -> str:
    grade = GradeLevel(grade)
    term = Term(term)
    scores = {
        result.student_id: result.score
        for result in grades
        if result.subject == subject and result.date == str(date) and result.term == term
    }
    rows = []
    for student in students:
        if student.grade != grade:
            continue
        score = scores.get(student.id)
        rows.append([
            student.full_name,
            student.id,
            student.grade.value,
            subject,
            format_amount(score) if score is not None else 'N/A',
            term.value,
            str(date),
        ])
    return rows_to_csv_text(['Student Name', 'ID', 'Grade', 'Subject', 'Score', 'Term', 'Date'], rows)
