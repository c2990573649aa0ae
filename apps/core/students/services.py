from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.attendance.services import attendance_rate, student_attendance
from apps.core.exams.services import student_average
from apps.core.fees.services import outstanding_balance, total_paid
from apps.core.records import (
    ActivitySeverity,
    AttendanceRecord,
    AttendanceStatus,
    ExamResult,
    FeeRecord,
    Gender,
    GradeLevel,
    Note,
    NoteCategory,
    Student,
    Teacher,
    parse_choice,
)
from apps.core.utils.identifiers import new_access_code, new_record_id

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = 'Mogadishu'
DEFAULT_DOB = '2015-01-01'
RECENT_ATTENDANCE_FOR_PARENTS = 5


@dataclass(frozen=True)
class StudentProfile:
    student: Student
    attendance: List[AttendanceRecord]
    fees: List[FeeRecord]
    grades: List[ExamResult]
    attendance_rate: int
    total_present: int
    total_late: int
    total_days: int
    total_fees_paid: float
    total_fees_pending: float
    avg_score: int
    low_attendance: bool


@dataclass(frozen=True)
class ParentSummary:
    student: Student
    attendance_rate: int
    pending_balance: float
    recent_attendance: List[AttendanceRecord]
    fees: List[FeeRecord]
    grades: List[ExamResult]


def _grade(value) -> GradeLevel:
    try:
        return GradeLevel(value)
    except ValueError:
        raise ValidationError(f'Unknown grade level: {value}.')


def _iso(value) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _newest_first(records):
    return sorted(records, key=lambda record: record.date, reverse=True)


def find_student(students, student_id) -> Optional[Student]:
    return next((student for student in students if student.id == student_id), None)


def find_student_by_access_code(students, code) -> Optional[Student]:
    """Parent login: the first student whose code equals the input or its uppercase form.

    Codes are not unique; when two students share one the first wins.
    """
    entered = (code or '').strip()
    if not entered:
        return None
    candidates = {entered, entered.upper()}
    return next((student for student in students if student.parent_access_code in candidates), None)


def grade_distribution(students):
    """Student count per grade level, in grade order; empty grades are omitted."""
    counts = {}
    for student in students:
        counts[student.grade] = counts.get(student.grade, 0) + 1
    return {grade: counts[grade] for grade in GradeLevel if grade in counts}


def cohort(students, grade) -> List[Student]:
    grade = _grade(grade)
    return [student for student in students if student.grade == grade]


def student_age(student: Student, today) -> Optional[int]:
    try:
        born = date.fromisoformat(student.dob)
    except ValueError:
        return None
    today = today if isinstance(today, date) else date.fromisoformat(str(today))
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def student_profile(student: Student, attendance, fees, grades, *, low_attendance_threshold=None) -> StudentProfile:
    threshold = low_attendance_threshold
    if threshold is None:
        threshold = int(getattr(settings, 'SCHOOLBOOK_LOW_ATTENDANCE_THRESHOLD', 75))

    own_attendance = student_attendance(attendance, student)
    own_fees = _newest_first(fee for fee in fees if fee.student_id == student.id)
    own_grades = _newest_first(result for result in grades if result.student_id == student.id)
    rate = attendance_rate(own_attendance)
    return StudentProfile(
        student=student,
        attendance=own_attendance,
        fees=own_fees,
        grades=own_grades,
        attendance_rate=rate,
        total_present=sum(1 for record in own_attendance if record.status == AttendanceStatus.PRESENT),
        total_late=sum(1 for record in own_attendance if record.status == AttendanceStatus.LATE),
        total_days=len(own_attendance),
        total_fees_paid=total_paid(fees, student.id),
        total_fees_pending=outstanding_balance(fees, student.id),
        avg_score=student_average(grades, student.id),
        low_attendance=rate < threshold,
    )


def parent_summary(student: Student, attendance, fees, grades) -> ParentSummary:
    own_attendance = student_attendance(attendance, student)
    return ParentSummary(
        student=student,
        attendance_rate=attendance_rate(own_attendance),
        pending_balance=outstanding_balance(fees, student.id),
        recent_attendance=own_attendance[:RECENT_ATTENDANCE_FOR_PARENTS],
        fees=[fee for fee in fees if fee.student_id == student.id],
        grades=[result for result in grades if result.student_id == student.id],
    )


def parse_student_csv(text, today) -> List[Student]:
    """Parse ``fullName,parentName,phone,grade[,gender[,address]]`` rows.

    The first line is a header. Rows with fewer than four fields, or with a
    grade that is not a known level, are skipped. Fields are split on every
    comma; quoted commas are not supported.
    """
    enrolled = _iso(today)
    students = []
    for number, raw_line in enumerate((text or '').split('\n')[1:], start=2):
        line = raw_line.strip()
        if not line:
            continue
        parts = [part.strip() for part in line.split(',')]
        if len(parts) < 4:
            logger.debug('Skipping CSV line %s: expected at least 4 fields, got %s.', number, len(parts))
            continue

        grade = parse_choice(GradeLevel, parts[3]) if parts[3] else GradeLevel.GRADE_1
        if grade is None:
            logger.debug('Skipping CSV line %s: unknown grade %r.', number, parts[3])
            continue
        gender = parse_choice(Gender, parts[4]) if len(parts) > 4 else None
        address = parts[5] if len(parts) > 5 else ''

        students.append(
            Student(
                id=new_record_id(),
                full_name=parts[0] or 'Unknown',
                parent_name=parts[1] or 'Unknown',
                phone=parts[2],
                grade=grade,
                gender=gender or Gender.MALE,
                address=address or DEFAULT_ADDRESS,
                dob=DEFAULT_DOB,
                enrollment_date=enrolled,
                parent_access_code=new_access_code(),
                library_clearance=True,
            )
        )
    return students


@transaction.atomic
def import_students(repository, text, today=None) -> List[Student]:
    """Append parsed students to the roster; existing students are never merged or deduplicated."""
    imported = parse_student_csv(text, today or repository.reference_date())
    if not imported:
        logger.warning('No valid student records found in CSV.')
        return []
    repository.save_students([*repository.students(), *imported])
    repository.append_activity('Students Imported', f'Imported {len(imported)} students from CSV', ActivitySeverity.SUCCESS)
    return imported


@transaction.atomic
def promote_students(repository, from_grade, to_grade) -> List[Student]:
    """Move every student at ``from_grade`` to ``to_grade``; other fields stay as they are."""
    from_grade = _grade(from_grade)
    to_grade = _grade(to_grade)
    promoted = 0
    updated = []
    for student in repository.students():
        if student.grade == from_grade:
            student = replace(student, grade=to_grade)
            promoted += 1
        updated.append(student)
    repository.save_students(updated)
    repository.append_activity(
        'Students Promoted',
        f'Moved {promoted} students from {from_grade.value} to {to_grade.value}',
        ActivitySeverity.INFO,
    )
    return updated


@transaction.atomic
def add_student(repository, *, full_name, parent_name, phone, grade, gender=Gender.MALE, dob='', address='',
                photo='', medical_info='', today=None) -> Student:
    if not (full_name and parent_name and phone):
        raise ValidationError('Full name, parent name and phone are required.')
    student = Student(
        id=new_record_id(),
        full_name=full_name,
        parent_name=parent_name,
        phone=phone,
        grade=_grade(grade),
        gender=Gender(gender),
        dob=dob or DEFAULT_DOB,
        address=address,
        photo=photo,
        medical_info=medical_info,
        enrollment_date=_iso(today or repository.reference_date()),
        parent_access_code=new_access_code(),
        library_clearance=True,
    )
    repository.save_students([*repository.students(), student])
    repository.append_activity('Student Added', f'Added {student.full_name} to {student.grade.value}', ActivitySeverity.SUCCESS)
    return student


@transaction.atomic
def update_student(repository, student: Student) -> Student:
    students = repository.students()
    if find_student(students, student.id) is None:
        raise ValidationError(f'Student {student.id} does not exist.')
    repository.save_students([student if existing.id == student.id else existing for existing in students])
    repository.append_activity('Student Updated', f'Updated details for {student.full_name}', ActivitySeverity.INFO)
    return student


@transaction.atomic
def delete_student(repository, student_id) -> bool:
    """Remove the student only; attendance, fees and results stay as orphans."""
    students = repository.students()
    student = find_student(students, student_id)
    if student is None:
        return False
    repository.save_students([existing for existing in students if existing.id != student_id])
    repository.append_activity('Student Deleted', f'Removed {student.full_name} from database', ActivitySeverity.WARNING)
    return True


def add_note(repository, student_id, text, category=NoteCategory.OTHER, *, now=None) -> Student:
    if not (text or '').strip():
        raise ValidationError('Note text is required.')
    student = find_student(repository.students(), student_id)
    if student is None:
        raise ValidationError(f'Student {student_id} does not exist.')
    note = Note(
        id=new_record_id(),
        date=(now or timezone.now()).isoformat(),
        text=text,
        category=NoteCategory(category),
    )
    return update_student(repository, replace(student, notes=[*student.notes, note]))


def toggle_library_clearance(repository, student_id) -> Student:
    student = find_student(repository.students(), student_id)
    if student is None:
        raise ValidationError(f'Student {student_id} does not exist.')
    return update_student(repository, replace(student, library_clearance=not student.library_clearance))


def add_teacher(repository, *, full_name, phone='', subjects=(), join_date='') -> Teacher:
    if not full_name:
        raise ValidationError('Teacher name is required.')
    teacher = Teacher(
        id=new_record_id(),
        full_name=full_name,
        phone=phone,
        subjects=list(dict.fromkeys(subjects)),
        join_date=_iso(join_date) if join_date else repository.reference_date(),
    )
    repository.save_teachers([*repository.teachers(), teacher])
    return teacher


def update_teacher(repository, teacher: Teacher) -> Teacher:
    teachers = repository.teachers()
    if not any(existing.id == teacher.id for existing in teachers):
        raise ValidationError(f'Teacher {teacher.id} does not exist.')
    repository.save_teachers([teacher if existing.id == teacher.id else existing for existing in teachers])
    return teacher


def delete_teacher(repository, teacher_id) -> bool:
    teachers = repository.teachers()
    remaining = [teacher for teacher in teachers if teacher.id != teacher_id]
    if len(remaining) == len(teachers):
        return False
    repository.save_teachers(remaining)
    return True
