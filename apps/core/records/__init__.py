"""Record types and closed enumerations shared by every school collection."""

from .choices import (
    ActivitySeverity,
    AttendanceStatus,
    ExpenseCategory,
    Gender,
    GradeLevel,
    NoteCategory,
    PaymentStatus,
    Term,
    Theme,
    parse_choice,
)
from .records import (
    ActivityLog,
    AttendanceRecord,
    ExamResult,
    ExpenseRecord,
    FeeRecord,
    Note,
    Record,
    SchoolSettings,
    Student,
    Teacher,
)

__all__ = [
    'ActivityLog',
    'ActivitySeverity',
    'AttendanceRecord',
    'AttendanceStatus',
    'ExamResult',
    'ExpenseCategory',
    'ExpenseRecord',
    'FeeRecord',
    'Gender',
    'GradeLevel',
    'Note',
    'NoteCategory',
    'PaymentStatus',
    'Record',
    'SchoolSettings',
    'Student',
    'Teacher',
    'Term',
    'Theme',
    'parse_choice',
]
