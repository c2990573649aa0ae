from django.db import models


class GradeLevel(models.TextChoices):
    GRADE_1 = 'Grade 1'
    GRADE_2 = 'Grade 2'
    GRADE_3 = 'Grade 3'
    GRADE_4 = 'Grade 4'
    GRADE_5 = 'Grade 5'
    GRADE_6 = 'Grade 6'
    GRADE_7 = 'Grade 7'
    GRADE_8 = 'Grade 8'
    GRADE_9 = 'Grade 9'
    GRADE_10 = 'Grade 10'
    GRADE_11 = 'Grade 11'
    GRADE_12 = 'Grade 12'
    GRADUATED = 'Graduated'


class PaymentStatus(models.TextChoices):
    PAID = 'Paid'
    PENDING = 'Pending'
    OVERDUE = 'Overdue'


class AttendanceStatus(models.TextChoices):
    PRESENT = 'Present'
    ABSENT = 'Absent'
    LATE = 'Late'


class Term(models.TextChoices):
    TERM_1 = 'Term 1'
    TERM_2 = 'Term 2'
    TERM_3 = 'Term 3'
    SUMMER = 'Summer'


class ExpenseCategory(models.TextChoices):
    SALARY = 'Salary'
    MAINTENANCE = 'Maintenance'
    UTILITIES = 'Utilities'
    SUPPLIES = 'Supplies'
    OTHER = 'Other'


class ActivitySeverity(models.TextChoices):
    INFO = 'info'
    SUCCESS = 'success'
    WARNING = 'warning'
    ERROR = 'error'


class Theme(models.TextChoices):
    OCEAN = 'Ocean'
    FOREST = 'Forest'
    SUNSET = 'Sunset'
    MIDNIGHT = 'Midnight'


class NoteCategory(models.TextChoices):
    BEHAVIOR = 'Behavior'
    MEDICAL = 'Medical'
    ACADEMIC = 'Academic'
    OTHER = 'Other'


class Gender(models.TextChoices):
    MALE = 'Male'
    FEMALE = 'Female'


def parse_choice(choices, value):
    """Return the member of ``choices`` matching ``value`` case-insensitively, or None."""
    if isinstance(value, choices):
        return value
    text = str(value or '').strip().lower()
    for member in choices:
        if member.value.lower() == text:
            return member
    return None
