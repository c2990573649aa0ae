"""Record types stored in the school collections.

Every record is an immutable dataclass. Stored documents use camelCase keys
(``fullName``, ``parentAccessCode``) and are converted at the storage boundary
with :meth:`Record.from_dict` / :meth:`Record.to_dict`.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List

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
)


def camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _number(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f'Expected a number, got {value!r}.')
    return float(value)


def _integer(value) -> int:
    return int(_number(value))


def _boolean(value) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f'Expected true or false, got {value!r}.')
    return value


def _text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, (dict, list)):
        raise ValueError(f'Expected text, got {value!r}.')
    return str(value)


def _text_list(value) -> List[str]:
    if not isinstance(value, list):
        raise ValueError(f'Expected a list, got {value!r}.')
    return [_text(item) for item in value]


def _records(record_class):
    def convert(value):
        if not isinstance(value, list):
            raise ValueError(f'Expected a list, got {value!r}.')
        return [record_class.from_dict(item) for item in value]

    return convert


def _plain(value):
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class Record:
    converters: ClassVar[Dict[str, Any]] = {}

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValueError(f'{cls.__name__} must be an object, got {type(data).__name__}.')

        values = {}
        for record_field in fields(cls):
            key = camel_case(record_field.name)
            if key not in data or data[key] is None:
                if record_field.default is MISSING and record_field.default_factory is MISSING:
                    raise ValueError(f'{cls.__name__} is missing "{key}".')
                continue
            convert = cls.converters.get(record_field.name, _text)
            try:
                values[record_field.name] = convert(data[key])
            except TypeError as exc:
                raise ValueError(f'{cls.__name__}.{key} has the wrong type: {exc}') from exc
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {camel_case(f.name): _plain(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class Note(Record):
    id: str
    date: str
    text: str
    category: NoteCategory = NoteCategory.OTHER

    converters: ClassVar[Dict[str, Any]] = {'category': NoteCategory}


@dataclass(frozen=True)
class Student(Record):
    id: str
    full_name: str
    parent_name: str
    phone: str
    grade: GradeLevel
    enrollment_date: str = ''
    gender: Gender = Gender.MALE
    dob: str = ''
    address: str = ''
    photo: str = ''
    medical_info: str = ''
    library_clearance: bool = True
    parent_access_code: str = ''
    notes: List[Note] = field(default_factory=list)

    converters: ClassVar[Dict[str, Any]] = {
        'grade': GradeLevel,
        'gender': Gender,
        'library_clearance': _boolean,
        'notes': _records(Note),
    }


@dataclass(frozen=True)
class Teacher(Record):
    id: str
    full_name: str
    phone: str = ''
    subjects: List[str] = field(default_factory=list)
    join_date: str = ''

    converters: ClassVar[Dict[str, Any]] = {'subjects': _text_list}


@dataclass(frozen=True)
class AttendanceRecord(Record):
    id: str
    student_id: str
    date: str
    status: AttendanceStatus

    converters: ClassVar[Dict[str, Any]] = {'status': AttendanceStatus}

    @property
    def key(self):
        return (self.student_id, self.date)


@dataclass(frozen=True)
class ExamResult(Record):
    id: str
    student_id: str
    subject: str
    score: float
    date: str
    term: Term
    max_score: float = 100

    converters: ClassVar[Dict[str, Any]] = {
        'score': _number,
        'max_score': _number,
        'term': Term,
    }

    @property
    def key(self):
        return (self.student_id, self.subject, self.date, self.term)


@dataclass(frozen=True)
class FeeRecord(Record):
    id: str
    student_id: str
    amount: float
    date: str
    status: PaymentStatus
    description: str = ''

    converters: ClassVar[Dict[str, Any]] = {'amount': _number, 'status': PaymentStatus}


@dataclass(frozen=True)
class ExpenseRecord(Record):
    id: str
    category: ExpenseCategory
    amount: float
    date: str
    description: str = ''

    converters: ClassVar[Dict[str, Any]] = {'amount': _number, 'category': ExpenseCategory}


@dataclass(frozen=True)
class ActivityLog(Record):
    id: str
    action: str
    details: str
    date: str
    timestamp: int = 0
    type: ActivitySeverity = ActivitySeverity.INFO

    converters: ClassVar[Dict[str, Any]] = {'timestamp': _integer, 'type': ActivitySeverity}


@dataclass(frozen=True)
class SchoolSettings(Record):
    name: str
    address: str = ''
    phone: str = ''
    theme: Theme = Theme.OCEAN
    fee_types: List[str] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    currency: str = 'USD'

    converters: ClassVar[Dict[str, Any]] = {
        'theme': Theme,
        'fee_types': _text_list,
        'subjects': _text_list,
    }
