from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.records import (
    ActivitySeverity,
    ExpenseCategory,
    ExpenseRecord,
    FeeRecord,
    GradeLevel,
    PaymentStatus,
)
from apps.core.utils.exports import format_amount, rows_to_csv_text
from apps.core.utils.identifiers import new_record_id

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT = 'Unknown Student'


@dataclass(frozen=True)
class FinancialSummary:
    income: float
    expenses: float
    net: float


@dataclass(frozen=True)
class OverdueFee:
    fee: FeeRecord
    student_name: str


@dataclass(frozen=True)
class TrendPoint:
    date: str
    amount: float


def _sum_amount(records) -> float:
    return sum((record.amount for record in records), 0)


def financial_summary(fees, expenses) -> FinancialSummary:
    income = _sum_amount(fee for fee in fees if fee.status == PaymentStatus.PAID)
    spent = _sum_amount(expenses)
    return FinancialSummary(income=income, expenses=spent, net=income - spent)


def student_name_lookup(students):
    return {student.id: student.full_name for student in students}


def overdue_fees(fees, students) -> List[OverdueFee]:
    names = student_name_lookup(students)
    return [
        OverdueFee(fee=fee, student_name=names.get(fee.student_id, UNKNOWN_STUDENT))
        for fee in fees
        if fee.status == PaymentStatus.OVERDUE
    ]


def outstanding_balance(fees, student_id) -> float:
    return _sum_amount(
        fee
        for fee in fees
        if fee.student_id == student_id and fee.status in (PaymentStatus.PENDING, PaymentStatus.OVERDUE)
    )


def total_paid(fees, student_id=None) -> float:
    return _sum_amount(
        fee
        for fee in fees
        if fee.status == PaymentStatus.PAID and (student_id is None or fee.student_id == student_id)
    )


def expense_breakdown(expenses):
    """Total spent per expense category, in first-seen order."""
    totals = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, 0) + expense.amount
    return totals


def income_trend(fees, buckets=None) -> List[TrendPoint]:
    """Collected amount per date, oldest first, limited to the latest ``buckets`` dates."""
    if buckets is None:
        buckets = int(getattr(settings, 'SCHOOLBOOK_INCOME_TREND_BUCKETS', 7))
    grouped = {}
    for fee in fees:
        if fee.status != PaymentStatus.PAID:
            continue
        grouped[fee.date] = grouped.get(fee.date, 0) + fee.amount
    points = [TrendPoint(date=day, amount=grouped[day]) for day in sorted(grouped)]
    return points[-buckets:] if buckets > 0 else []


def filter_fees(fees, students, *, status=None, grade=None, date_from=None, date_to=None) -> List[FeeRecord]:
    grades_by_student = {student.id: student.grade for student in students}
    status = PaymentStatus(status) if status else None
    grade = GradeLevel(grade) if grade else None
    return [
        fee
        for fee in fees
        if (status is None or fee.status == status)
        and (grade is None or grades_by_student.get(fee.student_id) == grade)
        and (not date_from or fee.date >= str(date_from))
        and (not date_to or fee.date <= str(date_to))
    ]


@transaction.atomic
def generate_bulk_fees(repository, *, grade, amount, description, date) -> List[FeeRecord]:
    """Invoice every student currently in ``grade`` with one Pending fee each.

    An empty cohort writes nothing and returns an empty list.
    """
    grade = GradeLevel(grade)
    cohort = [student for student in repository.students() if student.grade == grade]
    if not cohort:
        logger.warning('No students found in %s; bulk invoicing skipped.', grade.value)
        return []

    new_fees = [
        FeeRecord(
            id=new_record_id(),
            student_id=student.id,
            amount=float(amount),
            date=str(date),
            status=PaymentStatus.PENDING,
            description=description,
        )
        for student in cohort
    ]
    repository.save_fees([*new_fees, *repository.fees()])
    repository.append_activity('Bulk Invoicing', f'Generated {len(new_fees)} invoices', ActivitySeverity.SUCCESS)
    return new_fees


@transaction.atomic
def add_fee(repository, *, student_id, amount, status, description='Tuition Fee', date) -> FeeRecord:
    if not student_id:
        raise ValidationError('A fee must belong to a student.')
    fee = FeeRecord(
        id=new_record_id(),
        student_id=student_id,
        amount=float(amount),
        date=str(date),
        status=PaymentStatus(status),
        description=description or 'Tuition Fee',
    )
    repository.save_fees([fee, *repository.fees()])
    repository.append_activity(
        'Fee Recorded',
        f'{fee.description} of {format_amount(fee.amount)} ({fee.status.value})',
        ActivitySeverity.SUCCESS,
    )
    return fee


@transaction.atomic
def update_fee(repository, fee: FeeRecord) -> FeeRecord:
    fees = repository.fees()
    if not any(existing.id == fee.id for existing in fees):
        raise ValidationError(f'Fee {fee.id} does not exist.')
    repository.save_fees([fee if existing.id == fee.id else existing for existing in fees])
    repository.append_activity('Fee Updated', f'Updated fee {fee.id} to {fee.status.value}', ActivitySeverity.INFO)
    return fee


def mark_fee_paid(repository, fee_id) -> FeeRecord:
    fee = next((fee for fee in repository.fees() if fee.id == fee_id), None)
    if fee is None:
        raise ValidationError(f'Fee {fee_id} does not exist.')
    return update_fee(repository, replace(fee, status=PaymentStatus.PAID))


@transaction.atomic
def delete_fee(repository, fee_id) -> bool:
    fees = repository.fees()
    remaining = [fee for fee in fees if fee.id != fee_id]
    if len(remaining) == len(fees):
        return False
    repository.save_fees(remaining)
    repository.append_activity('Fee Deleted', f'Removed fee {fee_id}', ActivitySeverity.WARNING)
    return True


@transaction.atomic
def add_expense(repository, *, category, amount, description, date) -> ExpenseRecord:
    if not description:
        raise ValidationError('An expense needs a description.')
    expense = ExpenseRecord(
        id=f'exp_{new_record_id()}',
        category=ExpenseCategory(category),
        amount=float(amount),
        description=description,
        date=str(date),
    )
    repository.save_expenses([expense, *repository.expenses()])
    repository.append_activity(
        'Expense Recorded',
        f'Spent {format_amount(expense.amount)} for {expense.category.value}',
        ActivitySeverity.WARNING,
    )
    return expense


@transaction.atomic
def delete_expense(repository, expense_id) -> bool:
    expenses = repository.expenses()
    remaining = [expense for expense in expenses if expense.id != expense_id]
    if len(remaining) == len(expenses):
        return False
    repository.save_expenses(remaining)
    return True


def fees_csv(fees, students) -> str:
    names = student_name_lookup(students)
    rows = [
        [fee.id, fee.date, names.get(fee.student_id, UNKNOWN_STUDENT), fee.description, format_amount(fee.amount), fee.status.value]
        for fee in fees
    ]
    return rows_to_csv_text(['ID', 'Date', 'Student', 'Description', 'Amount', 'Status'], rows)


def expenses_csv(expenses) -> str:
    rows = [
        [expense.id, expense.date, expense.category.value, expense.description, format_amount(expense.amount)]
        for expense in expenses
    ]
    return rows_to_csv_text(['ID', 'Date', 'Category', 'Description', 'Amount'], rows)
