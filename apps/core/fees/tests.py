from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from apps.core.records import (
    ExpenseCategory,
    ExpenseRecord,
    FeeRecord,
    GradeLevel,
    PaymentStatus,
    Student,
)
from apps.core.storage.repository import SchoolRepository

from .services import (
    FinancialSummary,
    TrendPoint,
    add_expense,
    add_fee,
    delete_fee,
    expense_breakdown,
    expenses_csv,
    fees_csv,
    filter_fees,
    financial_summary,
    generate_bulk_fees,
    income_trend,
    mark_fee_paid,
    overdue_fees,
)


def fee(fee_id, amount, status, student_id='s1', day='2024-05-01', description='Tuition Fee'):
    return FeeRecord(id=fee_id, student_id=student_id, amount=amount, date=day, status=status,
                     description=description)


def expense(expense_id, amount, category=ExpenseCategory.OTHER, day='2024-05-01'):
    return ExpenseRecord(id=expense_id, category=category, amount=amount, date=day, description='Spend')


class FinancialSummaryTestCase(SimpleTestCase):
    def test_income_counts_paid_fees_only(self):
        fees = [fee('f1', 50, PaymentStatus.PAID), fee('f2', 45, PaymentStatus.PENDING)]

        summary = financial_summary(fees, [expense('e1', 20)])

        self.assertEqual(summary, FinancialSummary(income=50, expenses=20, net=30))

    def test_empty_and_negative_amounts(self):
        self.assertEqual(financial_summary([], []), FinancialSummary(income=0, expenses=0, net=0))

        summary = financial_summary([fee('f1', -10, PaymentStatus.PAID), fee('f2', 30, PaymentStatus.PAID)],
                                    [expense('e1', -5)])
        self.assertEqual(summary, FinancialSummary(income=20, expenses=-5, net=25))

    def test_orphaned_fees_still_count_towards_income(self):
        summary = financial_summary([fee('f1', 40, PaymentStatus.PAID, student_id='deleted')], [])

        self.assertEqual(summary.income, 40)

    def test_expense_breakdown_by_category(self):
        totals = expense_breakdown([
            expense('e1', 1200, ExpenseCategory.SALARY),
            expense('e2', 100, ExpenseCategory.SUPPLIES),
            expense('e3', 50, ExpenseCategory.SUPPLIES),
        ])

        self.assertEqual(totals, {ExpenseCategory.SALARY: 1200, ExpenseCategory.SUPPLIES: 150})


class FeeListingTestCase(SimpleTestCase):
    def setUp(self):
        self.students = [
            Student(id='s1', full_name='Liban Farah', parent_name='P', phone='0', grade=GradeLevel.GRADE_8),
            Student(id='s2', full_name='Safia Abdi', parent_name='P', phone='0', grade=GradeLevel.GRADE_1),
        ]

    def test_overdue_fees_resolve_names_with_sentinel(self):
        fees = [
            fee('f1', 60, PaymentStatus.OVERDUE, student_id='s1'),
            fee('f2', 20, PaymentStatus.PAID, student_id='s1'),
            fee('f3', 30, PaymentStatus.OVERDUE, student_id='gone'),
        ]

        overdue = overdue_fees(fees, self.students)

        self.assertEqual([(entry.fee.id, entry.student_name) for entry in overdue], [
            ('f1', 'Liban Farah'),
            ('f3', 'Unknown Student'),
        ])

    def test_income_trend_sums_paid_per_date_and_keeps_latest_seven(self):
        fees = [fee(f'f{day}', 10, PaymentStatus.PAID, day=f'2024-05-{day:02d}') for day in range(1, 10)]
        fees.append(fee('extra', 5, PaymentStatus.PAID, day='2024-05-09'))
        fees.append(fee('pending', 99, PaymentStatus.PENDING, day='2024-05-09'))

        trend = income_trend(fees)

        self.assertEqual(len(trend), 7)
        self.assertEqual(trend[0], TrendPoint(date='2024-05-03', amount=10))
        self.assertEqual(trend[-1], TrendPoint(date='2024-05-09', amount=15))

    def test_income_trend_bucket_count_is_respected(self):
        fees = [fee(f'f{day}', 10, PaymentStatus.PAID, day=f'2024-05-{day:02d}') for day in range(1, 4)]

        self.assertEqual(income_trend(fees, buckets=0), [])
        self.assertEqual([point.date for point in income_trend(fees, buckets=2)], ['2024-05-02', '2024-05-03'])

    def test_filter_fees_by_status_grade_and_dates(self):
        fees = [
            fee('f1', 10, PaymentStatus.PAID, student_id='s1', day='2024-04-01'),
            fee('f2', 10, PaymentStatus.PENDING, student_id='s1', day='2024-05-01'),
            fee('f3', 10, PaymentStatus.PENDING, student_id='s2', day='2024-05-02'),
            fee('f4', 10, PaymentStatus.PENDING, student_id='gone', day='2024-05-03'),
        ]

        self.assertEqual([f.id for f in filter_fees(fees, self.students, status='Pending')], ['f2', 'f3', 'f4'])
        self.assertEqual([f.id for f in filter_fees(fees, self.students, grade=GradeLevel.GRADE_8)], ['f1', 'f2'])
        self.assertEqual(
            [f.id for f in filter_fees(fees, self.students, date_from='2024-05-01', date_to='2024-05-02')],
            ['f2', 'f3'],
        )

    def test_csv_exports(self):
        fees_text = fees_csv([fee('f1', 60, PaymentStatus.OVERDUE, student_id='s1')], self.students)
        expenses_text = expenses_csv([expense('e1', 12.5, ExpenseCategory.UTILITIES)])

        self.assertEqual(fees_text.splitlines(), [
            'ID,Date,Student,Description,Amount,Status',
            'f1,2024-05-01,Liban Farah,Tuition Fee,60,Overdue',
        ])
        self.assertEqual(expenses_text.splitlines()[1], 'e1,2024-05-01,Utilities,Spend,12.5')


class BulkFeeGenerationTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-01')

    def test_empty_cohort_leaves_fees_unchanged(self):
        before = self.repository.fees()

        created = generate_bulk_fees(self.repository, grade=GradeLevel.GRADE_12, amount=40,
                                     description='Exam Fee', date='2024-06-01')

        self.assertEqual(created, [])
        self.assertEqual(self.repository.fees(), before)

    def test_one_pending_fee_per_cohort_student(self):
        created = generate_bulk_fees(self.repository, grade='Grade 5', amount='40', description='Exam Fee',
                                     date='2024-06-01')

        self.assertEqual(sorted(entry.student_id for entry in created), ['1', '5'])
        self.assertTrue(all(entry.status == PaymentStatus.PENDING and entry.amount == 40 for entry in created))
        fees = self.repository.fees()
        self.assertEqual(len(fees), 5)
        self.assertEqual(fees[:2], created)
        self.assertEqual(self.repository.activities()[0].details, 'Generated 2 invoices')


class FeeBookkeepingTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-01')

    def test_add_fee_is_stored_newest_first(self):
        created = add_fee(self.repository, student_id='2', amount=45, status='Paid', date='2024-06-01')

        self.assertEqual(self.repository.fees()[0], created)
        self.assertEqual(created.description, 'Tuition Fee')

    def test_add_fee_requires_student(self):
        with self.assertRaises(ValidationError):
            add_fee(self.repository, student_id='', amount=45, status='Paid', date='2024-06-01')

    def test_mark_fee_paid_and_delete(self):
        updated = mark_fee_paid(self.repository, '102')

        self.assertEqual(updated.status, PaymentStatus.PAID)
        self.assertEqual(financial_summary(self.repository.fees(), []).income, 95)
        self.assertTrue(delete_fee(self.repository, '102'))
        self.assertFalse(delete_fee(self.repository, '102'))
        self.assertEqual(len(self.repository.fees()), 2)

    def test_add_expense_logs_warning_activity(self):
        created = add_expense(self.repository, category='Utilities', amount=80, description='Electricity',
                              date='2024-06-01')

        self.assertTrue(created.id.startswith('exp_'))
        self.assertEqual(self.repository.expenses()[0], created)
        activity = self.repository.activities()[0]
        self.assertEqual(activity.action, 'Expense Recorded')
        self.assertEqual(activity.details, 'Spent 80 for Utilities')
