from django.test import TestCase

from apps.core.fees.services import TrendPoint
from apps.core.records import GradeLevel
from apps.core.storage.repository import SchoolRepository

from .services import dashboard_summary


class DashboardSummaryTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-03')

    def test_summary_of_initial_dataset(self):
        summary = dashboard_summary(self.repository.snapshot(), '2024-06-03')

        self.assertEqual(summary.total_students, 5)
        self.assertEqual(summary.total_collected, 50)
        self.assertEqual(summary.attendance_rate, 33)
        self.assertEqual(summary.grade_distribution, {
            GradeLevel.GRADE_1: 1,
            GradeLevel.GRADE_3: 1,
            GradeLevel.GRADE_5: 2,
            GradeLevel.GRADE_8: 1,
        })
        self.assertEqual(summary.income_trend, [TrendPoint(date='2024-05-01', amount=50)])
        self.assertEqual([(entry.name, entry.average) for entry in summary.top_students], [
            ('Ahmed Nur', 89),
            ('Yusuf Ibrahim', 78),
        ])
        self.assertEqual(summary.recent_activity[0].action, 'System Initialized')
        self.assertTrue(summary.announcement.startswith('Welcome'))

    def test_attendance_rate_is_zero_on_a_day_without_records(self):
        summary = dashboard_summary(self.repository.snapshot(), '2024-06-04')

        self.assertEqual(summary.attendance_rate, 0)
