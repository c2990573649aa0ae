from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from apps.core.records import AttendanceRecord, AttendanceStatus, GradeLevel, Student
from apps.core.storage.repository import SchoolRepository

from .services import (
    attendance_history,
    attendance_rate,
    mark_attendance,
    merge_attendance,
    save_attendance,
    todays_attendance_rate,
)

PRESENT = AttendanceStatus.PRESENT
ABSENT = AttendanceStatus.ABSENT
LATE = AttendanceStatus.LATE


def mark(student_id, day, status):
    return AttendanceRecord(id=f'{day}-{student_id}', student_id=student_id, date=day, status=status)


def student(student_id, grade=GradeLevel.GRADE_1):
    return Student(id=student_id, full_name=f'Student {student_id}', parent_name='Parent', phone='0', grade=grade)


class AttendanceRateTestCase(SimpleTestCase):
    def test_late_counts_as_half_present(self):
        records = [
            mark('s1', '2024-01-01', PRESENT),
            mark('s2', '2024-01-01', PRESENT),
            mark('s3', '2024-01-01', LATE),
            mark('s4', '2024-01-01', ABSENT),
        ]

        self.assertEqual(attendance_rate(records), 63)

    def test_empty_records_give_zero(self):
        self.assertEqual(attendance_rate([]), 0)
        self.assertEqual(todays_attendance_rate([], '2024-01-01'), 0)

    def test_rate_for_student_and_date_range(self):
        records = [
            mark('s1', '2024-01-01', PRESENT),
            mark('s1', '2024-01-02', ABSENT),
            mark('s1', '2024-01-03', LATE),
            mark('s2', '2024-01-02', PRESENT),
        ]

        self.assertEqual(attendance_rate(records, student_ids=['s1']), 50)
        self.assertEqual(attendance_rate(records, student_ids=['s1'], date_from='2024-01-02'), 25)
        self.assertEqual(attendance_rate(records, date_from='2024-01-02', date_to='2024-01-02'), 50)
        self.assertEqual(attendance_rate(records, student_ids=['missing']), 0)

    def test_todays_rate_only_uses_matching_date(self):
        records = [
            mark('s1', '2024-01-01', ABSENT),
            mark('s1', '2024-01-02', PRESENT),
            mark('s2', '2024-01-02', LATE),
        ]

        self.assertEqual(todays_attendance_rate(records, '2024-01-02'), 50)
        self.assertEqual(todays_attendance_rate(records, '2024-01-05'), 0)

    def test_todays_rate_counts_present_only(self):
        records = [
            mark('s1', '2024-01-01', PRESENT),
            mark('s2', '2024-01-01', ABSENT),
            mark('s3', '2024-01-01', LATE),
        ]

        self.assertEqual(todays_attendance_rate(records, '2024-01-01'), 33)
        self.assertEqual(attendance_rate(records), 50)


class AttendanceHistoryTestCase(SimpleTestCase):
    def setUp(self):
        self.students = [student('s1', GradeLevel.GRADE_1), student('s2', GradeLevel.GRADE_2)]
        self.records = [
            mark('s1', '2024-01-01', PRESENT),
            mark('s2', '2024-01-01', LATE),
            mark('s1', '2024-01-02', ABSENT),
            mark('s2', '2024-01-02', PRESENT),
            mark('ghost', '2024-01-03', PRESENT),
        ]

    def test_groups_by_date_newest_first_without_orphans(self):
        history = attendance_history(self.records, self.students)

        self.assertEqual([day.date for day in history], ['2024-01-02', '2024-01-01'])
        self.assertEqual((history[1].present, history[1].late, history[1].total), (1, 1, 2))
        self.assertEqual(history[1].percentage, 75)
        self.assertEqual(history[0].percentage, 50)

    def test_grade_filter_uses_student_join(self):
        history = attendance_history(self.records, self.students, grade=GradeLevel.GRADE_2)

        self.assertEqual([(day.date, day.total, day.percentage) for day in history], [
            ('2024-01-02', 1, 100),
            ('2024-01-01', 1, 50),
        ])


class MergeAttendanceTestCase(SimpleTestCase):
    def test_filtered_batch_keeps_untouched_students(self):
        existing = [mark('S1', '2024-01-01', PRESENT)]
        batch = [mark('S2', '2024-01-01', ABSENT)]

        self.assertEqual(merge_attendance(existing, batch), existing + batch)

    def test_batch_supersedes_same_student_and_date(self):
        existing = [mark('S1', '2024-01-01', PRESENT), mark('S1', '2024-01-02', PRESENT)]
        batch = [mark('S1', '2024-01-01', LATE)]

        merged = merge_attendance(existing, batch)

        self.assertEqual(merged, [existing[1], batch[0]])

    def test_duplicate_keys_in_batch_keep_last(self):
        batch = [mark('S1', '2024-01-01', PRESENT), mark('S1', '2024-01-01', ABSENT)]

        merged = merge_attendance([], batch)

        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].status, ABSENT)


class SaveAttendanceTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-01-01')
        self.repository.save_attendance([mark('S1', '2024-01-01', PRESENT)])

    def test_save_attendance_persists_merge_and_logs(self):
        save_attendance(self.repository, [mark('S2', '2024-01-01', ABSENT)])

        stored = self.repository.attendance()
        self.assertEqual([(record.student_id, record.status) for record in stored], [
            ('S1', PRESENT),
            ('S2', ABSENT),
        ])
        activity = self.repository.activities()[0]
        self.assertEqual(activity.action, 'Attendance Marked')
        self.assertEqual(activity.details, 'Updated attendance for 1 students')

    def test_mark_attendance_builds_date_student_ids(self):
        mark_attendance(self.repository, '2024-01-01', {'S1': 'Late', 'S3': AttendanceStatus.PRESENT})

        stored = {record.student_id: record for record in self.repository.attendance()}
        self.assertEqual(len(stored), 2)
        self.assertEqual(stored['S1'].status, LATE)
        self.assertEqual(stored['S3'].id, '2024-01-01-S3')

    def test_mark_attendance_rejects_unknown_status(self):
        with self.assertRaises(ValidationError):
            mark_attendance(self.repository, '2024-01-01', {'S1': 'Sick'})

        self.assertEqual(len(self.repository.attendance()), 1)
