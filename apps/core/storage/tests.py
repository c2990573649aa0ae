import json
import tempfile
from datetime import datetime, timezone as dt_timezone
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from apps.core.records import (
    ActivityLog,
    ActivitySeverity,
    AttendanceRecord,
    AttendanceStatus,
    GradeLevel,
    Note,
    NoteCategory,
    SchoolSettings,
    Student,
    Theme,
)

from .models import StoredValue
from .repository import Collection, SchoolRepository
from .store import DatabaseStore


class CountingStore(DatabaseStore):
    def __init__(self):
        self.writes = []

    def set(self, key, value):
        self.writes.append(key)
        super().set(key, value)


class RepositoryTestCase(TestCase):
    def setUp(self):
        self.store = CountingStore()
        self.repository = SchoolRepository(self.store, today='2024-06-03')

    def test_first_read_seeds_once_and_second_read_matches(self):
        first = self.repository.students()
        second = self.repository.students()

        self.assertEqual(first, second)
        self.assertEqual(len(first), 5)
        self.assertEqual(self.store.writes, ['cim_students'])
        self.assertTrue(StoredValue.objects.filter(key='cim_students').exists())

    def test_every_collection_seeds_on_first_access(self):
        snapshot = self.repository.snapshot()

        self.assertEqual(len(snapshot.teachers), 2)
        self.assertEqual(len(snapshot.fees), 3)
        self.assertEqual(len(snapshot.expenses), 2)
        self.assertEqual(len(snapshot.grades), 3)
        self.assertEqual(snapshot.activities[0].action, 'System Initialized')
        self.assertEqual(snapshot.settings.name, 'Cabdullahi ibnu Mubarak')
        self.assertTrue(snapshot.announcement.startswith('Welcome to the new term'))
        self.assertEqual(sorted(self.store.writes), sorted(f'cim_{c.value}' for c in Collection))

    def test_seeded_attendance_uses_reference_date(self):
        records = self.repository.attendance()

        self.assertEqual({record.date for record in records}, {'2024-06-03'})
        self.assertEqual(
            [record.status for record in records],
            [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.LATE],
        )

    def test_set_replaces_whole_collection(self):
        self.repository.save_students([
            Student(id='s1', full_name='Amina', parent_name='Ali', phone='1', grade=GradeLevel.GRADE_2),
        ])

        students = self.repository.students()
        self.assertEqual([student.id for student in students], ['s1'])
        self.assertEqual(students[0].grade, GradeLevel.GRADE_2)

    def test_documents_keep_camel_case_keys(self):
        student = Student(
            id='s1',
            full_name='Amina',
            parent_name='Ali',
            phone='1',
            grade=GradeLevel.GRADE_2,
            parent_access_code='AMI-1',
            notes=[Note(id='n1', date='2024-01-01', text='Asthma', category=NoteCategory.MEDICAL)],
        )
        self.repository.save_students([student])

        stored = json.loads(StoredValue.objects.get(key='cim_students').value)
        self.assertEqual(stored[0]['fullName'], 'Amina')
        self.assertEqual(stored[0]['parentAccessCode'], 'AMI-1')
        self.assertEqual(stored[0]['notes'][0]['category'], 'Medical')
        self.assertEqual(self.repository.students(), [student])

    def test_settings_and_announcement_round_trip(self):
        school_settings = SchoolSettings(name='Hodan Primary', theme=Theme.FOREST, subjects=['Math'])
        self.repository.save_school_settings(school_settings)
        self.repository.save_announcement('Exams start Monday')

        self.assertEqual(self.repository.school_settings(), school_settings)
        self.assertEqual(self.repository.announcement(), 'Exams start Monday')

    def test_unknown_status_in_stored_document_is_rejected(self):
        self.store.set(
            'cim_attendance',
            json.dumps([{'id': 'a', 'studentId': '1', 'date': '2024-06-03', 'status': 'Sick'}]),
        )

        with self.assertRaises(ValueError):
            self.repository.attendance()

    def test_append_activity_prepends_and_caps_log(self):
        now = datetime(2024, 6, 3, 8, 0, tzinfo=dt_timezone.utc)
        for index in range(60):
            activities = self.repository.append_activity(f'Action {index}', 'details', ActivitySeverity.SUCCESS, now=now)

        self.assertEqual(len(activities), 50)
        self.assertEqual(activities[0].action, 'Action 59')
        self.assertEqual(activities[0].type, ActivitySeverity.SUCCESS)
        self.assertEqual(activities[0].timestamp, int(now.timestamp() * 1000))
        self.assertEqual(len(self.repository.activities()), 50)

    def test_clear_all_removes_owned_keys_and_reseeds(self):
        self.repository.snapshot()
        self.repository.save_students([])
        StoredValue.objects.create(key='other_app_key', value='"kept"')

        self.repository.clear_all()

        self.assertFalse(StoredValue.objects.owned_by('cim_').exists())
        self.assertTrue(StoredValue.objects.filter(key='other_app_key').exists())
        self.assertEqual(len(self.repository.students()), 5)

    def test_custom_prefix_isolates_collections(self):
        other = SchoolRepository(prefix='branch2_', today='2024-06-03')
        other.save_students([])

        self.assertEqual(other.students(), [])
        self.assertEqual(len(self.repository.students()), 5)


class AttendanceRecordParsingTestCase(TestCase):
    def test_missing_required_key_raises(self):
        with self.assertRaises(ValueError):
            AttendanceRecord.from_dict({'id': 'a', 'studentId': '1', 'status': 'Present'})

    def test_non_object_raises(self):
        with self.assertRaises(ValueError):
            Student.from_dict(['not', 'a', 'student'])

    def test_library_clearance_must_be_boolean(self):
        base = {'id': 's1', 'fullName': 'Amina', 'parentName': 'Ali', 'phone': '1', 'grade': 'Grade 2'}

        self.assertFalse(Student.from_dict({**base, 'libraryClearance': False}).library_clearance)
        with self.assertRaises(ValueError):
            Student.from_dict({**base, 'libraryClearance': 'false'})

    def test_wrongly_typed_values_raise_value_error(self):
        entry = {'id': 'x', 'action': 'a', 'details': 'd', 'date': 'd'}

        self.assertEqual(ActivityLog.from_dict({**entry, 'timestamp': 1717401600000}).timestamp, 1717401600000)
        with self.assertRaises(ValueError):
            ActivityLog.from_dict({**entry, 'timestamp': [1]})
        with self.assertRaises(ValueError):
            ActivityLog.from_dict({**entry, 'type': {'level': 'info'}})


class ManagementCommandTestCase(TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.repository = SchoolRepository(today='2024-06-03')

    def test_export_then_restore_backup(self):
        target = Path(self.tmp.name) / 'backup.json'
        call_command('export_backup', output=str(target), stdout=StringIO())

        data = json.loads(target.read_text(encoding='utf-8'))
        self.assertEqual(len(data['students']), 5)
        self.assertEqual(data['appVersion'], '1.4')

        self.repository.save_students([])
        call_command('restore_backup', str(target), stdout=StringIO())
        self.assertEqual(len(self.repository.students()), 5)

    def test_restore_backup_rejects_invalid_file(self):
        target = Path(self.tmp.name) / 'broken.json'
        target.write_text('{not json', encoding='utf-8')

        with self.assertRaises(CommandError):
            call_command('restore_backup', str(target))

    def test_restore_backup_rejects_wrongly_typed_records(self):
        target = Path(self.tmp.name) / 'typed.json'
        target.write_text(
            json.dumps({'activities': [{'id': 'x', 'action': 'a', 'details': 'd', 'date': 'd', 'timestamp': [1]}]}),
            encoding='utf-8',
        )

        with self.assertRaises(CommandError):
            call_command('restore_backup', str(target))

    def test_import_students_appends_rows(self):
        target = Path(self.tmp.name) / 'students.csv'
        target.write_text(
            'Full Name,Parent,Phone,Grade\nHamza Ali,Ali Noor,615-1,Grade 2\nbroken,row\n',
            encoding='utf-8',
        )

        call_command('import_students', str(target), stdout=StringIO())

        students = self.repository.students()
        self.assertEqual(len(students), 6)
        self.assertEqual(students[-1].full_name, 'Hamza Ali')

    def test_promote_students_without_prompt(self):
        call_command(
            'promote_students', 'Grade 5', 'Grade 6',
            interactive=False,
            stdout=StringIO(),
        )

        grades = {student.id: student.grade for student in self.repository.students()}
        self.assertEqual(grades['1'], GradeLevel.GRADE_6)
        self.assertEqual(grades['5'], GradeLevel.GRADE_6)
        self.assertEqual(grades['2'], GradeLevel.GRADE_3)

    def test_reset_school_data_without_prompt(self):
        self.repository.snapshot()

        call_command('reset_school_data', interactive=False, stdout=StringIO())

        self.assertFalse(StoredValue.objects.exists())

    def test_seed_demo_adds_students_and_records(self):
        call_command('seed_demo', students=4, seed=7, stdout=StringIO())

        students = self.repository.students()
        self.assertEqual(len(students), 9)
        new_ids = {student.id for student in students[5:]}
        attendance_ids = {record.student_id for record in self.repository.attendance()}
        self.assertTrue(new_ids <= attendance_ids)
        self.assertTrue(any(fee.student_id in new_ids for fee in self.repository.fees()))
