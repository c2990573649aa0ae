import json
from datetime import datetime, timezone as dt_timezone

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from apps.core.records import GradeLevel, Student, Theme
from apps.core.storage.models import StoredValue
from apps.core.storage.repository import Collection, SchoolRepository

from .services import (
    backup_filename,
    dump_snapshot,
    export_snapshot,
    factory_reset,
    restore_snapshot,
    update_announcement,
    update_school_settings,
)


class ExportSnapshotTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-03')

    def test_export_contains_every_collection_and_metadata(self):
        now = datetime(2024, 6, 3, 12, 0, tzinfo=dt_timezone.utc)

        snapshot = export_snapshot(self.repository, now=now)

        self.assertEqual(set(snapshot), {c.value for c in Collection} | {'timestamp', 'appVersion'})
        self.assertEqual(snapshot['timestamp'], now.isoformat())
        self.assertEqual(snapshot['appVersion'], '1.4')
        self.assertEqual(snapshot['students'][0]['fullName'], 'Ahmed Nur')
        self.assertEqual(snapshot['settings']['feeTypes'][0], 'Tuition Fee')

    @override_settings(SCHOOLBOOK_BACKUP_APP_VERSION='2.0')
    def test_app_version_comes_from_settings(self):
        self.assertEqual(json.loads(dump_snapshot(self.repository))['appVersion'], '2.0')

    def test_backup_filename(self):
        self.assertEqual(backup_filename('2024-06-03'), 'schoolbook_backup_2024-06-03.json')


class RestoreSnapshotTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-03')
        self.repository.snapshot()

    def stored_values(self):
        return dict(StoredValue.objects.values_list('key', 'value'))

    def test_restore_only_touches_present_collections(self):
        teachers_before = self.repository.teachers()
        attendance_before = self.repository.attendance()
        grades_before = self.repository.grades()
        settings_before = self.repository.school_settings()
        fees_before = self.repository.fees()
        data = {
            'students': [{'id': 'x', 'fullName': 'Hamza', 'parentName': 'Ali', 'phone': '1', 'grade': 'Grade 2'}],
            'fees': None,
        }

        self.assertTrue(restore_snapshot(self.repository, data))

        self.assertEqual([s.id for s in self.repository.students()], ['x'])
        self.assertEqual(self.repository.teachers(), teachers_before)
        self.assertEqual(self.repository.fees(), fees_before)
        self.assertEqual(self.repository.attendance(), attendance_before)
        self.assertEqual(self.repository.grades(), grades_before)
        self.assertEqual(self.repository.school_settings(), settings_before)

    def test_restore_from_exported_json_text(self):
        text = dump_snapshot(self.repository)
        self.repository.save_students([])
        update_announcement(self.repository, 'Changed')

        self.assertTrue(restore_snapshot(self.repository, text))

        self.assertEqual(len(self.repository.students()), 5)
        self.assertTrue(self.repository.announcement().startswith('Welcome'))

    def test_invalid_json_writes_nothing(self):
        before = self.stored_values()

        self.assertFalse(restore_snapshot(self.repository, '{not json'))
        self.assertFalse(restore_snapshot(self.repository, b'\xff\xfe'))

        self.assertEqual(self.stored_values(), before)

    def test_non_object_backup_writes_nothing(self):
        before = self.stored_values()

        self.assertFalse(restore_snapshot(self.repository, '[1, 2, 3]'))

        self.assertEqual(self.stored_values(), before)

    def test_invalid_collection_aborts_whole_restore(self):
        before = self.stored_values()
        data = {
            'students': [],
            'attendance': [{'id': 'a', 'studentId': '1', 'date': '2024-06-03', 'status': 'Sick'}],
        }

        self.assertFalse(restore_snapshot(self.repository, data))

        self.assertEqual(self.stored_values(), before)
        self.assertEqual(len(self.repository.students()), 5)

    def test_wrongly_typed_field_aborts_restore(self):
        before = self.stored_values()
        activities = [{'id': 'x', 'action': 'a', 'details': 'd', 'date': 'd', 'timestamp': [1]}]
        students = [{
            'id': 'x',
            'fullName': 'Hamza',
            'parentName': 'Ali',
            'phone': '1',
            'grade': 'Grade 2',
            'libraryClearance': 'false',
        }]

        self.assertFalse(restore_snapshot(self.repository, {'activities': activities}))
        self.assertFalse(restore_snapshot(self.repository, {'students': students}))

        self.assertEqual(self.stored_values(), before)

    def test_empty_announcement_is_not_restored(self):
        announcement = self.repository.announcement()

        self.assertTrue(restore_snapshot(self.repository, {'announcement': '', 'students': []}))

        self.assertEqual(self.repository.announcement(), announcement)
        self.assertEqual(self.repository.students(), [])


class SchoolSettingsTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-03')

    def test_update_settings_keeps_untouched_fields(self):
        updated = update_school_settings(self.repository, name='Hodan Primary', theme='Forest',
                                         subjects=['Math', ' ', 'Somali '])

        self.assertEqual(self.repository.school_settings(), updated)
        self.assertEqual(updated.theme, Theme.FOREST)
        self.assertEqual(updated.subjects, ['Math', 'Somali'])
        self.assertEqual(updated.currency, 'USD')

    def test_unknown_theme_or_field_is_rejected(self):
        with self.assertRaises(ValidationError):
            update_school_settings(self.repository, theme='Neon')
        with self.assertRaises(ValidationError):
            update_school_settings(self.repository, motto='Learn')

    def test_factory_reset_clears_and_reseeds(self):
        self.repository.save_students([
            Student(id='s1', full_name='Amina', parent_name='Ali', phone='1', grade=GradeLevel.GRADE_2),
        ])

        removed = factory_reset(self.repository)

        self.assertGreaterEqual(removed, 1)
        self.assertFalse(StoredValue.objects.exists())
        self.assertEqual(len(self.repository.students()), 5)
