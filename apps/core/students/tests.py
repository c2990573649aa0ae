from datetime import date, datetime, timezone as dt_timezone

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from apps.core.records import (
    AttendanceRecord,
    AttendanceStatus,
    ExamResult,
    FeeRecord,
    Gender,
    GradeLevel,
    NoteCategory,
    PaymentStatus,
    SchoolSettings,
    Student,
    Term,
)
from apps.core.storage.repository import SchoolRepository

from .documents import decode_photo, generate_bulk_id_cards_pdf, generate_id_card_pdf
from .services import (
    add_note,
    add_student,
    delete_student,
    find_student_by_access_code,
    grade_distribution,
    import_students,
    parent_summary,
    parse_student_csv,
    promote_students,
    student_age,
    student_profile,
    toggle_library_clearance,
)


def student(student_id, grade=GradeLevel.GRADE_5, code='', dob=''):
    return Student(
        id=student_id,
        full_name=f'Student {student_id}',
        parent_name='Parent',
        phone='0',
        grade=grade,
        parent_access_code=code,
        dob=dob,
    )


class StudentCsvParsingTestCase(SimpleTestCase):
    def test_valid_rows_become_students_with_defaults(self):
        text = (
            'fullName,parentName,phone,grade,gender,address\n'
            'Hamza Ali,Ali Noor,615-1,Grade 2\n'
            'short,row\n'
            'Idil Aden,,615-2,,female,Hodan\n'
        )

        students = parse_student_csv(text, '2024-06-03')

        self.assertEqual(len(students), 2)
        first, second = students
        self.assertEqual((first.full_name, first.grade, first.gender), ('Hamza Ali', GradeLevel.GRADE_2, Gender.MALE))
        self.assertEqual((first.address, first.dob, first.enrollment_date), ('Mogadishu', '2015-01-01', '2024-06-03'))
        self.assertTrue(first.library_clearance)
        self.assertEqual(len(first.parent_access_code), 6)
        self.assertEqual((second.parent_name, second.grade), ('Unknown', GradeLevel.GRADE_1))
        self.assertEqual((second.gender, second.address), (Gender.FEMALE, 'Hodan'))
        self.assertNotEqual(first.id, second.id)

    def test_unknown_grade_skips_row(self):
        text = 'header\nHamza Ali,Ali Noor,615-1,Grade 99\nAmina,Omar,615-3,grade 4\n'

        students = parse_student_csv(text, date(2024, 6, 3))

        self.assertEqual([(s.full_name, s.grade) for s in students], [('Amina', GradeLevel.GRADE_4)])

    def test_header_only_and_empty_text(self):
        self.assertEqual(parse_student_csv('fullName,parentName,phone,grade\n', '2024-06-03'), [])
        self.assertEqual(parse_student_csv('', '2024-06-03'), [])


class StudentLookupTestCase(SimpleTestCase):
    def test_access_code_matches_exact_or_uppercase_input(self):
        students = [student('1', code='AHM-101'), student('2', code='abc-2'), student('3', code='AHM-101')]

        self.assertEqual(find_student_by_access_code(students, ' ahm-101 ').id, '1')
        self.assertEqual(find_student_by_access_code(students, 'abc-2').id, '2')
        self.assertIsNone(find_student_by_access_code(students, 'ABC-2'))
        self.assertIsNone(find_student_by_access_code(students, '   '))
        self.assertIsNone(find_student_by_access_code([student('4')], ''))

    def test_grade_distribution_in_grade_order(self):
        students = [student('1', GradeLevel.GRADE_8), student('2', GradeLevel.GRADE_1), student('3', GradeLevel.GRADE_8)]

        distribution = grade_distribution(students)

        self.assertEqual(list(distribution.items()), [(GradeLevel.GRADE_1, 1), (GradeLevel.GRADE_8, 2)])

    def test_student_age(self):
        pupil = student('1', dob='2012-05-15')

        self.assertEqual(student_age(pupil, date(2024, 5, 14)), 11)
        self.assertEqual(student_age(pupil, '2024-05-15'), 12)
        self.assertIsNone(student_age(student('2'), date(2024, 5, 15)))


class StudentProfileTestCase(SimpleTestCase):
    def setUp(self):
        self.pupil = student('s1')
        self.attendance = [
            AttendanceRecord(id='a1', student_id='s1', date='2024-01-01', status=AttendanceStatus.PRESENT),
            AttendanceRecord(id='a2', student_id='s1', date='2024-01-02', status=AttendanceStatus.LATE),
            AttendanceRecord(id='a3', student_id='s1', date='2024-01-03', status=AttendanceStatus.ABSENT),
            AttendanceRecord(id='a4', student_id='s1', date='2024-01-04', status=AttendanceStatus.ABSENT),
            AttendanceRecord(id='a5', student_id='s1', date='2024-01-05', status=AttendanceStatus.PRESENT),
            AttendanceRecord(id='a6', student_id='s2', date='2024-01-05', status=AttendanceStatus.PRESENT),
        ]
        self.fees = [
            FeeRecord(id='f1', student_id='s1', amount=50, date='2024-01-01', status=PaymentStatus.PAID),
            FeeRecord(id='f2', student_id='s1', amount=45, date='2024-02-01', status=PaymentStatus.PENDING),
            FeeRecord(id='f3', student_id='s1', amount=60, date='2024-03-01', status=PaymentStatus.OVERDUE),
            FeeRecord(id='f4', student_id='s2', amount=70, date='2024-03-01', status=PaymentStatus.PAID),
        ]
        self.grades = [
            ExamResult(id='g1', student_id='s1', subject='Math', score=85, date='2024-04-15', term=Term.TERM_1),
            ExamResult(id='g2', student_id='s1', subject='Somali', score=92, date='2024-04-16', term=Term.TERM_1),
        ]

    def test_profile_aggregates(self):
        profile = student_profile(self.pupil, self.attendance, self.fees, self.grades)

        self.assertEqual(profile.attendance_rate, 50)
        self.assertEqual((profile.total_present, profile.total_late, profile.total_days), (2, 1, 5))
        self.assertEqual((profile.total_fees_paid, profile.total_fees_pending), (50, 105))
        self.assertEqual(profile.avg_score, 89)
        self.assertTrue(profile.low_attendance)
        self.assertEqual(profile.attendance[0].date, '2024-01-05')
        self.assertEqual([result.id for result in profile.grades], ['g2', 'g1'])

    def test_low_attendance_threshold_override(self):
        profile = student_profile(self.pupil, self.attendance, self.fees, self.grades, low_attendance_threshold=50)

        self.assertFalse(profile.low_attendance)

    def test_parent_summary_shows_recent_attendance_and_balance(self):
        summary = parent_summary(self.pupil, self.attendance, self.fees, self.grades)

        self.assertEqual(summary.attendance_rate, 50)
        self.assertEqual(summary.pending_balance, 105)
        self.assertEqual([record.id for record in summary.recent_attendance], ['a5', 'a4', 'a3', 'a2', 'a1'])
        self.assertEqual([fee.id for fee in summary.fees], ['f1', 'f2', 'f3'])


class RosterTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-06-03')

    def test_import_appends_without_deduplication(self):
        text = 'header\nAhmed Nur,Fatima Ali,615-555-0101,Grade 5\n'

        imported = import_students(self.repository, text)

        students = self.repository.students()
        self.assertEqual(len(students), 6)
        self.assertEqual(students[-1], imported[0])
        self.assertEqual([s.full_name for s in students].count('Ahmed Nur'), 2)
        self.assertEqual(students[-1].enrollment_date, '2024-06-03')
        self.assertEqual(self.repository.activities()[0].action, 'Students Imported')

    def test_import_with_no_valid_rows_writes_nothing(self):
        before = self.repository.students()

        self.assertEqual(import_students(self.repository, 'header\nbroken,row\n'), [])
        self.assertEqual(self.repository.students(), before)

    def test_promotion_moves_only_source_grade(self):
        before = {s.id: s for s in self.repository.students()}

        promote_students(self.repository, GradeLevel.GRADE_5, GradeLevel.GRADE_6)

        after = {s.id: s for s in self.repository.students()}
        self.assertEqual(after['1'].grade, GradeLevel.GRADE_6)
        self.assertEqual(after['5'].grade, GradeLevel.GRADE_6)
        self.assertEqual(after['2'], before['2'])
        self.assertEqual(after['1'].full_name, before['1'].full_name)
        self.assertEqual(self.repository.activities()[0].details, 'Moved 2 students from Grade 5 to Grade 6')

    def test_promotion_rejects_unknown_grade(self):
        with self.assertRaises(ValidationError):
            promote_students(self.repository, 'Grade 13', GradeLevel.GRADE_1)

    def test_add_student_gets_access_code_and_enrollment_date(self):
        created = add_student(self.repository, full_name='Nasra Ali', parent_name='Ali Warsame', phone='615-9',
                              grade='Grade 2', gender=Gender.FEMALE)

        self.assertEqual(self.repository.students()[-1], created)
        self.assertEqual(created.enrollment_date, '2024-06-03')
        self.assertEqual(created.parent_access_code, created.parent_access_code.upper())

    def test_delete_student_leaves_related_records(self):
        self.assertTrue(delete_student(self.repository, '1'))
        self.assertFalse(delete_student(self.repository, '1'))

        self.assertEqual(len(self.repository.students()), 4)
        self.assertTrue(any(fee.student_id == '1' for fee in self.repository.fees()))
        self.assertTrue(any(result.student_id == '1' for result in self.repository.grades()))

    def test_add_note_and_toggle_clearance(self):
        now = datetime(2024, 6, 3, 9, 30, tzinfo=dt_timezone.utc)

        updated = add_note(self.repository, '3', 'Returned library books', NoteCategory.ACADEMIC, now=now)
        updated = toggle_library_clearance(self.repository, '3')

        stored = next(s for s in self.repository.students() if s.id == '3')
        self.assertEqual(stored, updated)
        self.assertTrue(stored.library_clearance)
        self.assertEqual(stored.notes[0].text, 'Returned library books')
        self.assertEqual(stored.notes[0].date, now.isoformat())

    def test_add_note_requires_text(self):
        with self.assertRaises(ValidationError):
            add_note(self.repository, '3', '   ')


class IdCardTestCase(SimpleTestCase):
    def test_id_cards_render_pdf(self):
        school = SchoolSettings(name='Test School', address='Mogadishu')

        single = generate_id_card_pdf(student('1', code='AHM-101'), school)
        bulk = generate_bulk_id_cards_pdf([student('1'), student('2')], school)

        self.assertTrue(single.startswith(b'%PDF'))
        self.assertTrue(bulk.startswith(b'%PDF'))

    def test_unreadable_photo_is_ignored(self):
        self.assertIsNone(decode_photo('data:image/png;base64,not-an-image'))
        self.assertIsNone(decode_photo(''))
