from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from apps.core.records import ExamResult, GradeLevel, SchoolSettings, Student, Term
from apps.core.storage.repository import SchoolRepository
from apps.core.students.services import student_profile

from .documents import generate_report_card_pdf
from .services import (
    ClassAnalytics,
    class_analytics,
    grades_sheet_csv,
    merge_grades,
    record_scores,
    save_grades,
    top_students,
)


def result(student_id, score, subject='Math', day='2024-04-15', term=Term.TERM_1):
    return ExamResult(
        id=f'{day}-{student_id}-{subject}',
        student_id=student_id,
        subject=subject,
        score=score,
        date=day,
        term=term,
    )


def student(student_id, name, grade=GradeLevel.GRADE_5):
    return Student(id=student_id, full_name=name, parent_name='Parent', phone='0', grade=grade)


class ClassAnalyticsTestCase(SimpleTestCase):
    def setUp(self):
        self.students = [
            student('s1', 'Ahmed'),
            student('s2', 'Yusuf'),
            student('s3', 'Khadija', GradeLevel.GRADE_3),
        ]
        self.filters = {'grade': GradeLevel.GRADE_5, 'subject': 'Math', 'date': '2024-04-15', 'term': Term.TERM_1}

    def test_average_max_and_count_for_cohort(self):
        grades = [
            result('s1', 85),
            result('s2', 78),
            result('s3', 99),
            result('ghost', 100),
            result('s1', 40, subject='Somali'),
            result('s2', 10, term=Term.TERM_2),
        ]

        analytics = class_analytics(grades, self.students, **self.filters)

        self.assertEqual(analytics, ClassAnalytics(avg=82, max=85, count=2))

    def test_no_matches_give_zeros(self):
        self.assertEqual(class_analytics([], self.students, **self.filters), ClassAnalytics(avg=0, max=0, count=0))

    def test_accepts_plain_string_filters(self):
        analytics = class_analytics([result('s1', 70)], self.students, grade='Grade 5', subject='Math',
                                    date='2024-04-15', term='Term 1')

        self.assertEqual(analytics.count, 1)


class TopStudentsTestCase(SimpleTestCase):
    def test_ranks_by_average_over_all_results(self):
        students = [student('S1', 'First'), student('S2', 'Second')]
        grades = [result('S1', 80), result('S1', 90, subject='Somali'), result('S2', 95)]

        ranked = top_students(grades, students)

        self.assertEqual([(entry.student_id, entry.average) for entry in ranked], [('S2', 95), ('S1', 85)])
        self.assertEqual(ranked[0].name, 'Second')

    def test_limits_to_three_and_labels_unknown(self):
        students = [student('a', 'A'), student('b', 'B'), student('c', 'C')]
        grades = [result('a', 60), result('b', 70), result('c', 80), result('gone', 90)]

        ranked = top_students(grades, students)

        self.assertEqual([entry.name for entry in ranked], ['Unknown', 'C', 'B'])

    def test_empty_grades(self):
        self.assertEqual(top_students([], []), [])

    def test_zero_limit_returns_nothing(self):
        grades = [result('a', 60), result('b', 70)]

        self.assertEqual(top_students(grades, [student('a', 'A'), student('b', 'B')], limit=0), [])
        self.assertEqual(len(top_students(grades, [], limit=None)), 2)


class MergeGradesTestCase(SimpleTestCase):
    def test_key_includes_subject_date_and_term(self):
        existing = [
            result('s1', 50),
            result('s1', 60, term=Term.TERM_2),
            result('s1', 70, subject='Somali'),
        ]

        merged = merge_grades(existing, [result('s1', 90)])

        self.assertEqual([entry.score for entry in merged], [60, 70, 90])


class SaveGradesTestCase(TestCase):
    def setUp(self):
        self.repository = SchoolRepository(today='2024-04-15')

    def test_save_grades_upserts_and_logs(self):
        save_grades(self.repository, [result('1', 95)])

        stored = self.repository.grades()
        math_for_first = [entry for entry in stored if entry.student_id == '1' and entry.subject == 'Math']
        self.assertEqual(len(stored), 3)
        self.assertEqual(len(math_for_first), 1)
        self.assertEqual(math_for_first[0].score, 95)
        self.assertEqual(self.repository.activities()[0].action, 'Grades Updated')

    def test_out_of_range_score_writes_nothing(self):
        before = self.repository.grades()

        with self.assertRaises(ValidationError):
            save_grades(self.repository, [result('1', 50), result('2', 101)])

        self.assertEqual(self.repository.grades(), before)

    def test_record_scores_skips_blank_entries(self):
        record_scores(
            self.repository,
            subject='English',
            date='2024-05-01',
            term=Term.TERM_2,
            scores={'1': '88', '2': '', '5': None},
        )

        english = [entry for entry in self.repository.grades() if entry.subject == 'English']
        self.assertEqual(len(english), 1)
        self.assertEqual(english[0].id, '2024-05-01-1-English')
        self.assertEqual(english[0].score, 88)
        self.assertEqual(english[0].max_score, 100)

    def test_record_scores_with_nothing_entered(self):
        self.assertEqual(record_scores(self.repository, subject='Math', date='2024-05-01',
                                       term=Term.TERM_1, scores={'1': ''}), [])
        self.assertEqual(len(self.repository.grades()), 3)


class GradeExportTestCase(SimpleTestCase):
    def test_grades_sheet_lists_cohort_with_missing_scores(self):
        students = [student('s1', 'Ahmed'), student('s2', 'Yusuf'), student('s3', 'Other', GradeLevel.GRADE_1)]
        grades = [result('s1', 85)]

        text = grades_sheet_csv(grades, students, grade=GradeLevel.GRADE_5, subject='Math',
                                date='2024-04-15', term=Term.TERM_1)

        self.assertEqual(text.splitlines(), [
            'Student Name,ID,Grade,Subject,Score,Term,Date',
            'Ahmed,s1,Grade 5,Math,85,Term 1,2024-04-15',
            'Yusuf,s2,Grade 5,Math,N/A,Term 1,2024-04-15',
        ])


class ReportCardTestCase(SimpleTestCase):
    def test_report_card_renders_pdf(self):
        pupil = student('s1', 'Ahmed')
        profile = student_profile(pupil, [], [], [result('s1', 85), result('s1', 92, subject='Somali')])

        pdf = generate_report_card_pdf(profile, SchoolSettings(name='Test School'))

        self.assertTrue(pdf.startswith(b'%PDF'))
