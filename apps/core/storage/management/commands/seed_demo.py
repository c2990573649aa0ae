import random

from django.core.management.base import BaseCommand
from django.db import transaction
from faker import Faker

from apps.core.attendance.services import mark_attendance
from apps.core.exams.services import record_scores
from apps.core.fees.services import generate_bulk_fees
from apps.core.records import AttendanceStatus, Gender, GradeLevel, Student, Term
from apps.core.storage.repository import SchoolRepository
from apps.core.utils.identifiers import new_access_code, new_record_id


class Command(BaseCommand):
    help = 'Adds a demo roster with attendance, fees and exam scores.'

    def add_arguments(self, parser):
        parser.add_argument('--students', type=int, default=20)
        parser.add_argument('--seed', type=int, default=None, help='Make the generated data reproducible')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding demo data...')

        fake = Faker()
        if options['seed'] is not None:
            Faker.seed(options['seed'])
            random.seed(options['seed'])

        repository = SchoolRepository()
        today = repository.reference_date()
        grades = [grade for grade in GradeLevel if grade != GradeLevel.GRADUATED]

        new_students = []
        for _ in range(options['students']):
            gender = random.choice([Gender.MALE, Gender.FEMALE])
            full_name = fake.name_male() if gender == Gender.MALE else fake.name_female()
            new_students.append(
                Student(
                    id=new_record_id(),
                    full_name=full_name,
                    parent_name=fake.name(),
                    phone=fake.numerify('615-###-####'),
                    grade=random.choice(grades),
                    gender=gender,
                    dob=fake.date_of_birth(minimum_age=5, maximum_age=18).isoformat(),
                    address=fake.city(),
                    enrollment_date=fake.date_this_decade().isoformat(),
                    parent_access_code=new_access_code(),
                )
            )
            self.stdout.write(self.style.SUCCESS(f'Successfully created student: {full_name}'))
        repository.save_students([*repository.students(), *new_students])

        statuses = [AttendanceStatus.PRESENT] * 6 + [AttendanceStatus.LATE, AttendanceStatus.ABSENT]
        mark_attendance(repository, today, {student.id: random.choice(statuses) for student in new_students})

        subjects = repository.school_settings().subjects[:3]
        for subject in subjects:
            record_scores(
                repository,
                subject=subject,
                date=today,
                term=Term.TERM_1,
                scores={student.id: random.randint(40, 100) for student in new_students},
            )

        for grade in sorted({student.grade for student in new_students}, key=grades.index):
            generate_bulk_fees(repository, grade=grade, amount=50, description='Tuition Fee', date=today)

        self.stdout.write(self.style.SUCCESS('Demo data seeding complete!'))
