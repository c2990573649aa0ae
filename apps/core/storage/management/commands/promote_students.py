from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from apps.core.records import GradeLevel
from apps.core.storage.repository import SchoolRepository
from apps.core.students.services import promote_students


class Command(BaseCommand):
    help = 'Moves every student in one grade level to another.'

    def add_arguments(self, parser):
        choices = [grade.value for grade in GradeLevel]
        parser.add_argument('from_grade', choices=choices)
        parser.add_argument('to_grade', choices=choices)
        parser.add_argument('--noinput', action='store_false', dest='interactive')

    def handle(self, *args, **options):
        from_grade, to_grade = options['from_grade'], options['to_grade']
        if options['interactive']:
            answer = input(f'Promote ALL students from {from_grade} to {to_grade}? [y/N] ')
            if answer.strip().lower() not in {'y', 'yes'}:
                self.stdout.write('Promotion cancelled.')
                return

        try:
            promote_students(SchoolRepository(), from_grade, to_grade)
        except ValidationError as exc:
            raise CommandError('; '.join(exc.messages))
        self.stdout.write(self.style.SUCCESS('Promotion complete.'))
