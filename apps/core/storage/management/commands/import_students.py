from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from apps.core.storage.repository import SchoolRepository
from apps.core.students.services import import_students


class Command(BaseCommand):
    help = 'Appends students from a CSV file (fullName,parentName,phone,grade[,gender[,address]]).'

    def add_arguments(self, parser):
        parser.add_argument('path')

    def handle(self, *args, **options):
        path = Path(options['path'])
        if not path.exists():
            raise CommandError(f'CSV file not found: {path}')

        imported = import_students(SchoolRepository(), path.read_text(encoding='utf-8'))
        if not imported:
            self.stdout.write(self.style.WARNING('No valid student records found in CSV.'))
            return
        self.stdout.write(self.style.SUCCESS(f'Successfully imported {len(imported)} students.'))
