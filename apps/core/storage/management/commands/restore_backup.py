from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from apps.core.backups.services import restore_snapshot
from apps.core.storage.repository import SchoolRepository


class Command(BaseCommand):
    help = 'Restores collections from a JSON backup. Collections missing from the file are kept.'

    def add_arguments(self, parser):
        parser.add_argument('path')

    def handle(self, *args, **options):
        path = Path(options['path'])
        if not path.exists():
            raise CommandError(f'Backup file not found: {path}')

        if not restore_snapshot(SchoolRepository(), path.read_bytes()):
            raise CommandError('Failed to restore data. Invalid file format.')
        self.stdout.write(self.style.SUCCESS('Data restored successfully.'))
