from pathlib import Path

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.core.backups.services import backup_filename, dump_snapshot
from apps.core.storage.repository import SchoolRepository


class Command(BaseCommand):
    help = 'Writes every school collection to a JSON backup file.'

    def add_arguments(self, parser):
        parser.add_argument('--output', help='Target file; defaults to schoolbook_backup_<date>.json')

    def handle(self, *args, **options):
        repository = SchoolRepository()
        target = Path(options['output'] or backup_filename(timezone.localdate().isoformat()))
        target.write_text(dump_snapshot(repository), encoding='utf-8')
        self.stdout.write(self.style.SUCCESS(f'Backup written to {target}'))
