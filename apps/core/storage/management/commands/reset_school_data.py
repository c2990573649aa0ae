from django.core.management.base import BaseCommand

from apps.core.backups.services import factory_reset
from apps.core.storage.repository import SchoolRepository


class Command(BaseCommand):
    help = 'Deletes every stored school collection. The seed data returns on next access.'

    def add_arguments(self, parser):
        parser.add_argument('--noinput', action='store_false', dest='interactive')

    def handle(self, *args, **options):
        if options['interactive']:
            answer = input('This permanently deletes all school data. Continue? [y/N] ')
            if answer.strip().lower() not in {'y', 'yes'}:
                self.stdout.write('Reset cancelled.')
                return

        deleted = factory_reset(SchoolRepository())
        self.stdout.write(self.style.SUCCESS(f'Cleared {deleted} stored collections.'))
