"""
Management command to flag Due fees past their due date as Overdue.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from apps.finance.services import PaymentService


class Command(BaseCommand):
    help = 'Mark Due fees whose due date has passed as Overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Reference date (YYYY-MM-DD); defaults to today'
        )

    def handle(self, *args, **options):
        today = None
        if options.get('date'):
            try:
                today = parse_date(options['date'])
            except ValueError:
                today = None
            if today is None:
                raise CommandError('Invalid --date value "%s", expected YYYY-MM-DD' % options['date'])

        updated = PaymentService.mark_overdue_fees(today=today)
        self.stdout.write(self.style.SUCCESS('Marked %d fees overdue' % updated))
