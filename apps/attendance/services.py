# apps/attendance/services.py
"""
Attendance sessions, bulk marking and reports.
"""

import calendar
import datetime
import logging
import uuid
from collections import namedtuple

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from django.utils.dateparse import parse_date

from apps.core.exceptions import InvalidInput, NotFound
from apps.hostels.models import Room
from apps.students.models import Student

from .models import AttendanceRecord, AttendanceSession, build_scope_key

logger = logging.getLogger(__name__)


CalendarDay = namedtuple('CalendarDay', ['day', 'status', 'session_type', 'note'])


def _as_date(value, field='date'):
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInput('Invalid %(field)s: %(value)s', params={'field': field, 'value': value})
    return parsed


def _as_int(value, field):
    if value is None or value == '':
        return None
    # int() would quietly turn True into 1 and 2.5 into 2
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInput('Invalid %(field)s: %(value)s', params={'field': field, 'value': value})
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput('Invalid %(field)s: %(value)s', params={'field': field, 'value': value})


def _as_month_and_year(month, year):
    month = _as_int(month, 'month')
    year = _as_int(year, 'year')
    if month is None or not 1 <= month <= 12:
        raise InvalidInput('Month must be between 1 and 12.')
    if year is None or not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise InvalidInput('Invalid year.')
    return month, year


def _get_student(student_id):
    try:
        return Student.objects.get(pk=student_id)
    except (Student.DoesNotExist, ValidationError):
        raise NotFound('Student not found.')


class AttendanceService:
    """
    Service class for attendance business logic.
    """

    @staticmethod
    def get_or_create_session(session_date, session_type, block=None, room_id=None,
                              course=None, year=None, created_by=None):
        """
        Return the session matching the date, type and optional filters,
        creating it when missing. Concurrent callers converge on one row
        through the unique (date, type, scope) constraint.
        """
        session_date = _as_date(session_date, 'session date')
        if session_type not in AttendanceSession.SessionType.values:
            raise InvalidInput('Unknown session type: %(type)s', params={'type': session_type})
        year = _as_int(year, 'year')

        if room_id:
            try:
                room_id = Room.objects.only('pk').get(pk=room_id).pk
            except (Room.DoesNotExist, ValidationError):
                raise NotFound('Room not found.')
        else:
            room_id = None

        block = (block or '').strip()
        course = (course or '').strip()
        session, created = AttendanceSession.objects.get_or_create(
            session_date=session_date,
            session_type=session_type,
            scope_key=build_scope_key(block, room_id, course, year),
            defaults={
                'block': block,
                'room_id': room_id,
                'course': course,
                'year': year,
                'created_by': created_by,
            }
        )
        if created:
            logger.info("Created %s session %s for %s", session_type, session.pk, session_date)
        return session, created

    @staticmethod
    def _validate_records(records):
        """
        Check every record of a batch before anything is written. Returns
        ``(student_id, status, note, late_minutes)`` tuples.
        """
        if not isinstance(records, (list, tuple)):
            raise InvalidInput('Attendance records must be a list.')

        statuses = AttendanceRecord.AttendanceStatus.values
        cleaned = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise InvalidInput('Record %(index)s is not an object.', params={'index': index})

            raw_student = record.get('student_id')
            if not raw_student:
                raise InvalidInput('Record %(index)s has no student_id.', params={'index': index})
            try:
                student_id = uuid.UUID(str(raw_student))
            except ValueError:
                raise InvalidInput('Record %(index)s has an invalid student_id.', params={'index': index})

            status = record.get('status')
            if status not in statuses:
                raise InvalidInput(
                    'Record %(index)s has an unknown status: %(status)s',
                    params={'index': index, 'status': status}
                )

            late_minutes = _as_int(record.get('late_minutes'), 'late_minutes') or 0
            if late_minutes < 0:
                raise InvalidInput('Record %(index)s has negative late_minutes.', params={'index': index})

            note = record.get('note') or ''
            cleaned.append((student_id, status, str(note), late_minutes))

        student_ids = {item[0] for item in cleaned}
        known = set(Student.objects.filter(pk__in=student_ids).values_list('pk', flat=True))
        missing = student_ids - known
        if missing:
            raise InvalidInput(
                'Unknown students: %(ids)s',
                params={'ids': ', '.join(sorted(str(pk) for pk in missing))}
            )
        return cleaned

    @staticmethod
    def bulk_mark_attendance(session_id, records, marked_by=None):
        """
        Upsert a batch of marks into a session, keyed by student.

        Existing marks are overwritten and re-stamped. One malformed record
        rejects the whole batch.
        """
        try:
            session = AttendanceSession.objects.get(pk=session_id)
        except (AttendanceSession.DoesNotExist, ValidationError):
            raise NotFound('Attendance session not found.')

        cleaned = AttendanceService._validate_records(records)

        marked = []
        now = timezone.now()
        with transaction.atomic():
            for student_id, status, note, late_minutes in cleaned:
                record, created = AttendanceRecord.objects.update_or_create(
                    session=session,
                    student_id=student_id,
                    defaults={
                        'status': status,
                        'note': note,
                        'late_minutes': late_minutes,
                        'marked_at': now,
                        'marked_by': marked_by,
                    }
                )
                marked.append(record)

        logger.info("Marked %s records in session %s", len(marked), session.pk)
        return marked

    @staticmethod
    def daily_summary(date_from=None, date_to=None):
        """
        Per-session counts of each status plus the total marked.
        """
        sessions = AttendanceSession.objects.all()
        if date_from:
            sessions = sessions.filter(session_date__gte=_as_date(date_from, 'date_from'))
        if date_to:
            sessions = sessions.filter(session_date__lte=_as_date(date_to, 'date_to'))

        Status = AttendanceRecord.AttendanceStatus
        return sessions.annotate(
            present_count=Count('records', filter=Q(records__status=Status.PRESENT)),
            absent_count=Count('records', filter=Q(records__status=Status.ABSENT)),
            late_count=Count('records', filter=Q(records__status=Status.LATE)),
            excused_count=Count('records', filter=Q(records__status=Status.EXCUSED)),
            holiday_count=Count('records', filter=Q(records__status=Status.HOLIDAY)),
            total_marked=Count('records'),
        ).order_by('session_date', 'session_type')

    @staticmethod
    def student_monthly_summary(student_id, month, year):
        """
        Count one student's marks of each status over a month. Statuses
        with no marks count zero.
        """
        month, year = _as_month_and_year(month, year)
        student = _get_student(student_id)

        counts = dict.fromkeys(AttendanceRecord.AttendanceStatus.values, 0)
        rows = AttendanceRecord.objects.filter(
            student=student,
            session__session_date__year=year,
            session__session_date__month=month,
        ).values('status').annotate(count=Count('id')).order_by()
        for row in rows:
            counts[row['status']] = row['count']

        return {
            'student_id': student.pk,
            'month': month,
            'year': year,
            'counts': counts,
            'total_marked': sum(counts.values()),
        }


class StudentAttendanceCalendar:
    """
    Day-by-day attendance of one student over a month.

    Iterating yields a ``CalendarDay`` per day of the month in ascending
    order; days without a mark report ``Unmarked``. Nothing is read until
    iteration starts, and every new iteration reads afresh. When a day has
    marks in several sessions, the most recently marked one is reported.
    """

    def __init__(self, student_id, month, year, session_type=None):
        month, year = _as_month_and_year(month, year)
        if session_type and session_type not in AttendanceSession.SessionType.values:
            raise InvalidInput('Unknown session type: %(type)s', params={'type': session_type})

        self.student = _get_student(student_id)
        self.month = month
        self.year = year
        self.session_type = session_type

    def __len__(self):
        return calendar.monthrange(self.year, self.month)[1]

    def __iter__(self):
        records = AttendanceRecord.objects.filter(
            student=self.student,
            session__session_date__year=self.year,
            session__session_date__month=self.month,
        ).select_related('session').order_by('marked_at')
        if self.session_type:
            records = records.filter(session__session_type=self.session_type)

        by_day = {}
        for record in records:
            by_day[record.session.session_date] = record

        for day_number in range(1, len(self) + 1):
            day = datetime.date(self.year, self.month, day_number)
            record = by_day.get(day)
            if record is None:
                yield CalendarDay(day, AttendanceRecord.UNMARKED, None, '')
            else:
                yield CalendarDay(day, record.status, record.session.session_type, record.note)


get_or_create_session = AttendanceService.get_or_create_session
bulk_mark_attendance = AttendanceService.bulk_mark_attendance
daily_summary = AttendanceService.daily_summary
student_monthly_summary = AttendanceService.student_monthly_summary


def student_attendance_calendar(student_id, month, year, session_type=None):
    """Lazy, restartable month calendar of a student's attendance."""
    return StudentAttendanceCalendar(student_id, month, year, session_type=session_type)
