# apps/attendance/models.py
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


def build_scope_key(block=None, room_id=None, course=None, year=None):
    """
    Normalized text form of a session's optional filters. Missing and blank
    values compare equal, and text filters are case-insensitive.
    """
    parts = [
        (block or '').strip().lower(),
        str(room_id or ''),
        (course or '').strip().lower(),
        str(year or ''),
    ]
    return '|'.join(parts)


class AttendanceSession(CoreBaseModel):
    """
    One roll call: a date, a session type and the optional block, room,
    course and year it covers.
    """
    class SessionType(models.TextChoices):
        NIGHT_ROLL = 'NightRoll', _('Night Roll')
        MORNING = 'Morning', _('Morning')
        EVENING = 'Evening', _('Evening')
        CUSTOM = 'Custom', _('Custom')

    session_date = models.DateField(_('session date'), db_index=True)
    session_type = models.CharField(
        _('session type'),
        max_length=20,
        choices=SessionType.choices,
        default=SessionType.NIGHT_ROLL
    )
    block = models.CharField(_('block'), max_length=50, blank=True)
    room = models.ForeignKey(
        'hostels.Room',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_sessions',
        verbose_name=_('room')
    )
    course = models.CharField(_('course'), max_length=150, blank=True)
    year = models.PositiveSmallIntegerField(_('year'), null=True, blank=True)
    scope_key = models.CharField(_('scope key'), max_length=255, editable=False, default='')
    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_sessions_created',
        verbose_name=_('created by')
    )

    class Meta:
        verbose_name = _('Attendance Session')
        verbose_name_plural = _('Attendance Sessions')
        ordering = ['-session_date', 'session_type']
        constraints = [
            models.UniqueConstraint(
                fields=['session_date', 'session_type', 'scope_key'],
                name='unique_attendance_session_scope'
            ),
        ]

    def __str__(self):
        return f"{self.get_session_type_display()} - {self.session_date}"

    def save(self, *args, **kwargs):
        self.scope_key = build_scope_key(self.block, self.room_id, self.course, self.year)
        super().save(*args, **kwargs)


class AttendanceRecord(CoreBaseModel):
    """
    A student's mark in one session.
    """
    class AttendanceStatus(models.TextChoices):
        PRESENT = 'Present', _('Present')
        ABSENT = 'Absent', _('Absent')
        LATE = 'Late', _('Late')
        EXCUSED = 'Excused', _('Excused')
        HOLIDAY = 'Holiday', _('Holiday')

    # Reported for calendar days without a record; never stored
    UNMARKED = 'Unmarked'

    session = models.ForeignKey(
        AttendanceSession,
        on_delete=models.CASCADE,
        related_name='records',
        verbose_name=_('session')
    )
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('student')
    )
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=AttendanceStatus.choices,
        default=AttendanceStatus.PRESENT
    )
    late_minutes = models.PositiveIntegerField(_('late minutes'), default=0)
    note = models.TextField(_('note'), blank=True)
    marked_at = models.DateTimeField(_('marked at'), default=timezone.now)
    marked_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_marked',
        verbose_name=_('marked by')
    )

    class Meta:
        verbose_name = _('Attendance Record')
        verbose_name_plural = _('Attendance Records')
        ordering = ['session', 'student__full_name']
        constraints = [
            models.UniqueConstraint(fields=['session', 'student'], name='unique_attendance_per_session'),
            models.CheckConstraint(condition=Q(late_minutes__gte=0), name='attendance_late_minutes_non_negative'),
        ]
        indexes = [
            models.Index(fields=['student', 'marked_at'], name='attendance_student_marked_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.session} - {self.status}"


class Leave(CoreBaseModel):
    """
    Model for student leave of absence.
    """
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='leaves',
        verbose_name=_('student')
    )
    start_date = models.DateField(_('start date'), db_index=True)
    end_date = models.DateField(_('end date'), db_index=True)
    reason = models.TextField(_('reason for leave'), blank=True)
    approved_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_leaves',
        verbose_name=_('approved by')
    )

    class Meta:
        verbose_name = _('Leave')
        verbose_name_plural = _('Leaves')
        ordering = ['-start_date']
        constraints = [
            models.CheckConstraint(condition=Q(end_date__gte=F('start_date')), name='leave_end_after_start'),
        ]

    def __str__(self):
        return f"{self.student} - {self.start_date} to {self.end_date}"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError(_('End date cannot be before start date.'))

    @property
    def total_days(self):
        """Length of the leave, inclusive of both dates."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_approved(self):
        return self.approved_by_id is not None

    def covers(self, day):
        return self.start_date <= day <= self.end_date
