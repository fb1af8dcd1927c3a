# apps/hostels/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import AlreadyInTerminalState, InvalidInput
from apps.core.models import CoreBaseModel


class Room(CoreBaseModel):
    """
    Model for hostel rooms.

    ``occupants`` and ``status`` are derived from the room's active
    allocations by ``apps.hostels.services.update_room_occupancy``; a room
    flagged Maintenance keeps that status until an Admin clears it.
    """
    class RoomType(models.TextChoices):
        SINGLE = 'Single', _('Single')
        DOUBLE = 'Double', _('Double')
        TRIPLE = 'Triple', _('Triple')

    class Status(models.TextChoices):
        VACANT = 'Vacant', _('Vacant')
        OCCUPIED = 'Occupied', _('Occupied')
        MAINTENANCE = 'Maintenance', _('Maintenance')

    room_number = models.CharField(_('room number'), max_length=20, unique=True)
    room_type = models.CharField(
        _('room type'),
        max_length=20,
        choices=RoomType.choices,
        default=RoomType.SINGLE
    )
    capacity = models.PositiveIntegerField(
        _('capacity'),
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_('Defaults from the room type when left empty')
    )
    occupants = models.PositiveIntegerField(_('occupants'), default=0, editable=False)
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=Status.choices,
        default=Status.VACANT,
        db_index=True
    )

    class Meta:
        verbose_name = _('Room')
        verbose_name_plural = _('Rooms')
        ordering = ['room_number']
        constraints = [
            models.CheckConstraint(condition=Q(capacity__gte=1), name='room_capacity_positive'),
        ]

    def __str__(self):
        return f"Room {self.room_number}"

    def save(self, *args, **kwargs):
        if self.capacity is None:
            self.capacity = settings.ROOM_TYPE_CAPACITY.get(self.room_type, 1)
        super().save(*args, **kwargs)

    @property
    def available_beds(self):
        """Calculate available beds in the room."""
        return max(self.capacity - self.occupants, 0)

    @property
    def is_full(self):
        return self.occupants >= self.capacity

    def get_current_residents(self):
        """Get current residents of this room."""
        return [alloc.student for alloc in self.allocations.filter(is_active=True).select_related('student')]


class RoomAllocation(CoreBaseModel):
    """
    A student's stay in a room. Active while ``end_date`` is empty.
    """
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='allocations',
        verbose_name=_('student')
    )
    room = models.ForeignKey(
        Room,
        on_delete=models.CASCADE,
        related_name='allocations',
        verbose_name=_('room')
    )
    start_date = models.DateTimeField(_('start date'), default=timezone.now)
    end_date = models.DateTimeField(_('end date'), null=True, blank=True)
    is_active = models.BooleanField(_('is active'), default=True)
    allocated_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='room_allocations_made',
        verbose_name=_('allocated by')
    )

    class Meta:
        verbose_name = _('Room Allocation')
        verbose_name_plural = _('Room Allocations')
        ordering = ['-start_date']
        constraints = [
            models.UniqueConstraint(
                fields=['student'],
                condition=Q(is_active=True),
                name='unique_active_allocation_per_student'
            ),
            models.CheckConstraint(
                condition=(
                    Q(is_active=True, end_date__isnull=True)
                    | Q(is_active=False, end_date__isnull=False)
                ),
                name='allocation_active_iff_open'
            ),
        ]
        indexes = [
            models.Index(fields=['room', 'is_active'], name='allocation_room_active_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.room}"

    def close(self, end_date=None):
        """End the stay; the caller saves."""
        self.end_date = end_date or timezone.now()
        self.is_active = False

    @property
    def duration_days(self):
        """Length of stay so far in days."""
        end = self.end_date or timezone.now()
        return (end - self.start_date).days


class Visitor(CoreBaseModel):
    """
    Model for tracking visitors of hostel residents.
    """
    class Status(models.TextChoices):
        IN = 'In', _('In')
        OUT = 'Out', _('Out')

    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='visitors',
        verbose_name=_('visiting student')
    )
    visitor_name = models.CharField(_('visitor name'), max_length=100)
    check_in_time = models.DateTimeField(_('check in time'), default=timezone.now)
    check_out_time = models.DateTimeField(_('check out time'), null=True, blank=True)
    status = models.CharField(
        _('status'),
        max_length=5,
        choices=Status.choices,
        default=Status.IN
    )

    class Meta:
        verbose_name = _('Visitor')
        verbose_name_plural = _('Visitors')
        ordering = ['-check_in_time']
        indexes = [
            models.Index(fields=['student', 'check_in_time'], name='visitor_student_checkin_idx'),
        ]

    def __str__(self):
        return f"{self.visitor_name} visiting {self.student}"

    @property
    def duration_minutes(self):
        """Calculate visit duration in minutes."""
        if self.check_out_time:
            duration = self.check_out_time - self.check_in_time
            return int(duration.total_seconds() / 60)
        return None

    def check_out(self, check_out_time=None):
        """Check out visitor."""
        if self.status == self.Status.OUT:
            raise AlreadyInTerminalState(_('This visitor has already checked out.'))
        check_out_time = check_out_time or timezone.now()
        if check_out_time < self.check_in_time:
            raise InvalidInput(_('Check-out time must be after check-in time.'))
        self.check_out_time = check_out_time
        self.status = self.Status.OUT
        self.save(update_fields=['check_out_time', 'status', 'updated_at'])


class MaintenanceRequest(CoreBaseModel):
    """
    Model for managing hostel maintenance requests.
    """
    class Status(models.TextChoices):
        PENDING = 'Pending', _('Pending')
        IN_PROGRESS = 'In Progress', _('In Progress')
        RESOLVED = 'Resolved', _('Resolved')

    STATUS_ORDER = [Status.PENDING, Status.IN_PROGRESS, Status.RESOLVED]

    room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='maintenance_requests',
        verbose_name=_('room')
    )
    reported_by = models.ForeignKey(
        'students.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='maintenance_requests',
        verbose_name=_('reported by')
    )
    issue = models.TextField(_('issue'))
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    resolved_at = models.DateTimeField(_('resolved at'), null=True, blank=True)

    class Meta:
        verbose_name = _('Maintenance Request')
        verbose_name_plural = _('Maintenance Requests')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.issue[:40]} ({self.status})"

    @classmethod
    def is_forward(cls, current, new):
        return cls.STATUS_ORDER.index(new) > cls.STATUS_ORDER.index(current)

    def advance(self, new_status=None):
        """
        Move the request to ``new_status`` (default: the next status).
        Statuses never move backwards.
        """
        if self.status == self.Status.RESOLVED:
            raise AlreadyInTerminalState(_('This request is already resolved.'))
        if new_status is None:
            new_status = self.STATUS_ORDER[self.STATUS_ORDER.index(self.status) + 1]
        if new_status not in self.Status.values:
            raise InvalidInput(_('Unknown maintenance status: %(status)s'), params={'status': new_status})
        if not self.is_forward(self.status, new_status):
            raise InvalidInput(
                _('Cannot move a request from %(current)s to %(new)s.'),
                params={'current': self.status, 'new': new_status}
            )
        self.status = new_status
        if new_status == self.Status.RESOLVED:
            self.resolved_at = timezone.now()
        self.save(update_fields=['status', 'resolved_at', 'updated_at'])

    @property
    def resolution_time(self):
        """Calculate time taken to resolve the request."""
        if self.resolved_at:
            return self.resolved_at - self.created_at
        return None
