# apps/hostels/services.py
"""
Room allocation services.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Exists, OuterRef
from django.utils import timezone

from apps.core.exceptions import CapacityExceeded, NotFound
from apps.students.models import Student

from .models import Room, RoomAllocation

logger = logging.getLogger(__name__)


def update_room_occupancy(room):
    """
    Recompute ``room.occupants`` from its active allocations and derive the
    status: Occupied once the room is full, Vacant otherwise. Rooms under
    Maintenance keep their status.
    """
    current = Room.objects.filter(pk=room.pk).values('status', 'capacity').first()
    if current is None:
        return room

    occupants = RoomAllocation.objects.filter(room_id=room.pk, is_active=True).count()
    if current['status'] == Room.Status.MAINTENANCE:
        status = Room.Status.MAINTENANCE
    elif occupants >= current['capacity']:
        status = Room.Status.OCCUPIED
    else:
        status = Room.Status.VACANT

    Room.objects.filter(pk=room.pk).update(occupants=occupants, status=status, updated_at=timezone.now())
    room.occupants = occupants
    room.status = status
    return room


class AllocationService:
    """
    Service class for placing students in rooms.
    """

    @staticmethod
    def allocate_room(student_id, room_id, allocated_by=None):
        """
        Move a student into a room.

        The student's current allocation is closed and the new one opened in
        a single transaction. A full room raises ``CapacityExceeded`` and
        leaves everything as it was.
        """
        with transaction.atomic():
            try:
                room = Room.objects.select_for_update().get(pk=room_id)
            except (Room.DoesNotExist, ValidationError):
                raise NotFound('Room not found.')

            try:
                student = Student.objects.get(pk=student_id)
            except (Student.DoesNotExist, ValidationError):
                raise NotFound('Student not found.')

            now = timezone.now()
            previous = RoomAllocation.objects.select_for_update().filter(student=student, is_active=True)
            for allocation in previous:
                allocation.close(now)
                allocation.save(update_fields=['end_date', 'is_active', 'updated_at'])

            active = RoomAllocation.objects.filter(room=room, is_active=True).count()
            if active >= room.capacity:
                logger.info(
                    "Refused allocation of %s to room %s: %s/%s occupied",
                    student.pk, room.room_number, active, room.capacity
                )
                raise CapacityExceeded(
                    'Room %(room)s is already at full capacity (%(capacity)s).',
                    params={'room': room.room_number, 'capacity': room.capacity}
                )

            allocation = RoomAllocation.objects.create(
                student=student,
                room=room,
                start_date=now,
                allocated_by=allocated_by,
            )

        logger.info("Allocated student %s to room %s", student.pk, room.room_number)
        return allocation

    @staticmethod
    def release_allocation(allocation_id, end_date=None):
        """Close an active allocation (student checks out)."""
        with transaction.atomic():
            try:
                allocation = RoomAllocation.objects.select_for_update().get(pk=allocation_id, is_active=True)
            except (RoomAllocation.DoesNotExist, ValidationError):
                raise NotFound('Active allocation not found.')
            allocation.close(end_date)
            allocation.save(update_fields=['end_date', 'is_active', 'updated_at'])

        logger.info("Released allocation %s from room %s", allocation.pk, allocation.room_id)
        return allocation

    @staticmethod
    def get_unallocated_students():
        """Students without an active allocation, by name."""
        active = RoomAllocation.objects.filter(student=OuterRef('pk'), is_active=True)
        return Student.objects.filter(~Exists(active)).order_by('full_name')


allocate_room = AllocationService.allocate_room
release_allocation = AllocationService.release_allocation
get_unallocated_students = AllocationService.get_unallocated_students
