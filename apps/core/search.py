# apps/core/search.py
"""
Universal search across students and rooms.
"""

import logging

from django.conf import settings
from django.db.models import Q

from apps.hostels.models import Room
from apps.students.models import Student

from .permissions import ROOMS, STUDENTS, AdminPolicy

logger = logging.getLogger(__name__)


def _student_hit(student):
    return {
        'id': str(student.pk),
        'label': student.full_name,
        'path': f'/students/{student.pk}',
    }


def _room_hit(room):
    return {
        'id': str(room.pk),
        'label': f'Room {room.room_number}',
        'path': f'/rooms/{room.pk}',
    }


def universal_search(term, policy=None, limit=None):
    """
    Case-insensitive substring search over student names and emails and
    room numbers.

    Returns ``{'students': [...], 'rooms': [...]}`` where every hit is
    ``{id, label, path}``; each group holds at most ``limit`` hits
    (``UNIVERSAL_SEARCH_LIMIT`` by default). An empty term matches nothing.
    ``policy`` narrows the results to what the caller may see.
    """
    results = {'students': [], 'rooms': []}
    term = (term or '').strip()
    if not term:
        return results

    if limit is None:
        limit = settings.UNIVERSAL_SEARCH_LIMIT
    if policy is None:
        policy = AdminPolicy(None)

    if policy.can_read(STUDENTS):
        students = policy.scope(
            Student.objects.filter(Q(full_name__icontains=term) | Q(email__icontains=term)),
            student_lookup='pk',
        ).order_by('full_name')[:limit]
        results['students'] = [_student_hit(student) for student in students]

    if policy.can_read(ROOMS):
        rooms = policy.scope(Room.objects.filter(room_number__icontains=term)).order_by('room_number')[:limit]
        results['rooms'] = [_room_hit(room) for room in rooms]

    logger.debug(
        "Search %r: %s students, %s rooms", term, len(results['students']), len(results['rooms'])
    )
    return results
