# apps/core/permissions.py
"""
Role based access policies.

Every request is bound to exactly one policy, picked from the caller's role:
``AdminPolicy``, ``StaffPolicy`` or ``StudentPolicy`` (``NoAccessPolicy`` for
accounts without a usable role). Views ask the policy two questions:

* ``scope(queryset, ...)`` narrows what the caller can see. Rows outside the
  scope simply do not exist for the caller, so detail lookups answer 404.
* ``can_read(resource)`` / ``can_write(resource, action)`` gate whole
  resources and actions; a refusal answers 403.
"""

import logging

from django.utils.functional import cached_property
from rest_framework.permissions import BasePermission, SAFE_METHODS

from apps.users.models import Role

from .exceptions import PermissionDenied

logger = logging.getLogger(__name__)


# Resource names used by the API views
STUDENTS = 'students'
PROFILES = 'profiles'
ROOMS = 'rooms'
ALLOCATIONS = 'allocations'
VISITORS = 'visitors'
MAINTENANCE = 'maintenance'
FEES = 'fees'
PAYMENTS = 'payments'
ATTENDANCE = 'attendance'
LEAVES = 'leaves'
NOTICES = 'notices'
SEARCH = 'search'


def get_user_role(user):
    """
    Return the caller's role: the profile row first, then the ``role`` claim
    carried in the auth user's metadata.
    """
    if user is None or not user.is_authenticated:
        return None

    profile = getattr(user, 'profile', None)
    if profile is not None and profile.role in Role.values:
        return profile.role

    claim = (getattr(user, 'user_metadata', None) or {}).get('role')
    if claim in Role.values:
        return claim
    return None


class AccessPolicy:
    """
    Capability set shared by all roles; subclasses widen it.
    """
    role = None
    readable = frozenset()
    writable = frozenset()
    notice_audiences = ()

    def __init__(self, user):
        self.user = user

    def __repr__(self):
        return f"<{self.__class__.__name__} user={getattr(self.user, 'pk', None)}>"

    @cached_property
    def student(self):
        """The caller's own student record, if any."""
        return None

    def can_read(self, resource):
        return resource in self.readable

    def can_write(self, resource, action=None):
        return resource in self.writable

    def scope(self, queryset, student_lookup=None, user_lookup=None):
        return queryset

    def owner_defaults(self, owner_field):
        """Extra values a create made by this caller must carry."""
        return {}

    def require_write(self, resource, action=None):
        if not self.can_write(resource, action):
            logger.info("%r refused %s on %s", self, action, resource)
            raise PermissionDenied()


class AdminPolicy(AccessPolicy):
    role = Role.ADMIN
    notice_audiences = None

    def can_read(self, resource):
        return True

    def can_write(self, resource, action=None):
        return True


class StaffPolicy(AccessPolicy):
    role = Role.STAFF
    readable = frozenset({
        STUDENTS, PROFILES, ROOMS, ALLOCATIONS, VISITORS, MAINTENANCE,
        ATTENDANCE, LEAVES, NOTICES, SEARCH,
    })
    writable = frozenset({VISITORS, MAINTENANCE, ATTENDANCE, LEAVES})
    notice_audiences = ('all', 'staff')


class StudentPolicy(AccessPolicy):
    role = Role.STUDENT
    readable = frozenset({
        STUDENTS, PROFILES, ROOMS, ALLOCATIONS, VISITORS, MAINTENANCE,
        FEES, PAYMENTS, ATTENDANCE, LEAVES, NOTICES, SEARCH,
    })
    allowed_actions = frozenset({
        (MAINTENANCE, 'create'),
        (LEAVES, 'create'),
        (FEES, 'pay'),
    })
    notice_audiences = ('all', 'students')

    @cached_property
    def student(self):
        from apps.students.models import Student

        return (
            Student.objects.filter(profile_id=self.user.pk).first()
            or Student.objects.filter(pk=self.user.pk).first()
        )

    def can_write(self, resource, action=None):
        return (resource, action) in self.allowed_actions

    def scope(self, queryset, student_lookup=None, user_lookup=None):
        if user_lookup:
            return queryset.filter(**{user_lookup: self.user})
        if student_lookup:
            if self.student is None:
                return queryset.none()
            return queryset.filter(**{student_lookup: self.student})
        return queryset

    def owner_defaults(self, owner_field):
        if not owner_field:
            return {}
        if self.student is None:
            raise PermissionDenied('No student record is linked to this account.')
        return {owner_field: self.student}


class NoAccessPolicy(AccessPolicy):

    def scope(self, queryset, student_lookup=None, user_lookup=None):
        return queryset.none()


POLICIES = {
    Role.ADMIN: AdminPolicy,
    Role.STAFF: StaffPolicy,
    Role.STUDENT: StudentPolicy,
}


def policy_for(user):
    """Bind ``user`` to the policy of their role."""
    return POLICIES.get(get_user_role(user), NoAccessPolicy)(user)


class RolePolicyPermission(BasePermission):
    """
    REST framework permission consulting the view's ``policy_resource``.
    """

    def has_permission(self, request, view):
        resource = getattr(view, 'policy_resource', None)
        if resource is None:
            return True

        policy = getattr(view, 'policy', None) or policy_for(request.user)
        if request.method in SAFE_METHODS:
            return policy.can_read(resource)
        return policy.can_read(resource) and policy.can_write(resource, getattr(view, 'action', None))
