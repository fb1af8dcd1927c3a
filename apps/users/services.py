"""
Identity bridge: turns new authentication accounts into profile and student
rows, plus the profile lookups used by the API.
"""

import logging

from django.db import transaction
from django.utils.dateparse import parse_date

from apps.core.exceptions import ConstraintViolation, NotFound
from apps.students.models import Student

from .models import Profile, Role, User

logger = logging.getLogger(__name__)


def _metadata_text(metadata, key):
    value = metadata.get(key)
    if value is None:
        return ''
    return str(value).strip()


def _metadata_date(metadata, key):
    value = metadata.get(key)
    if not value:
        return None
    try:
        return parse_date(str(value))
    except ValueError:
        logger.warning("Ignoring malformed %s in sign-up metadata: %r", key, value)
        return None


class IdentityBridge:
    """
    Mirrors authentication accounts into the hostel's own tables.
    """

    @staticmethod
    def resolve_role(metadata):
        """Role claimed in the sign-up metadata, defaulting to Student."""
        role = metadata.get('role')
        if role in Role.values:
            return role
        if role:
            logger.info("Unknown role %r in sign-up metadata, defaulting to Student", role)
        return Role.STUDENT

    @staticmethod
    @transaction.atomic
    def handle_new_user(user):
        """
        Insert the profile (and the student row for Student accounts) of a
        newly created user. Replaying the call for the same user is harmless.
        """
        metadata = user.user_metadata or {}
        profile, created = Profile.objects.get_or_create(
            user=user,
            defaults={
                'full_name': _metadata_text(metadata, 'full_name') or user.full_name,
                'role': IdentityBridge.resolve_role(metadata),
                'email': user.email,
                'mobile_number': _metadata_text(metadata, 'mobile_number') or user.mobile,
                'course': _metadata_text(metadata, 'course'),
                'joining_date': _metadata_date(metadata, 'joining_date'),
            }
        )
        if created:
            logger.info("Created %s profile for %s", profile.role, user.email)

        if profile.role == Role.STUDENT:
            IdentityBridge.link_student(profile)
        return profile

    @staticmethod
    def link_student(profile):
        """
        Return the student row of ``profile``, linking a matching unlinked
        row created by an Admin or inserting a new one with the account's id.
        """
        student = Student.objects.filter(profile=profile).first()
        if student is not None:
            return student

        student = Student.objects.select_for_update().filter(
            email__iexact=profile.email, profile__isnull=True
        ).first()
        if student is not None:
            student.profile = profile
            student.save(update_fields=['profile', 'updated_at'])
            logger.info("Linked existing student %s to %s", student.pk, profile.email)
            return student

        if Student.objects.filter(email__iexact=profile.email).exclude(pk=profile.pk).exists():
            raise ConstraintViolation('A student with this email is linked to another account.')

        student, created = Student.objects.get_or_create(
            pk=profile.pk,
            defaults={
                'profile': profile,
                'full_name': profile.full_name or profile.email,
                'email': profile.email,
                'course': profile.course,
                'contact': profile.mobile_number,
            }
        )
        if created:
            logger.info("Created student %s for %s", student.pk, profile.email)
        return student

    @staticmethod
    @transaction.atomic
    def register_user(email, password, metadata=None):
        """
        Create an authentication account; the post_save bridge does the rest.
        A refused bridge rolls the account back with it.
        """
        metadata = dict(metadata or {})
        return User.objects.create_user(
            email=email,
            password=password,
            mobile=_metadata_text(metadata, 'mobile_number')[:17],
            user_metadata=metadata,
        )


def get_user_profile_details(user_id):
    """
    Profile fields of ``user_id`` together with the number of the room the
    matching student currently occupies (``None`` when unallocated).
    """
    profile = Profile.objects.filter(pk=user_id).first()
    if profile is None:
        raise NotFound('Profile not found.')

    student = Student.objects.filter(profile=profile).first()
    room = student.current_room if student else None
    return {
        'id': profile.pk,
        'full_name': profile.full_name,
        'role': profile.role,
        'email': profile.email,
        'mobile_number': profile.mobile_number,
        'course': profile.course,
        'joining_date': profile.joining_date,
        'student_id': student.pk if student else None,
        'room_number': room.room_number if room else None,
    }


def get_user_roles(user):
    """Roles held by ``user``; empty when none can be resolved."""
    role = user.role
    return [role] if role else []
