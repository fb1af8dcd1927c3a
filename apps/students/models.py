from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class Student(CoreBaseModel):
    """
    A hostel resident.

    Created by the identity bridge when a Student account signs up (sharing
    the account's id), or directly by an Admin and linked on signup.
    """
    profile = models.OneToOneField(
        'users.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student',
        verbose_name=_('profile')
    )
    full_name = models.CharField(_('full name'), max_length=255)
    email = models.EmailField(_('email address'), unique=True)
    course = models.CharField(_('course'), max_length=150, blank=True)
    contact = models.CharField(_('contact number'), max_length=20, blank=True)

    class Meta:
        verbose_name = _('Student')
        verbose_name_plural = _('Students')
        ordering = ['full_name']

    def __str__(self):
        return self.full_name

    @property
    def active_allocation(self):
        return self.allocations.filter(is_active=True).select_related('room').first()

    @property
    def current_room(self):
        allocation = self.active_allocation
        return allocation.room if allocation else None
