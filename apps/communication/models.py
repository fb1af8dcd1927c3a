# apps/communication/models.py
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class Notice(CoreBaseModel):
    """
    Model for hostel-wide notices.
    """
    class TargetAudience(models.TextChoices):
        ALL = 'all', _('All Users')
        STUDENTS = 'students', _('Students Only')
        STAFF = 'staff', _('Staff Only')

    title = models.CharField(_('title'), max_length=200)
    message = models.TextField(_('message'))
    audience = models.CharField(
        _('target audience'),
        max_length=20,
        choices=TargetAudience.choices,
        default=TargetAudience.ALL,
        db_index=True
    )
    created_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notices',
        verbose_name=_('created by')
    )

    class Meta:
        verbose_name = _('Notice')
        verbose_name_plural = _('Notices')
        ordering = ['-created_at']

    def __str__(self):
        return self.title
