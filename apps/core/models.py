# apps/core/models.py
import uuid
from django.db import models
from django.utils.translation import gettext_lazy as _


class CoreBaseModel(models.Model):
    """
    Base model shared by the hostel entities:
    - UUID primary key
    - Created/updated timestamps
    """

    # UUID Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Timestamp fields
    created_at = models.DateTimeField(_('created at'), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return str(self.id)
