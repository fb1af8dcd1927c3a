# apps/finance/models.py
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class Fee(CoreBaseModel):
    """
    An amount a student owes the hostel.

    Status moves forward only: Due to Paid (terminal), or Due to Overdue
    and then Paid.
    """
    class FeeStatus(models.TextChoices):
        DUE = 'Due', _('Due')
        PAID = 'Paid', _('Paid')
        OVERDUE = 'Overdue', _('Overdue')

    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='fees',
        verbose_name=_('student')
    )
    amount = models.DecimalField(
        _('amount'),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    due_date = models.DateField(_('due date'))
    status = models.CharField(
        _('status'),
        max_length=10,
        choices=FeeStatus.choices,
        default=FeeStatus.DUE,
        db_index=True
    )
    payment_date = models.DateField(_('payment date'), null=True, blank=True)

    class Meta:
        verbose_name = _('Fee')
        verbose_name_plural = _('Fees')
        ordering = ['due_date', '-created_at']
        indexes = [
            models.Index(fields=['student', 'status'], name='fee_student_status_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.amount} ({self.status})"

    @property
    def is_paid(self):
        return self.status == self.FeeStatus.PAID

    @property
    def is_overdue(self):
        """Check if fee is overdue."""
        return not self.is_paid and self.due_date < timezone.localdate()

    @property
    def days_overdue(self):
        """Calculate number of days overdue."""
        if self.is_overdue:
            return (timezone.localdate() - self.due_date).days
        return 0


class Payment(CoreBaseModel):
    """
    Record of a settled fee. Created once, never changed.
    """
    fee = models.OneToOneField(
        Fee,
        on_delete=models.CASCADE,
        related_name='payment',
        verbose_name=_('fee')
    )
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.CASCADE,
        related_name='payments',
        verbose_name=_('student')
    )
    amount = models.DecimalField(_('amount'), max_digits=10, decimal_places=2)
    paid_on = models.DateTimeField(_('paid on'), default=timezone.now)
    received_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='received_payments',
        verbose_name=_('received by')
    )

    class Meta:
        verbose_name = _('Payment')
        verbose_name_plural = _('Payments')
        ordering = ['-paid_on']

    def __str__(self):
        return f"Payment {self.amount} for {self.fee_id}"
