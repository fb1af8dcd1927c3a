# apps/finance/services.py
"""
Fee payment processing.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import AlreadyPaid, NotFound
from apps.core.permissions import policy_for, StudentPolicy

from .models import Fee, Payment

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Service class for handling payment business logic.
    """

    @staticmethod
    def process_fee_payment(fee_id, actor=None):
        """
        Settle a fee: mark it Paid and record exactly one payment.

        The fee row is locked for the whole operation, so a concurrent second
        call waits and then sees the fee as Paid. A Student ``actor`` may only
        pay their own fees; anyone else's fee is reported as not found.
        """
        with transaction.atomic():
            fees = Fee.objects.select_for_update()
            if actor is not None:
                policy = policy_for(actor)
                if isinstance(policy, StudentPolicy):
                    fees = policy.scope(fees, student_lookup='student')

            try:
                fee = fees.get(pk=fee_id)
            except (Fee.DoesNotExist, ValidationError):
                raise NotFound('Fee not found.')

            if fee.status == Fee.FeeStatus.PAID:
                logger.info("Rejected second payment of fee %s", fee.pk)
                raise AlreadyPaid()

            now = timezone.now()
            fee.status = Fee.FeeStatus.PAID
            fee.payment_date = timezone.localdate(now)
            fee.save(update_fields=['status', 'payment_date', 'updated_at'])

            payment = Payment.objects.create(
                fee=fee,
                student_id=fee.student_id,
                amount=fee.amount,
                paid_on=now,
                received_by=actor,
            )

        logger.info("Fee %s paid: %s by student %s", fee.pk, fee.amount, fee.student_id)
        return payment

    @staticmethod
    def mark_overdue_fees(today=None):
        """
        Flag Due fees whose due date has passed as Overdue. Returns the
        number of fees updated.
        """
        today = today or timezone.localdate()
        updated = Fee.objects.filter(
            status=Fee.FeeStatus.DUE,
            due_date__lt=today,
        ).update(status=Fee.FeeStatus.OVERDUE, updated_at=timezone.now())
        if updated:
            logger.info("Marked %s fees overdue as of %s", updated, today)
        return updated


process_fee_payment = PaymentService.process_fee_payment
mark_overdue_fees = PaymentService.mark_overdue_fees
