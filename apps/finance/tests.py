# apps/finance/tests.py

from datetime import date, timedelta
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import AlreadyPaid, NotFound
from apps.students.models import Student

from .models import Fee, Payment
from .services import PaymentService, mark_overdue_fees

User = get_user_model()


class PaymentServiceTestCase(TestCase):
    """Test cases for fee payment processing"""

    def setUp(self):
        self.student_user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri'}
        )
        self.student = Student.objects.get(pk=self.student_user.pk)
        self.other = Student.objects.create(full_name='Peter Mwangi', email='peter@example.com')
        self.fee = Fee.objects.create(
            student=self.student,
            amount=Decimal('15000.00'),
            due_date=timezone.localdate() + timedelta(days=30)
        )

    def test_payment_settles_fee(self):
        payment = PaymentService.process_fee_payment(self.fee.pk)
        self.fee.refresh_from_db()

        self.assertEqual(self.fee.status, Fee.FeeStatus.PAID)
        self.assertEqual(self.fee.payment_date, timezone.localdate())
        self.assertEqual(payment.amount, Decimal('15000.00'))
        self.assertEqual(payment.student, self.student)
        self.assertEqual(payment.fee, self.fee)

    def test_second_payment_is_refused(self):
        PaymentService.process_fee_payment(self.fee.pk)
        with self.assertRaises(AlreadyPaid):
            PaymentService.process_fee_payment(self.fee.pk)
        self.assertEqual(Payment.objects.filter(fee=self.fee).count(), 1)

    def test_overdue_fee_can_be_paid(self):
        self.fee.status = Fee.FeeStatus.OVERDUE
        self.fee.save()
        PaymentService.process_fee_payment(self.fee.pk)
        self.fee.refresh_from_db()
        self.assertTrue(self.fee.is_paid)

    def test_unknown_fee(self):
        with self.assertRaises(NotFound):
            PaymentService.process_fee_payment('not-a-uuid')

    def test_student_cannot_pay_someone_elses_fee(self):
        other_fee = Fee.objects.create(student=self.other, amount=Decimal('500.00'), due_date=date(2024, 1, 31))
        with self.assertRaises(NotFound):
            PaymentService.process_fee_payment(other_fee.pk, actor=self.student_user)

        other_fee.refresh_from_db()
        self.assertEqual(other_fee.status, Fee.FeeStatus.DUE)
        self.assertFalse(Payment.objects.exists())

    def test_student_pays_own_fee(self):
        payment = PaymentService.process_fee_payment(self.fee.pk, actor=self.student_user)
        self.assertEqual(payment.received_by, self.student_user)

    def test_mark_overdue_fees(self):
        late = Fee.objects.create(student=self.other, amount=Decimal('500.00'), due_date=date(2024, 1, 31))
        paid = Fee.objects.create(
            student=self.other, amount=Decimal('700.00'), due_date=date(2024, 1, 15),
            status=Fee.FeeStatus.PAID, payment_date=date(2024, 1, 10)
        )

        self.assertEqual(mark_overdue_fees(today=date(2024, 2, 1)), 1)
        late.refresh_from_db()
        paid.refresh_from_db()
        self.assertEqual(late.status, Fee.FeeStatus.OVERDUE)
        self.assertEqual(paid.status, Fee.FeeStatus.PAID)

        # Running again changes nothing
        self.assertEqual(mark_overdue_fees(today=date(2024, 2, 1)), 0)

    def test_days_overdue(self):
        fee = Fee.objects.create(
            student=self.other, amount=Decimal('500.00'), due_date=timezone.localdate() - timedelta(days=3)
        )
        self.assertTrue(fee.is_overdue)
        self.assertEqual(fee.days_overdue, 3)
        self.assertEqual(self.fee.days_overdue, 0)


class MarkOverdueFeesCommandTestCase(TestCase):
    """Test cases for the mark_overdue_fees command"""

    def setUp(self):
        self.student = Student.objects.create(full_name='Peter Mwangi', email='peter@example.com')
        self.fee = Fee.objects.create(student=self.student, amount=Decimal('500.00'), due_date=date(2024, 1, 31))

    def test_command_marks_fees(self):
        out = StringIO()
        call_command('mark_overdue_fees', '--date', '2024-02-01', stdout=out)
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.status, Fee.FeeStatus.OVERDUE)
        self.assertIn('Marked 1 fees overdue', out.getvalue())

    def test_command_respects_date(self):
        call_command('mark_overdue_fees', '--date', '2024-01-31', stdout=StringIO())
        self.fee.refresh_from_db()
        self.assertEqual(self.fee.status, Fee.FeeStatus.DUE)

    def test_command_rejects_bad_date(self):
        with self.assertRaises(CommandError):
            call_command('mark_overdue_fees', '--date', '31/01/2024', stdout=StringIO())


class FinanceAPITestCase(APITestCase):
    """Test cases for the fee and payment endpoints"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email='admin@example.com', password='testpass123', user_metadata={'role': 'Admin'}
        )
        self.staff_user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        self.student_user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri'}
        )
        self.student = Student.objects.get(pk=self.student_user.pk)
        self.other = Student.objects.create(full_name='Peter Mwangi', email='peter@example.com')
        self.fee = Fee.objects.create(student=self.student, amount=Decimal('15000.00'), due_date=date(2030, 1, 31))
        self.other_fee = Fee.objects.create(student=self.other, amount=Decimal('9000.00'), due_date=date(2030, 1, 31))

    def test_admin_creates_fee(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('finance:fee-list'), {
            'student': str(self.other.pk),
            'amount': '2500.00',
            'due_date': '2030-03-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Fee.FeeStatus.DUE)

    def test_fee_amount_must_be_positive(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('finance:fee-list'), {
            'student': str(self.other.pk),
            'amount': '0.00',
            'due_date': '2030-03-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'InvalidInput')

    def test_staff_cannot_see_fees(self):
        self.client.force_authenticate(user=self.staff_user)
        response = self.client.get(reverse('finance:fee-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse('finance:payment-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_sees_own_fees(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('finance:fee-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['id'] for row in response.data['results']], [str(self.fee.pk)])

    def test_student_pays_own_fee_once(self):
        self.client.force_authenticate(user=self.student_user)
        url = reverse('finance:fee-pay', args=[self.fee.pk])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['amount']), Decimal('15000.00'))

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'AlreadyPaid')

    def test_student_cannot_pay_other_fee(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('finance:fee-pay', args=[self.other_fee.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_student_cannot_create_fee(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('finance:fee-list'), {
            'student': str(self.student.pk), 'amount': '1.00', 'due_date': '2030-03-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_paid_fee_cannot_be_edited(self):
        PaymentService.process_fee_payment(self.fee.pk)
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(
            reverse('finance:fee-detail', args=[self.fee.pk]), {'amount': '1.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
