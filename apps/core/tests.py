# apps/core/tests.py

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.http import Http404
from django.test import TestCase
from django.urls import reverse
from rest_framework import exceptions as drf_exceptions, status
from rest_framework.test import APITestCase

from apps.hostels.models import Room
from apps.students.models import Student
from apps.users.models import Profile, Role

from .exceptions import (
    AlreadyPaid, CapacityExceeded, InvalidInput, NotFound, hostel_exception_handler,
)
from .permissions import (
    FEES, LEAVES, MAINTENANCE, NOTICES, PAYMENTS, ROOMS, STUDENTS, VISITORS,
    AdminPolicy, NoAccessPolicy, StaffPolicy, StudentPolicy, get_user_role, policy_for,
)
from .search import universal_search

User = get_user_model()


class ExceptionHandlerTestCase(TestCase):
    """Test cases for the REST exception handler"""

    def handle(self, exc):
        return hostel_exception_handler(exc, {'view': None})

    def test_hostel_errors_keep_their_kind_and_status(self):
        response = self.handle(CapacityExceeded())
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['kind'], 'CapacityExceeded')

        response = self.handle(NotFound('Room not found.'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'kind': 'NotFound', 'message': 'Room not found.'})

    def test_already_paid_is_a_terminal_state_conflict(self):
        response = self.handle(AlreadyPaid())
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['kind'], 'AlreadyPaid')

    def test_message_params_are_interpolated(self):
        error = InvalidInput('Unknown status: %(status)s', params={'status': 'Asleep'})
        self.assertEqual(error.message_text, 'Unknown status: Asleep')

    def test_integrity_error_becomes_constraint_violation(self):
        response = self.handle(IntegrityError('UNIQUE constraint failed'))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['kind'], 'ConstraintViolation')

    def test_django_validation_error_becomes_invalid_input(self):
        response = self.handle(ValidationError('End date cannot be before start date.'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['kind'], 'InvalidInput')

    def test_unique_serializer_error_becomes_constraint_violation(self):
        exc = drf_exceptions.ValidationError({'email': ['Taken.']}, code='unique')
        response = self.handle(exc)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['kind'], 'ConstraintViolation')
        self.assertIn('email', response.data['errors'])

    def test_other_serializer_error_becomes_invalid_input(self):
        exc = drf_exceptions.ValidationError({'amount': ['Required.']}, code='required')
        response = self.handle(exc)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['kind'], 'InvalidInput')

    def test_http404_becomes_not_found(self):
        response = self.handle(Http404())
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['kind'], 'NotFound')


class AccessPolicyTestCase(TestCase):
    """Test cases for role resolution and policies"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email='admin@example.com', password='testpass123', user_metadata={'role': 'Admin'}
        )
        self.staff_user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        self.student_user = User.objects.create_user(
            email='resident@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Rita Resident'}
        )

    def test_role_comes_from_profile(self):
        self.assertEqual(get_user_role(self.admin_user), Role.ADMIN)
        self.assertEqual(get_user_role(self.staff_user), Role.STAFF)
        self.assertEqual(get_user_role(self.student_user), Role.STUDENT)

    def test_role_falls_back_to_metadata_claim(self):
        Profile.objects.filter(pk=self.staff_user.pk).delete()
        user = User.objects.get(pk=self.staff_user.pk)
        self.assertEqual(get_user_role(user), Role.STAFF)

    def test_policy_for_each_role(self):
        self.assertIsInstance(policy_for(self.admin_user), AdminPolicy)
        self.assertIsInstance(policy_for(self.staff_user), StaffPolicy)
        self.assertIsInstance(policy_for(self.student_user), StudentPolicy)

    def test_unknown_role_gets_no_access(self):
        Profile.objects.filter(pk=self.staff_user.pk).delete()
        user = User.objects.get(pk=self.staff_user.pk)
        user.user_metadata = {'role': 'Janitor'}
        policy = policy_for(user)
        self.assertIsInstance(policy, NoAccessPolicy)
        self.assertFalse(policy.can_read(ROOMS))
        Room.objects.create(room_number='101')
        self.assertFalse(policy.scope(Room.objects.all()).exists())

    def test_staff_cannot_touch_finance(self):
        policy = policy_for(self.staff_user)
        self.assertFalse(policy.can_read(FEES))
        self.assertFalse(policy.can_read(PAYMENTS))
        self.assertTrue(policy.can_write(VISITORS, 'create'))
        self.assertFalse(policy.can_write(ROOMS, 'create'))

    def test_student_writes_are_limited(self):
        policy = policy_for(self.student_user)
        self.assertTrue(policy.can_write(MAINTENANCE, 'create'))
        self.assertTrue(policy.can_write(LEAVES, 'create'))
        self.assertTrue(policy.can_write(FEES, 'pay'))
        self.assertFalse(policy.can_write(FEES, 'create'))
        self.assertFalse(policy.can_write(STUDENTS, 'update'))
        self.assertEqual(policy.notice_audiences, ('all', 'students'))
        self.assertTrue(policy.can_read(NOTICES))

    def test_student_scope_is_own_rows(self):
        Student.objects.create(full_name='Other Resident', email='other@example.com')
        policy = policy_for(self.student_user)
        scoped = policy.scope(Student.objects.all(), student_lookup='pk')
        self.assertEqual(list(scoped.values_list('email', flat=True)), ['resident@example.com'])


class UniversalSearchTestCase(APITestCase):
    """Test cases for universal search"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email='admin@example.com', password='testpass123', user_metadata={'role': 'Admin'}
        )
        Student.objects.create(full_name='Alice Kamau', email='alice@example.com', course='BSc')
        Student.objects.create(full_name='Brian Otieno', email='brian@example.com', course='BCom')
        self.room = Room.objects.create(room_number='101', room_type=Room.RoomType.DOUBLE)
        Room.objects.create(room_number='202', room_type=Room.RoomType.SINGLE)

    def test_room_number_search(self):
        results = universal_search('101')
        self.assertEqual(results['students'], [])
        self.assertEqual(len(results['rooms']), 1)
        self.assertEqual(results['rooms'][0]['label'], 'Room 101')
        self.assertEqual(results['rooms'][0]['path'], f'/rooms/{self.room.pk}')

    def test_student_search_is_case_insensitive(self):
        results = universal_search('ALICE')
        self.assertEqual([hit['label'] for hit in results['students']], ['Alice Kamau'])
        self.assertEqual(results['rooms'], [])

    def test_blank_term_matches_nothing(self):
        self.assertEqual(universal_search('   '), {'students': [], 'rooms': []})

    def test_results_are_capped(self):
        for number in range(10):
            Room.objects.create(room_number=f'3{number:02d}')
        results = universal_search('3', limit=4)
        self.assertEqual(len(results['rooms']), 4)

    def test_search_endpoint(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(reverse('core:universal_search'), {'q': '101'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['rooms']), 1)
        self.assertEqual(response.data['students'], [])

    def test_student_only_finds_themselves(self):
        student_user = User.objects.create_user(
            email='alice.k@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Alice Karanja'}
        )
        self.client.force_authenticate(user=student_user)
        response = self.client.get(reverse('core:universal_search'), {'q': 'alice'})
        self.assertEqual([hit['label'] for hit in response.data['students']], ['Alice Karanja'])

    def test_search_requires_authentication(self):
        response = self.client.get(reverse('core:universal_search'), {'q': '101'})
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
