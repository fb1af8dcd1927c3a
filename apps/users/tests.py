# apps/users/tests.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import ConstraintViolation, NotFound
from apps.hostels.models import Room
from apps.hostels.services import AllocationService
from apps.students.models import Student

from .models import Profile, Role
from .services import IdentityBridge, get_user_profile_details, get_user_roles

User = get_user_model()

SIGNUP_PASSWORD = 'Hostel-Pass-2024!'


class IdentityBridgeTestCase(TestCase):
    """Test cases for mirroring new accounts into profiles and students"""

    def test_student_signup_creates_profile_and_student(self):
        user = User.objects.create_user(
            email='amina@example.com',
            password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri', 'course': 'BSc Nursing'}
        )
        profile = Profile.objects.get(pk=user.pk)
        self.assertEqual(profile.role, Role.STUDENT)
        self.assertEqual(profile.full_name, 'Amina Njeri')
        self.assertEqual(profile.email, 'amina@example.com')

        student = Student.objects.get(profile=profile)
        self.assertEqual(student.pk, user.pk)
        self.assertEqual(student.course, 'BSc Nursing')

    def test_staff_signup_has_no_student_row(self):
        user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        self.assertEqual(Profile.objects.get(pk=user.pk).role, Role.STAFF)
        self.assertFalse(Student.objects.filter(email='warden@example.com').exists())

    def test_missing_or_unknown_role_defaults_to_student(self):
        user = User.objects.create_user(
            email='nobody@example.com', password='testpass123', user_metadata={'role': 'Janitor'}
        )
        self.assertEqual(Profile.objects.get(pk=user.pk).role, Role.STUDENT)

        user = User.objects.create_user(email='plain@example.com', password='testpass123')
        self.assertEqual(Profile.objects.get(pk=user.pk).role, Role.STUDENT)

    def test_replaying_the_bridge_is_harmless(self):
        user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri'}
        )
        IdentityBridge.handle_new_user(user)
        IdentityBridge.handle_new_user(user)
        self.assertEqual(Profile.objects.filter(pk=user.pk).count(), 1)
        self.assertEqual(Student.objects.filter(email='amina@example.com').count(), 1)

    def test_existing_student_row_is_linked(self):
        student = Student.objects.create(full_name='Peter Mwangi', email='peter@example.com')
        user = User.objects.create_user(
            email='peter@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Peter Mwangi'}
        )
        student.refresh_from_db()
        self.assertEqual(student.profile_id, user.pk)
        self.assertEqual(Student.objects.filter(email='peter@example.com').count(), 1)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email='root@example.com', password='testpass123')
        self.assertEqual(user.role, Role.ADMIN)
        self.assertEqual(get_user_roles(user), [Role.ADMIN])

    def test_profile_details_include_room(self):
        user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri'}
        )
        details = get_user_profile_details(user.pk)
        self.assertIsNone(details['room_number'])

        room = Room.objects.create(room_number='A12', room_type=Room.RoomType.DOUBLE)
        AllocationService.allocate_room(user.pk, room.pk)
        details = get_user_profile_details(user.pk)
        self.assertEqual(details['room_number'], 'A12')
        self.assertEqual(details['student_id'], user.pk)

    def test_profile_details_unknown_user(self):
        staff = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        Profile.objects.filter(pk=staff.pk).delete()
        with self.assertRaises(NotFound):
            get_user_profile_details(staff.pk)


class ProfileAPITestCase(APITestCase):
    """Test cases for signup and profile endpoints"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email='admin@example.com', password='testpass123', user_metadata={'role': 'Admin'}
        )
        self.student_user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri'}
        )
        self.other_user = User.objects.create_user(
            email='peter@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Peter Mwangi'}
        )

    def test_anonymous_student_signup(self):
        response = self.client.post(reverse('users:signup'), {
            'email': 'newbie@example.com',
            'password': SIGNUP_PASSWORD,
            'full_name': 'New Resident',
            'course': 'BA Economics',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], Role.STUDENT)
        self.assertTrue(Student.objects.filter(email='newbie@example.com').exists())

    def test_anonymous_staff_signup_is_refused(self):
        response = self.client.post(reverse('users:signup'), {
            'email': 'sneaky@example.com',
            'password': SIGNUP_PASSWORD,
            'full_name': 'Sneaky',
            'role': 'Staff',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['kind'], 'PermissionDenied')
        self.assertFalse(User.objects.filter(email='sneaky@example.com').exists())

    def test_admin_creates_staff(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('users:signup'), {
            'email': 'warden@example.com',
            'password': SIGNUP_PASSWORD,
            'full_name': 'Grace Warden',
            'role': 'Staff',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], Role.STAFF)

    def test_duplicate_email_is_a_conflict(self):
        response = self.client.post(reverse('users:signup'), {
            'email': 'amina@example.com',
            'password': SIGNUP_PASSWORD,
            'full_name': 'Amina Again',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'ConstraintViolation')

    def test_me_reads_and_edits_own_profile(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('users:me'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['full_name'], 'Amina Njeri')

        response = self.client.patch(
            reverse('users:me'), {'mobile_number': '+254700000001', 'role': 'Admin'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        profile = Profile.objects.get(pk=self.student_user.pk)
        self.assertEqual(profile.mobile_number, '+254700000001')
        self.assertEqual(profile.role, Role.STUDENT)

    def test_my_role(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(reverse('users:me-role'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], Role.ADMIN)

    def test_student_sees_only_own_profile(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('users:profile-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(reverse('users:profile-detail', args=[self.other_user.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_reads_profile_details(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(reverse('users:profile-details', args=[self.student_user.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'amina@example.com')
        self.assertIsNone(response.data['room_number'])

    def test_refused_signup_leaves_no_account(self):
        # Amina's student row now carries the address the newcomer signs up with
        Student.objects.filter(pk=self.student_user.pk).update(email='clash@example.com')

        response = self.client.post(reverse('users:signup'), {
            'email': 'clash@example.com',
            'password': SIGNUP_PASSWORD,
            'full_name': 'Clash Resident',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'ConstraintViolation')
        self.assertFalse(User.objects.filter(email='clash@example.com').exists())
        self.assertFalse(Profile.objects.filter(email='clash@example.com').exists())

    def test_register_user_rolls_back_with_bridge(self):
        Student.objects.filter(pk=self.other_user.pk).update(email='clash@example.com')
        with self.assertRaises(ConstraintViolation):
            IdentityBridge.register_user('clash@example.com', SIGNUP_PASSWORD, {'full_name': 'Clash'})
        self.assertFalse(User.objects.filter(email='clash@example.com').exists())

    def test_admin_turning_profile_student_links_student_row(self):
        staff_user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(
            reverse('users:profile-detail', args=[staff_user.pk]), {'role': 'Student'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], Role.STUDENT)
        student = Student.objects.get(profile_id=staff_user.pk)
        self.assertEqual(student.email, 'warden@example.com')

        # The account now files leaves as its own student
        self.client.force_authenticate(user=User.objects.get(pk=staff_user.pk))
        response = self.client.post(reverse('attendance:leave-list'), {
            'start_date': '2024-04-01',
            'end_date': '2024-04-02',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data['student']), str(student.pk))

    def test_role_change_clashing_with_linked_student_is_rolled_back(self):
        staff_user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        Student.objects.filter(pk=self.other_user.pk).update(email='warden@example.com')
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.patch(
            reverse('users:profile-detail', args=[staff_user.pk]), {'role': 'Student'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Profile.objects.get(pk=staff_user.pk).role, Role.STAFF)
