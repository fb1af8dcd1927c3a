# apps/students/tests.py

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.hostels.models import Room
from apps.hostels.services import AllocationService

from .models import Student

User = get_user_model()


class StudentAPITestCase(APITestCase):
    """Test cases for the student endpoints"""

    def setUp(self):
        self.admin_user = User.objects.create_user(
            email='admin@example.com', password='testpass123', user_metadata={'role': 'Admin'}
        )
        self.staff_user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        self.student_user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri', 'course': 'BSc Nursing'}
        )
        self.student = Student.objects.get(pk=self.student_user.pk)
        self.other = Student.objects.create(full_name='Peter Mwangi', email='peter@example.com', course='BCom')

    def test_admin_creates_student(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('students:student-list'), {
            'full_name': 'Joy Wanjiku',
            'email': 'joy@example.com',
            'course': 'BSc Nursing',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['room_number'])

    def test_duplicate_email_is_a_conflict(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('students:student-list'), {
            'full_name': 'Peter Again',
            'email': 'peter@example.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'ConstraintViolation')

    def test_staff_reads_but_cannot_create(self):
        self.client.force_authenticate(user=self.staff_user)
        response = self.client.get(reverse('students:student-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        response = self.client.post(reverse('students:student-list'), {
            'full_name': 'Joy Wanjiku', 'email': 'joy@example.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_student_sees_only_self(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('students:student-list'))
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['email'], 'amina@example.com')

        response = self.client.get(reverse('students:student-detail', args=[self.other.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_filter_by_course(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(reverse('students:student-list'), {'course': 'bsc nursing'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['full_name'], 'Amina Njeri')

    def test_search_matches_name_email_or_course(self):
        Student.objects.create(full_name='Grace Wanjiru', email='grace@example.com', course='BSc Computing')
        self.client.force_authenticate(user=self.staff_user)
        url = reverse('students:student-list')

        response = self.client.get(url, {'q': 'mwangi'})
        self.assertEqual([row['full_name'] for row in response.data['results']], ['Peter Mwangi'])

        response = self.client.get(url, {'q': 'GRACE@'})
        self.assertEqual([row['full_name'] for row in response.data['results']], ['Grace Wanjiru'])

        response = self.client.get(url, {'q': 'bsc'})
        self.assertEqual(response.data['count'], 2)

        response = self.client.get(url, {'q': 'nobody'})
        self.assertEqual(response.data['count'], 0)

    def test_search_stays_within_own_scope(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('students:student-list'), {'q': 'example.com'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['full_name'], 'Amina Njeri')

    def test_current_room(self):
        room = Room.objects.create(room_number='B4', room_type=Room.RoomType.SINGLE)
        AllocationService.allocate_room(self.student.pk, room.pk)
        self.assertEqual(self.student.current_room, room)

        self.client.force_authenticate(user=self.admin_user)
        response = self.client.get(reverse('students:student-detail', args=[self.student.pk]))
        self.assertEqual(response.data['room_number'], 'B4')
