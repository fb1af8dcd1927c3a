# apps/communication/tests.py

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Notice

User = get_user_model()


class NoticeAPITestCase(APITestCase):
    """Test cases for notices and their audiences"""

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
        Notice.objects.create(title='Water outage', message='No water on Friday.', audience=Notice.TargetAudience.ALL)
        Notice.objects.create(title='Rent reminder', message='Fees due soon.', audience=Notice.TargetAudience.STUDENTS)
        Notice.objects.create(title='Staff meeting', message='Monday 9am.', audience=Notice.TargetAudience.STAFF)

    def titles(self, user):
        self.client.force_authenticate(user=user)
        response = self.client.get(reverse('communication:notice-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return sorted(row['title'] for row in response.data['results'])

    def test_admin_sees_every_notice(self):
        self.assertEqual(self.titles(self.admin_user), ['Rent reminder', 'Staff meeting', 'Water outage'])

    def test_students_see_student_notices(self):
        self.assertEqual(self.titles(self.student_user), ['Rent reminder', 'Water outage'])

    def test_staff_see_staff_notices(self):
        self.assertEqual(self.titles(self.staff_user), ['Staff meeting', 'Water outage'])

    def test_student_cannot_open_staff_notice(self):
        notice = Notice.objects.get(title='Staff meeting')
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('communication:notice-detail', args=[notice.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_publishes_notice(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('communication:notice-list'), {
            'title': 'Fire drill',
            'message': 'Assemble at the gate at 10am.',
            'audience': 'students',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data['created_by']), str(self.admin_user.pk))

    def test_only_admins_publish(self):
        for user in (self.staff_user, self.student_user):
            self.client.force_authenticate(user=user)
            response = self.client.post(reverse('communication:notice-list'), {
                'title': 'Party', 'message': 'Tonight.', 'audience': 'all',
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
