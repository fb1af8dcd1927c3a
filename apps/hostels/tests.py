# apps/hostels/tests.py

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import AlreadyInTerminalState, CapacityExceeded, InvalidInput, NotFound
from apps.students.models import Student

from .models import MaintenanceRequest, Room, RoomAllocation, Visitor
from .services import AllocationService, get_unallocated_students, update_room_occupancy

User = get_user_model()


class RoomAllocationServiceTestCase(TestCase):
    """Test cases for room allocation and occupancy"""

    def setUp(self):
        self.room = Room.objects.create(room_number='101', room_type=Room.RoomType.DOUBLE)
        self.other_room = Room.objects.create(room_number='102', room_type=Room.RoomType.TRIPLE)
        self.alice = Student.objects.create(full_name='Alice Kamau', email='alice@example.com')
        self.brian = Student.objects.create(full_name='Brian Otieno', email='brian@example.com')
        self.carol = Student.objects.create(full_name='Carol Achieng', email='carol@example.com')

    def test_capacity_defaults_from_room_type(self):
        self.assertEqual(self.room.capacity, 2)
        self.assertEqual(self.other_room.capacity, 3)
        self.assertEqual(Room.objects.create(room_number='103', capacity=4).capacity, 4)

    def test_room_fills_up_and_refuses_third_student(self):
        AllocationService.allocate_room(self.alice.pk, self.room.pk)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupants, 1)
        self.assertEqual(self.room.status, Room.Status.VACANT)

        AllocationService.allocate_room(self.brian.pk, self.room.pk)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupants, 2)
        self.assertEqual(self.room.status, Room.Status.OCCUPIED)

        with self.assertRaises(CapacityExceeded):
            AllocationService.allocate_room(self.carol.pk, self.room.pk)

        self.room.refresh_from_db()
        self.assertEqual(self.room.occupants, 2)
        self.assertFalse(RoomAllocation.objects.filter(student=self.carol).exists())

    def test_release_frees_a_bed(self):
        first = AllocationService.allocate_room(self.alice.pk, self.room.pk)
        AllocationService.allocate_room(self.brian.pk, self.room.pk)

        released = AllocationService.release_allocation(first.pk)
        self.assertFalse(released.is_active)
        self.assertIsNotNone(released.end_date)

        self.room.refresh_from_db()
        self.assertEqual(self.room.occupants, 1)
        self.assertEqual(self.room.status, Room.Status.VACANT)

        AllocationService.allocate_room(self.carol.pk, self.room.pk)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupants, 2)

    def test_release_twice_is_not_found(self):
        allocation = AllocationService.allocate_room(self.alice.pk, self.room.pk)
        AllocationService.release_allocation(allocation.pk)
        with self.assertRaises(NotFound):
            AllocationService.release_allocation(allocation.pk)

    def test_moving_closes_previous_allocation(self):
        first = AllocationService.allocate_room(self.alice.pk, self.room.pk)
        second = AllocationService.allocate_room(self.alice.pk, self.other_room.pk)

        first.refresh_from_db()
        self.assertFalse(first.is_active)
        self.assertTrue(second.is_active)
        self.assertEqual(RoomAllocation.objects.filter(student=self.alice, is_active=True).count(), 1)

        self.room.refresh_from_db()
        self.other_room.refresh_from_db()
        self.assertEqual(self.room.occupants, 0)
        self.assertEqual(self.other_room.occupants, 1)

    def test_one_active_allocation_per_student(self):
        RoomAllocation.objects.create(student=self.alice, room=self.room)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                RoomAllocation.objects.create(student=self.alice, room=self.other_room)

    def test_unknown_room_or_student(self):
        with self.assertRaises(NotFound):
            AllocationService.allocate_room(self.alice.pk, 'not-a-uuid')
        with self.assertRaises(NotFound):
            AllocationService.allocate_room(self.room.pk, self.room.pk)

    def test_maintenance_status_is_kept(self):
        Room.objects.filter(pk=self.room.pk).update(status=Room.Status.MAINTENANCE)
        AllocationService.allocate_room(self.alice.pk, self.room.pk)
        AllocationService.allocate_room(self.brian.pk, self.room.pk)
        self.room.refresh_from_db()
        self.assertEqual(self.room.occupants, 2)
        self.assertEqual(self.room.status, Room.Status.MAINTENANCE)

    def test_stale_instance_does_not_clear_maintenance(self):
        stale = Room.objects.get(pk=self.room.pk)
        Room.objects.filter(pk=self.room.pk).update(status=Room.Status.MAINTENANCE)
        update_room_occupancy(stale)
        self.assertEqual(stale.status, Room.Status.MAINTENANCE)

    def test_unallocated_students(self):
        AllocationService.allocate_room(self.alice.pk, self.room.pk)
        names = list(get_unallocated_students().values_list('full_name', flat=True))
        self.assertEqual(names, ['Brian Otieno', 'Carol Achieng'])


class VisitorAndMaintenanceTestCase(TestCase):
    """Test cases for visitor check-out and maintenance progress"""

    def setUp(self):
        self.room = Room.objects.create(room_number='101')
        self.student = Student.objects.create(full_name='Alice Kamau', email='alice@example.com')

    def test_visitor_checks_out_once(self):
        visitor = Visitor.objects.create(student=self.student, visitor_name='Mama Alice')
        self.assertEqual(visitor.status, Visitor.Status.IN)

        visitor.check_out()
        visitor.refresh_from_db()
        self.assertEqual(visitor.status, Visitor.Status.OUT)
        self.assertIsNotNone(visitor.check_out_time)

        with self.assertRaises(AlreadyInTerminalState):
            visitor.check_out()

    def test_check_out_before_check_in_is_invalid(self):
        visitor = Visitor.objects.create(student=self.student, visitor_name='Mama Alice')
        with self.assertRaises(InvalidInput):
            visitor.check_out(visitor.check_in_time - timedelta(hours=1))

    def test_maintenance_moves_forward_only(self):
        request = MaintenanceRequest.objects.create(room=self.room, reported_by=self.student, issue='Leaking tap')
        self.assertEqual(request.status, MaintenanceRequest.Status.PENDING)

        request.advance()
        self.assertEqual(request.status, MaintenanceRequest.Status.IN_PROGRESS)

        with self.assertRaises(InvalidInput):
            request.advance(MaintenanceRequest.Status.PENDING)

        request.advance(MaintenanceRequest.Status.RESOLVED)
        self.assertIsNotNone(request.resolved_at)

        with self.assertRaises(AlreadyInTerminalState):
            request.advance()


class HostelAPITestCase(APITestCase):
    """Test cases for the hostel endpoints"""

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
        self.room = Room.objects.create(room_number='101', room_type=Room.RoomType.SINGLE)

    def allocate(self, student):
        return self.client.post(reverse('hostels:allocation-allocate'), {
            'student_id': str(student.pk),
            'room_id': str(self.room.pk),
        }, format='json')

    def test_admin_allocates_until_full(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.allocate(self.student)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['room_number'], '101')

        response = self.allocate(self.other)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'CapacityExceeded')

    def test_staff_cannot_allocate(self):
        self.client.force_authenticate(user=self.staff_user)
        response = self.allocate(self.student)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_room_with_default_capacity(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('hostels:room-list'), {
            'room_number': '201', 'room_type': 'Triple',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['capacity'], 3)
        self.assertEqual(response.data['status'], Room.Status.VACANT)

    def test_release_endpoint(self):
        allocation = AllocationService.allocate_room(self.student.pk, self.room.pk)
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('hostels:allocation-release', args=[allocation.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_student_sees_only_own_allocations(self):
        AllocationService.allocate_room(self.other.pk, self.room.pk)
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('hostels:allocation-list'))
        self.assertEqual(response.data['count'], 0)

    def test_student_reports_maintenance_for_self(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('hostels:maintenance-list'), {
            'room': str(self.room.pk),
            'reported_by': str(self.other.pk),
            'issue': 'Broken window',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data['reported_by']), str(self.student.pk))
        self.assertEqual(response.data['status'], MaintenanceRequest.Status.PENDING)

    def test_student_cannot_advance_maintenance(self):
        request = MaintenanceRequest.objects.create(room=self.room, reported_by=self.student, issue='Broken window')
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('hostels:maintenance-advance', args=[request.pk]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_advances_maintenance(self):
        request = MaintenanceRequest.objects.create(room=self.room, reported_by=self.student, issue='Broken window')
        self.client.force_authenticate(user=self.staff_user)
        response = self.client.post(
            reverse('hostels:maintenance-advance', args=[request.pk]), {'status': 'Resolved'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], MaintenanceRequest.Status.RESOLVED)

        response = self.client.post(reverse('hostels:maintenance-advance', args=[request.pk]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'AlreadyInTerminalState')

    def test_staff_checks_visitor_out(self):
        visitor = Visitor.objects.create(student=self.student, visitor_name='Mama Amina')
        self.client.force_authenticate(user=self.staff_user)
        url = reverse('hostels:visitor-check-out', args=[visitor.pk])
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Visitor.Status.OUT)

        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_unallocated_students_endpoint(self):
        AllocationService.allocate_room(self.student.pk, self.room.pk)
        self.client.force_authenticate(user=self.staff_user)
        response = self.client.get(reverse('hostels:unallocated-student-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['full_name'] for row in response.data], ['Peter Mwangi'])
