# apps/attendance/tests.py

from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.exceptions import InvalidInput, NotFound
from apps.hostels.models import Room
from apps.students.models import Student

from .models import AttendanceRecord, AttendanceSession, Leave
from .services import (
    AttendanceService, bulk_mark_attendance, daily_summary, get_or_create_session,
    student_attendance_calendar, student_monthly_summary,
)

User = get_user_model()


class AttendanceSessionTestCase(TestCase):
    """Test cases for finding or opening attendance sessions"""

    def setUp(self):
        self.room = Room.objects.create(room_number='101')

    def test_same_scope_returns_same_session(self):
        first, created = get_or_create_session(date(2024, 3, 4), 'NightRoll', block='A')
        self.assertTrue(created)

        second, created = get_or_create_session('2024-03-04', 'NightRoll', block='A')
        self.assertFalse(created)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(AttendanceSession.objects.count(), 1)

    def test_blank_and_missing_filters_match(self):
        first, _ = get_or_create_session(date(2024, 3, 4), 'Morning', block='', course=None)
        second, created = get_or_create_session(date(2024, 3, 4), 'Morning', block=None, course='  ')
        self.assertFalse(created)
        self.assertEqual(first.pk, second.pk)

    def test_text_filters_ignore_case(self):
        first, _ = get_or_create_session(date(2024, 3, 4), 'Evening', course='BSc Nursing')
        second, created = get_or_create_session(date(2024, 3, 4), 'Evening', course='bsc nursing')
        self.assertFalse(created)
        self.assertEqual(first.pk, second.pk)

    def test_different_scope_opens_new_session(self):
        first, _ = get_or_create_session(date(2024, 3, 4), 'NightRoll')
        by_room, created = get_or_create_session(date(2024, 3, 4), 'NightRoll', room_id=self.room.pk)
        self.assertTrue(created)
        self.assertNotEqual(first.pk, by_room.pk)

        by_year, created = get_or_create_session(date(2024, 3, 4), 'NightRoll', year='2')
        self.assertTrue(created)
        self.assertEqual(by_year.year, 2)

        other_type, created = get_or_create_session(date(2024, 3, 4), 'Morning')
        self.assertTrue(created)
        self.assertEqual(AttendanceSession.objects.count(), 4)

    def test_invalid_arguments(self):
        with self.assertRaises(InvalidInput):
            get_or_create_session(date(2024, 3, 4), 'Lunch')
        with self.assertRaises(InvalidInput):
            get_or_create_session('yesterday', 'NightRoll')
        with self.assertRaises(NotFound):
            get_or_create_session(date(2024, 3, 4), 'NightRoll', room_id='not-a-uuid')

    def test_scope_is_unique_in_database(self):
        get_or_create_session(date(2024, 3, 4), 'NightRoll', block='A')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                AttendanceSession.objects.create(session_date=date(2024, 3, 4), session_type='NightRoll', block='a ')


class BulkMarkTestCase(TestCase):
    """Test cases for marking a batch of students"""

    def setUp(self):
        self.session, _ = get_or_create_session(date(2024, 3, 4), 'NightRoll')
        self.alice = Student.objects.create(full_name='Alice Kamau', email='alice@example.com')
        self.brian = Student.objects.create(full_name='Brian Otieno', email='brian@example.com')

    def test_marks_are_created(self):
        records = bulk_mark_attendance(self.session.pk, [
            {'student_id': str(self.alice.pk), 'status': 'Present'},
            {'student_id': str(self.brian.pk), 'status': 'Late', 'late_minutes': 15, 'note': 'Bus delay'},
        ])
        self.assertEqual(len(records), 2)
        late = AttendanceRecord.objects.get(session=self.session, student=self.brian)
        self.assertEqual(late.late_minutes, 15)
        self.assertEqual(late.note, 'Bus delay')

    def test_marking_again_overwrites(self):
        bulk_mark_attendance(self.session.pk, [{'student_id': str(self.alice.pk), 'status': 'Absent'}])
        first = AttendanceRecord.objects.get(session=self.session, student=self.alice)

        bulk_mark_attendance(self.session.pk, [{'student_id': str(self.alice.pk), 'status': 'Present'}])
        self.assertEqual(AttendanceRecord.objects.filter(session=self.session).count(), 1)
        second = AttendanceRecord.objects.get(session=self.session, student=self.alice)
        self.assertEqual(second.pk, first.pk)
        self.assertEqual(second.status, 'Present')
        self.assertGreaterEqual(second.marked_at, first.marked_at)

    def test_last_duplicate_in_batch_wins(self):
        bulk_mark_attendance(self.session.pk, [
            {'student_id': str(self.alice.pk), 'status': 'Absent'},
            {'student_id': str(self.alice.pk), 'status': 'Excused'},
        ])
        record = AttendanceRecord.objects.get(session=self.session, student=self.alice)
        self.assertEqual(record.status, 'Excused')

    def test_invalid_record_rejects_whole_batch(self):
        with self.assertRaises(InvalidInput):
            bulk_mark_attendance(self.session.pk, [
                {'student_id': str(self.alice.pk), 'status': 'Present'},
                {'student_id': str(self.brian.pk), 'status': 'Asleep'},
            ])
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_unknown_student_rejects_whole_batch(self):
        with self.assertRaises(InvalidInput):
            bulk_mark_attendance(self.session.pk, [
                {'student_id': str(self.alice.pk), 'status': 'Present'},
                {'student_id': str(self.session.pk), 'status': 'Present'},
            ])
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_negative_late_minutes(self):
        with self.assertRaises(InvalidInput):
            bulk_mark_attendance(self.session.pk, [
                {'student_id': str(self.alice.pk), 'status': 'Late', 'late_minutes': -5},
            ])

    def test_fractional_or_boolean_late_minutes_rejects_batch(self):
        for late_minutes in (2.5, True, '2.5'):
            with self.assertRaises(InvalidInput):
                bulk_mark_attendance(self.session.pk, [
                    {'student_id': str(self.alice.pk), 'status': 'Present'},
                    {'student_id': str(self.brian.pk), 'status': 'Late', 'late_minutes': late_minutes},
                ])
        self.assertFalse(AttendanceRecord.objects.exists())

        bulk_mark_attendance(self.session.pk, [
            {'student_id': str(self.brian.pk), 'status': 'Late', 'late_minutes': 10.0},
        ])
        self.assertEqual(AttendanceRecord.objects.get(student=self.brian).late_minutes, 10)

    def test_unknown_session(self):
        with self.assertRaises(NotFound):
            bulk_mark_attendance(self.alice.pk, [])

    def test_daily_summary(self):
        bulk_mark_attendance(self.session.pk, [
            {'student_id': str(self.alice.pk), 'status': 'Present'},
            {'student_id': str(self.brian.pk), 'status': 'Absent'},
        ])
        get_or_create_session(date(2024, 3, 10), 'NightRoll')

        summary = list(daily_summary('2024-03-01', '2024-03-05'))
        self.assertEqual(len(summary), 1)
        self.assertEqual(summary[0].present_count, 1)
        self.assertEqual(summary[0].absent_count, 1)
        self.assertEqual(summary[0].late_count, 0)
        self.assertEqual(summary[0].total_marked, 2)


class StudentCalendarTestCase(TestCase):
    """Test cases for the month calendar of a student"""

    def setUp(self):
        self.student = Student.objects.create(full_name='Alice Kamau', email='alice@example.com')
        session, _ = get_or_create_session(date(2024, 2, 10), 'NightRoll')
        bulk_mark_attendance(session.pk, [{'student_id': str(self.student.pk), 'status': 'Absent'}])

    def test_every_day_of_month(self):
        days = list(student_attendance_calendar(self.student.pk, 2, 2024))
        self.assertEqual(len(days), 29)
        self.assertEqual(days[0].day, date(2024, 2, 1))
        self.assertEqual(days[-1].day, date(2024, 2, 29))
        self.assertEqual(days[0].status, AttendanceRecord.UNMARKED)
        self.assertEqual(days[9].status, 'Absent')
        self.assertEqual(days[9].session_type, 'NightRoll')

    def test_calendar_can_be_iterated_again(self):
        calendar = student_attendance_calendar(self.student.pk, '2', '2024')
        self.assertEqual(len(calendar), 29)
        first = list(calendar)

        session, _ = get_or_create_session(date(2024, 2, 11), 'NightRoll')
        bulk_mark_attendance(session.pk, [{'student_id': str(self.student.pk), 'status': 'Present'}])

        second = list(calendar)
        self.assertEqual(first[10].status, AttendanceRecord.UNMARKED)
        self.assertEqual(second[10].status, 'Present')

    def test_latest_mark_of_the_day_is_reported(self):
        morning, _ = get_or_create_session(date(2024, 2, 10), 'Morning')
        AttendanceRecord.objects.create(
            session=morning, student=self.student, status='Present',
            marked_at=timezone.now() + timedelta(minutes=5)
        )
        days = list(student_attendance_calendar(self.student.pk, 2, 2024))
        self.assertEqual(days[9].status, 'Present')
        self.assertEqual(days[9].session_type, 'Morning')

        days = list(student_attendance_calendar(self.student.pk, 2, 2024, session_type='NightRoll'))
        self.assertEqual(days[9].status, 'Absent')

    def test_invalid_calendar_arguments(self):
        with self.assertRaises(InvalidInput):
            student_attendance_calendar(self.student.pk, 13, 2024)
        with self.assertRaises(InvalidInput):
            student_attendance_calendar(self.student.pk, 'feb', 2024)
        with self.assertRaises(NotFound):
            student_attendance_calendar('not-a-uuid', 2, 2024)

    def test_monthly_summary_counts_each_status(self):
        morning, _ = get_or_create_session(date(2024, 2, 11), 'Morning')
        evening, _ = get_or_create_session(date(2024, 2, 12), 'Evening')
        march, _ = get_or_create_session(date(2024, 3, 1), 'NightRoll')
        bulk_mark_attendance(morning.pk, [{'student_id': str(self.student.pk), 'status': 'Present'}])
        bulk_mark_attendance(evening.pk, [
            {'student_id': str(self.student.pk), 'status': 'Late', 'late_minutes': 20},
        ])
        bulk_mark_attendance(march.pk, [{'student_id': str(self.student.pk), 'status': 'Present'}])

        summary = student_monthly_summary(self.student.pk, 2, 2024)
        self.assertEqual(summary['student_id'], self.student.pk)
        self.assertEqual(summary['counts'], {
            'Present': 1, 'Absent': 1, 'Late': 1, 'Excused': 0, 'Holiday': 0,
        })
        self.assertEqual(summary['total_marked'], 3)

        empty = student_monthly_summary(self.student.pk, '1', '2024')
        self.assertEqual(empty['total_marked'], 0)
        self.assertEqual(set(empty['counts'].values()), {0})

    def test_invalid_monthly_summary_arguments(self):
        with self.assertRaises(InvalidInput):
            student_monthly_summary(self.student.pk, 0, 2024)
        with self.assertRaises(InvalidInput):
            student_monthly_summary(self.student.pk, 2.5, 2024)
        with self.assertRaises(NotFound):
            student_monthly_summary('not-a-uuid', 2, 2024)


class LeaveTestCase(TestCase):
    """Test cases for leaves of absence"""

    def setUp(self):
        self.student = Student.objects.create(full_name='Alice Kamau', email='alice@example.com')

    def test_total_days(self):
        leave = Leave.objects.create(student=self.student, start_date=date(2024, 4, 1), end_date=date(2024, 4, 3))
        self.assertEqual(leave.total_days, 3)
        self.assertTrue(leave.covers(date(2024, 4, 2)))
        self.assertFalse(leave.is_approved)

    def test_end_before_start_is_rejected(self):
        leave = Leave(student=self.student, start_date=date(2024, 4, 3), end_date=date(2024, 4, 1))
        with self.assertRaises(ValidationError):
            leave.full_clean()
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                leave.save()


class AttendanceAPITestCase(APITestCase):
    """Test cases for the attendance endpoints"""

    def setUp(self):
        self.staff_user = User.objects.create_user(
            email='warden@example.com', password='testpass123', user_metadata={'role': 'Staff'}
        )
        self.student_user = User.objects.create_user(
            email='amina@example.com', password='testpass123',
            user_metadata={'role': 'Student', 'full_name': 'Amina Njeri'}
        )
        self.student = Student.objects.get(pk=self.student_user.pk)
        self.other = Student.objects.create(full_name='Peter Mwangi', email='peter@example.com')

    def test_get_or_create_endpoint(self):
        self.client.force_authenticate(user=self.staff_user)
        url = reverse('attendance:session-get-or-create')
        payload = {'session_date': '2024-03-04', 'session_type': 'NightRoll', 'block': 'A'}

        response = self.client.post(url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        session_id = response.data['id']

        response = self.client.post(url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], session_id)

    def test_bulk_mark_endpoint(self):
        session, _ = get_or_create_session(date(2024, 3, 4), 'NightRoll')
        self.client.force_authenticate(user=self.staff_user)
        response = self.client.post(reverse('attendance:session-bulk-mark'), {
            'session_id': str(session.pk),
            'records': [
                {'student_id': str(self.student.pk), 'status': 'Present'},
                {'student_id': str(self.other.pk), 'status': 'Absent'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        response = self.client.post(reverse('attendance:session-bulk-mark'), {
            'session_id': str(session.pk),
            'records': [{'student_id': str(self.student.pk), 'status': 'Asleep'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'InvalidInput')

    def test_student_cannot_mark(self):
        session, _ = get_or_create_session(date(2024, 3, 4), 'NightRoll')
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('attendance:session-bulk-mark'), {
            'session_id': str(session.pk),
            'records': [{'student_id': str(self.student.pk), 'status': 'Present'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.get(reverse('attendance:session-summary'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_calendar_endpoint(self):
        self.client.force_authenticate(user=self.student_user)
        url = reverse('attendance:student_calendar', args=[self.student.pk])
        response = self.client.get(url, {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 30)
        self.assertEqual(response.data[0]['status'], AttendanceRecord.UNMARKED)

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        other_url = reverse('attendance:student_calendar', args=[self.other.pk])
        response = self.client.get(other_url, {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_monthly_summary_endpoint(self):
        session, _ = get_or_create_session(date(2024, 4, 8), 'NightRoll')
        bulk_mark_attendance(session.pk, [
            {'student_id': str(self.student.pk), 'status': 'Absent'},
            {'student_id': str(self.other.pk), 'status': 'Present'},
        ])

        self.client.force_authenticate(user=self.student_user)
        url = reverse('attendance:student_monthly_summary', args=[self.student.pk])
        response = self.client.get(url, {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['Absent'], 1)
        self.assertEqual(response.data['counts']['Present'], 0)
        self.assertEqual(response.data['total_marked'], 1)

        response = self.client.get(url, {'month': 4})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        other_url = reverse('attendance:student_monthly_summary', args=[self.other.pk])
        response = self.client.get(other_url, {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.staff_user)
        response = self.client.get(other_url, {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['Present'], 1)

    def test_student_files_leave_for_self(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('attendance:leave-list'), {
            'student': str(self.other.pk),
            'start_date': '2024-04-01',
            'end_date': '2024-04-05',
            'reason': 'Family visit',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data['student']), str(self.student.pk))

    def test_leave_dates_are_validated(self):
        self.client.force_authenticate(user=self.student_user)
        response = self.client.post(reverse('attendance:leave-list'), {
            'start_date': '2024-04-05',
            'end_date': '2024-04-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_staff_approves_leave(self):
        leave = Leave.objects.create(student=self.student, start_date=date(2024, 4, 1), end_date=date(2024, 4, 2))
        self.client.force_authenticate(user=self.staff_user)
        response = self.client.post(reverse('attendance:leave-approve', args=[leave.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        leave.refresh_from_db()
        self.assertEqual(leave.approved_by, self.staff_user)

    def test_student_cannot_see_other_records(self):
        session, _ = get_or_create_session(date(2024, 3, 4), 'NightRoll')
        AttendanceService.bulk_mark_attendance(session.pk, [
            {'student_id': str(self.other.pk), 'status': 'Present'},
        ])
        self.client.force_authenticate(user=self.student_user)
        response = self.client.get(reverse('attendance:record-list'))
        self.assertEqual(response.data['count'], 0)
