# apps/attendance/views.py
import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import InvalidInput, NotFound, PermissionDenied
from apps.core.mixins import PolicyScopedViewSetMixin
from apps.core.permissions import ATTENDANCE, LEAVES, RolePolicyPermission, StudentPolicy, policy_for
from apps.students.models import Student

from .models import AttendanceRecord, AttendanceSession, Leave
from .serializers import (
    AttendanceRecordSerializer, AttendanceSessionSerializer, BulkMarkSerializer,
    CalendarDaySerializer, DailySummarySerializer, LeaveSerializer, SessionLookupSerializer,
    StudentMonthlySummarySerializer,
)
from .services import AttendanceService, student_attendance_calendar, student_monthly_summary

logger = logging.getLogger(__name__)

POLICY_PERMISSIONS = [permissions.IsAuthenticated, RolePolicyPermission]


class AttendanceSessionViewSet(PolicyScopedViewSetMixin, viewsets.ReadOnlyModelViewSet):
    """
    Attendance sessions. Sessions are only ever created through
    ``get-or-create`` so that one exists per date, type and scope.
    """
    queryset = AttendanceSession.objects.select_related('room')
    serializer_class = AttendanceSessionSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = ATTENDANCE

    def get_queryset(self):
        queryset = super().get_queryset()
        session_date = self.request.query_params.get('date')
        if session_date:
            queryset = queryset.filter(session_date=session_date)
        session_type = self.request.query_params.get('session_type')
        if session_type:
            queryset = queryset.filter(session_type=session_type)
        return queryset

    @action(detail=False, methods=['post'], url_path='get-or-create')
    def get_or_create(self, request):
        serializer = SessionLookupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        session, created = AttendanceService.get_or_create_session(
            data['session_date'],
            data['session_type'],
            block=data.get('block'),
            room_id=data.get('room_id'),
            course=data.get('course'),
            year=data.get('year'),
            created_by=request.user,
        )
        return Response(
            AttendanceSessionSerializer(session).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    @action(detail=False, methods=['post'], url_path='bulk-mark')
    def bulk_mark(self, request):
        serializer = BulkMarkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        records = AttendanceService.bulk_mark_attendance(
            serializer.validated_data['session_id'],
            serializer.validated_data['records'],
            marked_by=request.user,
        )
        return Response(AttendanceRecordSerializer(records, many=True).data)

    @action(detail=False, methods=['get'])
    def summary(self, request):
        if isinstance(self.policy, StudentPolicy):
            raise PermissionDenied()
        sessions = AttendanceService.daily_summary(
            request.query_params.get('date_from'),
            request.query_params.get('date_to'),
        )
        return Response(DailySummarySerializer(sessions, many=True).data)


class AttendanceRecordViewSet(PolicyScopedViewSetMixin, viewsets.ReadOnlyModelViewSet):
    queryset = AttendanceRecord.objects.select_related('session', 'student')
    serializer_class = AttendanceRecordSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = ATTENDANCE
    student_lookup = 'student'

    def get_queryset(self):
        queryset = super().get_queryset()
        session_id = self.request.query_params.get('session')
        if session_id:
            queryset = queryset.filter(session_id=session_id)
        student_id = self.request.query_params.get('student')
        if student_id:
            queryset = queryset.filter(student_id=student_id)
        return queryset


def _scoped_student_month(request, student_id):
    """
    Refuse students outside the caller's scope with 404 and return the
    required ``month`` and ``year`` query parameters.
    """
    policy = policy_for(request.user)
    students = policy.scope(Student.objects.all(), student_lookup='pk')
    if not students.filter(pk=student_id).exists():
        raise NotFound('Student not found.')

    month = request.query_params.get('month')
    year = request.query_params.get('year')
    if not month or not year:
        raise InvalidInput('Both month and year are required.')
    return month, year


class StudentCalendarView(APIView):
    """
    ``GET /calendar/<student_id>/?month=&year=``: a student's month of
    attendance, one entry per day.
    """
    permission_classes = POLICY_PERMISSIONS
    policy_resource = ATTENDANCE

    def get(self, request, student_id):
        month, year = _scoped_student_month(request, student_id)
        days = student_attendance_calendar(
            student_id, month, year, session_type=request.query_params.get('session_type')
        )
        return Response(CalendarDaySerializer(list(days), many=True).data)


class StudentMonthlySummaryView(APIView):
    """
    ``GET /calendar/<student_id>/summary/?month=&year=``: how many of a
    student's marks in the month carry each status.
    """
    permission_classes = POLICY_PERMISSIONS
    policy_resource = ATTENDANCE

    def get(self, request, student_id):
        month, year = _scoped_student_month(request, student_id)
        summary = student_monthly_summary(student_id, month, year)
        return Response(StudentMonthlySummarySerializer(summary).data)


class LeaveViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    """
    Leaves of absence. Students file their own; Staff and Admins file for
    any student and approve.
    """
    queryset = Leave.objects.select_related('student', 'approved_by')
    serializer_class = LeaveSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = LEAVES
    student_lookup = 'student'
    student_owner_field = 'student'

    def perform_create(self, serializer):
        if isinstance(self.policy, StudentPolicy):
            super().perform_create(serializer)
            return
        if serializer.validated_data.get('student') is None:
            raise InvalidInput('A student is required.')
        serializer.save()

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        leave = self.get_object()
        leave.approved_by = request.user
        leave.save(update_fields=['approved_by', 'updated_at'])
        logger.info("Leave %s approved by %s", leave.pk, request.user)
        return Response(LeaveSerializer(leave).data)
