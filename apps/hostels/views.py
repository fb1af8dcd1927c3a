# apps/hostels/views.py
import logging

from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.mixins import PolicyScopedViewSetMixin
from apps.core.permissions import (
    ALLOCATIONS, MAINTENANCE, ROOMS, STUDENTS, VISITORS, RolePolicyPermission,
)
from apps.students.serializers import StudentSummarySerializer

from .models import MaintenanceRequest, Room, RoomAllocation, Visitor
from .serializers import (
    AdvanceMaintenanceSerializer, AllocateRoomSerializer, MaintenanceRequestSerializer,
    RoomAllocationSerializer, RoomSerializer, VisitorSerializer,
)
from .services import AllocationService, update_room_occupancy

logger = logging.getLogger(__name__)

POLICY_PERMISSIONS = [permissions.IsAuthenticated, RolePolicyPermission]


class RoomViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    """
    Rooms are visible to every role; only Admins manage them.
    """
    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = ROOMS

    def get_queryset(self):
        queryset = super().get_queryset()
        room_status = self.request.query_params.get('status')
        if room_status:
            queryset = queryset.filter(status=room_status)
        room_type = self.request.query_params.get('room_type')
        if room_type:
            queryset = queryset.filter(room_type=room_type)
        return queryset

    def perform_update(self, serializer):
        room = serializer.save()
        # Capacity or the Maintenance flag may have changed
        update_room_occupancy(room)

    @action(detail=True, methods=['get'])
    def residents(self, request, pk=None):
        room = self.get_object()
        allocations = room.allocations.filter(is_active=True).select_related('student', 'room')
        return Response(RoomAllocationSerializer(allocations, many=True).data)


class RoomAllocationViewSet(PolicyScopedViewSetMixin, viewsets.ReadOnlyModelViewSet):
    """
    Allocation history. ``allocate`` and ``release`` are the only writes.
    """
    queryset = RoomAllocation.objects.select_related('student', 'room')
    serializer_class = RoomAllocationSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = ALLOCATIONS
    student_lookup = 'student'

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get('active') in ('1', 'true', 'True'):
            queryset = queryset.filter(is_active=True)
        return queryset

    @action(detail=False, methods=['post'])
    def allocate(self, request):
        serializer = AllocateRoomSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        allocation = AllocationService.allocate_room(
            serializer.validated_data['student_id'],
            serializer.validated_data['room_id'],
            allocated_by=request.user,
        )
        return Response(RoomAllocationSerializer(allocation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def release(self, request, pk=None):
        allocation = self.get_object()
        allocation = AllocationService.release_allocation(allocation.pk)
        return Response(RoomAllocationSerializer(allocation).data)


class UnallocatedStudentViewSet(PolicyScopedViewSetMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Students without an active room."""
    serializer_class = StudentSummarySerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = STUDENTS
    student_lookup = 'pk'
    pagination_class = None

    def get_queryset(self):
        return self.policy.scope(AllocationService.get_unallocated_students(), student_lookup=self.student_lookup)


class VisitorViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    queryset = Visitor.objects.select_related('student')
    serializer_class = VisitorSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = VISITORS
    student_lookup = 'student'

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get('inside') in ('1', 'true', 'True'):
            queryset = queryset.filter(status=Visitor.Status.IN)
        return queryset

    @action(detail=True, methods=['post'], url_path='check-out')
    def check_out(self, request, pk=None):
        visitor = self.get_object()
        visitor.check_out()
        logger.info("Visitor %s checked out", visitor.pk)
        return Response(VisitorSerializer(visitor).data)


class MaintenanceRequestViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    """
    Students report issues and follow their own requests; Staff and Admins
    work through them.
    """
    queryset = MaintenanceRequest.objects.select_related('room', 'reported_by')
    serializer_class = MaintenanceRequestSerializer
    permission_classes = POLICY_PERMISSIONS
    policy_resource = MAINTENANCE
    student_lookup = 'reported_by'
    student_owner_field = 'reported_by'

    def get_queryset(self):
        queryset = super().get_queryset()
        request_status = self.request.query_params.get('status')
        if request_status:
            queryset = queryset.filter(status=request_status)
        return queryset

    @action(detail=True, methods=['post'])
    def advance(self, request, pk=None):
        maintenance_request = self.get_object()
        serializer = AdvanceMaintenanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        maintenance_request.advance(serializer.validated_data.get('status'))
        logger.info("Maintenance request %s moved to %s", maintenance_request.pk, maintenance_request.status)
        return Response(MaintenanceRequestSerializer(maintenance_request).data)
