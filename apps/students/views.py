from django.db.models import Q
from rest_framework import permissions, viewsets

from apps.core.mixins import PolicyScopedViewSetMixin
from apps.core.permissions import STUDENTS, RolePolicyPermission

from .models import Student
from .serializers import StudentSerializer


class StudentViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    """
    Student records: Admins manage them, Staff read them, a Student reads
    only their own.
    """
    queryset = Student.objects.select_related('profile')
    serializer_class = StudentSerializer
    permission_classes = [permissions.IsAuthenticated, RolePolicyPermission]
    policy_resource = STUDENTS
    student_lookup = 'pk'

    def get_queryset(self):
        queryset = super().get_queryset()
        course = self.request.query_params.get('course')
        if course:
            queryset = queryset.filter(course__iexact=course)
        search = self.request.query_params.get('q')
        if search:
            queryset = queryset.filter(
                Q(full_name__icontains=search) | Q(email__icontains=search) | Q(course__icontains=search)
            )
        return queryset
