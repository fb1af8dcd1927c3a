# apps/communication/views.py
from rest_framework import permissions, viewsets

from apps.core.mixins import PolicyScopedViewSetMixin
from apps.core.permissions import NOTICES, RolePolicyPermission

from .models import Notice
from .serializers import NoticeSerializer


class NoticeViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    """
    Notices. Admins publish them; everyone else reads the notices addressed
    to their role.
    """
    queryset = Notice.objects.select_related('created_by')
    serializer_class = NoticeSerializer
    permission_classes = [permissions.IsAuthenticated, RolePolicyPermission]
    policy_resource = NOTICES

    def get_queryset(self):
        queryset = super().get_queryset()
        audiences = self.policy.notice_audiences
        if audiences is None:
            return queryset
        return queryset.filter(audience__in=audiences)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)
