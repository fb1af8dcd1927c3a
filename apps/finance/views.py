# apps/finance/views.py
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import AlreadyInTerminalState
from apps.core.mixins import PolicyScopedViewSetMixin
from apps.core.permissions import FEES, PAYMENTS, RolePolicyPermission

from .models import Fee, Payment
from .serializers import FeeSerializer, PaymentSerializer
from .services import PaymentService


class FeeViewSet(PolicyScopedViewSetMixin, viewsets.ModelViewSet):
    """
    Fees. Admins manage them; Students see and pay their own.
    """
    queryset = Fee.objects.select_related('student')
    serializer_class = FeeSerializer
    permission_classes = [permissions.IsAuthenticated, RolePolicyPermission]
    policy_resource = FEES
    student_lookup = 'student'

    def get_queryset(self):
        queryset = super().get_queryset()
        fee_status = self.request.query_params.get('status')
        if fee_status:
            queryset = queryset.filter(status=fee_status)
        return queryset

    def perform_update(self, serializer):
        if serializer.instance.status == Fee.FeeStatus.PAID:
            raise AlreadyInTerminalState('A paid fee can no longer be changed.')
        serializer.save()

    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        fee = self.get_object()
        payment = PaymentService.process_fee_payment(fee.pk, actor=request.user)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentViewSet(PolicyScopedViewSetMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Payment.objects.select_related('fee', 'student')
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated, RolePolicyPermission]
    policy_resource = PAYMENTS
    student_lookup = 'student'
