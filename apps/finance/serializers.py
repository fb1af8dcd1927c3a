from rest_framework import serializers

from .models import Fee, Payment


class FeeSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.full_name', read_only=True)
    days_overdue = serializers.IntegerField(read_only=True)

    class Meta:
        model = Fee
        fields = [
            'id', 'student', 'student_name', 'amount', 'due_date', 'status',
            'payment_date', 'days_overdue', 'created_at', 'updated_at',
        ]
        read_only_fields = ['status', 'payment_date', 'created_at', 'updated_at']


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ['id', 'fee', 'student', 'amount', 'paid_on', 'received_by']
        read_only_fields = fields
