from rest_framework import serializers

from .models import AttendanceRecord, AttendanceSession, Leave


class AttendanceSessionSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttendanceSession
        fields = [
            'id', 'session_date', 'session_type', 'block', 'room', 'course',
            'year', 'created_by', 'created_at',
        ]
        read_only_fields = fields


class SessionLookupSerializer(serializers.Serializer):
    session_date = serializers.DateField()
    session_type = serializers.ChoiceField(choices=AttendanceSession.SessionType.choices)
    block = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    room_id = serializers.UUIDField(required=False, allow_null=True)
    course = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    year = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class AttendanceRecordSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.full_name', read_only=True)
    session_date = serializers.DateField(source='session.session_date', read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            'id', 'session', 'session_date', 'student', 'student_name', 'status',
            'late_minutes', 'note', 'marked_at', 'marked_by',
        ]
        read_only_fields = fields


class BulkMarkSerializer(serializers.Serializer):
    session_id = serializers.UUIDField()
    records = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class CalendarDaySerializer(serializers.Serializer):
    day = serializers.DateField()
    status = serializers.CharField()
    session_type = serializers.CharField(allow_null=True)
    note = serializers.CharField(allow_blank=True)


class StudentMonthlySummarySerializer(serializers.Serializer):
    student_id = serializers.UUIDField()
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    counts = serializers.DictField(child=serializers.IntegerField())
    total_marked = serializers.IntegerField()


class DailySummarySerializer(serializers.ModelSerializer):
    present_count = serializers.IntegerField()
    absent_count = serializers.IntegerField()
    late_count = serializers.IntegerField()
    excused_count = serializers.IntegerField()
    holiday_count = serializers.IntegerField()
    total_marked = serializers.IntegerField()

    class Meta:
        model = AttendanceSession
        fields = [
            'id', 'session_date', 'session_type', 'block', 'room', 'course', 'year',
            'present_count', 'absent_count', 'late_count', 'excused_count',
            'holiday_count', 'total_marked',
        ]


class LeaveSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.full_name', read_only=True)

    class Meta:
        model = Leave
        fields = [
            'id', 'student', 'student_name', 'start_date', 'end_date', 'reason',
            'approved_by', 'created_at',
        ]
        read_only_fields = ['approved_by', 'created_at']
        extra_kwargs = {'student': {'required': False}}

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': 'End date cannot be before start date.'})
        return attrs
