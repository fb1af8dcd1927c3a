from rest_framework import serializers

from .models import MaintenanceRequest, Room, RoomAllocation, Visitor


class RoomSerializer(serializers.ModelSerializer):
    available_beds = serializers.IntegerField(read_only=True)

    class Meta:
        model = Room
        fields = [
            'id', 'room_number', 'room_type', 'capacity', 'occupants',
            'available_beds', 'status', 'created_at', 'updated_at',
        ]
        read_only_fields = ['occupants', 'created_at', 'updated_at']

    def validate_status(self, value):
        # Only the Maintenance flag is set by hand; occupancy drives the rest
        if self.instance is None and value == Room.Status.OCCUPIED:
            raise serializers.ValidationError('A new room cannot start out Occupied.')
        return value


class RoomAllocationSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.full_name', read_only=True)
    room_number = serializers.CharField(source='room.room_number', read_only=True)

    class Meta:
        model = RoomAllocation
        fields = [
            'id', 'student', 'student_name', 'room', 'room_number', 'start_date',
            'end_date', 'is_active', 'allocated_by', 'created_at',
        ]
        read_only_fields = fields


class AllocateRoomSerializer(serializers.Serializer):
    student_id = serializers.UUIDField()
    room_id = serializers.UUIDField()


class VisitorSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.full_name', read_only=True)

    class Meta:
        model = Visitor
        fields = [
            'id', 'student', 'student_name', 'visitor_name', 'check_in_time',
            'check_out_time', 'status', 'created_at',
        ]
        read_only_fields = ['check_out_time', 'status', 'created_at']


class MaintenanceRequestSerializer(serializers.ModelSerializer):
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)

    class Meta:
        model = MaintenanceRequest
        fields = [
            'id', 'room', 'room_number', 'reported_by', 'issue', 'status',
            'resolved_at', 'created_at', 'updated_at',
        ]
        read_only_fields = ['resolved_at', 'created_at', 'updated_at']

    def validate_status(self, value):
        if self.instance is None:
            if value != MaintenanceRequest.Status.PENDING:
                raise serializers.ValidationError('New requests start out Pending.')
        elif value != self.instance.status and not MaintenanceRequest.is_forward(self.instance.status, value):
            raise serializers.ValidationError(
                f'Cannot move a request from {self.instance.status} to {value}.'
            )
        return value

    def update(self, instance, validated_data):
        new_status = validated_data.pop('status', instance.status)
        instance = super().update(instance, validated_data)
        if new_status != instance.status:
            instance.advance(new_status)
        return instance


class AdvanceMaintenanceSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=MaintenanceRequest.Status.choices, required=False)
