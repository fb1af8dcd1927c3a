from rest_framework import serializers

from .models import Student


class StudentSerializer(serializers.ModelSerializer):
    room_number = serializers.SerializerMethodField()

    class Meta:
        model = Student
        fields = [
            'id', 'profile', 'full_name', 'email', 'course', 'contact',
            'room_number', 'created_at', 'updated_at',
        ]
        read_only_fields = ['profile', 'created_at', 'updated_at']

    def get_room_number(self, obj):
        room = obj.current_room
        return room.room_number if room else None


class StudentSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Student
        fields = ['id', 'full_name', 'email', 'course']
