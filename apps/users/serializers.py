from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import Profile, Role, User


class ProfileSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(source='pk', read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id', 'full_name', 'role', 'email', 'mobile_number', 'course',
            'joining_date', 'created_at', 'updated_at',
        ]
        read_only_fields = ['email', 'created_at', 'updated_at']


class OwnProfileSerializer(ProfileSerializer):
    """Profile as edited by its owner: the role is not self-editable."""

    class Meta(ProfileSerializer.Meta):
        read_only_fields = ['role', 'email', 'created_at', 'updated_at']


class ProfileDetailsSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    full_name = serializers.CharField()
    role = serializers.CharField()
    email = serializers.EmailField()
    mobile_number = serializers.CharField()
    course = serializers.CharField()
    joining_date = serializers.DateField(allow_null=True)
    student_id = serializers.UUIDField(allow_null=True)
    room_number = serializers.CharField(allow_null=True)


class SignupSerializer(serializers.Serializer):
    """
    Sign-up payload: credentials plus the metadata the identity bridge reads.
    """
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    full_name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=Role.choices, default=Role.STUDENT)
    mobile_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    course = serializers.CharField(max_length=150, required=False, allow_blank=True)
    joining_date = serializers.DateField(required=False, allow_null=True)

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('A user with this email already exists.', code='unique')
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def metadata(self):
        data = dict(self.validated_data)
        data.pop('email')
        data.pop('password')
        if data.get('joining_date'):
            data['joining_date'] = data['joining_date'].isoformat()
        return data
