# apps/users/views.py
import logging

from django.db import transaction
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.exceptions import PermissionDenied
from apps.core.mixins import PolicyScopedViewSetMixin
from apps.core.permissions import PROFILES, RolePolicyPermission, get_user_role

from .models import Profile, Role
from .serializers import (
    OwnProfileSerializer, ProfileDetailsSerializer, ProfileSerializer, SignupSerializer,
)
from .services import IdentityBridge, get_user_profile_details, get_user_roles

logger = logging.getLogger(__name__)

OWN_PROFILE_PERMISSIONS = [permissions.IsAuthenticated]


class ProfileViewSet(PolicyScopedViewSetMixin,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.UpdateModelMixin,
                     viewsets.GenericViewSet):
    """
    Profiles. Admins manage every profile, Staff read them, Students only
    see their own. ``me`` lets any account read and edit its own profile.
    """
    queryset = Profile.objects.all()
    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated, RolePolicyPermission]
    policy_resource = PROFILES
    user_lookup = 'user'

    def perform_update(self, serializer):
        with transaction.atomic():
            profile = serializer.save()
            # A profile turned Student needs its student row
            if profile.role == Role.STUDENT:
                IdentityBridge.link_student(profile)
        logger.info("Updated profile %s (%s)", profile.pk, profile.role)

    @action(detail=False, methods=['get', 'patch'], permission_classes=OWN_PROFILE_PERMISSIONS)
    def me(self, request):
        profile = Profile.objects.filter(user=request.user).first()
        if profile is None:
            profile = IdentityBridge.handle_new_user(request.user)

        if request.method == 'GET':
            return Response(OwnProfileSerializer(profile).data)

        serializer = OwnProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @action(detail=False, methods=['get'], url_path='me/role', permission_classes=OWN_PROFILE_PERMISSIONS)
    def my_role(self, request):
        return Response({'role': get_user_role(request.user), 'roles': get_user_roles(request.user)})

    @action(detail=True, methods=['get'])
    def details(self, request, pk=None):
        profile = self.get_object()
        data = get_user_profile_details(profile.pk)
        return Response(ProfileDetailsSerializer(data).data)


class SignupView(APIView):
    """
    Create an account from a sign-up payload.

    Anyone may sign up as a Student; only Admins may create Staff or Admin
    accounts.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        role = serializer.validated_data['role']
        if role != Role.STUDENT and get_user_role(request.user) != Role.ADMIN:
            raise PermissionDenied('Only an Admin can create %(role)s accounts.', params={'role': role})

        user = IdentityBridge.register_user(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
            metadata=serializer.metadata(),
        )
        logger.info("Signed up %s as %s", user.email, role)
        return Response(ProfileSerializer(user.profile).data, status=status.HTTP_201_CREATED)
