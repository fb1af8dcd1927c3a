# apps/users/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'users'

router = DefaultRouter()
router.register(r'profiles', views.ProfileViewSet, basename='profile')

urlpatterns = [
    path('signup/', views.SignupView.as_view(), name='signup'),
    path('me/', views.ProfileViewSet.as_view({'get': 'me', 'patch': 'me'}, permission_classes=views.OWN_PROFILE_PERMISSIONS), name='me'),
    path('me/role/', views.ProfileViewSet.as_view({'get': 'my_role'}, permission_classes=views.OWN_PROFILE_PERMISSIONS), name='me-role'),
    path('', include(router.urls)),
]
