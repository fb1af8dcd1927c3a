# apps/hostels/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'hostels'

router = DefaultRouter()
router.register(r'rooms', views.RoomViewSet, basename='room')
router.register(r'allocations', views.RoomAllocationViewSet, basename='allocation')
router.register(r'unallocated-students', views.UnallocatedStudentViewSet, basename='unallocated-student')
router.register(r'visitors', views.VisitorViewSet, basename='visitor')
router.register(r'maintenance', views.MaintenanceRequestViewSet, basename='maintenance')

urlpatterns = [
    path('', include(router.urls)),
]
