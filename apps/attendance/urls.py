# apps/attendance/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'attendance'

router = DefaultRouter()
router.register(r'sessions', views.AttendanceSessionViewSet, basename='session')
router.register(r'records', views.AttendanceRecordViewSet, basename='record')
router.register(r'leaves', views.LeaveViewSet, basename='leave')

urlpatterns = [
    path('calendar/<uuid:student_id>/', views.StudentCalendarView.as_view(), name='student_calendar'),
    path(
        'calendar/<uuid:student_id>/summary/',
        views.StudentMonthlySummaryView.as_view(),
        name='student_monthly_summary'
    ),
    path('', include(router.urls)),
]
