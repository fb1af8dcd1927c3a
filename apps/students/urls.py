from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'students'

router = DefaultRouter()
router.register(r'students', views.StudentViewSet, basename='student')

urlpatterns = [
    path('', include(router.urls)),
]
