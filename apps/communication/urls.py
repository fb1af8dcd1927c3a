# apps/communication/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'communication'

router = DefaultRouter()
router.register(r'notices', views.NoticeViewSet, basename='notice')

urlpatterns = [
    path('', include(router.urls)),
]
