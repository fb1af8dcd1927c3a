# apps/finance/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views

app_name = 'finance'

router = DefaultRouter()
router.register(r'fees', views.FeeViewSet, basename='fee')
router.register(r'payments', views.PaymentViewSet, basename='payment')

urlpatterns = [
    path('', include(router.urls)),
]
