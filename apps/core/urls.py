# apps/core/urls.py
from django.urls import path

from . import views

app_name = 'core'

urlpatterns = [
    path('search/', views.UniversalSearchView.as_view(), name='universal_search'),
]
