"""
URL configuration for the analytics app.
"""

from django.urls import path

from . import views

app_name = 'analytics'

urlpatterns = [
    path('dashboard/', views.DashboardView.as_view(), name='dashboard'),
    path('user-growth/', views.UserGrowthView.as_view(), name='user-growth'),
    path('engagement/', views.EngagementView.as_view(), name='engagement'),
    path('top-contributors/', views.TopContributorsView.as_view(), name='top-contributors'),
    path('activity/', views.ActivityByRoleView.as_view(), name='activity'),
]
