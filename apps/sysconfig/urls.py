from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

admin_router = DefaultRouter()
admin_router.register(r'feature-flags', views.FeatureFlagViewSet, basename='admin-feature-flag')

admin_urlpatterns = [
    path('settings/', views.SystemSettingsView.as_view(), name='admin_settings'),
    path('settings/audit/', views.SettingsAuditView.as_view(), name='admin_settings_audit'),
    path('', include(admin_router.urls)),
]

public_urlpatterns = [
    path('public/settings/', views.public_settings, name='public_settings'),
    path('features/check/', views.feature_check, name='feature_check'),
]
