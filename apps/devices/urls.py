from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DeviceAdminViewSet, PartnerDeviceViewSet

partner_router = DefaultRouter()
partner_router.register(r'devices', PartnerDeviceViewSet, basename='partner-device')

admin_router = DefaultRouter()
admin_router.register(r'devices', DeviceAdminViewSet, basename='admin-device')

partner_urlpatterns = [
    path('', include(partner_router.urls)),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
