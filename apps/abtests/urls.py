from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ABTestAdminViewSet, AdvertiserABTestViewSet

advertiser_router = DefaultRouter()
advertiser_router.register(r'abtests', AdvertiserABTestViewSet, basename='advertiser-abtest')

admin_router = DefaultRouter()
admin_router.register(r'abtests', ABTestAdminViewSet, basename='admin-abtest')

advertiser_urlpatterns = [
    path('', include(advertiser_router.urls)),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
