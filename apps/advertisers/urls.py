from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdvertiserAdminViewSet, advertiser_profile

admin_router = DefaultRouter()
admin_router.register(r'advertisers', AdvertiserAdminViewSet, basename='admin-advertiser')

advertiser_urlpatterns = [
    path('profile/', advertiser_profile, name='advertiser_profile'),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
