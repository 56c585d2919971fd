from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdvertiserCreativeViewSet, CreativeAdminViewSet

advertiser_router = DefaultRouter()
advertiser_router.register(r'creatives', AdvertiserCreativeViewSet, basename='advertiser-creative')

admin_router = DefaultRouter()
admin_router.register(r'creatives', CreativeAdminViewSet, basename='admin-creative')

advertiser_urlpatterns = [
    path('', include(advertiser_router.urls)),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
