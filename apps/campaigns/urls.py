from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdvertiserCampaignViewSet, CampaignAdminViewSet

advertiser_router = DefaultRouter()
advertiser_router.register(r'campaigns', AdvertiserCampaignViewSet, basename='advertiser-campaign')

admin_router = DefaultRouter()
admin_router.register(r'campaigns', CampaignAdminViewSet, basename='admin-campaign')

advertiser_urlpatterns = [
    path('', include(advertiser_router.urls)),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
