from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AdvertiserAudienceViewSet, AudienceSegmentViewSet

advertiser_router = DefaultRouter()
advertiser_router.register(r'audiences', AdvertiserAudienceViewSet, basename='advertiser-audience')

admin_router = DefaultRouter()
admin_router.register(r'audiences', AudienceSegmentViewSet, basename='admin-audience')

advertiser_urlpatterns = [
    path('', include(advertiser_router.urls)),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
