from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PartnerAdminViewSet, PartnerEarningViewSet, partner_profile

partner_router = DefaultRouter()
partner_router.register(r'earnings', PartnerEarningViewSet, basename='partner-earning')

admin_router = DefaultRouter()
admin_router.register(r'partners', PartnerAdminViewSet, basename='admin-partner')

partner_urlpatterns = [
    path('profile/', partner_profile, name='partner_profile'),
    path('', include(partner_router.urls)),
]

admin_urlpatterns = [
    path('', include(admin_router.urls)),
]
