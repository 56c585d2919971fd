"""
URL configuration for the Lumen Ads API.

Each app exposes one pattern list per portal (``advertiser_urlpatterns``,
``partner_urlpatterns``, ``admin_urlpatterns``); they are mounted under the
portal prefixes that PortalAccessMiddleware guards by role.
"""

from django.contrib import admin
from django.urls import path
from django.urls import include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView

from apps.abtests import urls as abtest_urls
from apps.advertisers import urls as advertiser_urls
from apps.analytics import urls as analytics_urls
from apps.audiences import urls as audience_urls
from apps.billing import urls as billing_urls
from apps.campaigns import urls as campaign_urls
from apps.creatives import urls as creative_urls
from apps.devices import urls as device_urls
from apps.notifications import urls as notification_urls
from apps.partners import urls as partner_urls
from apps.sysconfig import urls as sysconfig_urls


def home_view(request):
    return JsonResponse({
        "message": "Lumen Ads API",
        "status": "running",
        "endpoints": {
            "admin": "/admin/",
            "api": "/api/v1/",
            "docs": "/api/docs/",
            "schema": "/api/schema/",
            "websocket": "/ws/notifications/?token=<access token>",
        }
    })


def portal(*modules, attr):
    patterns = []
    for module in modules:
        patterns.extend(getattr(module, attr))
    return patterns


advertiser_portal = portal(advertiser_urls, campaign_urls, creative_urls, abtest_urls, audience_urls,
                           billing_urls, attr="advertiser_urlpatterns")
partner_portal = portal(partner_urls, device_urls, billing_urls, attr="partner_urlpatterns")
admin_portal = portal(advertiser_urls, partner_urls, device_urls, audience_urls, campaign_urls, creative_urls,
                      abtest_urls, analytics_urls, sysconfig_urls, attr="admin_urlpatterns")

urlpatterns = [
    path("", home_view, name="home"),
    path("admin/", admin.site.urls),
    path("api/v1/auth/", include("apps.authentication.urls")),
    path("api/v1/account-settings/", include("apps.authentication.account_urls")),
    path("api/v1/admin/", include("apps.authentication.admin_urls")),
    path("api/v1/admin/", include(admin_portal)),
    path("api/v1/advertiser/", include(advertiser_portal)),
    path("api/v1/partner/", include(partner_portal)),
    path("api/v1/notifications/", include(notification_urls.urlpatterns)),
    path("api/v1/", include(notification_urls.contact_urlpatterns)),
    path("api/v1/", include(sysconfig_urls.public_urlpatterns)),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
