"""
ASGI config for the Lumen Ads project.

HTTP goes to Django; websocket connections are routed to the realtime
consumers, which authenticate with a JWT passed as ``?token=``.
"""

import os
from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings.local")

django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
import apps.realtime.routing  # noqa: E402

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": URLRouter(
        apps.realtime.routing.websocket_urlpatterns
    ),
})
