"""
URL configuration for OneVote project.
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes, renderer_classes
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response


@api_view(["GET"])
@permission_classes([AllowAny])
@renderer_classes([JSONRenderer])
def api_root(request):
    """API root endpoint that lists available endpoints."""
    data = {
        "message": "Welcome to OneVote API",
        "version": "1.0.0",
        "endpoints": {
            "vote": "/api/vote",
            "results": "/api/results",
            "status": "/api/status",
            "admin_logs": "/api/admin/logs",
        },
    }

    return Response(data)


urlpatterns = [
    path("admin/", admin.site.urls),
    # API Root - accessible without authentication
    path("api/", api_root, name="api-root"),
    path("api/", include("apps.votes.urls")),
    path("api/", include("apps.polls.urls")),
    path("api/", include("apps.analytics.urls")),
]
