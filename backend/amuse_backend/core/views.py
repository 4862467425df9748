import logging

from django.core.cache import cache
from django.db import DatabaseError, connections
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


def check_database(alias="default"):
    try:
        with connections[alias].cursor() as cursor:
            cursor.execute("SELECT 1")
        return "ok"
    except DatabaseError as e:
        logger.error("Health check: database unavailable: %s", e)
        return "error"


def check_cache():
    try:
        cache.set("health_check", "ok", timeout=5)
        return "ok" if cache.get("health_check") == "ok" else "error"
    except Exception as e:
        logger.error("Health check: cache unavailable: %s", e)
        return "error"


class HealthCheckView(APIView):
    authentication_classes = []
    throttle_classes = []

    def get(self, request):
        checks = {"database": check_database(), "cache": check_cache()}
        overall = "ok" if all(value == "ok" for value in checks.values()) else "error"
        return Response(
            {"status": overall, **checks},
            status=status.HTTP_200_OK if overall == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
