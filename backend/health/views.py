import logging

from django.core.cache import caches
from django.core.files.storage import default_storage
from django.db import DatabaseError, connection
from django.db.migrations.executor import MigrationExecutor
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class LiveView(APIView):
    """Liveness probe: process is running. No DB or external deps."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"status": "alive"})


class ReadyView(APIView):
    """Readiness probe: DB, migrations, cache, document storage."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        checks = self._run_checks()
        overall = "ready" if all(v == "ok" for v in checks.values()) else "not_ready"
        status_code = 200 if overall == "ready" else 503
        return Response({"status": overall, "checks": checks}, status=status_code)

    def _run_checks(self):
        checks = {}

        # DB check
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1;")
            checks["database"] = "ok"
        except DatabaseError:
            logger.warning("readiness_database_failed", exc_info=True)
            checks["database"] = "error"

        # Migration consistency check
        try:
            executor = MigrationExecutor(connection)
            plan = executor.migration_plan(executor.loader.graph.leaf_nodes())
            checks["migrations"] = "ok" if not plan else "pending"
        except DatabaseError:
            logger.warning("readiness_migrations_failed", exc_info=True)
            checks["migrations"] = "error"

        # Cache check
        cache = caches["default"]
        cache.set("health_check", "ok", timeout=5)
        checks["cache"] = "ok" if cache.get("health_check") == "ok" else "error"

        # Document blob storage reachable
        try:
            default_storage.listdir("")
            checks["storage"] = "ok"
        except FileNotFoundError:
            # Nothing uploaded yet; the root is created on first save.
            checks["storage"] = "ok"
        except OSError:
            logger.warning("readiness_storage_failed", exc_info=True)
            checks["storage"] = "error"

        return checks
