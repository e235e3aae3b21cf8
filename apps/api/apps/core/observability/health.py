"""
Liveness and readiness endpoints (/healthz, /readyz).
"""
from django.conf import settings
from django.db import connection, DatabaseError
from django.http import JsonResponse
from django.views import View

from .logging import get_sanitized_logger

logger = get_sanitized_logger(__name__)


class HealthzView(View):
    """Process is up. No dependency checks."""

    def get(self, request):
        body = {
            'status': 'ok',
            'version': getattr(settings, 'VERSION', 'unknown'),
        }
        if getattr(settings, 'COMMIT_HASH', None):
            body['commit'] = settings.COMMIT_HASH
        return JsonResponse(body)


class ReadyzView(View):
    """
    Ready to serve booking traffic.

    The database must answer and the scheduling tables must be migrated.
    """

    def get(self, request):
        checks = {
            'database': self._check_database(),
            'scheduling_schema': self._check_scheduling_schema(),
        }
        ready = all(checks.values())
        return JsonResponse(
            {'status': 'ready' if ready else 'not_ready', 'checks': checks},
            status=200 if ready else 503,
        )

    def _check_database(self):
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
            return True
        except DatabaseError as e:
            logger.error(
                'Database readiness check failed',
                extra={'event': 'health_check_failed', 'check': 'database', 'error': str(e)}
            )
            return False

    def _check_scheduling_schema(self):
        from apps.scheduling.models import PublicBookingSettings

        try:
            PublicBookingSettings.objects.exists()
            return True
        except DatabaseError as e:
            logger.error(
                'Scheduling schema readiness check failed',
                extra={'event': 'health_check_failed', 'check': 'scheduling_schema', 'error': str(e)}
            )
            return False
