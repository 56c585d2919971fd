import csv
import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authentication.permissions import HasAdminPermission, IsAdmin
from .insights import build_ai_insights
from .repositories import cache_heavy_query
from .repository import AnalyticsRepository
from .revenue import EXPORT_TYPES, InvalidPeriod, build_revenue_report, export_rows, resolve_period

logger = logging.getLogger(__name__)


@cache_heavy_query(timeout=60, prefix='analytics:dashboard')
def dashboard_summary():
    return AnalyticsRepository.dashboard_counts()


class RevenueView(APIView):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'revenue'

    def get(self, request):
        try:
            start, end = resolve_period(request.query_params)
        except InvalidPeriod as e:
            return Response({'error': str(e)}, status=400)

        try:
            return Response(build_revenue_report(start, end))
        except Exception as e:
            logger.error(f"Error in revenue API: {e}")
            return Response({'error': 'Internal server error'}, status=500)


class RevenueExportView(APIView):
    """Download revenue data as CSV (``type`` = overview, transactions or payments)."""
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'revenue'

    def get(self, request):
        export_type = request.query_params.get('type') or 'overview'
        if export_type not in EXPORT_TYPES:
            return Response({'error': f"Unsupported export type: {export_type}"}, status=400)
        try:
            start, end = resolve_period(request.query_params)
        except InvalidPeriod as e:
            return Response({'error': str(e)}, status=400)

        try:
            headers, rows = export_rows(export_type, start, end)
        except Exception as e:
            logger.error(f"Error exporting revenue data: {e}")
            return Response({'error': 'Failed to export revenue data'}, status=500)

        filename = f"revenue-{export_type}-{timezone.localdate().isoformat()}.csv"
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        writer = csv.writer(response)
        writer.writerow(headers)
        writer.writerows(rows)
        return response


class AIInsightsView(APIView):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'analytics'

    def get(self, request):
        try:
            return Response(build_ai_insights())
        except Exception as e:
            logger.error(f"AI Insights API error: {e}")
            return Response({'error': 'Failed to fetch AI insights data'}, status=500)


class DashboardView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        skip_cache = request.query_params.get('skipCache') == 'true'
        return Response(dashboard_summary(skip_cache=skip_cache))
