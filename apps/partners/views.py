import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsPartner
from core.cache import delete_cache, get_cache, set_cache
from .models import Partner, PartnerEarning
from .serializers import (
    PartnerEarningSerializer,
    PartnerProfileSerializer,
    PartnerSerializer,
    PayoutRequestSerializer,
)
from .services import PayoutError, get_earnings_summary, process_partner_payment

logger = logging.getLogger(__name__)


class PartnerAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'partners'
    serializer_class = PartnerSerializer
    queryset = Partner.objects.select_related('user')
    http_method_names = ['get', 'put', 'patch', 'delete', 'post', 'head', 'options']

    def get_queryset(self):
        queryset = Partner.objects.select_related('user').order_by('-created_at')
        partner_status = self.request.query_params.get('status')
        if partner_status:
            queryset = queryset.filter(status=partner_status.upper())
        return queryset

    def create(self, request, *args, **kwargs):
        return Response({'error': 'Partners register through the auth endpoints'}, status=405)

    @action(detail=True, methods=['post'])
    def payout(self, request, pk=None):
        """Pay out one of the partner's pending earnings."""
        partner = self.get_object()
        serializer = PayoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = process_partner_payment(
                partner.id,
                serializer.validated_data['earning_id'],
                serializer.validated_data['method'],
                serializer.validated_data.get('details'),
            )
        except PayoutError as e:
            return Response({'error': str(e)}, status=400)

        delete_cache(f"partner:wallet:{partner.user_id}")
        return Response(result)


@api_view(['GET', 'PUT'])
@permission_classes([IsPartner])
def partner_profile(request):
    partner = request.user.partner
    cache_key = f"partner:profile:{request.user.id}"

    if request.method == 'GET':
        cached = get_cache(cache_key)
        if cached:
            return Response(cached)
        data = PartnerProfileSerializer(partner).data
        set_cache(cache_key, data, 300)
        return Response(data)

    serializer = PartnerProfileSerializer(partner, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    delete_cache(cache_key)
    return Response(serializer.data)


class PartnerEarningViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsPartner]
    serializer_class = PartnerEarningSerializer
    queryset = PartnerEarning.objects.all()

    def get_queryset(self):
        queryset = PartnerEarning.objects.filter(partner=self.request.user.partner)
        earning_status = self.request.query_params.get('status')
        if earning_status:
            queryset = queryset.filter(status=earning_status.upper())
        return queryset

    @action(detail=False, methods=['get'])
    def summary(self, request):
        try:
            return Response(get_earnings_summary(request.user.partner))
        except Exception as e:
            logger.error(f"Error fetching earnings summary for user {request.user.id}: {e}")
            return Response({'error': 'Failed to fetch earnings summary'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
