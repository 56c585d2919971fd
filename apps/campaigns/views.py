import logging

from django.db import transaction
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsAdvertiser
from .models import Campaign
from .serializers import CampaignAdminSerializer, CampaignSerializer, CampaignStatusSerializer

logger = logging.getLogger(__name__)

# Statuses an advertiser may move their own campaign into; approval is admin-only.
ADVERTISER_STATUSES = {'DRAFT', 'PENDING_APPROVAL', 'PAUSED', 'COMPLETED', 'CANCELLED'}


def change_campaign_status(campaign, new_status, reason=None):
    campaign.status = new_status
    update_fields = ['status', 'updated_at']
    if new_status == 'REJECTED':
        campaign.rejection_reason = reason or ''
        update_fields.append('rejection_reason')
    with transaction.atomic():
        campaign.save(update_fields=update_fields)
    logger.info(f"Campaign {campaign.id} moved to {new_status}")
    return campaign


class AdvertiserCampaignViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdvertiser]
    serializer_class = CampaignSerializer
    queryset = Campaign.objects.all()

    def get_queryset(self):
        queryset = Campaign.objects.filter(advertiser=self.request.user.advertiser).order_by('-created_at')
        campaign_status = self.request.query_params.get('status')
        if campaign_status:
            queryset = queryset.filter(status=campaign_status.upper())
        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.user.is_authenticated and hasattr(self.request.user, 'advertiser'):
            context['advertiser'] = self.request.user.advertiser
        return context

    def perform_create(self, serializer):
        serializer.save(advertiser=self.request.user.advertiser)

    @action(detail=True, methods=['post'])
    def status(self, request, pk=None):
        campaign = self.get_object()
        serializer = CampaignStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']

        resuming = new_status == 'ACTIVE' and campaign.status == 'PAUSED'
        if new_status not in ADVERTISER_STATUSES and not resuming:
            return Response({'error': f"Advertisers cannot set status {new_status}"}, status=403)

        change_campaign_status(campaign, new_status)
        return Response(CampaignSerializer(campaign).data)

    @action(detail=True, methods=['get'])
    def analytics(self, request, pk=None):
        from apps.analytics.serializers import CampaignAnalyticsSerializer

        campaign = self.get_object()
        rows = campaign.analytics.order_by('-date')[:90]
        return Response(CampaignAnalyticsSerializer(rows, many=True).data)


class CampaignAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'campaigns'
    serializer_class = CampaignAdminSerializer
    queryset = Campaign.objects.select_related('advertiser')

    def get_queryset(self):
        queryset = Campaign.objects.select_related('advertiser').order_by('-created_at')
        campaign_status = self.request.query_params.get('status')
        if campaign_status:
            queryset = queryset.filter(status=campaign_status.upper())
        advertiser_id = self.request.query_params.get('advertiser')
        if advertiser_id:
            queryset = queryset.filter(advertiser_id=advertiser_id)
        return queryset

    @action(detail=True, methods=['post', 'patch'])
    def status(self, request, pk=None):
        """Approve, reject or otherwise move a campaign through its lifecycle."""
        from apps.notifications.services import notify

        campaign = self.get_object()
        serializer = CampaignStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']
        reason = serializer.validated_data.get('reason')

        change_campaign_status(campaign, new_status, reason)

        message = f'Campaign "{campaign.name}" status changed to {new_status}'
        if reason:
            message += f" with reason: {reason}"
        notify(
            campaign.advertiser.user,
            title='Campaign status updated',
            message=message,
            type='CAMPAIGN',
            category='campaign',
            related_data={'campaignId': campaign.id, 'status': new_status},
            sender=request.user,
        )
        return Response(CampaignAdminSerializer(campaign).data)
