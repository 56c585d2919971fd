import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsAdvertiser
from .models import AdCreative
from .serializers import AdCreativeSerializer, CreativeReviewSerializer
from .storage import CreativeStorage, CreativeUploadError

logger = logging.getLogger(__name__)


class AdvertiserCreativeViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdvertiser]
    serializer_class = AdCreativeSerializer
    queryset = AdCreative.objects.all()

    def get_queryset(self):
        queryset = AdCreative.objects.filter(campaign__advertiser=self.request.user.advertiser).order_by('-created_at')
        campaign_id = self.request.query_params.get('campaign')
        if campaign_id:
            queryset = queryset.filter(campaign_id=campaign_id)
        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.user.is_authenticated and hasattr(self.request.user, 'advertiser'):
            context['advertiser'] = self.request.user.advertiser
        return context

    def perform_update(self, serializer):
        # Edited creatives go back through review
        serializer.save(status='DRAFT', is_approved=False)

    @action(detail=True, methods=['post'])
    def upload(self, request, pk=None):
        creative = self.get_object()
        uploaded = request.FILES.get('file')
        if uploaded is None:
            return Response({'error': 'No file provided'}, status=400)

        try:
            url = CreativeStorage().upload_creative(uploaded, request.user.advertiser.id, creative.id)
        except CreativeUploadError as e:
            return Response({'error': str(e)}, status=400)
        except Exception as e:
            logger.error(f"Upload failed for creative {creative.id}: {e}")
            return Response({'error': 'Failed to upload file'}, status=500)

        creative.content = url
        if creative.type == 'IMAGE' and not creative.preview_image:
            creative.preview_image = url
        creative.save(update_fields=['content', 'preview_image', 'updated_at'])
        return Response({'url': url, 'creative': AdCreativeSerializer(creative).data})

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        creative = self.get_object()
        creative.status = 'PENDING_REVIEW'
        creative.save(update_fields=['status', 'updated_at'])
        return Response(AdCreativeSerializer(creative).data)


class CreativeAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'creatives'
    serializer_class = AdCreativeSerializer
    queryset = AdCreative.objects.select_related('campaign')

    def get_queryset(self):
        queryset = AdCreative.objects.select_related('campaign').order_by('-created_at')
        creative_status = self.request.query_params.get('status')
        if creative_status:
            queryset = queryset.filter(status=creative_status.upper())
        return queryset

    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        from apps.notifications.services import notify

        creative = self.get_object()
        serializer = CreativeReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        approved = serializer.validated_data['decision'] == 'APPROVED'
        creative.status = serializer.validated_data['decision']
        creative.is_approved = approved
        creative.rejection_reason = None if approved else serializer.validated_data['reason']
        creative.save(update_fields=['status', 'is_approved', 'rejection_reason', 'updated_at'])
        logger.info(f"Creative {creative.id} reviewed: {creative.status}")

        notify(
            creative.campaign.advertiser.user,
            title=f"Creative {'approved' if approved else 'rejected'}",
            message=f'Creative "{creative.name}" was {creative.status.lower()}'
                    + ('' if approved else f": {creative.rejection_reason}"),
            type='CREATIVE',
            category='campaign',
            related_data={'creativeId': creative.id, 'campaignId': creative.campaign_id},
            sender=request.user,
        )
        return Response(AdCreativeSerializer(creative).data)
