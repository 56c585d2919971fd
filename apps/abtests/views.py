from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsAdvertiser
from .models import ABTest
from .serializers import ABTestSerializer, ABTestStatusSerializer


class ABTestStatusMixin:
    @action(detail=True, methods=['post', 'put'])
    def status(self, request, pk=None):
        ab_test = self.get_object()
        serializer = ABTestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ab_test.change_status(serializer.validated_data['status'])
        return Response(ABTestSerializer(ab_test).data)


class AdvertiserABTestViewSet(ABTestStatusMixin, viewsets.ModelViewSet):
    permission_classes = [IsAdvertiser]
    serializer_class = ABTestSerializer
    queryset = ABTest.objects.all()

    def get_queryset(self):
        queryset = (
            ABTest.objects.filter(campaign__advertiser=self.request.user.advertiser)
            .prefetch_related('variants')
            .order_by('-created_at')
        )
        campaign_id = self.request.query_params.get('campaign')
        if campaign_id:
            queryset = queryset.filter(campaign_id=campaign_id)
        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.user.is_authenticated and hasattr(self.request.user, 'advertiser'):
            context['advertiser'] = self.request.user.advertiser
        return context


class ABTestAdminViewSet(ABTestStatusMixin, viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'campaigns'
    serializer_class = ABTestSerializer
    queryset = ABTest.objects.prefetch_related('variants')

    def get_queryset(self):
        queryset = ABTest.objects.prefetch_related('variants').order_by('-created_at')
        test_status = self.request.query_params.get('status')
        if test_status:
            queryset = queryset.filter(status=test_status.upper())
        return queryset
