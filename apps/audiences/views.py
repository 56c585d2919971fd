from rest_framework import viewsets
from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsAdvertiser
from .models import AudienceSegment
from .serializers import AudienceSegmentSerializer


class AudienceSegmentViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'audiences'
    serializer_class = AudienceSegmentSerializer
    queryset = AudienceSegment.objects.all()

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class AdvertiserAudienceViewSet(viewsets.ReadOnlyModelViewSet):
    """Segments an advertiser can target."""
    permission_classes = [IsAdvertiser]
    serializer_class = AudienceSegmentSerializer

    def get_queryset(self):
        return AudienceSegment.objects.filter(is_active=True).order_by('name')
