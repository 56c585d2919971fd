from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsPartner
from .models import Device
from .serializers import DeviceAdminSerializer, DeviceAnalyticsSerializer, DeviceSerializer


class PartnerDeviceViewSet(viewsets.ModelViewSet):
    permission_classes = [IsPartner]
    serializer_class = DeviceSerializer
    queryset = Device.objects.all()

    def get_queryset(self):
        return Device.objects.filter(partner=self.request.user.partner).order_by('-created_at')

    def perform_create(self, serializer):
        serializer.save(partner=self.request.user.partner)

    @action(detail=True, methods=['get'])
    def analytics(self, request, pk=None):
        device = self.get_object()
        rows = device.analytics.all()[:30]
        return Response(DeviceAnalyticsSerializer(rows, many=True).data)


class DeviceAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'devices'
    serializer_class = DeviceAdminSerializer
    queryset = Device.objects.select_related('partner')

    def get_queryset(self):
        queryset = Device.objects.select_related('partner').order_by('-created_at')
        for param, field in (('status', 'status'), ('health', 'health_status'), ('partner', 'partner_id')):
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{field: value.upper() if field != 'partner_id' else value})
        return queryset
