from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from apps.authentication.permissions import HasAdminPermission, IsAdmin, IsAdvertiser
from .models import Advertiser
from .serializers import AdvertiserSerializer


class AdvertiserAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'advertisers'
    serializer_class = AdvertiserSerializer
    queryset = Advertiser.objects.select_related('user')
    http_method_names = ['get', 'put', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Advertiser.objects.select_related('user').order_by('-created_at')
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(company_name__icontains=search)
        return queryset


@api_view(['GET', 'PUT'])
@permission_classes([IsAdvertiser])
def advertiser_profile(request):
    advertiser = request.user.advertiser
    if request.method == 'GET':
        return Response(AdvertiserSerializer(advertiser).data)

    serializer = AdvertiserSerializer(advertiser, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)
