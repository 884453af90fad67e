from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.dashboard.services import dashboard_stats
from core.permissions import IsMember
from core.principal import Principal


@api_view(["GET"])
@permission_classes([IsMember])
def get_dashboard(request):
    """
    GET /api/v1/admin/dashboard
    """
    return Response({"data": dashboard_stats(Principal.from_request(request))})
