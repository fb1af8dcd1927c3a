# apps/core/views.py
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import SEARCH, RolePolicyPermission, policy_for
from .search import universal_search


class UniversalSearchView(APIView):
    """
    ``GET /api/search/?q=<term>``: students and rooms matching the term.
    """
    permission_classes = [permissions.IsAuthenticated, RolePolicyPermission]
    policy_resource = SEARCH

    def get(self, request):
        term = request.query_params.get('q', '')
        return Response(universal_search(term, policy=policy_for(request.user)))
