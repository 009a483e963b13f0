# apps/core/views.py

from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from drf_yasg.utils import swagger_auto_schema

from apps.core.serializers import UserSerializer


# --------------------------------------------------
# Identity: /core/me/
# --------------------------------------------------

class MeView(APIView):
    """
    currentUser() -> {id, isTeacher, ...}
    """
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(operation_summary="Current user")
    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)
