import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .audit import log_event
from .models import AuditLog
from .permissions import HasPortalPermission
from .roles import Permission
from .serializers import AuditLogSerializer, LoginSerializer
from .session import AuthSession, load_profile

logger = logging.getLogger(__name__)


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"success": False, "message": serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data["email"]
        session = AuthSession()
        if not session.sign_in(email, serializer.validated_data["password"], request=request):
            log_event("USER_LOGIN_FAILED", "portal_user", request=request, username=email,
                      new_values={"email": email, "status": "failed"})
            return Response({"success": False, "message": session.error, "state": session.state.value},
                            status=status.HTTP_401_UNAUTHORIZED)

        user = session.user
        refresh = RefreshToken.for_user(user)
        log_event("USER_LOGIN", "portal_user", request=request, user=user, record_id=user.id,
                  new_values={"email": user.email, "status": "success", "role": user.role})
        logger.info("User %s signed in to the %s portal", user.email, session.profile["portal"]["key"])

        return Response({
            "success": True,
            "state": session.state.value,
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": session.profile,
        }, status=status.HTTP_200_OK)


class ProfileView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({"success": True, "data": load_profile(request.user)})


class PortalView(APIView):
    """Resolve the signed-in user's role to the portal they should see."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        profile = load_profile(request.user)
        return Response({
            "success": True,
            "data": {
                "role": profile["role"],
                "department": profile["department"],
                "permissions": profile["permissions"],
                **profile["portal"],
            },
        })


class AuditLogListView(generics.ListAPIView):
    serializer_class = AuditLogSerializer
    permission_classes = [HasPortalPermission]
    required_permission = Permission.VIEW_AUDIT_TRAILS

    def get_queryset(self):
        qs = AuditLog.objects.all()
        event_type = self.request.query_params.get("event_type")
        if event_type:
            qs = qs.filter(event_type=event_type)
        return qs[:200]
