from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

urlpatterns = [
    path("auth/login/", views.LoginView.as_view(), name="login"),
    path("auth/refresh-token/", TokenRefreshView.as_view(), name="refresh-token"),
    path("auth/me/", views.ProfileView.as_view(), name="profile"),
    path("portal/", views.PortalView.as_view(), name="portal"),
    path("portal/audit-logs/", views.AuditLogListView.as_view(), name="audit-logs"),
]
