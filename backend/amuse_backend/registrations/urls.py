from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r"records", views.RegistrationViewSet, basename="registration")
router.register(r"leads", views.LeadViewSet, basename="lead")

urlpatterns = [
    path("programs/", views.ProgramListView.as_view(), name="program-list"),
    path("programs/<slug:program_type>/", views.ProgramDetailView.as_view(), name="program-detail"),
    path("programs/<slug:program_type>/quote/", views.QuoteView.as_view(), name="program-quote"),
    path("programs/<slug:program_type>/register/", views.RegistrationSubmitView.as_view(), name="program-register"),
    path("programs/<slug:program_type>/ground/", views.GroundRegistrationView.as_view(), name="program-ground"),
    path("scan/", views.ScanView.as_view(), name="registration-scan"),
    path("pay/<str:registration_number>/", views.PaymentInitView.as_view(), name="registration-pay"),
    path("verify-payment/", views.PaymentVerificationView.as_view(), name="verify-payment"),
    path("", include(router.urls)),
]
