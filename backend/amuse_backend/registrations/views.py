import logging

from django.shortcuts import get_object_or_404
from django.db.models import Q
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from accounts.services import record_registration_payment
from core.pagination import StandardResultsSetPagination
from core.utils import build_email_html, send_email_via_sendgrid
from portal.audit import log_event
from portal.permissions import HasPortalPermission
from portal.roles import Permission
from .models import Lead, ProgramConfig, Registration
from .payments import PaymentGatewayError, initialize_payment, verify_payment
from .pipeline import RegistrationPipeline, SubmissionState
from .pricing import sync_registration
from .qr import parse_qr_data
from .serializers import (
    AdminNoteSerializer, CampAttendanceSerializer, CheckInSerializer, GroundRegistrationSerializer,
    LeadSerializer, PaymentStatusSerializer, ProgramConfigSerializer, QuoteSerializer,
    RegistrationSerializer, ScanSerializer,
)
from .services import add_admin_note, child_names, derive_payment_status, update_payment_status
from .services import check_in as record_check_in

logger = logging.getLogger(__name__)


def _active_program(program_type):
    return get_object_or_404(ProgramConfig, program_type=program_type, is_active=True)


def submission_response(result, submitted):
    """Map a pipeline result onto the HTTP contract."""
    if result.succeeded:
        return Response({
            "success": True,
            "message": "Registration submitted successfully.",
            "data": RegistrationSerializer(result.registration).data,
            "qr_code_image": result.qr_code_image,
            "email_sent": result.email_sent,
            "email_error": result.email_error,
            "warnings": result.warnings,
        }, status=status.HTTP_201_CREATED)

    if result.duplicate:
        return Response({
            "success": False,
            "message": result.message,
            "errors": result.errors,
            "registration_number": result.registration.registration_number,
        }, status=status.HTTP_409_CONFLICT)

    if result.failed_at == SubmissionState.VALIDATING:
        return Response({"success": False, "message": result.message, "errors": result.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    # the row was never written; hand the form back so nothing is lost
    return Response({"success": False, "message": result.message, "data": submitted},
                    status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ProgramListView(generics.ListAPIView):
    queryset = ProgramConfig.objects.filter(is_active=True)
    serializer_class = ProgramConfigSerializer
    pagination_class = None


class ProgramDetailView(generics.RetrieveAPIView):
    queryset = ProgramConfig.objects.filter(is_active=True)
    serializer_class = ProgramConfigSerializer
    lookup_field = "program_type"


class QuoteView(APIView):
    """Recompute the derived form state for a partially filled registration."""

    def post(self, request, program_type):
        program = _active_program(program_type)
        serializer = QuoteSerializer(data=request.data, context={"program": program})
        if not serializer.is_valid():
            return Response({"success": False, "message": "Invalid form state.", "errors": serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        children, total = sync_registration(
            serializer.validated_data["children"],
            program.rates,
            pricing_mode=program.pricing_mode,
            start_date=program.start_date,
        )
        return Response({
            "success": True,
            "data": {"children": children, "total_amount": total, "currency": program.currency},
        })


class RegistrationSubmitView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "registrations"

    def post(self, request, program_type):
        program = _active_program(program_type)
        result = RegistrationPipeline(program).submit(request.data)
        if result.succeeded:
            log_event("REGISTRATION_CREATE", "registrations_registration", request=request,
                      record_id=result.registration.id,
                      new_values={"registration_number": result.registration.registration_number,
                                  "program_type": program.program_type})
        return submission_response(result, request.data)


class GroundRegistrationView(APIView):
    """Walk-in registration captured by staff on the day."""
    permission_classes = [HasPortalPermission]
    required_permission = Permission.MANAGE_REGISTRATIONS

    def post(self, request, program_type):
        program = _active_program(program_type)
        ground = GroundRegistrationSerializer(data=request.data)
        if not ground.is_valid():
            return Response({"success": False, "message": "Invalid payment details.", "errors": ground.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        pipeline = RegistrationPipeline(
            program,
            registration_type="ground_registration",
            payment_method="cash_ground",
            amount_paid=ground.validated_data["amount_paid"],
            created_by=request.user,
            admin_notes=ground.validated_data["notes"],
            lead_source="ground_registration",
        )
        result = pipeline.submit(request.data)
        if result.succeeded:
            log_event("REGISTRATION_CREATE", "registrations_registration", request=request,
                      record_id=result.registration.id,
                      new_values={"registration_number": result.registration.registration_number,
                                  "registration_type": "ground_registration",
                                  "amount_paid": str(result.registration.amount_paid)})
        return submission_response(result, request.data)


class ScanView(APIView):
    """Resolve a scanned QR token to its registration."""
    permission_classes = [HasPortalPermission]
    required_permission = Permission.VIEW_STUDENT_DATA

    def post(self, request):
        serializer = ScanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = parse_qr_data(serializer.validated_data["qr_code_data"])
        if payload is None or not str(payload["id"]).isdigit():
            return Response({"success": False, "message": "Invalid QR code."},
                            status=status.HTTP_400_BAD_REQUEST)

        registration = Registration.objects.select_related("program").filter(pk=payload["id"]).first()
        if registration is None:
            return Response({"success": False, "message": "Registration not found."},
                            status=status.HTTP_404_NOT_FOUND)

        return Response({
            "success": True,
            "data": RegistrationSerializer(registration).data,
            "children": child_names(registration),
        })


class RegistrationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Admin view over registrations.
    Filters: ?program_type=, ?payment_status=, ?registration_type=, ?search=
    """
    serializer_class = RegistrationSerializer
    permission_classes = [HasPortalPermission]
    pagination_class = StandardResultsSetPagination

    @property
    def required_permission(self):
        if self.action in ("check_in", "attendance"):
            return Permission.VIEW_STUDENT_DATA
        return Permission.MANAGE_REGISTRATIONS

    def get_queryset(self):
        qs = Registration.objects.select_related("program")
        params = self.request.query_params
        if params.get("program_type"):
            qs = qs.filter(program__program_type=params["program_type"])
        if params.get("payment_status"):
            qs = qs.filter(payment_status=params["payment_status"])
        if params.get("registration_type"):
            qs = qs.filter(registration_type=params["registration_type"])
        search = params.get("search")
        if search:
            qs = qs.filter(
                Q(parent_name__icontains=search) | Q(email__icontains=search)
                | Q(registration_number__icontains=search)
            )
        return qs

    @action(detail=True, methods=["post"], url_path="payment-status")
    def payment_status(self, request, pk=None):
        registration = self.get_object()
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_payment_status(registration, **serializer.validated_data)
        log_event("PAYMENT_STATUS_UPDATE", "registrations_registration", request=request,
                  record_id=registration.id, operation="UPDATE",
                  new_values={key: str(value) for key, value in serializer.validated_data.items()})
        return Response({"success": True, "message": "Payment status updated.",
                         "data": RegistrationSerializer(registration).data})

    @action(detail=True, methods=["post"])
    def notes(self, request, pk=None):
        registration = self.get_object()
        serializer = AdminNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        add_admin_note(registration, serializer.validated_data["note"])
        return Response({"success": True, "message": "Note added.",
                         "data": {"admin_notes": registration.admin_notes}})

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):
        registration = self.get_object()
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        child_name = serializer.validated_data["child_name"]
        if child_name not in child_names(registration):
            return Response({"success": False, "message": f"{child_name} is not on this registration."},
                            status=status.HTTP_400_BAD_REQUEST)

        attendance, created, action_item = record_check_in(
            registration, child_name, user=request.user, notes=serializer.validated_data["notes"]
        )
        if created:
            log_event("CHECK_IN", "registrations_campattendance", request=request, record_id=attendance.id,
                      new_values={"child_name": child_name,
                                  "registration_number": registration.registration_number})
        return Response({
            "success": True,
            "message": "Checked in." if created else "Already checked in today.",
            "data": CampAttendanceSerializer(attendance).data,
            "payment_status": registration.payment_status,
            "pending_collection": action_item.id if action_item else None,
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    @action(detail=True, methods=["get"])
    def attendance(self, request, pk=None):
        registration = self.get_object()
        records = registration.attendance_records.all()
        return Response({"success": True, "data": CampAttendanceSerializer(records, many=True).data})


class PaymentInitView(APIView):
    """Start a card checkout for a registration's outstanding balance."""

    def post(self, request, registration_number):
        registration = get_object_or_404(Registration.objects.select_related("program"),
                                         registration_number=registration_number)
        if registration.payment_status == "paid":
            return Response({"success": False, "message": "This registration is already paid."},
                            status=status.HTTP_400_BAD_REQUEST)

        try:
            reference, auth_url = initialize_payment(registration)
        except PaymentGatewayError as e:
            return Response({"success": False, "message": str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        registration.payment_reference = reference
        registration.save(update_fields=["payment_reference", "updated_at"])
        return Response({
            "success": True,
            "payment_url": auth_url,
            "reference_no": reference,
            "message": "Redirect to Paystack to complete payment.",
        }, status=status.HTTP_201_CREATED)


class PaymentVerificationView(APIView):
    """Verify a Paystack transaction and settle the registration."""

    def get(self, request):
        reference = request.query_params.get("reference")
        if not reference:
            return Response({"success": False, "message": "Reference required."},
                            status=status.HTTP_400_BAD_REQUEST)

        registration = Registration.objects.select_related("program").filter(payment_reference=reference).first()
        if registration is None:
            return Response({"success": False, "message": "Registration not found."},
                            status=status.HTTP_404_NOT_FOUND)
        if registration.payment_status == "paid":
            return Response({"success": True, "message": "Payment already verified."})

        try:
            succeeded, amount = verify_payment(reference)
        except PaymentGatewayError as e:
            return Response({"success": False, "message": str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        if not succeeded:
            return Response({"success": False, "message": "Payment failed."},
                            status=status.HTTP_400_BAD_REQUEST)

        amount = amount if amount is not None else registration.balance
        amount_paid = registration.amount_paid + amount
        update_payment_status(registration, derive_payment_status(amount_paid, registration.total_amount),
                              payment_method="card", amount_paid=amount_paid)
        if registration.registration_type == "online_only":
            registration.registration_type = "online_paid"
            registration.save(update_fields=["registration_type", "updated_at"])
        record_registration_payment(registration, amount, "card", reference=reference, source="paystack")
        log_event("PAYMENT_RECEIVED", "registrations_registration", request=request, record_id=registration.id,
                  operation="UPDATE", new_values={"reference": reference, "amount": str(amount)})

        self._send_receipt(registration, amount)
        return Response({"success": True, "message": "Payment verified."})

    def _send_receipt(self, registration, amount):
        body = (
            f"We have received your payment for <b>{registration.program.title}</b>.<br><br>"
            f"- Registration Number: {registration.registration_number}<br>"
            f"- Amount Paid: {registration.program.currency} {amount}<br>"
            f"- Reference No: {registration.payment_reference}<br>"
            f"- Payment Status: {registration.get_payment_status_display()}<br>"
        )
        html_message = build_email_html(
            title="Payment Confirmed",
            greeting=registration.parent_name,
            message=body,
            footer="We look forward to seeing you in the forest.",
        )
        result = send_email_via_sendgrid(f"✅ Payment Confirmed - {registration.program.title}",
                                         html_message, registration.email)
        if not result.success:
            logger.warning("Receipt email failed for %s: %s", registration.registration_number, result.error)


class LeadViewSet(viewsets.ModelViewSet):
    serializer_class = LeadSerializer
    permission_classes = [HasPortalPermission]
    required_permission = Permission.MANAGE_CUSTOMERS
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        qs = Lead.objects.all()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        program_type = self.request.query_params.get("program_type")
        if program_type:
            qs = qs.filter(program_type=program_type)
        return qs
