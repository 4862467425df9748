"""
Registration submission as an explicit sequence of states.

    IDLE -> VALIDATING -> PERSISTING -> DERIVING -> NOTIFYING -> EMAILING -> COMPLETE
                 |             |
                 +--> FAILED <-+

Only validation and persistence can fail a submission. Once the row exists,
every later step is best-effort: problems are logged and collected in
`SubmissionResult.warnings`, and the submission still completes.
"""
import enum
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import DatabaseError, transaction

from accounts.services import create_invoice_for_registration, record_registration_payment
from core.utils import send_confirmation_email
from .models import Registration
from .qr import generate_qr_data, render_qr_image
from .serializers import build_registration_serializer
from .services import create_lead, derive_payment_status, find_recent_duplicate

logger = logging.getLogger(__name__)

PAYMENT_METHODS_FOR_LEDGER = {"cash_ground": "cash", "mpesa": "mpesa", "card": "card"}


class SubmissionState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    DERIVING = "deriving"
    NOTIFYING = "notifying"
    EMAILING = "emailing"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class SubmissionResult:
    state: SubmissionState = SubmissionState.IDLE
    registration: Optional[Registration] = None
    errors: Dict[str, Any] = field(default_factory=dict)
    message: str = ""
    failed_at: Optional[SubmissionState] = None
    duplicate: bool = False
    qr_code_image: Optional[str] = None
    email_sent: bool = False
    email_error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    history: List[SubmissionState] = field(default_factory=lambda: [SubmissionState.IDLE])

    @property
    def succeeded(self):
        return self.state == SubmissionState.COMPLETE


class RegistrationPipeline:
    def __init__(self, program, *, today=None, registration_type="online_only", payment_method="pending",
                 amount_paid=None, created_by=None, admin_notes="", email_sender=send_confirmation_email,
                 lead_source="website"):
        self.program = program
        self.today = today
        self.registration_type = registration_type
        self.payment_method = payment_method
        self.amount_paid = Decimal(amount_paid or 0)
        self.created_by = created_by
        self.admin_notes = admin_notes
        self.email_sender = email_sender
        self.lead_source = lead_source

    def _enter(self, result, state):
        logger.info("Registration submission for %s: %s -> %s",
                    self.program.program_type, result.state.value, state.value)
        result.state = state
        result.history.append(state)

    def _fail(self, result, message, errors=None):
        result.failed_at = result.state
        result.message = message
        result.errors = errors or {}
        self._enter(result, SubmissionState.FAILED)
        return result

    def submit(self, data):
        result = SubmissionResult()

        self._enter(result, SubmissionState.VALIDATING)
        serializer_class = build_registration_serializer(self.program)
        serializer = serializer_class(data=data, context={"program": self.program, "today": self.today})
        if not serializer.is_valid():
            return self._fail(result, "Please correct the highlighted fields.", serializer.errors)
        validated = serializer.validated_data

        existing = find_recent_duplicate(self.program, validated["email"], validated["phone"])
        if existing is not None:
            result.duplicate = True
            result.registration = existing
            return self._fail(
                result,
                "A registration with these details was just submitted. Please check your email.",
                {"non_field_errors": [f"Duplicate of {existing.registration_number}."]},
            )

        self._enter(result, SubmissionState.PERSISTING)
        try:
            registration = self._persist(validated)
        except DatabaseError:
            logger.exception("Failed to save %s registration for %s", self.program.program_type, validated["email"])
            return self._fail(result, "We could not save your registration. Please try again.")
        result.registration = registration

        self._enter(result, SubmissionState.DERIVING)
        self._derive_qr(registration, result)

        self._enter(result, SubmissionState.NOTIFYING)
        self._notify(registration, result)

        self._enter(result, SubmissionState.EMAILING)
        self._email(registration, result)

        self._enter(result, SubmissionState.COMPLETE)
        return result

    def _persist(self, validated):
        with transaction.atomic():
            return Registration.objects.create(
                program=self.program,
                parent_name=validated["parent_name"],
                email=validated["email"],
                phone=validated["phone"],
                emergency_contact=validated.get("emergency_contact", ""),
                children=validated["children"],
                total_amount=validated["total_amount"],
                amount_paid=self.amount_paid,
                payment_status=derive_payment_status(self.amount_paid, validated["total_amount"]),
                payment_method=self.payment_method,
                registration_type=self.registration_type,
                consent_given=validated["consent"],
                extra_details=validated.get("extra_details", {}),
                admin_notes=self.admin_notes,
                created_by=self.created_by,
            )

    def _derive_qr(self, registration, result):
        saved = False
        try:
            registration.qr_code_data = generate_qr_data(registration.id)
            with transaction.atomic():
                registration.save(update_fields=["qr_code_data", "updated_at"])
            saved = True
            result.qr_code_image = render_qr_image(registration.qr_code_data)
        except Exception as e:
            if not saved:
                # never hand out a token the row does not hold
                registration.qr_code_data = ""
            logger.warning("QR derivation failed for %s: %s", registration.registration_number, e)
            result.warnings.append("QR code could not be generated.")

    def _notify(self, registration, result):
        try:
            with transaction.atomic():
                create_lead(registration, source=self.lead_source)
        except Exception as e:
            logger.warning("Lead capture failed for %s: %s", registration.registration_number, e)
            result.warnings.append("Lead could not be recorded.")

        if self.program.creates_invoice:
            try:
                create_invoice_for_registration(registration)
            except Exception as e:
                logger.warning("Invoice creation failed for %s: %s", registration.registration_number, e)
                result.warnings.append("Invoice could not be created.")

        if self.amount_paid > 0:
            try:
                with transaction.atomic():
                    record_registration_payment(
                        registration,
                        self.amount_paid,
                        PAYMENT_METHODS_FOR_LEDGER.get(self.payment_method, "other"),
                        source=self.registration_type,
                    )
            except Exception as e:
                logger.warning("Payment record failed for %s: %s", registration.registration_number, e)
                result.warnings.append("Payment could not be recorded.")

    def _email(self, registration, result):
        details = {
            "parent_name": registration.parent_name,
            "program_title": self.program.title,
            "registration_number": registration.registration_number,
            "children": registration.children,
            "total_amount": registration.total_amount,
            "currency": self.program.currency,
            "qr_code_image": result.qr_code_image,
        }
        try:
            outcome = self.email_sender(registration.email, self.program.program_type, details)
        except Exception as e:
            logger.exception("Confirmation email raised for %s", registration.registration_number)
            result.email_error = str(e)
        else:
            result.email_sent = outcome.success
            result.email_error = outcome.error
        if not result.email_sent:
            logger.warning("Confirmation email not sent for %s: %s",
                           registration.registration_number, result.email_error)
            result.warnings.append("Confirmation email could not be sent.")
