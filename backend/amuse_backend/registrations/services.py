import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from accounts.services import create_unpaid_check_in_item
from .models import CampAttendance, Lead, Registration

logger = logging.getLogger(__name__)


def derive_payment_status(amount_paid, total_amount):
    amount_paid = Decimal(amount_paid or 0)
    if amount_paid <= 0:
        return "unpaid"
    if amount_paid >= Decimal(total_amount):
        return "paid"
    return "partial"


def find_recent_duplicate(program, email, phone, now=None):
    """Same email, phone and program within the configured window."""
    now = now or timezone.now()
    window = timedelta(minutes=settings.DUPLICATE_SUBMISSION_WINDOW_MINUTES)
    return Registration.objects.filter(
        program=program,
        email__iexact=email,
        phone=phone,
        created_at__gte=now - window,
    ).first()


def create_lead(registration, source="website"):
    children = registration.children or []
    return Lead.objects.create(
        full_name=registration.parent_name,
        email=registration.email,
        phone=registration.phone,
        program_type=registration.program.program_type,
        program_name=registration.program.title,
        source=source,
        form_data={
            "registration_number": registration.registration_number,
            "children": [child.get("child_name") for child in children],
            "total_amount": registration.total_amount,
            **(registration.extra_details or {}),
        },
    )


def update_payment_status(registration, payment_status, payment_method=None,
                          payment_reference=None, amount_paid=None):
    registration.payment_status = payment_status
    if payment_method:
        registration.payment_method = payment_method
    if payment_reference is not None:
        registration.payment_reference = payment_reference
    if amount_paid is not None:
        registration.amount_paid = amount_paid
    elif payment_status == "paid":
        registration.amount_paid = registration.total_amount
    registration.save(update_fields=[
        "payment_status", "payment_method", "payment_reference", "amount_paid", "updated_at",
    ])
    logger.info("Registration %s payment status set to %s", registration.registration_number, payment_status)
    return registration


def add_admin_note(registration, note, now=None):
    """Append a timestamped line to the registration's admin notes."""
    stamp = (now or timezone.now()).isoformat(timespec="seconds")
    line = f"[{stamp}] {note.strip()}"
    registration.admin_notes = f"{registration.admin_notes}\n{line}" if registration.admin_notes else line
    registration.save(update_fields=["admin_notes", "updated_at"])
    return registration


def child_names(registration):
    return [child.get("child_name") for child in registration.children or []]


def check_in(registration, child_name, user=None, notes=""):
    """
    Mark a child present for today. Returns (attendance, created, action_item).
    Checking in a child on a registration that is not fully paid raises a
    pending collection for the accounts team.
    """
    attendance, created = CampAttendance.objects.get_or_create(
        registration=registration,
        child_name=child_name,
        attendance_date=timezone.localdate(),
        defaults={"marked_by": user, "notes": notes},
    )

    action_item = None
    if registration.payment_status != "paid":
        action_item, raised = create_unpaid_check_in_item(registration, child_name)
        if raised:
            logger.info("Unpaid check-in for %s on %s, accounts notified",
                        child_name, registration.registration_number)
    return attendance, created, action_item
