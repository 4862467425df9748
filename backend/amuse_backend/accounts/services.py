import logging
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.utils import build_email_html, send_email_via_sendgrid
from .models import (
    AccountsActionItem, Bill, BillPayment, Invoice, InvoiceItem, Payment, Vendor, generate_invoice_number,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _money(value):
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_line_total(quantity, unit_price, discount_percent=0):
    gross = Decimal(quantity) * Decimal(unit_price)
    return _money(gross - gross * Decimal(discount_percent) / 100)


def calculate_invoice_totals(line_totals, discount_percent=0, tax_percent=0):
    """Overall discount applies to the subtotal; tax applies after discount."""
    subtotal = sum((Decimal(total) for total in line_totals), Decimal("0"))
    discount_amount = subtotal * Decimal(discount_percent) / 100
    after_discount = subtotal - discount_amount
    tax_amount = after_discount * Decimal(tax_percent) / 100
    return {
        "subtotal": _money(subtotal),
        "discount_amount": _money(discount_amount),
        "tax_amount": _money(tax_amount),
        "total_amount": _money(after_discount + tax_amount),
    }


def next_invoice_number():
    number = generate_invoice_number()
    while Invoice.objects.filter(invoice_number=number).exists():
        number = generate_invoice_number()
    return number


@transaction.atomic
def create_invoice(customer_name, items, customer_email="", discount_percent=0, tax_percent=0, **fields):
    """
    Create an invoice with its line items. `items` is a list of dicts with
    description, quantity, unit_price and an optional discount_percent.
    """
    lines = []
    for item in items:
        line_discount = item.get("discount_percent") or 0
        lines.append(InvoiceItem(
            description=item["description"],
            quantity=item.get("quantity", 1),
            unit_price=item["unit_price"],
            discount_percent=line_discount,
            line_total=calculate_line_total(item.get("quantity", 1), item["unit_price"], line_discount),
        ))

    totals = calculate_invoice_totals([line.line_total for line in lines], discount_percent, tax_percent)
    invoice = Invoice.objects.create(
        invoice_number=next_invoice_number(),
        customer_name=customer_name,
        customer_email=customer_email,
        discount_percent=discount_percent,
        tax_percent=tax_percent,
        **totals,
        **fields,
    )
    for line in lines:
        line.invoice = invoice
    InvoiceItem.objects.bulk_create(lines)
    return invoice


def create_invoice_for_registration(registration):
    """Draft invoice with one line per child, raised right after a registration is saved."""
    items = [
        {
            "description": f"{registration.program.title} - {child.get('child_name', 'Child')}",
            "quantity": 1,
            "unit_price": child.get("price") or 0,
        }
        for child in registration.children
    ]
    invoice = create_invoice(
        customer_name=registration.parent_name,
        customer_email=registration.email,
        items=items,
        registration=registration,
        currency=registration.program.currency,
        due_date=timezone.localdate() + timedelta(days=7),
        notes=f"Registration {registration.registration_number}",
    )
    logger.info("Draft invoice %s raised for %s", invoice.invoice_number, registration.registration_number)
    return invoice


def send_invoice(invoice):
    """Email the invoice to the customer and mark it sent. Returns the EmailResult."""
    rows = "".join(
        f"- {item.description}: {invoice.currency} {item.line_total}<br>" for item in invoice.items.all()
    )
    body = (
        f"Please find your invoice <b>{invoice.invoice_number}</b> below.<br><br>"
        f"{rows}<br>"
        f"<b>Subtotal:</b> {invoice.currency} {invoice.subtotal}<br>"
        f"<b>Discount:</b> {invoice.currency} {invoice.discount_amount}<br>"
        f"<b>Tax:</b> {invoice.currency} {invoice.tax_amount}<br>"
        f"<b>Total Due:</b> {invoice.currency} {invoice.total_amount}<br>"
        f"<b>Due Date:</b> {invoice.due_date or 'On receipt'}<br>"
    )
    html_message = build_email_html(
        title=f"Invoice {invoice.invoice_number}",
        greeting=invoice.customer_name,
        message=body,
        footer=f"Payment terms: {invoice.payment_terms}",
    )
    result = send_email_via_sendgrid(f"Invoice {invoice.invoice_number} from Amuse Kenya", html_message,
                                     invoice.customer_email)
    if result.success:
        invoice.status = "sent"
        invoice.sent_at = timezone.now()
        invoice.save(update_fields=["status", "sent_at", "updated_at"])
    return result


@transaction.atomic
def mark_invoice_paid(invoice, payment_method="cash", payment_reference="", amount=None):
    amount = invoice.balance if amount is None else Decimal(amount)
    payment = Payment.objects.create(
        invoice=invoice,
        registration=invoice.registration,
        customer_name=invoice.customer_name,
        amount=amount,
        payment_method=payment_method,
        payment_reference=payment_reference,
        source="invoice",
    )
    invoice.amount_paid += amount
    if invoice.amount_paid >= invoice.total_amount:
        invoice.status = "paid"
    invoice.save(update_fields=["amount_paid", "status", "updated_at"])
    return payment


def record_registration_payment(registration, amount, payment_method, reference="", source="ground_registration"):
    return Payment.objects.create(
        registration=registration,
        customer_name=registration.parent_name,
        amount=amount,
        payment_method=payment_method,
        payment_reference=reference or "",
        status="completed",
        source=source,
    )


def notify_accountants(item):
    recipient = settings.ACCOUNTS_NOTIFY_EMAIL
    if not recipient:
        logger.warning("ACCOUNTS_NOTIFY_EMAIL not configured, skipping notification for %s", item.child_name)
        return None

    body = (
        "A child has checked in without full payment.<br><br>"
        f"<b>Child:</b> {item.child_name}<br>"
        f"<b>Parent:</b> {item.parent_name}<br>"
        f"<b>Email:</b> {item.email or 'N/A'}<br>"
        f"<b>Phone:</b> {item.phone or 'N/A'}<br>"
        f"<b>Program:</b> {item.camp_type}<br>"
        f"<b>Amount Due:</b> {item.outstanding}<br><br>"
        "Please raise an invoice and follow up."
    )
    html_message = build_email_html(title="Pending Collection", greeting="Accounts Team", message=body)
    result = send_email_via_sendgrid(f"Pending payment - {item.child_name}", html_message, recipient)
    if not result.success:
        logger.warning("Accountant notification failed for %s: %s", item.child_name, result.error)
    return result


def create_unpaid_check_in_item(registration, child_name):
    """
    Open an `invoice_needed` item for a child checked in without full payment.
    At most one pending item exists per registration and child.
    """
    existing = AccountsActionItem.objects.filter(
        registration=registration, child_name=child_name, status="pending"
    ).first()
    if existing:
        return existing, False

    item = AccountsActionItem.objects.create(
        registration=registration,
        child_name=child_name,
        parent_name=registration.parent_name,
        email=registration.email,
        phone=registration.phone,
        action_type="invoice_needed",
        amount_due=registration.total_amount,
        amount_paid=registration.amount_paid,
        camp_type=registration.program.program_type,
    )
    notify_accountants(item)
    return item, True


def complete_action_item(item, user=None, notes=""):
    item.status = "completed"
    item.completed_at = timezone.now()
    item.completed_by = user
    if notes:
        item.notes = notes
    item.save()
    return item


def complete_action_items_for_registration(registration, user=None, notes=""):
    items = list(AccountsActionItem.objects.filter(registration=registration, status="pending"))
    for item in items:
        complete_action_item(item, user=user, notes=notes)
    return len(items)


def record_bill_payment(bill_id, amount, payment_date=None, payment_method="bank_transfer",
                        reference="", notes="", user=None):
    """Record a payment against a bill and move the bill to partial or paid."""
    amount = Decimal(amount)
    with transaction.atomic():
        bill = Bill.objects.select_for_update().get(pk=bill_id)
        if bill.status in ("paid", "cancelled"):
            raise ValueError(f"Bill {bill.bill_number} is {bill.status}.")
        if amount <= 0:
            raise ValueError("Payment amount must be greater than zero.")
        if amount > bill.balance:
            raise ValueError(f"Payment exceeds the outstanding balance of {bill.balance}.")

        payment = BillPayment.objects.create(
            bill=bill,
            amount=amount,
            payment_date=payment_date or timezone.localdate(),
            payment_method=payment_method,
            reference=reference,
            notes=notes,
            recorded_by=user,
        )
        bill.amount_paid += amount
        bill.status = "paid" if bill.amount_paid >= bill.amount else "partial"
        bill.save(update_fields=["amount_paid", "status", "updated_at"])
    return payment


def accounts_payable_summary(today=None):
    today = today or timezone.localdate()
    week_ahead = today + timedelta(days=7)
    open_bills = list(Bill.objects.exclude(status__in=["paid", "cancelled"]))

    overdue = [bill for bill in open_bills if bill.due_date < today]
    due_this_week = [bill for bill in open_bills if today <= bill.due_date <= week_ahead]

    return {
        "total_outstanding": sum((bill.balance for bill in open_bills), Decimal("0")),
        "overdue_count": len(overdue),
        "overdue_amount": sum((bill.balance for bill in overdue), Decimal("0")),
        "due_this_week_count": len(due_this_week),
        "due_this_week_amount": sum((bill.balance for bill in due_this_week), Decimal("0")),
        "total_vendors": Vendor.objects.filter(status="active").count(),
        "pending_bills": Bill.objects.filter(Q(status="pending") | Q(status="partial")).count(),
    }
