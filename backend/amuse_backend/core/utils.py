import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.utils.timezone import now
from rest_framework import status
from rest_framework.response import Response
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    success: bool
    error: Optional[str] = None


# Helper for standardized API responses
def api_response(status_text, message, data=None, http_status=status.HTTP_200_OK):
    return Response(
        {"status": status_text, "message": message, "data": data},
        status=http_status,
    )


def send_email_via_sendgrid(subject, message, to_email):
    """Send an email using SendGrid API client. Returns an EmailResult."""
    email = Mail(
        from_email=settings.DEFAULT_FROM_EMAIL,   # must be verified in SendGrid
        to_emails=to_email,
        subject=subject,
        html_content=message,
    )
    if not settings.SENDGRID_API_KEY:
        logger.error("SENDGRID_API_KEY not configured, cannot send '%s' to %s", subject, to_email)
        return EmailResult(success=False, error="Email service not configured")
    try:
        sg = SendGridAPIClient(settings.SENDGRID_API_KEY)
        response = sg.send(email)
    except Exception as e:
        logger.error("Error sending email '%s' to %s: %s", subject, to_email, e)
        return EmailResult(success=False, error=str(e))

    if response.status_code >= 400:
        logger.error("SendGrid rejected '%s' to %s with status %s", subject, to_email, response.status_code)
        return EmailResult(success=False, error=f"SendGrid returned status {response.status_code}")

    logger.info("Email '%s' sent to %s (status %s)", subject, to_email, response.status_code)
    return EmailResult(success=True)


# Styled HTML email (same design across all emails)
def build_email_html(title, greeting, message, footer=""):
    greeting_html = f"<p>Hello <strong>{greeting}</strong>,</p>" if greeting else ""
    html = f"""
<div style="font-family:Arial, sans-serif; background-color:#f3f7f2; padding:20px;">
  <div style="max-width:600px; margin:auto; background-color:#ffffff; border-radius:8px; overflow:hidden; border:1px solid #ddd;">
    <div style="background-color:#2f6b3a; color:#fff; padding:15px; text-align:center; font-size:20px;">Amuse Kenya</div>
    <div style="padding:20px; color:#333;">
      <h2 style="color:#2f6b3a;">{title}</h2>
      {greeting_html}
      <p>{message}</p>
      <p>{footer}</p>
    </div>
    <div style="background-color:#2f6b3a; color:#fff; text-align:center; padding:10px; font-size:12px;">
      &copy; {now().year} Amuse Kenya. All rights reserved.
    </div>
  </div>
</div>
"""
    return html


def _children_rows(children, currency):
    rows = []
    for child in children:
        sessions = ", ".join(child.get("selected_sessions") or []) or "N/A"
        dates = ", ".join(child.get("selected_dates") or [])
        line = (
            f"<b>{child.get('child_name', '')}</b> (Age: {child.get('age_range') or 'N/A'})<br>"
            f"- Sessions: {sessions}<br>"
        )
        if dates:
            line += f"- Dates: {dates}<br>"
        if child.get("price") is not None:
            line += f"- Amount: {currency} {child['price']}<br>"
        rows.append(line)
    return "<br>".join(rows)


def send_confirmation_email(email, program_type, details):
    """
    Transactional confirmation sent after a registration is saved.

    `details` carries parent_name, program_title, registration_number,
    children, total_amount, currency and qr_code_image (optional data URL).
    The caller decides what a failed result means.
    """
    program_title = details.get("program_title") or program_type.replace("-", " ").title()
    currency = details.get("currency", "KES")
    body = (
        f"Thank you for registering for <b>{program_title}</b>. "
        f"Your registration has been received.<br><br>"
        f"<b>Registration Number:</b> {details.get('registration_number') or 'Pending'}<br><br>"
    )
    children = details.get("children") or []
    if children:
        body += f"<b>Children Registered:</b><br>{_children_rows(children, currency)}<br><br>"
    if details.get("total_amount") is not None:
        body += f"<b>Total Amount:</b> {currency} {details['total_amount']}<br><br>"
    if details.get("qr_code_image"):
        body += (
            "Present this QR code at check-in:<br>"
            f"<img src=\"{details['qr_code_image']}\" alt=\"Registration QR code\" width=\"200\" height=\"200\"><br>"
        )

    html_message = build_email_html(
        title=f"Registration Confirmed - {program_title}",
        greeting=details.get("parent_name"),
        message=body,
        footer="For inquiries reply to this email or contact info@amusekenya.co.ke.",
    )
    return send_email_via_sendgrid(f"✅ Registration Confirmation - {program_title}", html_message, email)
