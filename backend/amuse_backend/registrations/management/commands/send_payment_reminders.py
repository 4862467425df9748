from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from core.utils import build_email_html, send_email_via_sendgrid
from registrations.models import Registration


class Command(BaseCommand):
    help = "Email parents whose registrations are still unpaid after a number of days."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=4)

    def handle(self, *args, **options):
        cutoff = timezone.now() - timedelta(days=options["days"])
        pending = Registration.objects.select_related("program").filter(
            payment_status__in=["unpaid", "partial"], status="active", created_at__lte=cutoff
        )

        sent = failed = 0
        for reg in pending:
            message = (
                f"We noticed your payment for <b>{reg.program.title}</b> is still outstanding.<br>"
                f"Please complete your payment to confirm your registration.<br><br>"
                f"Registration Number: {reg.registration_number}<br>"
                f"Balance: {reg.program.currency} {reg.balance}<br>"
            )
            html_message = build_email_html("Payment Reminder", reg.parent_name, message)
            result = send_email_via_sendgrid(f"🔔 Payment Reminder - {reg.program.title}", html_message, reg.email)
            if result.success:
                sent += 1
            else:
                failed += 1

        self.stdout.write(self.style.SUCCESS(f"Reminders sent: {sent}, failed: {failed}"))
