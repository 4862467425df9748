from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from accounts.models import AccountsActionItem, Payment
from core.tests.base import BaseTestCase
from core.utils import EmailResult
from portal.models import AuditLog, Role
from registrations.models import CampAttendance, Lead, ProgramConfig, Registration
from registrations.qr import generate_qr_data


@mock.patch("core.utils.send_email_via_sendgrid", return_value=EmailResult(success=True))
class TestRegistrationSubmitApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.program = self.get_program()
        self.url = "/api/registrations/programs/summer/register/"

    def test_submit_creates_registration(self, send_email):
        response = self.client.post(self.url, self.registration_payload(), format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["email_sent"] is True
        assert body["data"]["registration_number"].startswith("REG-")
        assert Decimal(body["data"]["total_amount"]) == Decimal("10500")
        assert body["qr_code_image"].startswith("data:image/png;base64,")
        assert AuditLog.objects.filter(event_type="REGISTRATION_CREATE").count() == 1
        send_email.assert_called_once()

    def test_invalid_payload_returns_field_errors(self, send_email):
        response = self.client.post(self.url, self.registration_payload(phone="", children=[]), format="json")

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert "phone" in errors
        assert "children" in errors
        assert Registration.objects.count() == 0
        send_email.assert_not_called()

    def test_duplicate_returns_conflict(self, send_email):
        first = self.client.post(self.url, self.registration_payload(), format="json")

        second = self.client.post(self.url, self.registration_payload(), format="json")

        assert second.status_code == 409
        assert second.json()["registration_number"] == first.json()["data"]["registration_number"]

    def test_email_failure_still_created(self, send_email):
        send_email.return_value = EmailResult(success=False, error="Email service not configured")

        response = self.client.post(self.url, self.registration_payload(), format="json")

        assert response.status_code == 201
        assert response.json()["email_sent"] is False
        assert response.json()["email_error"] == "Email service not configured"

    def test_inactive_program_is_not_found(self, send_email):
        self.program.is_active = False
        self.program.save()

        response = self.client.post(self.url, self.registration_payload(), format="json")

        assert response.status_code == 404


class TestProgramApi(BaseTestCase, TestCase):
    def test_list_and_detail(self):
        self.get_program("summer")
        self.get_program("easter", is_active=False)

        listing = self.client.get("/api/registrations/programs/")
        detail = self.client.get("/api/registrations/programs/summer/")

        assert [p["program_type"] for p in listing.json()] == ["summer"]
        assert detail.json()["full_day_rate"] == "3500.00"

    def test_quote_recomputes_children(self):
        self.get_program("summer")
        payload = {"children": [
            {"child_name": "Amani", "number_of_days": 2, "selected_sessions": ["half"]},
            {"number_of_days": 1},
        ]}

        response = self.client.post("/api/registrations/programs/summer/quote/", payload, format="json")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["children"][0]["selected_sessions"] == ["half", "full"]
        assert Decimal(str(data["total_amount"])) == Decimal("9000")
        assert data["currency"] == "KES"

    def test_quote_rejects_too_many_days(self):
        self.get_program("summer", max_days=5)

        response = self.client.post("/api/registrations/programs/summer/quote/",
                                    {"children": [{"number_of_days": 6}]}, format="json")

        assert response.status_code == 400


@mock.patch("core.utils.send_email_via_sendgrid", return_value=EmailResult(success=True))
class TestGroundRegistrationApi(BaseTestCase, TestCase):
    url = "/api/registrations/programs/summer/ground/"

    def test_requires_registration_permission(self, send_email):
        self.get_program()
        self.login_as(Role.COACH)

        response = self.client.post(self.url, self.registration_payload(amount_paid="1000"), format="json")

        assert response.status_code == 403

    def test_staff_capture_walk_in(self, send_email):
        self.get_program()
        staff = self.login_as(Role.ACCOUNTS)

        response = self.client.post(
            self.url, self.registration_payload(amount_paid="10500", notes="Cash at gate"), format="json"
        )

        assert response.status_code == 201
        registration = Registration.objects.get()
        assert registration.registration_type == "ground_registration"
        assert registration.payment_method == "cash_ground"
        assert registration.payment_status == "paid"
        assert registration.created_by == staff
        assert registration.admin_notes == "Cash at gate"
        assert Lead.objects.get().source == "ground_registration"
        assert Payment.objects.get().amount == Decimal("10500")


class TestScanAndCheckIn(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.registration = self.get_registration()
        self.registration.qr_code_data = generate_qr_data(self.registration.id)
        self.registration.save()

    def test_scan_requires_login(self):
        response = self.client.post("/api/registrations/scan/", {"qr_code_data": "x"}, format="json")
        assert response.status_code in (401, 403)

    def test_scan_resolves_registration(self):
        self.login_as(Role.COACH)

        response = self.client.post("/api/registrations/scan/",
                                    {"qr_code_data": self.registration.qr_code_data}, format="json")

        assert response.status_code == 200
        assert response.json()["data"]["registration_number"] == self.registration.registration_number
        assert response.json()["children"] == ["Wanjiru"]

    def test_scan_rejects_foreign_codes(self):
        self.login_as(Role.COACH)

        response = self.client.post("/api/registrations/scan/", {"qr_code_data": '{"type":"x"}'}, format="json")

        assert response.status_code == 400

    def test_scan_unknown_registration(self):
        self.login_as(Role.COACH)

        response = self.client.post("/api/registrations/scan/",
                                    {"qr_code_data": generate_qr_data(99999)}, format="json")

        assert response.status_code == 404

    @mock.patch("accounts.services.send_email_via_sendgrid", return_value=EmailResult(success=True))
    def test_unpaid_check_in_raises_pending_collection(self, send_email):
        coach = self.login_as(Role.COACH)
        url = f"/api/registrations/records/{self.registration.id}/check-in/"

        first = self.client.post(url, {"child_name": "Wanjiru"}, format="json")
        second = self.client.post(url, {"child_name": "Wanjiru"}, format="json")

        assert first.status_code == 201
        assert second.status_code == 200
        assert CampAttendance.objects.get().marked_by == coach
        item = AccountsActionItem.objects.get()
        assert first.json()["pending_collection"] == item.id
        assert item.action_type == "invoice_needed"
        assert item.amount_due == Decimal("7000")
        # one notification for one pending item
        send_email.assert_called_once()

    def test_paid_check_in_raises_nothing(self):
        self.registration.payment_status = "paid"
        self.registration.save()
        self.login_as(Role.COACH)

        response = self.client.post(f"/api/registrations/records/{self.registration.id}/check-in/",
                                    {"child_name": "Wanjiru"}, format="json")

        assert response.status_code == 201
        assert response.json()["pending_collection"] is None
        assert AccountsActionItem.objects.count() == 0

    def test_check_in_unknown_child(self):
        self.login_as(Role.COACH)

        response = self.client.post(f"/api/registrations/records/{self.registration.id}/check-in/",
                                    {"child_name": "Someone Else"}, format="json")

        assert response.status_code == 400
        assert CampAttendance.objects.count() == 0

    def test_coach_cannot_list_registrations(self):
        self.login_as(Role.COACH)

        assert self.client.get("/api/registrations/records/").status_code == 403


class TestRegistrationAdminApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.registration = self.get_registration()
        self.login_as(Role.ACCOUNTS)

    def test_list_filters(self):
        self.get_registration(email="other@example.com", payment_status="paid")

        unpaid = self.client.get("/api/registrations/records/?payment_status=unpaid").json()
        search = self.client.get("/api/registrations/records/?search=other@").json()

        assert unpaid["count"] == 1
        assert search["results"][0]["email"] == "other@example.com"

    def test_mark_paid_defaults_amount_to_total(self):
        response = self.client.post(
            f"/api/registrations/records/{self.registration.id}/payment-status/",
            {"payment_status": "paid", "payment_method": "mpesa", "payment_reference": "QWE123"},
            format="json",
        )

        assert response.status_code == 200
        self.registration.refresh_from_db()
        assert self.registration.payment_status == "paid"
        assert self.registration.amount_paid == Decimal("7000")
        assert self.registration.payment_reference == "QWE123"
        assert AuditLog.objects.filter(event_type="PAYMENT_STATUS_UPDATE").exists()

    def test_notes_are_appended(self):
        url = f"/api/registrations/records/{self.registration.id}/notes/"

        self.client.post(url, {"note": "Called parent"}, format="json")
        response = self.client.post(url, {"note": "Will pay Friday"}, format="json")

        lines = response.json()["data"]["admin_notes"].split("\n")
        assert len(lines) == 2
        assert lines[0].endswith("Called parent")
        assert lines[1].endswith("Will pay Friday")


class TestPaystackApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.registration = self.get_registration(amount_paid=Decimal("2000"), payment_status="partial")

    @mock.patch("registrations.payments.requests.post")
    def test_pay_initializes_for_balance(self, post):
        post.return_value.json.return_value = {
            "status": True,
            "data": {"reference": "ref_123", "authorization_url": "https://checkout.paystack.com/abc"},
        }

        response = self.client.post(f"/api/registrations/pay/{self.registration.registration_number}/")

        assert response.status_code == 201
        assert response.json()["payment_url"] == "https://checkout.paystack.com/abc"
        assert post.call_args.kwargs["json"]["amount"] == 500000
        self.registration.refresh_from_db()
        assert self.registration.payment_reference == "ref_123"

    @mock.patch("registrations.payments.requests.post")
    def test_pay_gateway_refusal(self, post):
        post.return_value.json.return_value = {"status": False, "message": "Invalid key"}

        response = self.client.post(f"/api/registrations/pay/{self.registration.registration_number}/")

        assert response.status_code == 502
        assert response.json()["message"] == "Invalid key"

    @mock.patch("registrations.views.send_email_via_sendgrid", return_value=EmailResult(success=True))
    @mock.patch("registrations.payments.requests.get")
    def test_verify_settles_registration(self, get, send_email):
        self.registration.payment_reference = "ref_123"
        self.registration.save()
        get.return_value.json.return_value = {"status": True, "data": {"status": "success", "amount": 500000}}

        response = self.client.get("/api/registrations/verify-payment/?reference=ref_123")

        assert response.status_code == 200
        self.registration.refresh_from_db()
        assert self.registration.payment_status == "paid"
        assert self.registration.amount_paid == Decimal("7000")
        assert self.registration.registration_type == "online_paid"
        payment = Payment.objects.get()
        assert payment.source == "paystack"
        assert payment.payment_reference == "ref_123"
        send_email.assert_called_once()

    @mock.patch("registrations.views.send_email_via_sendgrid", return_value=EmailResult(success=True))
    @mock.patch("registrations.payments.requests.get")
    def test_verify_short_payment_stays_partial(self, get, send_email):
        self.registration.payment_reference = "ref_123"
        self.registration.save()
        get.return_value.json.return_value = {"status": True, "data": {"status": "success", "amount": 100000}}

        response = self.client.get("/api/registrations/verify-payment/?reference=ref_123")

        assert response.status_code == 200
        self.registration.refresh_from_db()
        assert self.registration.payment_status == "partial"
        assert self.registration.amount_paid == Decimal("3000")
        assert self.registration.balance == Decimal("4000")
        assert Payment.objects.get().amount == Decimal("1000")

    @mock.patch("registrations.payments.requests.get")
    def test_verify_failed_transaction(self, get):
        self.registration.payment_reference = "ref_123"
        self.registration.save()
        get.return_value.json.return_value = {"status": True, "data": {"status": "abandoned"}}

        response = self.client.get("/api/registrations/verify-payment/?reference=ref_123")

        assert response.status_code == 400
        self.registration.refresh_from_db()
        assert self.registration.payment_status == "partial"

    def test_verify_requires_reference(self):
        assert self.client.get("/api/registrations/verify-payment/").status_code == 400
        assert self.client.get("/api/registrations/verify-payment/?reference=nope").status_code == 404


class TestSeedProgramsCommand(BaseTestCase, TestCase):
    def test_seeds_once_and_keeps_edited_rates(self):
        call_command("seed_programs", stdout=StringIO())
        summer = ProgramConfig.objects.get(program_type="summer")
        summer.full_day_rate = Decimal("9999")
        summer.save()

        call_command("seed_programs", stdout=StringIO())

        summer.refresh_from_db()
        assert summer.full_day_rate == Decimal("9999")
        assert ProgramConfig.objects.filter(program_type="homeschooling", pricing_mode="flat").exists()

    def test_reset_rates(self):
        call_command("seed_programs", stdout=StringIO())
        ProgramConfig.objects.filter(program_type="summer").update(full_day_rate=Decimal("9999"))

        call_command("seed_programs", "--reset-rates", stdout=StringIO())

        assert ProgramConfig.objects.get(program_type="summer").full_day_rate == Decimal("2500")


class TestPaymentRemindersCommand(BaseTestCase, TestCase):
    @mock.patch("registrations.management.commands.send_payment_reminders.send_email_via_sendgrid",
                return_value=EmailResult(success=True))
    def test_reminds_only_stale_unpaid_registrations(self, send_email):
        stale = self.get_registration()
        self.get_registration(email="fresh@example.com")
        self.get_registration(email="paid@example.com", payment_status="paid")
        Registration.objects.exclude(email="fresh@example.com").update(
            created_at=timezone.now() - timedelta(days=5)
        )
        out = StringIO()

        call_command("send_payment_reminders", "--days", "4", stdout=out)

        send_email.assert_called_once()
        assert send_email.call_args[0][2] == stale.email
        assert "Reminders sent: 1, failed: 0" in out.getvalue()
