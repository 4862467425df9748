from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from accounts.models import AccountsActionItem, Bill, Expense, Invoice, Vendor
from core.tests.base import BaseTestCase
from core.utils import EmailResult
from portal.models import AuditLog, Role


class TestInvoiceApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.login_as(Role.ACCOUNTS)

    def create_invoice(self, **overrides):
        payload = {
            "customer_name": "Baraka School",
            "customer_email": "bursar@example.com",
            "discount_percent": "10",
            "tax_percent": "0",
            "items": [{"description": "School trip", "quantity": "20", "unit_price": "1500"}],
        }
        payload.update(overrides)
        return self.client.post("/api/accounts/invoices/", payload, format="json")

    def test_create_computes_totals(self):
        response = self.create_invoice()

        assert response.status_code == 201
        data = response.json()
        assert data["subtotal"] == "30000.00"
        assert data["discount_amount"] == "3000.00"
        assert data["total_amount"] == "27000.00"
        assert len(data["items"]) == 1

    def test_update_replaces_items(self):
        invoice_id = self.create_invoice().json()["id"]

        response = self.client.patch(f"/api/accounts/invoices/{invoice_id}/", {
            "discount_percent": "0",
            "items": [{"description": "Half day", "quantity": "2", "unit_price": "2000"}],
        }, format="json")

        assert response.status_code == 200
        assert response.json()["total_amount"] == "4000.00"
        assert Invoice.objects.get().items.count() == 1

    @mock.patch("accounts.services.send_email_via_sendgrid", return_value=EmailResult(success=True))
    def test_send(self, send_email):
        invoice_id = self.create_invoice().json()["id"]

        response = self.client.post(f"/api/accounts/invoices/{invoice_id}/send/")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "sent"
        assert AuditLog.objects.filter(event_type="INVOICE_SENT").exists()

    @mock.patch("accounts.services.send_email_via_sendgrid",
                return_value=EmailResult(success=False, error="Email service not configured"))
    def test_send_failure_is_bad_gateway(self, send_email):
        invoice_id = self.create_invoice().json()["id"]

        response = self.client.post(f"/api/accounts/invoices/{invoice_id}/send/")

        assert response.status_code == 502
        assert Invoice.objects.get().status == "draft"

    def test_send_without_email(self):
        invoice_id = self.create_invoice(customer_email="").json()["id"]

        assert self.client.post(f"/api/accounts/invoices/{invoice_id}/send/").status_code == 400

    def test_mark_paid(self):
        invoice_id = self.create_invoice().json()["id"]

        response = self.client.post(f"/api/accounts/invoices/{invoice_id}/mark-paid/",
                                    {"payment_method": "mpesa", "payment_reference": "QAZ1"}, format="json")
        again = self.client.post(f"/api/accounts/invoices/{invoice_id}/mark-paid/", {}, format="json")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "paid"
        assert again.status_code == 400

    def test_marketing_cannot_manage_invoices(self):
        self.login_as(Role.MARKETING)

        assert self.client.get("/api/accounts/invoices/").status_code == 403


class TestBillApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.login_as(Role.ACCOUNTS)
        self.vendor = Vendor.objects.create(name="Naivasha Buses")
        self.bill = Bill.objects.create(vendor=self.vendor, amount=Decimal("8000"), due_date=date(2026, 11, 1))

    def test_record_payment(self):
        response = self.client.post(f"/api/accounts/bills/{self.bill.id}/record-payment/",
                                    {"amount": "3000", "payment_method": "mpesa"}, format="json")

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "partial"
        assert response.json()["data"]["balance"] == "5000.00"
        payments = self.client.get(f"/api/accounts/bills/{self.bill.id}/payments/").json()["data"]
        assert len(payments) == 1

    def test_overpayment_is_a_validation_error(self):
        response = self.client.post(f"/api/accounts/bills/{self.bill.id}/record-payment/",
                                    {"amount": "9000"}, format="json")

        assert response.status_code == 400
        assert "amount" in response.json()

    def test_summary(self):
        response = self.client.get("/api/accounts/bills/summary/")

        assert response.status_code == 200
        assert response.json()["data"]["pending_bills"] == 1


class TestExpenseApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.expense = Expense.objects.create(description="Fuel", amount=Decimal("4500"), category="Transport")

    def test_accounts_can_file_but_not_approve(self):
        self.login_as(Role.ACCOUNTS)

        created = self.client.post("/api/accounts/expenses/", {
            "description": "Snacks", "amount": "1200", "category": "Catering", "status": "approved",
        }, format="json")
        approve = self.client.post(f"/api/accounts/expenses/{self.expense.id}/approve/")

        assert created.status_code == 201
        assert created.json()["status"] == "pending"
        assert approve.status_code == 403

    def test_ceo_approves_once(self):
        ceo = self.login_as(Role.CEO)

        first = self.client.post(f"/api/accounts/expenses/{self.expense.id}/approve/",
                                 {"notes": "Within budget"}, format="json")
        second = self.client.post(f"/api/accounts/expenses/{self.expense.id}/reject/")

        assert first.status_code == 200
        assert second.status_code == 400
        self.expense.refresh_from_db()
        assert self.expense.status == "approved"
        assert self.expense.approved_by == ceo

    def test_budget_period_validation(self):
        self.login_as(Role.ACCOUNTS)

        response = self.client.post("/api/accounts/budgets/", {
            "category": "Transport", "allocated_amount": "1000",
            "period_start": "2026-10-31", "period_end": "2026-10-01",
        }, format="json")

        assert response.status_code == 400
        assert "period_end" in response.json()


class TestPendingCollectionApi(BaseTestCase, TestCase):
    def setUp(self):
        super().setUp()
        self.registration = self.get_registration()
        self.item = AccountsActionItem.objects.create(
            registration=self.registration, child_name="Wanjiru", parent_name="Achieng Otieno",
            amount_due=Decimal("7000"),
        )
        self.staff = self.login_as(Role.ACCOUNTS)

    def test_list_pending(self):
        response = self.client.get("/api/accounts/pending-collections/?status=pending")

        assert response.json()["count"] == 1
        assert response.json()["results"][0]["registration_number"] == self.registration.registration_number

    def test_complete_item(self):
        response = self.client.post(f"/api/accounts/pending-collections/{self.item.id}/complete/",
                                    {"notes": "Invoice sent"}, format="json")

        assert response.status_code == 200
        self.item.refresh_from_db()
        assert self.item.status == "completed"
        assert self.item.completed_by == self.staff

    def test_complete_for_registration(self):
        response = self.client.post(
            f"/api/accounts/pending-collections/complete-registration/{self.registration.id}/", {}, format="json"
        )
        missing = self.client.post("/api/accounts/pending-collections/complete-registration/99999/")

        assert response.json()["data"] == {"completed": 1}
        assert missing.status_code == 404
