from datetime import date, datetime, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from accounts.dashboard import (
    budget_utilization, compute_dashboard, load_dashboard, month_bounds, percent_change,
)
from accounts.models import AccountsActionItem, Budget, Expense, Invoice, Payment
from core.tests.base import BaseTestCase


def payment(amount, day):
    return {"amount": Decimal(amount), "payment_date": timezone.make_aware(datetime(2026, 10, day, 9)),
            "customer_name": "Achieng"}


def expense(amount, day, description="Fuel"):
    return {"amount": Decimal(amount), "expense_date": date(2026, 10, day), "description": description}


def invoice(number, status, total, paid="0", day=1):
    return {"invoice_number": number, "customer_name": "Baraka", "status": status,
            "total_amount": Decimal(total), "amount_paid": Decimal(paid),
            "created_at": timezone.make_aware(datetime(2026, 10, day, 8))}


def dashboard(**kwargs):
    rows = {
        "invoices": [], "payments_this_month": [], "payments_last_month": [],
        "expenses_this_month": [], "expenses_last_month": [], "budgets": [], "pending_items": [],
    }
    rows.update(kwargs)
    return compute_dashboard(**rows)


class TestPercentChange:
    def test_rounds_to_one_decimal(self):
        assert percent_change(Decimal("1500"), Decimal("1000")) == 50.0
        assert percent_change(Decimal("1000"), Decimal("3000")) == -66.7

    def test_no_baseline_is_zero(self):
        assert percent_change(Decimal("5000"), Decimal("0")) == 0.0


class TestBudgetUtilization:
    def test_capped_at_hundred(self):
        assert budget_utilization(Decimal("1500"), Decimal("1000")) == 100.0

    def test_fraction(self):
        assert budget_utilization(Decimal("250"), Decimal("1000")) == 25.0

    def test_zero_allocation(self):
        assert budget_utilization(Decimal("10"), Decimal("0")) == 0.0


def test_month_bounds_across_year_end():
    assert month_bounds(date(2026, 1, 15)) == (date(2025, 12, 1), date(2026, 1, 1), date(2026, 2, 1))
    assert month_bounds(date(2026, 12, 3)) == (date(2026, 11, 1), date(2026, 12, 1), date(2027, 1, 1))


class TestComputeDashboard:
    def test_revenue_and_change(self):
        result = dashboard(
            payments_this_month=[payment("3000", 2), payment("3000", 5)],
            payments_last_month=[{"amount": Decimal("4000"), "payment_date": None, "customer_name": ""}],
        )

        assert result["total_revenue"] == Decimal("6000")
        assert result["revenue_change"] == 50.0

    def test_revenue_change_without_last_month(self):
        result = dashboard(payments_this_month=[payment("3000", 2)])

        assert result["revenue_change"] == 0.0

    def test_outstanding_counts_sent_and_overdue_only(self):
        result = dashboard(invoices=[
            invoice("INV-1", "sent", "5000", paid="1000"),
            invoice("INV-2", "overdue", "2000"),
            invoice("INV-3", "draft", "9000"),
            invoice("INV-4", "paid", "7000", paid="7000"),
        ])

        assert result["outstanding_invoices"] == {"count": 2, "amount": Decimal("6000")}

    def test_pending_collections(self):
        result = dashboard(pending_items=[
            {"amount_due": Decimal("7000"), "amount_paid": Decimal("2000")},
            {"amount_due": Decimal("3500"), "amount_paid": Decimal("0")},
        ])

        assert result["pending_collections"] == {"count": 2, "outstanding": Decimal("8500")}

    def test_recent_transactions_newest_first_and_limited(self):
        result = dashboard(
            payments_this_month=[payment("100", day) for day in (1, 3, 5)],
            expenses_this_month=[expense("50", 4), expense("60", 6, "Snacks")],
            invoices=[invoice("INV-9", "draft", "900", day=2)],
        )

        recent = result["recent_transactions"]
        assert len(recent) == 5
        assert recent[0]["description"] == "Snacks"
        assert [entry["type"] for entry in recent] == ["expense", "payment", "expense", "payment", "invoice"]

    def test_budgets_carry_utilization(self):
        result = dashboard(budgets=[{
            "id": 1, "category": "Transport", "department": "Programs",
            "allocated_amount": Decimal("1000"), "spent_amount": Decimal("1200"),
        }])

        assert result["budgets"][0]["utilization"] == 100.0


class TestLoadDashboard(BaseTestCase, TestCase):
    def test_reads_this_and_last_month(self):
        today = timezone.localdate()
        _, this_month, _ = month_bounds(today)
        Payment.objects.create(customer_name="Achieng", amount=Decimal("2000"))
        Payment.objects.create(customer_name="Failed", amount=Decimal("9000"), status="failed")
        Payment.objects.create(customer_name="Old", amount=Decimal("1000"),
                               payment_date=timezone.now() - timedelta(days=40))
        Expense.objects.create(description="Fuel", amount=Decimal("500"), category="Transport",
                               expense_date=this_month)
        Expense.objects.create(description="Rejected", amount=Decimal("800"), category="Transport",
                               expense_date=this_month, status="rejected")
        Invoice.objects.create(customer_name="Baraka", total_amount=Decimal("4000"), status="sent")
        Budget.objects.create(category="Transport", allocated_amount=Decimal("2000"),
                              spent_amount=Decimal("500"), period_start=this_month,
                              period_end=this_month + timedelta(days=27))
        registration = self.get_registration()
        AccountsActionItem.objects.create(registration=registration, child_name="Wanjiru", parent_name="Achieng",
                                          amount_due=Decimal("7000"))

        result = load_dashboard(today)

        assert result["total_revenue"] == Decimal("2000")
        assert result["monthly_expenses"] == Decimal("500")
        assert result["outstanding_invoices"]["count"] == 1
        assert result["pending_collections"]["count"] == 1
        assert result["budgets"][0]["utilization"] == 25.0

    def test_dashboard_endpoint_requires_finance_role(self):
        self.login_as("COACH")
        assert self.client.get("/api/accounts/dashboard/").status_code == 403

        self.login_as("ACCOUNTS")
        response = self.client.get("/api/accounts/dashboard/")
        assert response.status_code == 200
        assert set(response.json()["data"]) >= {"total_revenue", "revenue_change", "recent_transactions"}
