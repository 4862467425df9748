"""
Accounts dashboard aggregation.

`load_dashboard` runs the read queries; `compute_dashboard` turns the rows into
the summary and is pure, so it can be checked without a database.
"""
from datetime import date, datetime, time
from decimal import Decimal

from django.utils import timezone

from .models import AccountsActionItem, Budget, Expense, Invoice, Payment

RECENT_TRANSACTIONS_LIMIT = 5
ZERO = Decimal("0")


def percent_change(current, previous):
    """round((current - previous) / previous * 100, 1); 0 when there is no baseline."""
    current, previous = Decimal(current), Decimal(previous)
    if previous == 0:
        return 0.0
    return round(float((current - previous) / previous * 100), 1)


def budget_utilization(spent, allocated):
    spent, allocated = Decimal(spent), Decimal(allocated)
    if allocated <= 0:
        return 0.0
    return min(100.0, round(float(spent / allocated * 100), 1))


def month_bounds(today):
    """(start of last month, start of this month, start of next month) as dates."""
    this_month = today.replace(day=1)
    last_month = (this_month.replace(year=this_month.year - 1, month=12) if this_month.month == 1
                  else this_month.replace(month=this_month.month - 1))
    next_month = (this_month.replace(year=this_month.year + 1, month=1) if this_month.month == 12
                  else this_month.replace(month=this_month.month + 1))
    return last_month, this_month, next_month


def _sort_key(entry):
    value = entry["date"]
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    if isinstance(value, date):
        return timezone.make_aware(datetime.combine(value, time.min))
    return timezone.make_aware(datetime.min.replace(year=1970))


def compute_dashboard(invoices, payments_this_month, payments_last_month, expenses_this_month,
                      expenses_last_month, budgets, pending_items):
    """
    Each argument is a sequence of dicts (see `load_dashboard` for the keys).
    Rejected expenses must already be filtered out by the caller.
    """
    revenue = sum((Decimal(p["amount"]) for p in payments_this_month), ZERO)
    last_revenue = sum((Decimal(p["amount"]) for p in payments_last_month), ZERO)
    expenses = sum((Decimal(e["amount"]) for e in expenses_this_month), ZERO)
    last_expenses = sum((Decimal(e["amount"]) for e in expenses_last_month), ZERO)

    outstanding = [inv for inv in invoices if inv["status"] in Invoice.OUTSTANDING_STATUSES]
    outstanding_amount = sum(
        (Decimal(inv["total_amount"]) - Decimal(inv["amount_paid"] or 0) for inv in outstanding), ZERO
    )
    pending_outstanding = sum(
        (Decimal(item["amount_due"]) - Decimal(item["amount_paid"] or 0) for item in pending_items), ZERO
    )

    transactions = (
        [{"type": "payment", "description": f"Payment received - {p.get('customer_name') or 'Customer'}",
          "amount": p["amount"], "date": p["payment_date"]} for p in payments_this_month]
        + [{"type": "expense", "description": e["description"],
            "amount": e["amount"], "date": e["expense_date"]} for e in expenses_this_month]
        + [{"type": "invoice", "description": f"Invoice {inv['invoice_number']} - {inv['customer_name']}",
            "amount": inv["total_amount"], "date": inv["created_at"]} for inv in invoices]
    )
    transactions.sort(key=_sort_key, reverse=True)

    return {
        "total_revenue": revenue,
        "revenue_change": percent_change(revenue, last_revenue),
        "outstanding_invoices": {"count": len(outstanding), "amount": outstanding_amount},
        "monthly_expenses": expenses,
        "expense_change": percent_change(expenses, last_expenses),
        "pending_collections": {"count": len(pending_items), "outstanding": pending_outstanding},
        "recent_transactions": transactions[:RECENT_TRANSACTIONS_LIMIT],
        "budgets": [
            {
                "id": b["id"],
                "category": b["category"],
                "department": b["department"],
                "allocated_amount": b["allocated_amount"],
                "spent_amount": b["spent_amount"],
                "utilization": budget_utilization(b["spent_amount"], b["allocated_amount"]),
            }
            for b in budgets
        ],
    }


def load_dashboard(today=None):
    today = today or timezone.localdate()
    last_month, this_month, next_month = month_bounds(today)

    payments = Payment.objects.filter(status="completed")
    expenses = Expense.objects.exclude(status="rejected")
    payment_fields = ("amount", "payment_date", "customer_name")
    expense_fields = ("amount", "expense_date", "description")

    return compute_dashboard(
        invoices=list(Invoice.objects.values(
            "invoice_number", "customer_name", "status", "total_amount", "amount_paid", "created_at"
        )),
        payments_this_month=list(payments.filter(
            payment_date__date__gte=this_month, payment_date__date__lt=next_month
        ).values(*payment_fields)),
        payments_last_month=list(payments.filter(
            payment_date__date__gte=last_month, payment_date__date__lt=this_month
        ).values(*payment_fields)),
        expenses_this_month=list(expenses.filter(
            expense_date__gte=this_month, expense_date__lt=next_month
        ).values(*expense_fields)),
        expenses_last_month=list(expenses.filter(
            expense_date__gte=last_month, expense_date__lt=this_month
        ).values(*expense_fields)),
        budgets=list(Budget.objects.filter(status="active").values(
            "id", "category", "department", "allocated_amount", "spent_amount"
        )),
        pending_items=list(AccountsActionItem.objects.filter(status="pending").values("amount_due", "amount_paid")),
    )
