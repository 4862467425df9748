from django.contrib import admin

from .models import (
    AccountsActionItem, Bill, BillPayment, Budget, Expense, Invoice, InvoiceItem, Payment, Vendor,
)


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ("line_total",)


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "customer_name", "total_amount", "amount_paid", "status", "due_date")
    list_filter = ("status",)
    search_fields = ("invoice_number", "customer_name", "customer_email")
    readonly_fields = ("invoice_number", "subtotal", "discount_amount", "tax_amount", "total_amount", "sent_at")
    inlines = [InvoiceItemInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_date", "customer_name", "amount", "payment_method", "status", "source")
    list_filter = ("status", "payment_method", "source")
    search_fields = ("customer_name", "payment_reference")


class BillPaymentInline(admin.TabularInline):
    model = BillPayment
    extra = 0


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "email", "phone", "status")
    list_filter = ("status", "category")
    search_fields = ("name", "email")


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ("bill_number", "vendor", "amount", "amount_paid", "status", "due_date")
    list_filter = ("status", "category")
    search_fields = ("bill_number", "vendor__name")
    inlines = [BillPaymentInline]


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ("category", "department", "allocated_amount", "spent_amount", "period_start", "period_end", "status")
    list_filter = ("status", "department")


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("description", "amount", "category", "department", "expense_date", "status")
    list_filter = ("status", "category", "department")
    search_fields = ("description",)


@admin.register(AccountsActionItem)
class AccountsActionItemAdmin(admin.ModelAdmin):
    list_display = ("child_name", "parent_name", "action_type", "amount_due", "amount_paid", "status", "created_at")
    list_filter = ("status", "action_type", "camp_type")
    search_fields = ("child_name", "parent_name", "email")
