from rest_framework import serializers

from .models import (
    AccountsActionItem, Bill, BillPayment, Budget, Expense, Invoice, InvoiceItem, Payment, Vendor,
)
from .services import calculate_invoice_totals, calculate_line_total, create_invoice


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = ["id", "description", "quantity", "unit_price", "discount_percent", "line_total"]
        read_only_fields = ["id", "line_total"]


class InvoiceSerializer(serializers.ModelSerializer):
    items = InvoiceItemSerializer(many=True)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id", "invoice_number", "customer_name", "customer_email", "registration",
            "subtotal", "discount_percent", "discount_amount", "tax_percent", "tax_amount",
            "total_amount", "amount_paid", "balance", "currency", "due_date", "status",
            "payment_terms", "notes", "sent_at", "items", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "invoice_number", "subtotal", "discount_amount", "tax_amount", "total_amount",
            "amount_paid", "sent_at", "created_at", "updated_at",
        ]

    def create(self, validated_data):
        items = validated_data.pop("items")
        return create_invoice(items=items, **validated_data)

    def update(self, instance, validated_data):
        items = validated_data.pop("items", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        # query the table directly; instance.items may hold a stale prefetch
        lines = InvoiceItem.objects.filter(invoice=instance)
        if items is not None:
            lines.delete()
            for item in items:
                InvoiceItem.objects.create(
                    invoice=instance,
                    line_total=calculate_line_total(item.get("quantity", 1), item["unit_price"],
                                                    item.get("discount_percent") or 0),
                    **item,
                )

        line_totals = list(lines.values_list("line_total", flat=True))
        for attr, value in calculate_invoice_totals(line_totals, instance.discount_percent,
                                                    instance.tax_percent).items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id", "invoice", "registration", "customer_name", "amount", "payment_method",
            "payment_reference", "payment_date", "status", "source", "notes", "created_at",
        ]
        read_only_fields = ["id", "created_at"]


class MarkPaidSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, default="cash")
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = [
            "id", "name", "email", "phone", "address", "tax_id", "payment_terms",
            "category", "status", "notes", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class BillPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillPayment
        fields = ["id", "bill", "amount", "payment_date", "payment_method", "reference", "notes", "created_at"]
        read_only_fields = ["id", "bill", "created_at"]


class BillSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.name", read_only=True, default=None)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Bill
        fields = [
            "id", "vendor", "vendor_name", "bill_number", "bill_date", "due_date", "amount",
            "amount_paid", "balance", "status", "description", "category", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "bill_number", "amount_paid", "created_at", "updated_at"]


class BudgetSerializer(serializers.ModelSerializer):
    remaining_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Budget
        fields = [
            "id", "category", "department", "allocated_amount", "spent_amount", "remaining_amount",
            "period_start", "period_end", "status", "notes", "created_at",
        ]
        read_only_fields = ["id", "created_at"]

    def validate(self, attrs):
        start = attrs.get("period_start", getattr(self.instance, "period_start", None))
        end = attrs.get("period_end", getattr(self.instance, "period_end", None))
        if start and end and end < start:
            raise serializers.ValidationError({"period_end": "Period end must be after period start."})
        return attrs


class ExpenseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Expense
        fields = [
            "id", "description", "amount", "category", "department", "expense_date", "status",
            "budget", "approved_by", "receipt_url", "notes", "created_at",
        ]
        read_only_fields = ["id", "status", "approved_by", "created_at"]


class ExpenseReviewSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AccountsActionItemSerializer(serializers.ModelSerializer):
    registration_number = serializers.CharField(source="registration.registration_number", read_only=True)
    outstanding = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = AccountsActionItem
        fields = [
            "id", "registration", "registration_number", "child_name", "parent_name", "email", "phone",
            "action_type", "amount_due", "amount_paid", "outstanding", "camp_type", "status",
            "completed_at", "completed_by", "invoice", "notes", "created_at",
        ]
        read_only_fields = ["id", "completed_at", "completed_by", "created_at"]


class CompleteActionSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
