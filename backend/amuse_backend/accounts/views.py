import logging

from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import StandardResultsSetPagination
from portal.audit import log_event
from portal.permissions import HasPortalPermission
from portal.roles import Permission
from registrations.models import Registration
from .dashboard import load_dashboard
from .models import AccountsActionItem, Bill, Budget, Expense, Invoice, Payment, Vendor
from .serializers import (
    AccountsActionItemSerializer, BillPaymentSerializer, BillSerializer, BudgetSerializer,
    CompleteActionSerializer, ExpenseReviewSerializer, ExpenseSerializer, InvoiceSerializer,
    MarkPaidSerializer, PaymentSerializer, VendorSerializer,
)
from .services import (
    accounts_payable_summary, complete_action_item, complete_action_items_for_registration,
    mark_invoice_paid, record_bill_payment, send_invoice,
)

logger = logging.getLogger(__name__)


class FinanceViewSet(viewsets.ModelViewSet):
    """Base for finance CRUD: role-gated, paginated, optional ?status= filter."""
    permission_classes = [HasPortalPermission]
    required_permission = Permission.VIEW_FINANCIAL_DATA
    pagination_class = StandardResultsSetPagination
    model = None

    def get_queryset(self):
        qs = self.model.objects.all()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs


class DashboardView(APIView):
    permission_classes = [HasPortalPermission]
    required_permission = Permission.VIEW_FINANCIAL_DATA

    def get(self, request):
        return Response({"success": True, "data": load_dashboard()})


class InvoiceViewSet(FinanceViewSet):
    model = Invoice
    serializer_class = InvoiceSerializer
    required_permission = Permission.MANAGE_INVOICES

    def get_queryset(self):
        return super().get_queryset().prefetch_related("items")

    @action(detail=True, methods=["post"])
    def send(self, request, pk=None):
        invoice = self.get_object()
        if not invoice.customer_email:
            return Response({"success": False, "message": "Invoice has no customer email."},
                            status=status.HTTP_400_BAD_REQUEST)

        result = send_invoice(invoice)
        if not result.success:
            return Response({"success": False, "message": f"Invoice email failed: {result.error}"},
                            status=status.HTTP_502_BAD_GATEWAY)

        log_event("INVOICE_SENT", "accounts_invoice", request=request, record_id=invoice.id, operation="UPDATE",
                  new_values={"invoice_number": invoice.invoice_number, "to": invoice.customer_email})
        return Response({"success": True, "message": "Invoice sent.", "data": InvoiceSerializer(invoice).data})

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        invoice = self.get_object()
        if invoice.status in ("paid", "cancelled"):
            return Response({"success": False, "message": f"Invoice is already {invoice.status}."},
                            status=status.HTTP_400_BAD_REQUEST)

        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = mark_invoice_paid(invoice, **serializer.validated_data)
        log_event("PAYMENT_RECEIVED", "accounts_payment", request=request, record_id=payment.id,
                  new_values={"invoice_number": invoice.invoice_number, "amount": str(payment.amount)})
        return Response({"success": True, "message": "Payment recorded.",
                         "data": InvoiceSerializer(invoice).data})


class PaymentViewSet(FinanceViewSet):
    model = Payment
    serializer_class = PaymentSerializer


class VendorViewSet(FinanceViewSet):
    model = Vendor
    serializer_class = VendorSerializer


class BillViewSet(FinanceViewSet):
    model = Bill
    serializer_class = BillSerializer

    def get_queryset(self):
        return super().get_queryset().select_related("vendor")

    @action(detail=True, methods=["post"], url_path="record-payment")
    def record_payment(self, request, pk=None):
        bill = self.get_object()
        serializer = BillPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = record_bill_payment(bill.pk, user=request.user, **serializer.validated_data)
        except ValueError as e:
            raise serializers.ValidationError({"amount": str(e)})

        bill.refresh_from_db()
        log_event("BILL_PAYMENT", "accounts_billpayment", request=request, record_id=payment.id,
                  new_values={"bill_number": bill.bill_number, "amount": str(payment.amount),
                              "status": bill.status})
        return Response({"success": True, "message": "Payment recorded.", "data": BillSerializer(bill).data},
                        status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def payments(self, request, pk=None):
        bill = self.get_object()
        return Response({"success": True, "data": BillPaymentSerializer(bill.payments.all(), many=True).data})

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response({"success": True, "data": accounts_payable_summary()})


class BudgetViewSet(FinanceViewSet):
    model = Budget
    serializer_class = BudgetSerializer


class ExpenseViewSet(FinanceViewSet):
    model = Expense
    serializer_class = ExpenseSerializer

    @property
    def required_permission(self):
        if self.action in ("approve", "reject"):
            return Permission.APPROVE_EXPENSES
        return Permission.VIEW_FINANCIAL_DATA

    def _review(self, request, new_status):
        expense = self.get_object()
        if expense.status != "pending":
            return Response({"success": False, "message": f"Expense is already {expense.status}."},
                            status=status.HTTP_400_BAD_REQUEST)

        serializer = ExpenseReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense.status = new_status
        expense.approved_by = request.user
        if serializer.validated_data["notes"]:
            expense.notes = serializer.validated_data["notes"]
        expense.save(update_fields=["status", "approved_by", "notes"])

        log_event("EXPENSE_REVIEW", "accounts_expense", request=request, record_id=expense.id, operation="UPDATE",
                  new_values={"status": new_status, "amount": str(expense.amount)})
        return Response({"success": True, "message": f"Expense {new_status}.",
                         "data": ExpenseSerializer(expense).data})

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._review(request, "approved")

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._review(request, "rejected")


class PendingCollectionViewSet(FinanceViewSet):
    """Action items raised by unpaid check-ins."""
    model = AccountsActionItem
    serializer_class = AccountsActionItemSerializer
    http_method_names = ["get", "patch", "post", "head", "options"]

    def get_queryset(self):
        qs = super().get_queryset().select_related("registration")
        action_type = self.request.query_params.get("action_type")
        if action_type:
            qs = qs.filter(action_type=action_type)
        return qs

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        item = self.get_object()
        serializer = CompleteActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complete_action_item(item, user=request.user, notes=serializer.validated_data["notes"])
        return Response({"success": True, "message": "Marked completed.",
                         "data": AccountsActionItemSerializer(item).data})

    @action(detail=False, methods=["post"], url_path=r"complete-registration/(?P<registration_id>\d+)")
    def complete_registration(self, request, registration_id=None):
        registration = Registration.objects.filter(pk=registration_id).first()
        if registration is None:
            return Response({"success": False, "message": "Registration not found."},
                            status=status.HTTP_404_NOT_FOUND)

        serializer = CompleteActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = complete_action_items_for_registration(registration, user=request.user,
                                                       notes=serializer.validated_data["notes"])
        logger.info("%s pending collection(s) closed for %s", count, registration.registration_number)
        return Response({"success": True, "message": f"{count} item(s) completed.", "data": {"completed": count}})
