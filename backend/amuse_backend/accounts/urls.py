from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r"invoices", views.InvoiceViewSet, basename="invoice")
router.register(r"payments", views.PaymentViewSet, basename="payment")
router.register(r"vendors", views.VendorViewSet, basename="vendor")
router.register(r"bills", views.BillViewSet, basename="bill")
router.register(r"budgets", views.BudgetViewSet, basename="budget")
router.register(r"expenses", views.ExpenseViewSet, basename="expense")
router.register(r"pending-collections", views.PendingCollectionViewSet, basename="pending-collection")

urlpatterns = [
    path("dashboard/", views.DashboardView.as_view(), name="accounts-dashboard"),
    path("", include(router.urls)),
]
