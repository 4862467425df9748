from django.contrib.auth.models import AbstractUser
from django.db import models


class Role(models.TextChoices):
    CEO = "CEO", "Chief Executive"
    ADMIN = "ADMIN", "Administrator"
    HR = "HR", "Human Resources"
    MARKETING = "MARKETING", "Marketing"
    ACCOUNTS = "ACCOUNTS", "Accounts"
    COACH = "COACH", "Coach"
    GOVERNANCE = "GOVERNANCE", "Governance"


class User(AbstractUser):
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.COACH)
    department = models.CharField(max_length=50, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    email = models.EmailField(unique=True)

    USERNAME_FIELD = "email"  # authenticate() by email
    REQUIRED_FIELDS = ["username"]

    class Meta:
        indexes = [
            models.Index(fields=["role"], name="portal_user_role_idx"),
        ]

    def __str__(self):
        return f"{self.email} ({self.role})"


class AuditLog(models.Model):
    EVENT_TYPE_CHOICES = [
        ("USER_LOGIN", "User Login"),
        ("USER_LOGIN_FAILED", "User Login Failed"),
        ("REGISTRATION_CREATE", "Registration Create"),
        ("PAYMENT_STATUS_UPDATE", "Payment Status Update"),
        ("PAYMENT_RECEIVED", "Payment Received"),
        ("INVOICE_SENT", "Invoice Sent"),
        ("BILL_PAYMENT", "Bill Payment"),
        ("EXPENSE_REVIEW", "Expense Review"),
        ("CHECK_IN", "Check In"),
    ]
    OPERATION_CHOICES = [
        ("INSERT", "Insert"),
        ("UPDATE", "Update"),
        ("DELETE", "Delete"),
    ]

    event_time = models.DateTimeField(auto_now_add=True)
    event_type = models.CharField(max_length=50, choices=EVENT_TYPE_CHOICES)

    # Who
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    username = models.CharField(max_length=150, blank=True, null=True)
    user_role = models.CharField(max_length=20, blank=True, null=True)

    # What
    table_name = models.CharField(max_length=50)
    record_id = models.CharField(max_length=64, blank=True, null=True)
    operation = models.CharField(max_length=20, choices=OPERATION_CHOICES, blank=True, null=True)
    new_values = models.JSONField(blank=True, null=True)

    # Context
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    endpoint = models.CharField(max_length=255, blank=True, null=True)
    http_method = models.CharField(max_length=10, blank=True, null=True)

    class Meta:
        ordering = ["-event_time"]
        indexes = [
            models.Index(fields=["event_time"], name="audit_event_time_idx"),
            models.Index(fields=["event_type"], name="audit_event_type_idx"),
        ]

    def __str__(self):
        return f"{self.event_time} - {self.event_type} - {self.username or 'System'}"
