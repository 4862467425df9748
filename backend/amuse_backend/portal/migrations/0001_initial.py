import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("role", models.CharField(choices=[("CEO", "Chief Executive"), ("ADMIN", "Administrator"), ("HR", "Human Resources"), ("MARKETING", "Marketing"), ("ACCOUNTS", "Accounts"), ("COACH", "Coach"), ("GOVERNANCE", "Governance")], default="COACH", max_length=20)),
                ("department", models.CharField(blank=True, max_length=50, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
                "indexes": [models.Index(fields=["role"], name="portal_user_role_idx")],
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_time", models.DateTimeField(auto_now_add=True)),
                ("event_type", models.CharField(choices=[("USER_LOGIN", "User Login"), ("USER_LOGIN_FAILED", "User Login Failed"), ("REGISTRATION_CREATE", "Registration Create"), ("PAYMENT_STATUS_UPDATE", "Payment Status Update"), ("PAYMENT_RECEIVED", "Payment Received"), ("INVOICE_SENT", "Invoice Sent"), ("BILL_PAYMENT", "Bill Payment"), ("EXPENSE_REVIEW", "Expense Review"), ("CHECK_IN", "Check In")], max_length=50)),
                ("username", models.CharField(blank=True, max_length=150, null=True)),
                ("user_role", models.CharField(blank=True, max_length=20, null=True)),
                ("table_name", models.CharField(max_length=50)),
                ("record_id", models.CharField(blank=True, max_length=64, null=True)),
                ("operation", models.CharField(blank=True, choices=[("INSERT", "Insert"), ("UPDATE", "Update"), ("DELETE", "Delete")], max_length=20, null=True)),
                ("new_values", models.JSONField(blank=True, null=True)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("endpoint", models.CharField(blank=True, max_length=255, null=True)),
                ("http_method", models.CharField(blank=True, max_length=10, null=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-event_time"],
                "indexes": [
                    models.Index(fields=["event_time"], name="audit_event_time_idx"),
                    models.Index(fields=["event_type"], name="audit_event_type_idx"),
                ],
            },
        ),
    ]
