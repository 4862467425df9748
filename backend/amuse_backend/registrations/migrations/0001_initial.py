import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import registrations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ProgramConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("program_type", models.SlugField(unique=True)),
                ("title", models.CharField(max_length=150)),
                ("description", models.TextField(blank=True)),
                ("pricing_mode", models.CharField(choices=[("session", "Half/Full day sessions"), ("flat", "Flat daily rate")], default="session", max_length=10)),
                ("half_day_rate", models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ("full_day_rate", models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ("currency", models.CharField(default="KES", max_length=3)),
                ("max_days", models.PositiveIntegerField(default=60)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("creates_invoice", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("registration_number", models.CharField(default=registrations.models.generate_registration_number, max_length=30, unique=True)),
                ("parent_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(max_length=20)),
                ("emergency_contact", models.CharField(blank=True, max_length=100)),
                ("children", models.JSONField(default=list, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("payment_status", models.CharField(choices=[("unpaid", "Unpaid"), ("partial", "Partial"), ("paid", "Paid")], default="unpaid", max_length=10)),
                ("payment_method", models.CharField(choices=[("pending", "Pending"), ("card", "Card"), ("mpesa", "M-Pesa"), ("cash_ground", "Cash (Ground)")], default="pending", max_length=20)),
                ("payment_reference", models.CharField(blank=True, max_length=100, null=True)),
                ("registration_type", models.CharField(choices=[("online_only", "Online Only"), ("online_paid", "Online Paid"), ("ground_registration", "Ground Registration")], default="online_only", max_length=30)),
                ("qr_code_data", models.TextField(blank=True)),
                ("consent_given", models.BooleanField(default=False)),
                ("status", models.CharField(choices=[("active", "Active"), ("cancelled", "Cancelled"), ("completed", "Completed")], default="active", max_length=10)),
                ("extra_details", models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ("admin_notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ground_registrations", to=settings.AUTH_USER_MODEL)),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="registrations", to="registrations.programconfig")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["email", "phone"], name="registration_contact_idx"),
                    models.Index(fields=["payment_status"], name="registration_payment_idx"),
                    models.Index(fields=["payment_reference"], name="registration_reference_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("program_type", models.CharField(max_length=50)),
                ("program_name", models.CharField(blank=True, max_length=150)),
                ("status", models.CharField(choices=[("new", "New"), ("contacted", "Contacted"), ("qualified", "Qualified"), ("converted", "Converted"), ("lost", "Lost")], default="new", max_length=20)),
                ("source", models.CharField(default="website", max_length=30)),
                ("notes", models.TextField(blank=True)),
                ("form_data", models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_leads", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="CampAttendance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("child_name", models.CharField(max_length=100)),
                ("attendance_date", models.DateField(default=django.utils.timezone.localdate)),
                ("check_in_time", models.DateTimeField(default=django.utils.timezone.now)),
                ("check_out_time", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("marked_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("registration", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attendance_records", to="registrations.registration")),
            ],
            options={
                "ordering": ["-attendance_date", "child_name"],
                "constraints": [
                    models.UniqueConstraint(fields=("registration", "child_name", "attendance_date"), name="unique_daily_attendance"),
                ],
            },
        ),
    ]
