from django.contrib import admin

from .models import CampAttendance, Lead, ProgramConfig, Registration


@admin.register(ProgramConfig)
class ProgramConfigAdmin(admin.ModelAdmin):
    list_display = ("title", "program_type", "pricing_mode", "half_day_rate", "full_day_rate",
                    "currency", "creates_invoice", "is_active")
    list_filter = ("pricing_mode", "is_active", "creates_invoice")
    list_editable = ("half_day_rate", "full_day_rate", "is_active")
    search_fields = ("title", "program_type")


class CampAttendanceInline(admin.TabularInline):
    model = CampAttendance
    extra = 0
    readonly_fields = ("child_name", "attendance_date", "check_in_time", "marked_by")


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = (
        "registration_number",
        "parent_name",
        "email",
        "program",
        "total_amount",
        "payment_status",
        "registration_type",
        "created_at",
    )
    list_filter = ("program", "payment_status", "payment_method", "registration_type", "status")
    search_fields = ("registration_number", "parent_name", "email", "phone")
    readonly_fields = ("registration_number", "qr_code_data", "created_at", "updated_at")
    inlines = [CampAttendanceInline]


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ("full_name", "email", "program_type", "status", "source", "created_at")
    list_filter = ("status", "source", "program_type")
    search_fields = ("full_name", "email", "phone")
