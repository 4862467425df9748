from django.utils import timezone
from rest_framework import serializers

from .models import CampAttendance, Lead, ProgramConfig, Registration
from .pricing import AGE_RANGES, SESSION_CHOICES, sync_registration


class ProgramConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProgramConfig
        fields = [
            "id", "program_type", "title", "description", "pricing_mode",
            "half_day_rate", "full_day_rate", "currency", "max_days",
            "start_date", "creates_invoice", "is_active",
        ]


class ChildSerializer(serializers.Serializer):
    child_name = serializers.CharField(max_length=100)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    age_range = serializers.ChoiceField(choices=AGE_RANGES, required=False, allow_blank=True)
    special_needs = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    number_of_days = serializers.IntegerField(min_value=1, required=False)
    selected_sessions = serializers.ListField(
        child=serializers.ChoiceField(choices=SESSION_CHOICES), required=False, default=list
    )

    def validate(self, attrs):
        if not attrs.get("date_of_birth") and not attrs.get("age_range"):
            raise serializers.ValidationError("Provide a date of birth or an age range.")
        today = self.context.get("today") or timezone.localdate()
        if attrs.get("date_of_birth") and attrs["date_of_birth"] > today:
            raise serializers.ValidationError({"date_of_birth": "Date of birth cannot be in the future."})
        if not attrs.get("number_of_days") and not attrs.get("selected_sessions"):
            raise serializers.ValidationError("Select at least one day.")
        return attrs


class QuoteChildSerializer(serializers.Serializer):
    """A child entry mid-edit: nothing is required yet."""
    child_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    age_range = serializers.ChoiceField(choices=AGE_RANGES, required=False, allow_blank=True)
    number_of_days = serializers.IntegerField(min_value=0, required=False)
    selected_sessions = serializers.ListField(
        child=serializers.ChoiceField(choices=SESSION_CHOICES), required=False, default=list
    )


class QuoteSerializer(serializers.Serializer):
    children = QuoteChildSerializer(many=True)

    def validate(self, attrs):
        program = self.context["program"]
        for child in attrs["children"]:
            if (child.get("number_of_days") or 0) > program.max_days:
                raise serializers.ValidationError(
                    {"children": f"A child can be booked for at most {program.max_days} days."}
                )
        return attrs


class RegistrationSubmitSerializer(serializers.Serializer):
    """
    Base registration form. Program-specific fields are bolted on by
    `build_registration_serializer`; everything not in the base set ends up
    in `extra_details`.
    """

    base_fields = ("parent_name", "email", "phone", "emergency_contact", "children", "consent")

    parent_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20)
    emergency_contact = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    children = ChildSerializer(many=True, allow_empty=False)
    consent = serializers.BooleanField()

    def validate_consent(self, value):
        if not value:
            raise serializers.ValidationError("Consent is required.")
        return value

    def validate(self, attrs):
        program = self.context["program"]
        for child in attrs["children"]:
            days = child.get("number_of_days") or len(child.get("selected_sessions") or [])
            if days > program.max_days:
                raise serializers.ValidationError(
                    {"children": f"A child can be booked for at most {program.max_days} days."}
                )

        children, total = sync_registration(
            attrs["children"],
            program.rates,
            today=self.context.get("today"),
            pricing_mode=program.pricing_mode,
            start_date=program.start_date,
        )
        attrs["children"] = children
        attrs["total_amount"] = total
        attrs["extra_details"] = {
            key: value for key, value in attrs.items()
            if key not in self.base_fields and key not in ("total_amount", "extra_details")
        }
        return attrs


def _homeschooling_fields():
    return {
        "package": serializers.ChoiceField(choices=["1-day-discovery", "weekly-pod", "project-based"]),
        "focus": serializers.ListField(child=serializers.CharField(max_length=50), min_length=1),
        "transport": serializers.BooleanField(default=False),
        "meal": serializers.BooleanField(default=False),
        "allergies": serializers.CharField(max_length=500, required=False, allow_blank=True, default=""),
    }


def _kenyan_experiences_fields():
    return {
        "circuit": serializers.ChoiceField(
            choices=["mt-kenya", "coast", "mara", "samburu", "lake-naivasha"]
        ),
        "preferred_month": serializers.CharField(max_length=20),
        "transport": serializers.BooleanField(default=False),
    }


def _school_experience_fields():
    return {
        "school_name": serializers.CharField(max_length=150),
        "number_of_students": serializers.IntegerField(min_value=1),
        "number_of_teachers": serializers.IntegerField(min_value=0, default=0),
        "preferred_date": serializers.DateField(),
    }


def _group_event_fields():
    return {
        "event_date": serializers.DateField(),
        "number_of_guests": serializers.IntegerField(min_value=1),
        "location": serializers.CharField(max_length=150, required=False, allow_blank=True, default=""),
        "message": serializers.CharField(max_length=1000, required=False, allow_blank=True, default=""),
    }


def _little_forest_fields():
    return {
        "preferred_day": serializers.ChoiceField(choices=["Monday", "Friday"]),
    }


PROGRAM_FIELD_BUILDERS = {
    "homeschooling": _homeschooling_fields,
    "kenyan-experiences": _kenyan_experiences_fields,
    "school-experience": _school_experience_fields,
    "team-building": _group_event_fields,
    "parties": _group_event_fields,
    "little-forest": _little_forest_fields,
}

_serializer_cache = {}


def build_registration_serializer(program):
    """Serializer class for a program: base form plus its program-specific fields."""
    builder = PROGRAM_FIELD_BUILDERS.get(program.program_type)
    if builder is None:
        return RegistrationSubmitSerializer

    if program.program_type not in _serializer_cache:
        name = "".join(part.title() for part in program.program_type.split("-")) + "RegistrationSerializer"
        _serializer_cache[program.program_type] = type(name, (RegistrationSubmitSerializer,), builder())
    return _serializer_cache[program.program_type]


class RegistrationSerializer(serializers.ModelSerializer):
    program_type = serializers.CharField(source="program.program_type", read_only=True)
    program_title = serializers.CharField(source="program.title", read_only=True)
    currency = serializers.CharField(source="program.currency", read_only=True)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Registration
        fields = [
            "id", "registration_number", "program_type", "program_title", "currency",
            "parent_name", "email", "phone", "emergency_contact", "children",
            "total_amount", "amount_paid", "balance", "payment_status", "payment_method",
            "payment_reference", "registration_type", "qr_code_data", "consent_given",
            "status", "extra_details", "admin_notes", "created_at", "updated_at",
        ]
        read_only_fields = fields


class PaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Registration.PAYMENT_STATUS_CHOICES)
    payment_method = serializers.ChoiceField(choices=Registration.PAYMENT_METHOD_CHOICES, required=False)
    payment_reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    amount_paid = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class AdminNoteSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=2000)


class GroundRegistrationSerializer(serializers.Serializer):
    amount_paid = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True, default="")


class ScanSerializer(serializers.Serializer):
    qr_code_data = serializers.CharField()


class CheckInSerializer(serializers.Serializer):
    child_name = serializers.CharField(max_length=100)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class CampAttendanceSerializer(serializers.ModelSerializer):
    registration_number = serializers.CharField(source="registration.registration_number", read_only=True)
    payment_status = serializers.CharField(source="registration.payment_status", read_only=True)

    class Meta:
        model = CampAttendance
        fields = [
            "id", "registration", "registration_number", "payment_status", "child_name",
            "attendance_date", "check_in_time", "check_out_time", "notes",
        ]
        read_only_fields = fields


class LeadSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lead
        fields = [
            "id", "full_name", "email", "phone", "program_type", "program_name",
            "status", "source", "notes", "form_data", "assigned_to",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
