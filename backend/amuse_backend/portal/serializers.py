from rest_framework import serializers

from .models import AuditLog


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = [
            "id", "event_time", "event_type", "username", "user_role",
            "table_name", "record_id", "operation", "new_values",
            "ip_address", "endpoint", "http_method",
        ]
