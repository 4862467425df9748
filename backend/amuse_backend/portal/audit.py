import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def client_ip(request):
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_event(event_type, table_name, request=None, user=None, record_id=None,
              operation="INSERT", new_values=None, username=None):
    """Write an audit trail row. Audit failures never break the calling request."""
    if user is None and request is not None and request.user.is_authenticated:
        user = request.user
    try:
        return AuditLog.objects.create(
            event_type=event_type,
            user=user,
            username=username or (user.email if user else None),
            user_role=getattr(user, "role", None),
            table_name=table_name,
            record_id=str(record_id) if record_id is not None else None,
            operation=operation,
            new_values=new_values,
            ip_address=client_ip(request) if request is not None else None,
            endpoint=request.path if request is not None else None,
            http_method=request.method if request is not None else None,
        )
    except Exception:
        logger.exception("Failed to write audit log for %s on %s", event_type, table_name)
        return None
