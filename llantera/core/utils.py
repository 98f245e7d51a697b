"""Utility functions for audit logging and list pagination"""
import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address of X-Forwarded-For, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None) or {}
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Record an administrative action in the audit trail.

    The acting user is ``user`` when given, else the authenticated request user.
    Entries without action, model or object id are skipped. Failures are logged
    and never reach the caller, so the action being audited always completes.
    """
    if not (action and model_name and object_id):
        logger.warning(f"Skipping incomplete audit entry: action={action!r} model={model_name!r} id={object_id!r}")
        return None

    actor = user or getattr(request, 'user', None)
    if actor is not None and not actor.is_authenticated:
        actor = None

    try:
        return AuditLog.objects.create(
            user=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Audit entry {action} on {model_name} #{object_id} not saved: {e}")
        return None


def parse_limit(raw, default=20, maximum=100):
    """Limits outside 1..maximum fall back to the default"""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value <= 0 or value > maximum:
        return default
    return value


def parse_offset(raw):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 0
    return max(value, 0)


def paginate_offset(queryset, request, default_limit=20, max_limit=100):
    """
    Slice a queryset with ``limit``/``offset`` query parameters.

    Returns (items, meta) where meta has total/limit/offset.
    """
    limit = parse_limit(request.query_params.get('limit'), default_limit, max_limit)
    offset = parse_offset(request.query_params.get('offset'))
    total = queryset.count()
    items = queryset[offset:offset + limit]
    return items, {'total': total, 'limit': limit, 'offset': offset}
