"""
In-app notifications for order events.

Notifications are a side effect: failures are logged and never interrupt the
order operation that triggered them.
"""
import logging

from llantera.core.models import User
from llantera.core.permissions import ROLE_ADMIN
from .models import Notification

logger = logging.getLogger(__name__)


def create_notification(user, type, title, message, data=None):
    try:
        return Notification.objects.create(
            user=user,
            type=type,
            title=title,
            message=message,
            data=data or {}
        )
    except Exception as e:
        logger.warning(f"Failed to create notification '{type}' for user {getattr(user, 'id', None)}: {e}")
        return None


def _order_data(order):
    return {'order_id': order.id, 'order_number': order.order_number}


def notify_order_created(order):
    return create_notification(
        order.user,
        'order_created',
        'Pedido recibido',
        f'Tu pedido {order.order_number} ha sido recibido y está siendo procesado.',
        _order_data(order)
    )


def notify_admins_new_order(order):
    """One notification per active admin with the order number and customer name"""
    admins = User.objects.filter(role=ROLE_ADMIN, is_active=True).exclude(pk=order.user_id)
    created = []
    for admin in admins:
        notification = create_notification(
            admin,
            'order_created',
            'Nuevo pedido',
            f'Nuevo pedido {order.order_number} de {order.user.full_name}',
            _order_data(order)
        )
        if notification:
            created.append(notification)
    return created


def notify_order_shipped(order):
    return create_notification(
        order.user,
        'order_shipped',
        'Pedido enviado',
        f'Tu pedido {order.order_number} ha sido enviado.',
        _order_data(order)
    )


def notify_order_delivered(order):
    return create_notification(
        order.user,
        'order_delivered',
        'Pedido entregado',
        f'Tu pedido {order.order_number} ha sido entregado.',
        _order_data(order)
    )


def notify_order_cancelled(order):
    return create_notification(
        order.user,
        'order_cancelled',
        'Pedido cancelado',
        f'Tu pedido {order.order_number} ha sido cancelado.',
        _order_data(order)
    )


def notify_invoice_ready(order):
    return create_notification(
        order.user,
        'invoice_ready',
        'Factura disponible',
        f'La factura de tu pedido {order.order_number} ya está disponible para descargar.',
        _order_data(order)
    )
