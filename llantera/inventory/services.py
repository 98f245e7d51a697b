"""
Stock movements for a tire's inventory row.

``quantity`` is stock on hand available for sale; ``reserved`` counts units
held by orders that are not delivered yet.
"""
import logging

from django.db import transaction

from llantera.core.exceptions import ServiceValidationError
from .models import Inventory

logger = logging.getLogger(__name__)


def get_or_create_inventory(tire, lock=False):
    """Inventory row of a tire, created at zero on first use"""
    queryset = Inventory.objects.select_for_update() if lock else Inventory.objects
    inventory, created = queryset.get_or_create(tire=tire, defaults={'quantity': 0, 'reserved': 0})
    if created:
        logger.info(f"Created inventory row for tire {tire.sku}")
    return inventory


def available_quantity(tire):
    inventory = Inventory.objects.filter(tire=tire).only('quantity').first()
    return inventory.quantity if inventory else 0


def ensure_available(tire, quantity):
    available = available_quantity(tire)
    if available < quantity:
        raise ServiceValidationError(
            f'Stock insuficiente para {tire.sku}: disponibles {available}, solicitadas {quantity}',
            details={'sku': tire.sku, 'available': available, 'requested': quantity}
        )


@transaction.atomic
def reserve(tire, quantity):
    """Move units from available stock to reserved"""
    inventory = get_or_create_inventory(tire, lock=True)
    inventory.quantity = max(0, inventory.quantity - quantity)
    inventory.reserved += quantity
    inventory.save(update_fields=['quantity', 'reserved', 'updated_at'])
    logger.info(f"Reserved {quantity} of {tire.sku} (available {inventory.quantity}, reserved {inventory.reserved})")
    return inventory


@transaction.atomic
def release(tire, quantity):
    """Return reserved units to available stock"""
    inventory = get_or_create_inventory(tire, lock=True)
    inventory.quantity += quantity
    inventory.reserved = max(0, inventory.reserved - quantity)
    inventory.save(update_fields=['quantity', 'reserved', 'updated_at'])
    logger.info(f"Released {quantity} of {tire.sku} (available {inventory.quantity}, reserved {inventory.reserved})")
    return inventory


@transaction.atomic
def confirm_sale(tire, quantity):
    """Reserved units leave the warehouse"""
    inventory = get_or_create_inventory(tire, lock=True)
    inventory.reserved = max(0, inventory.reserved - quantity)
    inventory.save(update_fields=['reserved', 'updated_at'])
    logger.info(f"Confirmed sale of {quantity} of {tire.sku} (reserved {inventory.reserved})")
    return inventory


def set_stock(tire, quantity=None, min_stock=None):
    """Admin adjustment of on-hand quantity and minimum. Returns (inventory, changes)"""
    inventory = get_or_create_inventory(tire)
    changes = {}
    if quantity is not None:
        if quantity < 0:
            raise ServiceValidationError('La cantidad no puede ser negativa')
        if quantity != inventory.quantity:
            changes['quantity'] = {'old': inventory.quantity, 'new': quantity}
            inventory.quantity = quantity
    if min_stock is not None:
        if min_stock < 0:
            raise ServiceValidationError('El stock mínimo no puede ser negativo')
        if min_stock != inventory.min_stock:
            changes['min_stock'] = {'old': inventory.min_stock, 'new': min_stock}
            inventory.min_stock = min_stock
    if changes:
        inventory.save()
    return inventory, changes
