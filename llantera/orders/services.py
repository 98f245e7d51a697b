"""
Cart and order lifecycle.

Orders reserve stock when they are placed; cancelling releases it and
delivery confirms the sale. Notifications and audit entries are written
after the stock and status changes are committed.
"""
import logging
import os
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone

from llantera.catalog.models import Tire
from llantera.catalog.utils import parse_decimal
from llantera.core.exceptions import ServiceValidationError, NotFoundError
from llantera.core.utils import create_audit_log
from llantera.inventory import services as inventory_services
from llantera.notifications import services as notifications
from llantera.parties.models import Address, BillingInfo
from llantera.pricing.calculator import round_price
from llantera.pricing.services import price_for_tire
from .models import Cart, CartItem, Order, OrderItem

logger = logging.getLogger(__name__)

IVA_RATE = Decimal('0.16')

PAYMENT_METHODS = [choice for choice, _ in Order.PAYMENT_METHOD_CHOICES]
PAYMENT_MODES = [choice for choice, _ in Order.PAYMENT_MODE_CHOICES]
DEFAULT_PAYMENT_MODE = 'contado'

STATUS_TRANSITIONS = {
    'solicitado': ['preparando', 'cancelado'],
    'preparando': ['enviado', 'cancelado'],
    'enviado': ['entregado', 'cancelado'],
    'entregado': [],
    'cancelado': [],
}

SHIPPING_FIELDS = [
    'street', 'exterior_number', 'interior_number', 'neighborhood', 'postal_code',
    'city', 'state', 'reference', 'phone',
]
BILLING_FIELDS = ['rfc', 'razon_social', 'regimen_fiscal', 'uso_cfdi', 'postal_code', 'email']
BILLING_REQUIRED = ['rfc', 'razon_social', 'regimen_fiscal', 'uso_cfdi', 'postal_code']


def _find_tire(sku):
    return Tire.objects.select_related('brand', 'inventory').filter(sku__iexact=(sku or '').strip()).first()


# Cart

def get_cart(user):
    cart, created = Cart.objects.get_or_create(user=user)
    if created:
        logger.info(f"Created cart for user {user.id}")
    return cart


def cart_summary(user, level):
    """Cart items priced at ``level`` with stock, line subtotals and totals"""
    cart = get_cart(user)
    items = []
    subtotal = Decimal('0.00')
    item_count = 0
    for item in cart.items.all():
        tire = _find_tire(item.tire_sku)
        if tire is None:
            # Tire deleted after it was added
            items.append({
                'sku': item.tire_sku,
                'quantity': item.quantity,
                'available': False,
                'price': Decimal('0.00'),
                'subtotal': Decimal('0.00'),
            })
            continue

        price = price_for_tire(tire, level)
        line_subtotal = round_price(price['price'] * item.quantity)
        inventory = getattr(tire, 'inventory', None)
        items.append({
            'sku': tire.sku,
            'quantity': item.quantity,
            'available': True,
            'measure': tire.original_measure,
            'brand': tire.brand.name,
            'model': tire.model,
            'image_url': tire.image_url,
            'price': price['price'],
            'price_code': price['price_code'],
            'reference_price': price['reference_price'],
            'stock': inventory.quantity if inventory else 0,
            'subtotal': line_subtotal,
        })
        subtotal += line_subtotal
        item_count += item.quantity

    return {
        'items': items,
        'subtotal': round_price(subtotal),
        'item_count': item_count,
        'level': level,
    }


def add_cart_item(user, sku, quantity):
    """Add a tire to the cart; an existing line is incremented"""
    if quantity is None or quantity <= 0:
        raise ServiceValidationError('La cantidad debe ser mayor a 0')
    tire = _find_tire(sku)
    if tire is None:
        raise NotFoundError(f'Llanta no encontrada: {sku}')

    cart = get_cart(user)
    item = cart.items.filter(tire_sku__iexact=tire.sku).first()
    if item is None:
        item = CartItem.objects.create(cart=cart, tire_sku=tire.sku, quantity=quantity)
    else:
        item.quantity += quantity
        item.save(update_fields=['quantity', 'updated_at'])
    return item


def _cart_item(user, sku):
    item = get_cart(user).items.filter(tire_sku__iexact=(sku or '').strip()).first()
    if item is None:
        raise NotFoundError('El producto no está en el carrito')
    return item


def set_cart_item_quantity(user, sku, quantity):
    """Set a line's quantity; zero removes it"""
    if quantity is None or quantity < 0:
        raise ServiceValidationError('La cantidad no puede ser negativa')
    item = _cart_item(user, sku)
    if quantity == 0:
        item.delete()
        return None
    item.quantity = quantity
    item.save(update_fields=['quantity', 'updated_at'])
    return item


def remove_cart_item(user, sku):
    _cart_item(user, sku).delete()


def clear_cart(user):
    deleted, _ = get_cart(user).items.all().delete()
    return deleted


# Orders

def generate_order_number():
    """PED-YYYYMMDD-XXXXXXXX, retried until unused"""
    while True:
        number = f"PED-{timezone.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"
        if not Order.objects.filter(order_number=number).exists():
            return number


def _shipping_snapshot(user, data):
    """Shipping fields from an inline address, an own address id or the default address"""
    source = data.get('shipping_address')
    if not source:
        address_id = data.get('address_id')
        addresses = Address.objects.filter(user=user)
        if address_id:
            address = addresses.filter(pk=address_id).first()
            if address is None:
                raise ServiceValidationError('Dirección de envío no encontrada')
        else:
            address = addresses.filter(is_default=True).first()
        if address is None:
            return {}
        source = {field: getattr(address, field) for field in SHIPPING_FIELDS}
    return {f'shipping_{field}': (source.get(field) or '').strip() for field in SHIPPING_FIELDS}


def _billing_snapshot(user, data):
    """Billing fields for an invoiced order; every fiscal field is required"""
    source = data.get('billing_info')
    if not source:
        billing_id = data.get('billing_info_id')
        records = BillingInfo.objects.filter(user=user)
        if billing_id:
            billing = records.filter(pk=billing_id).first()
            if billing is None:
                raise ServiceValidationError('Datos de facturación no encontrados')
        else:
            billing = records.filter(is_default=True).first() or records.first()
        if billing is None:
            raise ServiceValidationError('El pedido requiere factura pero no se proporcionaron datos de facturación')
        source = {field: getattr(billing, field) for field in BILLING_FIELDS}

    missing = [field for field in BILLING_REQUIRED if not (source.get(field) or '').strip()]
    if missing:
        raise ServiceValidationError(
            'Datos de facturación incompletos',
            details={'missing': missing}
        )
    snapshot = {f'billing_{field}': (source.get(field) or '').strip() for field in BILLING_FIELDS}
    snapshot['billing_rfc'] = snapshot['billing_rfc'].upper()
    return snapshot


def _order_lines(items, level):
    """Validated order lines with tire snapshots and line subtotals"""
    if not items:
        raise ServiceValidationError('El pedido debe contener al menos un producto')

    lines = []
    for item in items:
        sku = (item.get('sku') or item.get('tire_sku') or '').strip()
        quantity = item.get('quantity') or 0
        if not sku:
            raise ServiceValidationError('Cada producto debe indicar su SKU')
        if quantity <= 0:
            raise ServiceValidationError(f'Cantidad inválida para {sku}')
        tire = _find_tire(sku)
        if tire is None:
            raise ServiceValidationError(f'Llanta no encontrada: {sku}', details={'sku': sku})

        unit_price = parse_decimal(item.get('unit_price'))
        if unit_price <= 0:
            unit_price = price_for_tire(tire, level)['price']
        unit_price = round_price(unit_price)
        lines.append({
            'tire': tire,
            'tire_sku': tire.sku,
            'tire_measure': item.get('tire_measure') or tire.original_measure,
            'tire_brand': item.get('tire_brand') or tire.brand.name,
            'tire_model': item.get('tire_model') or tire.model,
            'quantity': quantity,
            'unit_price': unit_price,
            'subtotal': round_price(unit_price * quantity),
        })
    return lines


def calculate_totals(lines, subtotal=None, iva=None, total=None):
    """
    Order totals. Amounts sent by the client are kept when positive;
    otherwise subtotal is the sum of lines, IVA 16% and total their sum.
    """
    computed = sum((line['subtotal'] for line in lines), Decimal('0.00'))
    subtotal = parse_decimal(subtotal) if subtotal is not None else Decimal('0')
    iva = parse_decimal(iva) if iva is not None else Decimal('0')
    total = parse_decimal(total) if total is not None else Decimal('0')

    subtotal = subtotal if subtotal > 0 else computed
    iva = iva if iva > 0 else subtotal * IVA_RATE
    total = total if total > 0 else subtotal + iva
    return round_price(subtotal), round_price(iva), round_price(total)


def create_order(user, data, level, request=None):
    """
    Place an order for ``user``. Stock is checked and reserved for every
    line; any shortage rejects the whole order.
    """
    lines = _order_lines(data.get('items'), level)

    payment_method = (data.get('payment_method') or '').strip().lower()
    if payment_method not in PAYMENT_METHODS:
        raise ServiceValidationError(
            f"Método de pago inválido. Opciones: {', '.join(PAYMENT_METHODS)}"
        )
    payment_mode = (data.get('payment_mode') or '').strip().lower()
    if payment_mode not in PAYMENT_MODES:
        payment_mode = DEFAULT_PAYMENT_MODE

    requires_invoice = bool(data.get('requires_invoice'))
    snapshot = _shipping_snapshot(user, data)
    if requires_invoice:
        snapshot.update(_billing_snapshot(user, data))

    subtotal, iva, total = calculate_totals(lines, data.get('subtotal'), data.get('iva'), data.get('total'))

    # Same tire on several lines counts once against stock
    requested = {}
    for line in lines:
        requested.setdefault(line['tire_sku'], [line['tire'], 0])[1] += line['quantity']

    with transaction.atomic():
        for tire, quantity in requested.values():
            inventory_services.get_or_create_inventory(tire, lock=True)
            inventory_services.ensure_available(tire, quantity)

        order = Order.objects.create(
            order_number=generate_order_number(),
            user=user,
            status='solicitado',
            payment_method=payment_method,
            payment_mode=payment_mode,
            payment_installments=data.get('payment_installments'),
            payment_notes=data.get('payment_notes') or '',
            requires_invoice=requires_invoice,
            subtotal=subtotal,
            iva=iva,
            shipping_cost=Decimal('0.00'),
            total=total,
            customer_notes=data.get('customer_notes') or '',
            **snapshot
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                tire_sku=line['tire_sku'],
                tire_measure=line['tire_measure'],
                tire_brand=line['tire_brand'],
                tire_model=line['tire_model'],
                quantity=line['quantity'],
                unit_price=line['unit_price'],
                subtotal=line['subtotal'],
            )
            for line in lines
        ])
        for tire, quantity in requested.values():
            inventory_services.reserve(tire, quantity)

    logger.info(f"Order {order.order_number} created for user {user.id}: {len(lines)} lines, total {order.total}")

    create_audit_log(
        request=request,
        user=user,
        action='order_create',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={'total': str(order.total), 'items': len(lines)}
    )
    notifications.notify_order_created(order)
    notifications.notify_admins_new_order(order)
    return order


def get_user_order(user, order_id):
    """An order of ``user``; other users' orders are reported as missing"""
    order = Order.objects.prefetch_related('items').filter(pk=order_id, user=user).first()
    if order is None:
        raise NotFoundError('Pedido no encontrado')
    return order


def _apply_stock_change(order, new_status):
    for item in order.items.all():
        tire = _find_tire(item.tire_sku)
        if tire is None:
            logger.warning(f"Order {order.order_number}: tire {item.tire_sku} no longer exists, stock not updated")
            continue
        if new_status == 'cancelado':
            inventory_services.release(tire, item.quantity)
        elif new_status == 'entregado':
            inventory_services.confirm_sale(tire, item.quantity)


STATUS_NOTIFIERS = {
    'enviado': notifications.notify_order_shipped,
    'entregado': notifications.notify_order_delivered,
    'cancelado': notifications.notify_order_cancelled,
}


def update_order_status(order, new_status, admin_notes=None, request=None):
    """
    Move an order along solicitado → preparando → enviado → entregado, or
    to cancelado from any non-terminal status.
    """
    new_status = (new_status or '').strip().lower()
    if new_status not in STATUS_TRANSITIONS:
        raise ServiceValidationError(f'Estado inválido: {new_status}')

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        old_status = order.status
        if new_status not in STATUS_TRANSITIONS[old_status]:
            raise ServiceValidationError(
                f'No se puede cambiar el pedido de {old_status} a {new_status}',
                details={'current': old_status, 'allowed': STATUS_TRANSITIONS[old_status]}
            )

        now = timezone.now()
        order.status = new_status
        if new_status == 'enviado':
            order.shipped_at = now
        elif new_status == 'entregado':
            order.delivered_at = now
        elif new_status == 'cancelado':
            order.cancelled_at = now
        if admin_notes is not None:
            order.admin_notes = admin_notes
        order.save()
        _apply_stock_change(order, new_status)

    logger.info(f"Order {order.order_number} status {old_status} -> {new_status}")

    changes = {'status': {'old': old_status, 'new': new_status}}
    if admin_notes:
        changes['admin_notes'] = admin_notes
    create_audit_log(
        request=request,
        action='order_status',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes=changes
    )
    notifier = STATUS_NOTIFIERS.get(new_status)
    if notifier:
        notifier(order)
    return order


def cancel_order(order, request=None):
    """Customer cancellation, allowed only while the order is still solicitado"""
    if order.status != 'solicitado':
        raise ServiceValidationError('Solo se pueden cancelar pedidos en estado solicitado')
    return update_order_status(order, 'cancelado', request=request)


def _validate_invoice_file(upload, extension):
    name = upload.name or ''
    if os.path.splitext(name)[1].lower() != extension:
        raise ServiceValidationError(f'El archivo {extension[1:].upper()} debe tener extensión {extension}')
    max_size = settings.INVOICE_MAX_UPLOAD_SIZE
    if upload.size > max_size:
        raise ServiceValidationError(
            f'El archivo {name} excede el tamaño máximo de {max_size // (1024 * 1024)} MB',
            details={'max_bytes': max_size}
        )


def _store_invoice_file(order, upload, extension):
    path = f'invoices/{order.id}/factura_{order.order_number}{extension}'
    if default_storage.exists(path):
        default_storage.delete(path)
    return default_storage.save(path, upload)


def upload_invoice(order, xml_file=None, pdf_file=None, request=None):
    """Store the invoice XML and/or PDF of an order and notify the customer"""
    if xml_file is None and pdf_file is None:
        raise ServiceValidationError('Debe enviar al menos un archivo (xml o pdf)')

    # Both files are checked before anything is written
    for upload, extension in ((xml_file, '.xml'), (pdf_file, '.pdf')):
        if upload is not None:
            _validate_invoice_file(upload, extension)

    update_fields = []
    if xml_file is not None:
        order.invoice_xml_path = _store_invoice_file(order, xml_file, '.xml')
        update_fields.append('invoice_xml_path')
    if pdf_file is not None:
        order.invoice_pdf_path = _store_invoice_file(order, pdf_file, '.pdf')
        update_fields.append('invoice_pdf_path')
    order.save(update_fields=update_fields + ['updated_at'])

    logger.info(f"Invoice files stored for order {order.order_number}: {', '.join(update_fields)}")
    create_audit_log(
        request=request,
        action='invoice_upload',
        model_name='Order',
        object_id=str(order.id),
        object_reference=order.order_number,
        changes={field: getattr(order, field) for field in update_fields}
    )
    notifications.notify_invoice_ready(order)
    return order
