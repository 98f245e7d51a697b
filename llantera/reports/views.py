import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count, Avg, Q, DecimalField
from django.db.models.functions import TruncDate
from django.utils import timezone
from datetime import datetime, timedelta
from decimal import Decimal

from llantera.core.permissions import IsStaffRole
from llantera.core.utils import parse_limit
from llantera.orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30


def _parse_date(raw, default):
    if not raw:
        return default
    return datetime.strptime(raw, '%Y-%m-%d').date()


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def sales_report(request):
    """Sales of delivered orders placed within a date range (default last 30 days)"""
    today = timezone.localdate()
    try:
        date_from = _parse_date(request.query_params.get('date_from'), today - timedelta(days=DEFAULT_RANGE_DAYS))
        date_to = _parse_date(request.query_params.get('date_to'), today)
    except ValueError:
        return Response(
            {'error': 'Formato de fecha inválido, use AAAA-MM-DD'},
            status=status.HTTP_400_BAD_REQUEST
        )
    if date_from > date_to:
        return Response(
            {'error': 'La fecha inicial no puede ser posterior a la final'},
            status=status.HTTP_400_BAD_REQUEST
        )

    orders = Order.objects.filter(
        status='entregado',
        created_at__date__gte=date_from,
        created_at__date__lte=date_to,
    )

    # Aggregate aliases must not reuse Order field names
    totals = orders.aggregate(
        order_count=Count('id'),
        subtotal_amount=Sum('subtotal', output_field=DecimalField()),
        iva_amount=Sum('iva', output_field=DecimalField()),
        total_amount=Sum('total', output_field=DecimalField()),
        average_amount=Avg('total', output_field=DecimalField()),
    )

    has_invoice = Q(invoice_xml_path__gt='') | Q(invoice_pdf_path__gt='')
    requiring_invoice = orders.filter(requires_invoice=True)
    invoiced = requiring_invoice.filter(has_invoice).count()
    pending_invoice = requiring_invoice.exclude(has_invoice).count()

    # Daily breakdown
    daily_sales = orders.annotate(
        day=TruncDate('created_at')
    ).values('day').annotate(
        day_total=Sum('total', output_field=DecimalField()),
        day_count=Count('id')
    ).order_by('day')

    top_limit = parse_limit(request.query_params.get('top'), 10, 100)
    top_tires = OrderItem.objects.filter(order__in=orders).values(
        'tire_sku', 'tire_brand', 'tire_model', 'tire_measure'
    ).annotate(
        units=Sum('quantity'),
        revenue=Sum('subtotal', output_field=DecimalField())
    ).order_by('-units', 'tire_sku')[:top_limit]

    logger.debug(f"Sales report {date_from} - {date_to}: {totals['order_count']} orders")

    return Response({
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'summary': {
            'orders': totals['order_count'],
            'subtotal': totals['subtotal_amount'] or Decimal('0.00'),
            'iva': totals['iva_amount'] or Decimal('0.00'),
            'total': totals['total_amount'] or Decimal('0.00'),
            'average_order_value': Decimal(str(totals['average_amount'] or 0)).quantize(Decimal('0.01')),
        },
        'invoices': {
            'requiring_invoice': invoiced + pending_invoice,
            'invoiced': invoiced,
            'pending': pending_invoice,
        },
        'daily_sales': [
            {
                'date': item['day'].isoformat() if item['day'] else None,
                'total': item['day_total'] or Decimal('0.00'),
                'count': item['day_count']
            }
            for item in daily_sales
        ],
        'top_tires': [
            {
                'sku': item['tire_sku'],
                'brand': item['tire_brand'],
                'model': item['tire_model'],
                'measure': item['tire_measure'],
                'quantity': item['units'],
                'revenue': item['revenue'] or Decimal('0.00'),
            }
            for item in top_tires
        ],
    })
