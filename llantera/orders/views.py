from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from llantera.core.permissions import IsStaffRole
from llantera.core.utils import paginate_offset
from llantera.pricing.services import resolve_user_level
from .models import Order
from .serializers import (
    CartItemInputSerializer, CartItemUpdateSerializer, OrderSerializer, OrderListSerializer,
    OrderCreateSerializer, OrderStatusSerializer
)
from . import services

VALID_STATUSES = [choice for choice, _ in Order.STATUS_CHOICES]


# Cart views
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request):
    """Get the caller's cart priced at their level, or empty it"""
    if request.method == 'GET':
        return Response(services.cart_summary(request.user, resolve_user_level(request)))
    services.clear_cart(request.user)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_item_add(request):
    serializer = CartItemInputSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    services.add_cart_item(request.user, serializer.validated_data['sku'], serializer.validated_data['quantity'])
    return Response(
        services.cart_summary(request.user, resolve_user_level(request)),
        status=status.HTTP_201_CREATED
    )


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, sku):
    """Set the quantity of a cart line (0 removes it) or remove it"""
    if request.method == 'DELETE':
        services.remove_cart_item(request.user, sku)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = CartItemUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    services.set_cart_item_quantity(request.user, sku, serializer.validated_data['quantity'])
    return Response(services.cart_summary(request.user, resolve_user_level(request)))


# Customer order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List the caller's orders or place a new one"""
    if request.method == 'GET':
        queryset = Order.objects.filter(user=request.user).select_related('user').prefetch_related('items')
        orders, meta = paginate_offset(queryset.order_by('-created_at', '-id'), request, default_limit=20, max_limit=100)
        return Response({'results': OrderListSerializer(orders, many=True).data, **meta})

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    order = services.create_order(
        request.user, serializer.validated_data, resolve_user_level(request), request=request
    )
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    order = services.get_user_order(request.user, pk)
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_cancel(request, pk):
    """Customer cancellation while the order is still solicitado"""
    order = services.get_user_order(request.user, pk)
    order = services.cancel_order(order, request=request)
    return Response(OrderSerializer(order).data)


# Admin order views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def admin_order_list(request):
    """All orders with search, status and invoice filters"""
    queryset = Order.objects.select_related('user').prefetch_related('items')

    search = request.query_params.get('search', '').strip()
    status_filter = request.query_params.get('status', '').strip().lower()
    invoice = request.query_params.get('invoice', '').strip().lower()

    if search:
        queryset = queryset.filter(
            Q(order_number__icontains=search) |
            Q(user__email__icontains=search) |
            Q(user__first_name__icontains=search) |
            Q(user__first_last_name__icontains=search)
        )
    if status_filter in VALID_STATUSES:
        queryset = queryset.filter(status=status_filter)

    has_invoice = Q(invoice_xml_path__gt='') | Q(invoice_pdf_path__gt='')
    if invoice == 'facturadas':
        queryset = queryset.filter(requires_invoice=True).filter(has_invoice)
    elif invoice == 'sin_factura':
        queryset = queryset.filter(requires_invoice=True).exclude(has_invoice)

    orders, meta = paginate_offset(queryset.order_by('-created_at', '-id'), request, default_limit=20, max_limit=100)
    return Response({'results': OrderListSerializer(orders, many=True).data, **meta})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def admin_order_detail(request, pk):
    order = get_object_or_404(Order.objects.select_related('user').prefetch_related('items'), pk=pk)
    return Response(OrderSerializer(order).data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def admin_order_status(request, pk):
    """Move an order to its next status"""
    order = get_object_or_404(Order, pk=pk)
    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    order = services.update_order_status(
        order,
        serializer.validated_data['status'],
        admin_notes=serializer.validated_data.get('admin_notes'),
        request=request
    )
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
@parser_classes([MultiPartParser, FormParser])
def admin_order_invoice(request, pk):
    """Upload the invoice XML and/or PDF of an order"""
    order = get_object_or_404(Order, pk=pk)
    order = services.upload_invoice(
        order,
        xml_file=request.FILES.get('xml'),
        pdf_file=request.FILES.get('pdf'),
        request=request
    )
    return Response(OrderSerializer(order).data)
