from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, F
from django.shortcuts import get_object_or_404
from llantera.catalog.models import Tire
from llantera.core.permissions import IsStaffRole
from llantera.core.utils import create_audit_log, paginate_offset
from .models import Inventory
from .serializers import InventorySerializer, InventoryUpdateSerializer
from . import services


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def inventory_list(request):
    """List inventory rows with optional low stock and search filtering"""
    queryset = Inventory.objects.select_related('tire', 'tire__brand')

    low_stock = request.query_params.get('low_stock', '')
    search = request.query_params.get('search', '').strip()

    if low_stock.lower() in ('true', '1', 'yes'):
        queryset = queryset.filter(quantity__lte=F('min_stock'))
    if search:
        queryset = queryset.filter(
            Q(tire__sku__icontains=search) |
            Q(tire__model__icontains=search) |
            Q(tire__original_measure__icontains=search) |
            Q(tire__brand__name__icontains=search)
        )

    rows, meta = paginate_offset(queryset.order_by('tire__sku'), request, default_limit=50, max_limit=500)
    return Response({'results': InventorySerializer(rows, many=True).data, **meta})


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsStaffRole])
def inventory_detail(request, sku):
    """Retrieve or adjust the inventory of a tire"""
    tire = get_object_or_404(Tire, sku__iexact=sku)

    if request.method == 'GET':
        inventory = services.get_or_create_inventory(tire)
        return Response(InventorySerializer(inventory).data)

    serializer = InventoryUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    inventory, changes = services.set_stock(
        tire,
        quantity=serializer.validated_data.get('quantity'),
        min_stock=serializer.validated_data.get('min_stock')
    )
    if changes:
        # Create audit log for stock adjustment
        create_audit_log(
            request=request,
            action='stock_adjust',
            model_name='Inventory',
            object_id=str(inventory.id),
            object_name=str(tire),
            object_reference=tire.sku,
            changes=changes
        )
    return Response(InventorySerializer(inventory).data)
