from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from llantera.core.permissions import IsAdminRole, IsStaffRole
from llantera.core.utils import create_audit_log, paginate_offset
from llantera.pricing.services import resolve_user_level
from .filters import TireFilter
from .models import Brand, TireType, Tire
from .serializers import (
    BrandSerializer, TireTypeSerializer, TireSerializer, TireWriteSerializer,
    AdminTireUpdateSerializer, TireImportSerializer
)
from . import services


# Brand views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def brand_list_create(request):
    """List all brands or create a new brand"""
    if request.method == 'GET':
        brands = Brand.objects.prefetch_related('aliases').all()
        search = request.query_params.get('search', '').strip()
        if search:
            brands = brands.filter(name__icontains=search)
        serializer = BrandSerializer(brands, many=True)
        return Response(serializer.data)
    else:
        serializer = BrandSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def brand_detail(request, pk):
    """Retrieve, update or delete a brand"""
    brand = get_object_or_404(Brand, pk=pk)

    if request.method == 'GET':
        return Response(BrandSerializer(brand).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BrandSerializer(brand, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        services.delete_brand(brand)
        return Response(status=status.HTTP_204_NO_CONTENT)


# TireType views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def tire_type_list_create(request):
    """List all normalized tire types or create a new one"""
    if request.method == 'GET':
        serializer = TireTypeSerializer(TireType.objects.all(), many=True)
        return Response(serializer.data)
    else:
        serializer = TireTypeSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Tire views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def tire_list_create(request):
    """List tires with catalog filters or create a new tire"""
    if request.method == 'GET':
        queryset = TireFilter(request.query_params, queryset=Tire.objects.select_related('brand', 'tire_type')).qs
        tires, meta = paginate_offset(queryset.order_by('-created_at', '-id'), request, default_limit=50, max_limit=500)
        return Response({'results': TireSerializer(tires, many=True).data, **meta})
    else:
        serializer = TireWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        if Tire.objects.filter(sku__iexact=serializer.validated_data['sku']).exists():
            return Response({'error': 'Ya existe una llanta con ese SKU'}, status=status.HTTP_409_CONFLICT)

        tire, _ = services.upsert_tire(serializer.validated_data)
        create_audit_log(
            request=request,
            action='create',
            model_name='Tire',
            object_id=str(tire.id),
            object_name=str(tire),
            object_reference=tire.sku
        )
        return Response(TireSerializer(tire).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def tire_detail(request, sku):
    """Retrieve, update or delete a tire by SKU (case-insensitive)"""
    tire = services.get_tire(sku)

    if request.method == 'GET':
        return Response(TireSerializer(tire).data)
    elif request.method in ('PUT', 'PATCH'):
        data = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
        data.setdefault('sku', tire.sku)
        serializer = TireWriteSerializer(data=data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        validated = dict(serializer.validated_data)
        # The SKU identifies the tire and is not renamed here
        validated['sku'] = tire.sku
        tire, _ = services.upsert_tire(validated, tire=tire)
        create_audit_log(
            request=request,
            action='update',
            model_name='Tire',
            object_id=str(tire.id),
            object_name=str(tire),
            object_reference=tire.sku,
            changes={key: str(value) for key, value in validated.items()}
        )
        return Response(TireSerializer(tire).data)
    else:  # DELETE
        tire_id, tire_sku = tire.id, tire.sku
        services.delete_tire(tire)
        create_audit_log(
            request=request,
            action='delete',
            model_name='Tire',
            object_id=str(tire_id),
            object_reference=tire_sku
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# Public catalog
@api_view(['GET'])
@permission_classes([AllowAny])
def catalog_tire_list(request):
    """Filtered catalog priced for the caller's level"""
    level = resolve_user_level(request)
    return Response(services.list_catalog(request.query_params, level))


@api_view(['GET'])
@permission_classes([AllowAny])
def catalog_tire_detail(request, sku):
    """One catalog item priced for the caller's level"""
    level = resolve_user_level(request)
    return Response(services.catalog_item(sku, level))


# Admin catalog
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def tire_admin_list(request):
    """Tires with inventory and every price column"""
    return Response(services.list_admin(request.query_params))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def tire_admin_detail(request, sku):
    """Admin view of one tire; PUT updates stock and prices"""
    if request.method == 'GET':
        return Response(services.admin_view(sku))

    serializer = AdminTireUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quantity = serializer.validated_data.get('quantity')
    prices = serializer.validated_data.get('prices') or {}
    result = services.update_admin(sku, quantity=quantity, prices=prices)
    create_audit_log(
        request=request,
        action='price_change' if prices else 'stock_adjust',
        model_name='Tire',
        object_id=str(result['tire']['id']),
        object_reference=result['tire']['sku'],
        changes={
            'quantity': quantity,
            'prices': {code: str(value) for code, value in prices.items() if value is not None},
        }
    )
    return Response(result)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def tire_admin_export(request):
    """Download the admin catalog as CSV"""
    content = services.export_csv(request.query_params)
    filename = f"catalogo_{timezone.now().strftime('%Y%m%d_%H%M%S')}.csv"
    response = HttpResponse(content, content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
@parser_classes([MultiPartParser, FormParser])
def tire_admin_import(request):
    """Upload a CSV in the export layout"""
    serializer = TireImportSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    upload = serializer.validated_data['file']
    processed = services.import_csv(upload.read())
    create_audit_log(
        request=request,
        action='catalog_import',
        model_name='Tire',
        object_id=upload.name,
        object_name=upload.name,
        changes={'processed': processed}
    )
    return Response({'processed': processed})
