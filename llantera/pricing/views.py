from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from llantera.core.permissions import IsStaffRole
from llantera.core.utils import create_audit_log
from .models import PriceColumn, PriceLevel
from .serializers import (
    PriceColumnSerializer, PriceColumnInputSerializer, PriceColumnDeleteSerializer, PriceLevelSerializer
)
from . import services


# PriceColumn views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def price_column_list_create(request):
    """List price columns ordered for display or create a new one"""
    if request.method == 'GET':
        columns = PriceColumn.objects.select_related('base').order_by('display_order', 'code')
        serializer = PriceColumnSerializer(columns, many=True)
        return Response(serializer.data)
    else:
        serializer = PriceColumnInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        column = services.create_column(serializer.validated_data, request=request)
        return Response(PriceColumnSerializer(column).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def price_column_detail(request, pk):
    """Retrieve, update or delete a price column"""
    column = get_object_or_404(PriceColumn.objects.select_related('base'), pk=pk)

    if request.method == 'GET':
        return Response(PriceColumnSerializer(column).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PriceColumnInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        column = services.update_column(column, serializer.validated_data, request=request)
        return Response(PriceColumnSerializer(column).data)
    else:  # DELETE
        # Resolutions may come in the body or, for transfer_to_code, the query string
        payload = request.data if isinstance(request.data, dict) else {}
        serializer = PriceColumnDeleteSerializer(data={
            'dependents': payload.get('dependents', []),
            'transfer_to_code': payload.get('transfer_to_code') or request.query_params.get('transfer_to_code', ''),
        })
        serializer.is_valid(raise_exception=True)
        services.delete_column(
            column,
            dependents=serializer.validated_data.get('dependents', []),
            transfer_to_code=serializer.validated_data.get('transfer_to_code'),
            request=request
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def price_column_dependents(request, pk):
    """Preview what deleting a column would affect"""
    column = get_object_or_404(PriceColumn, pk=pk)
    return Response(services.get_column_dependents(column))


# PriceLevel views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def price_level_list_create(request):
    """List all price levels or create a new level"""
    if request.method == 'GET':
        levels = PriceLevel.objects.select_related('price_column', 'reference_column').all()
        serializer = PriceLevelSerializer(levels, many=True)
        return Response(serializer.data)
    else:
        serializer = PriceLevelSerializer(data=request.data)
        if serializer.is_valid():
            level = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='PriceLevel',
                object_id=str(level.id),
                object_reference=level.code
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def price_level_detail(request, pk):
    """Retrieve, update or delete a price level"""
    level = get_object_or_404(PriceLevel, pk=pk)

    if request.method == 'GET':
        return Response(PriceLevelSerializer(level).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PriceLevelSerializer(level, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        transfer_to_code = request.query_params.get('transfer_to_code') or (
            request.data.get('transfer_to_code') if isinstance(request.data, dict) else None
        )
        services.delete_price_level(level, transfer_to_code=transfer_to_code, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)
