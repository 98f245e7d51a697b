from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from llantera.core.permissions import IsStaffRole
from llantera.core.utils import paginate_offset
from .models import Company, Address, BillingInfo, CustomerRequest
from .serializers import (
    CompanySerializer, AddressSerializer, BillingInfoSerializer,
    CustomerRequestSerializer, CustomerRequestUpdateSerializer
)


def _set_default(queryset, instance):
    """Mark ``instance`` as the only default entry among the owner's records"""
    with transaction.atomic():
        queryset.filter(is_default=True).exclude(pk=instance.pk).update(is_default=False)
        if not instance.is_default:
            instance.is_default = True
            instance.save(update_fields=['is_default', 'updated_at'])
    return instance


def _save_with_default(serializer, queryset, **kwargs):
    """Save an address or billing entry, honoring a requested is_default"""
    wants_default = serializer.validated_data.pop('is_default', None)
    if serializer.instance is None:
        # First entry of a user becomes the default one
        wants_default = wants_default or not queryset.exists()
        kwargs['is_default'] = False
    elif wants_default is False:
        kwargs['is_default'] = False
    instance = serializer.save(**kwargs)
    if wants_default:
        _set_default(queryset, instance)
    return instance


# Company views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def company_list_create(request):
    """List all companies or create a new company"""
    if request.method == 'GET':
        queryset = Company.objects.all()
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(key_name__icontains=search) |
                Q(social_reason__icontains=search) |
                Q(rfc__icontains=search)
            )
        serializer = CompanySerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = CompanySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def company_detail(request, pk):
    """Retrieve, update or delete a company"""
    company = get_object_or_404(Company, pk=pk)

    if request.method == 'GET':
        serializer = CompanySerializer(company)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CompanySerializer(company, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        company.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Address views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def address_list_create(request):
    """List the user's addresses or add a new one"""
    addresses = Address.objects.filter(user=request.user)
    if request.method == 'GET':
        serializer = AddressSerializer(addresses, many=True)
        return Response(serializer.data)
    else:
        serializer = AddressSerializer(data=request.data)
        if serializer.is_valid():
            address = _save_with_default(serializer, addresses, user=request.user)
            return Response(AddressSerializer(address).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def address_detail(request, pk):
    """Retrieve, update or delete one of the user's addresses"""
    address = get_object_or_404(Address, pk=pk, user=request.user)

    if request.method == 'GET':
        return Response(AddressSerializer(address).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AddressSerializer(address, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            address = _save_with_default(serializer, Address.objects.filter(user=request.user))
            return Response(AddressSerializer(address).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        address.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST', 'PUT'])
@permission_classes([IsAuthenticated])
def address_set_default(request, pk):
    """Make an address the default one"""
    address = get_object_or_404(Address, pk=pk, user=request.user)
    _set_default(Address.objects.filter(user=request.user), address)
    return Response(AddressSerializer(address).data)


# Billing views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def billing_list_create(request):
    """List the user's billing data or add a new entry"""
    infos = BillingInfo.objects.filter(user=request.user)
    if request.method == 'GET':
        serializer = BillingInfoSerializer(infos, many=True)
        return Response(serializer.data)
    else:
        serializer = BillingInfoSerializer(data=request.data)
        if serializer.is_valid():
            info = _save_with_default(serializer, infos, user=request.user)
            return Response(BillingInfoSerializer(info).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def billing_default(request):
    """The user's default billing data"""
    info = BillingInfo.objects.filter(user=request.user, is_default=True).first()
    if info is None:
        return Response({'error': 'No hay datos de facturación predeterminados'}, status=status.HTTP_404_NOT_FOUND)
    return Response(BillingInfoSerializer(info).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def billing_detail(request, pk):
    """Retrieve, update or delete one of the user's billing entries"""
    info = get_object_or_404(BillingInfo, pk=pk, user=request.user)

    if request.method == 'GET':
        return Response(BillingInfoSerializer(info).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BillingInfoSerializer(info, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            info = _save_with_default(serializer, BillingInfo.objects.filter(user=request.user))
            return Response(BillingInfoSerializer(info).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        info.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST', 'PUT'])
@permission_classes([IsAuthenticated])
def billing_set_default(request, pk):
    """Make a billing entry the default one"""
    info = get_object_or_404(BillingInfo, pk=pk, user=request.user)
    _set_default(BillingInfo.objects.filter(user=request.user), info)
    return Response(BillingInfoSerializer(info).data)


# CustomerRequest views
@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def customer_request_list_create(request):
    """
    POST is the public "I want to be a customer" form.
    GET lists requests for admins and employees.
    """
    if request.method == 'POST':
        serializer = CustomerRequestSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(status='pendiente')
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    permission = IsStaffRole()
    if not permission.has_permission(request, None):
        if not request.user or not request.user.is_authenticated:
            return Response({'error': 'Autenticación requerida'}, status=status.HTTP_401_UNAUTHORIZED)
        return Response({'error': permission.message}, status=status.HTTP_403_FORBIDDEN)

    queryset = CustomerRequest.objects.select_related('employee').all()
    search = request.query_params.get('search', '').strip()
    if search:
        queryset = queryset.filter(
            Q(full_name__icontains=search) |
            Q(email__icontains=search) |
            Q(phone__icontains=search) |
            Q(message__icontains=search)
        )
    status_filter = request.query_params.get('status', '').strip()
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    employee_id = request.query_params.get('employee', '').strip()
    if employee_id and not employee_id.isdigit():
        return Response({'error': 'El filtro employee debe ser numérico'}, status=status.HTTP_400_BAD_REQUEST)
    if employee_id:
        queryset = queryset.filter(employee_id=employee_id)

    requests_page, meta = paginate_offset(queryset.order_by('-created_at'), request)
    return Response({'results': CustomerRequestSerializer(requests_page, many=True).data, **meta})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def customer_request_detail(request, pk):
    """Retrieve, follow up or delete a customer request"""
    customer_request = get_object_or_404(CustomerRequest, pk=pk)

    if request.method == 'GET':
        return Response(CustomerRequestSerializer(customer_request).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerRequestUpdateSerializer(customer_request, data=request.data, partial=True)
        if serializer.is_valid():
            customer_request = serializer.save()
            return Response(CustomerRequestSerializer(customer_request).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        customer_request.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
