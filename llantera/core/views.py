from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q, ProtectedError
from django.utils.dateparse import parse_date
from .exceptions import ConflictError
from .models import AuditLog
from .permissions import IsAdminRole, is_admin_user, is_staff_user
from .serializers import UserSerializer, UserCreateSerializer, UserUpdateSerializer, AuditLogSerializer
from .utils import create_audit_log, paginate_offset

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    default_error_messages = {
        'no_active_account': 'Correo o contraseña incorrectos',
    }

    def validate(self, attrs):
        # Emails are stored lowercase
        attrs[self.username_field] = (attrs.get(self.username_field) or '').strip().lower()
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['role'] = user.role
        token['level'] = user.level
        token['price_level_id'] = user.price_level_id
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            refresh = RefreshToken(attrs['refresh'])
        except TokenError:
            raise InvalidToken('Token is invalid or expired.')

        user_id = refresh.payload.get(jwt_settings.USER_ID_CLAIM)
        lookup = {jwt_settings.USER_ID_FIELD: user_id, 'is_active': True}
        if not User.objects.filter(**lookup).exists():
            # User referenced in token doesn't exist anymore
            raise InvalidToken('Token is invalid. User no longer exists.')

        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with role flags"""
    user = request.user
    user_data = UserSerializer(user).data
    user_data['is_admin'] = is_admin_user(user)
    user_data['is_staff_member'] = is_staff_user(user)
    return Response(user_data)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List users (search/role/company filters) or create a new user"""
    if request.method == 'GET':
        queryset = User.objects.select_related('company', 'price_level').all()

        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(first_last_name__icontains=search) |
                Q(second_last_name__icontains=search) |
                Q(phone__icontains=search)
            )

        role = request.query_params.get('role', '').strip()
        if role:
            queryset = queryset.filter(role=role)

        company_id = request.query_params.get('company', '').strip()
        if company_id and not company_id.isdigit():
            return Response({'error': 'El filtro company debe ser numérico'}, status=status.HTTP_400_BAD_REQUEST)
        if company_id:
            queryset = queryset.filter(company_id=company_id)

        users, meta = paginate_offset(queryset.order_by('-created_at'), request)
        return Response({'results': UserSerializer(users, many=True).data, **meta})
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='User',
                object_id=str(user.id),
                object_name=user.email,
                changes={'role': user.role, 'level': user.level}
            )
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserUpdateSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            user = serializer.save()
            changes = {k: str(v) for k, v in serializer.validated_data.items() if k != 'password'}
            create_audit_log(
                request=request,
                action='update',
                model_name='User',
                object_id=str(user.id),
                object_name=user.email,
                changes=changes
            )
            return Response(UserSerializer(user).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'No puedes eliminar tu propio usuario'}, status=status.HTTP_400_BAD_REQUEST)
        user_id, email = user.id, user.email
        try:
            user.delete()
        except ProtectedError:
            raise ConflictError('El usuario tiene pedidos; desactívalo en su lugar')
        create_audit_log(
            request=request,
            action='delete',
            model_name='User',
            object_id=str(user_id),
            object_name=email
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user').all()

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    try:
        date_from = parse_date(request.query_params.get('date_from', ''))
        date_to = parse_date(request.query_params.get('date_to', ''))
    except ValueError:
        return Response({'error': 'Fecha inválida, usa el formato YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    logs, meta = paginate_offset(queryset.order_by('-created_at'), request, default_limit=50, max_limit=500)
    return Response({'results': AuditLogSerializer(logs, many=True).data, **meta})
