"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from llantera.parties.models import Company, Address, BillingInfo, CustomerRequest
from llantera.catalog.models import Brand, BrandAlias, TireType, Tire
from llantera.inventory.models import Inventory
from llantera.pricing.models import PriceColumn, PriceLevel, TirePrice
from llantera.orders.models import Order, OrderItem
from decimal import Decimal
from django.utils import timezone
import random
import string
import uuid

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role='customer', level='public',
                    price_level=None, company=None, first_name='', first_last_name='', is_active=True):
        """Create a test user"""
        if not email:
            email = f'testuser_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            role=role,
            level=level,
            price_level=price_level,
            company=company,
            first_name=first_name,
            first_last_name=first_last_name,
            is_active=is_active
        )

    @staticmethod
    def create_admin(email=None, password='testpass123'):
        return TestDataFactory.create_user(email=email, password=password, role='admin')

    @staticmethod
    def create_employee(email=None, password='testpass123'):
        return TestDataFactory.create_user(email=email, password=password, role='employee')

    @staticmethod
    def create_company(key_name=None, social_reason=None, rfc=''):
        """Create a test company"""
        if not key_name:
            key_name = f'Company_{TestDataFactory.random_string(6)}'
        return Company.objects.create(
            key_name=key_name,
            social_reason=social_reason or f'{key_name} S.A. de C.V.',
            rfc=rfc
        )

    @staticmethod
    def create_brand(name=None, aliases=None):
        """Create a test brand"""
        if not name:
            name = f'Brand_{TestDataFactory.random_string(6)}'
        brand = Brand.objects.create(name=name)
        for alias in aliases or []:
            BrandAlias.objects.create(brand=brand, alias=alias)
        return brand

    @staticmethod
    def create_tire_type(name=None):
        if not name:
            name = f'Tipo_{TestDataFactory.random_string(6)}'
        return TireType.objects.create(name=name)

    @staticmethod
    def create_price_column(code=None, name=None, mode='fixed', base=None, operation='percent',
                            amount=None, display_order=0):
        """Create a test price column (no tire prices are written)"""
        if not code:
            code = f'col_{TestDataFactory.random_string(6).lower()}'
        return PriceColumn.objects.create(
            code=code,
            name=name or code.title(),
            mode=mode,
            base=base,
            operation=operation,
            amount=amount,
            display_order=display_order
        )

    @staticmethod
    def create_price_level(code=None, price_column=None, reference_column=None, name=None):
        """Create a test price level"""
        if not code:
            code = f'level_{TestDataFactory.random_string(6).lower()}'
        if not price_column:
            price_column = TestDataFactory.create_price_column()
        return PriceLevel.objects.create(
            code=code,
            name=name or code.title(),
            price_column=price_column,
            reference_column=reference_column
        )

    @staticmethod
    def create_tire(sku=None, brand=None, model='Test Model', width=205, profile=55, rim='16',
                    construction='R', public_price='0.00', quantity=None, prices=None, tire_type=None):
        """
        Create a test tire.

        ``quantity`` creates its inventory row; ``prices`` maps column
        codes to prices and creates the columns that don't exist yet.
        """
        if not sku:
            sku = f'SKU{TestDataFactory.random_string(8).upper()}'
        if not brand:
            brand = TestDataFactory.create_brand()
        tire = Tire.objects.create(
            sku=sku,
            brand=brand,
            model=model,
            width=width,
            profile=profile,
            rim=Decimal(str(rim)),
            construction=construction,
            tire_type=tire_type,
            public_price=Decimal(str(public_price)),
            original_measure=f'{width}/{profile}{construction}{rim}'
        )
        if quantity is not None:
            Inventory.objects.create(tire=tire, quantity=quantity)
        for code, price in (prices or {}).items():
            column = PriceColumn.objects.filter(code=code).first()
            if column is None:
                column = TestDataFactory.create_price_column(code=code)
            TirePrice.objects.create(tire=tire, column=column, price=Decimal(str(price)))
        return tire

    @staticmethod
    def create_address(user, alias='Principal', is_default=False, postal_code='64000'):
        """Create a test shipping address"""
        return Address.objects.create(
            user=user,
            alias=alias,
            street='Av. Constitución',
            exterior_number='100',
            neighborhood='Centro',
            postal_code=postal_code,
            city='Monterrey',
            state='Nuevo León',
            phone='8112345678',
            is_default=is_default
        )

    @staticmethod
    def create_billing_info(user, rfc='XAXX010101000', is_default=False):
        """Create test billing data"""
        return BillingInfo.objects.create(
            user=user,
            rfc=rfc,
            razon_social='Cliente de Prueba',
            regimen_fiscal='601',
            uso_cfdi='G03',
            postal_code='64000',
            is_default=is_default
        )

    @staticmethod
    def create_customer_request(full_name=None, request_type='mayoreo', status='pendiente', email=''):
        if not full_name:
            full_name = f'Prospecto {TestDataFactory.random_string(6)}'
        return CustomerRequest.objects.create(
            full_name=full_name,
            request_type=request_type,
            status=status,
            email=email
        )

    @staticmethod
    def create_order(user, status='solicitado', items=None, requires_invoice=False, total=None):
        """
        Create a test order without touching stock.

        ``items`` is a list of (sku, quantity, unit_price) tuples.
        """
        # Generate unique order_number
        order_number = f"PED-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
        while Order.objects.filter(order_number=order_number).exists():
            order_number = f"PED-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
        items = items or [('SKU-TEST', 1, '1000.00')]
        subtotal = sum(Decimal(str(price)) * qty for _, qty, price in items)
        iva = (subtotal * Decimal('0.16')).quantize(Decimal('0.01'))
        order = Order.objects.create(
            order_number=order_number,
            user=user,
            status=status,
            payment_method='transferencia',
            requires_invoice=requires_invoice,
            subtotal=subtotal,
            iva=iva,
            total=Decimal(str(total)) if total is not None else subtotal + iva
        )
        for sku, qty, price in items:
            OrderItem.objects.create(
                order=order,
                tire_sku=sku,
                quantity=qty,
                unit_price=Decimal(str(price)),
                subtotal=Decimal(str(price)) * qty
            )
        return order


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
