"""
Test suite for Pricing module
Tests: price evaluator, column create/update/delete assistant, level resolution, price levels
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.core.models import AuditLog
from llantera.pricing.calculator import apply_price_calculation, static_level_columns
from llantera.pricing.models import PriceColumn, PriceLevel, TirePrice
from llantera.pricing import services


def price_of(tire, code):
    return TirePrice.objects.get(tire=tire, column__code=code).price


class PriceCalculatorTests(TestCase):
    """Test the derived price evaluator"""

    def test_operations(self):
        self.assertEqual(apply_price_calculation(Decimal('1000'), 'add', Decimal('50')), Decimal('1050.00'))
        self.assertEqual(apply_price_calculation(Decimal('1000'), 'subtract', Decimal('50')), Decimal('950.00'))
        self.assertEqual(apply_price_calculation(Decimal('1000'), 'multiply', Decimal('1.16')), Decimal('1160.00'))
        self.assertEqual(apply_price_calculation(Decimal('1000'), 'percent', Decimal('10')), Decimal('900.00'))

    def test_unknown_operation_returns_base(self):
        self.assertEqual(apply_price_calculation(Decimal('123.45'), 'divide', Decimal('2')), Decimal('123.45'))

    def test_rounds_to_two_decimals(self):
        self.assertEqual(apply_price_calculation(Decimal('99.99'), 'percent', Decimal('3')), Decimal('96.99'))
        self.assertEqual(apply_price_calculation('10', 'multiply', '0.333'), Decimal('3.33'))

    def test_static_level_fallback(self):
        self.assertEqual(static_level_columns('empresa'), ('empresa', 'lista'))
        self.assertEqual(static_level_columns('Distribuidor'), ('mayoreo', 'lista'))
        self.assertEqual(static_level_columns('mayorista'), ('mayoreo_6', 'lista'))
        self.assertEqual(static_level_columns('gold'), ('lista', None))
        self.assertEqual(static_level_columns(''), ('lista', None))


class PriceColumnAPITests(TestCase):
    """Test price column endpoints and the recalculation graph"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.lista = TestDataFactory.create_price_column(code='lista', name='Lista')
        self.tire_a = TestDataFactory.create_tire(sku='A1', prices={'lista': '1000.00'})
        self.tire_b = TestDataFactory.create_tire(sku='B1', prices={'lista': '2000.00'})

    def create_derived(self, code, base_code, operation='percent', amount='10'):
        response = self.client.post('/api/v1/price-columns/', {
            'code': code,
            'name': code.title(),
            'mode': 'derived',
            'base_code': base_code,
            'operation': operation,
            'amount': amount
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return PriceColumn.objects.get(code=code)

    def test_create_fixed_column_initializes_zero_prices(self):
        response = self.client.post('/api/v1/price-columns/', {
            'code': 'Empresa',
            'name': 'Empresa',
            'display_order': 2
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'empresa')
        self.assertEqual(response.data['mode'], 'fixed')
        self.assertEqual(price_of(self.tire_a, 'empresa'), Decimal('0.00'))
        self.assertEqual(price_of(self.tire_b, 'empresa'), Decimal('0.00'))

    def test_create_derived_column_computes_prices(self):
        self.create_derived('mayoreo', 'lista', 'percent', '10')
        self.assertEqual(price_of(self.tire_a, 'mayoreo'), Decimal('900.00'))
        self.assertEqual(price_of(self.tire_b, 'mayoreo'), Decimal('1800.00'))

    def test_create_validations(self):
        cases = [
            {'code': 'con espacio', 'name': 'X'},
            {'code': 'lista', 'name': 'Duplicada'},
            {'code': 'nueva', 'name': ''},
            {'code': 'nueva', 'name': 'Nueva', 'display_order': -1},
            {'code': 'nueva', 'name': 'Nueva', 'mode': 'derived', 'amount': '5'},
            {'code': 'nueva', 'name': 'Nueva', 'mode': 'derived', 'base_code': 'lista'},
            {'code': 'nueva', 'name': 'Nueva', 'mode': 'derived', 'base_code': 'noexiste', 'amount': '5'},
            {'code': 'nueva', 'name': 'Nueva', 'mode': 'derived', 'base_code': 'lista', 'operation': 'pow', 'amount': '5'},
        ]
        for payload in cases:
            response = self.client.post('/api/v1/price-columns/', payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, payload)
        self.assertFalse(PriceColumn.objects.filter(code='nueva').exists())

    def test_list_ordered_by_display_order(self):
        TestDataFactory.create_price_column(code='zeta', display_order=0)
        TestDataFactory.create_price_column(code='alfa', display_order=5)
        response = self.client.get('/api/v1/price-columns/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [c['code'] for c in response.data]
        self.assertEqual(codes, ['lista', 'zeta', 'alfa'])

    def test_update_recalculates_transitively(self):
        self.create_derived('mayoreo', 'lista', 'percent', '10')
        self.create_derived('mayoreo_6', 'mayoreo', 'percent', '6')
        self.assertEqual(price_of(self.tire_a, 'mayoreo_6'), Decimal('846.00'))

        mayoreo = PriceColumn.objects.get(code='mayoreo')
        response = self.client.patch(f'/api/v1/price-columns/{mayoreo.id}/', {'amount': '20'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(price_of(self.tire_a, 'mayoreo'), Decimal('800.00'))
        self.assertEqual(price_of(self.tire_a, 'mayoreo_6'), Decimal('752.00'))

    def test_update_rejects_cycles(self):
        mayoreo = self.create_derived('mayoreo', 'lista')
        mayoreo_6 = self.create_derived('mayoreo_6', 'mayoreo')
        response = self.client.patch(f'/api/v1/price-columns/{mayoreo.id}/', {'base_code': 'mayoreo_6'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)
        response = self.client.patch(f'/api/v1/price-columns/{mayoreo_6.id}/', {'base_code': 'mayoreo_6'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mayoreo.refresh_from_db()
        self.assertEqual(mayoreo.base_id, self.lista.id)

    def test_code_is_immutable(self):
        response = self.client.patch(f'/api/v1/price-columns/{self.lista.id}/', {'code': 'otra'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lista_cannot_be_deleted(self):
        response = self.client.delete(f'/api/v1/price-columns/{self.lista.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(PriceColumn.objects.filter(code='lista').exists())

    def test_delete_with_unresolved_dependents_conflicts(self):
        mayoreo = self.create_derived('mayoreo', 'lista')
        self.create_derived('mayoreo_6', 'mayoreo')
        response = self.client.delete(f'/api/v1/price-columns/{mayoreo.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['details']['dependents'], ['mayoreo_6'])
        self.assertTrue(PriceColumn.objects.filter(code='mayoreo').exists())

    def test_dependents_preview(self):
        mayoreo = self.create_derived('mayoreo', 'lista')
        self.create_derived('mayoreo_6', 'mayoreo')
        TestDataFactory.create_price_level(code='distribuidor', price_column=mayoreo, reference_column=self.lista)
        response = self.client.get(f'/api/v1/price-columns/{mayoreo.id}/dependents/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([d['code'] for d in response.data['dependents']], ['mayoreo_6'])
        self.assertEqual(response.data['levels'][0]['code'], 'distribuidor')
        self.assertTrue(response.data['levels'][0]['uses_as_main'])

    def test_delete_converting_dependent_to_fixed(self):
        mayoreo = self.create_derived('mayoreo', 'lista', 'percent', '10')
        self.create_derived('mayoreo_6', 'mayoreo', 'percent', '6')
        response = self.client.delete(f'/api/v1/price-columns/{mayoreo.id}/', {
            'dependents': [{'code': 'mayoreo_6', 'action': 'fixed'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        dependent = PriceColumn.objects.get(code='mayoreo_6')
        self.assertEqual(dependent.mode, 'fixed')
        self.assertIsNone(dependent.base)
        self.assertEqual(price_of(self.tire_a, 'mayoreo_6'), Decimal('846.00'))
        self.assertFalse(TirePrice.objects.filter(column__code='mayoreo').exists())
        self.assertTrue(AuditLog.objects.filter(action='column_delete', object_reference='mayoreo').exists())

    def test_delete_rebasing_dependent(self):
        mayoreo = self.create_derived('mayoreo', 'lista', 'percent', '10')
        self.create_derived('mayoreo_6', 'mayoreo', 'percent', '6')
        response = self.client.delete(f'/api/v1/price-columns/{mayoreo.id}/', {
            'dependents': [{'code': 'mayoreo_6', 'action': 'change_base', 'base_code': 'lista'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        dependent = PriceColumn.objects.get(code='mayoreo_6')
        self.assertEqual(dependent.base, self.lista)
        self.assertEqual(price_of(self.tire_a, 'mayoreo_6'), Decimal('940.00'))

    def test_delete_rebasing_onto_deleted_column_rejected(self):
        mayoreo = self.create_derived('mayoreo', 'lista')
        self.create_derived('mayoreo_6', 'mayoreo')
        response = self.client.delete(f'/api/v1/price-columns/{mayoreo.id}/', {
            'dependents': [{'code': 'mayoreo_6', 'action': 'change_base', 'base_code': 'mayoreo'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(PriceColumn.objects.filter(code='mayoreo').exists())

    def test_delete_requires_transfer_for_levels(self):
        empresa = TestDataFactory.create_price_column(code='empresa')
        level = TestDataFactory.create_price_level(code='empresa', price_column=empresa, reference_column=empresa)
        response = self.client.delete(f'/api/v1/price-columns/{empresa.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/price-columns/{empresa.id}/?transfer_to_code=empresa')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/price-columns/{empresa.id}/?transfer_to_code=noexiste')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/price-columns/{empresa.id}/', {'transfer_to_code': 'LISTA'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        level.refresh_from_db()
        self.assertEqual(level.price_column, self.lista)
        self.assertEqual(level.reference_column, self.lista)

    def test_customer_cannot_manage_columns(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/price-columns/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PricingServiceTests(TestCase):
    """Test level resolution and per-tire recalculation"""

    def setUp(self):
        self.lista = TestDataFactory.create_price_column(code='lista')
        self.mayoreo = TestDataFactory.create_price_column(
            code='mayoreo', mode='derived', base=self.lista, operation='percent', amount=Decimal('10')
        )
        self.tire = TestDataFactory.create_tire(prices={'lista': '500.00'})

    def test_recalculate_tire_prices_for_changed_base(self):
        updated = services.recalculate_tire_prices(self.tire, changed_codes=['lista'])
        self.assertEqual(updated, 1)
        self.assertEqual(price_of(self.tire, 'mayoreo'), Decimal('450.00'))

    def test_recalculate_skips_unrelated_changes(self):
        updated = services.recalculate_tire_prices(self.tire, changed_codes=['empresa'])
        self.assertEqual(updated, 0)

    def test_initialize_tire_prices(self):
        tire = TestDataFactory.create_tire()
        services.initialize_tire_prices(tire)
        self.assertEqual(price_of(tire, 'lista'), Decimal('0.00'))
        self.assertEqual(price_of(tire, 'mayoreo'), Decimal('0.00'))

    def test_resolve_level_columns(self):
        TestDataFactory.create_price_level(code='gold', price_column=self.mayoreo, reference_column=self.lista)
        self.assertEqual(services.resolve_level_columns('GOLD'), ('mayoreo', 'lista'))
        self.assertEqual(services.resolve_level_columns('distribuidor'), ('mayoreo', 'lista'))
        self.assertEqual(services.resolve_level_columns('public'), ('lista', None))

    def test_price_for_tire_falls_back_to_public_price(self):
        tire = TestDataFactory.create_tire(public_price='321.00')
        result = services.price_for_tire(tire, 'public')
        self.assertEqual(result['price'], Decimal('321.00'))
        self.assertEqual(result['price_code'], 'lista')
        self.assertIsNone(result['reference_price'])

    def test_derived_columns_in_order(self):
        mayoreo_6 = TestDataFactory.create_price_column(
            code='mayoreo_6', mode='derived', base=self.mayoreo, operation='percent', amount=Decimal('6')
        )
        ordered = [c.code for c in services.derived_columns_in_order()]
        self.assertLess(ordered.index('mayoreo'), ordered.index(mayoreo_6.code))


class PriceLevelAPITests(TestCase):
    """Test price level endpoints"""

    def setUp(self):
        self.employee = TestDataFactory.create_employee()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.employee)
        self.lista = TestDataFactory.create_price_column(code='lista')
        self.empresa = TestDataFactory.create_price_column(code='empresa')

    def test_create_level_by_column_code(self):
        response = self.client.post('/api/v1/price-levels/', {
            'code': 'Silver',
            'name': 'Silver',
            'price_column': 'EMPRESA',
            'reference_column': 'lista',
            'discount_percentage': '5.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'silver')
        self.assertEqual(response.data['price_column'], 'empresa')
        self.assertEqual(response.data['reference_column'], 'lista')

    def test_create_level_validations(self):
        response = self.client.post('/api/v1/price-levels/', {'code': 'x', 'name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price_column', response.data)

        response = self.client.post('/api/v1/price-levels/', {
            'code': 'x', 'name': 'X', 'price_column': 'lista', 'discount_percentage': '150'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('discount_percentage', response.data)

        TestDataFactory.create_price_level(code='dup', price_column=self.lista)
        response = self.client.post('/api/v1/price-levels/', {
            'code': 'dup', 'name': 'Dup', 'price_column': 'lista'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data)

    def test_delete_level_transfers_users(self):
        level = TestDataFactory.create_price_level(code='gold', price_column=self.empresa)
        target = TestDataFactory.create_price_level(code='silver', price_column=self.lista)
        user = TestDataFactory.create_user(price_level=level)

        response = self.client.delete(f'/api/v1/price-levels/{level.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(PriceLevel.objects.filter(pk=level.id).exists())

        response = self.client.delete(f'/api/v1/price-levels/{level.id}/?transfer_to_code=gold')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/price-levels/{level.id}/?transfer_to_code=silver')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        user.refresh_from_db()
        self.assertEqual(user.price_level, target)
        self.assertFalse(PriceLevel.objects.filter(pk=level.id).exists())

    def test_delete_level_without_users(self):
        level = TestDataFactory.create_price_level(code='bronze', price_column=self.lista)
        response = self.client.delete(f'/api/v1/price-levels/{level.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
