"""
Test suite for Inventory module
Tests: stock reservation lifecycle, availability checks, inventory API
"""
from django.test import TestCase
from rest_framework import status
from llantera.core.exceptions import ServiceValidationError
from llantera.core.models import AuditLog
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.inventory import services
from llantera.inventory.models import Inventory


class StockMovementTests(TestCase):
    """Test reserve/release/confirm semantics"""

    def setUp(self):
        self.tire = TestDataFactory.create_tire(sku='STK-1', quantity=10)

    def test_reserve_moves_to_reserved(self):
        inventory = services.reserve(self.tire, 4)
        self.assertEqual(inventory.quantity, 6)
        self.assertEqual(inventory.reserved, 4)

    def test_release_returns_stock(self):
        services.reserve(self.tire, 4)
        inventory = services.release(self.tire, 4)
        self.assertEqual(inventory.quantity, 10)
        self.assertEqual(inventory.reserved, 0)

    def test_confirm_sale_only_clears_reserved(self):
        services.reserve(self.tire, 3)
        inventory = services.confirm_sale(self.tire, 3)
        self.assertEqual(inventory.quantity, 7)
        self.assertEqual(inventory.reserved, 0)

    def test_counters_never_negative(self):
        inventory = services.reserve(self.tire, 15)
        self.assertEqual(inventory.quantity, 0)
        inventory = services.confirm_sale(self.tire, 20)
        self.assertEqual(inventory.reserved, 0)

    def test_inventory_row_created_on_demand(self):
        tire = TestDataFactory.create_tire(sku='STK-2')
        self.assertEqual(services.available_quantity(tire), 0)
        inventory = services.release(tire, 2)
        self.assertEqual(inventory.quantity, 2)
        self.assertEqual(Inventory.objects.filter(tire=tire).count(), 1)

    def test_ensure_available(self):
        services.ensure_available(self.tire, 10)
        with self.assertRaises(ServiceValidationError) as ctx:
            services.ensure_available(self.tire, 11)
        self.assertEqual(ctx.exception.details, {'sku': 'STK-1', 'available': 10, 'requested': 11})

    def test_set_stock_reports_changes(self):
        inventory, changes = services.set_stock(self.tire, quantity=12, min_stock=3)
        self.assertEqual(inventory.quantity, 12)
        self.assertEqual(changes['quantity'], {'old': 10, 'new': 12})
        self.assertEqual(changes['min_stock'], {'old': 0, 'new': 3})

        _, changes = services.set_stock(self.tire, quantity=12)
        self.assertEqual(changes, {})

        with self.assertRaises(ServiceValidationError):
            services.set_stock(self.tire, quantity=-1)


class InventoryAPITests(TestCase):
    """Test inventory endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.employee = TestDataFactory.create_employee()
        self.client.authenticate_user(self.employee)
        brand = TestDataFactory.create_brand(name='Michelin')
        self.low = TestDataFactory.create_tire(sku='INV-LOW', brand=brand, model='Primacy', quantity=2)
        self.ok = TestDataFactory.create_tire(sku='INV-OK', model='Eagle', quantity=20)
        Inventory.objects.filter(tire=self.low).update(min_stock=4)
        Inventory.objects.filter(tire=self.ok).update(min_stock=4)

    def test_list_inventory(self):
        response = self.client.get('/api/v1/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual([row['sku'] for row in response.data['results']], ['INV-LOW', 'INV-OK'])

    def test_low_stock_filter(self):
        response = self.client.get('/api/v1/inventory/?low_stock=true')
        self.assertEqual([row['sku'] for row in response.data['results']], ['INV-LOW'])
        self.assertTrue(response.data['results'][0]['is_low_stock'])

    def test_search_by_brand(self):
        response = self.client.get('/api/v1/inventory/?search=michelin')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['results'][0]['brand_name'], 'Michelin')

    def test_detail_creates_missing_row(self):
        TestDataFactory.create_tire(sku='INV-NEW')
        response = self.client.get('/api/v1/inventory/inv-new/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 0)

    def test_adjust_stock_writes_audit_log(self):
        response = self.client.patch('/api/v1/inventory/INV-OK/', {'quantity': 15}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 15)

        log = AuditLog.objects.get(action='stock_adjust', object_reference='INV-OK')
        self.assertEqual(log.user, self.employee)
        self.assertEqual(log.changes['quantity'], {'old': 20, 'new': 15})

    def test_unchanged_adjust_skips_audit(self):
        self.client.put('/api/v1/inventory/INV-OK/', {'quantity': 20}, format='json')
        self.assertFalse(AuditLog.objects.filter(action='stock_adjust').exists())

    def test_negative_quantity_rejected(self):
        response = self.client.put('/api/v1/inventory/INV-OK/', {'quantity': -5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_tire(self):
        response = self.client.get('/api/v1/inventory/NOPE/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/inventory/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
