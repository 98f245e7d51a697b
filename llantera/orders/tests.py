"""
Comprehensive test suite for Orders module
Tests: cart, order placement with stock reservation, customer cancellation, admin status flow, invoice upload
"""
import shutil
import tempfile
from decimal import Decimal
from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from llantera.core.models import AuditLog
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.inventory.models import Inventory
from llantera.notifications.models import Notification
from llantera.orders import services
from llantera.orders.models import Order, CartItem


class CartAPITests(TestCase):
    """Test the per-user cart"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        brand = TestDataFactory.create_brand(name='Goodyear')
        self.tire = TestDataFactory.create_tire(
            sku='GY-100', brand=brand, model='Eagle', quantity=6,
            prices={'lista': '1000.00', 'mayoreo': '900.00'}
        )

    def test_empty_cart_created_on_first_access(self):
        response = self.client.get('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])
        self.assertEqual(response.data['item_count'], 0)
        self.assertEqual(response.data['subtotal'], Decimal('0.00'))

    def test_add_item_and_increment(self):
        response = self.client.post('/api/v1/cart/items/', {'sku': 'gy-100', 'quantity': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.post('/api/v1/cart/items/', {'sku': 'GY-100', 'quantity': 1}, format='json')

        response = self.client.get('/api/v1/cart/')
        item = response.data['items'][0]
        self.assertEqual(item['sku'], 'GY-100')
        self.assertEqual(item['quantity'], 3)
        self.assertEqual(item['brand'], 'Goodyear')
        self.assertEqual(item['price'], Decimal('1000.00'))
        self.assertEqual(item['stock'], 6)
        self.assertEqual(item['subtotal'], Decimal('3000.00'))
        self.assertEqual(response.data['item_count'], 3)
        self.assertEqual(response.data['subtotal'], Decimal('3000.00'))

    def test_cart_priced_at_requested_level(self):
        services.add_cart_item(self.user, 'GY-100', 2)
        response = self.client.get('/api/v1/cart/?level=distribuidor')
        self.assertEqual(response.data['items'][0]['price'], Decimal('900.00'))
        self.assertEqual(response.data['subtotal'], Decimal('1800.00'))

    def test_add_invalid_items(self):
        response = self.client.post('/api/v1/cart/items/', {'sku': 'NOPE', 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.post('/api/v1/cart/items/', {'sku': 'GY-100', 'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/cart/items/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_set_quantity(self):
        services.add_cart_item(self.user, 'GY-100', 2)
        response = self.client.put('/api/v1/cart/items/GY-100/', {'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['quantity'], 5)

        response = self.client.put('/api/v1/cart/items/GY-100/', {'quantity': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put('/api/v1/cart/items/GY-100/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'], [])

    def test_remove_and_clear(self):
        other = TestDataFactory.create_tire(sku='MI-200')
        services.add_cart_item(self.user, 'GY-100', 1)
        services.add_cart_item(self.user, other.sku, 1)

        response = self.client.delete('/api/v1/cart/items/GY-100/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.delete('/api/v1/cart/items/GY-100/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.delete('/api/v1/cart/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())

    def test_deleted_tire_stays_visible(self):
        services.add_cart_item(self.user, 'GY-100', 1)
        self.tire.delete()
        response = self.client.get('/api/v1/cart/')
        self.assertFalse(response.data['items'][0]['available'])
        self.assertEqual(response.data['item_count'], 0)


class OrderCreateTests(TestCase):
    """Test placing orders"""

    def setUp(self):
        self.customer = TestDataFactory.create_user(first_name='Luis', first_last_name='Pérez')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)
        self.tire = TestDataFactory.create_tire(sku='GY-100', quantity=10, prices={'lista': '1000.00'})
        self.other = TestDataFactory.create_tire(sku='MI-200', quantity=2, prices={'lista': '500.00'})

    def order_payload(self, **overrides):
        payload = {
            'items': [{'sku': 'GY-100', 'quantity': 4}, {'sku': 'MI-200', 'quantity': 1, 'unit_price': '450.00'}],
            'payment_method': 'transferencia',
        }
        payload.update(overrides)
        return payload

    def test_create_order_computes_totals_and_reserves_stock(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data
        self.assertRegex(data['order_number'], r'^PED-\d{8}-[0-9A-F]{8}$')
        self.assertEqual(data['status'], 'solicitado')
        self.assertEqual(data['payment_mode'], 'contado')
        self.assertEqual(data['subtotal'], '4450.00')
        self.assertEqual(data['iva'], '712.00')
        self.assertEqual(data['total'], '5162.00')
        self.assertEqual(data['shipping_cost'], '0.00')

        items = {item['tire_sku']: item for item in data['items']}
        self.assertEqual(items['GY-100']['unit_price'], '1000.00')
        self.assertEqual(items['GY-100']['subtotal'], '4000.00')
        self.assertEqual(items['MI-200']['unit_price'], '450.00')

        inventory = Inventory.objects.get(tire=self.tire)
        self.assertEqual(inventory.quantity, 6)
        self.assertEqual(inventory.reserved, 4)

    def test_client_totals_are_kept(self):
        response = self.client.post(
            '/api/v1/orders/',
            self.order_payload(subtotal='4000.00', iva='640.00', total='4640.00'),
            format='json'
        )
        self.assertEqual(response.data['subtotal'], '4000.00')
        self.assertEqual(response.data['iva'], '640.00')
        self.assertEqual(response.data['total'], '4640.00')

    def test_invalid_payment_mode_defaults_to_contado(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(payment_mode='trueque'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment_mode'], 'contado')

    def test_invalid_payment_method(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(payment_method='bitcoin'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_items_required(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(
            '/api/v1/orders/', self.order_payload(items=[{'sku': 'GY-100', 'quantity': 0}]), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_insufficient_stock_rejects_order(self):
        response = self.client.post(
            '/api/v1/orders/',
            self.order_payload(items=[{'sku': 'GY-100', 'quantity': 2}, {'sku': 'MI-200', 'quantity': 3}]),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'], {'sku': 'MI-200', 'available': 2, 'requested': 3})
        self.assertFalse(Order.objects.exists())
        self.assertEqual(Inventory.objects.get(tire=self.tire).quantity, 10)

    def test_repeated_sku_counts_once_against_stock(self):
        response = self.client.post(
            '/api/v1/orders/',
            self.order_payload(items=[{'sku': 'MI-200', 'quantity': 2}, {'sku': 'mi-200', 'quantity': 1}]),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_sku(self):
        response = self.client.post(
            '/api/v1/orders/', self.order_payload(items=[{'sku': 'NOPE', 'quantity': 1}]), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invoice_requires_billing_data(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(requires_invoice=True), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            '/api/v1/orders/',
            self.order_payload(requires_invoice=True, billing_info={'rfc': 'XAXX010101000'}),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('razon_social', response.data['details']['missing'])

    def test_invoice_uses_default_billing_and_address(self):
        TestDataFactory.create_billing_info(self.customer, rfc='PEGL800101AB1', is_default=True)
        TestDataFactory.create_address(self.customer, is_default=True, postal_code='64000')
        response = self.client.post('/api/v1/orders/', self.order_payload(requires_invoice=True), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['requires_invoice'])
        self.assertEqual(response.data['billing_rfc'], 'PEGL800101AB1')
        self.assertEqual(response.data['shipping_postal_code'], '64000')

    def test_notifications_sent(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(), format='json')
        number = response.data['order_number']
        customer_note = Notification.objects.get(user=self.customer)
        self.assertEqual(customer_note.type, 'order_created')
        admin_note = Notification.objects.get(user=self.admin)
        self.assertEqual(admin_note.message, f'Nuevo pedido {number} de Luis Pérez')
        self.assertTrue(AuditLog.objects.filter(action='order_create', object_reference=number).exists())


class CustomerOrderTests(TestCase):
    """Test listing, detail and cancellation of the caller's orders"""

    def setUp(self):
        self.customer = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.customer)
        self.tire = TestDataFactory.create_tire(sku='GY-100', quantity=10)

    def place_order(self, quantity=2):
        return services.create_order(
            self.customer,
            {'items': [{'sku': 'GY-100', 'quantity': quantity, 'unit_price': '1000.00'}],
             'payment_method': 'efectivo'},
            'public'
        )

    def test_list_own_orders_newest_first(self):
        first = self.place_order()
        second = self.place_order()
        TestDataFactory.create_order(TestDataFactory.create_user())
        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual([o['id'] for o in response.data['results']], [second.id, first.id])
        self.assertEqual(response.data['results'][0]['item_count'], 2)

    def test_other_users_order_is_not_found(self):
        foreign = TestDataFactory.create_order(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/orders/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancel_releases_stock(self):
        order = self.place_order(quantity=3)
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'cancelado')
        self.assertIsNotNone(response.data['cancelled_at'])

        inventory = Inventory.objects.get(tire=self.tire)
        self.assertEqual(inventory.quantity, 10)
        self.assertEqual(inventory.reserved, 0)

    def test_cancel_only_from_solicitado(self):
        order = self.place_order()
        services.update_order_status(order, 'preparando')
        response = self.client.post(f'/api/v1/orders/{order.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminOrderTests(TestCase):
    """Test the admin order list, status flow and invoice upload"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.admin = TestDataFactory.create_admin()
        self.customer = TestDataFactory.create_user(email='cliente@test.com', first_name='Marta')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.tire = TestDataFactory.create_tire(sku='GY-100', quantity=10)
        self.order = services.create_order(
            self.customer,
            {'items': [{'sku': 'GY-100', 'quantity': 4, 'unit_price': '1000.00'}], 'payment_method': 'tarjeta'},
            'public'
        )

    def set_status(self, new_status, **extra):
        return self.client.put(
            f'/api/v1/admin/orders/{self.order.id}/status/', {'status': new_status, **extra}, format='json'
        )

    def test_full_status_flow(self):
        response = self.set_status('preparando', admin_notes='Surtiendo')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['admin_notes'], 'Surtiendo')

        response = self.set_status('enviado')
        self.assertIsNotNone(response.data['shipped_at'])
        self.assertTrue(Notification.objects.filter(user=self.customer, type='order_shipped').exists())

        response = self.set_status('entregado')
        self.assertEqual(response.data['status'], 'entregado')
        self.assertIsNotNone(response.data['delivered_at'])

        inventory = Inventory.objects.get(tire=self.tire)
        self.assertEqual(inventory.quantity, 6)
        self.assertEqual(inventory.reserved, 0)
        self.assertEqual(AuditLog.objects.filter(action='order_status', object_reference=self.order.order_number).count(), 3)

    def test_invalid_transitions(self):
        response = self.set_status('entregado')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details']['current'], 'solicitado')

        self.set_status('cancelado')
        response = self.set_status('preparando')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.set_status('perdido')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cancel_from_shipped_releases_stock(self):
        self.set_status('preparando')
        self.set_status('enviado')
        response = self.set_status('cancelado')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        inventory = Inventory.objects.get(tire=self.tire)
        self.assertEqual(inventory.quantity, 10)
        self.assertEqual(inventory.reserved, 0)

    def test_admin_list_filters(self):
        TestDataFactory.create_order(self.customer, status='entregado', requires_invoice=True)
        response = self.client.get('/api/v1/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)

        response = self.client.get('/api/v1/admin/orders/?status=entregado')
        self.assertEqual(response.data['total'], 1)

        response = self.client.get('/api/v1/admin/orders/?search=cliente@test')
        self.assertEqual(response.data['total'], 2)

        response = self.client.get(f'/api/v1/admin/orders/?search={self.order.order_number}')
        self.assertEqual(response.data['total'], 1)

        response = self.client.get('/api/v1/admin/orders/?invoice=sin_factura')
        self.assertEqual(response.data['total'], 1)
        response = self.client.get('/api/v1/admin/orders/?invoice=facturadas')
        self.assertEqual(response.data['total'], 0)

    def test_customer_cannot_use_admin_endpoints(self):
        self.client.authenticate_user(self.customer)
        response = self.client.get('/api/v1/admin/orders/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_upload_invoice(self):
        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(
                f'/api/v1/admin/orders/{self.order.id}/invoice/',
                {
                    'xml': SimpleUploadedFile('cfdi.xml', b'<cfdi/>', content_type='application/xml'),
                    'pdf': SimpleUploadedFile('cfdi.pdf', b'%PDF-1.4', content_type='application/pdf'),
                },
                format='multipart'
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['has_invoice'])
        self.assertTrue(response.data['invoice_xml_path'].startswith(f'invoices/{self.order.id}/'))
        self.assertTrue(response.data['invoice_pdf_path'].endswith('.pdf'))
        self.assertTrue(Notification.objects.filter(user=self.customer, type='invoice_ready').exists())

    def test_upload_invoice_validation(self):
        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(
                f'/api/v1/admin/orders/{self.order.id}/invoice/', {}, format='multipart'
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

            response = self.client.post(
                f'/api/v1/admin/orders/{self.order.id}/invoice/',
                {'xml': SimpleUploadedFile('cfdi.pdf', b'%PDF-1.4')},
                format='multipart'
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

            big = SimpleUploadedFile('cfdi.pdf', b'0' * (settings.INVOICE_MAX_UPLOAD_SIZE + 1))
            response = self.client.post(
                f'/api/v1/admin/orders/{self.order.id}/invoice/', {'pdf': big}, format='multipart'
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_invoice_size_limit_from_settings(self):
        with override_settings(MEDIA_ROOT=self.media_root, INVOICE_MAX_UPLOAD_SIZE=1024):
            response = self.client.post(
                f'/api/v1/admin/orders/{self.order.id}/invoice/',
                {'pdf': SimpleUploadedFile('cfdi.pdf', b'0' * 2048)},
                format='multipart'
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data['details'], {'max_bytes': 1024})

            response = self.client.post(
                f'/api/v1/admin/orders/{self.order.id}/invoice/',
                {'pdf': SimpleUploadedFile('cfdi.pdf', b'0' * 512)},
                format='multipart'
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertTrue(response.data['invoice_pdf_path'])

        self.order.refresh_from_db()
        self.assertFalse(self.order.has_invoice)
