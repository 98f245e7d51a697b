"""
Test suite for Notifications module
Tests: order notification helpers, listing, unread counters, read/delete scoped to the owner
"""
from django.test import TestCase
from rest_framework import status
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.notifications import services
from llantera.notifications.models import Notification


class NotificationServiceTests(TestCase):
    """Test the order notification helpers"""

    def setUp(self):
        self.customer = TestDataFactory.create_user(first_name='Ana', first_last_name='López')
        self.order = TestDataFactory.create_order(self.customer)

    def test_notify_order_created(self):
        notification = services.notify_order_created(self.order)
        self.assertEqual(notification.user, self.customer)
        self.assertEqual(notification.type, 'order_created')
        self.assertEqual(notification.title, 'Pedido recibido')
        self.assertIn(self.order.order_number, notification.message)
        self.assertEqual(notification.data['order_id'], self.order.id)

    def test_notify_admins_new_order(self):
        admin_a = TestDataFactory.create_admin()
        admin_b = TestDataFactory.create_admin()
        TestDataFactory.create_employee()
        created = services.notify_admins_new_order(self.order)
        self.assertEqual({n.user for n in created}, {admin_a, admin_b})
        self.assertEqual(created[0].message, f'Nuevo pedido {self.order.order_number} de Ana López')

    def test_status_helpers(self):
        self.assertEqual(services.notify_order_shipped(self.order).type, 'order_shipped')
        self.assertEqual(services.notify_order_delivered(self.order).title, 'Pedido entregado')
        self.assertEqual(services.notify_order_cancelled(self.order).type, 'order_cancelled')
        invoice = services.notify_invoice_ready(self.order)
        self.assertEqual(invoice.title, 'Factura disponible')
        self.assertEqual(Notification.objects.filter(user=self.customer).count(), 4)


class NotificationAPITests(TestCase):
    """Test notification endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.first = Notification.objects.create(user=self.user, title='Uno', message='uno', is_read=True)
        self.second = Notification.objects.create(user=self.user, title='Dos', message='dos')
        self.third = Notification.objects.create(user=self.user, title='Tres', message='tres')
        self.foreign = Notification.objects.create(user=self.other, title='Ajena', message='ajena')

    def test_list_newest_first_with_unread_count(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n['title'] for n in response.data['results']], ['Tres', 'Dos', 'Uno'])
        self.assertEqual(response.data['unread_count'], 2)
        self.assertEqual(response.data['limit'], 20)

    def test_unread_filter(self):
        response = self.client.get('/api/v1/notifications/?unread=true')
        self.assertEqual(response.data['total'], 2)

    def test_unread_count(self):
        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.data, {'unread_count': 2})

    def test_mark_read(self):
        response = self.client.post(f'/api/v1/notifications/{self.second.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        self.second.refresh_from_db()
        self.assertTrue(self.second.is_read)

    def test_mark_all_read(self):
        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data, {'updated': 2})
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)

    def test_delete(self):
        response = self.client.delete(f'/api/v1/notifications/{self.first.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(pk=self.first.id).exists())

    def test_other_users_notifications_are_hidden(self):
        response = self.client.post(f'/api/v1/notifications/{self.foreign.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(f'/api/v1/notifications/{self.foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
