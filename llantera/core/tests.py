"""
Test suite for users, authentication and shared helpers
Tests: login, token claims, role checks, user administration, audit logging, error handler, smoke script
"""
import json
import os
import tempfile
from unittest import mock

import requests
from django.test import SimpleTestCase, TestCase, RequestFactory
from rest_framework import status
from rest_framework.test import APIRequestFactory
from rest_framework_simplejwt.tokens import AccessToken
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.core.models import User, AuditLog
from llantera.core.exceptions import ConflictError, api_exception_handler
from llantera.core.permissions import is_admin_user, is_staff_user
from llantera.core.utils import parse_limit, get_client_ip, create_audit_log
import api_smoke


class UserModelTests(TestCase):
    """Test User model behaviour"""

    def test_email_is_lowercased(self):
        user = TestDataFactory.create_user(email='Mixed.Case@Test.COM')
        self.assertEqual(user.email, 'mixed.case@test.com')

    def test_full_name_falls_back_to_email(self):
        user = TestDataFactory.create_user(email='nobody@test.com')
        self.assertEqual(user.full_name, 'nobody@test.com')

    def test_full_name_joins_parts(self):
        user = TestDataFactory.create_user(first_name='Ana', first_last_name='López')
        self.assertEqual(user.full_name, 'Ana López')

    def test_employee_forced_to_public_level(self):
        level = TestDataFactory.create_price_level(code='gold')
        user = TestDataFactory.create_user(role='employee', level='gold', price_level=level)
        user.refresh_from_db()
        self.assertEqual(user.level, 'public')
        self.assertIsNone(user.price_level)

    def test_role_helpers(self):
        admin = TestDataFactory.create_admin()
        employee = TestDataFactory.create_employee()
        customer = TestDataFactory.create_user()
        self.assertTrue(is_admin_user(admin))
        self.assertFalse(is_admin_user(employee))
        self.assertTrue(is_staff_user(employee))
        self.assertFalse(is_staff_user(customer))


class AuthAPITests(TestCase):
    """Test login, refresh and me endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.level = TestDataFactory.create_price_level(code='distribuidor')
        self.user = TestDataFactory.create_user(
            email='cliente@test.com', password='secreto123', level='distribuidor', price_level=self.level
        )

    def test_login_returns_tokens_and_claims(self):
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'CLIENTE@test.com',
            'password': 'secreto123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'cliente@test.com')
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], 'customer')
        self.assertEqual(token['level'], 'distribuidor')
        self.assertEqual(token['price_level_id'], self.level.id)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'cliente@test.com',
            'password': 'otra'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_inactive_user_looks_like_bad_credentials(self):
        TestDataFactory.create_user(email='inactivo@test.com', password='secreto123', is_active=False)
        inactive = self.client.post('/api/v1/auth/login/', {
            'email': 'inactivo@test.com',
            'password': 'secreto123'
        }, format='json')
        wrong = self.client.post('/api/v1/auth/login/', {
            'email': 'cliente@test.com',
            'password': 'otra'
        }, format='json')
        self.assertEqual(inactive.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(inactive.data, wrong.data)

    def test_refresh_token_of_deleted_user(self):
        login = self.client.post('/api/v1/auth/login/', {
            'email': 'cliente@test.com',
            'password': 'secreto123'
        }, format='json')
        self.user.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_flags(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_admin'])
        self.assertFalse(response.data['is_staff_member'])
        self.assertEqual(response.data['price_level_code'], 'distribuidor')

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserAdminAPITests(TestCase):
    """Test user administration endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(email='admin@test.com')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_customer_cannot_list_users(self):
        customer = TestDataFactory.create_user()
        self.client.authenticate_user(customer)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_cannot_list_users(self):
        self.client.authenticate_user(TestDataFactory.create_employee())
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_user_defaults_to_customer(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'Nuevo@Test.com',
            'password': 'secreto123',
            'first_name': 'Nuevo'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['email'], 'nuevo@test.com')
        self.assertEqual(response.data['role'], 'customer')
        self.assertEqual(response.data['level'], 'public')
        self.assertTrue(User.objects.get(email='nuevo@test.com').check_password('secreto123'))
        self.assertTrue(AuditLog.objects.filter(model_name='User', action='create').exists())

    def test_create_user_requires_password(self):
        response = self.client.post('/api/v1/users/', {'email': 'sinpass@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_create_user_duplicate_email_case_insensitive(self):
        TestDataFactory.create_user(email='dup@test.com')
        response = self.client.post('/api/v1/users/', {
            'email': 'DUP@test.com',
            'password': 'secreto123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_create_user_invalid_role(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'rol@test.com',
            'password': 'secreto123',
            'role': 'superhero'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)

    def test_create_employee_forces_public_level(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'empleado@test.com',
            'password': 'secreto123',
            'role': 'employee',
            'level': 'gold'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['level'], 'public')

    def test_list_users_search_and_pagination(self):
        TestDataFactory.create_user(email='buscado@test.com', first_name='Buscado')
        for _ in range(3):
            TestDataFactory.create_user()
        response = self.client.get('/api/v1/users/?search=buscado')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['results'][0]['email'], 'buscado@test.com')

        response = self.client.get('/api/v1/users/?limit=2&offset=0')
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['limit'], 2)

        response = self.client.get('/api/v1/users/?limit=500')
        self.assertEqual(response.data['limit'], 20)

    def test_list_users_filter_by_role(self):
        TestDataFactory.create_employee()
        response = self.client.get('/api/v1/users/?role=employee')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(all(u['role'] == 'employee' for u in response.data['results']))

    def test_list_users_non_numeric_company(self):
        response = self.client.get('/api/v1/users/?company=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_update_user(self):
        user = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/users/{user.id}/', {'first_name': 'Cambiado'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'Cambiado')
        self.assertTrue(AuditLog.objects.filter(model_name='User', action='update', object_id=str(user.id)).exists())

    def test_update_user_password(self):
        user = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/users/{user.id}/', {'password': 'nuevaclave1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertTrue(user.check_password('nuevaclave1'))

    def test_delete_user(self):
        user = TestDataFactory.create_user()
        response = self.client.delete(f'/api/v1/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=user.id).exists())

    def test_delete_user_with_orders_conflicts(self):
        customer = TestDataFactory.create_user()
        TestDataFactory.create_order(customer, items=[('GY-1', 1, '1000.00')])
        response = self.client.delete(f'/api/v1/users/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('pedidos', response.data['error'])
        self.assertTrue(User.objects.filter(pk=customer.id).exists())

    def test_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_get_missing_user(self):
        response = self.client.get('/api/v1/users/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_audit_log_list(self):
        create_audit_log(user=self.admin, action='update', model_name='Tire', object_id='1')
        response = self.client.get('/api/v1/audit-logs/?model=Tire')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)


class HelperTests(TestCase):
    """Test shared helpers"""

    def test_parse_limit(self):
        self.assertEqual(parse_limit('10'), 10)
        self.assertEqual(parse_limit('0'), 20)
        self.assertEqual(parse_limit('101'), 20)
        self.assertEqual(parse_limit('abc'), 20)
        self.assertEqual(parse_limit(None, default=50, maximum=10000), 50)

    def test_get_client_ip(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        self.assertEqual(get_client_ip(request), '10.0.0.1')

    def test_audit_log_requires_fields(self):
        self.assertIsNone(create_audit_log(action='create', model_name='User'))

    def test_exception_handler_renders_service_errors(self):
        request = APIRequestFactory().get('/')
        response = api_exception_handler(ConflictError('Conflicto', details=['a']), {'request': request})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'error': 'Conflicto', 'details': ['a']})

    def test_exception_handler_unexpected_error(self):
        request = APIRequestFactory().get('/')
        with self.assertLogs('llantera.core.exceptions', level='ERROR'):
            response = api_exception_handler(RuntimeError('boom'), {'request': request})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


class SmokeScriptTests(SimpleTestCase):
    """api_smoke.py against a mocked requests session"""

    def _response(self, status_code=200, payload=None, text=''):
        response = mock.Mock(status_code=status_code, text=text)
        if payload is None:
            response.json.side_effect = ValueError('no json')
        else:
            response.json.return_value = payload
        return response

    def setUp(self):
        self.session = mock.Mock(headers={})
        self.tester = api_smoke.APITester('http://testserver/api/v1/', session=self.session)

    def test_authenticate_sets_bearer_header(self):
        self.session.post.return_value = self._response(payload={'access': 'abc', 'refresh': 'def'})
        with mock.patch('builtins.print'):
            self.assertTrue(self.tester.authenticate('admin@test.com', 'secret'))
        self.session.post.assert_called_once_with(
            'http://testserver/api/v1/auth/login/',
            json={'email': 'admin@test.com', 'password': 'secret'},
            timeout=10
        )
        self.assertEqual(self.session.headers['Authorization'], 'Bearer abc')

    def test_authenticate_failure(self):
        self.session.post.return_value = self._response(status_code=401, payload={}, text='bad')
        with mock.patch('builtins.print'):
            self.assertFalse(self.tester.authenticate('admin@test.com', 'wrong'))
        self.assertNotIn('Authorization', self.session.headers)

    def test_endpoint_records_counts(self):
        self.session.get.return_value = self._response(payload={'results': [1, 2], 'total': 7})
        result = self.tester.test_endpoint('Catalog', '/catalog/tires/', {'limit': 2})
        self.assertTrue(result['success'])
        self.assertEqual(result['item_count'], 2)
        self.assertEqual(result['total_count'], 7)
        self.session.get.assert_called_once_with(
            'http://testserver/api/v1/catalog/tires/', params={'limit': 2}, timeout=api_smoke.REQUEST_TIMEOUT
        )

    def test_endpoint_failure_and_connection_error(self):
        self.session.get.return_value = self._response(status_code=500, text='boom')
        failed = self.tester.test_endpoint('Reports', '/reports/sales/')
        self.assertFalse(failed['success'])
        self.assertEqual(failed['error'], 'boom')

        self.session.get.side_effect = requests.exceptions.ConnectionError('refused')
        broken = self.tester.test_endpoint('Orders', '/orders/')
        self.assertEqual(broken['status_code'], 0)
        self.assertFalse(broken['success'])

        summary = self.tester.summary()
        self.assertEqual(summary['total_tests'], 2)
        self.assertEqual(summary['failed_tests'], 2)
        self.assertIsNone(summary['slowest'])

    def test_run_hits_every_endpoint_and_saves(self):
        self.session.get.return_value = self._response(payload=[])
        summary = api_smoke.run(self.tester, verbose=False)
        self.assertEqual(summary['total_tests'], len(api_smoke.smoke_endpoints()))
        self.assertEqual(summary['failed_tests'], 0)

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'results.json')
            with mock.patch('builtins.print'):
                self.tester.save_results(path)
            with open(path) as f:
                saved = json.load(f)
        self.assertEqual(len(saved['results']), summary['total_tests'])

    def test_main_stops_when_login_fails(self):
        with mock.patch.object(api_smoke.requests, 'Session') as session_class, mock.patch('builtins.print'):
            session_class.return_value.post.return_value = self._response(status_code=401, payload={})
            session_class.return_value.headers = {}
            code = api_smoke.main(['--email', 'a@test.com', '--password', 'x'])
        self.assertEqual(code, 1)
        session_class.return_value.get.assert_not_called()
