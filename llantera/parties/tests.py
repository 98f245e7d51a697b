"""
Test suite for Parties module
Tests: companies, addresses, billing data, customer requests
"""
from django.test import TestCase
from rest_framework import status
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.parties.models import Company, Address, BillingInfo, CustomerRequest


class CompanyAPITests(TestCase):
    """Test Company API endpoints"""

    def setUp(self):
        self.employee = TestDataFactory.create_employee()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.employee)

    def test_create_company_normalizes_fields(self):
        response = self.client.post('/api/v1/companies/', {
            'key_name': 'Transportes del Norte',
            'social_reason': 'Transportes del Norte S.A. de C.V.',
            'rfc': 'tno010101ab1',
            'emails': [' compras@tno.mx ', '', '  '],
            'phones': ['8112345678', ' ']
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rfc'], 'TNO010101AB1')
        self.assertEqual(response.data['emails'], ['compras@tno.mx'])
        self.assertEqual(response.data['phones'], ['8112345678'])

    def test_create_company_requires_names(self):
        response = self.client.post('/api/v1/companies/', {'key_name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('key_name', response.data)
        self.assertIn('social_reason', response.data)

    def test_create_company_invalid_rfc(self):
        response = self.client.post('/api/v1/companies/', {
            'key_name': 'ACME',
            'social_reason': 'ACME SA',
            'rfc': '123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rfc', response.data)

    def test_search_companies(self):
        TestDataFactory.create_company(key_name='Llantas Sur')
        TestDataFactory.create_company(key_name='Otra')
        response = self.client.get('/api/v1/companies/?search=sur')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_update_and_delete_company(self):
        company = TestDataFactory.create_company()
        response = self.client.patch(f'/api/v1/companies/{company.id}/', {'main_contact': 'Luis'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['main_contact'], 'Luis')
        response = self.client.delete(f'/api/v1/companies/{company.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Company.objects.filter(pk=company.id).exists())

    def test_customer_cannot_manage_companies(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/companies/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AddressAPITests(TestCase):
    """Test owner-scoped address endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.payload = {
            'street': 'Av. Juárez',
            'exterior_number': '12',
            'neighborhood': 'Centro',
            'postal_code': '64000',
            'city': 'Monterrey',
            'state': 'Nuevo León',
            'phone': '8112345678'
        }

    def test_first_address_is_default_with_alias(self):
        response = self.client.post('/api/v1/addresses/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['alias'], 'Principal')
        self.assertTrue(response.data['is_default'])

        response = self.client.post('/api/v1/addresses/', {**self.payload, 'alias': 'Bodega'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['is_default'])

    def test_required_fields(self):
        response = self.client.post('/api/v1/addresses/', {'street': 'Sin datos'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('exterior_number', 'neighborhood', 'postal_code', 'city', 'state', 'phone'):
            self.assertIn(field, response.data)

    def test_postal_code_and_phone_length(self):
        response = self.client.post('/api/v1/addresses/', {**self.payload, 'postal_code': '640'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('postal_code', response.data)
        response = self.client.post('/api/v1/addresses/', {**self.payload, 'phone': '81123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_other_users_address_is_not_found(self):
        other = TestDataFactory.create_user()
        address = TestDataFactory.create_address(other)
        response = self.client.get(f'/api/v1/addresses/{address.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(f'/api/v1/addresses/{address.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Address.objects.filter(pk=address.id).exists())

    def test_set_default_clears_previous(self):
        first = TestDataFactory.create_address(self.user, alias='Casa', is_default=True)
        second = TestDataFactory.create_address(self.user, alias='Oficina')
        response = self.client.post(f'/api/v1/addresses/{second.id}/default/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        first.refresh_from_db()
        second.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertTrue(second.is_default)

    def test_create_with_default_flag_replaces_previous(self):
        first = TestDataFactory.create_address(self.user, alias='Casa', is_default=True)
        response = self.client.post(
            '/api/v1/addresses/', {**self.payload, 'alias': 'Nueva', 'is_default': True}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_default'])
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertEqual(Address.objects.filter(user=self.user, is_default=True).count(), 1)

    def test_update_with_default_flag_replaces_previous(self):
        first = TestDataFactory.create_address(self.user, alias='Casa', is_default=True)
        second = TestDataFactory.create_address(self.user, alias='Oficina')
        response = self.client.patch(f'/api/v1/addresses/{second.id}/', {'is_default': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_default'])
        first.refresh_from_db()
        self.assertFalse(first.is_default)

        response = self.client.patch(f'/api/v1/addresses/{second.id}/', {'city': 'Saltillo'}, format='json')
        self.assertTrue(response.data['is_default'])

    def test_list_only_own_addresses(self):
        TestDataFactory.create_address(self.user)
        TestDataFactory.create_address(TestDataFactory.create_user())
        response = self.client.get('/api/v1/addresses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)


class BillingAPITests(TestCase):
    """Test owner-scoped billing endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_billing_info(self):
        response = self.client.post('/api/v1/billing/', {
            'rfc': 'xaxx010101000',
            'razon_social': 'Cliente',
            'regimen_fiscal': '601',
            'uso_cfdi': 'G03',
            'postal_code': '64000'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rfc'], 'XAXX010101000')
        self.assertTrue(response.data['is_default'])

    def test_billing_required_fields(self):
        response = self.client.post('/api/v1/billing/', {'rfc': 'XAXX010101000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('razon_social', 'regimen_fiscal', 'uso_cfdi', 'postal_code'):
            self.assertIn(field, response.data)

    def test_default_billing(self):
        response = self.client.get('/api/v1/billing/default/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        TestDataFactory.create_billing_info(self.user, is_default=True)
        other = TestDataFactory.create_billing_info(self.user, rfc='AAA010101AAA')
        response = self.client.post(f'/api/v1/billing/{other.id}/default/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get('/api/v1/billing/default/')
        self.assertEqual(response.data['rfc'], 'AAA010101AAA')
        self.assertEqual(BillingInfo.objects.filter(user=self.user, is_default=True).count(), 1)

    def test_default_flag_on_create_and_update(self):
        first = TestDataFactory.create_billing_info(self.user, is_default=True)
        response = self.client.post('/api/v1/billing/', {
            'rfc': 'AAA010101AAA',
            'razon_social': 'Otra Razón',
            'regimen_fiscal': '601',
            'uso_cfdi': 'G03',
            'postal_code': '64000',
            'is_default': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_default'])
        first.refresh_from_db()
        self.assertFalse(first.is_default)

        response = self.client.patch(f'/api/v1/billing/{first.id}/', {'is_default': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_default'])
        self.assertEqual(BillingInfo.objects.filter(user=self.user, is_default=True).get().id, first.id)

    def test_other_users_billing_is_not_found(self):
        info = TestDataFactory.create_billing_info(TestDataFactory.create_user())
        response = self.client.get(f'/api/v1/billing/{info.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CustomerRequestAPITests(TestCase):
    """Test the public request form and its back-office follow-up"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.employee = TestDataFactory.create_employee()

    def test_public_create(self):
        response = self.client.post('/api/v1/customer-requests/', {
            'full_name': '  Juan Pérez ',
            'request_type': 'mayoreo',
            'email': 'Juan@Correo.MX',
            'status': 'atendida'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['full_name'], 'Juan Pérez')
        self.assertEqual(response.data['email'], 'juan@correo.mx')
        self.assertEqual(response.data['status'], 'pendiente')

    def test_public_create_requires_name_and_type(self):
        response = self.client.post('/api/v1/customer-requests/', {'message': 'hola'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('full_name', response.data)
        self.assertIn('request_type', response.data)

    def test_list_requires_staff(self):
        response = self.client.get('/api/v1/customer-requests/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/customer-requests/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters_and_default_limit(self):
        TestDataFactory.create_customer_request(full_name='Ana', status='vista')
        TestDataFactory.create_customer_request(full_name='Beto')
        self.client.authenticate_user(self.employee)
        response = self.client.get('/api/v1/customer-requests/?status=vista&limit=1000')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['limit'], 20)
        self.assertEqual(response.data['results'][0]['full_name'], 'Ana')

    def test_list_non_numeric_employee_filter(self):
        self.client.authenticate_user(self.employee)
        response = self.client.get('/api/v1/customer-requests/?employee=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_attended_at_stamped_once(self):
        request_obj = TestDataFactory.create_customer_request()
        self.client.authenticate_user(self.employee)
        response = self.client.patch(f'/api/v1/customer-requests/{request_obj.id}/', {
            'status': 'atendida',
            'agreement': ' Cliente mayorista ',
            'employee': self.employee.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['agreement'], 'Cliente mayorista')
        request_obj.refresh_from_db()
        first_stamp = request_obj.attended_at
        self.assertIsNotNone(first_stamp)

        self.client.patch(f'/api/v1/customer-requests/{request_obj.id}/', {'status': 'vista'}, format='json')
        self.client.patch(f'/api/v1/customer-requests/{request_obj.id}/', {'status': 'atendida'}, format='json')
        request_obj.refresh_from_db()
        self.assertEqual(request_obj.attended_at, first_stamp)

    def test_invalid_status_rejected(self):
        request_obj = TestDataFactory.create_customer_request()
        self.client.authenticate_user(self.employee)
        response = self.client.patch(f'/api/v1/customer-requests/{request_obj.id}/', {'status': 'cerrada'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data)

    def test_delete_request(self):
        request_obj = TestDataFactory.create_customer_request()
        self.client.authenticate_user(self.employee)
        response = self.client.delete(f'/api/v1/customer-requests/{request_obj.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CustomerRequest.objects.filter(pk=request_obj.id).exists())
