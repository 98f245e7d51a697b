"""
Test suite for Reports module
Tests: sales report totals, invoice counters, daily breakdown, top tires
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class SalesReportTests(TestCase):
    """Test the sales report endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_employee())
        customer = TestDataFactory.create_user()
        TestDataFactory.create_order(
            customer, status='entregado', items=[('GY-1', 4, '1000.00')], requires_invoice=True
        )
        invoiced = TestDataFactory.create_order(
            customer, status='entregado', items=[('GY-1', 2, '1000.00'), ('MI-1', 1, '500.00')],
            requires_invoice=True
        )
        invoiced.invoice_pdf_path = 'invoices/1/factura.pdf'
        invoiced.save()
        TestDataFactory.create_order(customer, status='solicitado', items=[('MI-1', 10, '500.00')])

    def test_summary_counts_delivered_orders_only(self):
        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['summary']
        self.assertEqual(summary['orders'], 2)
        self.assertEqual(summary['subtotal'], Decimal('6500.00'))
        self.assertEqual(summary['iva'], Decimal('1040.00'))
        self.assertEqual(summary['total'], Decimal('7540.00'))
        self.assertEqual(summary['average_order_value'], Decimal('3770.00'))

    def test_invoice_counters(self):
        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.data['invoices'], {'requiring_invoice': 2, 'invoiced': 1, 'pending': 1})

    def test_daily_breakdown_and_top_tires(self):
        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(len(response.data['daily_sales']), 1)
        self.assertEqual(response.data['daily_sales'][0]['count'], 2)
        self.assertEqual(response.data['daily_sales'][0]['total'], Decimal('7540.00'))

        top = response.data['top_tires']
        self.assertEqual([t['sku'] for t in top], ['GY-1', 'MI-1'])
        self.assertEqual(top[0]['quantity'], 6)
        self.assertEqual(top[0]['revenue'], Decimal('6000.00'))

    def test_date_range_without_orders(self):
        response = self.client.get('/api/v1/reports/sales/?date_from=2020-01-01&date_to=2020-01-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['period'], {'from': '2020-01-01', 'to': '2020-01-31'})
        self.assertEqual(response.data['summary']['orders'], 0)
        self.assertEqual(response.data['summary']['total'], Decimal('0.00'))
        self.assertEqual(response.data['top_tires'], [])

    def test_invalid_dates(self):
        response = self.client.get('/api/v1/reports/sales/?date_from=01-01-2024')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

        response = self.client.get('/api/v1/reports/sales/?date_from=2024-02-01&date_to=2024-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/reports/sales/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
