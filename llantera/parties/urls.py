from django.urls import path
from .views import (
    company_list_create, company_detail,
    address_list_create, address_detail, address_set_default,
    billing_list_create, billing_default, billing_detail, billing_set_default,
    customer_request_list_create, customer_request_detail,
)

urlpatterns = [
    # Company endpoints
    path('companies/', company_list_create, name='company-list-create'),
    path('companies/<int:pk>/', company_detail, name='company-detail'),

    # Address endpoints
    path('addresses/', address_list_create, name='address-list-create'),
    path('addresses/<int:pk>/', address_detail, name='address-detail'),
    path('addresses/<int:pk>/default/', address_set_default, name='address-set-default'),

    # Billing endpoints
    path('billing/', billing_list_create, name='billing-list-create'),
    path('billing/default/', billing_default, name='billing-default'),
    path('billing/<int:pk>/', billing_detail, name='billing-detail'),
    path('billing/<int:pk>/default/', billing_set_default, name='billing-set-default'),

    # CustomerRequest endpoints
    path('customer-requests/', customer_request_list_create, name='customer-request-list-create'),
    path('customer-requests/<int:pk>/', customer_request_detail, name='customer-request-detail'),
]
