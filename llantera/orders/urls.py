from django.urls import path
from .views import (
    cart_detail, cart_item_add, cart_item_detail,
    order_list_create, order_detail, order_cancel,
    admin_order_list, admin_order_detail, admin_order_status, admin_order_invoice
)

urlpatterns = [
    # Cart endpoints
    path('cart/', cart_detail, name='cart-detail'),
    path('cart/items/', cart_item_add, name='cart-item-add'),
    path('cart/items/<str:sku>/', cart_item_detail, name='cart-item-detail'),

    # Customer order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/cancel/', order_cancel, name='order-cancel'),

    # Admin order endpoints
    path('admin/orders/', admin_order_list, name='admin-order-list'),
    path('admin/orders/<int:pk>/', admin_order_detail, name='admin-order-detail'),
    path('admin/orders/<int:pk>/status/', admin_order_status, name='admin-order-status'),
    path('admin/orders/<int:pk>/invoice/', admin_order_invoice, name='admin-order-invoice'),
]
