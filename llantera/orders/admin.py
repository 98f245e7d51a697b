from django.contrib import admin
from .models import Cart, CartItem, Order, OrderItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    readonly_fields = ['tire_sku', 'quantity', 'created_at']


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['user', 'created_at', 'updated_at']
    search_fields = ['user__email']
    ordering = ['-updated_at']
    inlines = [CartItemInline]
    readonly_fields = ['created_at', 'updated_at']


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['tire_sku', 'tire_measure', 'tire_brand', 'tire_model', 'quantity', 'unit_price', 'subtotal']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'user', 'status', 'payment_method', 'requires_invoice', 'total', 'created_at']
    list_filter = ['status', 'payment_method', 'payment_mode', 'requires_invoice', 'created_at']
    search_fields = ['order_number', 'user__email', 'billing_rfc']
    ordering = ['-created_at']
    inlines = [OrderItemInline]
    readonly_fields = ['order_number', 'created_at', 'updated_at', 'shipped_at', 'delivered_at', 'cancelled_at']
