from django.db import models
from django.conf import settings


class Company(models.Model):
    """Business customers that users can belong to"""
    key_name = models.CharField(max_length=200)
    social_reason = models.CharField(max_length=255)
    rfc = models.CharField(max_length=13, blank=True)
    address = models.TextField(blank=True)
    emails = models.JSONField(default=list, blank=True)
    phones = models.JSONField(default=list, blank=True)
    main_contact = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key_name

    class Meta:
        db_table = 'companies'
        ordering = ['key_name']


class Address(models.Model):
    """Shipping addresses of a customer"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='addresses')
    alias = models.CharField(max_length=100, default='Principal')
    street = models.CharField(max_length=255)
    exterior_number = models.CharField(max_length=50)
    interior_number = models.CharField(max_length=50, blank=True)
    neighborhood = models.CharField(max_length=150)
    postal_code = models.CharField(max_length=5)
    city = models.CharField(max_length=150)
    state = models.CharField(max_length=150)
    reference = models.TextField(blank=True)
    phone = models.CharField(max_length=10)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.alias} - {self.street} {self.exterior_number}"

    class Meta:
        db_table = 'addresses'
        ordering = ['-is_default', '-created_at']


class BillingInfo(models.Model):
    """Fiscal data used to issue invoices (CFDI)"""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='billing_infos')
    rfc = models.CharField(max_length=13)
    razon_social = models.CharField(max_length=255)
    regimen_fiscal = models.CharField(max_length=10)
    uso_cfdi = models.CharField(max_length=10)
    postal_code = models.CharField(max_length=5)
    email = models.EmailField(blank=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.rfc} - {self.razon_social}"

    class Meta:
        db_table = 'billing_info'
        ordering = ['-is_default', '-created_at']


class CustomerRequest(models.Model):
    """Requests from prospects who want to become customers"""
    STATUS_CHOICES = [
        ('pendiente', 'Pendiente'),
        ('vista', 'Vista'),
        ('atendida', 'Atendida'),
    ]

    full_name = models.CharField(max_length=200)
    request_type = models.CharField(max_length=100)
    message = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    contact_preference = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pendiente')
    employee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='attended_requests')
    agreement = models.TextField(blank=True)
    attended_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.full_name} ({self.get_status_display()})"

    class Meta:
        db_table = 'customer_requests'
        ordering = ['-created_at']
