from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Users log in with their email address"""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        email = self.normalize_email(email).strip().lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', 'admin')
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Customer, employee or administrator account"""
    ROLE_CHOICES = [
        ('admin', 'Administrador'),
        ('customer', 'Cliente'),
        ('employee', 'Empleado'),
    ]

    LEVEL_CHOICES = [
        ('public', 'Público'),
        ('empresa', 'Empresa'),
        ('distribuidor', 'Distribuidor'),
        ('mayorista', 'Mayorista'),
        ('silver', 'Silver'),
        ('gold', 'Gold'),
        ('platinum', 'Platinum'),
    ]

    username = None
    last_name = None
    email = models.EmailField(unique=True)
    first_last_name = models.CharField(max_length=150, blank=True)
    second_last_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address_street = models.CharField(max_length=255, blank=True)
    address_number = models.CharField(max_length=50, blank=True)
    address_neighborhood = models.CharField(max_length=150, blank=True)
    address_postal_code = models.CharField(max_length=10, blank=True)
    job_title = models.CharField(max_length=150, blank=True)
    profile_image_url = models.CharField(max_length=500, blank=True)
    company = models.ForeignKey('parties.Company', on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='customer')
    level = models.CharField(max_length=20, choices=LEVEL_CHOICES, default='public')
    price_level = models.ForeignKey('pricing.PriceLevel', on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    @property
    def full_name(self):
        parts = [self.first_name, self.first_last_name, self.second_last_name]
        name = ' '.join(p.strip() for p in parts if p and p.strip())
        return name or self.email

    def get_full_name(self):
        return self.full_name

    def get_short_name(self):
        return self.first_name or self.email

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        # Employees never buy at a special level
        if self.role == 'employee':
            self.level = 'public'
            self.price_level = None
        super().save(*args, **kwargs)

    def __str__(self):
        return self.email

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('stock_adjust', 'Stock Adjustment'),
        ('price_change', 'Price Change'),
        ('column_delete', 'Price Column Deleted'),
        ('level_transfer', 'Price Level Users Transferred'),
        ('order_create', 'Order Created'),
        ('order_status', 'Order Status Changed'),
        ('invoice_upload', 'Invoice Uploaded'),
        ('catalog_import', 'Catalog Import'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., tire SKU, order number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number, price column code)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_idx'),
            models.Index(fields=['action'], name='audit_logs_action_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_objref_idx'),
        ]
