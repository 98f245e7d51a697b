from django.db import models
from django.conf import settings


class Notification(models.Model):
    """In-app notifications shown to a user"""
    TYPE_CHOICES = [
        ('order_created', 'Pedido creado'),
        ('order_updated', 'Pedido actualizado'),
        ('order_shipped', 'Pedido enviado'),
        ('order_delivered', 'Pedido entregado'),
        ('order_cancelled', 'Pedido cancelado'),
        ('invoice_ready', 'Factura disponible'),
        ('general', 'General'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default='general')
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user_id}: {self.title}"

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='idx_notification_user_read'),
        ]
