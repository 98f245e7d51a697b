# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Cart',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='cart', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'carts',
            },
        ),
        migrations.CreateModel(
            name='CartItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tire_sku', models.CharField(max_length=100)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cart', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.cart')),
            ],
            options={
                'db_table': 'cart_items',
                'ordering': ['id'],
                'unique_together': {('cart', 'tire_sku')},
            },
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_number', models.CharField(max_length=100, unique=True)),
                ('status', models.CharField(choices=[('solicitado', 'Solicitado'), ('preparando', 'Preparando'), ('enviado', 'Enviado'), ('entregado', 'Entregado'), ('cancelado', 'Cancelado')], db_index=True, default='solicitado', max_length=20)),
                ('payment_method', models.CharField(choices=[('transferencia', 'Transferencia'), ('tarjeta', 'Tarjeta'), ('efectivo', 'Efectivo')], max_length=20)),
                ('payment_mode', models.CharField(choices=[('contado', 'Contado'), ('credito', 'Crédito'), ('parcialidades', 'Parcialidades'), ('anticipo', 'Anticipo')], default='contado', max_length=20)),
                ('payment_installments', models.PositiveIntegerField(blank=True, null=True)),
                ('payment_notes', models.TextField(blank=True)),
                ('shipping_street', models.CharField(blank=True, max_length=255)),
                ('shipping_exterior_number', models.CharField(blank=True, max_length=50)),
                ('shipping_interior_number', models.CharField(blank=True, max_length=50)),
                ('shipping_neighborhood', models.CharField(blank=True, max_length=150)),
                ('shipping_postal_code', models.CharField(blank=True, max_length=5)),
                ('shipping_city', models.CharField(blank=True, max_length=150)),
                ('shipping_state', models.CharField(blank=True, max_length=150)),
                ('shipping_reference', models.TextField(blank=True)),
                ('shipping_phone', models.CharField(blank=True, max_length=20)),
                ('requires_invoice', models.BooleanField(default=False)),
                ('billing_rfc', models.CharField(blank=True, max_length=13)),
                ('billing_razon_social', models.CharField(blank=True, max_length=255)),
                ('billing_regimen_fiscal', models.CharField(blank=True, max_length=10)),
                ('billing_uso_cfdi', models.CharField(blank=True, max_length=10)),
                ('billing_postal_code', models.CharField(blank=True, max_length=5)),
                ('billing_email', models.EmailField(blank=True, max_length=254)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('iva', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('shipping_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('invoice_xml_path', models.CharField(blank=True, max_length=500)),
                ('invoice_pdf_path', models.CharField(blank=True, max_length=500)),
                ('customer_notes', models.TextField(blank=True)),
                ('admin_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shipped_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'orders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='idx_order_user_created'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tire_sku', models.CharField(max_length=100)),
                ('tire_measure', models.CharField(blank=True, max_length=255)),
                ('tire_brand', models.CharField(blank=True, max_length=200)),
                ('tire_model', models.CharField(blank=True, max_length=200)),
                ('quantity', models.PositiveIntegerField()),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=12)),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=12)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
            ],
            options={
                'db_table': 'order_items',
                'ordering': ['id'],
            },
        ),
    ]
