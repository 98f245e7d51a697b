# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('parties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Address',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('alias', models.CharField(default='Principal', max_length=100)),
                ('street', models.CharField(max_length=255)),
                ('exterior_number', models.CharField(max_length=50)),
                ('interior_number', models.CharField(blank=True, max_length=50)),
                ('neighborhood', models.CharField(max_length=150)),
                ('postal_code', models.CharField(max_length=5)),
                ('city', models.CharField(max_length=150)),
                ('state', models.CharField(max_length=150)),
                ('reference', models.TextField(blank=True)),
                ('phone', models.CharField(max_length=10)),
                ('is_default', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='addresses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'addresses',
                'ordering': ['-is_default', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='BillingInfo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rfc', models.CharField(max_length=13)),
                ('razon_social', models.CharField(max_length=255)),
                ('regimen_fiscal', models.CharField(max_length=10)),
                ('uso_cfdi', models.CharField(max_length=10)),
                ('postal_code', models.CharField(max_length=5)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('is_default', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='billing_infos', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'billing_info',
                'ordering': ['-is_default', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='CustomerRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=200)),
                ('request_type', models.CharField(max_length=100)),
                ('message', models.TextField(blank=True)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('contact_preference', models.CharField(blank=True, max_length=50)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('status', models.CharField(choices=[('pendiente', 'Pendiente'), ('vista', 'Vista'), ('atendida', 'Atendida')], default='pendiente', max_length=20)),
                ('agreement', models.TextField(blank=True)),
                ('attended_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='attended_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'customer_requests',
                'ordering': ['-created_at'],
            },
        ),
    ]
