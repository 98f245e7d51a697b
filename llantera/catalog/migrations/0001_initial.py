# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Brand',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'brands',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='TireType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'tire_types',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='BrandAlias',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('alias', models.CharField(max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('brand', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='aliases', to='catalog.brand')),
            ],
            options={
                'db_table': 'brand_aliases',
                'unique_together': {('brand', 'alias')},
            },
        ),
        migrations.CreateModel(
            name='Tire',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(db_index=True, max_length=100, unique=True)),
                ('model', models.CharField(blank=True, max_length=200)),
                ('width', models.PositiveIntegerField(default=0)),
                ('profile', models.PositiveIntegerField(blank=True, null=True)),
                ('rim', models.DecimalField(decimal_places=1, default=Decimal('0.0'), max_digits=5)),
                ('construction', models.CharField(blank=True, choices=[('R', 'Radial'), ('D', 'Diagonal')], max_length=1)),
                ('tube_type', models.CharField(blank=True, max_length=10)),
                ('ply_rating', models.CharField(blank=True, max_length=10)),
                ('load_index', models.CharField(blank=True, max_length=10)),
                ('speed_index', models.CharField(blank=True, max_length=5)),
                ('usage_code', models.CharField(blank=True, max_length=20)),
                ('description', models.TextField(blank=True)),
                ('public_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('original_measure', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('brand', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tires', to='catalog.brand')),
                ('tire_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='tires', to='catalog.tiretype')),
            ],
            options={
                'db_table': 'tires',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['brand'], name='idx_tire_brand'),
                    models.Index(fields=['width', 'profile', 'rim'], name='idx_tire_measure'),
                ],
            },
        ),
    ]
