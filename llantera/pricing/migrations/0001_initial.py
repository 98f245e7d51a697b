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
            name='PriceColumn',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('display_order', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('is_public', models.BooleanField(default=False)),
                ('mode', models.CharField(choices=[('fixed', 'Fijo'), ('derived', 'Derivado')], default='fixed', max_length=20)),
                ('operation', models.CharField(choices=[('add', 'Sumar'), ('subtract', 'Restar'), ('multiply', 'Multiplicar'), ('percent', 'Porcentaje de descuento')], default='percent', max_length=20)),
                ('amount', models.DecimalField(blank=True, decimal_places=4, max_digits=10, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('base', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='derived_columns', to='pricing.pricecolumn')),
            ],
            options={
                'db_table': 'price_columns',
                'ordering': ['display_order', 'code'],
            },
        ),
        migrations.CreateModel(
            name='PriceLevel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('discount_percentage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('can_view_offers', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('price_column', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='levels', to='pricing.pricecolumn')),
                ('reference_column', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reference_levels', to='pricing.pricecolumn')),
            ],
            options={
                'db_table': 'price_levels',
                'ordering': ['code'],
            },
        ),
    ]
