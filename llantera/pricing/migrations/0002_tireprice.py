# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('pricing', '0001_initial'),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TirePrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('column', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prices', to='pricing.pricecolumn')),
                ('tire', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prices', to='catalog.tire')),
            ],
            options={
                'db_table': 'tire_prices',
                'unique_together': {('tire', 'column')},
                'indexes': [
                    models.Index(fields=['column', 'tire'], name='idx_tire_price_column'),
                ],
            },
        ),
    ]
