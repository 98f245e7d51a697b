"""
Management command to import the legacy inventory sheet (semicolon separated)
"""
import csv
import os
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from llantera.catalog import services
from llantera.catalog.utils import (
    parse_measurement, normalize_brand, normalize_type, default_construction,
    extract_first_number, clean_model, parse_int, parse_decimal, parse_price
)
from llantera.core.cache_signals import suspend_cache_signals
from llantera.core.exceptions import ServiceValidationError
from llantera.inventory import services as inventory_services
from llantera.pricing.services import recalculate_all_derived

MIN_COLUMNS = 17
DEFAULT_MIN_STOCK = 4

# Sheet column -> price column code
# 0 CODIGO; 1 MEDIDA; 2 CANT; 3 MAY -6%; 4 MAY -3%; 5 MAYOREO; 6 EMPRESA; 7 P.LISTA; 8 P.LIST -10; 9 EFEC
PRICE_COLUMNS = [
    ('mayoreo_6', 3),
    ('mayoreo_3', 4),
    ('mayoreo', 5),
    ('empresa', 6),
    ('lista', 7),
    ('lista_10', 8),
    ('efectivo', 9),
]


def tire_data_from_row(row):
    """Tire fields for one sheet row. Raises ValueError for unusable rows"""
    if len(row) < MIN_COLUMNS:
        raise ValueError(f'fila incompleta: se esperaban al menos {MIN_COLUMNS} columnas, llegaron {len(row)}')

    sku = row[0].strip()
    if not sku:
        raise ValueError('sku vacío')
    measure = row[1].strip()
    if not measure:
        raise ValueError(f'medida vacía para sku {sku}')

    parsed = parse_measurement(measure)
    model = clean_model(parsed['remainder']) or measure

    alias = row[13].strip()
    usage_code = row[16].strip().upper() or row[15].strip().upper()

    width = parsed['width'] or parse_int(extract_first_number(measure))
    if not width:
        raise ValueError(f'no se pudo determinar el ancho para sku {sku}')
    rim = parsed['rim'] or parse_decimal(row[15])
    if not rim:
        raise ValueError(f'no se pudo determinar el rin para sku {sku}')

    public_price = parse_price(row[7]) or parse_price(row[8]) or parse_price(row[9])

    return {
        'sku': sku,
        'brand_name': normalize_brand(alias, model),
        'brand_alias': alias.upper(),
        'model': model,
        'width': width,
        'profile': parsed['profile'],
        'rim': rim,
        'construction': default_construction(parsed['construction'], measure),
        'tube_type': parsed['tube_type'],
        'ply_rating': parsed['ply_rating'],
        'load_index': parsed['load_index'],
        'speed_index': parsed['speed_index'],
        'tire_type_name': normalize_type(row[14], model),
        'usage_code': usage_code,
        'description': f'{measure} {model}'.strip(),
        'public_price': public_price,
        'original_measure': measure,
    }


def prices_from_row(row):
    prices = {}
    for code, index in PRICE_COLUMNS:
        if index >= len(row):
            continue
        value = parse_price(row[index])
        if value > 0:
            prices[code] = value
    return prices


class Command(BaseCommand):
    help = "Imports tires, stock and prices from the semicolon separated inventory sheet"

    def add_arguments(self, parser):
        parser.add_argument('csv_file', type=str, help='Path to the inventory CSV file')
        parser.add_argument(
            '--encoding',
            type=str,
            default='utf-8-sig',
            help='File encoding (default: utf-8-sig)',
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("IMPORTING INVENTORY FROM CSV"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"CSV File: {csv_file}")

        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found at {csv_file}")

        created_count = 0
        updated_count = 0
        error_count = 0

        with open(csv_file, 'r', encoding=options['encoding'], newline='') as f:
            reader = csv.reader(f, delimiter=';', skipinitialspace=True)
            if next(reader, None) is None:
                raise CommandError(f"El archivo {csv_file} no contiene datos")

            with suspend_cache_signals():
                for line, row in enumerate(reader, start=2):
                    if not row or not any(cell.strip() for cell in row):
                        continue
                    try:
                        with transaction.atomic():
                            data = tire_data_from_row(row)
                            tire, created = services.upsert_tire(data)
                            inventory_services.set_stock(
                                tire, quantity=max(parse_int(row[2]), 0), min_stock=DEFAULT_MIN_STOCK
                            )
                            services.write_prices(tire, prices_from_row(row), sync_public_price=False)
                    except (ValueError, ServiceValidationError) as e:
                        error_count += 1
                        self.stdout.write(self.style.ERROR(f"  ✗ Fila {line}: {e}"))
                        continue

                    if created:
                        created_count += 1
                        self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {tire.sku} {tire.original_measure}"))
                    else:
                        updated_count += 1

                recalculated = recalculate_all_derived()

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Tires Created: {created_count}")
        self.stdout.write(f"Tires Updated: {updated_count}")
        self.stdout.write(f"Derived Prices Recalculated: {recalculated}")
        if error_count > 0:
            self.stdout.write(self.style.ERROR(f"Rows with Errors: {error_count}"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
