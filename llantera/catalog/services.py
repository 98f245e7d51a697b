"""
Tire catalog operations: brand and type resolution, tire upserts, the priced
public catalog, the admin view and the CSV import/export layout.
"""
import csv
import io
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import DecimalField, OuterRef, Subquery
from django.db.models.functions import Coalesce

from llantera.core.cache_signals import suspend_cache_signals
from llantera.core.cache_utils import (
    get_cached_catalog, cache_catalog, CATALOG_LIST_PREFIX, CATALOG_ITEM_PREFIX, CATALOG_ITEM_CACHE_TTL
)
from llantera.core.exceptions import ServiceValidationError, ConflictError, NotFoundError
from llantera.core.utils import parse_limit, parse_offset
from llantera.inventory import services as inventory_services
from llantera.pricing import services as pricing_services
from llantera.pricing.models import PriceColumn, TirePrice
from .filters import TireFilter
from .models import Brand, BrandAlias, TireType, Tire
from .utils import (
    DEFAULT_BRAND, parse_int, parse_decimal, parse_price, build_original_measure
)

logger = logging.getLogger(__name__)

CATALOG_DEFAULT_LIMIT = 50
CATALOG_MAX_LIMIT = 10000

SORT_FIELDS = {
    'sku': 'sku',
    'model': 'model',
    'price': 'level_price',
    'created': 'created_at',
}

EXPORT_HEADER = [
    'sku', 'marca', 'modelo', 'ancho', 'perfil', 'construccion', 'rin', 'tipo_tubo',
    'calificacion_capas', 'indice_carga', 'indice_velocidad', 'uso', 'cantidad',
    'stock_minimo', 'precio_publico',
]
EXPORT_TRAILER = ['descripcion', 'url_imagen']

# Import column -> Tire field for plain text values
IMPORT_TEXT_FIELDS = {
    'modelo': 'model',
    'construccion': 'construction',
    'tipo_tubo': 'tube_type',
    'calificacion_capas': 'ply_rating',
    'indice_carga': 'load_index',
    'indice_velocidad': 'speed_index',
    'uso': 'usage_code',
    'descripcion': 'description',
    'url_imagen': 'image_url',
}


# Brands and types

def resolve_brand(name, alias=''):
    """
    Brand for a name/alias pair: by alias first, then by name, otherwise a
    new brand registered under both.
    """
    alias_clean = (alias or '').strip().upper()
    if alias_clean:
        brand_alias = BrandAlias.objects.select_related('brand').filter(alias=alias_clean).first()
        if brand_alias:
            return brand_alias.brand

    cleaned_name = (name or '').strip()
    if not cleaned_name:
        cleaned_name = alias_clean or DEFAULT_BRAND

    brand = Brand.objects.filter(name__iexact=cleaned_name).first()
    if brand:
        return brand

    brand = Brand.objects.create(name=cleaned_name)
    for value in {alias_clean, cleaned_name.upper()} - {''}:
        BrandAlias.objects.get_or_create(brand=brand, alias=value)
    logger.info(f"Created brand {brand.name}")
    return brand


def resolve_type(name):
    cleaned = (name or '').strip()
    if not cleaned:
        return None
    tire_type = TireType.objects.filter(name__iexact=cleaned).first()
    if tire_type is None:
        tire_type = TireType.objects.create(name=cleaned)
    return tire_type


def set_brand_aliases(brand, aliases):
    """Replace the aliases of a brand with a cleaned, uppercase, deduplicated list"""
    cleaned = []
    for alias in aliases or []:
        value = (alias or '').strip().upper()
        if value and value not in cleaned:
            cleaned.append(value)
    brand.aliases.exclude(alias__in=cleaned).delete()
    for value in cleaned:
        BrandAlias.objects.get_or_create(brand=brand, alias=value)
    return cleaned


def delete_brand(brand):
    if brand.tires.exists():
        raise ConflictError(f"La marca '{brand.name}' tiene llantas asociadas y no se puede eliminar")
    brand.delete()


# Tires

def get_tire(sku):
    tire = Tire.objects.select_related('brand', 'tire_type').filter(sku__iexact=(sku or '').strip()).first()
    if tire is None:
        raise NotFoundError('Llanta no encontrada')
    return tire


@transaction.atomic
def upsert_tire(data, tire=None):
    """
    Create or update a tire from already validated field values.

    ``data`` uses model field names plus ``brand_name``/``brand_alias`` and
    ``tire_type_name``; keys that are absent leave the current value alone.
    Returns (tire, created).
    """
    sku = (data.get('sku') or (tire.sku if tire else '')).strip()
    if not sku:
        raise ServiceValidationError('El SKU es obligatorio')

    if tire is None:
        tire = Tire.objects.filter(sku__iexact=sku).first()
    created = tire is None
    if created:
        tire = Tire(sku=sku)

    if created or 'brand_name' in data or 'brand_alias' in data:
        tire.brand = resolve_brand(data.get('brand_name', ''), data.get('brand_alias', ''))
    if 'tire_type_name' in data:
        tire.tire_type = resolve_type(data.get('tire_type_name'))

    for field in ('model', 'description', 'image_url', 'original_measure', 'ply_rating', 'load_index'):
        if field in data:
            setattr(tire, field, (data.get(field) or '').strip())
    for field in ('construction', 'tube_type', 'speed_index', 'usage_code'):
        if field in data:
            setattr(tire, field, (data.get(field) or '').strip().upper())
    if tire.construction not in ('R', 'D'):
        tire.construction = ''

    if 'width' in data:
        tire.width = parse_int(data.get('width'))
    if 'profile' in data:
        profile = data.get('profile')
        tire.profile = parse_int(profile) or None
    if 'rim' in data:
        tire.rim = parse_decimal(data.get('rim'))
    if 'public_price' in data:
        tire.public_price = parse_decimal(data.get('public_price'))

    if not tire.original_measure:
        tire.original_measure = build_original_measure(
            tire.width, tire.profile, tire.rim, tire.construction, tire.ply_rating,
            tire.usage_code, tire.load_index, tire.speed_index, tire.model
        )

    tire.save()
    if created:
        pricing_services.initialize_tire_prices(tire)
        logger.info(f"Created tire {tire.sku}")
    return tire, created


def delete_tire(tire):
    tire.delete()
    logger.info(f"Deleted tire {tire.sku}")


# Listings

def _ordered(queryset, sort):
    sort = (sort or '').strip()
    descending = sort.startswith('-')
    field = SORT_FIELDS.get(sort.lstrip('-'))
    if field is None:
        return queryset.order_by('-created_at', '-id')
    prefix = '-' if descending else ''
    return queryset.order_by(f'{prefix}{field}', f'{prefix}id')


def _price_map(tire_ids, codes):
    """{tire_id: {code: price}} for the given columns"""
    prices = {}
    rows = TirePrice.objects.filter(tire_id__in=tire_ids, column__code__in=codes).values_list(
        'tire_id', 'column__code', 'price'
    )
    for tire_id, code, price in rows:
        prices.setdefault(tire_id, {})[code] = price
    return prices


def serialize_tire(tire):
    from .serializers import TireSerializer
    return dict(TireSerializer(tire).data)


def _stock_of(tire):
    inventory = getattr(tire, 'inventory', None)
    return inventory.quantity if inventory else None


def build_catalog_items(tires, level):
    """Catalog rows for a list of tires priced at ``level``"""
    main_code, ref_code = pricing_services.resolve_level_columns(level)
    codes = [c for c in (main_code, ref_code) if c]
    prices = _price_map([t.id for t in tires], codes)

    items = []
    for tire in tires:
        tire_prices = prices.get(tire.id, {})
        price = tire_prices.get(main_code)
        if price is None:
            price = tire.public_price if tire.public_price and tire.public_price > 0 else Decimal('0.00')
        reference_price = tire_prices.get(ref_code) if ref_code else None
        items.append({
            'tire': serialize_tire(tire),
            'brand_name': tire.brand.name,
            'price': price,
            'price_code': main_code,
            'reference_price': reference_price,
            'reference_code': ref_code if reference_price is not None else None,
            'stock': _stock_of(tire),
        })
    return items


def _tire_queryset():
    return Tire.objects.select_related('brand', 'tire_type', 'inventory')


def list_catalog(params, level):
    """
    Filtered, sorted and paginated public catalog priced for ``level``.
    Cached per (filters, level); the cache is dropped when catalog data changes.
    """
    cache_params = {key: params.get(key, '') for key in sorted(params.keys())}
    cache_params['__level'] = level
    try:
        cached_data, cache_key = get_cached_catalog(CATALOG_LIST_PREFIX, cache_params)
        if cached_data is not None:
            logger.debug(f"Catalog cache HIT (level: {level})")
            return cached_data
    except Exception as e:
        logger.warning(f"Cache unavailable, proceeding without cache: {e}")
        cache_key = None

    main_code, _ = pricing_services.resolve_level_columns(level)
    queryset = TireFilter(params, queryset=_tire_queryset()).qs
    price_subquery = TirePrice.objects.filter(tire=OuterRef('pk'), column__code=main_code).values('price')[:1]
    queryset = queryset.annotate(
        level_price=Coalesce(
            Subquery(price_subquery, output_field=DecimalField(max_digits=12, decimal_places=2)),
            'public_price',
            output_field=DecimalField(max_digits=12, decimal_places=2)
        )
    )
    queryset = _ordered(queryset, params.get('sort'))

    limit = parse_limit(params.get('limit'), CATALOG_DEFAULT_LIMIT, CATALOG_MAX_LIMIT)
    offset = parse_offset(params.get('offset'))
    total = queryset.count()
    tires = list(queryset[offset:offset + limit])

    data = {
        'results': build_catalog_items(tires, level),
        'total': total,
        'limit': limit,
        'offset': offset,
        'level': level,
    }

    if cache_key:
        try:
            cache_catalog(cache_key, data)
        except Exception as e:
            logger.warning(f"Unable to cache catalog: {e}")
    return data


def catalog_item(sku, level):
    try:
        cached_data, cache_key = get_cached_catalog(CATALOG_ITEM_PREFIX, {'sku': sku.upper(), 'level': level})
        if cached_data is not None:
            return cached_data
    except Exception as e:
        logger.warning(f"Cache unavailable, proceeding without cache: {e}")
        cache_key = None

    tire = _tire_queryset().filter(sku__iexact=sku.strip()).first()
    if tire is None:
        raise NotFoundError('Llanta no encontrada')
    data = build_catalog_items([tire], level)[0]

    if cache_key:
        try:
            cache_catalog(cache_key, data, CATALOG_ITEM_CACHE_TTL)
        except Exception as e:
            logger.warning(f"Unable to cache catalog item: {e}")
    return data


def build_admin_rows(tires):
    """Admin rows: tire, inventory, every price keyed by column code and the brand name"""
    prices = {}
    for tire_id, code, price in TirePrice.objects.filter(tire__in=[t.id for t in tires]).values_list(
        'tire_id', 'column__code', 'price'
    ):
        prices.setdefault(tire_id, {})[code] = price

    rows = []
    for tire in tires:
        inventory = getattr(tire, 'inventory', None)
        rows.append({
            'tire': serialize_tire(tire),
            'inventory': {
                'quantity': inventory.quantity,
                'reserved': inventory.reserved,
                'min_stock': inventory.min_stock,
            } if inventory else None,
            'prices': prices.get(tire.id, {}),
            'brand_name': tire.brand.name,
        })
    return rows


def admin_queryset(params):
    queryset = TireFilter(params, queryset=_tire_queryset()).qs
    sort = params.get('sort')
    if (sort or '').lstrip('-') == 'price':
        sort = sort.replace('price', 'sku')
    return _ordered(queryset, sort)


def list_admin(params):
    queryset = admin_queryset(params)
    limit = parse_limit(params.get('limit'), CATALOG_DEFAULT_LIMIT, CATALOG_MAX_LIMIT)
    offset = parse_offset(params.get('offset'))
    total = queryset.count()
    tires = list(queryset[offset:offset + limit])
    return {'results': build_admin_rows(tires), 'total': total, 'limit': limit, 'offset': offset}


def admin_view(sku):
    tire = _tire_queryset().filter(sku__iexact=(sku or '').strip()).first()
    if tire is None:
        raise NotFoundError('Llanta no encontrada')
    return build_admin_rows([tire])[0]


def write_prices(tire, prices, sync_public_price=True):
    """
    Upsert prices keyed by column code; unknown codes and null values are
    skipped. Returns the set of codes written.
    """
    columns = {c.code: c for c in PriceColumn.objects.all()}
    changed = set()
    for code, value in (prices or {}).items():
        clean = (code or '').strip().lower()
        column = columns.get(clean)
        if column is None or value is None or value == '':
            continue
        price = parse_decimal(value)
        TirePrice.objects.update_or_create(tire=tire, column=column, defaults={'price': price})
        changed.add(clean)
        # The list price is also the tire's public price
        if sync_public_price and clean == pricing_services.PROTECTED_COLUMN_CODE:
            tire.public_price = price
            tire.save(update_fields=['public_price', 'updated_at'])
    return changed


@transaction.atomic
def update_admin(sku, quantity=None, prices=None, recalculate=True):
    """
    Update stock and prices of a tire from the admin screen and return its
    admin view. Writing ``lista`` also updates the public price; derived
    columns computed from a changed code are recalculated.
    """
    tire = get_tire(sku)
    if quantity is not None:
        inventory_services.set_stock(tire, quantity=quantity)
    if prices:
        changed = write_prices(tire, prices)
        if recalculate and changed:
            pricing_services.recalculate_tire_prices(tire, changed_codes=changed)
    return admin_view(tire.sku)


# CSV export / import

def price_codes():
    return list(PriceColumn.objects.order_by('display_order', 'code').values_list('code', flat=True))


def _csv_value(value):
    if value is None:
        return ''
    if isinstance(value, Decimal):
        return format(value.normalize(), 'f') if value == value.to_integral_value() else str(value)
    return str(value)


def export_csv(params):
    """The admin listing as CSV text in the import layout"""
    codes = price_codes()
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADER + codes + EXPORT_TRAILER)

    tires = list(admin_queryset(params))
    for row in build_admin_rows(tires):
        tire = row['tire']
        inventory = row['inventory'] or {}
        writer.writerow([
            tire['sku'], row['brand_name'], tire['model'], tire['width'],
            tire['profile'] if tire['profile'] is not None else '',
            tire['construction'], _csv_value(tire['rim']), tire['tube_type'], tire['ply_rating'],
            tire['load_index'], tire['speed_index'], tire['usage_code'],
            inventory.get('quantity', 0), inventory.get('min_stock', 0), tire['public_price'],
        ] + [row['prices'].get(code, '') for code in codes] + [tire['description'], tire['image_url']])

    logger.info(f"Exported {len(tires)} tires to CSV")
    return output.getvalue()


def _import_row(row, header, codes, line):
    def has(key):
        return key in header

    def cell(key):
        return (row.get(key) or '').strip()

    sku = cell('sku')
    if not sku:
        return False

    existing = Tire.objects.filter(sku__iexact=sku).first()
    data = {'sku': existing.sku if existing else sku}

    if has('marca') and cell('marca'):
        data['brand_name'] = cell('marca')
    for column, field in IMPORT_TEXT_FIELDS.items():
        if has(column):
            data[field] = cell(column)
    if has('ancho') and cell('ancho'):
        data['width'] = parse_int(cell('ancho'))
    if has('perfil') and cell('perfil'):
        data['profile'] = parse_int(cell('perfil')) or None
    if has('rin') and cell('rin'):
        data['rim'] = parse_decimal(cell('rin'))

    prices = {}
    for code in codes:
        if not has(code) or not cell(code):
            continue
        value = parse_price(cell(code))
        if value > 0:
            prices[code] = value

    public_price = parse_price(cell('precio_publico')) if has('precio_publico') else None
    if public_price is not None and public_price > 0:
        data['public_price'] = public_price
    elif 'lista' in prices:
        data['public_price'] = prices['lista']
    elif existing is None:
        data['public_price'] = Decimal('0')

    # The measure string follows the dimension fields
    merged = {
        field: data.get(field, getattr(existing, field, None) if existing else None)
        for field in ('width', 'profile', 'rim', 'construction', 'ply_rating', 'usage_code',
                      'load_index', 'speed_index', 'model')
    }
    if parse_int(merged['width']) > 0 or parse_decimal(merged['rim'] or 0) > 0:
        data['original_measure'] = build_original_measure(
            merged['width'], merged['profile'], merged['rim'], merged['construction'],
            merged['ply_rating'] or '', merged['usage_code'] or '', merged['load_index'] or '',
            merged['speed_index'] or '', merged['model'] or ''
        )

    try:
        tire, _ = upsert_tire(data, tire=existing)
    except ServiceValidationError as e:
        raise ServiceValidationError(f'Fila {line} sku {sku}: {e.message}')

    quantity = None
    if has('cantidad') and cell('cantidad'):
        quantity = max(parse_int(cell('cantidad')), 0)
    min_stock = None
    if has('stock_minimo') and cell('stock_minimo'):
        min_stock = max(parse_int(cell('stock_minimo')), 0)
    if quantity is not None or min_stock is not None:
        inventory_services.set_stock(tire, quantity=quantity, min_stock=min_stock)
    if prices:
        write_prices(tire, prices, sync_public_price=False)
    return True


# Excel on Windows saves CSV in cp1252 unless told otherwise
UPLOAD_ENCODINGS = ('utf-8-sig', 'cp1252')


def _decode_upload(content):
    for encoding in UPLOAD_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ServiceValidationError('El archivo debe estar codificado en UTF-8')


def import_csv(content):
    """
    Upsert tires from CSV text in the export layout. Only ``sku`` is required;
    absent columns keep existing values. Returns the number of processed rows.
    """
    if isinstance(content, bytes):
        content = _decode_upload(content)
    if not content.strip():
        raise ServiceValidationError('El archivo está vacío')

    reader = csv.DictReader(io.StringIO(content))
    if not reader.fieldnames:
        raise ServiceValidationError('El archivo no contiene encabezados')
    reader.fieldnames = [(name or '').strip().lower() for name in reader.fieldnames]
    header = set(reader.fieldnames)
    if 'sku' not in header:
        raise ServiceValidationError("El archivo debe contener una columna 'sku'")

    codes = [code for code in price_codes() if code in header]
    processed = 0
    with transaction.atomic(), suspend_cache_signals():
        for line, row in enumerate(reader, start=2):
            try:
                if _import_row(row, header, codes, line):
                    processed += 1
            except ServiceValidationError:
                raise
            except Exception as e:
                logger.error(f"Import failed at row {line}: {e}", exc_info=True)
                raise ServiceValidationError(f'Fila {line}: {e}')

        # Derived columns once, for every imported tire
        pricing_services.recalculate_all_derived()

    logger.info(f"Imported {processed} tires from CSV")
    return processed
