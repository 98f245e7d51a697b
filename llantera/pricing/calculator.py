"""
Price evaluator for derived price columns.

``percent`` is a discount: an amount of 10 yields 90% of the base price.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

TWO_PLACES = Decimal('0.01')

OPERATIONS = ('add', 'subtract', 'multiply', 'percent')

# Columns used when a level code has no PriceLevel row
STATIC_LEVEL_COLUMNS = {
    'empresa': ('empresa', 'lista'),
    'distribuidor': ('mayoreo', 'lista'),
    'mayorista': ('mayoreo_6', 'lista'),
}
DEFAULT_PRICE_CODE = 'lista'


def to_decimal(value, default=Decimal('0')):
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def round_price(value):
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def apply_price_calculation(base, operation, amount):
    """Apply a column operation to a base price; unknown operations return the base"""
    base = to_decimal(base)
    amount = to_decimal(amount)
    op = (operation or '').strip().lower()
    if op == 'add':
        result = base + amount
    elif op == 'subtract':
        result = base - amount
    elif op == 'multiply':
        result = base * amount
    elif op == 'percent':
        result = base * (Decimal('1') - amount / Decimal('100'))
    else:
        result = base
    return round_price(result)


def static_level_columns(level):
    """(main code, reference code) for a level without a configured PriceLevel"""
    key = (level or '').strip().lower()
    return STATIC_LEVEL_COLUMNS.get(key, (DEFAULT_PRICE_CODE, None))
