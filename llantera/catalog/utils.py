"""
Utility functions for catalog operations

Measurement parsing, brand/type normalization and lenient number parsing used
by the CSV import and the legacy inventory command.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

METRIC_RE = re.compile(r'^(\d{3})\s*/\s*(\d{2})\s*([R-])\s*(\d{2})(.*)$', re.IGNORECASE)
MOTO_RE = re.compile(r'^(\d{2,3})\s*/\s*(\d{2,3})\s*-\s*(\d{2})(.*)$', re.IGNORECASE)
FLOTATION_RE = re.compile(r'^(\d{2,3})\s*X\s*(\d{1,2}\.\d{1,2})\s*([R-])\s*(\d{2})(.*)$', re.IGNORECASE)
AGRI_RE = re.compile(r'^(\d{1,2}\.\d)\s*([R-])\s*(\d{2})(.*)$', re.IGNORECASE)
LOAD_SPEED_RE = re.compile(r'(\d{2,3})([A-Z]{1,2})', re.IGNORECASE)
PLY_RE = re.compile(r'(\d{1,2})\s*PR', re.IGNORECASE)
TUBE_RE = re.compile(r'\b(TL|TT)\b')

INCH_MM = Decimal('25.4')

BRAND_DICTIONARY = {
    'AB': 'AB Tires',
    'AURORA': 'Aurora Tires',
    'BS': 'Bridgestone',
    'BRIDGESTONE': 'Bridgestone',
    'DAYTON': 'Dayton',
    'DOUBLE COIN': 'Double Coin',
    'FS': 'Firestone',
    'FIRESTONE': 'Firestone',
    'FUZION': 'Fuzion',
    'GDY': 'Goodyear',
    'GOODYEAR': 'Goodyear',
    'GOO': 'Goodride',
    'HAN': 'Hankook',
    'HANKOOK': 'Hankook',
    'KUM': 'Kumho',
    'KUMHO': 'Kumho',
    'LAUFENN': 'Laufenn',
    'OTR': 'OTR Tires',
    'OTRAS': 'Otras Marcas',
    'PIRELLI': 'Pirelli',
    'SUM': 'Sumitomo',
    'SUMITOMO': 'Sumitomo',
    'TOR': 'Tornel',
    'TORNEL': 'Tornel',
}

TYPE_DICTIONARY = {
    'PS': 'Pasajero',
    'PASAJERO': 'Pasajero',
    'PASAJERO RADIAL': 'Pasajero Radial (PSR)',
    'PSR': 'Pasajero Radial (PSR)',
    'LT': 'Camioneta Convencional',
    'LTS': 'Light Truck Convencional (LTS)',
    'LTR': 'Light Truck Radial (LTR)',
    'LT R': 'Light Truck Radial (LTR)',
    'LTA': 'Light Truck Radial (LTR)',
    'ST': 'Special Trailer (ST)',
    'TBR': 'Truck & Bus Radial (TBR)',
    'IND': 'Industrial Radial',
    'INDUSTRIAL': 'Industrial Radial',
    'MOTO CONVENCIONAL': 'Moto Convencional',
    'MOTO RADIAL': 'Moto Radial',
    'AGR': 'Agrícola Radial',
    'AGRICOLA': 'Agrícola Radial',
    'CAMION RADIAL': 'Camión Radial',
    'CAMION CONVENCIONAL': 'Camión Convencional',
    'CAMIONETA RADIAL': 'Camioneta Radial',
    'CAMIONETA CONVENCIONAL': 'Camioneta Convencional',
    'LLANTA TEMPORAL': 'Llanta Temporal',
}

DEFAULT_BRAND = 'Otras Marcas'
DEFAULT_TYPE = 'Otros'


def parse_int(value, default=0):
    """Lenient integer parsing ('205', ' 4 ', '4.0')"""
    try:
        return int(Decimal(str(value).strip().replace(',', '.')))
    except (InvalidOperation, ValueError, TypeError):
        return default


def parse_decimal(value, default=Decimal('0')):
    try:
        return Decimal(str(value).strip().replace(',', '.'))
    except (InvalidOperation, ValueError, TypeError):
        return default


def parse_price(raw):
    """Parse spreadsheet prices like '$1,234.50'; empty or '-' is zero"""
    cleaned = str(raw or '').replace('$', '').replace(',', '').replace(' ', '').strip()
    if cleaned in ('', '-'):
        return Decimal('0')
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal('0')


def map_construction(token):
    token = (token or '').strip().upper()
    if token in ('R', 'D'):
        return token
    return ''


def inches_to_mm(value):
    return int((parse_decimal(value) * INCH_MM).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def parse_measurement(raw):
    """
    Split a measure string into its technical fields.

    Understands metric (205/55R16), flotation (31X10.50R15, profile in mm),
    moto (90/90-18, always diagonal) and agricultural (12.4-24, width in mm)
    notations. Whatever follows the dimensions is returned as ``remainder``.
    """
    cleaned = (raw or '').strip().upper()
    data = {
        'width': 0,
        'profile': None,
        'rim': Decimal('0'),
        'construction': '',
        'tube_type': '',
        'ply_rating': '',
        'load_index': '',
        'speed_index': '',
        'remainder': cleaned,
    }

    match = METRIC_RE.match(cleaned)
    if match:
        data['width'] = parse_int(match.group(1))
        data['profile'] = parse_int(match.group(2))
        data['construction'] = map_construction(match.group(3))
        data['rim'] = parse_decimal(match.group(4))
        data['remainder'] = match.group(5).strip()
    elif FLOTATION_RE.match(cleaned):
        match = FLOTATION_RE.match(cleaned)
        data['width'] = parse_int(match.group(1))
        data['profile'] = inches_to_mm(match.group(2))
        data['construction'] = map_construction(match.group(3))
        data['rim'] = parse_decimal(match.group(4))
        data['remainder'] = match.group(5).strip()
    elif MOTO_RE.match(cleaned):
        match = MOTO_RE.match(cleaned)
        data['width'] = parse_int(match.group(1))
        data['profile'] = parse_int(match.group(2))
        data['construction'] = 'D'
        data['rim'] = parse_decimal(match.group(3))
        data['remainder'] = match.group(4).strip()
    elif AGRI_RE.match(cleaned):
        match = AGRI_RE.match(cleaned)
        data['width'] = inches_to_mm(match.group(1))
        data['construction'] = map_construction(match.group(2))
        data['rim'] = parse_decimal(match.group(3))
        data['remainder'] = match.group(4).strip()

    rest = data['remainder']

    ply = PLY_RE.search(rest)
    if ply:
        data['ply_rating'] = ply.group(0).strip().upper()
        rest = rest.replace(ply.group(0), ' ')

    tube = TUBE_RE.search(rest)
    if tube:
        data['tube_type'] = tube.group(1)
        rest = TUBE_RE.sub(' ', rest)

    # Load/speed only after the dimensions and ply rating are out of the way
    load_speed = LOAD_SPEED_RE.search(rest)
    if load_speed:
        data['load_index'] = load_speed.group(1)
        data['speed_index'] = load_speed.group(2).upper()

    return data


def normalize_brand(alias, fallback=''):
    """Brand display name for a sheet alias; unknown keys become title case"""
    key = (alias or '').strip().upper()
    if not key:
        key = (fallback or '').strip().upper()
    if key in BRAND_DICTIONARY:
        return BRAND_DICTIONARY[key]
    if not key:
        return DEFAULT_BRAND
    return key.lower().title()


def normalize_type(*candidates):
    for candidate in candidates:
        key = (candidate or '').strip().upper()
        if key and key in TYPE_DICTIONARY:
            return TYPE_DICTIONARY[key]
    return DEFAULT_TYPE


def default_construction(construction, measure):
    if construction:
        return construction
    upper = (measure or '').upper()
    if 'R' in upper:
        return 'R'
    if '-' in upper:
        return 'D'
    return ''


def extract_first_number(value):
    match = re.search(r'\d+', value or '')
    return match.group(0) if match else ''


def clean_model(raw):
    return ' '.join((raw or '').split())


def format_rim(rim):
    rim = parse_decimal(rim)
    if rim <= 0:
        return ''
    if rim == rim.to_integral_value():
        return str(int(rim))
    return format(rim.normalize(), 'f')


def build_original_measure(width, profile, rim, construction, ply_rating='', usage_code='',
                           load_index='', speed_index='', model=''):
    """
    Rebuild the human measure string from its fields:
    '205/55R16 PS 91V Model', '7.50-16 LT-10PR' style.
    """
    constr = (construction or '').strip().upper()
    is_diagonal = constr in ('DIAGONAL', 'D', '-')
    width = parse_int(width)
    profile = parse_int(profile) if profile not in (None, '') else 0
    rim_str = format_rim(rim)

    measure = ''
    if width > 0:
        if profile > 0:
            sep = '-' if is_diagonal else 'R'
            measure = f"{width}/{profile}{sep + rim_str if rim_str else ''}"
        elif is_diagonal:
            measure = f"{width}{'-' + rim_str if rim_str else ''}"
        else:
            measure = f"{width}{'X' + rim_str if rim_str else ''}"

    usage = (usage_code or '').strip().upper()
    plies = (ply_rating or '').strip()
    usage_plies = '-'.join(part for part in (usage, plies) if part)

    load_speed = f"{(load_index or '').strip()}{(speed_index or '').strip().upper()}"

    parts = [p for p in (measure, usage_plies, load_speed, (model or '').strip()) if p]
    return ' '.join(' '.join(parts).split())
