"""
Price column and price level operations.

Derived columns form a forest rooted at fixed columns: every derived column
names a base, and base chains never loop back. Recalculation walks that
forest so a change to any column reaches everything computed from it.
"""
import logging
import re
from decimal import Decimal

from django.db import transaction
from django.db.models import Q

from llantera.catalog.models import Tire
from llantera.core.cache_signals import suspend_cache_signals
from llantera.core.exceptions import ServiceValidationError, ConflictError
from llantera.core.utils import create_audit_log
from .calculator import apply_price_calculation, static_level_columns, to_decimal, round_price, OPERATIONS
from .models import PriceColumn, PriceLevel, TirePrice

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r'^[a-zA-Z0-9_]+$')
PROTECTED_COLUMN_CODE = 'lista'
INIT_PAGE_SIZE = 200


def normalize_code(value):
    return (value or '').strip().lower()


# Validation

def _validate_code(code, label='el código'):
    if not code:
        raise ServiceValidationError(f'{label.capitalize()} es obligatorio')
    if not CODE_PATTERN.match(code):
        raise ServiceValidationError(f'{label.capitalize()} solo puede contener letras, números y guiones bajos, sin espacios')


def base_chain_contains(start, target):
    """True when walking base links from ``start`` reaches ``target``"""
    seen = set()
    current = start
    while current is not None:
        if current.pk == target.pk:
            return True
        if current.pk in seen:
            return True
        seen.add(current.pk)
        current = current.base if current.mode == 'derived' else None
    return False


def _resolve_calculation(data, column=None):
    """
    Validate the calculation settings of a column.
    Returns (mode, base, operation, amount).
    """
    mode = normalize_code(data.get('mode')) or 'fixed'
    if mode not in ('fixed', 'derived'):
        raise ServiceValidationError('Modo de cálculo inválido')

    operation = normalize_code(data.get('operation')) or 'percent'
    if mode == 'fixed':
        amount = data.get('amount')
        return mode, None, operation if operation in OPERATIONS else 'percent', to_decimal(amount, None)

    base_code = normalize_code(data.get('base_code'))
    if not base_code:
        raise ServiceValidationError('La columna base es obligatoria para modo derivado')
    _validate_code(base_code, 'la columna base')
    if operation not in OPERATIONS:
        raise ServiceValidationError('La operación de cálculo no es válida')
    if data.get('amount') is None or data.get('amount') == '':
        raise ServiceValidationError('La cantidad de cálculo es obligatoria para modo derivado')

    base = PriceColumn.objects.filter(code=base_code).first()
    if base is None:
        raise ServiceValidationError('La columna base especificada no existe')
    if column is not None and base_chain_contains(base, column):
        raise ServiceValidationError('La columna base genera una referencia circular')
    return mode, base, operation, to_decimal(data.get('amount'))


# Recalculation

def recalculate_derived_column(column):
    """Recompute every price of a derived column from its base column"""
    if column.mode != 'derived' or column.base_id is None:
        return 0
    if column.amount is None:
        raise ServiceValidationError('Configuración de cálculo incompleta para columna derivada')

    base_prices = TirePrice.objects.filter(column_id=column.base_id).values_list('tire_id', 'price')
    existing = {tp.tire_id: tp for tp in TirePrice.objects.filter(column=column)}
    to_create = []
    to_update = []
    for tire_id, base_price in base_prices:
        price = apply_price_calculation(base_price, column.operation, column.amount)
        current = existing.get(tire_id)
        if current is None:
            to_create.append(TirePrice(tire_id=tire_id, column=column, price=price))
        elif current.price != price:
            current.price = price
            to_update.append(current)

    with suspend_cache_signals():
        if to_create:
            TirePrice.objects.bulk_create(to_create, batch_size=500, ignore_conflicts=True)
        if to_update:
            TirePrice.objects.bulk_update(to_update, ['price'], batch_size=500)

    logger.info(f"Recalculated derived column {column.code}: {len(to_create)} created, {len(to_update)} updated")
    return len(to_create) + len(to_update)


def recalculate_dependents(column, _visited=None):
    """Recalculate the derived columns based on ``column``, transitively"""
    visited = _visited if _visited is not None else set()
    for child in PriceColumn.objects.filter(base=column, mode='derived').order_by('display_order', 'code'):
        if child.pk in visited:
            continue
        visited.add(child.pk)
        recalculate_derived_column(child)
        recalculate_dependents(child, visited)


def derived_columns_in_order():
    """Derived columns sorted so every base comes before the columns computed from it"""
    columns = list(PriceColumn.objects.all())
    by_id = {c.pk: c for c in columns}
    for col in columns:
        if col.base_id in by_id:
            col.base = by_id[col.base_id]
    ordered = []
    resolved = {c.pk for c in columns if c.mode != 'derived'}
    pending = [c for c in columns if c.mode == 'derived']
    while pending:
        progressed = False
        for col in list(pending):
            if col.base_id in resolved or col.base_id not in by_id:
                ordered.append(col)
                resolved.add(col.pk)
                pending.remove(col)
                progressed = True
        if not progressed:
            logger.warning(f"Derived columns with unresolved bases: {[c.code for c in pending]}")
            break
    return ordered


def recalculate_all_derived():
    """Recalculate every derived column, bases first"""
    total = 0
    for column in derived_columns_in_order():
        total += recalculate_derived_column(column)
    return total


def recalculate_tire_prices(tire, changed_codes=None):
    """
    Recompute the derived prices of one tire.

    With ``changed_codes`` only columns whose base chain passes through one
    of those codes are recomputed; without it every derived column is.
    """
    prices = {tp.column_id: tp for tp in TirePrice.objects.filter(tire=tire)}
    changed = {normalize_code(c) for c in changed_codes} if changed_codes is not None else None
    updated = 0
    for column in derived_columns_in_order():
        base_code = column.base.code if column.base_id else None
        if changed is not None and base_code not in changed:
            continue
        base_price = prices.get(column.base_id)
        if base_price is None:
            continue
        price = apply_price_calculation(base_price.price, column.operation, column.amount)
        current = prices.get(column.pk)
        if current is None:
            current = TirePrice.objects.create(tire=tire, column=column, price=price)
            prices[column.pk] = current
            updated += 1
        elif current.price != price:
            current.price = price
            current.save(update_fields=['price', 'updated_at'])
            updated += 1
        if changed is not None:
            changed.add(column.code)
    return updated


def initialize_fixed_column(column):
    """Write a zero price for every tire, in pages"""
    created = 0
    last_id = 0
    with suspend_cache_signals():
        while True:
            tire_ids = list(
                Tire.objects.filter(pk__gt=last_id).order_by('pk').values_list('pk', flat=True)[:INIT_PAGE_SIZE]
            )
            if not tire_ids:
                break
            TirePrice.objects.bulk_create(
                [TirePrice(tire_id=tid, column=column, price=Decimal('0.00')) for tid in tire_ids],
                ignore_conflicts=True
            )
            created += len(tire_ids)
            last_id = tire_ids[-1]
    logger.info(f"Initialized fixed column {column.code} for {created} tires")
    return created


def initialize_tire_prices(tire):
    """New tires get a zero price in every fixed column and computed derived prices"""
    fixed_columns = PriceColumn.objects.filter(mode='fixed')
    TirePrice.objects.bulk_create(
        [TirePrice(tire=tire, column=col, price=Decimal('0.00')) for col in fixed_columns],
        ignore_conflicts=True
    )
    recalculate_tire_prices(tire)


# Column CRUD

@transaction.atomic
def create_column(data, request=None):
    code = normalize_code(data.get('code'))
    _validate_code(code)
    name = (data.get('name') or '').strip()
    if not name:
        raise ServiceValidationError('El nombre es obligatorio')
    display_order = int(data.get('display_order') or 0)
    if display_order < 0:
        raise ServiceValidationError('El orden visual no puede ser negativo')
    if PriceColumn.objects.filter(code=code).exists():
        raise ServiceValidationError('Ya existe una columna de precio con ese código')

    mode, base, operation, amount = _resolve_calculation(data)
    column = PriceColumn.objects.create(
        code=code,
        name=name,
        description=(data.get('description') or '').strip(),
        display_order=display_order,
        is_active=data.get('is_active', True),
        is_public=data.get('is_public', False),
        mode=mode,
        base=base,
        operation=operation,
        amount=amount,
    )

    if column.mode == 'derived':
        recalculate_derived_column(column)
    else:
        initialize_fixed_column(column)

    create_audit_log(
        request=request,
        action='create',
        model_name='PriceColumn',
        object_id=str(column.id),
        object_reference=column.code,
        changes={'mode': mode, 'base': base.code if base else None, 'operation': operation, 'amount': str(amount) if amount is not None else None}
    )
    return column


@transaction.atomic
def update_column(column, data, request=None):
    if 'code' in data and normalize_code(data.get('code')) not in ('', column.code):
        raise ServiceValidationError('El código de la columna no se puede modificar')

    merged = {
        'name': column.name,
        'description': column.description,
        'display_order': column.display_order,
        'is_active': column.is_active,
        'is_public': column.is_public,
        'mode': column.mode,
        'base_code': column.base.code if column.base_id else '',
        'operation': column.operation,
        'amount': column.amount,
    }
    merged.update({k: v for k, v in data.items() if k in merged})

    name = (merged['name'] or '').strip()
    if not name:
        raise ServiceValidationError('El nombre es obligatorio')
    display_order = int(merged['display_order'] or 0)
    if display_order < 0:
        raise ServiceValidationError('El orden visual no puede ser negativo')

    mode, base, operation, amount = _resolve_calculation(merged, column=column)
    previous = (column.mode, column.base_id, column.operation, column.amount)

    column.name = name
    column.description = (merged['description'] or '').strip()
    column.display_order = display_order
    column.is_active = merged['is_active']
    column.is_public = merged['is_public']
    column.mode = mode
    column.base = base
    column.operation = operation
    column.amount = amount
    column.save()

    if column.mode == 'derived':
        recalculate_derived_column(column)
        recalculate_dependents(column)
    elif previous[0] == 'derived':
        # Converted to fixed: its prices stay, dependents may need a refresh
        recalculate_dependents(column)

    if previous != (column.mode, column.base_id, column.operation, column.amount):
        create_audit_log(
            request=request,
            action='price_change',
            model_name='PriceColumn',
            object_id=str(column.id),
            object_reference=column.code,
            changes={'mode': mode, 'base': base.code if base else None, 'operation': operation,
                     'amount': str(amount) if amount is not None else None}
        )
    return column


def get_column_dependents(column):
    """Derived columns based on ``column`` and price levels that reference it"""
    derived = PriceColumn.objects.filter(base=column, mode='derived').order_by('display_order', 'code')
    levels = PriceLevel.objects.filter(Q(price_column=column) | Q(reference_column=column)).select_related(
        'price_column', 'reference_column'
    )
    return {
        'column': column.code,
        'dependents': [
            {'id': c.id, 'code': c.code, 'name': c.name, 'operation': c.operation, 'amount': c.amount}
            for c in derived
        ],
        'levels': [
            {
                'id': lvl.id,
                'code': lvl.code,
                'name': lvl.name,
                'uses_as_main': lvl.price_column_id == column.id,
                'uses_as_reference': lvl.reference_column_id == column.id,
            }
            for lvl in levels
        ],
    }


def delete_column(column, dependents=None, transfer_to_code=None, request=None):
    """
    Delete a price column after resolving everything that points at it.

    ``dependents`` is a list of ``{"code", "action", "base_code"}`` entries,
    one per derived column based on this one. ``action`` is ``fixed`` (keep
    its current prices) or ``change_base`` (rebase and recalculate).
    ``transfer_to_code`` names the column that price levels move to.
    """
    if column.code == PROTECTED_COLUMN_CODE:
        raise ServiceValidationError('La columna de lista no se puede eliminar')

    derived = list(PriceColumn.objects.filter(base=column, mode='derived').order_by('display_order', 'code'))
    resolutions = {}
    for entry in dependents or []:
        if not isinstance(entry, dict):
            raise ServiceValidationError('Formato de dependientes inválido')
        resolutions[normalize_code(entry.get('code'))] = entry

    unresolved = [c.code for c in derived if c.code not in resolutions]
    if unresolved:
        raise ConflictError(
            'La columna es base de otras columnas derivadas; indica qué hacer con cada una',
            details={'dependents': unresolved}
        )

    levels = list(PriceLevel.objects.filter(Q(price_column=column) | Q(reference_column=column)))
    destination = None
    if levels:
        dest_code = normalize_code(transfer_to_code)
        if not dest_code:
            raise ServiceValidationError(
                'Existen niveles de precio que usan esta columna; debes indicar una columna de destino'
            )
        if dest_code == column.code:
            raise ServiceValidationError('La columna de destino debe ser diferente de la que se desea eliminar')
        destination = PriceColumn.objects.filter(code=dest_code).first()
        if destination is None:
            raise ServiceValidationError('La columna de destino especificada no existe')

    with transaction.atomic():
        rebased = []
        # Fixed conversions first so rebased chains can run through them
        ordered = sorted(derived, key=lambda c: resolutions[c.code].get('action') != 'fixed')
        for dep in ordered:
            entry = resolutions[dep.code]
            action = normalize_code(entry.get('action'))
            if action == 'fixed':
                dep.mode = 'fixed'
                dep.base = None
                dep.save(update_fields=['mode', 'base', 'updated_at'])
            elif action == 'change_base':
                base_code = normalize_code(entry.get('base_code'))
                if not base_code:
                    raise ServiceValidationError(f'Falta la nueva columna base para {dep.code}')
                if base_code == column.code:
                    raise ServiceValidationError(f'La nueva base de {dep.code} no puede ser la columna eliminada')
                new_base = PriceColumn.objects.filter(code=base_code).first()
                if new_base is None:
                    raise ServiceValidationError(f'La columna base {base_code} no existe')
                if base_chain_contains(new_base, dep):
                    raise ServiceValidationError(f'La nueva base de {dep.code} genera una referencia circular')
                dep.base = new_base
                dep.save(update_fields=['base', 'updated_at'])
                rebased.append(dep)
            else:
                raise ServiceValidationError(f'Acción inválida para {dep.code}')

        for dep in rebased:
            dep.refresh_from_db()
            if base_chain_contains(dep.base, column):
                raise ServiceValidationError(f'La nueva base de {dep.code} depende de la columna eliminada')

        for dep in rebased:
            recalculate_derived_column(dep)
            recalculate_dependents(dep)

        for level in levels:
            if level.price_column_id == column.id:
                level.price_column = destination
            if level.reference_column_id == column.id:
                level.reference_column = destination
            level.save()

        column_id, code = column.id, column.code
        with suspend_cache_signals():
            TirePrice.objects.filter(column=column).delete()
            column.delete()

    create_audit_log(
        request=request,
        action='column_delete',
        model_name='PriceColumn',
        object_id=str(column_id),
        object_reference=code,
        changes={
            'dependents': {c.code: normalize_code(resolutions[c.code].get('action')) for c in derived},
            'levels': [lvl.code for lvl in levels],
            'transfer_to': destination.code if destination else None,
        }
    )
    logger.info(f"Deleted price column {code} ({len(derived)} dependents, {len(levels)} levels transferred)")


# Levels

def resolve_level_columns(level):
    """
    (main code, reference code) for a level code: the PriceLevel with that
    code when it exists, otherwise the static mapping.
    """
    key = normalize_code(level)
    if key:
        price_level = PriceLevel.objects.select_related('price_column', 'reference_column').filter(code=key).first()
        if price_level is not None:
            ref = price_level.reference_column.code if price_level.reference_column_id else None
            return price_level.price_column.code, ref
    return static_level_columns(key)


def resolve_user_level(request):
    """Explicit ``level`` parameter, then the user's price level, then their level"""
    level = (request.query_params.get('level') or '').strip()
    if level:
        return level.lower()
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        if user.price_level_id:
            return user.price_level.code
        if user.level:
            return user.level
    return 'public'


def price_for_tire(tire, level):
    """Main and reference price of one tire at a level"""
    main_code, ref_code = resolve_level_columns(level)
    prices = {tp.column.code: tp.price for tp in TirePrice.objects.filter(tire=tire).select_related('column')}
    price = prices.get(main_code)
    if price is None:
        price = tire.public_price if tire.public_price and tire.public_price > 0 else Decimal('0.00')
    return {
        'price': round_price(price),
        'price_code': main_code,
        'reference_price': prices.get(ref_code) if ref_code else None,
        'reference_code': ref_code if ref_code and ref_code in prices else None,
    }


@transaction.atomic
def delete_price_level(level, transfer_to_code=None, request=None):
    user_count = level.users.count()
    destination = None
    if user_count > 0:
        dest_code = normalize_code(transfer_to_code)
        if not dest_code:
            raise ServiceValidationError(
                f"No se puede eliminar el nivel '{level.name}' porque tiene {user_count} usuarios asignados. "
                f"Debe especificar un nivel de destino para transferirlos"
            )
        destination = PriceLevel.objects.filter(code=dest_code).exclude(pk=level.pk).first()
        if destination is None:
            raise ServiceValidationError(f'Nivel de destino no encontrado: {dest_code}')
        moved = level.users.update(price_level=destination)
        create_audit_log(
            request=request,
            action='level_transfer',
            model_name='PriceLevel',
            object_id=str(level.id),
            object_reference=level.code,
            changes={'transfer_to': destination.code, 'users': moved}
        )
    level.delete()
