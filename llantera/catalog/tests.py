"""
Comprehensive test suite for Catalog module
Tests: measurement parsing, brands, tire CRUD, public catalog pricing, admin view, CSV import/export, inventory sheet command
"""
import os
import tempfile
from decimal import Decimal
from io import StringIO
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from llantera.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from llantera.catalog.models import Brand, Tire, TireType
from llantera.catalog.utils import (
    parse_measurement, normalize_brand, normalize_type, parse_price, build_original_measure
)
from llantera.catalog.management.commands.import_inventory import tire_data_from_row
from llantera.inventory.models import Inventory
from llantera.pricing.models import TirePrice


def price_of(tire, code):
    return TirePrice.objects.get(tire=tire, column__code=code).price


class MeasurementParsingTests(TestCase):
    """Test measure strings and name normalization"""

    def test_metric_measure(self):
        data = parse_measurement('205/55R16 91V')
        self.assertEqual(data['width'], 205)
        self.assertEqual(data['profile'], 55)
        self.assertEqual(data['rim'], Decimal('16'))
        self.assertEqual(data['construction'], 'R')
        self.assertEqual(data['load_index'], '91')
        self.assertEqual(data['speed_index'], 'V')

    def test_moto_measure_is_diagonal(self):
        data = parse_measurement('90/90-18 51P TT')
        self.assertEqual(data['width'], 90)
        self.assertEqual(data['profile'], 90)
        self.assertEqual(data['construction'], 'D')
        self.assertEqual(data['rim'], Decimal('18'))
        self.assertEqual(data['tube_type'], 'TT')
        self.assertEqual(data['load_index'], '51')
        self.assertEqual(data['speed_index'], 'P')

    def test_flotation_measure_profile_in_mm(self):
        data = parse_measurement('31x10.50R15 109S')
        self.assertEqual(data['width'], 31)
        self.assertEqual(data['profile'], 267)
        self.assertEqual(data['rim'], Decimal('15'))
        self.assertEqual(data['load_index'], '109')

    def test_agricultural_measure_width_in_mm(self):
        data = parse_measurement('12.4-24 8PR')
        self.assertEqual(data['width'], 315)
        self.assertIsNone(data['profile'])
        self.assertEqual(data['rim'], Decimal('24'))
        self.assertEqual(data['ply_rating'], '8PR')
        self.assertEqual(data['load_index'], '')

    def test_unparseable_measure_keeps_remainder(self):
        data = parse_measurement('llanta especial')
        self.assertEqual(data['width'], 0)
        self.assertEqual(data['remainder'], 'LLANTA ESPECIAL')

    def test_normalize_brand(self):
        self.assertEqual(normalize_brand('gdy'), 'Goodyear')
        self.assertEqual(normalize_brand('', 'double coin'), 'Double Coin')
        self.assertEqual(normalize_brand('michelin'), 'Michelin')
        self.assertEqual(normalize_brand('', ''), 'Otras Marcas')

    def test_normalize_type(self):
        self.assertEqual(normalize_type('LTR'), 'Light Truck Radial (LTR)')
        self.assertEqual(normalize_type('', 'agricola'), 'Agrícola Radial')
        self.assertEqual(normalize_type('XX', 'YY'), 'Otros')

    def test_parse_price(self):
        self.assertEqual(parse_price('$1,234.50'), Decimal('1234.50'))
        self.assertEqual(parse_price(' - '), Decimal('0'))
        self.assertEqual(parse_price(''), Decimal('0'))
        self.assertEqual(parse_price('abc'), Decimal('0'))

    def test_build_original_measure(self):
        self.assertEqual(
            build_original_measure(205, 55, '16', 'R', '', 'PS', '91', 'v', 'Turanza'),
            '205/55R16 PS 91V Turanza'
        )
        self.assertEqual(build_original_measure(315, None, 24, 'D', '8PR', 'AGR'), '315-24 AGR-8PR')
        self.assertEqual(build_original_measure(7, None, '16.5', 'R'), '7X16.5')
        self.assertEqual(build_original_measure(0, None, 0, ''), '')


class BrandAPITests(TestCase):
    """Test brand and tire type endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_employee())

    def test_create_brand_with_aliases(self):
        response = self.client.post('/api/v1/brands/', {
            'name': 'Michelin',
            'aliases': ['mich', ' MICH ', '', 'mic']
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['aliases'], ['MIC', 'MICH'])

    def test_update_replaces_aliases(self):
        brand = TestDataFactory.create_brand(name='Pirelli', aliases=['PIR'])
        response = self.client.patch(f'/api/v1/brands/{brand.id}/', {'aliases': ['pi']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['aliases'], ['PI'])

    def test_duplicate_brand_name_rejected(self):
        TestDataFactory.create_brand(name='Tornel')
        response = self.client.post('/api/v1/brands/', {'name': 'tornel'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_delete_brand_with_tires_conflicts(self):
        brand = TestDataFactory.create_brand()
        TestDataFactory.create_tire(brand=brand)
        response = self.client.delete(f'/api/v1/brands/{brand.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('error', response.data)
        self.assertTrue(Brand.objects.filter(pk=brand.id).exists())

    def test_delete_brand_without_tires(self):
        brand = TestDataFactory.create_brand()
        response = self.client.delete(f'/api/v1/brands/{brand.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_tire_types(self):
        response = self.client.post('/api/v1/tire-types/', {'name': 'Pasajero'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/tire-types/', {'name': 'pasajero'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/tire-types/')
        self.assertEqual(len(response.data), 1)

    def test_customer_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/brands/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TireAPITests(TestCase):
    """Test tire CRUD keyed by SKU"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.lista = TestDataFactory.create_price_column(code='lista')
        self.mayoreo = TestDataFactory.create_price_column(
            code='mayoreo', mode='derived', base=self.lista, operation='percent', amount=Decimal('10')
        )

    def test_create_tire_resolves_brand_alias_and_initializes_prices(self):
        goodyear = TestDataFactory.create_brand(name='Goodyear', aliases=['GDY'])
        response = self.client.post('/api/v1/tires/', {
            'sku': 'LL-001',
            'brand_alias': 'gdy',
            'model': 'Wrangler',
            'width': 265,
            'profile': 70,
            'rim': '16',
            'construction': 'R',
            'tire_type_name': 'Camioneta Radial'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['brand'], goodyear.id)
        self.assertEqual(response.data['original_measure'], '265/70R16 Wrangler')
        self.assertEqual(response.data['tire_type_name'], 'Camioneta Radial')

        tire = Tire.objects.get(sku='LL-001')
        self.assertEqual(price_of(tire, 'lista'), Decimal('0.00'))
        self.assertEqual(price_of(tire, 'mayoreo'), Decimal('0.00'))

    def test_create_tire_with_new_or_empty_brand(self):
        response = self.client.post('/api/v1/tires/', {'sku': 'LL-002', 'brand_name': 'Kumho'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        brand = Brand.objects.get(name='Kumho')
        self.assertIn('KUMHO', brand.aliases.values_list('alias', flat=True))

        response = self.client.post('/api/v1/tires/', {'sku': 'LL-003'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Tire.objects.get(sku='LL-003').brand.name, 'Otras Marcas')

    def test_duplicate_sku_conflicts(self):
        TestDataFactory.create_tire(sku='DUP-1')
        response = self.client.post('/api/v1/tires/', {'sku': 'dup-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_sku_lookup_is_case_insensitive(self):
        TestDataFactory.create_tire(sku='ABC-123')
        response = self.client.get('/api/v1/tires/abc-123/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sku'], 'ABC-123')

        response = self.client.get('/api/v1/tires/NOPE/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('error', response.data)

    def test_update_and_delete_tire(self):
        TestDataFactory.create_tire(sku='UPD-1', model='Viejo')
        response = self.client.patch('/api/v1/tires/upd-1/', {'model': 'Nuevo', 'usage_code': 'ps'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['model'], 'Nuevo')
        self.assertEqual(response.data['usage_code'], 'PS')
        self.assertEqual(response.data['sku'], 'UPD-1')

        response = self.client.delete('/api/v1/tires/UPD-1/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Tire.objects.filter(sku='UPD-1').exists())

    def test_list_with_filters(self):
        TestDataFactory.create_tire(sku='W-205', width=205, model='Eagle')
        TestDataFactory.create_tire(sku='W-265', width=265, model='Wrangler')
        response = self.client.get('/api/v1/tires/?width=265')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['results'][0]['sku'], 'W-265')

        response = self.client.get('/api/v1/tires/?search=eagle')
        self.assertEqual([t['sku'] for t in response.data['results']], ['W-205'])

    def test_list_filter_by_type(self):
        moto = TestDataFactory.create_tire_type(name='Moto')
        TestDataFactory.create_tire(sku='T-MOTO', tire_type=moto)
        TestDataFactory.create_tire(sku='T-AUTO')
        response = self.client.get(f'/api/v1/tires/?type_id={moto.id}')
        self.assertEqual([t['sku'] for t in response.data['results']], ['T-MOTO'])
        self.assertEqual(response.data['results'][0]['tire_type_name'], 'Moto')

    def test_employee_cannot_manage_tires(self):
        self.client.authenticate_user(TestDataFactory.create_employee())
        response = self.client.post('/api/v1/tires/', {'sku': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CatalogAPITests(TestCase):
    """Test the public catalog priced per level"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.tire_a = TestDataFactory.create_tire(
            sku='CAT-A', model='Primacy', quantity=5, prices={'lista': '1000.00', 'mayoreo': '900.00'}
        )
        self.tire_b = TestDataFactory.create_tire(sku='CAT-B', model='Eagle', quantity=0, public_price='500.00')

    def items_by_sku(self, response):
        return {item['tire']['sku']: item for item in response.data['results']}

    def test_public_level_uses_lista(self):
        response = self.client.get('/api/v1/catalog/tires/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        items = self.items_by_sku(response)
        self.assertEqual(items['CAT-A']['price'], Decimal('1000.00'))
        self.assertEqual(items['CAT-A']['price_code'], 'lista')
        self.assertIsNone(items['CAT-A']['reference_price'])
        self.assertEqual(items['CAT-A']['stock'], 5)
        # No price row falls back to the public price
        self.assertEqual(items['CAT-B']['price'], Decimal('500.00'))

    def test_static_level_fallback(self):
        response = self.client.get('/api/v1/catalog/tires/?level=distribuidor')
        items = self.items_by_sku(response)
        self.assertEqual(items['CAT-A']['price'], Decimal('900.00'))
        self.assertEqual(items['CAT-A']['price_code'], 'mayoreo')
        self.assertEqual(items['CAT-A']['reference_price'], Decimal('1000.00'))
        self.assertEqual(items['CAT-A']['reference_code'], 'lista')
        self.assertIsNone(items['CAT-B']['reference_code'])

    def test_user_price_level(self):
        mayoreo = TestDataFactory.create_price_column(code='mayoreo_x')
        TirePrice.objects.create(tire=self.tire_a, column=mayoreo, price=Decimal('850.00'))
        level = TestDataFactory.create_price_level(code='gold', price_column=mayoreo)
        self.client.authenticate_user(TestDataFactory.create_user(price_level=level))
        response = self.client.get('/api/v1/catalog/tires/')
        self.assertEqual(response.data['level'], 'gold')
        self.assertEqual(self.items_by_sku(response)['CAT-A']['price'], Decimal('850.00'))

    def test_in_stock_only_and_sort(self):
        response = self.client.get('/api/v1/catalog/tires/?in_stock_only=true')
        self.assertEqual([i['tire']['sku'] for i in response.data['results']], ['CAT-A'])

        response = self.client.get('/api/v1/catalog/tires/?sort=price')
        self.assertEqual([i['tire']['sku'] for i in response.data['results']], ['CAT-B', 'CAT-A'])

        response = self.client.get('/api/v1/catalog/tires/?sort=-price')
        self.assertEqual([i['tire']['sku'] for i in response.data['results']], ['CAT-A', 'CAT-B'])

    def test_search_and_pagination(self):
        response = self.client.get('/api/v1/catalog/tires/?search=primacy')
        self.assertEqual(response.data['total'], 1)

        response = self.client.get('/api/v1/catalog/tires/?limit=1&offset=1&sort=sku')
        self.assertEqual(response.data['limit'], 1)
        self.assertEqual([i['tire']['sku'] for i in response.data['results']], ['CAT-B'])

    def test_cache_invalidated_on_price_change(self):
        self.client.get('/api/v1/catalog/tires/')
        price = TirePrice.objects.get(tire=self.tire_a, column__code='lista')
        price.price = Decimal('1100.00')
        price.save()
        response = self.client.get('/api/v1/catalog/tires/')
        self.assertEqual(self.items_by_sku(response)['CAT-A']['price'], Decimal('1100.00'))

    def test_catalog_detail(self):
        response = self.client.get('/api/v1/catalog/tires/cat-a/?level=distribuidor')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['price'], Decimal('900.00'))
        self.assertEqual(response.data['brand_name'], self.tire_a.brand.name)

        response = self.client.get('/api/v1/catalog/tires/missing/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AdminCatalogAPITests(TestCase):
    """Test the admin catalog view, update, export and import"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_admin())
        self.lista = TestDataFactory.create_price_column(code='lista', display_order=1)
        self.mayoreo = TestDataFactory.create_price_column(
            code='mayoreo', mode='derived', base=self.lista, operation='percent', amount=Decimal('10'),
            display_order=2
        )
        self.tire = TestDataFactory.create_tire(sku='ADM-1', quantity=3, prices={'lista': '1000.00'})

    def test_admin_list(self):
        response = self.client.get('/api/v1/tires/admin/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = response.data['results'][0]
        self.assertEqual(row['tire']['sku'], 'ADM-1')
        self.assertEqual(row['inventory']['quantity'], 3)
        self.assertEqual(row['prices']['lista'], Decimal('1000.00'))

    def test_update_admin_syncs_public_price_and_recalculates(self):
        response = self.client.put('/api/v1/tires/admin/adm-1/', {
            'quantity': 8,
            'prices': {'LISTA': '1200.00', 'desconocida': '5.00'}
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['inventory']['quantity'], 8)
        self.assertEqual(response.data['prices']['lista'], Decimal('1200.00'))
        self.assertEqual(response.data['prices']['mayoreo'], Decimal('1080.00'))
        self.assertNotIn('desconocida', response.data['prices'])
        self.tire.refresh_from_db()
        self.assertEqual(self.tire.public_price, Decimal('1200.00'))

    def test_update_admin_rejects_negative_quantity(self):
        response = self.client.put('/api/v1/tires/admin/ADM-1/', {'quantity': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_export_csv(self):
        response = self.client.get('/api/v1/tires/admin/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('text/csv', response['Content-Type'])
        lines = response.content.decode('utf-8').splitlines()
        self.assertEqual(
            lines[0],
            'sku,marca,modelo,ancho,perfil,construccion,rin,tipo_tubo,calificacion_capas,indice_carga,'
            'indice_velocidad,uso,cantidad,stock_minimo,precio_publico,lista,mayoreo,descripcion,url_imagen'
        )
        self.assertTrue(lines[1].startswith('ADM-1,'))

    def test_import_csv(self):
        content = (
            'sku,marca,modelo,ancho,perfil,construccion,rin,cantidad,lista\n'
            'NEW-1,Michelin,Primacy,205,55,R,16,6,"$1,500.00"\n'
            'adm-1,,Nuevo Modelo,205,55,R,16,4,900\n'
            ',,,,,,,,\n'
        ).encode('utf-8')
        upload = SimpleUploadedFile('catalogo.csv', content, content_type='text/csv')
        response = self.client.post('/api/v1/tires/admin/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['processed'], 2)

        new_tire = Tire.objects.get(sku='NEW-1')
        self.assertEqual(new_tire.brand.name, 'Michelin')
        self.assertEqual(new_tire.public_price, Decimal('1500.00'))
        self.assertEqual(new_tire.original_measure, '205/55R16 Primacy')
        self.assertEqual(new_tire.inventory.quantity, 6)
        self.assertEqual(price_of(new_tire, 'mayoreo'), Decimal('1350.00'))

        self.tire.refresh_from_db()
        self.assertEqual(self.tire.model, 'Nuevo Modelo')
        self.assertEqual(self.tire.public_price, Decimal('900.00'))
        self.assertEqual(price_of(self.tire, 'lista'), Decimal('900.00'))
        self.assertEqual(price_of(self.tire, 'mayoreo'), Decimal('810.00'))

    def test_import_requires_sku_column(self):
        upload = SimpleUploadedFile('catalogo.csv', b'modelo,ancho\nX,205\n', content_type='text/csv')
        response = self.client.post('/api/v1/tires/admin/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_import_excel_latin_encoding(self):
        content = 'sku,modelo\nLAT-1,Caña\n'.encode('latin-1')
        upload = SimpleUploadedFile('catalogo.csv', content, content_type='text/csv')
        response = self.client.post('/api/v1/tires/admin/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['processed'], 1)
        self.assertEqual(Tire.objects.get(sku='LAT-1').model, 'Caña')

    def test_import_undecodable_file(self):
        upload = SimpleUploadedFile('catalogo.csv', b'sku,modelo\nX-1,\x81\x8d\n', content_type='text/csv')
        response = self.client.post('/api/v1/tires/admin/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'El archivo debe estar codificado en UTF-8')

    def test_import_rejects_non_csv(self):
        upload = SimpleUploadedFile('catalogo.xlsx', b'sku\nX\n')
        response = self.client.post('/api/v1/tires/admin/import/', {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ImportInventoryCommandTests(TestCase):
    """Test the legacy semicolon separated inventory import"""

    HEADER = 'CODIGO;MEDIDA;CANT;MAY -6%;MAY -3%;MAYOREO;EMPRESA;P.LISTA;P.LIST -10;EFEC;A;B;C;MARCA;TIPO;ABR;USO'
    ROW = 'GY-001;205/55R16 91V EAGLE SPORT;7;$900.00;$950.00;$980.00;$1,000.00;$1,200.00;$1,080.00;$1,100.00;;;;GDY;PS;;PS'

    def setUp(self):
        for code in ('lista', 'mayoreo_6', 'empresa'):
            TestDataFactory.create_price_column(code=code)

    def write_sheet(self, lines):
        handle = tempfile.NamedTemporaryFile('w', suffix='.csv', delete=False, encoding='utf-8')
        handle.write('\n'.join(lines) + '\n')
        handle.close()
        self.addCleanup(os.unlink, handle.name)
        return handle.name

    def test_tire_data_from_row(self):
        data = tire_data_from_row(self.ROW.split(';'))
        self.assertEqual(data['sku'], 'GY-001')
        self.assertEqual(data['brand_name'], 'Goodyear')
        self.assertEqual(data['brand_alias'], 'GDY')
        self.assertEqual(data['model'], '91V EAGLE SPORT')
        self.assertEqual(data['width'], 205)
        self.assertEqual(data['profile'], 55)
        self.assertEqual(data['construction'], 'R')
        self.assertEqual(data['tire_type_name'], 'Pasajero')
        self.assertEqual(data['usage_code'], 'PS')
        self.assertEqual(data['public_price'], Decimal('1200.00'))

    def test_incomplete_row_rejected(self):
        with self.assertRaises(ValueError):
            tire_data_from_row(['X', '205/55R16'])

    def test_command_imports_rows(self):
        path = self.write_sheet([
            self.HEADER,
            self.ROW,
            'BAD;;1;;;;;;;;;;;;;;',
            'SHORT;205/55R16',
        ])
        out = StringIO()
        call_command('import_inventory', path, stdout=out)

        tire = Tire.objects.get(sku='GY-001')
        self.assertEqual(tire.brand.name, 'Goodyear')
        self.assertEqual(tire.tire_type, TireType.objects.get(name='Pasajero'))
        self.assertEqual(tire.load_index, '91')
        self.assertEqual(tire.speed_index, 'V')
        self.assertEqual(tire.original_measure, '205/55R16 91V EAGLE SPORT')

        inventory = Inventory.objects.get(tire=tire)
        self.assertEqual(inventory.quantity, 7)
        self.assertEqual(inventory.min_stock, 4)

        self.assertEqual(price_of(tire, 'lista'), Decimal('1200.00'))
        self.assertEqual(price_of(tire, 'mayoreo_6'), Decimal('900.00'))
        self.assertEqual(price_of(tire, 'empresa'), Decimal('1000.00'))
        self.assertIn('Rows with Errors: 2', out.getvalue())

    def test_command_updates_existing_tire(self):
        TestDataFactory.create_tire(sku='GY-001', model='Viejo')
        path = self.write_sheet([self.HEADER, self.ROW])
        call_command('import_inventory', path, stdout=StringIO())
        self.assertEqual(Tire.objects.filter(sku='GY-001').count(), 1)
        self.assertEqual(Tire.objects.get(sku='GY-001').model, '91V EAGLE SPORT')
