import pytest
from decimal import Decimal

from pos_billing import create_app
from pos_billing.models import Cart, PricingTier, Product, ProductTierRule, RuleType
from pos_billing.services.backend_client import BackendClient
from pos_billing.services.pricing_service import PriceTierCatalog


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestingConfig')
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def authenticated_client(client):
    """Client whose session carries a backend token and company."""
    with client.session_transaction() as sess:
        sess['access_token'] = 'test-token'
        sess['company_id'] = 1
        sess['user_id'] = 7
    return client


# =====================================================
# CATALOG DATA
# =====================================================

def make_product(**overrides) -> Product:
    data = dict(
        id=1,
        name='Basmati Rice 1kg',
        sku='RICE-1KG',
        base_selling_price=Decimal('100'),
        gst_rate=Decimal('18'),
        tax_included=False,
        stock_quantity=10,
        hsn_code='1006',
        barcode='8901234567890',
    )
    data.update(overrides)
    return Product(**data)


@pytest.fixture
def product():
    """Tax-exclusive product at 100 + 18% GST."""
    return make_product()


@pytest.fixture
def inclusive_product():
    """Tax-inclusive product listed at 118 (100 + 18% GST)."""
    return make_product(id=2, name='Ghee 500ml', sku='GHEE-500', base_selling_price=Decimal('118'),
                        tax_included=True, hsn_code='0405', barcode=None)


@pytest.fixture
def catalog():
    """Wholesale tier (-10%), retail-plus tier (+5%), inactive tier, one fixed rule."""
    return PriceTierCatalog(
        tiers=[
            PricingTier(id=10, name='Wholesale', default_percentage=Decimal('-10')),
            PricingTier(id=20, name='Retail Plus', default_percentage=Decimal('5')),
            PricingTier(id=30, name='Legacy', default_percentage=Decimal('-50'), is_active=False),
            PricingTier(id=40, name='Standard', default_percentage=Decimal('0')),
        ],
        rules=[
            ProductTierRule(product_id=1, tier_id=20, type=RuleType.FIXED, value=Decimal('75')),
            ProductTierRule(product_id=2, tier_id=10, type=RuleType.PERCENTAGE, value=Decimal('-20')),
        ],
    )


@pytest.fixture
def cart():
    return Cart()


# =====================================================
# FAKE BACKEND
# =====================================================

class FakeBackend:
    """In-memory stand-in for the remote API, patched onto BackendClient."""

    def __init__(self):
        self.products = {
            1: {'id': 1, 'name': 'Basmati Rice 1kg', 'sku': 'RICE-1KG', 'barcode': '8901234567890',
                'selling_price': '100.00', 'gst_rate': '18.00', 'tax_included': False,
                'stock_quantity': 3, 'hsn_code': '1006'},
            2: {'id': 2, 'name': 'Ghee 500ml', 'sku': 'GHEE-500', 'barcode': None,
                'selling_price': '118.00', 'gst_rate': '18.00', 'tax_included': True,
                'stock_quantity': 5, 'hsn_code': '0405'},
            3: {'id': 3, 'name': 'Milk 1L', 'sku': 'MILK-1L', 'barcode': '8900000000003',
                'selling_price': '60.00', 'gst_rate': '0.00', 'tax_included': False,
                'stock_quantity': 0, 'hsn_code': '0401'},
            4: {'id': 4, 'name': 'Tea 250g', 'sku': 'TEA-250', 'barcode': None,
                'selling_price': '100.00', 'gst_rate': '5.00', 'tax_included': False,
                'stock_quantity': 20, 'hsn_code': '0902'},
        }
        self.tiers = [
            {'id': 10, 'name': 'Wholesale', 'default_percentage': '-10.00', 'is_active': True},
            {'id': 30, 'name': 'Legacy', 'default_percentage': '-50.00', 'is_active': False},
        ]
        self.rules = [
            {'id': 1, 'product': 2, 'tier': 10, 'tier_name': 'Wholesale', 'type': 'fixed', 'value': '94.40'},
        ]
        self.customers = [{'id': 5, 'name': 'Asha Traders'}]
        self.states = [{'id': 27, 'name': 'Maharashtra', 'code': '27'}]
        self.sales = []
        self.guests = []
        self.fail_sale = None

    def install(self, monkeypatch):
        backend = self

        def get_product(client, product_id):
            from pos_billing.exceptions import NotFoundError
            if product_id not in backend.products:
                raise NotFoundError('Product not found')
            return dict(backend.products[product_id])

        def list_products(client, search=None):
            search = (search or '').lower()
            return [
                dict(p) for p in backend.products.values()
                if not search or search in p['name'].lower() or search in p['sku'].lower()
                or search == (p['barcode'] or '').lower()
            ]

        def create_sale(client, payload):
            if backend.fail_sale:
                raise backend.fail_sale
            backend.sales.append(payload)
            return {'id': len(backend.sales), 'order_number': payload['order_number'],
                    'total_amount': payload['total_amount']}

        def create_guest_customer(client, name, phone=None):
            guest = {'id': 900 + len(backend.guests), 'name': name, 'phone': phone}
            backend.guests.append(guest)
            return guest

        monkeypatch.setattr(BackendClient, 'get_product', get_product)
        monkeypatch.setattr(BackendClient, 'list_products', list_products)
        monkeypatch.setattr(BackendClient, 'list_price_tiers', lambda client: [dict(t) for t in backend.tiers])
        monkeypatch.setattr(BackendClient, 'list_tier_rules', lambda client, product_id=None: [dict(r) for r in backend.rules])
        monkeypatch.setattr(BackendClient, 'list_customers', lambda client: list(backend.customers))
        monkeypatch.setattr(BackendClient, 'list_states', lambda client: list(backend.states))
        monkeypatch.setattr(BackendClient, 'create_sale', create_sale)
        monkeypatch.setattr(BackendClient, 'create_guest_customer', create_guest_customer)
        return self


@pytest.fixture
def backend(monkeypatch):
    """Fake remote backend wired into every BackendClient."""
    return FakeBackend().install(monkeypatch)


@pytest.fixture
def product_factory():
    """Build a Product, overriding any field of the default tax-exclusive one."""
    return make_product
