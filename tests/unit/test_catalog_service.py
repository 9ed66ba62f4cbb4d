"""
Unit tests for catalog loading and the company-scoped cache.
"""

import fnmatch
import pytest
from decimal import Decimal
from redis.exceptions import ConnectionError as RedisConnectionError

from pos_billing.exceptions import DuplicateTierRuleError
from pos_billing.services.cache_service import CacheService
from pos_billing.services.catalog_service import invalidate_catalog, load_catalog


class FakeRedis:
    """Dict-backed subset of the redis client API."""

    def __init__(self, down=False):
        self.data = {}
        self.down = down

    def ping(self):
        if self.down:
            raise RedisConnectionError('down')
        return True

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)

    def scan_iter(self, match=None, count=None):
        return [k for k in list(self.data) if fnmatch.fnmatch(k, match)]


class CountingClient:
    """Backend stand-in counting catalog fetches."""

    def __init__(self, rules=None):
        self.fetches = 0
        self.rules = rules if rules is not None else [
            {'id': 1, 'product': 1, 'tier': 10, 'type': 'fixed', 'value': '75.00'},
        ]

    def list_price_tiers(self):
        self.fetches += 1
        return [{'id': 10, 'name': 'Wholesale', 'default_percentage': '-10.00', 'is_active': True}]

    def list_tier_rules(self):
        self.fetches += 1
        return self.rules


@pytest.fixture
def cache():
    service = CacheService()
    service.client = FakeRedis()
    service._enabled = True
    return service


class TestLoadCatalog:
    """Tests for building the tier catalog snapshot."""

    def test_without_cache(self):
        catalog = load_catalog(CountingClient(), 1)
        assert catalog.rule_for(1, 10).value == Decimal('75')
        assert catalog.is_selectable(10)

    def test_cached_per_company(self, cache):
        client = CountingClient()
        load_catalog(client, 1, cache=cache)
        load_catalog(client, 1, cache=cache)
        assert client.fetches == 2
        load_catalog(client, 2, cache=cache)
        assert client.fetches == 4

    def test_invalidate(self, cache):
        client = CountingClient()
        load_catalog(client, 1, cache=cache)
        assert invalidate_catalog(cache, 1) == 2
        load_catalog(client, 1, cache=cache)
        assert client.fetches == 4

    def test_duplicate_rules_rejected(self):
        rules = [
            {'id': 1, 'product': 1, 'tier': 10, 'type': 'fixed', 'value': '75'},
            {'id': 2, 'product': 1, 'tier': 10, 'type': 'percentage', 'value': '-5'},
        ]
        with pytest.raises(DuplicateTierRuleError):
            load_catalog(CountingClient(rules=rules), 1)

    def test_redis_down_falls_back_to_backend(self):
        service = CacheService()
        service.client = FakeRedis(down=True)
        service._enabled = True
        client = CountingClient()
        load_catalog(client, 1, cache=service)
        load_catalog(client, 1, cache=service)
        assert client.fetches == 4


class TestCacheService:
    """Tests for cache keys and decimal serialization."""

    def test_decimal_round_trip(self, cache):
        cache.set(1, 'catalog', 'x', {'value': Decimal('12.50')})
        assert cache.get(1, 'catalog', 'x') == {'value': Decimal('12.50')}
        assert 'pos:company:1:catalog:x' in cache.client.data

    def test_disabled_cache_is_a_miss(self):
        service = CacheService()
        assert service.set(1, 'catalog', 'x', 1) is False
        assert service.get(1, 'catalog', 'x') is None
