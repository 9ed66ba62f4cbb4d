"""Loading of the price tier catalog snapshot from the backend."""
import logging
from typing import Any, Optional

from pos_billing.services.backend_client import BackendClient
from pos_billing.services.cache_service import CacheService
from pos_billing.services.pricing_service import PriceTierCatalog

logger = logging.getLogger(__name__)

CATALOG_MODULE = 'catalog'


def load_catalog(
    client: BackendClient,
    company_id: Any,
    cache: Optional[CacheService] = None,
    ttl: Optional[int] = None
) -> PriceTierCatalog:
    """
    Fetch tiers and rules (through the cache when given) and build a snapshot.

    Raises:
        DuplicateTierRuleError: the rule data has two rules for one pair.
    """
    if cache is not None:
        tiers = cache.memoize(company_id, CATALOG_MODULE, 'tiers', client.list_price_tiers, ttl)
        rules = cache.memoize(company_id, CATALOG_MODULE, 'rules', client.list_tier_rules, ttl)
    else:
        tiers = client.list_price_tiers()
        rules = client.list_tier_rules()

    catalog = PriceTierCatalog.from_api(tiers, rules)
    logger.debug(f"[CATALOG] company={company_id}: {len(tiers)} tiers, {len(rules)} rules")
    return catalog


def invalidate_catalog(cache: CacheService, company_id: Any) -> int:
    """Drop the cached snapshot, e.g. after tiers were edited."""
    return cache.invalidate_module(company_id, CATALOG_MODULE)
