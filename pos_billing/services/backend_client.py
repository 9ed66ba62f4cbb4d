"""REST client for the retail backend (products, tiers, customers, sales)."""
import logging
import requests
from typing import Any, Dict, List, Optional

from pos_billing.exceptions import (
    BackendError, BackendUnavailableError, BusinessLogicError,
    NotFoundError, UnauthorizedError
)

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin wrapper over the backend's JSON API."""

    PRODUCTS = '/api/products/'
    PRODUCT_DETAIL = '/api/products/{id}/'
    PRICE_TIERS = '/api/products/price-tiers/'
    TIER_PRICES = '/api/products/tier-prices/'
    CUSTOMERS = '/api/customers/'
    GUEST_CUSTOMER = '/api/customers/guest/'
    STATES = '/api/settings/states/'
    SALES = '/api/sales/'

    def __init__(self, base_url: str, access_token: Optional[str] = None, timeout: int = 10):
        """
        Initialize backend client.

        Args:
            base_url: Backend root, e.g. http://localhost:8000
            access_token: Bearer token of the logged-in operator
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = {'Content-Type': 'application/json'}
        if access_token:
            self.headers['Authorization'] = f'Bearer {access_token}'

    # =====================================================
    # CATALOG
    # =====================================================

    def list_products(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'search': search} if search else None
        return self._unwrap(self._request('GET', self.PRODUCTS, params=params))

    def get_product(self, product_id: int) -> Dict[str, Any]:
        return self._request('GET', self.PRODUCT_DETAIL.format(id=product_id))

    def list_price_tiers(self) -> List[Dict[str, Any]]:
        return self._unwrap(self._request('GET', self.PRICE_TIERS))

    def list_tier_rules(self, product_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {'product_id': product_id} if product_id else None
        return self._unwrap(self._request('GET', self.TIER_PRICES, params=params))

    # =====================================================
    # CUSTOMERS / SETTINGS
    # =====================================================

    def list_customers(self) -> List[Dict[str, Any]]:
        return self._unwrap(self._request('GET', self.CUSTOMERS, params={'page_size': 1000}))

    def create_guest_customer(self, name: str, phone: Optional[str] = None) -> Dict[str, Any]:
        payload = {'name': name, 'is_guest': True}
        if phone:
            payload['phone'] = phone
        return self._request('POST', self.GUEST_CUSTOMER, json=payload)

    def list_states(self) -> List[Dict[str, Any]]:
        return self._unwrap(self._request('GET', self.STATES))

    # =====================================================
    # SALES
    # =====================================================

    def create_sale(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"[API] Creating sale {payload.get('order_number')} ({len(payload.get('items', []))} items)")
        data = self._request('POST', self.SALES, json=payload)
        logger.info(f"[API] Sale created: {data.get('id')} - {data.get('order_number')}")
        return data

    # =====================================================
    # PRIVATE HELPERS
    # =====================================================

    @staticmethod
    def _unwrap(data: Any) -> List[Dict[str, Any]]:
        """Accept both plain lists and paginated {"results": [...]} bodies."""
        if isinstance(data, dict) and 'results' in data:
            return data['results']
        return data or []

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(method, url, headers=self.headers, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.HTTPError as e:
            raise self._map_http_error(e.response, method, path)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"[API] {method} {path} unreachable: {e}")
            raise BackendUnavailableError()

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    @staticmethod
    def _map_http_error(response, method: str, path: str) -> Exception:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = None
        if isinstance(body, dict):
            message = body.get('error') or body.get('detail') or body.get('message')

        logger.error(f"[API] {method} {path} failed [{status}]: {response.text[:500]}")

        if status == 401:
            return UnauthorizedError(message or 'Session expired. Please log in again.')
        if status == 404:
            return NotFoundError(message or 'Resource not found')
        if 400 <= status < 500:
            return BusinessLogicError(message or 'Request rejected by backend', status_code=status)
        return BackendError(message or 'Backend request failed')
