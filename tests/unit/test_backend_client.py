"""
Unit tests for the backend REST client (requests is monkeypatched).
"""

import pytest
import requests

from pos_billing.exceptions import (
    BackendError, BackendUnavailableError, BusinessLogicError,
    NotFoundError, UnauthorizedError
)
from pos_billing.services.backend_client import BackendClient


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=''):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.content = b'' if json_data is None else b'{}'

    def json(self):
        if self._json is None:
            raise ValueError('No JSON')
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} Error', response=self)


@pytest.fixture
def calls(monkeypatch):
    """Capture outgoing requests; tests set `calls.response`."""
    class Recorder(list):
        response = FakeResponse(200, [])

    recorder = Recorder()

    def fake_request(method, url, **kwargs):
        recorder.append((method, url, kwargs))
        if isinstance(recorder.response, Exception):
            raise recorder.response
        return recorder.response

    monkeypatch.setattr(requests, 'request', fake_request)
    return recorder


@pytest.fixture
def api():
    return BackendClient('http://backend.test/', access_token='abc', timeout=5)


class TestBackendClient:
    """Tests for request building and response handling."""

    def test_bearer_header_and_url(self, api, calls):
        api.list_price_tiers()
        method, url, kwargs = calls[0]
        assert method == 'GET'
        assert url == 'http://backend.test/api/products/price-tiers/'
        assert kwargs['headers']['Authorization'] == 'Bearer abc'
        assert kwargs['timeout'] == 5

    def test_paginated_results_unwrapped(self, api, calls):
        calls.response = FakeResponse(200, {'count': 1, 'results': [{'id': 1}]})
        assert api.list_customers() == [{'id': 1}]
        assert calls[0][2]['params'] == {'page_size': 1000}

    def test_search_param(self, api, calls):
        api.list_products('rice')
        assert calls[0][2]['params'] == {'search': 'rice'}

    def test_guest_customer_payload(self, api, calls):
        calls.response = FakeResponse(201, {'id': 9, 'name': 'Ravi'})
        assert api.create_guest_customer('Ravi', '98450')['id'] == 9
        assert calls[0][2]['json'] == {'name': 'Ravi', 'is_guest': True, 'phone': '98450'}

    def test_create_sale(self, api, calls):
        calls.response = FakeResponse(201, {'id': 3, 'order_number': 'POS-1'})
        assert api.create_sale({'order_number': 'POS-1', 'items': []})['id'] == 3
        assert calls[0][0] == 'POST'
        assert calls[0][1] == 'http://backend.test/api/sales/'

    def test_empty_body(self, api, calls):
        calls.response = FakeResponse(204)
        assert api.get_product(1) == {}

    @pytest.mark.parametrize('status, error_class', [
        (401, UnauthorizedError),
        (404, NotFoundError),
        (400, BusinessLogicError),
        (500, BackendError),
    ])
    def test_http_errors_mapped(self, api, calls, status, error_class):
        calls.response = FakeResponse(status, {'detail': 'nope'}, text='nope')
        with pytest.raises(error_class) as exc_info:
            api.get_product(1)
        assert exc_info.value.message == 'nope'

    def test_client_error_keeps_status(self, api, calls):
        calls.response = FakeResponse(409, {'error': 'Insufficient stock'})
        with pytest.raises(BusinessLogicError) as exc_info:
            api.create_sale({'order_number': 'POS-1', 'items': []})
        assert exc_info.value.status_code == 409

    def test_connection_error(self, api, calls):
        calls.response = requests.ConnectionError('refused')
        with pytest.raises(BackendUnavailableError) as exc_info:
            api.list_states()
        assert exc_info.value.status_code == 503
