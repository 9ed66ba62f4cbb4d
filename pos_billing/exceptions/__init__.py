"""Custom exceptions for the POS billing application."""
from decimal import Decimal


def _fmt_qty(value) -> str:
    value = Decimal(str(value))
    return f"{int(value)}" if value % 1 == 0 else f"{value:.2f}".rstrip('0').rstrip('.')


class PosError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(PosError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(PosError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(PosError):
    """Raised when the operator session is missing or rejected by the backend."""
    def __init__(self, message="Authentication required"):
        super().__init__(message, 401)

class OutOfStockError(BusinessLogicError):
    """Raised when a product without stock is added to the cart."""
    def __init__(self, product_name):
        super().__init__(
            f'"{product_name}" is out of stock',
            status_code=409,
            payload={'available': 0}
        )

class StockExceededError(BusinessLogicError):
    """Raised when a quantity increase goes past the available stock."""
    def __init__(self, product_name, requested, available):
        super().__init__(
            f'Only {_fmt_qty(available)} of "{product_name}" available '
            f'(requested {_fmt_qty(requested)})',
            status_code=409,
            payload={'available': int(available)}
        )

class EmptyCartCheckoutError(BusinessLogicError):
    """Raised when checkout is attempted on a cart without lines."""
    def __init__(self, message="Cart is empty. Add products before checkout."):
        super().__init__(message)

class InvalidDiscountError(BusinessLogicError):
    """Raised when a discount percentage falls outside [0, 100]."""
    def __init__(self, value):
        super().__init__(f'Invalid discount "{value}": must be between 0 and 100')

class DuplicateTierRuleError(PosError):
    """Raised when the rule catalog holds two rules for one product and tier."""
    def __init__(self, product_id, tier_id):
        super().__init__(
            f'Price tier catalog has more than one rule for product {product_id} '
            f'and tier {tier_id}',
            status_code=502
        )

class BackendError(PosError):
    """Raised when the remote backend answers with a server error."""
    def __init__(self, message="Backend request failed", status_code=502, payload=None):
        super().__init__(message, status_code, payload)

class BackendUnavailableError(BackendError):
    """Raised when the remote backend cannot be reached."""
    def __init__(self, message="Backend is unreachable"):
        super().__init__(message, 503)
