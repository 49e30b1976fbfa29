from .inventory import Product
from .sales import Sale
from .auth import User, SessionToken

__all__ = [
    'Product',
    'Sale',
    'User', 'SessionToken',
]
