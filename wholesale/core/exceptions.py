"""
Custom Application Exceptions
"""
from typing import Iterable, Optional


class WholesaleException(Exception):
    """Base exception for the wholesale application"""
    pass


class ValidationError(WholesaleException):
    """Raised when request data fails validation"""
    pass


class NotFoundError(WholesaleException):
    """Raised when a requested record does not exist"""
    pass


class BusinessLogicError(WholesaleException):
    """Raised when business rules are violated"""
    pass


class AllocationError(WholesaleException):
    """Raised when an allocation pass fails and is rolled back"""

    def __init__(self, message: str, product_ids: Optional[Iterable[int]] = None):
        super().__init__(message)
        self.product_ids = sorted(product_ids or [])
