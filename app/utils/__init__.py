"""Utilities package"""

from .helpers import round_money, to_minor_units, from_minor_units, utcnow
from .pagination import PaginationParams, paginate, get_pagination_params

__all__ = [
    "round_money",
    "to_minor_units",
    "from_minor_units",
    "utcnow",
    "PaginationParams",
    "paginate",
    "get_pagination_params",
]
