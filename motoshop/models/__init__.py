"""
Import all models from their respective modules.
"""

from motoshop.models.shop import MotorcycleShop
from motoshop.models.motorcycle import BikerMotorcycle
from motoshop.models.booking import BookingRequest
from motoshop.models.document import ServiceDocument

# Export all models
__all__ = [
    # Read-only directory listing
    "MotorcycleShop",

    # Rider-owned garage tables
    "BikerMotorcycle",
    "BookingRequest",
    "ServiceDocument",
]
