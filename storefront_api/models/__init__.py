"""SQLAlchemy ORM models.

Models represent database tables:
- banner: Storefront banner content
- product_view / product_sale: Append-only analytics events
- product_review: Customer reviews with admin approval
- loyalty_account / loyalty_transaction: Points balance and ledger
- trade_in_offer / trade_in_device_map / trade_in_request: Trade-in pricing and requests
"""

from storefront_api.models.banner import Banner
from storefront_api.models.loyalty import LoyaltyAccount, LoyaltyTransaction
from storefront_api.models.product_review import ProductReview
from storefront_api.models.product_sale import ProductSale
from storefront_api.models.product_view import ProductView
from storefront_api.models.trade_in import TradeInDeviceMap, TradeInOffer, TradeInRequest

__all__ = [
    "Banner",
    "LoyaltyAccount",
    "LoyaltyTransaction",
    "ProductReview",
    "ProductSale",
    "ProductView",
    "TradeInDeviceMap",
    "TradeInOffer",
    "TradeInRequest",
]
