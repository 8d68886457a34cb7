from .address import Address
from .company_provider import CompanyProvider
from .order import Order, OrderItem
from .product import Product
from .profile import Profile
from .relationship import ConsumerSupplierConnection, SupplierCompanyRelationship
from .supplier import Supplier

__all__ = [
    "Address",
    "CompanyProvider",
    "ConsumerSupplierConnection",
    "Order",
    "OrderItem",
    "Product",
    "Profile",
    "Supplier",
    "SupplierCompanyRelationship",
]
