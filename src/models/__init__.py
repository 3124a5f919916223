from src.models.base import Base
from src.models.counter import Counter
from src.models.item import Item
from src.models.sales_order import SalesOrder

__all__ = [
    "Base",
    "Counter",
    "Item",
    "SalesOrder",
]
