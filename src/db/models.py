# provide dataclass models

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Tuple

UserRole = Literal["Admin", "Editor", "Viewer"]
UserStatus = Literal["Active", "Inactive"]

USER_ROLES: Tuple[str, ...] = ("Admin", "Editor", "Viewer")
USER_STATUSES: Tuple[str, ...] = ("Active", "Inactive")

ORDER_STATUS_COMPLETED = "completed"


@dataclass(frozen=True)
class Rating:
    rate: float  # 0..5, one decimal
    count: int


@dataclass(frozen=True)
class Product:
    id: int
    title: str
    price: Decimal
    description: str
    category: str
    image: str
    rating: Rating = field(default_factory=lambda: Rating(0.0, 0))


@dataclass(frozen=True)
class CartItem:
    product: Product
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    items: Tuple[CartItem, ...]
    item_count: int
    total: Decimal


@dataclass(frozen=True)
class CustomerInfo:
    full_name: str
    shipping_address: str
    phone_number: str


@dataclass(frozen=True)
class Order:
    id: str
    customer_info: CustomerInfo
    items: Tuple[CartItem, ...]
    total: Decimal  # grand total, shipping and tax included
    order_date: datetime
    status: str = ORDER_STATUS_COMPLETED


@dataclass(frozen=True)
class SessionUser:
    id: str
    username: str
    role: str


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: UserRole
    status: UserStatus
    created_at: date
