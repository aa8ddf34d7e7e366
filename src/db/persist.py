# persisted state blob: cart, order history and auth session under one key
from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import aiosqlite

from db import models
from db.database import connect
from utils.config import Config
from utils.exceptions import PersistenceError
from utils.logger import get_logger

_logger = get_logger(__name__)


# ---------------------------
# Encoding
# ---------------------------


def product_to_dict(product: models.Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "title": product.title,
        "price": str(product.price),
        "description": product.description,
        "category": product.category,
        "image": product.image,
        "rating": {"rate": product.rating.rate, "count": product.rating.count},
    }


def _expect_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def product_from_dict(data: Dict[str, Any]) -> models.Product:
    data = _expect_dict(data, "product")
    rating = _expect_dict(data.get("rating") or {}, "rating")
    return models.Product(
        id=int(data["id"]),
        title=data["title"],
        price=Decimal(str(data["price"])),
        description=data.get("description", ""),
        category=data.get("category", ""),
        image=data.get("image", ""),
        rating=models.Rating(
            rate=float(rating.get("rate", 0)), count=int(rating.get("count", 0))
        ),
    )


def cart_items_to_list(items) -> List[Dict[str, Any]]:
    return [
        {"product": product_to_dict(item.product), "quantity": item.quantity}
        for item in items
    ]


def cart_items_from_list(data: List[Dict[str, Any]]) -> List[models.CartItem]:
    if not isinstance(data, list):
        raise TypeError(f"cart items must be a list, got {type(data).__name__}")
    return [
        models.CartItem(
            product=product_from_dict(entry["product"]),
            quantity=int(entry["quantity"]),
        )
        for entry in (_expect_dict(e, "cart item") for e in data)
    ]


def order_to_dict(order: models.Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "customer_info": {
            "full_name": order.customer_info.full_name,
            "shipping_address": order.customer_info.shipping_address,
            "phone_number": order.customer_info.phone_number,
        },
        "items": cart_items_to_list(order.items),
        "total": str(order.total),
        "order_date": order.order_date.isoformat(),
        "status": order.status,
    }


def order_from_dict(data: Dict[str, Any]) -> models.Order:
    data = _expect_dict(data, "order")
    info = _expect_dict(data["customer_info"], "customer_info")
    return models.Order(
        id=data["id"],
        customer_info=models.CustomerInfo(
            full_name=info["full_name"],
            shipping_address=info["shipping_address"],
            phone_number=info["phone_number"],
        ),
        items=tuple(cart_items_from_list(data["items"])),
        total=Decimal(str(data["total"])),
        order_date=datetime.fromisoformat(data["order_date"]),
        status=data.get("status", models.ORDER_STATUS_COMPLETED),
    )


def session_to_dict(user: Optional[models.SessionUser]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "username": user.username, "role": user.role}


def session_from_dict(data: Optional[Dict[str, Any]]) -> Optional[models.SessionUser]:
    if not data:
        return None
    data = _expect_dict(data, "auth")
    return models.SessionUser(
        id=str(data["id"]), username=data["username"], role=data["role"]
    )


# ---------------------------
# Storage
# ---------------------------


async def save_state(blob: Dict[str, Any], key: str = Config.STATE_KEY) -> None:
    """Write the state blob under ``key``, replacing any previous value."""
    try:
        payload = json.dumps(blob)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"State is not serializable: {e}") from e

    try:
        async with connect() as conn:
            await conn.execute(
                """
                INSERT INTO kv_store(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at;
                """,
                (key, payload, datetime.now().isoformat()),
            )
            await conn.commit()
    except aiosqlite.Error as e:
        raise PersistenceError(f"Failed to write state '{key}': {e}") from e
    _logger.debug(f"State saved under '{key}' ({len(payload)} bytes).")


async def load_state(key: str = Config.STATE_KEY) -> Optional[Dict[str, Any]]:
    """Return the stored blob, or None if absent or unreadable.

    Raises PersistenceError when the database itself cannot be read.
    """
    try:
        async with connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM kv_store WHERE key = ?;", (key,)
            )
            row = await cur.fetchone()
            await cur.close()
    except aiosqlite.Error as e:
        raise PersistenceError(f"Failed to read state '{key}': {e}") from e
    if not row:
        return None
    try:
        blob = json.loads(row[0])
    except json.JSONDecodeError as e:
        _logger.warning(f"Discarding unreadable state '{key}': {e}")
        return None
    if not isinstance(blob, dict):
        _logger.warning(f"Discarding state '{key}': expected an object.")
        return None
    return blob


async def clear_state(key: str = Config.STATE_KEY) -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
        await conn.commit()
