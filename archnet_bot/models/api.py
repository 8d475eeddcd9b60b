from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from archnet_bot.api.codes import OrderStatus


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_items(data: Any, key: str = "list") -> List[Dict[str, Any]]:
    """Return the list payload whether the backend wraps it in ``{key: [...]}`` or not."""
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


@dataclass(frozen=True, slots=True)
class DiscountTier:
    quantity: int
    discount: int

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "DiscountTier":
        return cls(quantity=_int(raw.get("quantity")), discount=_int(raw.get("discount")))


@dataclass(frozen=True, slots=True)
class Plan:
    id: int
    name: str
    unit_price: int
    unit_time: str
    traffic: int = 0
    device_limit: int = 0
    discounts: Tuple[DiscountTier, ...] = ()

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "Plan":
        tiers = raw.get("discount") or []
        return cls(
            id=_int(raw.get("id")),
            name=_str(raw.get("name")),
            unit_price=_int(raw.get("unit_price")),
            unit_time=_str(raw.get("unit_time")),
            traffic=_int(raw.get("traffic")),
            device_limit=_int(raw.get("device_limit")),
            discounts=tuple(
                DiscountTier.from_payload(item) for item in tiers if isinstance(item, dict)
            ),
        )


@dataclass(slots=True)
class PaymentMethod:
    id: int
    name: str
    platform: str = ""
    fee_mode: int = 0
    fee_percent: int = 0
    fee_amount: int = 0

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "PaymentMethod":
        return cls(
            id=_int(raw.get("id")),
            name=_str(raw.get("name")),
            platform=_str(raw.get("platform")),
            fee_mode=_int(raw.get("fee_mode")),
            fee_percent=_int(raw.get("fee_percent")),
            fee_amount=_int(raw.get("fee_amount")),
        )


@dataclass(slots=True)
class UserInfo:
    id: int
    email: str = ""
    lang: str = ""
    refer_code: str = ""
    balance: int = 0

    @classmethod
    def from_payload(cls, raw: Any) -> "UserInfo":
        raw = _dict(raw)
        return cls(
            id=_int(raw.get("id")),
            email=_str(raw.get("email")),
            lang=_str(raw.get("lang")),
            refer_code=_str(raw.get("refer_code")),
            balance=_int(raw.get("balance")),
        )


@dataclass(slots=True)
class UserSubscription:
    id: int
    subscribe_id: int
    name: str
    traffic: int
    download: int
    upload: int
    expire_time: int
    status: int = 0

    @property
    def used(self) -> int:
        return self.download + self.upload

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "UserSubscription":
        subscribe = _dict(raw.get("subscribe"))
        return cls(
            id=_int(raw.get("id")),
            subscribe_id=_int(raw.get("subscribe_id")),
            name=_str(raw.get("custom_name")) or _str(subscribe.get("name")),
            traffic=_int(raw.get("traffic")) or _int(subscribe.get("traffic")),
            download=_int(raw.get("download")),
            upload=_int(raw.get("upload")),
            expire_time=_int(raw.get("expire_time")),
            status=_int(raw.get("status")),
        )


@dataclass(slots=True)
class AffiliateCount:
    registers: int = 0
    total_commission: int = 0

    @classmethod
    def from_payload(cls, raw: Any) -> "AffiliateCount":
        raw = _dict(raw)
        return cls(
            registers=_int(raw.get("registers")),
            total_commission=_int(raw.get("total_commission")),
        )


@dataclass(slots=True)
class PreOrder:
    amount: int
    price: int = 0
    discount: int = 0
    fee_amount: int = 0

    @classmethod
    def from_payload(cls, raw: Any) -> "PreOrder":
        raw = _dict(raw)
        return cls(
            amount=_int(raw.get("amount")),
            price=_int(raw.get("price")),
            discount=_int(raw.get("discount")),
            fee_amount=_int(raw.get("fee_amount")),
        )


@dataclass(slots=True)
class Checkout:
    type: str = ""
    checkout_url: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, raw: Any) -> "Checkout":
        raw = _dict(raw)
        return cls(
            type=_str(raw.get("type")),
            checkout_url=_str(raw.get("checkout_url")),
            extra={k: v for k, v in raw.items() if k not in {"type", "checkout_url"}},
        )


@dataclass(slots=True)
class OrderDetail:
    order_no: str
    status: Optional[OrderStatus]
    amount: int = 0

    @classmethod
    def from_payload(cls, raw: Any) -> "OrderDetail":
        raw = _dict(raw)
        return cls(
            order_no=_str(raw.get("order_no")),
            status=OrderStatus.parse(raw.get("status")),
            amount=_int(raw.get("amount")),
        )
