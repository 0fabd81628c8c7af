from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

from subsync.core import stripe_events

# Stripe의 event.data.object는 타입마다 모양이 다르다.
# 라우터가 문자열로 분기하지 않도록, 검증된 이벤트를 여기서 한 번에 타입별 값으로 바꾼다.


@dataclass(frozen=True)
class CheckoutCompleted:
    event_id: str
    user_id: Optional[str]
    subscription_id: Optional[str]
    customer_id: Optional[str]
    event_type: str = stripe_events.CHECKOUT_COMPLETED


@dataclass(frozen=True)
class SubscriptionCreated:
    event_id: str
    subscription_id: str
    customer_id: Optional[str]
    provider_status: Optional[str]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    event_type: str = stripe_events.SUBSCRIPTION_CREATED


@dataclass(frozen=True)
class SubscriptionUpdated:
    event_id: str
    subscription_id: str
    customer_id: Optional[str]
    provider_status: Optional[str]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    event_type: str = stripe_events.SUBSCRIPTION_UPDATED


@dataclass(frozen=True)
class SubscriptionDeleted:
    event_id: str
    subscription_id: str
    customer_id: Optional[str]
    canceled_at: Optional[datetime]
    event_type: str = stripe_events.SUBSCRIPTION_DELETED


@dataclass(frozen=True)
class InvoicePaymentSucceeded:
    event_id: str
    invoice_id: str
    subscription_id: Optional[str]
    customer_id: Optional[str]
    amount: int  # amount_paid, smallest currency unit
    currency: Optional[str]
    event_type: str = stripe_events.INVOICE_PAYMENT_SUCCEEDED


@dataclass(frozen=True)
class InvoicePaymentFailed:
    event_id: str
    invoice_id: str
    subscription_id: Optional[str]
    customer_id: Optional[str]
    amount: int  # amount_due, smallest currency unit
    currency: Optional[str]
    event_type: str = stripe_events.INVOICE_PAYMENT_FAILED


@dataclass(frozen=True)
class UnhandledEvent:
    event_id: str
    event_type: str


BillingEvent = Union[
    CheckoutCompleted,
    SubscriptionCreated,
    SubscriptionUpdated,
    SubscriptionDeleted,
    InvoicePaymentSucceeded,
    InvoicePaymentFailed,
    UnhandledEvent,
]


def from_unix(ts: Any) -> Optional[datetime]:
    if ts is None:
        return None
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)


def _first_item(obj: dict[str, Any]) -> dict[str, Any]:
    items = (obj.get("items") or {}).get("data") or []
    return items[0] if items else {}


def _period_bounds(sub: dict[str, Any]) -> tuple[Optional[datetime], Optional[datetime]]:
    # 최신 API 버전은 current_period_*를 subscription item으로 옮겼다
    item = _first_item(sub)
    start = sub.get("current_period_start", item.get("current_period_start"))
    end = sub.get("current_period_end", item.get("current_period_end"))
    return from_unix(start), from_unix(end)


def _invoice_subscription_id(invoice: dict[str, Any]) -> Optional[str]:
    if invoice.get("subscription"):
        return invoice["subscription"]
    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return details.get("subscription")


def _subscription_fields(event_id: str, sub: dict[str, Any]) -> dict[str, Any]:
    start, end = _period_bounds(sub)
    return {
        "event_id": event_id,
        "subscription_id": sub["id"],
        "customer_id": sub.get("customer"),
        "provider_status": sub.get("status"),
        "current_period_start": start,
        "current_period_end": end,
    }


def parse_event(raw: dict[str, Any]) -> BillingEvent:
    """
    Verified Stripe event(dict) → 타입별 이벤트 값.
    모르는 타입은 UnhandledEvent로 돌려준다 (예외 아님).
    """
    event_id = raw.get("id") or ""
    event_type = raw.get("type") or ""
    obj: dict[str, Any] = (raw.get("data") or {}).get("object") or {}

    if event_type not in stripe_events.HANDLED_EVENT_TYPES:
        return UnhandledEvent(event_id=event_id, event_type=event_type)

    if event_type == stripe_events.CHECKOUT_COMPLETED:
        return CheckoutCompleted(
            event_id=event_id,
            user_id=obj.get("client_reference_id"),
            subscription_id=obj.get("subscription"),
            customer_id=obj.get("customer"),
        )

    if event_type == stripe_events.SUBSCRIPTION_CREATED:
        return SubscriptionCreated(**_subscription_fields(event_id, obj))

    if event_type == stripe_events.SUBSCRIPTION_UPDATED:
        return SubscriptionUpdated(**_subscription_fields(event_id, obj))

    if event_type == stripe_events.SUBSCRIPTION_DELETED:
        return SubscriptionDeleted(
            event_id=event_id,
            subscription_id=obj["id"],
            customer_id=obj.get("customer"),
            canceled_at=from_unix(obj.get("canceled_at") or obj.get("ended_at")),
        )

    if event_type == stripe_events.INVOICE_PAYMENT_SUCCEEDED:
        return InvoicePaymentSucceeded(
            event_id=event_id,
            invoice_id=obj["id"],
            subscription_id=_invoice_subscription_id(obj),
            customer_id=obj.get("customer"),
            amount=int(obj.get("amount_paid") or 0),
            currency=obj.get("currency"),
        )

    if event_type == stripe_events.INVOICE_PAYMENT_FAILED:
        return InvoicePaymentFailed(
            event_id=event_id,
            invoice_id=obj["id"],
            subscription_id=_invoice_subscription_id(obj),
            customer_id=obj.get("customer"),
            amount=int(obj.get("amount_due") or 0),
            currency=obj.get("currency"),
        )

    raise ValueError(f"Handled event type without a parser: {event_type}")
