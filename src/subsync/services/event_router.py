from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from subsync.core.billing_events import (
    BillingEvent,
    CheckoutCompleted,
    InvoicePaymentFailed,
    InvoicePaymentSucceeded,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionUpdated,
    UnhandledEvent,
)
from subsync.core.config import LookupMissPolicy
from subsync.core.errors import AccountNotFoundError
from subsync.services.reconciler import Reconciler, TransitionResult

logger = logging.getLogger(__name__)

Outcome = Literal["applied", "ignored", "skipped"]


@dataclass(frozen=True)
class DispatchResult:
    event_id: str
    event_type: str
    outcome: Outcome
    transition: Optional[TransitionResult] = None
    reason: Optional[str] = None


class EventRouter:
    def __init__(self, reconciler: Reconciler, *, lookup_miss_policy: LookupMissPolicy = "ack"):
        self.reconciler = reconciler
        self.lookup_miss_policy = lookup_miss_policy

    def dispatch(self, event: BillingEvent) -> DispatchResult:
        """
        이벤트 타입별 핸들러 호출.
        - 모르는 타입: 로그만 남기고 ignored (200으로 ack)
        - 계정 못 찾음: policy=ack면 skipped, retry면 예외 그대로 (500 → Stripe 재전송)
        - 그 외 예외(store write 실패 등): 항상 밖으로 던진다
        """
        if isinstance(event, UnhandledEvent):
            logger.info("Unhandled event type %s (%s)", event.event_type, event.event_id)
            return DispatchResult(event.event_id, event.event_type, "ignored")

        try:
            transition = self._handle(event)
        except AccountNotFoundError as e:
            if self.lookup_miss_policy == "retry":
                logger.warning("%s for %s (%s); asking for redelivery", e, event.event_type, event.event_id)
                raise
            logger.warning("%s for %s (%s); skipped", e, event.event_type, event.event_id)
            return DispatchResult(event.event_id, event.event_type, "skipped", reason=str(e))

        logger.info(
            "Applied %s (%s): account=%s status=%s",
            event.event_type,
            event.event_id,
            transition.user_id,
            transition.status,
        )
        return DispatchResult(event.event_id, event.event_type, "applied", transition=transition)

    def _handle(self, event: BillingEvent) -> TransitionResult:
        match event:
            case CheckoutCompleted():
                return self.reconciler.checkout_completed(event)
            case SubscriptionCreated():
                return self.reconciler.subscription_created(event)
            case SubscriptionUpdated():
                return self.reconciler.subscription_updated(event)
            case SubscriptionDeleted():
                return self.reconciler.subscription_deleted(event)
            case InvoicePaymentSucceeded():
                return self.reconciler.payment_succeeded(event)
            case InvoicePaymentFailed():
                return self.reconciler.payment_failed(event)
            case _:
                raise TypeError(f"No handler for {type(event).__name__}")
