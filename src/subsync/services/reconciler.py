from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from subsync.core.account_status import (
    ACCOUNT_STATUS_ACTIVE,
    ACCOUNT_STATUS_EXPIRED,
    ACCOUNT_STATUS_INACTIVE,
    ACCOUNT_STATUS_PAST_DUE,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_SUCCEEDED,
)
from subsync.core.billing_events import (
    CheckoutCompleted,
    InvoicePaymentFailed,
    InvoicePaymentSucceeded,
    SubscriptionCreated,
    SubscriptionDeleted,
    SubscriptionUpdated,
)
from subsync.core.errors import AccountNotFoundError
from subsync.models.account import Account
from subsync.services.record_store import RecordStore

logger = logging.getLogger(__name__)

InvoiceEvent = Union[InvoicePaymentSucceeded, InvoicePaymentFailed]


@dataclass(frozen=True)
class TransitionResult:
    user_id: str
    status: str
    payment_id: Optional[int] = None
    payment_deduped: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Reconciler:
    """
    이벤트 하나 → account / payment 상태 전이 하나.

    "필드를 상수로 set" 하는 전이는 몇 번 와도 같은 결과로 수렴한다.
    payment append만 예외: dedupe_payments=False면 재전송마다 row가 하나씩 늘어난다.
    계정을 못 찾으면 AccountNotFoundError (ack/retry 판단은 라우터 몫).
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        dedupe_payments: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.dedupe_payments = dedupe_payments
        self.clock = clock

    # -----------------------------
    # Lookup helpers
    # -----------------------------
    def _account_by(self, field: str, value: Optional[str]) -> Account:
        if not value:
            raise AccountNotFoundError(field, value)
        account = self.store.find_account(**{field: value})
        if account is None:
            raise AccountNotFoundError(field, value)
        return account

    def _set(self, account_id: str, **fields) -> TransitionResult:
        account = self.store.update_account(account_id, **fields)
        return TransitionResult(user_id=account.id, status=account.subscription_status)

    # -----------------------------
    # Transitions
    # -----------------------------
    def checkout_completed(self, event: CheckoutCompleted) -> TransitionResult:
        if not event.user_id:
            raise AccountNotFoundError("client_reference_id", event.user_id)

        # mode=payment 체크아웃은 subscription이 없다. 기존 구독 연결을 지우면 안 됨
        if not event.subscription_id:
            account = self.store.get_account(event.user_id)
            if account is None:
                raise AccountNotFoundError("user_id", event.user_id)
            logger.info(
                "Checkout for account %s has no subscription (%s); account left unchanged",
                account.id,
                event.event_id,
            )
            return TransitionResult(user_id=account.id, status=account.subscription_status)

        fields = {
            "subscription_status": ACCOUNT_STATUS_ACTIVE,
            "subscription_id": event.subscription_id,
            "trial_end_date": None,
        }
        if event.customer_id:
            fields["customer_id"] = event.customer_id
        return self._set(event.user_id, **fields)

    def subscription_created(self, event: SubscriptionCreated) -> TransitionResult:
        account = self._account_by("customer_id", event.customer_id)
        return self._set(
            account.id,
            subscription_status=ACCOUNT_STATUS_ACTIVE,
            subscription_id=event.subscription_id,
            current_period_start=event.current_period_start,
            current_period_end=event.current_period_end,
        )

    def subscription_updated(self, event: SubscriptionUpdated) -> TransitionResult:
        account = self._account_by("subscription_id", event.subscription_id)
        # trialing / past_due 등 active가 아닌 모든 provider 상태는 inactive
        status = (
            ACCOUNT_STATUS_ACTIVE if event.provider_status == "active" else ACCOUNT_STATUS_INACTIVE
        )
        return self._set(
            account.id,
            subscription_status=status,
            current_period_start=event.current_period_start,
            current_period_end=event.current_period_end,
        )

    def subscription_deleted(self, event: SubscriptionDeleted) -> TransitionResult:
        account = self._account_by("subscription_id", event.subscription_id)
        return self._set(
            account.id,
            subscription_status=ACCOUNT_STATUS_EXPIRED,
            canceled_at=event.canceled_at or self.clock(),
        )

    def payment_succeeded(self, event: InvoicePaymentSucceeded) -> TransitionResult:
        return self._record_payment(event, PAYMENT_STATUS_SUCCEEDED, ACCOUNT_STATUS_ACTIVE)

    def payment_failed(self, event: InvoicePaymentFailed) -> TransitionResult:
        return self._record_payment(event, PAYMENT_STATUS_FAILED, ACCOUNT_STATUS_PAST_DUE)

    def _record_payment(
        self,
        event: InvoiceEvent,
        payment_status: str,
        account_status: str,
    ) -> TransitionResult:
        account = self._account_by("subscription_id", event.subscription_id)

        payment = None
        if self.dedupe_payments:
            payment = self.store.find_payment(invoice_id=event.invoice_id, status=payment_status)
            if payment is not None:
                logger.info(
                    "Payment already recorded: invoice=%s status=%s (id=%s)",
                    event.invoice_id,
                    payment_status,
                    payment.id,
                )

        deduped = payment is not None
        if payment is None:
            payment = self.store.add_payment(
                invoice_id=event.invoice_id,
                user_id=account.id,
                subscription_id=event.subscription_id,
                customer_id=event.customer_id,
                amount=event.amount,
                currency=event.currency,
                status=payment_status,
                provider_event_id=event.event_id,
            )

        result = self._set(account.id, subscription_status=account_status)
        return TransitionResult(
            user_id=result.user_id,
            status=result.status,
            payment_id=payment.id,
            payment_deduped=deduped,
        )
