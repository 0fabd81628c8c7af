from fastapi import APIRouter, Depends, HTTPException

from subsync.api.deps import record_store
from subsync.api.v1.schemas.account import SubscriptionStatusOut
from subsync.services.record_store import RecordStore

router = APIRouter(tags=["subscription"])


@router.get(
    "/subscription-status/{user_id}",
    response_model=SubscriptionStatusOut,
    response_model_by_alias=True,
)
def get_subscription_status(user_id: str, store: RecordStore = Depends(record_store)):  # noqa: B008
    account = store.get_account(user_id)
    if account is None:
        raise HTTPException(status_code=404, detail="User not found")

    return SubscriptionStatusOut(
        subscription_status=account.subscription_status,
        subscription_id=account.subscription_id,
        current_period_end=account.current_period_end,
        trial_end_date=account.trial_end_date,
    )
