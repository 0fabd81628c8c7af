from typing import Final

ACCOUNT_STATUS_TRIAL: Final[str] = "trial"
ACCOUNT_STATUS_ACTIVE: Final[str] = "active"
ACCOUNT_STATUS_INACTIVE: Final[str] = "inactive"
ACCOUNT_STATUS_PAST_DUE: Final[str] = "past_due"
ACCOUNT_STATUS_EXPIRED: Final[str] = "expired"

ACCOUNT_STATUSES: Final[set[str]] = {
    ACCOUNT_STATUS_TRIAL,
    ACCOUNT_STATUS_ACTIVE,
    ACCOUNT_STATUS_INACTIVE,
    ACCOUNT_STATUS_PAST_DUE,
    ACCOUNT_STATUS_EXPIRED,
}

PAYMENT_STATUS_SUCCEEDED: Final[str] = "succeeded"
PAYMENT_STATUS_FAILED: Final[str] = "failed"
