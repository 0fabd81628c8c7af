from __future__ import annotations

import argparse

from subsync.core.account_status import ACCOUNT_STATUS_TRIAL, ACCOUNT_STATUSES
from subsync.db.session import get_session_factory
from subsync.services.record_store import RecordStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Insert an account for local webhook testing")
    parser.add_argument("user_id")
    parser.add_argument("--customer-id", default=None)
    parser.add_argument("--subscription-id", default=None)
    parser.add_argument("--status", default=ACCOUNT_STATUS_TRIAL, choices=sorted(ACCOUNT_STATUSES))
    args = parser.parse_args(argv)

    store = RecordStore(get_session_factory())
    existing = store.get_account(args.user_id)
    if existing:
        print(f"⏭️ Account already exists: {existing.id} ({existing.subscription_status})")
        return 0

    account = store.create_account(
        args.user_id,
        subscription_status=args.status,
        customer_id=args.customer_id,
        subscription_id=args.subscription_id,
    )
    print(f"✅ seeded account: {account.id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
