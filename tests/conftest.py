import hashlib
import hmac
import json
import os
import time
from itertools import count

import pytest

os.environ.setdefault("ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from subsync.core.config import Settings  # noqa: E402
from subsync.db.init_db import create_all  # noqa: E402
from subsync.db.session import make_session_factory  # noqa: E402
from subsync.main import create_app  # noqa: E402
from subsync.services.record_store import RecordStore  # noqa: E402

WEBHOOK_SECRET = "whsec_test_secret"

_event_ids = count(1)


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header value (t=<ts>,v1=<hmac-sha256>)."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def stripe_event(event_type: str, obj: dict, event_id: str | None = None) -> dict:
    return {
        "id": event_id or f"evt_test_{next(_event_ids)}",
        "object": "event",
        "type": event_type,
        "created": int(time.time()),
        "livemode": False,
        "data": {"object": obj},
    }


# -----------------------------
# DB / store
# -----------------------------
@pytest.fixture
def engine():
    # in-memory sqlite, 스레드풀에서도 같은 커넥션을 쓰도록 StaticPool
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    return RecordStore(make_session_factory(engine))


# -----------------------------
# App
# -----------------------------
@pytest.fixture
def settings():
    return Settings(
        env="test",
        database_url_override="sqlite://",
        stripe_webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def post_event(client):
    """Sign and POST a Stripe event to /webhook."""

    def _post(event: dict, *, signature: str | None = "sign", body: bytes | None = None):
        payload = body if body is not None else json.dumps(event).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if signature == "sign":
            headers["Stripe-Signature"] = sign_payload(payload)
        elif signature is not None:
            headers["Stripe-Signature"] = signature
        return client.post("/webhook", content=payload, headers=headers)

    return _post
