import json

import stripe

from subsync.core.errors import SignatureVerificationFailed


def construct_event(payload: bytes, signature: str | None, secret: str | None) -> dict:
    """
    Stripe signature 검증 + event 파싱.
    반드시 raw body(bytes)로 검증해야 한다. 파싱 후 재직렬화하면 서명이 깨진다.
    HMAC 계산과 constant-time 비교는 stripe 라이브러리에 맡긴다.
    실패 시 SignatureVerificationFailed.
    """
    if not signature:
        raise SignatureVerificationFailed("Missing Stripe-Signature header")
    if not secret:
        raise SignatureVerificationFailed("Webhook signing secret is not configured")

    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SignatureVerificationFailed("Payload is not valid UTF-8") from e

    try:
        stripe.WebhookSignature.verify_header(
            body, signature, secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
    except stripe.SignatureVerificationError as e:
        raise SignatureVerificationFailed(str(e)) from e

    try:
        event = json.loads(body)
    except ValueError as e:
        raise SignatureVerificationFailed(f"Invalid payload: {e}") from e

    if not isinstance(event, dict) or "type" not in event:
        raise SignatureVerificationFailed("Invalid payload: not a Stripe event")
    return event
