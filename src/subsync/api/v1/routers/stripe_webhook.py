import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from subsync.api.deps import app_settings, event_router
from subsync.core.billing_events import parse_event
from subsync.core.config import Settings
from subsync.core.errors import SignatureVerificationFailed
from subsync.integrations.stripe.webhook import construct_event
from subsync.services.event_router import EventRouter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stripe"])


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    settings: Settings = Depends(app_settings),  # noqa: B008
    router_: EventRouter = Depends(event_router),  # noqa: B008
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
):
    # raw bytes 그대로 (JSON 파싱 전에 검증해야 함)
    payload = await request.body()

    # 1) Verify + parse
    try:
        raw = construct_event(payload, stripe_signature, settings.webhook_secret)
    except SignatureVerificationFailed as e:
        logger.warning("Webhook signature verification failed: %s", e)
        return PlainTextResponse(f"Webhook Error: {e}", status_code=400)

    # 2) Dispatch. 처리 끝난 뒤에 응답한다 (fire-and-forget 아님)
    try:
        event = parse_event(raw)
        result = await run_in_threadpool(router_.dispatch, event)
    except Exception as e:
        # 5xx면 Stripe가 재전송한다
        logger.exception("Webhook handler failed for %s (%s)", raw.get("type"), raw.get("id"))
        return JSONResponse({"error": str(e)}, status_code=500)

    logger.debug("Webhook %s handled: %s", result.event_id, result.outcome)
    return {"received": True}
