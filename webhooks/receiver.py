"""
Webhook Receiver

FastAPI routes that accept SocialBu callbacks, verify the optional HMAC
signature and turn valid bodies into PostStatusChanged / AccountStatusChanged
events.
"""

import hashlib
import hmac
import json
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from utils.logger import get_logger
from webhooks.events import AccountStatusChanged, EventDispatcher, PostStatusChanged
from webhooks.payload import WebhookPayload

logger = get_logger(__name__)

SIGNATURE_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Check a signature header against the raw body.

    The header may carry the bare hex digest or a ``sha256=`` prefixed one.
    """
    if not signature:
        return False
    provided = signature.strip()
    if provided.startswith(SIGNATURE_PREFIX):
        provided = provided[len(SIGNATURE_PREFIX):]
    expected = compute_signature(body, secret)
    return hmac.compare_digest(expected, provided.lower())


def _invalid_payload() -> JSONResponse:
    return JSONResponse({"error": "Invalid payload"}, status_code=400)


def _parse_payload(body: bytes) -> Optional[WebhookPayload]:
    try:
        decoded = json.loads(body or b"null")
    except ValueError:
        return None
    if not isinstance(decoded, dict):
        return None
    return WebhookPayload.from_dict(decoded)


def create_webhook_router(
    dispatcher: EventDispatcher,
    secret: Optional[str] = None,
    prefix: str = settings.SOCIALBU_WEBHOOKS_PREFIX
) -> APIRouter:
    """
    Build the webhook routes.

    Args:
        dispatcher: Receives the events built from valid deliveries.
        secret: Shared secret; when set, every request must be signed.
        prefix: URL prefix, e.g. "webhooks/socialbu".

    Returns:
        APIRouter exposing POST {prefix}/post and POST {prefix}/account.
    """
    path = prefix.strip("/")
    router = APIRouter(prefix=f"/{path}" if path else "", tags=["socialbu-webhooks"])

    async def read_verified_payload(request: Request):
        body = await request.body()
        if secret and not verify_signature(body, request.headers.get(settings.WEBHOOK_SIGNATURE_HEADER), secret):
            logger.warning(f"Rejected webhook with missing or invalid signature: {request.url.path}")
            return None, JSONResponse({"error": "Invalid signature"}, status_code=403)
        payload = _parse_payload(body)
        if payload is None:
            return None, _invalid_payload()
        return payload, None

    @router.post("/post", name="socialbu.webhooks.post")
    async def handle_post(request: Request):
        payload, error = await read_verified_payload(request)
        if error is not None:
            return error

        post_id, account_id, status = payload.post_id, payload.account_id, payload.status
        if post_id is None or account_id is None or status is None:
            logger.warning(f"Post webhook missing required fields: {payload.data}")
            return _invalid_payload()

        logger.info(f"Post {post_id} on account {account_id} changed status to {status}")
        dispatcher.dispatch(PostStatusChanged(
            post_id=post_id,
            account_id=account_id,
            status=status,
            payload=payload.data,
        ))
        return {"received": True}

    @router.post("/account", name="socialbu.webhooks.account")
    async def handle_account(request: Request):
        payload, error = await read_verified_payload(request)
        if error is not None:
            return error

        account_id, action = payload.account_id, payload.account_action
        if account_id is None or action is None:
            logger.warning(f"Account webhook missing required fields: {payload.data}")
            return _invalid_payload()

        logger.info(f"Account {account_id} ({payload.account_type}) action: {action}")
        dispatcher.dispatch(AccountStatusChanged(
            account_id=account_id,
            account_type=payload.account_type,
            account_name=payload.account_name,
            action=action,
            payload=payload.data,
        ))
        return {"received": True}

    return router


def create_app(
    dispatcher: Optional[EventDispatcher] = None,
    secret: Optional[str] = None,
    prefix: Optional[str] = None
) -> FastAPI:
    """Build a standalone FastAPI app serving the webhook routes."""
    dispatcher = dispatcher or EventDispatcher()
    app = FastAPI(title="SocialBu Webhooks")
    app.state.dispatcher = dispatcher
    app.include_router(create_webhook_router(
        dispatcher,
        secret=secret,
        prefix=prefix if prefix is not None else settings.SOCIALBU_WEBHOOKS_PREFIX,
    ))
    return app
