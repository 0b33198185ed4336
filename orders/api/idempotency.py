"""
Idempotency-Key support for mutating endpoints.
"""
import hashlib
import json
import logging
from functools import wraps

from django.db import IntegrityError, transaction
from django.http import JsonResponse

from orders.domain.exceptions import Conflict
from orders.infra.models import IdempotencyKey

logger = logging.getLogger(__name__)


def create_request_hash(body: bytes) -> str:
    """Create hash of request for deduplication."""
    try:
        content = json.dumps(json.loads(body or b"{}"), sort_keys=True)
    except ValueError:
        content = body.decode("utf-8", errors="replace")
    return hashlib.sha256(content.encode()).hexdigest()


def idempotent(operation: str):
    """
    Replay the stored response when the same caller repeats a request with
    the same ``Idempotency-Key``; reject the key when the body differs.

    Requires ``request.identity`` (see ``orders.api.auth.require_identity``).
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            idempotency_key = request.headers.get("Idempotency-Key")
            identity = getattr(request, "identity", None)
            if not idempotency_key or identity is None:
                return view(request, *args, **kwargs)

            request_hash = create_request_hash(request.body)
            existing = IdempotencyKey.objects.filter(
                key=idempotency_key,
                user_id=identity.user_id,
                operation=operation,
            ).first()

            if existing:
                if existing.request_hash != request_hash:
                    logger.warning(
                        "idempotency_key_conflict",
                        extra={
                            "request_id": getattr(request, "request_id", None),
                            "idempotency_key": idempotency_key[:8] + "...",
                            "operation": operation,
                        },
                    )
                    raise Conflict("Idempotency key already used with different request")

                logger.info(
                    "idempotent_request_cached",
                    extra={
                        "request_id": getattr(request, "request_id", None),
                        "idempotency_key": idempotency_key[:8] + "...",
                        "operation": operation,
                    },
                )
                return JsonResponse(existing.response_payload, status=existing.status_code, safe=False)

            response = view(request, *args, **kwargs)

            if response.status_code < 400:
                try:
                    with transaction.atomic():
                        IdempotencyKey.objects.create(
                            key=idempotency_key,
                            user_id=identity.user_id,
                            operation=operation,
                            request_hash=request_hash,
                            status_code=response.status_code,
                            response_payload=json.loads(response.content),
                        )
                except IntegrityError:
                    logger.warning(
                        "idempotency_key_race",
                        extra={"idempotency_key": idempotency_key[:8] + "...", "operation": operation},
                    )

            return response
        return wrapper
    return decorator
