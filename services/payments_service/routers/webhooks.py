"""Flutterwave webhook: confirms a sprint purchase and enrolls the buyer."""

import hmac
import json
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.communications_service.models import NotificationType
from services.communications_service.services.notifications import notify
from services.enrollments_service.models import PaymentSource
from services.enrollments_service.services.progress import (
    EnrollmentCommercial,
    enroll_participant,
    enrollment_action_url,
)
from services.payments_service.models import Payment, PaymentStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["payments"])
logger = get_logger(__name__)

INTEGRITY_MISMATCH_REASON = "Integrity mismatch detected on webhook"
SPRINT_UNAVAILABLE_REASON = "Sprint unavailable at confirmation"


def _verify_flutterwave_hash(signature: Optional[str]) -> bool:
    secret = get_settings().FLW_SECRET_HASH
    if not signature or not secret:
        return False
    return hmac.compare_digest(signature.encode("utf-8"), secret.encode("utf-8"))


def _amount_matches(received, expected: float) -> bool:
    try:
        return float(received) == float(expected)
    except (TypeError, ValueError):
        return False


@router.post("/webhooks/flutterwave")
async def flutterwave_webhook(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
):
    """
    Flutterwave webhook endpoint (no auth; verified by the verif-hash header).

    Replays are safe: a payment already marked success is acknowledged and
    left untouched.
    """
    if not _verify_flutterwave_hash(request.headers.get("verif-hash")):
        logger.warning("Rejected Flutterwave webhook with invalid verif-hash")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )

    raw = await request.body()
    try:
        payload = json.loads(raw.decode("utf-8") or "{}")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed payload"
        )

    event = payload.get("event")
    data = payload.get("data") or {}
    if event != "charge.completed" or data.get("status") != "successful":
        return PlainTextResponse("Event received but ignored.")

    tx_ref = data.get("tx_ref")
    if not tx_ref:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing tx_ref"
        )

    result = await db.execute(
        select(Payment)
        .where(Payment.id == tx_ref)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    payment = result.scalar_one_or_none()
    if not payment:
        logger.warning("Webhook received for unknown payment reference %s", tx_ref)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Payment record not found"
        )

    if payment.status == PaymentStatus.SUCCESS:
        logger.info("Webhook for %s skipped - payment already processed", tx_ref)
        return PlainTextResponse("Already Processed")

    currency = data.get("currency")
    if not _amount_matches(data.get("amount"), payment.amount) or currency != payment.currency:
        payment.status = PaymentStatus.FAILED
        payment.failure_reason = INTEGRITY_MISMATCH_REASON
        await db.commit()
        logger.error(
            "Integrity mismatch on payment %s: got %s %s, expected %s %s",
            tx_ref,
            data.get("amount"),
            currency,
            payment.amount,
            payment.currency,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Integrity mismatch"
        )

    # Payment status and the enrollment write land in one commit
    payment.status = PaymentStatus.SUCCESS
    payment.paid_at = utc_now()
    payment.provider = "flutterwave"
    flw_id = data.get("id")
    payment.provider_transaction_id = str(flw_id) if flw_id is not None else None

    try:
        enrollment, _ = await enroll_participant(
            db,
            payment.user_id,
            payment.sprint_id,
            EnrollmentCommercial(
                price_paid=int(payment.amount),
                currency=payment.currency,
                payment_source=PaymentSource.DIRECT,
                referral_source=payment.referral_source,
            ),
            commit=False,
        )
    except HTTPException as e:
        if e.status_code != status.HTTP_409_CONFLICT:
            raise
        # Sprint was archived or unpublished after checkout; record the outcome
        payment.status = PaymentStatus.FAILED
        payment.paid_at = None
        payment.failure_reason = SPRINT_UNAVAILABLE_REASON
        await db.commit()
        logger.error(
            "Payment %s captured but sprint %s is closed: %s",
            tx_ref,
            payment.sprint_id,
            e.detail,
        )
        return PlainTextResponse("Sprint Unavailable")
    await db.commit()
    logger.info(
        "Payment %s confirmed; enrollment %s active", tx_ref, enrollment.id
    )

    await notify(
        db,
        user_id=payment.user_id,
        type=NotificationType.PAYMENT_SUCCESS,
        title="Growth Path Authorized",
        body=f"Registry verified. Your journey into '{payment.sprint_id}' has begun.",
        action_url=enrollment_action_url(enrollment.id, 1),
    )
    return PlainTextResponse("Webhook Processed Successfully")
