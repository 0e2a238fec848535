"""Integration tests for the Flutterwave webhook."""

import pytest
from services.communications_service.models import Notification, NotificationType
from services.enrollments_service.models import Enrollment, PaymentSource, enrollment_id_for
from services.payments_service.models import Payment, PaymentStatus
from services.payments_service.routers.webhooks import (
    INTEGRITY_MISMATCH_REASON,
    SPRINT_UNAVAILABLE_REASON,
)
from services.sprints_service.services.sprint_store import archive_sprint
from sqlalchemy import select
from tests.conftest import make_admin_user
from tests.factories import PaymentFactory, SprintFactory

WEBHOOK_URL = "/payments/webhooks/flutterwave"


def _charge_completed(payment, **data_overrides):
    data = {
        "id": 48213,
        "tx_ref": payment.id,
        "status": "successful",
        "amount": payment.amount,
        "currency": payment.currency,
    }
    data.update(data_overrides)
    return {"event": "charge.completed", "data": data}


async def _paid_sprint_with_payment(db, **payment_overrides):
    sprint = SprintFactory.live(price=5000)
    payment = PaymentFactory.create(
        sprint_id=sprint.id, referral_source="newsletter", **payment_overrides
    )
    db.add_all([sprint, payment])
    await db.commit()
    return sprint, payment


@pytest.mark.asyncio
@pytest.mark.integration
async def test_webhook_rejects_bad_signature(payments_client, db_session):
    _, payment = await _paid_sprint_with_payment(db_session)

    response = await payments_client.post(
        WEBHOOK_URL, json=_charge_completed(payment), headers={"verif-hash": "wrong"}
    )

    assert response.status_code == 401
    refreshed = await db_session.get(Payment, payment.id, populate_existing=True)
    assert refreshed.status == PaymentStatus.INITIATED


@pytest.mark.asyncio
@pytest.mark.integration
async def test_webhook_ignores_other_events(payments_client, webhook_headers):
    response = await payments_client.post(
        WEBHOOK_URL,
        json={"event": "transfer.completed", "data": {"status": "successful"}},
        headers=webhook_headers,
    )

    assert response.status_code == 200
    assert response.text == "Event received but ignored."


@pytest.mark.asyncio
@pytest.mark.integration
async def test_webhook_for_unknown_reference_is_not_found(payments_client, webhook_headers):
    response = await payments_client.post(
        WEBHOOK_URL,
        json={
            "event": "charge.completed",
            "data": {"tx_ref": "vec-missing", "status": "successful", "amount": 1},
        },
        headers=webhook_headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_webhook_amount_mismatch_fails_payment(
    payments_client, db_session, webhook_headers
):
    sprint, payment = await _paid_sprint_with_payment(db_session)

    response = await payments_client.post(
        WEBHOOK_URL, json=_charge_completed(payment, amount=100), headers=webhook_headers
    )

    assert response.status_code == 400
    refreshed = await db_session.get(Payment, payment.id, populate_existing=True)
    assert refreshed.status == PaymentStatus.FAILED
    assert refreshed.failure_reason == INTEGRITY_MISMATCH_REASON
    assert await db_session.get(Enrollment, enrollment_id_for(payment.user_id, sprint.id)) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_webhook_currency_mismatch_fails_payment(
    payments_client, db_session, webhook_headers
):
    _, payment = await _paid_sprint_with_payment(db_session)

    response = await payments_client.post(
        WEBHOOK_URL, json=_charge_completed(payment, currency="USD"), headers=webhook_headers
    )

    assert response.status_code == 400
    refreshed = await db_session.get(Payment, payment.id, populate_existing=True)
    assert refreshed.status == PaymentStatus.FAILED


@pytest.mark.asyncio
@pytest.mark.integration
async def test_successful_charge_enrolls_and_notifies(
    payments_client, db_session, webhook_headers
):
    sprint, payment = await _paid_sprint_with_payment(db_session)

    response = await payments_client.post(
        WEBHOOK_URL, json=_charge_completed(payment), headers=webhook_headers
    )

    assert response.status_code == 200
    assert response.text == "Webhook Processed Successfully"

    refreshed = await db_session.get(Payment, payment.id, populate_existing=True)
    assert refreshed.status == PaymentStatus.SUCCESS
    assert refreshed.provider == "flutterwave"
    assert refreshed.provider_transaction_id == "48213"
    assert refreshed.paid_at is not None

    enrollment = await db_session.get(
        Enrollment, enrollment_id_for(payment.user_id, sprint.id), populate_existing=True
    )
    assert enrollment.price_paid == 5000
    assert enrollment.currency == "NGN"
    assert enrollment.payment_source == PaymentSource.DIRECT
    assert enrollment.referral_source == "newsletter"
    assert len(enrollment.progress) == sprint.duration

    result = await db_session.execute(
        select(Notification).where(Notification.user_id == payment.user_id)
    )
    (notification,) = result.scalars().all()
    assert notification.type == NotificationType.PAYMENT_SUCCESS
    assert notification.title == "Growth Path Authorized"
    assert notification.action_url == f"/participant/sprint/{enrollment.id}?day=1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_replayed_webhook_is_acknowledged_once(
    payments_client, db_session, webhook_headers
):
    _, payment = await _paid_sprint_with_payment(db_session)
    body = _charge_completed(payment)

    first = await payments_client.post(WEBHOOK_URL, json=body, headers=webhook_headers)
    second = await payments_client.post(WEBHOOK_URL, json=body, headers=webhook_headers)

    assert first.text == "Webhook Processed Successfully"
    assert second.status_code == 200
    assert second.text == "Already Processed"

    enrollments = (await db_session.execute(select(Enrollment))).scalars().all()
    assert len(enrollments) == 1
    notifications = (await db_session.execute(select(Notification))).scalars().all()
    assert len(notifications) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_charge_for_archived_sprint_records_failure(
    payments_client, db_session, webhook_headers
):
    sprint, payment = await _paid_sprint_with_payment(db_session)
    await archive_sprint(db_session, make_admin_user(), sprint.id)
    body = _charge_completed(payment)

    first = await payments_client.post(WEBHOOK_URL, json=body, headers=webhook_headers)
    second = await payments_client.post(WEBHOOK_URL, json=body, headers=webhook_headers)

    assert first.status_code == 200
    assert first.text == "Sprint Unavailable"
    assert second.status_code == 200

    refreshed = await db_session.get(Payment, payment.id, populate_existing=True)
    assert refreshed.status == PaymentStatus.FAILED
    assert refreshed.failure_reason == SPRINT_UNAVAILABLE_REASON
    assert refreshed.provider_transaction_id == "48213"
    assert refreshed.paid_at is None
    assert await db_session.get(Enrollment, enrollment_id_for(payment.user_id, sprint.id)) is None
