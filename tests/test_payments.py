"""
Platnosci przelewem i dopasowanie webhooka SePay do oczekujacej platnosci.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from app.domain.errors import NotFoundError, InvalidArgumentError
from app.domain.schemas import PaymentCreateIn, SepayWebhookIn
from app.services.payment_service import PaymentService, extract_payment_code


def _webhook(code: str, amount="100000", transaction_id=1, transfer_type="in") -> SepayWebhookIn:
    return SepayWebhookIn(
        id=transaction_id,
        gateway="MBBank",
        transactionDate="2025-12-13 10:30:00",
        content=f"CK {code} thanh toan",
        transferType=transfer_type,
        transferAmount=Decimal(amount),
        referenceCode="FT123",
    )


@pytest.fixture
def payments(db) -> PaymentService:
    return PaymentService(db)


@pytest.fixture
def order_payment(payments):
    return payments.create_payment(
        PaymentCreateIn(user_id="u1", amount=Decimal("100000"), order_id="O1")
    )


class TestPaymentCode:
    def test_code_found_in_noisy_transfer_content(self):
        assert extract_payment_code("MBVCB.1234.ck pay0a1b2c3d4e.CT tu") == "PAY0A1B2C3D4E"

    def test_no_code(self):
        assert extract_payment_code("PAYMENT for order") is None
        assert extract_payment_code("") is None


class TestCreatePayment:
    def test_created_pending_with_code_and_expiry(self, order_payment):
        assert order_payment.payment_code.startswith("PAY")
        assert len(order_payment.payment_code) == 13
        assert order_payment.status == "PENDING"
        assert order_payment.expired_at > order_payment.created_at

    def test_order_payment_requires_order_id(self, payments):
        with pytest.raises(InvalidArgumentError):
            payments.create_payment(PaymentCreateIn(user_id="u1", amount=Decimal("10")))

    def test_topup_without_order(self, payments):
        payment = payments.create_payment(
            PaymentCreateIn(user_id="u1", amount=Decimal("50000"), payment_type="topup")
        )
        assert payment.order_id is None

    def test_find_by_order(self, payments, order_payment):
        assert [p.payment_code for p in payments.find_by_order("O1")] == [order_payment.payment_code]
        assert payments.find_by_order("O2") == []


class TestSepayWebhook:
    def test_matching_transfer_completes_payment(self, payments, order_payment):
        result = payments.handle_sepay_webhook(_webhook(order_payment.payment_code))

        assert result["processed"] is True
        assert result["user_id"] == "u1"
        assert result["order_id"] == "O1"
        payment = payments.find_by_code(order_payment.payment_code)
        assert payment.status == "COMPLETED"
        assert payment.transaction_id == "1"
        assert payment.paid_at is not None

    def test_repeated_webhook_is_noop(self, payments, order_payment):
        payments.handle_sepay_webhook(_webhook(order_payment.payment_code, transaction_id=1))

        again = payments.handle_sepay_webhook(_webhook(order_payment.payment_code, transaction_id=2))

        assert again["processed"] is False
        #zostaje pierwsza transakcja
        assert payments.find_by_code(order_payment.payment_code).transaction_id == "1"

    def test_outgoing_transfer_is_ignored(self, payments, order_payment):
        result = payments.handle_sepay_webhook(
            _webhook(order_payment.payment_code, transfer_type="out")
        )

        assert result["processed"] is False
        assert payments.find_by_code(order_payment.payment_code).status == "PENDING"

    def test_underpaid_transfer_is_rejected(self, payments, order_payment):
        with pytest.raises(InvalidArgumentError):
            payments.handle_sepay_webhook(_webhook(order_payment.payment_code, amount="99999"))

        assert payments.find_by_code(order_payment.payment_code).status == "PENDING"

    def test_unknown_code_is_not_found(self, payments):
        with pytest.raises(NotFoundError):
            payments.handle_sepay_webhook(_webhook("PAY0000000000"))

    def test_content_without_code_is_rejected(self, payments):
        payload = _webhook("nothing")
        with pytest.raises(InvalidArgumentError):
            payments.handle_sepay_webhook(payload)

    def test_expired_payment_is_not_completed(self, payments, order_payment, db):
        order_payment.expired_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        db.commit()

        assert payments.check_payment_status(order_payment.payment_code).status == "EXPIRED"
        with pytest.raises(InvalidArgumentError):
            payments.handle_sepay_webhook(_webhook(order_payment.payment_code))


class TestPaymentsApi:
    def _create(self, test_client, **overrides):
        body = {"user_id": "u1", "amount": "100000", "order_id": "O1"}
        body.update(overrides)
        return test_client.post("/payments", json=body)

    def test_create_and_get(self, test_client):
        response = self._create(test_client)

        assert response.status_code == 201
        code = response.json()["payment_code"]
        assert test_client.get(f"/payments/{code}").json()["status"] == "PENDING"
        assert test_client.get(f"/payments/check/{code}").json()["status"] == "PENDING"
        assert [p["payment_code"] for p in test_client.get("/payments/order/O1").json()] == [code]

    def test_unknown_code_is_404(self, test_client):
        assert test_client.get("/payments/PAY0000000000").status_code == 404
        assert test_client.get("/payments/check/PAY0000000000").status_code == 404

    def test_webhook_completes_once_and_notifies_owner(self, test_client):
        code = self._create(test_client).json()["payment_code"]
        body = {
            "id": 77,
            "gateway": "MBBank",
            "content": f"CK {code}",
            "transferType": "in",
            "transferAmount": 100000,
        }
        registry = test_client.app.state.connections

        with patch.object(registry, "send_to_user", new=AsyncMock(return_value=True)) as send:
            first = test_client.post("/payments/webhook/sepay", json=body)
            second = test_client.post("/payments/webhook/sepay", json=body)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["data"]["processed"] is True
        assert second.json()["data"]["processed"] is False
        send.assert_awaited_once()
        assert send.await_args.args[0] == "u1"
        assert send.await_args.args[1]["paymentCode"] == code
        assert test_client.get(f"/payments/check/{code}").json()["status"] == "COMPLETED"

    def test_webhook_error_is_reported_with_200(self, test_client):
        response = test_client.post(
            "/payments/webhook/sepay",
            json={"id": 1, "content": "CK PAY0000000000", "transferAmount": 10},
        )

        assert response.status_code == 200
        assert response.json()["success"] is False
