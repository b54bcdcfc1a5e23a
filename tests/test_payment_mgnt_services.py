from decimal import Decimal
from types import SimpleNamespace
from datetime import timedelta
import pytest

from app.configs.stripe_config import StripeConfig
from app.custom_error import ForbiddenError, NotFoundError, ValidationError
from app.models.payment_models import BookingCreate, BookingStatus, PaymentStatus, ReviewCreate
from app.services.payment_mgnt_services import PaymentService
from tests.factories import FIXED_NOW, add_artisan, add_payment, add_user, new_id


@pytest.fixture
def customer(fake_db):
    return add_user(fake_db, "Funke", "Akin", clerk_user_id="user_funke")


@pytest.fixture
def artisan(fake_db):
    user = add_user(fake_db, "Sola", "Ade", role="artisan", clerk_user_id="user_sola")
    return add_artisan(fake_db, user["id"], FIXED_NOW - timedelta(days=30), hourly_rate=40)


def _booking(artisan_id: str, hours: str = "2.5") -> BookingCreate:
    return BookingCreate(artisan_id=artisan_id, service="Plumbing", date="2024-06-20", time="09:00", location="Ikeja", hours=Decimal(hours))


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_priced_with_current_commission(self, fake_db, clock, customer, artisan):
        record = await PaymentService(fake_db, clock).create_booking("user_funke", _booking(artisan["id"]))

        assert record.customer_id == customer["id"]
        assert record.subtotal == Decimal("100.00")
        assert record.platform_fee == Decimal("15.00")
        assert record.total == Decimal("100.00")
        assert record.status == BookingStatus.PENDING
        assert record.payment_status == PaymentStatus.PENDING
        assert record.created_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_uses_saved_default_rate(self, fake_db, clock, customer, artisan):
        fake_db.seed("platform_settings", {"key": "commission", "value": {"default_rate": 20}, "updated_at": FIXED_NOW.isoformat()})

        record = await PaymentService(fake_db, clock).create_booking("user_funke", _booking(artisan["id"], hours="1"))

        assert record.platform_fee == Decimal("8.00")

    @pytest.mark.asyncio
    async def test_artisan_must_be_approved_and_available(self, fake_db, clock, customer):
        pending = add_artisan(fake_db, new_id(), FIXED_NOW, status="pending")
        busy = add_artisan(fake_db, new_id(), FIXED_NOW, is_available=False)
        service = PaymentService(fake_db, clock)

        for artisan_row in (pending, busy):
            with pytest.raises(ValidationError):
                await service.create_booking("user_funke", _booking(artisan_row["id"]))
        assert "payments" not in fake_db.tables

    @pytest.mark.asyncio
    async def test_unknown_and_malformed_artisan(self, fake_db, clock, customer):
        service = PaymentService(fake_db, clock)

        with pytest.raises(NotFoundError):
            await service.create_booking("user_funke", _booking(new_id()))
        with pytest.raises(ValidationError):
            await service.create_booking("user_funke", _booking("42"))


class TestCheckout:
    @pytest.mark.asyncio
    async def test_checkout_session_carries_payment_id(self, fake_db, clock, customer, artisan, monkeypatch):
        captured = {}

        def fake_create_checkout_session(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")

        monkeypatch.setattr(StripeConfig, "create_checkout_session", staticmethod(fake_create_checkout_session))
        payment = add_payment(
            fake_db, artisan["id"], FIXED_NOW, customer_id=customer["id"], total="100.00", status="pending", payment_status="pending"
        )

        session = await PaymentService(fake_db, clock).create_checkout_session("user_funke", payment["id"])

        assert session.session_id == "cs_test_123"
        assert captured["amount_cents"] == 10000
        assert captured["metadata"]["payment_id"] == payment["id"]
        assert fake_db.tables["payments"][0]["stripe_session_id"] == "cs_test_123"

    @pytest.mark.asyncio
    async def test_only_the_booking_customer_can_pay(self, fake_db, clock, customer, artisan):
        add_user(fake_db, "Other", "Person", clerk_user_id="user_other")
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, customer_id=customer["id"], payment_status="pending")

        with pytest.raises(ForbiddenError):
            await PaymentService(fake_db, clock).create_checkout_session("user_other", payment["id"])

    @pytest.mark.asyncio
    async def test_paid_booking_cannot_be_paid_again(self, fake_db, clock, customer, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, customer_id=customer["id"], payment_status="paid")

        with pytest.raises(ValidationError):
            await PaymentService(fake_db, clock).create_checkout_session("user_funke", payment["id"])


class TestPaymentSettlement:
    @pytest.mark.asyncio
    async def test_paid_exactly_once(self, fake_db, clock, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, payment_status="pending")
        service = PaymentService(fake_db, clock)

        assert await service.mark_payment_paid(payment["id"], "pi_123") is True
        assert await service.mark_payment_paid(payment["id"], "pi_456") is False
        assert await service.mark_payment_failed(payment["id"]) is False

        row = fake_db.tables["payments"][0]
        assert row["payment_status"] == "paid"
        assert row["transaction_id"] == "pi_123"

    @pytest.mark.asyncio
    async def test_failed_payment_stays_failed(self, fake_db, clock, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, payment_status="pending")
        service = PaymentService(fake_db, clock)

        assert await service.mark_payment_failed(payment["id"]) is True
        assert await service.mark_payment_paid(payment["id"]) is False
        assert fake_db.tables["payments"][0]["payment_status"] == "failed"

    @pytest.mark.asyncio
    async def test_unknown_payment(self, fake_db, clock):
        with pytest.raises(NotFoundError):
            await PaymentService(fake_db, clock).mark_payment_paid(new_id())


class TestBookingLifecycle:
    @pytest.mark.asyncio
    async def test_artisan_moves_booking_forward(self, fake_db, clock, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, status="pending")
        service = PaymentService(fake_db, clock)

        started = await service.update_booking_status(payment["id"], BookingStatus.IN_PROGRESS, artisan_id=artisan["id"])
        finished = await service.update_booking_status(payment["id"], BookingStatus.COMPLETED, artisan_id=artisan["id"])

        assert started.status == BookingStatus.IN_PROGRESS
        assert finished.status == BookingStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_terminal_states_do_not_move(self, fake_db, clock, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, status="completed")

        with pytest.raises(ValidationError):
            await PaymentService(fake_db, clock).update_booking_status(payment["id"], BookingStatus.CANCELLED)

    @pytest.mark.asyncio
    async def test_other_artisans_booking(self, fake_db, clock, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, status="pending")

        with pytest.raises(ForbiddenError):
            await PaymentService(fake_db, clock).update_booking_status(payment["id"], BookingStatus.IN_PROGRESS, artisan_id=new_id())


class TestReviews:
    @pytest.mark.asyncio
    async def test_customer_reviews_completed_booking(self, fake_db, clock, customer, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, customer_id=customer["id"], status="completed")

        record = await PaymentService(fake_db, clock).submit_review("user_funke", payment["id"], ReviewCreate(rating=4.5, review="Tidy work"))

        assert record.rating == 4.5
        assert record.review == "Tidy work"

    @pytest.mark.asyncio
    async def test_open_booking_cannot_be_reviewed(self, fake_db, clock, customer, artisan):
        payment = add_payment(fake_db, artisan["id"], FIXED_NOW, customer_id=customer["id"], status="in_progress")

        with pytest.raises(ValidationError):
            await PaymentService(fake_db, clock).submit_review("user_funke", payment["id"], ReviewCreate(rating=5))
