from datetime import timedelta
import asyncio
import pytest

from app.services.admin.admin_payout_services import AdminPayoutService
from app.utils.time_utils import to_iso
from tests.fake_supabase import StoreUnavailable
from tests.factories import FIXED_NOW, add_artisan, add_payment, add_user


@pytest.fixture
def ledger(fake_db):
    """Two artisans with paid, unpaid and already processed bookings"""
    first = add_artisan(fake_db, add_user(fake_db, "Kemi", "Ola")["id"], FIXED_NOW - timedelta(days=90))
    second = add_artisan(fake_db, add_user(fake_db, "Tunde", "Bello")["id"], FIXED_NOW - timedelta(days=90))

    rows = {
        "paid_a": add_payment(fake_db, first["id"], FIXED_NOW - timedelta(days=4), total="100.00", platform_fee="10.00"),
        "paid_b": add_payment(fake_db, second["id"], FIXED_NOW - timedelta(days=3), total="200.00", platform_fee="20.00"),
        "unpaid": add_payment(fake_db, first["id"], FIXED_NOW - timedelta(days=2), total="60.00", platform_fee="6.00", payment_status="pending"),
        "failed": add_payment(fake_db, second["id"], FIXED_NOW - timedelta(days=2), total="70.00", platform_fee="7.00", payment_status="failed"),
        "done": add_payment(fake_db, first["id"], FIXED_NOW - timedelta(days=30), total="500.00", platform_fee="50.00", payout_status="processed"),
    }
    return rows


def _row(fake_db, payment_id):
    return next(row for row in fake_db.tables["payments"] if row["id"] == payment_id)


class TestPendingPayouts:
    @pytest.mark.asyncio
    async def test_pending_total_is_net_of_fees(self, fake_db, clock, ledger):
        pending = await AdminPayoutService(fake_db, clock).get_pending_payouts()

        assert pending.total == 270.0
        assert pending.artisans == 2
        assert pending.next_payout_date == FIXED_NOW + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_nothing_pending(self, fake_db, clock):
        pending = await AdminPayoutService(fake_db, clock).get_pending_payouts()

        assert pending.total == 0.0
        assert pending.artisans == 0


class TestProcessPayouts:
    @pytest.mark.asyncio
    async def test_marks_only_paid_pending_records(self, fake_db, clock, ledger):
        result = await AdminPayoutService(fake_db, clock).process_pending_payouts()

        assert result.success is True
        assert result.processed == 2
        assert result.total == 0.0
        assert result.processed_at == FIXED_NOW

        for key in ("paid_a", "paid_b"):
            row = _row(fake_db, ledger[key]["id"])
            assert row["payout_status"] == "processed"
            assert row["processed_at"] == to_iso(FIXED_NOW)

        for key in ("unpaid", "failed"):
            row = _row(fake_db, ledger[key]["id"])
            assert row["payout_status"] == "pending"
            assert row["processed_at"] is None

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, fake_db, clock, ledger):
        service = AdminPayoutService(fake_db, clock)

        first = await service.process_pending_payouts()
        second = await service.process_pending_payouts()

        assert first.processed == 2
        assert second.processed == 0
        assert second.success is True

    @pytest.mark.asyncio
    async def test_overlapping_runs_process_each_record_once(self, fake_db, clock, ledger):
        service = AdminPayoutService(fake_db, clock)

        results = await asyncio.gather(service.process_pending_payouts(), service.process_pending_payouts())

        assert sum(result.processed for result in results) == 2

    @pytest.mark.asyncio
    async def test_newly_paid_record_is_picked_up_by_next_run(self, fake_db, clock, ledger):
        service = AdminPayoutService(fake_db, clock)
        await service.process_pending_payouts()

        _row(fake_db, ledger["unpaid"]["id"])["payment_status"] = "paid"
        result = await service.process_pending_payouts()

        assert result.processed == 1

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, fake_db, clock, ledger):
        fake_db.failing_tables.add("payments")

        with pytest.raises(StoreUnavailable):
            await AdminPayoutService(fake_db, clock).process_pending_payouts()


class TestRevenueSummary:
    @pytest.mark.asyncio
    async def test_all_time_paid_totals(self, fake_db, clock, ledger):
        summary = await AdminPayoutService(fake_db, clock).get_revenue_summary()

        assert summary.total_revenue == 800.0
        assert summary.commission_earned == 80.0
        assert summary.artisan_payouts == 720.0
