"""
Tests para la capa de servicios.
"""

import pytest
from sqlalchemy import select

from app.adapters import ProcessorDispatcher
from app.db.models import Vendor
from app.db.repositories import CancellationRepository
from app.services import CancellationService, OutcomeRecorder, VendorService
from app.utils.exceptions import (
    CancellationServiceError,
    NotFoundError,
    UpstreamProcessorError,
)


class TestVendorResolver:
    """Tests para VendorService.resolve."""

    @pytest.mark.asyncio
    async def test_resolve_normalizes_processor(self, test_session, make_vendor, cipher):
        await make_vendor("v1", "  Stripe ", credential="sk_test_abc")

        config = await VendorService(test_session, cipher).resolve("v1")

        assert config.processor == "stripe"
        assert config.credential is not None
        assert not config.credential_is_plaintext
        assert config.company_name == "Company v1"

    @pytest.mark.asyncio
    async def test_resolve_empty_processor(self, test_session, make_vendor, cipher):
        await make_vendor("v2", "")

        config = await VendorService(test_session, cipher).resolve("v2")

        assert config.processor is None
        assert config.credential is None

    @pytest.mark.asyncio
    async def test_resolve_flags_plaintext_credential(self, test_session, make_vendor, cipher):
        await make_vendor("v1", "stripe", credential="sk_live_plain", encrypt=False)

        config = await VendorService(test_session, cipher).resolve("v1")

        assert config.credential is None
        assert config.credential_is_plaintext

    @pytest.mark.asyncio
    async def test_resolve_unknown_vendor(self, test_session, cipher):
        with pytest.raises(NotFoundError) as exc_info:
            await VendorService(test_session, cipher).resolve("missing")

        assert exc_info.value.vendor_key == "missing"

    @pytest.mark.asyncio
    async def test_config_repr_hides_credential(self, test_session, make_vendor, cipher):
        await make_vendor("v1", "stripe", credential="sk_test_abc")

        config = await VendorService(test_session, cipher).resolve("v1")

        assert "encryptedData" not in repr(config)


class TestCredentialMigration:
    """Tests para VendorService.encrypt_plaintext_credentials."""

    @pytest.mark.asyncio
    async def test_encrypts_only_plaintext(self, test_session, make_vendor, cipher):
        await make_vendor("legacy", "stripe", credential=" sk_live_plain ", encrypt=False)
        await make_vendor("modern", "paddle", credential="pdl_token", paddle_vendor_id="1")
        await make_vendor("blank", "stripe", credential="   ", encrypt=False)
        await make_vendor("empty", "none")

        migrated = await VendorService(test_session, cipher).encrypt_plaintext_credentials()
        await test_session.commit()

        assert migrated == 1

        result = await test_session.execute(select(Vendor).order_by(Vendor.vendor_key))
        vendors = {v.vendor_key: v for v in result.scalars().all()}
        assert cipher.decrypt(vendors["legacy"].credential) == "sk_live_plain"
        assert cipher.decrypt(vendors["modern"].credential) == "pdl_token"
        assert vendors["blank"].credential == "   "

    @pytest.mark.asyncio
    async def test_migration_is_idempotent(self, test_session, make_vendor, cipher):
        await make_vendor("legacy", "stripe", credential="sk_live_plain", encrypt=False)
        service = VendorService(test_session, cipher)

        assert await service.encrypt_plaintext_credentials() == 1
        assert await service.encrypt_plaintext_credentials() == 0


class TestCancellationRecords:
    """Tests para el registro de auditoría."""

    @pytest.mark.asyncio
    async def test_defaults_applied(self, test_session):
        record = await CancellationRepository(test_session).create(
            vendor_key="v1",
            user_id="sub_123",
            processor="stripe",
            status="completed",
        )

        assert record.id is not None
        assert record.email == "Not provided"
        assert record.reason == "Not specified"
        assert record.feedback == ""
        assert record.record_metadata == {}
        assert record.created_at is not None

    @pytest.mark.asyncio
    async def test_records_are_append_only(self, test_session):
        record = await CancellationRepository(test_session).create(
            vendor_key="v1",
            user_id="sub_123",
            processor="stripe",
            status="failed",
            error="No such subscription",
        )

        record.status = "completed"

        with pytest.raises(ValueError, match="append-only"):
            await test_session.flush()

        await test_session.rollback()

    @pytest.mark.asyncio
    async def test_list_by_vendor(self, test_session):
        repo = CancellationRepository(test_session)
        await repo.create(vendor_key="v1", user_id="sub_1", processor="stripe", status="completed")
        await repo.create(vendor_key="v1", user_id="sub_2", processor="stripe", status="failed")
        await repo.create(vendor_key="v2", user_id="sub_3", processor="paddle", status="completed")

        records = await repo.list_by_vendor("v1")

        assert {r.user_id for r in records} == {"sub_1", "sub_2"}


class BrokenDispatcher:
    """Dispatcher que falla de forma inesperada."""

    def dispatch(self, vendor):
        raise RuntimeError("adapter registry unavailable")


class TestCancellationService:
    """Tests para CancellationService con dependencias reales."""

    @pytest.fixture
    def dispatcher(self, cipher, paddle_stub) -> ProcessorDispatcher:
        return ProcessorDispatcher(
            cipher=cipher,
            timeout=5,
            paddle_api_url="https://paddle.test",
            http_transport=paddle_stub.transport,
        )

    @pytest.mark.asyncio
    async def test_success_outcome(
        self, test_session, cipher, dispatcher, make_vendor, stripe_cancel
    ):
        await make_vendor("v1", "stripe", credential="sk_test_abc")
        service = CancellationService(test_session, VendorService(test_session, cipher), dispatcher)

        outcome = await service.cancel_subscription(
            {"vendorKey": "v1", "userId": "sub_123"},
            {"origin": "https://vendor.example.com"},
        )

        assert outcome.processor.value == "stripe"
        assert outcome.cancellation_id == str(outcome.record.id)
        assert outcome.record.status == "completed"
        assert outcome.record.record_metadata["origin"] == "https://vendor.example.com"

    @pytest.mark.asyncio
    async def test_upstream_failure_carries_record_id(
        self, test_session, cipher, dispatcher, make_vendor, paddle_stub
    ):
        await make_vendor("vp", "paddle", credential="pdl_token", paddle_vendor_id="12345")
        paddle_stub.status_code = 404
        paddle_stub.body = {"error": {"detail": "Entity not found"}}
        service = CancellationService(test_session, VendorService(test_session, cipher), dispatcher)

        with pytest.raises(UpstreamProcessorError) as exc_info:
            await service.cancel_subscription({"vendorKey": "vp", "userId": "sub_x"})

        assert exc_info.value.message == "Failed to cancel Paddle subscription."
        assert exc_info.value.cancellation_id is not None

    @pytest.mark.asyncio
    async def test_unexpected_error_is_recorded(
        self, test_session, cipher, make_vendor, cancellations
    ):
        await make_vendor("v1", "stripe", credential="sk_test_abc")
        service = CancellationService(
            test_session,
            VendorService(test_session, cipher),
            BrokenDispatcher(),
        )

        with pytest.raises(CancellationServiceError) as exc_info:
            await service.cancel_subscription({"vendorKey": "v1", "userId": "sub_123"})

        assert exc_info.value.message == "Internal server error"
        assert exc_info.value.cancellation_id is not None

        records = await cancellations()
        assert len(records) == 1
        assert records[0].status == "failed"
        assert records[0].processor == "stripe"
        assert records[0].error == "adapter registry unavailable"


class TestOutcomeRecorder:
    """Tests para OutcomeRecorder."""

    @pytest.mark.asyncio
    async def test_failure_record_keeps_context(self, test_session):
        from app.schemas.cancellation import CancelRequest

        request = CancelRequest(vendor_key="v1", user_id="sub_123", reason="Too expensive")

        record = await OutcomeRecorder(test_session).record_failure(
            request,
            processor="unknown",
            error="Unsupported payment processor",
            context={"user_agent": "widget/1.0"},
        )

        assert record.status == "failed"
        assert record.reason == "Too expensive"
        assert record.record_metadata == {"user_agent": "widget/1.0"}
