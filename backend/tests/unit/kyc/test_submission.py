"""Unit tests for the submission reconciler

Tests cover:
- Identity resolution (explicit id, session fallback, none)
- Sequential document upload with stop-at-first-failure
- Upsert keyed by seller_id with pending status
- Bulk verification finalisation and profile reset
- Seller status lookup
"""

from datetime import datetime, timezone

import pytest

from domain.kyc.errors import ErrorCode
from domain.kyc.models import (
    BusinessAddress,
    IdType,
    KYCFormData,
    KYCStatus,
)
from domain.kyc.submission import SubmissionReconciler, build_kyc_row
from domain.kyc.upload_pipeline import DocumentUploadPipeline
from fixtures.kyc_fakes import (
    FakeSessionProvider,
    FakeStorage,
    FixedClock,
    InMemoryKYCRepository,
    RecordingSleeper,
    make_file,
)


NOW = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


def _form(**overrides) -> KYCFormData:
    values = dict(
        email="seller@shop.in",
        phone="9876543210",
        full_name="Asha Rao",
        country="IN",
        pan="ABCDE1234F",
        id_type=IdType.AADHAR,
        id_number="123412341234",
        business_address=BusinessAddress(
            street_address_1="12 MG Road", city="Bengaluru", state="KA",
            postal_code="560001", country="IN",
        ),
        bank_holder_name="Asha Rao",
        account_number="001234567890",
        ifsc_code="HDFC0001234",
        pep_declaration=True,
        sanctions_check=True,
        aml_compliance=True,
        tax_compliance=True,
        terms_accepted=True,
    )
    values.update(overrides)
    return KYCFormData(**values)


def _reconciler(storage=None, repository=None, session_provider=None):
    storage = storage or FakeStorage()
    session_provider = session_provider or FakeSessionProvider()
    pipeline = DocumentUploadPipeline(
        storage, session_provider, sleep=RecordingSleeper(), clock_ms=lambda: 1000
    )
    return SubmissionReconciler(
        pipeline,
        repository or InMemoryKYCRepository(),
        session_provider,
        clock=FixedClock(NOW),
    )


class TestBuildRow:

    def test_files_never_copied(self):
        form = _form(id_document_file=make_file())
        row = build_kyc_row(form, "seller-1", {"id_document_url": "u1"}, NOW)

        assert "id_document_file" not in row
        assert row["id_document_url"] == "u1"
        assert row["kyc_status"] == "pending"
        assert row["submitted_at"] == NOW
        assert "rejection_reason" not in row

    def test_blank_gstin_stored_as_null(self):
        row = build_kyc_row(_form(gstin=""), "seller-1", {}, NOW)
        assert row["gstin"] is None


class TestSubmit:

    @pytest.mark.asyncio
    async def test_uploads_all_documents_and_upserts(self):
        storage = FakeStorage()
        repository = InMemoryKYCRepository()
        form = _form(
            id_document_file=make_file(),
            address_proof_file=make_file(file_name="bill.png", mime_type="image/png"),
            bank_statement_file=make_file(),
        )

        result = await _reconciler(storage, repository).submit(form, "seller-1")

        assert result.success is True
        assert result.kyc_id in repository.rows
        assert storage.upload_calls == [
            "seller-1/id_document_1000.pdf",
            "seller-1/address_proof_1000.png",
            "seller-1/bank_statement_1000.pdf",
        ]
        row = repository.rows[result.kyc_id]
        assert row["kyc_status"] == KYCStatus.PENDING.value
        assert row["id_document_url"].startswith("https://signed.test/seller-1/id_document_1000.pdf")
        assert row["business_address"]["city"] == "Bengaluru"
        assert set(result.document_urls) == {
            "id_document_url", "address_proof_url", "bank_statement_url"
        }

    @pytest.mark.asyncio
    async def test_existing_urls_are_reused_without_upload(self):
        storage = FakeStorage()
        repository = InMemoryKYCRepository()
        form = _form(id_document_url="https://cdn.test/old-id.pdf")

        result = await _reconciler(storage, repository).submit(form, "seller-1")

        assert result.success is True
        assert storage.upload_calls == []
        assert repository.rows[result.kyc_id]["id_document_url"] == "https://cdn.test/old-id.pdf"

    @pytest.mark.asyncio
    async def test_falls_back_to_session_user(self):
        repository = InMemoryKYCRepository()
        reconciler = _reconciler(
            repository=repository, session_provider=FakeSessionProvider(user_id="seller-9")
        )

        result = await reconciler.submit(_form())

        assert result.success is True
        assert repository.rows[result.kyc_id]["seller_id"] == "seller-9"

    @pytest.mark.asyncio
    async def test_not_authenticated_uploads_nothing(self):
        storage = FakeStorage()
        repository = InMemoryKYCRepository()
        reconciler = _reconciler(
            storage, repository, session_provider=FakeSessionProvider(user_id=None)
        )

        result = await reconciler.submit(_form(id_document_file=make_file()))

        assert result.success is False
        assert result.error == "Not authenticated, please log in again."
        assert result.error_code == ErrorCode.NOT_AUTHENTICATED
        assert storage.upload_calls == []
        assert repository.calls == []

    @pytest.mark.asyncio
    async def test_stops_at_first_failed_document(self):
        storage = FakeStorage(script=[None, "Network error", "Network error", "Network error"])
        repository = InMemoryKYCRepository()
        form = _form(
            id_document_file=make_file(),
            address_proof_file=make_file(),
            bank_statement_file=make_file(),
        )

        result = await _reconciler(storage, repository).submit(form, "seller-1")

        assert result.success is False
        assert result.error == "Address proof upload failed: Network error"
        assert result.error_code == ErrorCode.STORAGE
        assert list(result.document_urls) == ["id_document_url"]
        assert not any("bank_statement" in path for path in storage.upload_calls)
        assert repository.calls == []

    @pytest.mark.asyncio
    async def test_id_document_failure_message(self):
        storage = FakeStorage(script=["timeout", "timeout", "timeout"])
        result = await _reconciler(storage).submit(
            _form(id_document_file=make_file()), "seller-1"
        )
        assert result.error == "ID document upload failed: timeout"
        assert result.document_urls == {}

    @pytest.mark.asyncio
    async def test_store_error_returned_verbatim(self):
        repository = InMemoryKYCRepository(fail_with={"upsert": "duplicate key value"})
        result = await _reconciler(repository=repository).submit(
            _form(id_document_file=make_file()), "seller-1"
        )

        assert result.success is False
        assert result.error == "duplicate key value"
        assert result.error_code == ErrorCode.PERSISTENCE
        assert "id_document_url" in result.document_urls

    @pytest.mark.asyncio
    async def test_resubmission_keeps_one_record_and_rejection_reason(self):
        repository = InMemoryKYCRepository()
        kyc_id = repository.seed(
            seller_id="seller-1",
            kyc_status="rejected",
            rejection_reason="Blurry PAN card",
        )

        result = await _reconciler(repository=repository).submit(_form(), "seller-1")

        assert result.success is True
        assert result.kyc_id == kyc_id
        assert len(repository.rows) == 1
        assert repository.rows[kyc_id]["kyc_status"] == "pending"
        assert repository.rows[kyc_id]["rejection_reason"] == "Blurry PAN card"


class TestFinalizeVerification:

    @pytest.mark.asyncio
    async def test_inserts_minimal_record_and_resets_profile(self):
        repository = InMemoryKYCRepository()
        repository.add_profile("seller-1", is_verified=True)
        urls = {"tax-id": "u-tax", "addr-b": "u-back", "bank-stmt": "u-bank", "seller-img": "u-img"}

        result = await _reconciler(repository=repository).finalize_verification_submission(
            "seller-1", urls
        )

        assert result.success is True
        row = repository.rows[result.kyc_id]
        assert row["kyc_status"] == "pending"
        assert row["email"] == ""
        assert row["id_document_url"] == "u-tax"
        assert row["address_proof_url"] == "u-back"
        assert row["bank_statement_url"] == "u-bank"
        assert row["business_address"] == {"verification_documents": urls}
        assert repository.profiles["seller-1"]["is_verified"] is False

    @pytest.mark.asyncio
    async def test_updates_existing_record_and_keeps_address(self):
        repository = InMemoryKYCRepository()
        kyc_id = repository.seed(
            seller_id="seller-1",
            kyc_status="rejected",
            business_address={"city": "Pune"},
        )

        result = await _reconciler(repository=repository).finalize_verification_submission(
            "seller-1", {"addr-f": "u-front", "addr-b": "u-back"}
        )

        assert result.success is True
        assert result.kyc_id == kyc_id
        row = repository.rows[kyc_id]
        assert row["kyc_status"] == "pending"
        assert row["submitted_at"] == NOW
        assert row["address_proof_url"] == "u-front"
        assert row["business_address"]["city"] == "Pune"
        assert row["business_address"]["verification_documents"]["addr-b"] == "u-back"

    @pytest.mark.asyncio
    async def test_missing_seller(self):
        result = await _reconciler().finalize_verification_submission("", {})
        assert result.success is False
        assert result.error_code == ErrorCode.NOT_AUTHENTICATED

    @pytest.mark.asyncio
    async def test_store_failure(self):
        repository = InMemoryKYCRepository(fail_with={"select_one": "connection reset"})
        result = await _reconciler(repository=repository).finalize_verification_submission(
            "seller-1", {"tax-id": "u"}
        )
        assert result.success is False
        assert result.error == "connection reset"
        assert result.error_code == ErrorCode.PERSISTENCE


class TestSellerStatus:

    @pytest.mark.asyncio
    async def test_no_record_is_not_an_error(self):
        result = await _reconciler().get_seller_kyc_status("seller-1")
        assert result.kyc_data is None
        assert result.error is None

    @pytest.mark.asyncio
    async def test_returns_record(self):
        repository = InMemoryKYCRepository()
        repository.seed(seller_id="seller-1", kyc_status="pending")

        result = await _reconciler(repository=repository).get_seller_kyc_status("seller-1")

        assert result.kyc_data["kyc_status"] == "pending"

    @pytest.mark.asyncio
    async def test_store_error(self):
        repository = InMemoryKYCRepository(fail_with={"select_one": "timeout"})
        result = await _reconciler(repository=repository).get_seller_kyc_status("seller-1")
        assert result.kyc_data is None
        assert result.error == "timeout"
