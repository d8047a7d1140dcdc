"""Document Upload Pipeline - moves one KYC document into durable storage.

Handles:
- Pre-network validation (seller id, size, MIME type)
- Session liveness check before the first attempt
- Deterministic storage path: {seller_id}/{doc_type}_{epoch_millis}.{ext}
- Sequential retry with linear back-off (1s, 2s by default)
- Signed URL issuance with public-URL and bare-path fallbacks

Every public method returns a DocumentUploadResult and never raises.
"""

import logging
import time
from typing import Callable, Optional

from observability.metrics import kyc_upload_attempts_total, kyc_upload_duration_seconds

from .backoff import DEFAULT_BACKOFF, BackoffPolicy, Sleeper, default_sleep
from .errors import ErrorCode, SessionExpiredError, UploadError
from .models import DocumentUploadResult, KYCFile
from .ports import KYCStoragePort, SessionProviderPort, StorageError
from .validation import (
    MAX_KYC_DOCUMENT_SIZE,
    is_allowed_mime_type,
    validate_file_size,
)


logger = logging.getLogger(__name__)

SIGNED_URL_TTL_SECONDS = 60 * 60 * 24 * 365  # 1 year

ProgressCallback = Callable[[int], None]

MISSING_SELLER_MESSAGE = "Seller ID is missing, please log in again."


def _current_millis() -> int:
    return int(time.time() * 1000)


def _precondition_code(seller_id: str) -> ErrorCode:
    return ErrorCode.VALIDATION if seller_id else ErrorCode.NOT_AUTHENTICATED


def build_storage_path(seller_id: str, doc_type: str, file: KYCFile, timestamp_ms: int) -> str:
    """Build the storage key for a document.

    Example:
        >>> build_storage_path('s1', 'id_document', KYCFile('pan.png', b'x', 'image/png'), 1700000000000)
        's1/id_document_1700000000000.png'
    """
    return f"{seller_id}/{doc_type}_{timestamp_ms}.{file.extension}"


class DocumentUploadPipeline:
    """Uploads KYC documents with validation, session check and retry.

    Usage:
        pipeline = DocumentUploadPipeline(storage, session_provider)
        result = await pipeline.upload(seller_id, file, "id_document")
        if result.success:
            print(result.url)
    """

    def __init__(
        self,
        storage: KYCStoragePort,
        session_provider: SessionProviderPort,
        backoff: BackoffPolicy = DEFAULT_BACKOFF,
        sleep: Sleeper = default_sleep,
        signed_url_ttl_seconds: int = SIGNED_URL_TTL_SECONDS,
        max_file_size: int = MAX_KYC_DOCUMENT_SIZE,
        clock_ms: Callable[[], int] = _current_millis,
    ):
        self.storage = storage
        self.session_provider = session_provider
        self.backoff = backoff
        self.sleep = sleep
        self.signed_url_ttl_seconds = signed_url_ttl_seconds
        self.max_file_size = max_file_size
        self.clock_ms = clock_ms

    def check_preconditions(self, seller_id: str, file: Optional[KYCFile]) -> Optional[str]:
        """Return an error message if the upload must not start, else None."""
        if not seller_id:
            return MISSING_SELLER_MESSAGE

        if file is None or file.size_bytes == 0:
            return "No file selected or file is empty."

        is_valid, error = validate_file_size(file.size_bytes, self.max_file_size)
        if not is_valid:
            return error

        if not is_allowed_mime_type(file.mime_type):
            return (
                f'File type "{file.mime_type}" is not supported. '
                "Please upload JPEG, PNG, PDF, or DOC/DOCX."
            )

        return None

    async def upload(self, seller_id: str, file: KYCFile, doc_type: str) -> DocumentUploadResult:
        """Upload one document and return its URL.

        Args:
            seller_id: Owner of the document (first path segment)
            file: File to upload
            doc_type: Document slot name (e.g. 'id_document')

        Returns:
            DocumentUploadResult: success with a URL, or failure with the
                precondition error, the session error, or the last attempt's
                storage error
        """
        try:
            error = self.check_preconditions(seller_id, file)
            if error:
                logger.info(
                    f"KYC upload rejected before network: {error}",
                    extra={"seller_id": seller_id, "doc_type": doc_type}
                )
                return DocumentUploadResult.failed(error, _precondition_code(seller_id))

            await self._ensure_session()

            path = build_storage_path(seller_id, doc_type, file, self.clock_ms())
            start_time = time.time()
            try:
                url = await self._upload_with_retry(path, file, doc_type)
            finally:
                kyc_upload_duration_seconds.labels(doc_type=doc_type).observe(
                    time.time() - start_time
                )
            return DocumentUploadResult.ok(url)

        except SessionExpiredError as e:
            return DocumentUploadResult.failed(str(e), ErrorCode.SESSION_EXPIRED)
        except UploadError as e:
            return DocumentUploadResult.failed(str(e), ErrorCode.STORAGE)
        except Exception as e:
            logger.error(f"Unexpected error uploading KYC document: {e}", exc_info=True)
            return DocumentUploadResult.failed(str(e), ErrorCode.STORAGE)

    async def _ensure_session(self) -> None:
        """Confirm the caller's session is live before any bytes are sent.

        Raises:
            SessionExpiredError: If the provider errors or reports no session
        """
        try:
            session = await self.session_provider.get_session()
        except Exception as e:
            logger.error(f"KYC upload: session check failed: {e}")
            raise SessionExpiredError()

        if session is None:
            logger.warning("KYC upload: no live session")
            raise SessionExpiredError()

    async def _upload_with_retry(self, path: str, file: KYCFile, doc_type: str) -> str:
        """Run the attempts sequentially, sleeping between them.

        Raises:
            UploadError: Carrying the last attempt's error once all attempts fail
        """
        last_error = ""

        for attempt in range(self.backoff.max_attempts):
            if attempt > 0:
                await self.sleep(self.backoff.delay_seconds(attempt))
                logger.info(
                    f"KYC upload retry {attempt}/{self.backoff.max_attempts - 1} for {doc_type}",
                    extra={"doc_type": doc_type, "attempt": attempt + 1}
                )

            try:
                await self._attempt(path, file)
            except UploadError as e:
                last_error = str(e)
                kyc_upload_attempts_total.labels(doc_type=doc_type, outcome="error").inc()
                logger.warning(
                    f"KYC doc upload failed (attempt {attempt + 1}): {doc_type}: {last_error}",
                    extra={"doc_type": doc_type, "attempt": attempt + 1, "path": path}
                )
                continue

            kyc_upload_attempts_total.labels(doc_type=doc_type, outcome="success").inc()
            logger.info(
                f"Uploaded KYC document on attempt {attempt + 1}: {path}",
                extra={"doc_type": doc_type, "attempt": attempt + 1, "path": path}
            )
            return await self._resolve_url(path)

        raise UploadError(last_error)

    async def _attempt(self, path: str, file: KYCFile) -> None:
        try:
            await self.storage.upload(
                path=path,
                data=file.content,
                content_type=file.mime_type,
                upsert=True,
            )
        except StorageError as e:
            raise UploadError(str(e))

    async def _resolve_url(self, path: str) -> str:
        """Signed URL, else public URL, else the bare storage path."""
        try:
            return await self.storage.create_signed_url(path, self.signed_url_ttl_seconds)
        except StorageError as e:
            logger.info(f"Signed URL creation failed, falling back: {e}")

        public_url = self.storage.get_public_url(path)
        return public_url or path

    async def upload_verification_document(
        self,
        seller_id: str,
        doc_id: str,
        file: KYCFile,
        on_progress: Optional[ProgressCallback] = None,
    ) -> DocumentUploadResult:
        """Upload one slot of the bulk verification flow.

        Single attempt, no retry. Path: {seller_id}/verify_{doc_id}_{epoch_millis}.{ext}.
        Progress is reported as 10, 30, 80 and 100.
        """
        def report(progress: int) -> None:
            if on_progress is not None:
                on_progress(progress)

        try:
            if not seller_id:
                return DocumentUploadResult.failed(MISSING_SELLER_MESSAGE, ErrorCode.NOT_AUTHENTICATED)
            if file is None or file.size_bytes == 0:
                return DocumentUploadResult.failed(
                    "No file selected or file is empty.", ErrorCode.VALIDATION
                )

            report(10)
            path = f"{seller_id}/verify_{doc_id}_{self.clock_ms()}.{file.extension}"
            report(30)

            try:
                await self.storage.upload(
                    path=path,
                    data=file.content,
                    content_type=file.mime_type,
                    upsert=True,
                )
            except StorageError as e:
                kyc_upload_attempts_total.labels(doc_type=f"verify_{doc_id}", outcome="error").inc()
                logger.error(
                    f"Verify doc upload failed: {doc_id}: {e}",
                    extra={"seller_id": seller_id, "doc_id": doc_id}
                )
                return DocumentUploadResult.failed(str(e), ErrorCode.STORAGE)

            kyc_upload_attempts_total.labels(doc_type=f"verify_{doc_id}", outcome="success").inc()
            report(80)
            url = self.storage.get_public_url(path) or path
            report(100)
            return DocumentUploadResult.ok(url)

        except Exception as e:
            logger.error(f"Unexpected error in verification upload {doc_id}: {e}", exc_info=True)
            return DocumentUploadResult.failed(str(e), ErrorCode.STORAGE)
