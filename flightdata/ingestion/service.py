"""
Ingestion service - boundary between untrusted input and the store.

Write path:
1. Validate: every payload must parse into a Sample (deviceId, integer timestamp)
2. Persist: exactly one store write per accepted call

Batches are all-or-nothing at both stages. Every element is validated
before anything is written, and the write itself is a single store
transaction, so a batch is never partially accepted - whether the cause
is a bad payload or a database failure.

Nothing is retried here. Store failures propagate unchanged to the caller.
"""

import logging
from typing import Any, List, Optional, Sequence

from flightdata.errors import ValidationError
from flightdata.models import Sample, TelemetryRecord, parse_sample
from flightdata.storage import TelemetryStore

logger = logging.getLogger(__name__)


class IngestionService:
    """
    Validates incoming samples and forwards them to the store.

    Holds no per-request state; one instance serves all requests.
    """

    def __init__(
        self,
        store: TelemetryStore,
        batch_max_size: Optional[int] = None,
    ):
        """
        Initialize the ingestion service.

        Args:
            store: Telemetry store shared with the query service
            batch_max_size: Largest batch accepted in one call (None = unbounded)
        """
        self.store = store
        self.batch_max_size = batch_max_size

    def ingest_one(self, payload: Any) -> TelemetryRecord:
        """
        Validate and persist a single sample.

        Returns the committed record.

        Raises:
            ValidationError: payload rejected; the store was not touched
            StoreFailure: the write failed
        """
        try:
            sample = parse_sample(payload)
        except ValidationError as e:
            logger.warning(f'Rejected sample: {e.reason}')
            raise

        record = self.store.insert_one(sample)
        logger.info(f'Stored sample #{record.id} from {sample.device_id} at {sample.formatted_time}')
        return record

    def ingest_batch(self, payloads: Any) -> int:
        """
        Validate a whole batch, then persist it in one transaction.

        Returns count of records stored.

        Raises:
            ValidationError: the batch is empty, too large, or any element is
                invalid; nothing was written
            StoreFailure: the transaction failed; nothing was written
        """
        samples = self.validate_batch(payloads)

        count = self.store.insert_batch(samples)
        devices = sorted({s.device_id for s in samples})
        logger.info(f'Stored batch of {count} samples from {len(devices)} device(s)')
        return count

    def validate_batch(self, payloads: Any) -> List[Sample]:
        """Parse every element, failing on the first invalid one."""
        if not isinstance(payloads, Sequence) or isinstance(payloads, (str, bytes)):
            raise self._reject('Invalid batch format: expected a JSON array')

        if not payloads:
            raise self._reject('Invalid batch format: batch is empty')

        if self.batch_max_size is not None and len(payloads) > self.batch_max_size:
            raise self._reject(
                f'Invalid batch format: {len(payloads)} samples exceeds '
                f'the limit of {self.batch_max_size}'
            )

        samples = []
        for index, payload in enumerate(payloads):
            try:
                samples.append(parse_sample(payload))
            except ValidationError as e:
                raise self._reject(f'Sample {index}: {e.reason}') from e

        return samples

    @staticmethod
    def _reject(reason: str) -> ValidationError:
        logger.warning(f'Rejected batch: {reason}')
        return ValidationError(reason)
