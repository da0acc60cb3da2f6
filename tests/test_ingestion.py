"""
Tests for the ingestion service: validation boundary and all-or-nothing batches.
"""

from unittest import mock

import pytest

from flightdata.errors import StoreFailure, ValidationError
from flightdata.ingestion import IngestionService
from flightdata.models import parse_sample
from flightdata.storage import TelemetryStore


class TestIngestOne:

    def test_round_trip(self, ingestion, queries, make_payload):
        payload = make_payload(device_id='rt-1', timestamp=1700000000500)

        ingestion.ingest_one(payload)
        records = queries.latest_for_device('rt-1', 1)

        assert len(records) == 1
        assert records[0].to_sample() == parse_sample(payload)

    def test_returns_committed_record(self, ingestion, make_payload):
        record = ingestion.ingest_one(make_payload())

        assert record.id is not None
        assert record.device_id == 'drone-1'

    def test_empty_device_id_rejected(self, ingestion, queries, make_payload):
        with pytest.raises(ValidationError):
            ingestion.ingest_one(make_payload(device_id=''))

        assert queries.latest(100) == []

    def test_whitespace_device_id_stored_as_sent(self, ingestion, queries, make_payload):
        ingestion.ingest_one(make_payload(device_id=' ', timestamp=7))

        records = queries.latest_for_device(' ', 10)
        assert [(r.device_id, r.timestamp) for r in records] == [(' ', 7)]

    def test_oversized_timestamp_rejected(self, ingestion, queries, make_payload):
        with pytest.raises(ValidationError, match='timestamp'):
            ingestion.ingest_one(make_payload(timestamp=10 ** 20))

        assert queries.latest(10) == []

    def test_rejection_never_reaches_store(self, make_payload):
        store = mock.Mock(spec=TelemetryStore)
        service = IngestionService(store)

        with pytest.raises(ValidationError):
            service.ingest_one(make_payload(timestamp=None))

        store.insert_one.assert_not_called()

    def test_store_failure_propagates(self, make_payload):
        store = mock.Mock(spec=TelemetryStore)
        store.insert_one.side_effect = StoreFailure(StoreFailure.CONNECTIVITY, 'gone')
        service = IngestionService(store)

        with pytest.raises(StoreFailure) as exc_info:
            service.ingest_one(make_payload())

        assert exc_info.value.kind == StoreFailure.CONNECTIVITY
        # No internal retry
        assert store.insert_one.call_count == 1

    def test_missing_measurement_fails_in_store(self, ingestion, queries, make_payload):
        payload = make_payload()
        del payload['velocity']

        with pytest.raises(StoreFailure) as exc_info:
            ingestion.ingest_one(payload)

        assert exc_info.value.kind == StoreFailure.CONSTRAINT_VIOLATION
        assert queries.latest(10) == []


class TestIngestBatch:

    def test_accepts_valid_batch(self, ingestion, queries, make_payload):
        count = ingestion.ingest_batch([make_payload(timestamp=t) for t in (1, 2, 3)])

        assert count == 3
        assert len(queries.latest(10)) == 3

    def test_one_invalid_element_rejects_all(self, ingestion, queries, make_payload):
        batch = [
            make_payload(device_id='A', timestamp=1),
            make_payload(device_id='B', timestamp=2),
            make_payload(device_id='A', timestamp='later'),
        ]

        with pytest.raises(ValidationError) as exc_info:
            ingestion.ingest_batch(batch)

        assert exc_info.value.reason.startswith('Sample 2:')
        assert queries.latest_for_device('A') == []
        assert queries.latest_for_device('B') == []

    def test_oversized_timestamp_rejects_batch(self, ingestion, queries, make_payload):
        batch = [make_payload(timestamp=1), make_payload(timestamp=10 ** 20)]

        with pytest.raises(ValidationError) as exc_info:
            ingestion.ingest_batch(batch)

        assert exc_info.value.reason.startswith('Sample 1:')
        assert queries.latest(10) == []

    def test_validates_everything_before_writing(self, make_payload):
        store = mock.Mock(spec=TelemetryStore)
        service = IngestionService(store)

        with pytest.raises(ValidationError):
            service.ingest_batch([make_payload(), make_payload(device_id=None)])

        store.insert_batch.assert_not_called()

    def test_single_store_write(self, make_payload):
        store = mock.Mock(spec=TelemetryStore)
        store.insert_batch.return_value = 2
        service = IngestionService(store)

        assert service.ingest_batch([make_payload(), make_payload()]) == 2
        store.insert_batch.assert_called_once()
        store.insert_one.assert_not_called()

    def test_storage_failure_is_all_or_nothing(self, ingestion, queries, make_payload):
        batch = [make_payload(timestamp=1), make_payload(timestamp=2, yaw=None)]

        with pytest.raises(StoreFailure):
            ingestion.ingest_batch(batch)

        assert queries.latest_for_device('drone-1') == []

    @pytest.mark.parametrize('payloads', [[], {}, 'samples', None, {'deviceId': 'x', 'timestamp': 1}])
    def test_rejects_non_batches(self, ingestion, payloads):
        with pytest.raises(ValidationError):
            ingestion.ingest_batch(payloads)

    def test_rejects_oversized_batch(self, store, make_payload):
        service = IngestionService(store, batch_max_size=2)

        with pytest.raises(ValidationError, match='exceeds'):
            service.ingest_batch([make_payload(timestamp=t) for t in range(3)])

    def test_non_object_element_rejected(self, ingestion, make_payload):
        with pytest.raises(ValidationError, match='Sample 1'):
            ingestion.ingest_batch([make_payload(), 'not-a-sample'])
