import pytest

from flightdata.app import create_app
from flightdata.config import AppConfig, DatabaseConfig, IngestConfig, QueryConfig
from flightdata.ingestion import IngestionService
from flightdata.query import QueryService
from flightdata.storage import TelemetryStore


@pytest.fixture
def db_config(tmp_path):
    """File-backed SQLite database private to one test."""
    return DatabaseConfig(
        url=f'sqlite:///{tmp_path / "flightdata.db"}',
        timeout_seconds=2.0,
        echo=False,
    )


@pytest.fixture
def store(db_config):
    telemetry_store = TelemetryStore.from_config(db_config)
    yield telemetry_store
    telemetry_store.dispose()


@pytest.fixture
def ingestion(store):
    return IngestionService(store, batch_max_size=50)


@pytest.fixture
def queries(store):
    return QueryService(store, default_limit=10, max_limit=500)


@pytest.fixture
def make_payload():
    """Factory for camelCase wire payloads with realistic flight values."""
    def _make(device_id='drone-1', timestamp=1700000000000, **overrides):
        payload = {
            'deviceId': device_id,
            'formattedTime': '2023-11-14 22:13:20.000',
            'timestamp': timestamp,
            'latitude': 31.2304,
            'longitude': 121.4737,
            'pitch': 2.5,
            'yaw': 181.0,
            'roll': -1.25,
            'speed': 12.4,
            'velocity': {'x': 3.1, 'y': -0.4, 'z': 11.9},
            'horizontalSpeed': 12.0,
            'verticalSpeed': 0.6,
            'flightDirection': 87.5,
            'groundDistance': 120.0,
        }
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def app_config(db_config):
    return AppConfig(
        database=db_config,
        ingest=IngestConfig(batch_max_size=50),
        query=QueryConfig(default_limit=10, max_limit=500, devices_view_limit=100),
        secret_key='test-secret',
        debug=False,
        cors_origins=('*',),
        port=5000,
    )


@pytest.fixture
def app(app_config, store):
    flask_app = create_app(app_config, store=store)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client
