"""
Tests for API endpoints.
"""

import pytest


@pytest.fixture
def seeded(client, make_payload):
    """Scenario records: A@100, A@300, B@200."""
    for device_id, timestamp in (('A', 100), ('A', 300), ('B', 200)):
        response = client.post('/api/flightdata', json=make_payload(device_id=device_id, timestamp=timestamp))
        assert response.status_code == 200


class TestHealthEndpoints:
    """Tests for health and status endpoints."""

    def test_health_endpoint(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok'}

    def test_status_endpoint(self, client):
        response = client.get('/api/status')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['database']['connected'] is True
        assert data['database']['type'] == 'sqlite'
        assert data['config']['batch_max_size'] == 50

    def test_unknown_route(self, client):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'not_found'


class TestIngestEndpoints:
    """POST /api/flightdata and /api/flightdata/batch."""

    def test_ingest_sample(self, client, make_payload):
        response = client.post('/api/flightdata', json=make_payload(device_id='drone-7', timestamp=1234))

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['data']['deviceId'] == 'drone-7'
        assert data['data']['timestamp'] == 1234
        assert data['data']['formattedTime'] == '2023-11-14 22:13:20.000'
        assert isinstance(data['data']['id'], int)

    def test_missing_device_id_is_400(self, client, make_payload):
        payload = make_payload()
        del payload['deviceId']

        response = client.post('/api/flightdata', json=payload)

        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'validation_error'
        assert 'deviceId' in data['message']
        assert client.get('/api/flightdata').get_json()['count'] == 0

    def test_oversized_timestamp_is_400(self, client, make_payload):
        response = client.post('/api/flightdata', json=make_payload(timestamp=10 ** 20))

        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'validation_error'
        assert 'timestamp' in data['message']
        assert client.get('/api/flightdata').get_json()['count'] == 0

    def test_whitespace_device_id_accepted(self, client, make_payload):
        response = client.post('/api/flightdata', json=make_payload(device_id='  ', timestamp=5))

        assert response.status_code == 200
        assert response.get_json()['data']['deviceId'] == '  '

    def test_non_json_body_is_400(self, client):
        response = client.post('/api/flightdata', data='deviceId=A', content_type='text/plain')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'validation_error'

    def test_store_failure_is_500(self, client, make_payload):
        payload = make_payload()
        del payload['latitude']

        response = client.post('/api/flightdata', json=payload)

        assert response.status_code == 500
        data = response.get_json()
        assert data['error'] == 'store_failure'
        assert data['kind'] == 'constraint_violation'

    def test_ingest_batch(self, client, make_payload):
        response = client.post(
            '/api/flightdata/batch',
            json=[make_payload(timestamp=t) for t in (1, 2, 3)],
        )

        assert response.status_code == 200
        assert response.get_json()['count'] == 3
        assert client.get('/api/flightdata?deviceId=drone-1').get_json()['count'] == 3

    def test_invalid_batch_writes_nothing(self, client, make_payload):
        response = client.post(
            '/api/flightdata/batch',
            json=[make_payload(timestamp=1), make_payload(device_id='')],
        )

        assert response.status_code == 400
        assert 'Sample 1' in response.get_json()['message']
        assert client.get('/api/flightdata').get_json()['count'] == 0

    def test_empty_batch_is_400(self, client):
        response = client.post('/api/flightdata/batch', json=[])
        assert response.status_code == 400

    def test_batch_requires_array(self, client, make_payload):
        response = client.post('/api/flightdata/batch', json=make_payload())
        assert response.status_code == 400

    def test_oversized_batch_is_400(self, client, make_payload):
        response = client.post('/api/flightdata/batch', json=[make_payload(timestamp=t) for t in range(51)])
        assert response.status_code == 400


class TestQueryEndpoint:
    """GET /api/flightdata in its three modes."""

    def test_latest_across_devices(self, client, seeded):
        response = client.get('/api/flightdata')

        assert response.status_code == 200
        data = response.get_json()
        assert data['limit'] == 10
        assert data['count'] == 3
        assert [(r['device_id'], r['timestamp']) for r in data['data']] == [('A', 300), ('B', 200), ('A', 100)]
        assert 'deviceId' not in data

    def test_latest_with_limit(self, client, seeded):
        data = client.get('/api/flightdata?limit=1').get_json()

        assert data['count'] == 1
        assert data['data'][0]['timestamp'] == 300

    def test_latest_for_device(self, client, seeded):
        data = client.get('/api/flightdata?deviceId=A&limit=5').get_json()

        assert data['deviceId'] == 'A'
        assert data['limit'] == 5
        assert [r['timestamp'] for r in data['data']] == [300, 100]

    def test_unknown_device_is_empty_not_error(self, client, seeded):
        response = client.get('/api/flightdata?deviceId=ghost')

        assert response.status_code == 200
        assert response.get_json()['data'] == []

    def test_range(self, client, seeded):
        data = client.get('/api/flightdata?deviceId=A&startTime=100&endTime=300').get_json()

        assert data['deviceId'] == 'A'
        assert data['timeRange'] == {'startTime': 100, 'endTime': 300}
        assert [r['timestamp'] for r in data['data']] == [100, 300]
        assert data['count'] == 2

    def test_inverted_range_is_empty(self, client, seeded):
        data = client.get('/api/flightdata?deviceId=A&startTime=300&endTime=100').get_json()
        assert data['data'] == []

    def test_range_needs_both_bounds(self, client, seeded):
        data = client.get('/api/flightdata?deviceId=A&startTime=200').get_json()

        # Falls back to latest for device
        assert 'timeRange' not in data
        assert data['count'] == 2

    def test_record_shape(self, client, seeded):
        record = client.get('/api/flightdata?limit=1').get_json()['data'][0]

        assert set(record) == {
            'id', 'device_id', 'formatted_time', 'timestamp', 'latitude', 'longitude',
            'pitch', 'yaw', 'roll', 'speed', 'velocity_x', 'velocity_y', 'velocity_z',
            'horizontal_speed', 'vertical_speed', 'flight_direction', 'ground_distance',
            'created_at',
        }

    @pytest.mark.parametrize('query', ['limit=ten', 'deviceId=A&startTime=x&endTime=5'])
    def test_bad_integer_params(self, client, query):
        response = client.get(f'/api/flightdata?{query}')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'validation_error'

    @pytest.mark.parametrize('query', [
        'deviceId=A&startTime=0&endTime=100000000000000000000',
        'deviceId=A&startTime=-9223372036854775809&endTime=5',
        'limit=100000000000000000000',
    ])
    def test_params_wider_than_64_bits_are_400(self, client, seeded, query):
        response = client.get(f'/api/flightdata?{query}')

        assert response.status_code == 400
        data = response.get_json()
        assert data['error'] == 'validation_error'
        assert 'out of range' in data['message']

    def test_widest_range_is_accepted(self, client, seeded):
        query = 'deviceId=A&startTime=-9223372036854775808&endTime=9223372036854775807'
        data = client.get(f'/api/flightdata?{query}').get_json()

        assert [r['timestamp'] for r in data['data']] == [100, 300]

    @pytest.mark.parametrize('query, expected', [
        ('limit=5000', 500),
        ('limit=-3', 0),
        ('deviceId=A&limit=5000', 500),
    ])
    def test_limit_echo_is_effective_limit(self, client, seeded, query, expected):
        data = client.get(f'/api/flightdata?{query}').get_json()

        assert data['limit'] == expected
        assert data['count'] <= data['limit']


class TestConsumerViews:
    """Fleet view and track summary."""

    def test_devices_view(self, client, seeded):
        data = client.get('/api/flightdata/devices').get_json()

        assert data['count'] == 2
        assert [(r['device_id'], r['timestamp']) for r in data['data']] == [('A', 300), ('B', 200)]

    def test_devices_view_echoes_effective_limit(self, client, seeded):
        data = client.get('/api/flightdata/devices?limit=9999').get_json()

        assert data['limit'] == 500
        assert data['count'] == 2

    def test_summary(self, client, make_payload):
        client.post('/api/flightdata/batch', json=[
            make_payload(device_id='S', timestamp=10, latitude=32.0, longitude=-89.0),
            make_payload(device_id='S', timestamp=20, latitude=33.0, longitude=-89.0),
        ])

        response = client.get('/api/flightdata/summary?deviceId=S&startTime=0&endTime=100')

        assert response.status_code == 200
        summary = response.get_json()['summary']
        assert summary['deviceId'] == 'S'
        assert summary['sampleCount'] == 2
        assert summary['distanceKm'] == pytest.approx(111.19, rel=1e-3)

    def test_summary_of_empty_window(self, client):
        summary = client.get('/api/flightdata/summary?deviceId=S&startTime=0&endTime=1').get_json()['summary']

        assert summary['deviceId'] == 'S'
        assert summary['sampleCount'] == 0

    def test_summary_requires_window(self, client):
        response = client.get('/api/flightdata/summary?deviceId=S')
        assert response.status_code == 400
