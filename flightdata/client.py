"""
FlightData HTTP client.

Used by producers (simulators, replay scripts, device gateways) to post
samples and by consumers (dashboards) to poll the read endpoint.

Handles:
- Single and batch ingestion
- The three read shapes (latest, latest for device, time range)
- Per-request timeouts
- Mapping error responses to FlightDataClientError with the server's
  failure kind

No retries: a failed call raises, and the caller decides whether to
resend.
"""

import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Union

import requests

from flightdata.models import Sample

logger = logging.getLogger(__name__)

SampleLike = Union[Sample, Dict[str, Any]]


class FlightDataClientError(Exception):
    """
    A request to the FlightData server failed.

    `status_code` is None for transport errors (timeout, refused
    connection); `error` is the server's stable failure kind
    ('validation_error', 'store_failure', ...) when it sent one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        kind: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.kind = kind

    @property
    def is_retryable(self) -> bool:
        """Transport failures and 5xx may succeed on resend; 4xx will not."""
        return self.status_code is None or self.status_code >= 500


def _to_payload(sample: SampleLike) -> Dict[str, Any]:
    if isinstance(sample, Sample):
        return sample.to_payload()
    return dict(sample)


class FlightDataClient:
    """Client for the /api/flightdata endpoints."""

    def __init__(
        self,
        base_url: str = 'http://localhost:5000',
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls) -> 'FlightDataClient':
        """Create client from FLIGHTDATA_URL / FLIGHTDATA_TIMEOUT_SECONDS."""
        return cls(
            base_url=os.getenv('FLIGHTDATA_URL', 'http://localhost:5000'),
            timeout=float(os.getenv('FLIGHTDATA_TIMEOUT_SECONDS', '10')),
        )

    @property
    def endpoint(self) -> str:
        return f'{self.base_url}/api/flightdata'

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Send a request and decode the JSON body.

        Raises:
            FlightDataClientError on transport errors and non-2xx responses
        """
        logger.debug(f'{method} {url} params={kwargs.get("params")}')

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error(f'FlightData request timed out: {method} {url}')
            raise FlightDataClientError(f'Request timed out: {e}') from e
        except requests.exceptions.RequestException as e:
            logger.error(f'FlightData request failed: {e}')
            raise FlightDataClientError(f'Request failed: {e}') from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get('message') or body.get('error') or response.reason
            logger.warning(f'FlightData API error {response.status_code}: {message}')
            raise FlightDataClientError(
                message,
                status_code=response.status_code,
                error=body.get('error'),
                kind=body.get('kind'),
            )

        return body

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    def send(self, sample: SampleLike) -> Dict[str, Any]:
        """Post one sample. Returns the echoed {id, deviceId, timestamp, formattedTime}."""
        body = self._request('POST', self.endpoint, json=_to_payload(sample))
        return body.get('data', {})

    def send_batch(self, samples: Iterable[SampleLike]) -> int:
        """Post samples as one atomic batch. Returns count stored."""
        payload = [_to_payload(s) for s in samples]
        body = self._request('POST', f'{self.endpoint}/batch', json=payload)
        return body.get('count', 0)

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def latest(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Newest records across all devices."""
        params = {}
        if limit is not None:
            params['limit'] = limit
        return self._request('GET', self.endpoint, params=params).get('data', [])

    def latest_for_device(self, device_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Newest records for one device."""
        params = {'deviceId': device_id}
        if limit is not None:
            params['limit'] = limit
        return self._request('GET', self.endpoint, params=params).get('data', [])

    def range(self, device_id: str, start_time: int, end_time: int) -> List[Dict[str, Any]]:
        """One device's records in [start_time, end_time], oldest first."""
        params = {'deviceId': device_id, 'startTime': start_time, 'endTime': end_time}
        return self._request('GET', self.endpoint, params=params).get('data', [])

    def devices(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Newest record per device."""
        params = {}
        if limit is not None:
            params['limit'] = limit
        return self._request('GET', f'{self.endpoint}/devices', params=params).get('data', [])
