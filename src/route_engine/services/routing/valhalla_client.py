"""HTTP client for the Valhalla routing service."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import httpx

from ...config import settings
from ...models.domain import Leg, Point
from .errors import RemoteError, RemoteErrorKind
from .options import RoutingOptions

logger = logging.getLogger(__name__)


class RouteClient(ABC):
    """Contract for backends that route one chunk of locations per call."""

    @abstractmethod
    def route_chunk(self, chunk: Sequence[Point]) -> list[Leg]:
        """Return the legs between consecutive points, or raise RemoteError."""
        raise NotImplementedError


class ValhallaClient(RouteClient):
    """Issues exactly one ``/route`` request per chunk, without retries."""

    def __init__(
        self,
        base_url: str | None = None,
        options: RoutingOptions | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.valhalla_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Valhalla base URL is not configured.")
        self.options = (options or RoutingOptions.from_settings()).validate()
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        # One short-lived client per request; there is no connection reuse across chunks.
        return httpx.Client(
            timeout=httpx.Timeout(self.options.timeout_seconds),
            transport=self._transport,
        )

    def build_payload(self, chunk: Sequence[Point]) -> dict[str, Any]:
        return {
            "locations": [{"lat": point.latitude, "lon": point.longitude} for point in chunk],
            "costing": self.options.costing_profile,
            "directions_options": {
                "units": self.options.units,
                "language": self.options.language,
            },
            "shape_match": self.options.shape_match,
        }

    def route_chunk(self, chunk: Sequence[Point]) -> list[Leg]:
        if len(chunk) < 2:
            raise ValueError("At least two locations are required for a Valhalla route.")

        url = f"{self.base_url}/route"
        client = self._get_client()
        try:
            response = client.post(url, json=self.build_payload(chunk))
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise RemoteError(
                RemoteErrorKind.TIMEOUT,
                f"Valhalla request timed out after {self.options.timeout_seconds:.1f}s",
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise RemoteError(
                RemoteErrorKind.NON_SUCCESS_STATUS,
                _error_message(exc.response),
                status_code=exc.response.status_code,
            ) from exc
        except httpx.DecodingError as exc:
            raise RemoteError(
                RemoteErrorKind.MALFORMED_RESPONSE,
                f"Valhalla response body could not be decoded: {exc}",
            ) from exc
        except httpx.RequestError as exc:
            # Transport failures plus TooManyRedirects and other request-level errors.
            raise RemoteError(
                RemoteErrorKind.CONNECTION_FAILED,
                f"Failed to connect to Valhalla service at {self.base_url}: {exc}",
            ) from exc
        except ValueError as exc:
            raise RemoteError(
                RemoteErrorKind.MALFORMED_RESPONSE,
                f"Valhalla response is not valid JSON: {exc}",
            ) from exc
        finally:
            client.close()

        return self._parse_legs(data)

    def _parse_legs(self, data: Any) -> list[Leg]:
        trip = data.get("trip") if isinstance(data, dict) else None
        legs = trip.get("legs") if isinstance(trip, dict) else None
        if not isinstance(legs, list) or not legs:
            raise RemoteError(RemoteErrorKind.MALFORMED_RESPONSE, "Valhalla response has no trip legs.")

        parsed: list[Leg] = []
        for index, leg in enumerate(legs):
            if not isinstance(leg, dict):
                raise RemoteError(RemoteErrorKind.MALFORMED_RESPONSE, f"Leg {index} is not an object.")
            shape = leg.get("shape")
            summary = leg.get("summary")
            if not isinstance(shape, str) or not isinstance(summary, dict):
                raise RemoteError(
                    RemoteErrorKind.MALFORMED_RESPONSE, f"Leg {index} is missing its shape or summary."
                )
            length = summary.get("length")
            time = summary.get("time")
            if not _is_number(length) or not _is_number(time):
                raise RemoteError(
                    RemoteErrorKind.MALFORMED_RESPONSE, f"Leg {index} summary lacks numeric length/time."
                )
            parsed.append(
                Leg(
                    encoded_shape=shape,
                    distance_meters=float(length) * self.options.meters_per_unit,
                    duration_seconds=float(time),
                )
            )
        return parsed


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _error_message(response: httpx.Response) -> str:
    """Pull Valhalla's ``error`` field out of a failed response when present."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check Valhalla service health via its ``/status`` endpoint."""
    base = (base_url or settings.valhalla_base_url or "").rstrip("/")
    if not base:
        return False
    try:
        with httpx.Client(timeout=5.0, transport=transport) as client:
            response = client.get(f"{base}/status")
            response.raise_for_status()
        return True
    except httpx.HTTPError as exc:
        logger.debug(f"Valhalla health check failed: {exc}")
        return False
