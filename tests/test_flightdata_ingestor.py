import json

import httpx
import pytest

from adsb2otel.config import USER_AGENT
from adsb2otel.errors import DecodeError, SerializationError, TransportError
from adsb2otel.ingestors import FlightDataIngestor
from adsb2otel.ingestors import flightdata
from adsb2otel.models import LogEvent

URL = "http://receiver.test/data/aircraft.json"

PAYLOAD = {
    "now": 1700000000.5,
    "messages": 42,
    "aircraft": [
        {"hex": "a1b2c3", "type": "adsb_icao", "flight": "UAL123", "alt_baro": 35000},
        {"hex": "c0ffee", "type": "mode_s", "alt_baro": "ground"},
        {"hex": "beef01", "type": "mlat", "lat": 51.5, "lon": -0.12},
    ],
}


class FakeSink:
    def __init__(self):
        self.events: list[LogEvent] = []

    def emit(self, event: LogEvent) -> None:
        self.events.append(event)


def _ingestor(handler, sink) -> FlightDataIngestor:
    return FlightDataIngestor(sink=sink, url=URL, transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_fetch_and_push_emits_one_event_per_aircraft_in_order():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request):
        captured.append(request)
        return httpx.Response(200, json=PAYLOAD)

    sink = FakeSink()
    async with _ingestor(handler, sink) as ingestor:
        emitted = await ingestor.fetch_and_push()

    assert emitted == 3
    assert [event.attributes["aircraft.hex"] for event in sink.events] == [
        "a1b2c3",
        "c0ffee",
        "beef01",
    ]
    assert len({event.timestamp for event in sink.events}) == 1
    assert json.loads(sink.events[1].body)["alt_baro"] == "ground"
    assert sink.events[0].attributes["aircraft.alt_baro"] == "35000"

    assert len(captured) == 1
    assert captured[0].method == "GET"
    assert str(captured[0].url) == URL
    assert captured[0].headers["User-Agent"] == USER_AGENT


@pytest.mark.anyio
async def test_fetch_and_push_with_no_aircraft():
    sink = FakeSink()
    handler = lambda request: httpx.Response(200, json={"now": 1, "messages": 0, "aircraft": []})

    async with _ingestor(handler, sink) as ingestor:
        emitted = await ingestor.fetch_and_push()

    assert emitted == 0
    assert sink.events == []


@pytest.mark.anyio
@pytest.mark.parametrize("status", [503, 404, 204, 301])
async def test_non_200_status_is_a_transport_error(status):
    sink = FakeSink()
    handler = lambda request: httpx.Response(status, json=PAYLOAD)

    async with _ingestor(handler, sink) as ingestor:
        with pytest.raises(TransportError) as excinfo:
            await ingestor.fetch_and_push()

    assert excinfo.value.status_code == status
    assert sink.events == []


@pytest.mark.anyio
async def test_network_failure_is_a_transport_error():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    sink = FakeSink()
    async with _ingestor(handler, sink) as ingestor:
        with pytest.raises(TransportError):
            await ingestor.fetch_and_push()

    assert sink.events == []


@pytest.mark.anyio
async def test_timeout_is_a_transport_error():
    def handler(request: httpx.Request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with _ingestor(handler, FakeSink()) as ingestor:
        with pytest.raises(TransportError, match="timed out"):
            await ingestor.fetch_and_push()


@pytest.mark.anyio
async def test_malformed_body_is_a_decode_error(caplog):
    sink = FakeSink()
    handler = lambda request: httpx.Response(200, text="<html>not json</html>")

    async with _ingestor(handler, sink) as ingestor:
        with caplog.at_level("ERROR"):
            with pytest.raises(DecodeError):
                await ingestor.fetch_and_push()

    assert "Failed to decode dump1090-fa data" in caplog.text
    assert sink.events == []


@pytest.mark.anyio
async def test_out_of_range_receiver_clock_is_a_decode_error():
    sink = FakeSink()
    handler = lambda request: httpx.Response(
        200, text='{"now": 1e300, "messages": 1, "aircraft": [{"hex": "a"}]}'
    )

    async with _ingestor(handler, sink) as ingestor:
        with pytest.raises(DecodeError, match="now"):
            await ingestor.fetch_and_push()

    assert sink.events == []


@pytest.mark.anyio
async def test_serialization_failure_keeps_already_emitted_events(monkeypatch):
    real_to_log_event = flightdata.to_log_event

    def flaky_to_log_event(entry, timestamp):
        if entry.hex == "c0ffee":
            raise SerializationError("cannot render c0ffee")
        return real_to_log_event(entry, timestamp)

    monkeypatch.setattr(flightdata, "to_log_event", flaky_to_log_event)

    sink = FakeSink()
    handler = lambda request: httpx.Response(200, json=PAYLOAD)
    async with _ingestor(handler, sink) as ingestor:
        with pytest.raises(SerializationError):
            await ingestor.fetch_and_push()

    assert [event.attributes["aircraft.hex"] for event in sink.events] == ["a1b2c3"]


@pytest.mark.anyio
async def test_injected_client_is_reused_and_left_open():
    calls = 0

    def handler(request: httpx.Request):
        nonlocal calls
        calls += 1
        return httpx.Response(200, json=PAYLOAD)

    sink = FakeSink()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        ingestor = FlightDataIngestor(sink=sink, url=URL, http_client=client)
        assert await ingestor.fetch_and_push() == 3
        assert await ingestor.fetch_and_push() == 3
        await ingestor.aclose()
        assert not client.is_closed

    assert calls == 2
    assert len(sink.events) == 6
