import pytest

from src.errors import ProbeError, ProbeErrorKind
from src.location.ports import DevicePositionError
from src.location.probe import PROBE_ERROR_MESSAGES, GeolocationProbe
from src.models.location import LocationSource
from tests.common import GOOD_POSITION, NOW, FakePositionSource, FixedClock, denied, timed_out, unavailable


@pytest.mark.asyncio
async def test_acquire_returns_gps_fix_with_sensor_fields() -> None:
    source = FakePositionSource(GOOD_POSITION)
    probe = GeolocationProbe(source, clock=FixedClock())

    fix = await probe.acquire(timeout_ms=15_000, high_accuracy=True, maximum_age_ms=300_000)

    assert fix.source is LocationSource.gps
    assert fix.is_fallback is False
    assert fix.latitude == pytest.approx(28.5355)
    assert fix.accuracy == 8.0
    assert fix.altitude == 200.0
    assert fix.altitude_accuracy == 3.0
    assert fix.heading == 90.0
    assert fix.speed == 0.5
    assert fix.timestamp == NOW
    assert source.calls == [{"enable_high_accuracy": True, "timeout_ms": 15_000, "maximum_age_ms": 300_000}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("device_error", "kind"),
    [
        (denied(), ProbeErrorKind.permission_denied),
        (unavailable(), ProbeErrorKind.position_unavailable),
        (timed_out(), ProbeErrorKind.timeout),
    ],
)
async def test_acquire_classifies_device_errors(device_error: DevicePositionError, kind: ProbeErrorKind) -> None:
    probe = GeolocationProbe(FakePositionSource(device_error))

    with pytest.raises(ProbeError) as exc_info:
        await probe.acquire(timeout_ms=1000, high_accuracy=True)

    assert exc_info.value.kind is kind
    assert exc_info.value.message == PROBE_ERROR_MESSAGES[kind]
    assert exc_info.value.original is device_error


@pytest.mark.asyncio
async def test_acquire_unknown_code_keeps_device_message() -> None:
    probe = GeolocationProbe(FakePositionSource(DevicePositionError(42, "Sensor exploded")))

    with pytest.raises(ProbeError) as exc_info:
        await probe.acquire(timeout_ms=1000, high_accuracy=False)

    assert exc_info.value.kind is ProbeErrorKind.position_unavailable
    assert str(exc_info.value) == "Sensor exploded"


@pytest.mark.asyncio
async def test_acquire_enforces_its_own_deadline() -> None:
    probe = GeolocationProbe(FakePositionSource("hang"))

    with pytest.raises(ProbeError) as exc_info:
        await probe.acquire(timeout_ms=20, high_accuracy=True)

    assert exc_info.value.kind is ProbeErrorKind.timeout
    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_acquire_treats_unexpected_source_failure_as_unavailable() -> None:
    crash = RuntimeError("sensor driver crashed")
    probe = GeolocationProbe(FakePositionSource(crash))

    with pytest.raises(ProbeError) as exc_info:
        await probe.acquire(timeout_ms=1000, high_accuracy=True)

    assert exc_info.value.kind is ProbeErrorKind.position_unavailable
    assert exc_info.value.message == "sensor driver crashed"
    assert exc_info.value.original is crash


@pytest.mark.asyncio
async def test_acquire_unexpected_failure_without_message_uses_default_wording() -> None:
    probe = GeolocationProbe(FakePositionSource(RuntimeError()))

    with pytest.raises(ProbeError) as exc_info:
        await probe.acquire(timeout_ms=1000, high_accuracy=True)

    assert exc_info.value.message == PROBE_ERROR_MESSAGES[ProbeErrorKind.position_unavailable]
