import pytest

from core.errors import ValidationError
from core.max_age import MaxAge


def test_max_age_create_uses_current_time(clock):
    stamp = MaxAge.create(600)
    assert stamp.created_at == clock["now"]
    assert stamp.expires_at() == clock["now"] + 600


def test_max_age_fresh_until_window_passes(clock):
    stamp = MaxAge.create(600)

    clock["now"] += 600
    assert stamp.is_expired() is False

    clock["now"] += 1
    assert stamp.is_expired() is True


def test_max_age_zero_expires_immediately(clock):
    stamp = MaxAge.zero()
    clock["now"] += 0.001
    assert stamp.is_expired()


def test_max_age_json_round_trip(clock):
    stamp = MaxAge.create(600)
    restored = MaxAge.from_json(stamp.to_json())

    assert restored.max_age_seconds == 600
    assert restored.created_at == pytest.approx(stamp.created_at, abs=0.001)


@pytest.mark.parametrize("bad", [{}, {"timestampInMs": "x", "value": 1}, {"value": 600}])
def test_max_age_from_json_invalid(bad):
    with pytest.raises(ValidationError):
        MaxAge.from_json(bad)
