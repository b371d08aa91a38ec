import pytest

from qrattend.services.geo import distance_meters, is_too_far


def test_distance_to_self_is_zero(anchor):
    assert distance_meters(anchor, anchor) == 0
    assert not is_too_far(distance_meters(anchor, anchor))


def test_distance_uses_mean_earth_radius():
    # one thousandth of a degree of latitude on the mean-radius sphere
    d = distance_meters((0.0, 0.0), (0.001, 0.0))
    assert d == pytest.approx(111.195, abs=0.01)


@pytest.mark.parametrize(
    "distance, too_far",
    [
        (0.0, False),
        (99.99, False),
        (100.0, False),
        (100.01, True),
        (250.0, True),
    ],
)
def test_radius_threshold_is_inclusive(distance, too_far):
    assert is_too_far(distance) is too_far


def test_custom_radius():
    assert not is_too_far(180.0, radius_meters=200)
    assert is_too_far(180.0, radius_meters=150)
