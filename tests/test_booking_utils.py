import pytest

from app.utils.booking_utils import calculate_total_price, get_package_name


@pytest.mark.parametrize(
    "modules, expected",
    [
        ({}, "Basic Detailing"),
        ({"coating": False, "correction": False}, "Basic Detailing"),
        ({"coating": True}, "Ceramic Coating Package"),
        ({"correction": True}, "Paint Correction Package"),
        ({"interior": True}, "Interior Detail Package"),
        ({"coating": True, "interior": True}, "Custom Concours Package"),
    ],
)
def test_package_name(modules, expected):
    assert get_package_name(modules) == expected


def test_base_price_only():
    assert calculate_total_price("sedan", "new", {}) == 150
    assert calculate_total_price("luxury", "bad", {}) == 300


def test_flat_modules_are_added_at_list_price():
    assert calculate_total_price("suv", "used", {"coating": True, "interior": True}) == 570


def test_correction_is_scaled_by_condition():
    assert calculate_total_price("sedan", "used", {"correction": True}) == 186
    assert calculate_total_price("sedan", "bad", {"correction": True}) == 240
    assert calculate_total_price("sedan", "new", {"correction": True}) == 150


def test_total_is_floored():
    # 250 + 180 * 0.2 + 250 = 536
    assert calculate_total_price("sport", "used", {"correction": True, "coating": True}) == 536


@pytest.mark.parametrize("vehicle, condition", [("truck", "new"), ("sedan", "mint")])
def test_unknown_inputs_are_rejected(vehicle, condition):
    with pytest.raises(ValueError):
        calculate_total_price(vehicle, condition, {})
