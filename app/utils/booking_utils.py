import math
from typing import Dict

PRICING_CONFIG = {
    "base": {
        "sedan": 150,
        "suv": 200,
        "sport": 250,
        "luxury": 300,
    },
    "modules": {
        "coating": 250,
        "correction": 180,
        "interior": 120,
    },
    "condition_multiplier": {
        "new": 0,
        "used": 0.2,
        "bad": 0.5,
    },
}

VEHICLE_TYPES = tuple(PRICING_CONFIG["base"])
CONDITION_LEVELS = tuple(PRICING_CONFIG["condition_multiplier"])


def _selected(modules: Dict[str, bool]):
    return [key for key, enabled in (modules or {}).items() if enabled]


def get_package_name(modules: Dict[str, bool]) -> str:
    """Display name for a booking based on the selected service modules"""
    selected = _selected(modules)
    if len(selected) == 0:
        return "Basic Detailing"
    if len(selected) == 1:
        if selected[0] == "coating":
            return "Ceramic Coating Package"
        if selected[0] == "correction":
            return "Paint Correction Package"
        return "Interior Detail Package"
    return "Custom Concours Package"


def calculate_total_price(vehicle: str, condition: str, modules: Dict[str, bool]) -> int:
    """Quote for a vehicle type, paint condition and set of modules.

    Paint correction is the only labour-heavy module, so its cost is scaled
    by the condition multiplier instead of being charged at list price.
    """
    if vehicle not in PRICING_CONFIG["base"]:
        raise ValueError(f"Invalid vehicle type: {vehicle}")
    if condition not in PRICING_CONFIG["condition_multiplier"]:
        raise ValueError(f"Invalid condition level: {condition}")

    selected = _selected(modules)
    subtotal = PRICING_CONFIG["base"][vehicle]
    for module in selected:
        subtotal += PRICING_CONFIG["modules"].get(module, 0)

    if "correction" in selected:
        correction = PRICING_CONFIG["modules"]["correction"]
        subtotal += correction * PRICING_CONFIG["condition_multiplier"][condition] - correction

    return math.floor(subtotal)
