from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Tuple

from app.core.config import settings

CENT = Decimal("0.01")
GRAM = Decimal("0.001")

# Largest weight a Numeric(10, 3) column holds
MAX_WEIGHT = Decimal("9999999.999")


class MaterialType(str, Enum):
    mixed = "mixed"
    plastic = "plastic"
    paper = "paper"
    glass = "glass"
    metal = "metal"
    e_waste = "e_waste"


# Rate paid per kg
MATERIAL_RATES = {
    MaterialType.plastic: Decimal("0.15"),
    MaterialType.paper:   Decimal("0.08"),
    MaterialType.glass:   Decimal("0.05"),
    MaterialType.metal:   Decimal("0.40"),
    MaterialType.e_waste: Decimal("1.20"),
}


def rate_for(material: MaterialType) -> Decimal:
    if material in MATERIAL_RATES:
        return MATERIAL_RATES[material]
    return Decimal(str(settings.DEFAULT_RATE_PER_KG))


def compute_earnings(weight: Decimal, material: MaterialType = MaterialType.mixed) -> Tuple[Decimal, Decimal]:
    rate = rate_for(material)
    earnings = (Decimal(weight) * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    return rate, earnings
