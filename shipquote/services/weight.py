"""Parcel weight estimation from catalog variant weights."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

from shipquote.services.domain import CartLine, VariantWeight

logger = logging.getLogger(__name__)

DEFAULT_ITEM_WEIGHT_G = 500

# Grams per unit; platform enum names and short forms both appear in synced data.
_UNIT_TO_GRAMS: dict[str, Decimal] = {
    "g": Decimal("1"),
    "grams": Decimal("1"),
    "kg": Decimal("1000"),
    "kilograms": Decimal("1000"),
    "lb": Decimal("453.592"),
    "lbs": Decimal("453.592"),
    "pounds": Decimal("453.592"),
    "oz": Decimal("28.3495"),
    "ounces": Decimal("28.3495"),
}

_VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"


def variant_key(ref: Optional[str]) -> Optional[str]:
    """Lookup key for a variant reference (platform GID or bare id)."""
    if not ref:
        return None
    ref = str(ref).strip()
    if ref.startswith(_VARIANT_GID_PREFIX):
        ref = ref[len(_VARIANT_GID_PREFIX):]
    return ref.split("?", 1)[0] or None


def to_grams(weight, unit: Optional[str]) -> int:
    """Convert a declared weight to integer grams. Unknown units are grams."""
    factor = _UNIT_TO_GRAMS.get((unit or "g").strip().lower(), Decimal("1"))
    grams = Decimal(str(weight)) * factor
    return int(grams.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def estimate_weight(
    lines: Iterable[CartLine],
    variants: Mapping[str, VariantWeight],
    default_item_weight_g: int = DEFAULT_ITEM_WEIGHT_G,
) -> int:
    """Total parcel weight in grams for one store's lines.

    Lines whose variant is unknown or has no stored weight count as
    ``default_item_weight_g`` per unit.
    """
    total = 0
    for line in lines:
        quantity = max(0, line.quantity)
        variant = variants.get(variant_key(line.variant_ref) or "")
        if variant is None or variant.weight is None:
            logger.debug(f"No weight for variant {line.variant_ref!r}, assuming {default_item_weight_g}g")
            total += default_item_weight_g * quantity
            continue
        total += to_grams(variant.weight, variant.unit) * quantity
    return max(0, total)
