"""Destination zone resolution."""

from typing import Optional, Sequence

from shipquote.services.domain import Zone
from shipquote.services.matching import names_match, normalize_name

# Region name variants as typed by shoppers or returned by address autocomplete.
SUBDIVISION_TO_CODE: dict[str, str] = {
    "Región Metropolitana de Santiago": "RM",
    "Region Metropolitana": "RM",
    "Santiago Metropolitan": "RM",
    "Santiago": "RM",
    "Metropolitana": "RM",
    "Valparaíso": "V",
    "Biobío": "VIII",
    "Bio Bio": "VIII",
    "Maule": "VII",
    "O'Higgins": "VI",
    "Libertador General Bernardo O'Higgins": "VI",
    "Araucanía": "IX",
    "La Araucanía": "IX",
    "Los Lagos": "X",
    "Los Ríos": "XIV",
    "Coquimbo": "IV",
    "Antofagasta": "II",
    "Atacama": "III",
    "Tarapacá": "I",
    "Arica y Parinacota": "XV",
    "Aysén": "XI",
    "Magallanes": "XII",
    "Magallanes y de la Antártica Chilena": "XII",
    "Ñuble": "XVI",
}

_NORMALIZED_LOOKUP: dict[str, str] = {
    normalize_name(name): code for name, code in SUBDIVISION_TO_CODE.items()
}


def subdivision_code(subdivision: str) -> str:
    """Zone code for a subdivision name; unknown names pass through unchanged."""
    if subdivision in SUBDIVISION_TO_CODE:
        return SUBDIVISION_TO_CODE[subdivision]
    return _NORMALIZED_LOOKUP.get(normalize_name(subdivision), subdivision)


def resolve_zone(zones: Sequence[Zone], subdivision: str) -> Optional[Zone]:
    """Pick the zone for a destination subdivision.

    Exact code match first (against the mapped code or the raw name), then
    a name containment match, then the first zone in storage order.
    Returns None only for an empty zone list.
    """
    if not zones:
        return None

    code = subdivision_code(subdivision or "")
    for zone in zones:
        if zone.code == code or zone.code == subdivision:
            return zone

    for zone in zones:
        if names_match(zone.name, subdivision or ""):
            return zone

    return zones[0]
