"""Classify free-text lesson locations as on-site or remote.

Anything not recognised as an office/in-person location is treated as remote
(FAD). There is no "unknown" category.
"""

from registro_formazione.models import LocationCategory, LocationClassification

ON_SITE_KEYWORDS: frozenset[str] = frozenset({"office", "ufficio", "presenza"})

# Markers of distance learning in the portal's "tipo sede" / "sede" columns
FAD_KEYWORDS: frozenset[str] = frozenset({"online", "fad"})

ON_SITE = LocationClassification(
    category=LocationCategory.ON_SITE, tipologia="1", svolgimento="1"
)
REMOTE = LocationClassification(
    category=LocationCategory.REMOTE, tipologia="4", svolgimento=""
)


def classify_location(text: str | None) -> LocationClassification:
    """Map a location string to its category and register codes.

    >>> classify_location("Milano Porta Venezia - Ufficio").tipologia
    '1'
    >>> classify_location("Online").category
    <LocationCategory.REMOTE: 'remote'>
    """
    lowered = (text or "").lower()
    if any(keyword in lowered for keyword in ON_SITE_KEYWORDS):
        return ON_SITE
    return REMOTE


def is_fad(tipo_sede: str | None, sede: str | None) -> bool:
    """True when either the location type or the location mentions online/FAD."""
    combined = f"{tipo_sede or ''} {sede or ''}".lower()
    return any(keyword in combined for keyword in FAD_KEYWORDS)
