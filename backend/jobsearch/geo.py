"""Static mapping of French regions to their departments.

The table is fixed data: a change of the administrative map is a code
change, never a configuration reload.
"""

from enum import Enum

UNKNOWN_REGION = "Inconnue"

_METROPOLITAN_REGIONS: dict[str, tuple[str, ...]] = {
    "Auvergne-Rhône-Alpes": (
        "01", "03", "07", "15", "26", "38", "42", "43", "63", "69", "73", "74",
    ),
    "Bourgogne-Franche-Comté": ("21", "25", "39", "58", "70", "71", "89", "90"),
    "Bretagne": ("22", "29", "35", "56"),
    "Centre-Val de Loire": ("18", "28", "36", "37", "41", "45"),
    "Corse": ("2A", "2B"),
    "Grand Est": ("08", "10", "51", "52", "54", "55", "57", "67", "68", "88"),
    "Hauts-de-France": ("02", "59", "60", "62", "80"),
    "Île-de-France": ("75", "77", "78", "91", "92", "93", "94", "95"),
    "Normandie": ("14", "27", "50", "61", "76"),
    "Nouvelle-Aquitaine": (
        "16", "17", "19", "23", "24", "33", "40", "47", "64", "79", "86", "87",
    ),
    "Occitanie": (
        "09", "11", "12", "30", "31", "32", "34", "46", "48", "65", "66", "81",
        "82",
    ),
    "Pays de la Loire": ("44", "49", "53", "72", "85"),
    "Provence-Alpes-Côte d'Azur": ("04", "05", "06", "13", "83", "84"),
}

_OVERSEAS_REGIONS: dict[str, tuple[str, ...]] = {
    "Guadeloupe": ("971",),
    "Martinique": ("972",),
    "Guyane": ("973",),
    "La Réunion": ("974",),
    "Mayotte": ("976",),
}

REGIONS: dict[str, tuple[str, ...]] = {**_METROPOLITAN_REGIONS, **_OVERSEAS_REGIONS}

_REGION_BY_DEPARTMENT: dict[str, str] = {
    code: region for region, codes in REGIONS.items() for code in codes
}


class LocationScope(str, Enum):
    DEPARTMENT = "department"
    REGION = "region"
    METROPOLITAN = "metropolitan"
    FRANCE = "france"


def departments_of(region: str) -> tuple[str, ...]:
    """Ordered department codes of a region, empty for an unknown region."""
    return REGIONS.get(region, ())


def region_of(department: str | None) -> str:
    if not department:
        return UNKNOWN_REGION
    return _REGION_BY_DEPARTMENT.get(department, UNKNOWN_REGION)


def is_valid_region(region: str) -> bool:
    return region in REGIONS


def all_regions() -> list[str]:
    return list(REGIONS)


def metropolitan_regions() -> list[str]:
    return list(_METROPOLITAN_REGIONS)


def overseas_regions() -> list[str]:
    return list(_OVERSEAS_REGIONS)


def all_metropolitan_departments() -> list[str]:
    return sorted(
        code for codes in _METROPOLITAN_REGIONS.values() for code in codes
    )


def all_overseas_departments() -> list[str]:
    return [code for codes in _OVERSEAS_REGIONS.values() for code in codes]


def all_departments() -> list[str]:
    return all_metropolitan_departments() + all_overseas_departments()


def departments_for_scope(
    scope: LocationScope,
    *,
    region: str | None = None,
    department: str | None = None,
) -> list[str]:
    """Resolve a location choice into the department codes a search covers."""
    if scope is LocationScope.DEPARTMENT:
        if not department:
            raise ValueError("A department code is required for this scope")
        return [department]
    if scope is LocationScope.REGION:
        if not region or not is_valid_region(region):
            raise ValueError(f"Unknown region: {region!r}")
        return list(departments_of(region))
    if scope is LocationScope.METROPOLITAN:
        return all_metropolitan_departments()
    return all_departments()
