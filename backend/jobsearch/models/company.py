import itertools
from dataclasses import dataclass, field

from jobsearch.utils.ranges import headcount_bounds

_placeholder_ids = itertools.count(1)


@dataclass(frozen=True)
class Company:
    """A company as returned by the registry or the enrichment provider."""

    # Identification
    siret: str | None = None
    siren: str | None = None
    name: str | None = None
    trade_name: str | None = None

    # Contact
    email: str | None = None
    hr_email: str | None = None
    phone: str | None = None
    website: str | None = None

    # Location
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    department: str | None = None
    region: str | None = None

    # Activity
    naf_code: str | None = None
    naf_label: str | None = None
    sector: str | None = None

    # Size and revenue
    headcount_range: str | None = None
    headcount_min: int | None = field(default=None, init=False)
    headcount_max: int | None = field(default=None, init=False)
    category: str | None = None
    revenue: str | None = None

    # Dates
    creation_date: str | None = None
    last_update: str | None = None

    source: str = "API SIRENE"

    def __post_init__(self) -> None:
        low, high = headcount_bounds(self.headcount_range)
        object.__setattr__(self, "headcount_min", low)
        object.__setattr__(self, "headcount_max", high)
        # Not a dataclass field, so asdict and equality ignore it
        object.__setattr__(self, "_placeholder_id", next(_placeholder_ids))

    @property
    def size_label(self) -> str:
        if self.headcount_min is None:
            return "Non renseigné"
        if self.headcount_max is None:
            return f"{self.headcount_min}+ salariés"
        if self.headcount_min == self.headcount_max:
            plural = "s" if self.headcount_min > 1 else ""
            return f"{self.headcount_min} salarié{plural}"
        return f"{self.headcount_min}-{self.headcount_max} salariés"

    # Deduplication key: SIREN first, then name + city
    @property
    def unique_key(self) -> str:
        if self.siren:
            return f"SIREN_{self.siren}"
        if self.name is not None and self.city is not None:
            return f"NAME_{self.name.lower()}_{self.city.lower()}"
        return f"UNKNOWN_{self._placeholder_id}"

    def to_csv_row(self) -> list[str | None]:
        return [
            self.name,
            self.trade_name,
            self.siren,
            self.siret,
            self.size_label,
            self.category,
            self.revenue,
            self.website,
            self.email,
            self.hr_email,
            self.phone,
            self.address,
            self.postal_code,
            self.city,
            self.department,
            self.region,
            self.naf_code,
            self.naf_label,
            self.creation_date,
            self.source,
        ]

    @classmethod
    def csv_headers(cls) -> list[str]:
        return [
            "Nom entreprise",
            "Nom commercial",
            "SIREN",
            "SIRET",
            "Taille (effectif)",
            "Catégorie",
            "Chiffre d'affaires",
            "Site web",
            "Email général",
            "Email RH",
            "Téléphone",
            "Adresse",
            "Code postal",
            "Ville",
            "Département",
            "Région",
            "Code NAF",
            "Secteur activité",
            "Date création",
            "Source",
        ]
