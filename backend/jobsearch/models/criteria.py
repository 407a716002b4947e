from dataclasses import dataclass

from jobsearch.utils.ranges import format_amount

SORT_OPTIONS = {"chiffre_affaires", "date_creation"}


@dataclass(frozen=True)
class SearchCriteria:
    """Filters for one company enrichment search.

    ``department`` and ``region`` are mutually exclusive; leaving both unset
    searches the whole country.
    """

    query: str | None = None
    department: str | None = None
    region: str | None = None
    naf_code: str | None = None

    revenue_min: int | None = None
    revenue_max: int | None = None
    net_income_min: int | None = None

    created_after_year: int | None = None
    created_before_year: int | None = None

    headcount_min: int | None = None
    headcount_max: int | None = None

    exclude_closed: bool = True
    exclude_sole_proprietors: bool = True

    page: int = 1
    page_size: int = 20
    sort_by: str | None = None

    def __post_init__(self) -> None:
        if self.department and self.region:
            raise ValueError("department and region filters are mutually exclusive")
        if self.page < 1:
            raise ValueError("page starts at 1")
        if self.page_size < 1:
            raise ValueError("page_size must be positive")
        if self.sort_by is not None and self.sort_by not in SORT_OPTIONS:
            raise ValueError(f"Unsupported sort key: {self.sort_by!r}")

    def summary(self) -> str:
        parts: list[str] = []

        if self.query:
            parts.append(f'Recherche: "{self.query}"')

        if self.region:
            parts.append(f"Région: {self.region}")
        elif self.department:
            parts.append(f"Dép: {self.department}")

        if self.revenue_min is not None or self.revenue_max is not None:
            bounds = []
            if self.revenue_min is not None:
                bounds.append(f"≥{format_amount(self.revenue_min)}")
            if self.revenue_max is not None:
                bounds.append(f"≤{format_amount(self.revenue_max)}")
            parts.append("CA: " + " - ".join(bounds))

        if self.created_after_year is not None:
            parts.append(f"Créées depuis: {self.created_after_year}")

        if self.headcount_min is not None or self.headcount_max is not None:
            bounds = []
            if self.headcount_min is not None:
                bounds.append(f"≥{self.headcount_min}")
            if self.headcount_max is not None:
                bounds.append(f"≤{self.headcount_max}")
            parts.append("Effectif: " + " - ".join(bounds))

        if self.exclude_closed:
            parts.append("✓ En activité")
        if self.exclude_sole_proprietors:
            parts.append("✓ Sociétés uniquement")

        return " | ".join(parts) if parts else "Toutes entreprises"
