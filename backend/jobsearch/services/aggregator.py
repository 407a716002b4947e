from collections.abc import Iterable

from jobsearch.models.company import Company
from jobsearch.models.job_offer import JobOffer


class ResultCollection:
    """In-memory results of the current session.

    Job offers are kept in arrival order. Companies are keyed by
    ``Company.unique_key``; a later record with the same key replaces the
    earlier one but keeps its position.
    """

    def __init__(self) -> None:
        self._offers: list[JobOffer] = []
        self._companies: dict[str, Company] = {}

    def add_offers(self, offers: Iterable[JobOffer]) -> int:
        before = len(self._offers)
        self._offers.extend(offers)
        return len(self._offers) - before

    def add_companies(self, companies: Iterable[Company]) -> int:
        """Merge companies into the collection; returns how many keys are new."""
        added = 0
        for company in companies:
            key = company.unique_key
            if key not in self._companies:
                added += 1
            self._companies[key] = company
        return added

    def job_offers(self) -> list[JobOffer]:
        return list(self._offers)

    def companies(self) -> list[Company]:
        return list(self._companies.values())

    def sorted_companies(self) -> list[Company]:
        return sorted(
            self._companies.values(),
            key=lambda company: (company.name or "").lower(),
        )

    def records(self) -> list[JobOffer | Company]:
        return [*self._offers, *self._companies.values()]

    def clear(self) -> None:
        self._offers.clear()
        self._companies.clear()

    @property
    def is_empty(self) -> bool:
        return not self._offers and not self._companies

    def __len__(self) -> int:
        return len(self._offers) + len(self._companies)
