from jobsearch.models.company import Company
from jobsearch.models.criteria import SearchCriteria
from jobsearch.models.job_offer import NOT_AVAILABLE, JobOffer

__all__ = [
    "NOT_AVAILABLE",
    "Company",
    "JobOffer",
    "SearchCriteria",
]
