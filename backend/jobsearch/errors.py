class JobSearchError(Exception):
    """Base class for every error raised by the search pipeline."""


class ConfigurationError(JobSearchError):
    """Credentials or an API key are missing; nothing was sent upstream."""


class AuthenticationError(JobSearchError):
    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Authentication failed: HTTP {status_code} - {body}")


class ApiError(JobSearchError):
    def __init__(self, provider: str, status_code: int, body: str):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} API error: HTTP {status_code} - {body}")


class MappingError(JobSearchError):
    """An upstream record could not be turned into a domain record."""


class NothingToExportError(JobSearchError):
    def __init__(self, message: str = "Nothing to export"):
        super().__init__(message)


class SearchBusyError(JobSearchError):
    def __init__(self, message: str = "A search is already running"):
        super().__init__(message)
