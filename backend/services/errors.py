"""Error taxonomy for repository fetching and request validation.

Every error carries the HTTP status the router should answer with, so
handlers map failures structurally instead of matching on message text.
"""


class RepoAnalyzerError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(RepoAnalyzerError):
    status_code = 400


class InvalidURL(InvalidInput):
    pass


class RepoNotFound(RepoAnalyzerError):
    status_code = 404


class RateLimited(RepoAnalyzerError):
    status_code = 429


class UpstreamError(RepoAnalyzerError):
    status_code = 500
