"""GitHub URL parsing."""

import re

from models.responses import RepoRef
from services.errors import InvalidURL

GITHUB_REPO_RE = re.compile(r"github\.com/([^/\s?#]+)/([^/\s?#]+)", re.IGNORECASE)


def parse_github_url(url: str) -> RepoRef:
    """Extract owner and repository name from a GitHub URL.

    Accepts ``https://github.com/owner/repo`` with an optional trailing
    ``.git`` and/or trailing slash, as well as scheme-less forms.
    """
    cleaned = url.strip()
    # ".git/" and "/.git" orders both occur in pasted URLs
    while cleaned.endswith("/") or cleaned.endswith(".git"):
        cleaned = cleaned[:-1] if cleaned.endswith("/") else cleaned[:-4]

    match = GITHUB_REPO_RE.search(cleaned)
    if not match:
        raise InvalidURL(
            "Failed to parse GitHub URL. Expected format: https://github.com/owner/repo"
        )

    return RepoRef(owner=match.group(1), name=match.group(2))
