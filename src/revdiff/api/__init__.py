"""Review API access."""

from revdiff.api.client import ApiError, ReviewApiClient

__all__ = ["ApiError", "ReviewApiClient"]
