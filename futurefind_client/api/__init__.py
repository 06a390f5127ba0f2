"""REST API access: authenticated request pipeline, endpoint catalog, groups."""

from .request_client import AuthenticatedRequestClient, RequestAttempt
from .services import FutureFindAPI

__all__ = ["AuthenticatedRequestClient", "FutureFindAPI", "RequestAttempt"]
