# utils/middleware.py

import logging
from utils.context import set_request_context, clear_request_context, get_client_ip

logger = logging.getLogger(__name__)


class AuditContextMiddleware:
    """
    Make the logged-in operator and client IP available to model saves and
    audit logging for the duration of a request.

    Place after AuthenticationMiddleware; request.user must already be set.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        set_request_context(
            user=getattr(request, 'user', None),
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
            request_path=request.path,
        )
        try:
            return self.get_response(request)
        finally:
            # Worker threads are reused between requests
            clear_request_context()
