# utils/context.py

"""
Per-thread record of who is acting and from where.

BaseModel.save() reads it to stamp created_by/updated_by and the source IP,
and the academic audit logger reads it for the operator's address. Web
requests fill it through AuditContextMiddleware; scripts and tests use
RequestContext.
"""

from threading import local
import logging

logger = logging.getLogger(__name__)

_state = local()


def _build_context(user=None, ip_address=None, user_agent=None, request_path=None):
    if user is not None and not user.is_authenticated:
        user = None
    return {
        'user': user,
        'ip_address': ip_address,
        'user_agent': user_agent or '',
        'request_path': request_path or '',
    }


def set_request_context(user=None, ip_address=None, user_agent=None, request_path=None):
    """Replace this thread's acting user/IP. Anonymous users are stored as None."""
    _state.context = _build_context(user, ip_address, user_agent, request_path)
    logger.debug(f"Request context set for {user} from {ip_address}")


def get_request_context():
    """This thread's context dict (user, ip_address, user_agent, request_path) or None."""
    return getattr(_state, 'context', None)


def clear_request_context():
    _state.__dict__.pop('context', None)


def get_client_ip(request):
    """Client IP, honoring the first X-Forwarded-For hop when proxied."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    first_hop = forwarded.split(',')[0].strip()
    return first_hop or request.META.get('REMOTE_ADDR')


class RequestContext:
    """
    Temporarily act as `user` outside a web request.

        with RequestContext(user=registrar, ip_address='127.0.0.1'):
            BatchProgressionService.process_batch(items, operator=registrar)

    The previous context, if any, is restored on exit.
    """

    def __init__(self, user=None, ip_address=None, user_agent=None, request_path=None):
        self.context = _build_context(user, ip_address, user_agent, request_path)
        self._saved = None

    def __enter__(self):
        self._saved = get_request_context()
        _state.context = self.context
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._saved is None:
            clear_request_context()
        else:
            _state.context = self._saved
        return False
