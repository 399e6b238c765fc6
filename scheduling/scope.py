from typing import NamedTuple

from .exceptions import MissingScope

TENANT_HEADER = "HTTP_X_TENANT_ID"
ACADEMIC_YEAR_HEADER = "HTTP_X_ACADEMIC_YEAR_ID"
ACTOR_HEADER = "HTTP_X_ACTOR_ID"


class Scope(NamedTuple):
    """Opaque tenant/academic-year pair every query and insert is filtered by."""

    tenant_id: str
    academic_year_id: str


def scope_from_request(request) -> Scope:
    tenant_id = request.META.get(TENANT_HEADER)
    if not tenant_id:
        raise MissingScope("X-Tenant-ID")
    academic_year_id = request.META.get(ACADEMIC_YEAR_HEADER)
    if not academic_year_id:
        raise MissingScope("X-Academic-Year-ID")
    return Scope(tenant_id, academic_year_id)


def actor_from_request(request) -> str:
    actor_id = request.META.get(ACTOR_HEADER)
    if actor_id:
        return actor_id
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return str(user.pk)
    raise MissingScope("X-Actor-ID")
