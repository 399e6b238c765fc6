class SchedulingError(Exception):
    """Base class for every rejection raised by the scheduling core."""

    code = "scheduling_error"

    def __init__(self, message="", **detail):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def as_dict(self):
        return {"error": self.code, "message": self.message, **self.detail}


class InvalidInterval(SchedulingError):
    """Raised when a candidate time span is malformed (missing date or start >= end)."""

    code = "invalid_interval"


class Conflict(SchedulingError):
    """Raised when a candidate interval overlaps a live commitment on the same resource."""

    code = "conflict"

    def __init__(self, commitment_id, message=""):
        super().__init__(
            message or f"Resource is already committed (commitment {commitment_id})",
            commitment_id=commitment_id,
        )
        self.commitment_id = commitment_id


class PolicyError(SchedulingError):
    """Raised when the requested resource is incompatible with the consumer's acquisition mode."""

    code = "policy_error"

    UNASSIGNED_FIXED_RESOURCE = "unassigned_fixed_resource"
    RESOURCE_NOT_ELIGIBLE = "resource_not_eligible"
    RESOURCE_INACTIVE = "resource_inactive"
    UNKNOWN_CATEGORY = "unknown_category"
    ASSIGNMENT_MODE_MISMATCH = "assignment_mode_mismatch"

    def __init__(self, rule, message="", **detail):
        super().__init__(message or rule.replace("_", " ").capitalize(), rule=rule, **detail)
        self.rule = rule


class UnknownEntity(SchedulingError):
    """Raised when a key references a parent record that does not exist in the caller's tenant."""

    code = "unknown_entity"

    def __init__(self, entity, entity_id, message=""):
        super().__init__(
            message or f"No {entity} with id {entity_id} in this tenant",
            entity=entity,
            entity_id=entity_id,
        )


class InvalidTransition(SchedulingError):
    """Raised when a commitment is asked to leave the cancelled state."""

    code = "invalid_transition"

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot move a {current} commitment to {requested}",
            current=current,
            requested=requested,
        )


class InvalidStatus(SchedulingError):
    """Raised when a fact payload or a new commitment carries a status outside the recognised set."""

    code = "invalid_status"

    def __init__(self, status):
        super().__init__(f"Unrecognised status {status!r}", status=status)


class MissingScope(SchedulingError):
    """Raised when a request does not carry its tenant or academic-year scope."""

    code = "missing_scope"

    def __init__(self, header):
        super().__init__(f"Missing {header} header", header=header)


# Mapping of scheduling errors to HTTP status codes
ERROR_STATUS = {
    InvalidInterval: 400,
    Conflict: 409,
    PolicyError: 422,
    UnknownEntity: 404,
    InvalidTransition: 409,
    InvalidStatus: 400,
    MissingScope: 400,
}


def status_for(exc):
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS:
            return ERROR_STATUS[klass]
    return 400
