"""Domain-specific exceptions"""


class PettyCashError(Exception):
    """Base exception for domain layer"""

    code = "PETTY_CASH_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class ValidationError(PettyCashError):
    """Malformed amount, missing required field or missing rejection comment"""

    code = "VALIDATION_ERROR"
    status_code = 422


class PermissionDenied(PettyCashError):
    """Actor role is not allowed to perform the requested action"""

    code = "PERMISSION_DENIED"
    status_code = 403


class NotFound(PettyCashError):
    """Requested entity does not exist"""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, entity_id: object | None = None) -> None:
        self.resource = resource
        self.entity_id = entity_id
        suffix = f" {entity_id}" if entity_id is not None else ""
        super().__init__(f"{resource}{suffix} not found")


class AlreadyDecided(PettyCashError):
    """Transition attempted on an entity that is no longer pending"""

    code = "ALREADY_DECIDED"
    status_code = 409

    def __init__(self, resource: str, entity_id: object, status: str) -> None:
        self.resource = resource
        self.entity_id = entity_id
        self.status = status
        super().__init__(f"{resource} {entity_id} is already {status}")


class PersistenceFailure(PettyCashError):
    """Store unavailable or constraint violated while writing"""

    code = "PERSISTENCE_FAILURE"
    status_code = 503


class LedgerIntegrityError(PettyCashError):
    """Stored running balances do not form a consistent chain"""

    code = "LEDGER_INTEGRITY"
    status_code = 500

    def __init__(self, message: str, entry_id: object | None = None) -> None:
        self.entry_id = entry_id
        super().__init__(message)


class Unauthenticated(PettyCashError):
    """No known user behind the request"""

    code = "UNAUTHENTICATED"
    status_code = 401
