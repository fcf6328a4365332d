# salon/errors.py
"""Error taxonomy shared by the scheduling core, the stores and the API."""


class SalonError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(SalonError):
    status_code = 404
    code = "not_found"


class ServiceNotFound(NotFound):
    def __init__(self, service_id):
        super().__init__(f"Service {service_id} not found")
        self.service_id = service_id


class ValidationError(SalonError):
    status_code = 422
    code = "validation_error"


class SchedulingConflict(SalonError):
    status_code = 409
    code = "scheduling_conflict"

    def __init__(self, detail: str, conflicting_ids=()):
        super().__init__(detail)
        self.conflicting_ids = list(conflicting_ids)


class DuplicateRecord(SalonError):
    status_code = 409
    code = "duplicate"


class InvalidStatusTransition(SalonError):
    status_code = 409
    code = "invalid_status_transition"

    def __init__(self, current, new):
        super().__init__(f"Cannot move appointment from '{current}' to '{new}'")
        self.current = current
        self.new = new


class StoreTimeout(SalonError):
    status_code = 504
    code = "timeout"
