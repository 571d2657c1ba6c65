class TimetableError(Exception):
    """Base class for errors raised by the timetable services."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(TimetableError):
    """A referenced semester, lesson, period, room, group, teacher or schedule does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class ConflictError(TimetableError):
    """A schedule write would break group exclusivity for a weekly slot."""

    status_code = 409
