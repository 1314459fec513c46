"""Domain exceptions raised by services and mapped to responses by the API layer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldViolation:
    """A single broken rule on a single input field."""

    field: str
    message: str


class ValidationFailed(Exception):
    """Input broke one or more rules; carries the complete list of violations."""

    def __init__(self, errors: list[FieldViolation]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))

    def fields(self) -> set[str]:
        """Names of the fields with at least one violation."""
        return {e.field for e in self.errors}

    def as_dict(self) -> dict:
        return {"errors": [{"field": e.field, "message": e.message} for e in self.errors]}


class AuthorNotFoundError(Exception):
    """A post was written on behalf of a user that does not exist."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")
