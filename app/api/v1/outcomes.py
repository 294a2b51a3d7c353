from typing import Union
from fastapi import Response
from app.schemas import MutationOutcome, NotificationLevel, ProductOutcome
from common import AppError

Outcome = Union[MutationOutcome, ProductOutcome]


def unwrap_outcome(outcome: Outcome, response: Response) -> Outcome:
    """
    Successful outcomes go out as the response body with their status code.
    Failed ones become an AppError; the full outcome (notifications and the
    reloaded list, if any) travels in `details`.
    """
    if outcome.success:
        response.status_code = outcome.status_code
        return outcome

    first_error = next(
        (n for n in outcome.notifications if n.level == NotificationLevel.ERROR),
        None,
    )
    raise AppError(
        first_error.title if first_error else "Request failed",
        status_code=outcome.status_code,
        code="ACTION_FAILED",
        details=outcome.model_dump(mode="json"),
    )


__all__ = ["unwrap_outcome"]
