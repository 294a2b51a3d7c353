from typing import Any, Type, TypeVar
from pydantic import BaseModel, ValidationError
from common import get_app_logger

logger = get_app_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_list(model: Type[ModelT], payload: Any, *, source: str) -> list[ModelT]:
    """
    Validate a JSON array from the clinic API item by item.

    A few endpoints wrap the array as {"items": [...]}; both shapes are
    accepted. Items that fail validation are dropped and logged so one bad
    record does not blank the whole screen.
    """
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        payload = payload["items"]
    if not isinstance(payload, list):
        logger.warning(
            "Expected a list from the clinic API",
            source=source,
            received=type(payload).__name__,
        )
        return []

    parsed: list[ModelT] = []
    for item in payload:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed record",
                source=source,
                model=model.__name__,
                errors=e.error_count(),
            )
    return parsed


__all__ = ["parse_list"]
