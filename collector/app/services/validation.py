"""Event body validation."""

import math
import sys
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from collector.app.core.logging import get_logger

logger = get_logger(__name__)


class EventRecord(BaseModel):
    """A client interaction event as posted by the browser.

    Strict mode keeps values exactly as decoded from JSON: strings are
    not stripped and an integer ``ts`` stays an integer.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    type: str = Field(min_length=2, max_length=64)
    page: str = Field(max_length=256)
    ts: Union[int, float]
    payload: Optional[Dict[str, Any]] = None

    @field_validator("page")
    @classmethod
    def page_must_be_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("page must start with '/'")
        return v

    @field_validator("ts")
    @classmethod
    def ts_must_be_finite(cls, v: Union[int, float]) -> Union[int, float]:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("ts must be a finite number")
        # Integers beyond the double range are not finite JSON numbers either
        if isinstance(v, int) and abs(v) > sys.float_info.max:
            raise ValueError("ts must be a finite number")
        return v

    @field_validator("payload")
    @classmethod
    def payload_must_be_object(cls, v: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        # Only runs when the key was sent; an omitted payload keeps the default
        if v is None:
            raise ValueError("payload must be an object when present")
        return v


def is_valid_body(data: Any) -> Optional[EventRecord]:
    """Validate a decoded request body.

    Args:
        data: Anything ``json.loads`` can return

    Returns:
        The validated event, or None if the body does not match
    """
    if not isinstance(data, dict):
        return None
    try:
        return EventRecord.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        logger.debug(
            "Event body failed validation",
            extra={"field": ".".join(str(p) for p in first["loc"]), "reason": first["msg"]},
        )
        return None
