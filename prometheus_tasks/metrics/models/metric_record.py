from typing import Any, NoReturn

from pydantic import BaseModel, Field, field_validator


class FrozenLabels(dict):
    """
    Read-only label mapping.

    Still a dict, so equality, model_dump() and orjson behave as for plain
    labels. Any in-place change raises TypeError.
    """

    def _read_only(self, *args: Any, **kwargs: Any) -> NoReturn:
        raise TypeError("labels are read-only")

    __setitem__ = _read_only
    __delitem__ = _read_only
    __ior__ = _read_only
    clear = _read_only
    pop = _read_only
    popitem = _read_only
    setdefault = _read_only
    update = _read_only

    def __reduce__(self):
        # copies rebuild through __init__, not __setitem__
        return (FrozenLabels, (dict(self),))


class MetricRecord(BaseModel):
    """
    One decoded Prometheus sample.

    Every result shape (vector, matrix, scalar, string) flattens into this
    record. ``value`` keeps the server's text token ("1", "NaN", "+Inf", or an
    arbitrary string for string results) and is never coerced to a number.
    """
    model_config = {"frozen": True}

    labels: dict[str, str] = Field(
        default_factory=FrozenLabels,
        description="Series labels; empty for scalar and string results",
    )
    timestamp: float = Field(..., description="Sample time in seconds since the epoch")
    value: str = Field(..., description="Sample value as sent by the server")

    @field_validator("labels")
    @classmethod
    def freeze_labels(cls, v: dict[str, str]) -> dict[str, str]:
        return FrozenLabels(v)
