"""Moment and GameContent models.

A moment is one of five kinds, each its own frozen model tagged by ``type``.
Consumers branch with ``isinstance`` and close with ``assert_never`` so an
unhandled kind is a type error at every call site.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Mapping, Union, assert_never

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

# Tags older content files were written with.
LEGACY_TYPE_ALIASES: dict[str, str] = {
    "fill-in": "fillIn",
    "mc": "multipleChoice",
    "shuffle-item": "shuffleItem",
    "moment": "shuffleItem",
}

MULTIPLE_CHOICE_OPTION_COUNT = 4


class _MomentBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    index: int = Field(ge=0)
    importance: float | None = Field(default=None, ge=0, le=10)

    @property
    def rank_importance(self) -> float:
        """Importance used for ranking; absent counts as 0."""
        return self.importance if self.importance is not None else 0.0


class StartMoment(_MomentBase):
    type: Literal["start"] = "start"
    context: str


class EndMoment(_MomentBase):
    type: Literal["end"] = "end"
    context: str


class FillInMoment(_MomentBase):
    type: Literal["fillIn"] = "fillIn"
    prompt: str
    answer: str = Field(min_length=1)


class MultipleChoiceMoment(_MomentBase):
    type: Literal["multipleChoice"] = "multipleChoice"
    context: str
    question: str
    options: tuple[str, ...] = Field(min_length=2)
    correct_option_index: int = Field(alias="correctOptionIndex", ge=0)
    explanation: str | None = None

    @model_validator(mode="after")
    def _correct_option_in_range(self) -> "MultipleChoiceMoment":
        if self.correct_option_index >= len(self.options):
            raise ValueError("correctOptionIndex is out of range")
        return self

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_option_index]


class ShuffleItemMoment(_MomentBase):
    type: Literal["shuffleItem"] = "shuffleItem"
    context: str


Moment = Annotated[
    Union[StartMoment, EndMoment, FillInMoment, MultipleChoiceMoment, ShuffleItemMoment],
    Field(discriminator="type"),
]

ScorableMoment = Union[FillInMoment, MultipleChoiceMoment, ShuffleItemMoment]

_MOMENT_ADAPTER: TypeAdapter[Moment] = TypeAdapter(Moment)


def _normalize_raw_moment(raw: Any) -> Any:
    if not isinstance(raw, Mapping):
        return raw
    data = dict(raw)
    kind = data.get("type")
    if kind in LEGACY_TYPE_ALIASES:
        data["type"] = LEGACY_TYPE_ALIASES[kind]
    if data.get("type") == "shuffleItem" and not data.get("context") and data.get("text"):
        data["context"] = data["text"]
    return data


def _field_path(exc: PydanticValidationError, prefix: str) -> tuple[str, str]:
    first = exc.errors()[0]
    parts = [prefix, *(str(part) for part in first.get("loc", ()))]
    # Drop the discriminator tag pydantic inserts into union locations.
    parts = [part for part in parts if part not in LEGACY_TYPE_ALIASES.values() and part not in ("start", "end")]
    return ".".join(part for part in parts if part), first.get("msg", "invalid value")


def parse_moment(raw: Mapping[str, Any], field: str = "moment") -> Moment:
    """Parse one moment, accepting legacy tags.

    Raises:
        ValidationError: The payload is not a valid moment of a known kind.
    """
    try:
        return _MOMENT_ADAPTER.validate_python(_normalize_raw_moment(raw))
    except PydanticValidationError as exc:
        path, message = _field_path(exc, field)
        raise ValidationError(path, message) from exc


class GameContent(BaseModel):
    """One playable game: a title and its moments.

    Immutable once loaded. Serialise with ``to_payload()`` for camelCase JSON.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    game_id: str = Field(alias="gameId", min_length=1)
    title: str
    event_data: dict[str, Any] | None = Field(default=None, alias="eventData")
    moments: tuple[Moment, ...]

    @field_validator("moments", mode="before")
    @classmethod
    def _accept_legacy_tags(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [_normalize_raw_moment(item) for item in value]
        return value

    @model_validator(mode="after")
    def _check_structure(self) -> "GameContent":
        starts = sum(1 for m in self.moments if isinstance(m, StartMoment))
        ends = sum(1 for m in self.moments if isinstance(m, EndMoment))
        if starts > 1:
            raise ValueError("at most one start moment is allowed")
        if ends > 1:
            raise ValueError("at most one end moment is allowed")
        indices = [m.index for m in self.moments]
        if len(indices) != len(set(indices)):
            raise ValueError("moment indices must be unique")
        return self

    @classmethod
    def from_payload(cls, payload: Any) -> "GameContent":
        """Validate a decoded JSON document.

        Raises:
            ValidationError: With the path of the first offending field.
        """
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as exc:
            path, message = _field_path(exc, "")
            raise ValidationError(path or "content", message) from exc

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @property
    def start(self) -> StartMoment | None:
        return next((m for m in self.moments if isinstance(m, StartMoment)), None)

    @property
    def end(self) -> EndMoment | None:
        return next((m for m in self.moments if isinstance(m, EndMoment)), None)

    @property
    def quiz_moments(self) -> list[ScorableMoment]:
        """Moments other than start/end, in index (chronological) order."""
        items = [m for m in self.moments if not isinstance(m, (StartMoment, EndMoment))]
        return sorted(items, key=lambda m: m.index)


def moment_context(moment: Moment) -> str | None:
    """Narrative text of a moment, where its kind carries one."""
    if isinstance(moment, (StartMoment, EndMoment, ShuffleItemMoment, MultipleChoiceMoment)):
        return moment.context
    if isinstance(moment, FillInMoment):
        return None
    assert_never(moment)


def points_for(importance: float | None) -> int:
    """Points for a correct fill-in or multiple-choice answer."""
    if importance is None:
        return 1
    # Half-up, so 8.5 scores 9 rather than banker's 8.
    return math.floor(importance * 10 + 0.5)

