"""Chronology entry models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    computed_field,
    model_validator,
)

from ..utils.timeline import classify_arc, correct_timezone


class EntryError(ValueError):
    """Raised when a raw field set cannot become a chronology entry."""


class EntrySource(str, Enum):
    """Grammar a raw field set was read from."""
    
    POST = "post"
    SETEPISODE = "setepisode"
    SETEPISODE_NOTIME = "setepisodenotime"
    SNIPPET = "snippet"


class ChronoEntry(BaseModel):
    """
    Canonical chronology entry.
    
    Times are canonical: the poster's timezone offset has already been
    removed. Note the naming of ``timeless``: it is True when no end time
    is known, and such entries are rendered as completed episodes.
    """
    
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    id: PositiveInt = Field(..., description="Forum topic id of the episode")
    name: str = Field(..., min_length=1, description="Episode title, unescaped")
    start: datetime = Field(..., description="Canonical start time")
    end: Optional[datetime] = Field(default=None, description="Canonical end time, only when not timeless")
    timeless: bool = Field(default=False, description="True when no end time is known")
    chara: Tuple[NonNegativeInt, ...] = Field(
        default=(),
        description="Character ids in order of appearance in the source"
    )
    tz: int = Field(..., description="Hour offset the source times were reported in")
    
    @computed_field(description="Arc the start time falls into")
    @property
    def arc(self) -> int:
        return classify_arc(self.start)
    
    @model_validator(mode="after")
    def check_end_matches_timeless(self) -> "ChronoEntry":
        if self.timeless and self.end is not None:
            raise ValueError("timeless entry cannot have an end time")
        if not self.timeless and self.end is None:
            raise ValueError("entry with an end time expected, got none")
        return self


class RawEntry(BaseModel):
    """
    Fields as extracted by one of the parsers, before validation.
    
    Times are still in the poster's timezone. Call :meth:`to_entry` to get
    the canonical :class:`ChronoEntry`.
    """
    
    source: EntrySource = Field(..., description="Grammar the fields were read from")
    id: Optional[int] = None
    name: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    timeless: Optional[bool] = Field(
        default=None,
        description="Explicit timeless flag; derived from the end time when unset"
    )
    chara: Optional[List[int]] = None
    tz: Optional[int] = None
    done: Optional[bool] = Field(
        default=None,
        description="Completion status shown on the page, if the grammar has one"
    )
    
    def to_entry(self) -> ChronoEntry:
        """
        Correct the timezone and build the canonical entry.
        
        Raises:
            EntryError: If a required field is missing
            pydantic.ValidationError: If a field value is invalid
        """
        missing = [
            field for field in ("id", "name", "start", "chara", "tz")
            if getattr(self, field) is None
        ]
        if missing:
            raise EntryError(f"Missing {', '.join(missing)} in {self.source.value} entry")
        
        timeless = self.timeless if self.timeless is not None else self.end is None
        
        return ChronoEntry(
            id=self.id,
            name=self.name,
            start=correct_timezone(self.start, self.tz),
            end=correct_timezone(self.end, self.tz),
            timeless=timeless,
            chara=self.chara,
            tz=self.tz,
        )
