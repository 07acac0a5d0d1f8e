"""
Message Models
Pydantic models for imported chat messages and message filters
FILE: chatquiz/models/message.py
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Reaction(BaseModel):
    """A reaction symbol left on a message by a participant"""
    reaction: str = Field(..., min_length=1)
    participant: str


class Message(BaseModel):
    """
    Imported chat message

    Ids are assigned at import time and are globally ordered, but they are not
    guaranteed to follow timestamp order. Medias and reactions are kept in
    import order.
    """
    id: int
    timestamp: datetime
    participant: str
    platform: str
    text: str = ""
    words: int = Field(default=0, ge=0, description="Word count precomputed at import")
    medias: List[str] = Field(default_factory=list, description="Media URIs")
    reactions: List[Reaction] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are stored as UTC"""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def validate_content(self):
        if self.text == "" and not self.medias:
            raise ValueError(f"Message {self.id} has neither text nor media")
        return self

    @property
    def sort_key(self):
        """Chronological ordering with ties broken by id"""
        return (self.timestamp, self.id)

    @property
    def first_reaction(self) -> Optional[str]:
        return self.reactions[0].reaction if self.reactions else None


class MessageFilter(BaseModel):
    """
    Constraints an anchor message must satisfy

    Every field is optional; an empty filter matches any message.
    """
    platform: Optional[str] = None
    min_words: Optional[int] = Field(default=None, ge=0)
    has_reactions: bool = False

    model_config = {"frozen": True}
