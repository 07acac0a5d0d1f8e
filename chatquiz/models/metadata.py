"""
Corpus Metadata Models
Read-only aggregate facts about the imported conversation
"""
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class MessageRange(BaseModel):
    """Inclusive id and timestamp bounds over all messages"""
    min_id: int
    max_id: int
    min_timestamp: datetime
    max_timestamp: datetime


class CorpusMetadata(BaseModel):
    """
    Snapshot computed once at startup and shared by every request.
    All ranges are inclusive.
    """
    min_message_id: int
    max_message_id: int
    min_timestamp: datetime
    max_timestamp: datetime
    distinct_platforms: List[str] = Field(..., description="Sorted platform tags")
    distinct_participant_names: List[str] = Field(..., min_length=2, max_length=2)
    distinct_reactions: List[str] = Field(default_factory=list, description="Sorted reaction symbols")

    model_config = {"frozen": True}
