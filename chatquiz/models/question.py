"""
Question Models
Response models for generated quiz questions
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class QuestionVariant(str, Enum):
    CONTINUE = "continue"
    DURATION = "duration"
    NEXT = "next"
    PLATFORM = "platform"
    REACT = "react"
    WHEN = "when"
    WHO = "who"


class QuestionMessage(BaseModel):
    """Message as shown to the player"""
    content: str = Field(..., description="Message text, or the first media URI for media messages")
    date: datetime
    isMedia: bool
    participant: str
    platform: str
    reaction: str = Field("", description="First reaction symbol, empty if none")


class Question(BaseModel):
    """
    Generated multiple-choice question

    messages are ordered oldest first. choices always contains the answer
    exactly once.
    """
    variant: QuestionVariant
    answer: str
    choices: List[str] = Field(..., min_length=2)
    messages: List[QuestionMessage] = Field(..., min_length=1)
    recipient: Optional[str] = Field(
        None,
        description="Participant receiving the last message (text variants only)"
    )

    @model_validator(mode="after")
    def validate_choices(self):
        """Ensure the answer appears exactly once among the choices"""
        count = self.choices.count(self.answer)
        if count != 1:
            raise ValueError(
                f"Answer must appear exactly once in choices (found {count})"
            )
        if len(set(self.choices)) != len(self.choices):
            raise ValueError("Choices must be distinct")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "variant": "who",
                "answer": "Alex",
                "choices": ["Sam", "Alex"],
                "messages": [
                    {
                        "content": "are you coming tonight",
                        "date": "2024-03-05T21:14:00Z",
                        "isMedia": False,
                        "participant": "Sam",
                        "platform": "MESSENGER",
                        "reaction": ""
                    },
                    {
                        "content": "only if you bring snacks",
                        "date": "2024-03-05T21:15:00Z",
                        "isMedia": False,
                        "participant": "Alex",
                        "platform": "MESSENGER",
                        "reaction": "😂"
                    }
                ],
                "recipient": None
            }
        }


class SeedResponse(BaseModel):
    seed: str


class VariantsResponse(BaseModel):
    enabled: List[QuestionVariant]
    excluded: List[str] = Field(default_factory=list, description="Configured but unavailable variants")


class ErrorResponse(BaseModel):
    """Error response model"""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    code: str = Field(..., description="Error code")
