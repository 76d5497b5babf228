"""Generation Schemas — request/response contracts for POST /generate-sheet.

Invariants:
    - subject, level, topic: stripped, non-empty, length-bounded
    - genType accepts exactly single | pack | chapter, defaults to single
    - SheetResponse mirrors Sheet.to_dict() (id as string, created_at ISO-8601)

Design Decisions:
    - Wire name genType kept via alias: the web client already sends camelCase
    - GenType enum from core/ used directly: one source of the allowed values
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.domain_types import GenType


class GenerateRequest(BaseModel):
    """Generation request body."""
    model_config = ConfigDict(populate_by_name=True)

    subject: str = Field(min_length=1, max_length=200)
    level: str = Field(min_length=1, max_length=100)
    topic: str = Field(min_length=1, max_length=500)
    gen_type: GenType = Field(GenType.SINGLE, alias="genType")

    @field_validator("subject", "level", "topic")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty or whitespace")
        return v


class SheetResponse(BaseModel):
    """One persisted sheet."""
    id: str
    user_id: str
    title: str
    subject: str
    level: str
    content: str
    rating: int = 0
    created_at: str


class GenerateResponse(BaseModel):
    sheets: list[SheetResponse]
