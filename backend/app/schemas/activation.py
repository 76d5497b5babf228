"""Activation Schemas — request/response contracts for POST /activate-vip.

Invariants:
    - key is accepted as any string (including empty): emptiness is a domain
      error (INVALID_KEY_INPUT) raised by the redemption engine, not a 422-style
      schema failure
"""

from pydantic import BaseModel, Field
from typing import Literal


class ActivateRequest(BaseModel):
    key: str = Field("", max_length=64)


class ActivateResponse(BaseModel):
    success: Literal[True] = True
