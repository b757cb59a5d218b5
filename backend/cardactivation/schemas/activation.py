"""
Card Activation Backend — Activation Request/Response Schemas
==============================================================

What:  Pydantic models for POST /validate-digits and POST /activate.
How:   Request fields are deliberately typed `Any` and optional. The business
       rules (presence, format, range, currency, PIN, terms) run in a fixed
       order inside ActivationService so the first failing rule decides the
       message; letting Pydantic reject types first would change that order.
       JSON keys are camelCase (lastSixDigits, dailyLimit, ...).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request/response bodies that use camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DigitsRequest(CamelModel):
    last_six_digits: Optional[Any] = Field(
        default=None, description="Last 6 digits of the card number"
    )


class ActivationRequest(CamelModel):
    """
    Raw activation submission.

    Types are checked by ActivationService, not here: `dailyLimit` may
    arrive as a number or a numeric string, `accept` as a bool or a
    checkbox-style string, `lastSixDigits` and `pin` as strings or numbers.
    """
    card_type: Optional[Any] = Field(default=None, description="Card product name")
    last_six_digits: Optional[Any] = Field(default=None, description="Exactly 6 digits")
    holder_name: Optional[Any] = Field(default=None, description="Card holder name")
    currency: Optional[Any] = Field(default=None, description="ISO 4217 currency code")
    daily_limit: Optional[Any] = Field(default=None, description="Integer 0-5000")
    accept: Optional[Any] = Field(default=None, description="Terms accepted")
    pin: Optional[Any] = Field(default=None, description="Exactly 4 digits")


class AckResponse(BaseModel):
    """Plain acknowledgement body shared by several endpoints."""
    success: bool = Field(default=True)
    message: str = Field(description="Human-readable result")
