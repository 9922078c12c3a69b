"""Pydantic schemas for invite-code endpoints."""

from pydantic import BaseModel, Field


class ValidateInviteRequest(BaseModel):
    code: str = Field(..., max_length=64)


class InviteCodeResponse(BaseModel):
    bet_id: str
    invite_code: str


class ValidateInviteResponse(BaseModel):
    bet_id: str
    valid: bool
