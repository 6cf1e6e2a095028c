"""Pydantic request models for FastAPI endpoints."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    # The provider serves at most 100 results per query
    max_results: Optional[int] = Field(None, ge=1, le=100)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


class SelectionRequest(BaseModel):
    included: bool


class SourceRequest(BaseModel):
    url: str = Field(..., min_length=1)
    title: str = ""
