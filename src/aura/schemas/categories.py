"""Category request/response schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(
        default="",
        max_length=1000,
        description="What belongs in this category; used to categorize new vendors",
    )
    icon: str | None = Field(default=None, max_length=16)
    color: str | None = Field(default=None, max_length=16, description="Hex color, e.g. #3b82f6")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be blank")
        return v.strip()


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    icon: str | None
    color: str | None
    is_default: bool
    sort_order: int
