"""Branch schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BranchCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    location: str = Field(min_length=1, max_length=255)

    @field_validator("name", "location")
    @classmethod
    def _strip(cls, value: str) -> str:
        return " ".join(value.split())

    @model_validator(mode="after")
    def _distinct_name_and_location(self) -> "BranchCreate":
        if self.name.lower() == self.location.lower():
            raise ValueError("Branch name and location cannot be identical")
        return self


class BranchRead(BranchCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)
