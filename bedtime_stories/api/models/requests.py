"""Pydantic models for API requests."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class GenerateStoryRequest(BaseModel):
    """JSON body for the text-only story flavour.

    Fields are optional at this layer so that missing values are reported
    by the pipeline's own validation with a stable error code.
    """

    model_config = ConfigDict(populate_by_name=True)

    child_name: Optional[str] = Field(
        default=None,
        alias="childName",
        max_length=100,
        description="The child's first name",
        examples=["Ava"],
    )
    age: Optional[Union[int, str]] = Field(
        default=None,
        description="The child's age in years",
        examples=["5"],
    )
    gender: Optional[str] = Field(
        default=None,
        max_length=30,
        description="How the story should refer to the child (e.g. girl, boy); defaults to child",
    )
