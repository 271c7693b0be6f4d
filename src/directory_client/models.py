"""Result models returned by the directory client."""

from pydantic import BaseModel, ConfigDict, Field


class DirectoryGroupMembership(BaseModel):
    """A member of a directory group."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Member identifier as stored in the group")
    group: str = Field(..., description="Common name of the group")
