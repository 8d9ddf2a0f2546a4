"""Pydantic schemas for child association descriptors."""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AssocChild(BaseModel):
    """
    A child association as seen by API callers.

    Used as the create payload for secondary children and as the association
    descriptor attached to each listed node. Accepts camelCase keys on input
    (childId, assocType, isPrimary) as well as snake_case.
    """

    model_config = ConfigDict(populate_by_name=True)

    child_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("child_id", "childId"),
    )
    # Validated against the namespace registry by the service, not here, so a
    # missing or unknown type is reported as an invalid argument (400)
    assoc_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("assoc_type", "assocType"),
    )
    is_primary: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_primary", "isPrimary"),
    )
