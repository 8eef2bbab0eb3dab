from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Operation = Literal["emailFinder", "phoneFinder", "linkedinFinder"]
InputType = Literal["email", "linkedinUrl", "contactDetails", "allFields"]
EmailType = Literal["work", "personal", "any"]
EnrichmentLevel = Literal["none", "partial", "phone", "full"]

# input-record keys that may override node-level field values
ITEM_FIELD_KEYS = {
    "email": "email",
    "linkedin_url": "linkedin_url",
    "linkedinUrl": "linkedin_url",
    "profile_url": "linkedin_url",
    "full_name": "full_name",
    "fullName": "full_name",
    "company": "company",
}


class AdditionalFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email_type: Optional[EmailType] = Field(default=None, alias="emailType")
    timeout: Optional[float] = Field(default=None, ge=0)


class ItemParameters(BaseModel):
    """Per-item configuration, resolved once before the pipeline runs."""

    model_config = ConfigDict(populate_by_name=True)

    operation: Operation = "emailFinder"
    input_type: InputType = Field(default="contactDetails", alias="inputType")
    email: str = ""
    linkedin_url: str = Field(default="", alias="linkedinUrl")
    full_name: str = Field(default="", alias="fullName")
    company: str = ""
    additional_fields: AdditionalFields = Field(default_factory=AdditionalFields, alias="additionalFields")


class NodeParameters(ItemParameters):
    """Node-level parameters; fields found in an input record take precedence."""

    def for_item(self, item_json: dict[str, Any]) -> ItemParameters:
        overrides: dict[str, str] = {}
        for key, field in ITEM_FIELD_KEYS.items():
            value = item_json.get(key)
            if isinstance(value, str) and value:
                overrides.setdefault(field, value)
        return ItemParameters.model_validate({**self.model_dump(), **overrides})


class IndividualReveal(BaseModel):
    email: Optional[str] = None
    profile_url: Optional[str] = None
    full_name: Optional[str] = None
    company: Optional[str] = None


class RevealRequest(BaseModel):
    individual_reveal: IndividualReveal
    enrichment_level: EnrichmentLevel
    email_type: Optional[EmailType] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Job(BaseModel):
    id: str
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_complete: bool = False
    status: str = "queued"
    result: dict[str, Any] = {}
    error_message: Optional[str] = None
