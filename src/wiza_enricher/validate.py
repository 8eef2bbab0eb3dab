from wiza_enricher.errors import ValidationError
from wiza_enricher.schema import ItemParameters


def is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def validate_item_parameters(params: ItemParameters) -> ItemParameters:
    input_type = params.input_type

    if input_type == "email":
        if is_blank(params.email):
            raise ValidationError("Email is required when using Email input type")

    elif input_type == "linkedinUrl":
        if is_blank(params.linkedin_url):
            raise ValidationError("LinkedIn URL is required when using LinkedIn URL input type")

    elif input_type == "contactDetails":
        # full name is checked before company
        if is_blank(params.full_name):
            raise ValidationError("Full Name is required when using Contact Details input type")
        if is_blank(params.company):
            raise ValidationError("Company/Domain is required when using Contact Details input type")

    # allFields: loose mode, whatever is present gets sent
    return params
