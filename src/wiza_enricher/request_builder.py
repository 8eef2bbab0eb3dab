from wiza_enricher.schema import EnrichmentLevel, IndividualReveal, ItemParameters, RevealRequest

OPERATION_LEVELS: dict[str, EnrichmentLevel] = {
    "emailFinder": "partial",
    "phoneFinder": "phone",
    "linkedinFinder": "none",
}


def enrichment_level_for(operation: str) -> EnrichmentLevel:
    return OPERATION_LEVELS.get(operation, "partial")


def build_individual_reveal(params: ItemParameters) -> IndividualReveal:
    input_type = params.input_type

    if input_type == "email":
        return IndividualReveal(email=params.email)
    if input_type == "linkedinUrl":
        return IndividualReveal(profile_url=params.linkedin_url)
    if input_type == "contactDetails":
        return IndividualReveal(full_name=params.full_name, company=params.company)

    return IndividualReveal(
        email=params.email or None,
        profile_url=params.linkedin_url or None,
        full_name=params.full_name or None,
        company=params.company or None,
    )


def build_reveal_request(params: ItemParameters) -> RevealRequest:
    """
    Maps an already-validated item to the individual_reveals payload.
    email_type is only sent when a preference was given.
    """
    return RevealRequest(
        individual_reveal=build_individual_reveal(params),
        enrichment_level=enrichment_level_for(params.operation),
        email_type=params.additional_fields.email_type or None,
    )
