# Enrichment lookups module
from .lookups import (
    HunterContactLookup,
    ClearbitCompanyLookup,
    CompositeEnrichmentLookup,
    create_default_enrichment_lookup,
    extract_domain,
)
