"""
Error types raised by the Lead Intent Engine
"""


class PipelineInputError(ValueError):
    """Raised when source collections are structurally invalid."""

    def __init__(self, message: str, code: str = "invalid_input") -> None:
        super().__init__(message)
        self.code = code


class SourceProviderError(RuntimeError):
    """Raised when a source provider cannot produce mentions."""

    def __init__(self, message: str, code: str = "source_unavailable") -> None:
        super().__init__(message)
        self.code = code


class EnrichmentError(RuntimeError):
    """Raised when an enrichment lookup fails."""

    def __init__(self, message: str, code: str = "enrichment_unavailable") -> None:
        super().__init__(message)
        self.code = code


class LeadValidationError(ValueError):
    """Raised when a lead sign-up is rejected."""

    def __init__(self, message: str, code: str = "invalid_lead") -> None:
        super().__init__(message)
        self.code = code
