"""Error taxonomy for the validation pipeline."""


class TarValidatorError(Exception):
    """Base class for pipeline errors."""


class ExtractionFailure(TarValidatorError):
    """Document text is unavailable, unsupported or empty."""


class LookupUnavailable(TarValidatorError):
    """Per diem rate source is unreachable or returned no data."""


class ValidationFailure(TarValidatorError):
    """Required fields are missing or malformed."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")
