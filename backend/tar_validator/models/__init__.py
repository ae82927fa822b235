from tar_validator.models.validation_log import ValidationLogEntry

__all__ = [
    "ValidationLogEntry",
]
