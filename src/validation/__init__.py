"""Form validation package."""

from src.validation.validator import FormValidationError, FormValidator

__all__ = ["FormValidationError", "FormValidator"]
