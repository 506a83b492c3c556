"""
Exceptions raised by the expense category pipeline.
"""

from typing import Optional


class ExpcatError(Exception):
    """Base exception for all expcat errors."""

    pass


class ConfigurationError(ExpcatError):
    """Raised when a config file or config value is invalid."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        suggested_fix: Optional[str] = None,
    ):
        self.parameter = parameter
        self.suggested_fix = suggested_fix

        full_message = f"Configuration Error: {message}"
        if parameter:
            full_message += f" (Parameter: {parameter})"
        if suggested_fix:
            full_message += f" Suggested fix: {suggested_fix}"

        super().__init__(full_message)


class AssetError(ExpcatError):
    """Raised when the vocabulary or label asset is missing or malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path

        full_message = f"Asset Error: {message}"
        if path:
            full_message += f" (Path: {path})"

        super().__init__(full_message)


class ModelLoadError(ExpcatError):
    """Raised when the inference model cannot be loaded."""

    def __init__(self, message: str, model_path: Optional[str] = None):
        self.model_path = model_path

        full_message = f"Model Load Error: {message}"
        if model_path:
            full_message += f" (Model: {model_path})"

        super().__init__(full_message)
