"""Error types and exit codes shared across promadapter."""

from promadapter.core.errors import (
    AdapterError,
    ConfigurationError,
    ExitCode,
    ResolutionError,
    ResourceMappingError,
    TemplateError,
    exit_code_for,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "AdapterError",
    "ConfigurationError",
    "TemplateError",
    "ResolutionError",
    "ResourceMappingError",
    "exit_code_for",
    "format_error_message",
    "main_with_error_handling",
]
