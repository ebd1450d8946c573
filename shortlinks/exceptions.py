"""Application-level exceptions.

Data store and cache failures live in `shortlinks.dao.exceptions`; this module
holds everything raised before (or instead of) touching a backend: input
validation, code generation and configuration errors.
"""


class ShortLinksError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortlinks_error'


class ValidationError(ShortLinksError):
    """Base exception for rejected caller input."""

    error_code = 'input:validation_error'


class InvalidURLError(ValidationError):
    """Raised when a target URL is not a well-formed absolute http(s) URL."""

    error_code = 'input:invalid_url'


class InvalidAliasError(ValidationError):
    """Raised when a custom alias contains forbidden characters or has a bad length."""

    error_code = 'input:invalid_alias'


class GenerationError(ShortLinksError):
    """Base exception for shortcode generation failures."""

    error_code = 'generator:generation_error'


class GenerationExhaustedError(GenerationError):
    """Raised when the random strategy collides more often than the retry bound allows."""

    error_code = 'generator:generation_exhausted'


class CounterOverflowError(GenerationError):
    """Raised when the sequential counter no longer fits in the configured code length."""

    error_code = 'generator:counter_overflow'


class ConfigurationError(ShortLinksError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
