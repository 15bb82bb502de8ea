"""KeepWarm Exception Hierarchy.

All custom exceptions inherit from KeepWarmError.
GenerationFailure is internal to message suggestion: the engine
always recovers from it by falling back to templates.

Exception Hierarchy:
    KeepWarmError (base)
    ├── ConfigurationError
    ├── ValidationError
    ├── NotFoundError
    ├── DatabaseError
    └── IntegrationError
        └── GenerationFailure
"""


class KeepWarmError(Exception):
    """Base exception for all KeepWarm errors.

    All custom exceptions in KeepWarm inherit from this class,
    allowing for broad exception handling when needed.
    """

    pass


class ConfigurationError(KeepWarmError):
    """Configuration is invalid or missing.

    Raised when:
        - A numeric environment variable cannot be parsed
        - Configuration file is malformed
    """

    pass


class ValidationError(KeepWarmError):
    """Data validation failed.

    Raised when:
        - Required field is missing (first name, last name)
        - frequency_days is below 1
        - Segment, energy or language value is unknown
        - Relationship score falls outside 1-10
    """

    pass


class NotFoundError(KeepWarmError):
    """Requested record does not exist.

    Raised when a state transition or store lookup names an
    unknown contact id.
    """

    pass


class DatabaseError(KeepWarmError):
    """Database operation failed.

    Raised when:
        - Database file cannot be opened
        - Database is locked
        - Query execution fails
    """

    pass


class IntegrationError(KeepWarmError):
    """External integration failed.

    Base class for integration-specific errors.
    """

    pass


class GenerationFailure(IntegrationError):
    """Generative message backend could not produce usable drafts.

    Raised inside the generative tier when:
        - No API key is configured or the SDK is missing
        - The API call fails, times out, or returns a non-2xx status
        - The response does not contain three usable lines

    Never surfaces from MessageSuggestionEngine.suggest().
    """

    pass
