class TensortError(Exception):
    """Base class for every error raised by tensort."""


class InvalidConfigurationError(TensortError, ValueError):
    """Raised for a class count (or embedding count) the clustering cannot use."""


class DegenerateInputError(TensortError, ValueError):
    """Raised when an embedding has zero norm or a mismatched dimension."""


class InvalidArgumentError(TensortError):
    """Raised for unusable command-line input, e.g. a target that is not a directory."""


class EmbeddingError(TensortError):
    """A single image could not be turned into an embedding."""

    def __init__(self, path, cause):
        super().__init__(f"{type(cause).__name__} - {cause}")
        self.path = path
        self.cause = cause


class OrganizeError(TensortError):
    """Raised when an image or class directory cannot be written in the target."""
