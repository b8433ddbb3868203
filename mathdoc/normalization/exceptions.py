from mathdoc.errors.exceptions import MathdocError


class NormalizationError(MathdocError):
    """Raised when a response cannot be normalized at all."""
