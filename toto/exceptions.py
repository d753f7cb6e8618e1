"""Exceptions raised by the Toto combination service."""


class TotoError(Exception):
    """Base class for all errors raised by this package."""


class InvalidArgument(TotoError, ValueError):
    """A request was malformed (count out of bounds, bad numbers)."""


class InsufficientSpace(TotoError):
    """Fewer unused combinations remain than were requested."""

    def __init__(self, remaining: int, requested: int):
        self.remaining = remaining
        self.requested = requested
        super().__init__(
            f"Only {remaining} unique combinations remaining, but {requested} requested"
        )


class ArchiveFetchError(TotoError):
    """The archive store could not be read."""


class GenerationIncomplete(TotoError):
    """Sampling stopped on one of its bounds before the batch was filled."""

    ATTEMPTS = 'attempts'
    CONSECUTIVE_FAILURES = 'consecutive_failures'

    def __init__(self, generated: int, requested: int, attempts: int, bound: str):
        self.generated = generated
        self.requested = requested
        self.attempts = attempts
        self.bound = bound
        if bound == self.CONSECUTIVE_FAILURES:
            reason = "Hit maximum consecutive failures - may be running out of unique combinations"
        else:
            reason = "Hit maximum attempts limit"
        super().__init__(
            f"Could only generate {generated} unique combinations out of {requested} "
            f"requested after {attempts} attempts. {reason}"
        )


class ScrapingError(TotoError):
    """The results page could not be fetched."""
