"""Exception taxonomy for Clone Master.

Every error raised by the core carries a human-readable ``message`` that the
wizard controller stores verbatim as ``SessionState.last_error``. There are
no structured error codes; the presentation layer only ever shows text.
"""


class CloneMasterError(Exception):
    """Base class for all Clone Master errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class PreconditionNotMet(CloneMasterError):
    """A wizard action was attempted before its precondition holds.

    The UI disables such actions, so this is never shown as an error banner.
    """


class GatewayError(CloneMasterError):
    """Transport or parse failure while calling the generative model."""


class NoImageProduced(GatewayError):
    """The synthesis call succeeded but returned no inline image."""

    def __init__(self, message: str = "The model did not return the expected image.") -> None:
        super().__init__(message)


class MalformedAsset(CloneMasterError):
    """An image payload could not be encoded, stripped, or decoded."""
