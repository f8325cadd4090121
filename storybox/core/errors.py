"""
Error taxonomy for story generation.

Run-fatal failures derive from StoryGenerationError and end a run in the
``error`` state when raised by text generation or parsing. Failures while
illustrating or narrating a page, of any type, only degrade that page.
GenerationCancelled unwinds a cancelled run and never reaches callers.
"""

DEFAULT_ERROR_MESSAGE = "Something went wrong while creating the story."

REMOTE_ERROR_MESSAGES = {
    "resource-exhausted": "You have no story generations left. Upgrade to premium to keep creating.",
    "unauthenticated": "You need to sign in.",
    "not-found": "User not found.",
}


class StoryGenerationError(Exception):
    """Base class for failures that abort a generation run."""

    default_message = DEFAULT_ERROR_MESSAGE

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        """Message suitable for the caller-visible ``error`` field."""
        return str(self)


class RemoteError(StoryGenerationError):
    """A remote generation call failed.

    Args:
        code: Normalized error code, e.g. "resource-exhausted" or "unauthenticated"
        message: Message supplied by the remote service, if any
        default_message: Fallback when the service gave no message
    """

    def __init__(self, code: str, message: str = "", default_message: str | None = None):
        self.code = code
        self.remote_message = message
        self._default_message = default_message or DEFAULT_ERROR_MESSAGE
        super().__init__(f"{code}: {message}" if message else code)

    @property
    def user_message(self) -> str:
        if self.code in REMOTE_ERROR_MESSAGES:
            return REMOTE_ERROR_MESSAGES[self.code]
        if self.code == "invalid-argument":
            return f"Invalid parameter: {self.remote_message}"
        return self.remote_message or self._default_message


class StorageError(StoryGenerationError):
    """Persisting an image or audio payload failed."""

    default_message = "The media file could not be stored."


class TextGenerationError(StoryGenerationError):
    """Text generation reported failure or returned no text."""

    default_message = "The story text could not be produced."


class PageParseError(StoryGenerationError):
    """Generated text contained no usable pages."""

    default_message = "The story pages could not be parsed."


class SignInRequiredError(StoryGenerationError):
    """No authenticated principal is available."""

    default_message = "Sign-in required."


class GenerationCancelled(Exception):
    """Raised at a checkpoint once the run's cancellation token is set."""

