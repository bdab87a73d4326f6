"""Error types raised by the search core and its collaborators"""

from typing import Optional


class NavigatorError(Exception):
    """Base class for all navigator errors"""


class UpstreamFailure(NavigatorError):
    """A collaborator (storage, LLM) did not return data.

    Distinct from an empty result: zero matches is a valid answer, a
    failed round-trip is not.
    """

    source = "upstream"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StorageUnavailable(UpstreamFailure):
    """The video store failed, timed out or returned nothing"""

    source = "storage"


class LLMUnavailable(UpstreamFailure):
    """The chat-completion backend failed after all retries"""

    source = "llm"


class VideoNotFound(NavigatorError):
    """No video with the requested id exists"""

    def __init__(self, youtube_id: str):
        super().__init__(f"Video {youtube_id} not found")
        self.youtube_id = youtube_id
