"""Error taxonomy for the try-on pipeline.

Errors are raised inside a single garment step and converted into
``TryOnFailure`` values at the pipeline boundary, so ``kind`` and
``category`` survive as plain strings for logging and user messaging.
"""

from enum import Enum


class ImageErrorKind(str, Enum):
    INVALID_REFERENCE = "invalid_reference_format"
    FETCH_FAILED = "fetch_failed"
    FILESYSTEM = "filesystem_error"
    EMPTY_PAYLOAD = "empty_payload"
    UNSUPPORTED_IMAGE = "unsupported_image"
    HTML_INSTEAD_OF_IMAGE = "html_instead_of_image"


class RemoteErrorKind(str, Enum):
    NO_CANDIDATES = "no_candidates"
    NO_CONTENT_PARTS = "no_content_parts"
    EMPTY_PARTS = "empty_parts"
    NETWORK_FAILURE = "network_failure"
    NOT_CONFIGURED = "not_configured"


class GenerationErrorKind(str, Enum):
    TEXT_ONLY = "text_only_response"
    UNPARSEABLE = "unparseable_response"


class LayeringErrorKind(str, Enum):
    FIRST_ITEM_FAILED = "first_item_failed"
    INVALID_BASE_PHOTO = "invalid_base_photo"


class TryOnError(Exception):
    """Base class for every failure a garment step can produce."""

    category = "tryon"

    def __init__(self, message: str, kind: Enum):
        super().__init__(message)
        self.message = message
        self.kind = kind


class ImageAcquisitionError(TryOnError):
    """An input image could not be obtained or is not a usable image."""

    category = "image_acquisition"

    def __init__(self, message: str, kind: ImageErrorKind):
        super().__init__(message, kind)


class RemoteCapabilityError(TryOnError):
    """The image-generation service failed or answered with an unusable shape."""

    category = "remote_capability"

    def __init__(self, message: str, kind: RemoteErrorKind):
        super().__init__(message, kind)


class GenerationFailure(TryOnError):
    """The model answered, but no image could be recovered even after a retry."""

    category = "generation"

    def __init__(self, message: str, kind: GenerationErrorKind):
        super().__init__(message, kind)
