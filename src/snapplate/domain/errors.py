"""Error types surfaced by the analysis core."""


class SnapplateError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputError(SnapplateError):
    """Request is missing something required; no network call was made."""

    status_code = 400


class MissingCredentialError(InputError):
    """No API key is available for the selected key source."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "API key is required. Configure it in Settings or server .env."
        )


class MissingCustomUrlError(InputError):
    """Custom provider selected without an endpoint URL."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or (
                "Custom API URL is required when using Custom provider. "
                "Configure it in Settings or server .env."
            )
        )


class MissingImageError(InputError):
    """Analyze called without an image."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "No image provided.")


class UpstreamError(SnapplateError):
    """Provider returned an error status or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code or 502
        self.detail = detail


class EmptyResponseError(SnapplateError):
    """Provider answered without any message content."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "No response from AI model.")


class FallbackFailedError(SnapplateError):
    """Both the image request and the text-only fallback failed."""

    status_code = 502


class StorageError(Exception):
    """Backing key/value storage failed."""


class StorageQuotaExceededError(StorageError):
    """Write rejected because the storage quota would be exceeded."""
