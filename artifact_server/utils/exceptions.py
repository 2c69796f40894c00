from typing import Any


class ArtifactServerError(Exception):
    """Base exception for the artifact server.

    ``response_object`` is placed in the ``responseObject`` field of the
    error envelope returned to the client.
    """

    def __init__(self, message: str, response_object: Any = None):
        self.message = message
        self.response_object = response_object
        super().__init__(message)


class ValidationError(ArtifactServerError):
    def __init__(self, detail: str, response_object: Any = None):
        super().__init__(f"[Validation Error] {detail}", response_object)


class AuthError(ArtifactServerError):
    pass


class NoTokenError(AuthError):
    def __init__(self):
        super().__init__("No token provided")


class InvalidTokenError(AuthError):
    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__("Invalid token signature")


class ExpiredTokenError(AuthError):
    def __init__(self):
        super().__init__("Token expired")


class InvalidCredentialsError(AuthError):
    def __init__(self):
        super().__init__("Invalid credentials")


class PathTraversalError(ArtifactServerError):
    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__("Access denied")


class ArtifactNotFoundError(ArtifactServerError):
    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__("File not found")


class RenderError(ArtifactServerError):
    def __init__(self, label: str, detail: str):
        self.label = label
        super().__init__(
            f"Error {detail}",
            f"Sorry, we couldn't generate {label} file.",
        )


class FileStorageError(ArtifactServerError):
    def __init__(self, label: str, detail: str):
        self.label = label
        super().__init__(
            f"Error {detail}",
            f"Sorry, we couldn't generate {label} file.",
        )


class UpstreamError(ArtifactServerError):
    def __init__(self, service: str, detail: str):
        self.service = service
        super().__init__(f"{service} error: {detail}")


class UpstreamTimeoutError(UpstreamError):
    def __init__(self, service: str, timeout: float):
        self.timeout = timeout
        super().__init__(service, f"request timed out after {timeout:g}s")
