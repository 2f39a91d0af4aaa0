"""
Failure taxonomy for the video endpoints.
Every error carries a `kind`; routers pick the HTTP status from the kind, per endpoint.
"""
import enum


class ErrorKind(str, enum.Enum):
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION"
    STORAGE_IO = "STORAGE_IO"
    DATA_CONSISTENCY = "DATA_CONSISTENCY"


class VideoError(Exception):
    kind: ErrorKind = ErrorKind.STORAGE_IO

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------- Storage ----------


class StorageInitError(VideoError):
    kind = ErrorKind.STORAGE_IO


class StorageWriteError(VideoError):
    kind = ErrorKind.STORAGE_IO


class StorageDeleteError(VideoError):
    kind = ErrorKind.STORAGE_IO


class InvalidFilenameError(VideoError):
    """Stored filename does not resolve to a file directly under the storage root."""
    kind = ErrorKind.STORAGE_IO


class MetadataWriteError(VideoError):
    kind = ErrorKind.STORAGE_IO


# ---------- Caller input ----------


class EmptyFileError(VideoError):
    kind = ErrorKind.VALIDATION


class FileTooLargeError(VideoError):
    kind = ErrorKind.VALIDATION


class UserRegistrationError(VideoError):
    kind = ErrorKind.VALIDATION


# ---------- Lookup / ownership ----------


class NotFoundError(VideoError):
    kind = ErrorKind.NOT_FOUND


class AccessDeniedError(VideoError):
    kind = ErrorKind.AUTHORIZATION_DENIED


class DataConsistencyError(VideoError):
    """Authenticated principal has no backing User row."""
    kind = ErrorKind.DATA_CONSISTENCY
