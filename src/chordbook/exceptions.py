class ChordbookError(Exception):
    """Base exception for chordbook."""


class ValidationError(ChordbookError):
    """Raised when sheet fields fail validation before a save."""

    EMPTY_TITLE = "empty_title"
    EMPTY_ARTIST = "empty_artist"

    _MESSAGES = {
        EMPTY_TITLE: "Title must not be empty",
        EMPTY_ARTIST: "Artist must not be empty",
    }

    def __init__(self, code: str):
        self.code = code
        super().__init__(self._MESSAGES.get(code, code))


class AuthorizationError(ChordbookError):
    """Raised when the requester may not perform a mutation."""


class NotFoundError(ChordbookError):
    """Raised when a mutation targets a sheet that does not exist."""

    def __init__(self, sheet_id: str):
        self.sheet_id = sheet_id
        super().__init__(f"Chord sheet not found: {sheet_id}")


class StoreError(ChordbookError):
    """Raised when a request to the storage backend fails."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} from {url}")


class StoreFileError(ChordbookError):
    """Raised when a local store file cannot be read as a chordbook store."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read store file {path}: {reason}")
