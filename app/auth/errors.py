"""Errors raised while linking a Google account."""


class AuthError(Exception):
    """Base class of every authentication failure."""


class AuthTimeoutError(AuthError):
    def __init__(self) -> None:
        super().__init__("The authentication timeout has expired")


class UnknownStateError(AuthError):
    def __init__(self, state: str) -> None:
        super().__init__("The given 'state' wasn't queued anymore")
        self.state = state


class FetchError(AuthError):
    """The Google API could not be reached."""


class NonOkResponseError(AuthError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Google answered with a non Ok status code: {status_code}")
        self.status_code = status_code


class MalformedResponseError(AuthError):
    """The Google API response does not contain the required data."""


class SenderDroppedError(AuthError):
    def __init__(self) -> None:
        super().__init__("The pending request was dropped before a token was delivered")
