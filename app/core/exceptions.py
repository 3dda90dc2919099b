class UserFacingError(Exception):
    """An expected problem, its message is shown to the Discord user as is."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class LoginSetupError(UserFacingError):
    """The guild is missing a setting required to verify members."""


class EmailDomainNotAllowedError(UserFacingError):
    def __init__(self, domain: str) -> None:
        super().__init__(f"Only Google accounts ending with `@{domain}` can be verified here.")
        self.domain = domain


class RoleDeletedError(UserFacingError):
    """A role saved in the database no longer exists on Discord."""
