from typing import Optional


class DirectAdminError(Exception):
    """Base class for every error raised by the DirectAdmin client."""


class RemoteApiError(DirectAdminError):
    """The DirectAdmin server (or the transport to it) reported a failure."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = command
        self.details = details
        self.status_code = status_code


class PrivilegeError(DirectAdminError):
    """An operation needs a higher privilege than the caller holds."""


class UnknownAccountTypeError(DirectAdminError):
    """A server response carried a usertype this client does not know."""

    def __init__(self, usertype: Optional[str]):
        super().__init__(f"Unknown user type '{usertype}'")
        self.usertype = usertype
