ExtraInfoType = dict[str, str | None]


class ClientError(Exception):
    """An error from the Lovable GitHub client."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class RequestError(ClientError):
    """The GitHub API answered a request with a non-success status."""

    status_code: int | None

    def __init__(
        self,
        action: str,
        message: str | None = None,
        status_code: int | None = None,
        extra_info: ExtraInfoType | None = None,
    ):
        self.status_code = status_code

        if not extra_info:
            extra_info = {}

        super().__init__(
            message="A request error occurred.",
            extra_info={
                "action": action,
                "status": str(status_code) if status_code is not None else None,
                "message": message,
                **extra_info,
            },
        )


class ResourceNotFoundError(RequestError):
    """The requested resource does not exist on GitHub."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The resource could not be found.",
            status_code=404,
            extra_info={"resource": resource, **extra_info},
        )


class ConflictError(RequestError):
    """A mutation was rejected because the presented version token was stale or missing.

    Re-read the object to obtain its current version token before retrying."""

    def __init__(self, action: str, resource: str | None = None, status_code: int | None = None, message: str | None = None):
        super().__init__(
            action=action,
            message=message or "The object was changed since it was last read.",
            status_code=status_code,
            extra_info={"resource": resource},
        )


class ResourceTypeMismatchError(RequestError):
    """The resource exists but is not of the expected kind (for example a directory where a file was expected)."""

    def __init__(self, action: str, resource: str, expected_type: str, actual_type: str):
        super().__init__(action, f"{resource}: Expected {expected_type}, got {actual_type}")


class UpstreamTimeoutError(ClientError):
    """A request to the GitHub API did not complete in time."""

    def __init__(self, action: str, timeout: float | None = None):
        super().__init__(
            message="The request to GitHub timed out.",
            extra_info={"action": action, "timeout": f"{timeout}s" if timeout is not None else None},
        )
