"""Error taxonomy shared by the services and mapped to HTTP responses in ``hotshot.main``."""


class HotShotError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(HotShotError):
    """A required field is empty or a value is out of range."""

    status_code = 400


class OptionLimitError(ValidationError):
    """The question already carries its maximum number of options."""


class NotFoundError(HotShotError):
    status_code = 404


class PermissionDeniedError(HotShotError):
    status_code = 403


class StateError(HotShotError):
    """The room or question is not in a state that allows the action."""

    status_code = 409


class AlreadyVotedError(StateError):
    pass


class DuplicateError(HotShotError):
    """A unique constraint rejected the write."""

    status_code = 409


class StoreError(HotShotError):
    status_code = 503
