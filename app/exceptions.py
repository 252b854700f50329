"""Errors raised by the game service and rendered as `{"error": ...}` responses."""


class GameServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(GameServiceError):
    status_code = 400


class GameNotFoundError(GameServiceError):
    status_code = 404

    def __init__(self, message: str = "game not found"):
        super().__init__(message)


class ConflictError(GameServiceError):
    status_code = 409


class StoreError(GameServiceError):
    """The database rejected or failed a statement."""

    status_code = 500
