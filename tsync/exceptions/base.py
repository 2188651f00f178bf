from httpx import codes


class AppError(Exception):
    status_code: int = codes.INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(self, detail: str | None = None):
        if detail:
            self.detail = detail
        super().__init__(self.detail)


class ApiError(AppError):
    """An HTTP call to the backend failed, either in transport or with a non-2xx status."""

    def __init__(self, detail: str | None = None, status_code: int | None = None):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail)
