# storefront/domain/errors.py


class ApiError(Exception):
    """Failure response from the shop API."""

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Shop API error {status_code}: {detail}")


class ConflictError(ApiError):
    """409 from the shop API, e.g. the e-mail is already taken."""

    def __init__(self, detail: str = ""):
        super().__init__(409, detail)
