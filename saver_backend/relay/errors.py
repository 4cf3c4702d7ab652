"""
Error taxonomy shared by the relay, the service layer and the HTTP router.

Every error carries the HTTP status the router answers with and a
user-facing `detail` that the SPA shows as a toast notification.

Classes
-------
SaverError
    Base class.
AuthenticationRequiredError
    No (valid) session. HTTP 401.
AccessDeniedError
    Caller is authenticated but not allowed. HTTP 403.
BlockedAccountError, BlockedCaseCreationError, CaseLimitReachedError
    Specific authorization denials.
UpstreamError
    Storage, LLM or mail provider failed. HTTP 502 unless overridden.
ValidationFailedError
    Malformed or too-short input. HTTP 400.
NotFoundError
    Referenced record does not exist. HTTP 404.
"""


class SaverError(Exception):
    status_code = 500
    default_detail = "Unexpected error"

    def __init__(self, detail: str | None = None, status_code: int | None = None):
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


class AuthenticationRequiredError(SaverError):
    status_code = 401
    default_detail = "Authentication required"


class AccessDeniedError(SaverError):
    status_code = 403
    default_detail = "Access denied"


class BlockedAccountError(AccessDeniedError):
    default_detail = "Your account is blocked from sending messages."


class BlockedCaseCreationError(AccessDeniedError):
    default_detail = "Your account is blocked from creating new cases."


class CaseLimitReachedError(AccessDeniedError):
    default_detail = "Case Limit Reached: free accounts can open one case. Please upgrade to continue."


class UpstreamError(SaverError):
    status_code = 502
    default_detail = "Upstream service failed"


class ValidationFailedError(SaverError):
    status_code = 400
    default_detail = "Invalid input"


class NotFoundError(SaverError):
    status_code = 404
    default_detail = "Not found"
