"""Maps pipeline reason codes and layer exceptions to HTTP responses."""

from fastapi.responses import JSONResponse

from user_audit.application.outcomes import OperationResult, ReasonCode

REASON_STATUS: dict[ReasonCode, int] = {
    ReasonCode.INVALID_TOKEN: 401,
    ReasonCode.EXPIRED_TOKEN: 401,
    ReasonCode.PRINCIPAL_NOT_FOUND: 401,
    ReasonCode.PRINCIPAL_INACTIVE: 401,
    ReasonCode.PRINCIPAL_MISSING: 401,
    ReasonCode.INSUFFICIENT_ROLE: 403,
    ReasonCode.CANNOT_MODIFY_PRIVILEGED_ACCOUNT: 403,
    ReasonCode.CANNOT_GRANT_PRIVILEGED_ROLE: 403,
    ReasonCode.PASSWORD_MISMATCH: 400,
    ReasonCode.VALIDATION_ERROR: 422,
    ReasonCode.DUPLICATE_ENTITY: 400,
    ReasonCode.ENTITY_NOT_FOUND: 404,
    ReasonCode.STORE_UNAVAILABLE: 503,
    ReasonCode.AUDIT_STORE_UNAVAILABLE: 500,
    ReasonCode.INTERNAL_ERROR: 500,
}


def status_for(reason: ReasonCode) -> int:
    return REASON_STATUS.get(reason, 500)


def error_body(reason: ReasonCode, detail: str, correlation_id: str | None = None) -> dict:
    body = {"detail": detail, "reason": reason.value}
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def result_error_response(result: OperationResult) -> JSONResponse:
    """Build the error response for a REJECTED or FAILED result."""
    body = error_body(result.reason, result.detail or result.reason.value, result.correlation_id)
    if result.satisfying_roles:
        body["required_roles"] = [r.value for r in result.satisfying_roles]
    return JSONResponse(status_code=status_for(result.reason), content=body)
