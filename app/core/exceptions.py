from fastapi import HTTPException, status

class BaseAppException(HTTPException):
    code = "error"

    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

class ValidationError(BaseAppException):
    code = "validation_error"

    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

class NotFoundError(BaseAppException):
    code = "not_found"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class ConflictError(BaseAppException):
    code = "conflict"

    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class PermissionDeniedError(BaseAppException):
    code = "permission_denied"

    def __init__(self, detail: str = "You don't have permission to access this resource"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

class StateError(BaseAppException):
    code = "invalid_state"

    def __init__(self, detail: str = "Operation not allowed in current state"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


# region Attendance / Leave errors

class InvalidRangeError(ValidationError):
    code = "invalid_range"

class OverlappingLeaveError(ConflictError):
    code = "overlapping_leave"

    def __init__(self, detail: str = "You already have a leave application for this period"):
        super().__init__(detail)

class NotPendingError(StateError):
    code = "not_pending"

    def __init__(self, current_status: str):
        self.current_status = current_status
        super().__init__(f"Leave is already {current_status}")

class NotOwnerError(PermissionDeniedError):
    code = "not_owner"

    def __init__(self, detail: str = "You can only cancel your own leave"):
        super().__init__(detail)

class AlreadyCheckedInError(ConflictError):
    code = "already_checked_in"

    def __init__(self, detail: str = "Already checked in for this date"):
        super().__init__(detail)

class AlreadyCheckedOutError(StateError):
    code = "already_checked_out"

    def __init__(self, detail: str = "Already checked out for this date"):
        super().__init__(detail)

class NoCheckInError(NotFoundError):
    code = "no_check_in"

    def __init__(self, detail: str = "No check-in found for this date. Please check in first."):
        super().__init__(detail)

# endregion
