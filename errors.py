# errors.py
# Rejections raised by the scoring engine and the evaluation workflow.
# Each carries an HTTP status and a code, rendered by the app as
# {"data": null, "error": {"message": ..., "code": ...}}


class ReviewError(Exception):
    """Base class for deterministic, user-visible rejections."""
    status_code = 400
    code = "REVIEW_ERROR"

    def __init__(self, message, details=None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self):
        error = {"message": self.message, "code": self.code}
        if self.details:
            error["details"] = self.details
        return {"data": None, "error": error}


class InvalidGrade(ReviewError, ValueError):
    """Grade is not one of the five defined levels."""
    code = "INVALID_GRADE"

    def __init__(self, grade):
        self.grade = grade
        super().__init__(f"Invalid grade level: {grade!r} (expected 1-5)")


class InvalidMaxScore(ReviewError, ValueError):
    """A criterion's maximum score is not a positive number."""
    code = "INVALID_MAX_SCORE"

    def __init__(self, max_score):
        self.max_score = max_score
        super().__init__(f"Invalid maximum score: {max_score!r} (expected a positive number)")


class ValidationError(ReviewError):
    code = "VALIDATION_ERROR"


class IncompleteEvaluation(ReviewError):
    """
    Raised when an evaluation is saved before every criterion has a grade.

    The caller should re-prompt for the missing criteria; nothing is written.
    """
    status_code = 422
    code = "INCOMPLETE_EVALUATION"

    def __init__(self, missing, message=None):
        self.missing = list(missing)
        super().__init__(
            message or f"{len(self.missing)} criteria have no grade",
            details={"missing": self.missing},
        )


class NotAllScored(IncompleteEvaluation):
    """Submit attempted before every proposal has a saved evaluation."""
    code = "NOT_ALL_SCORED"

    def __init__(self, missing):
        missing = list(missing)
        super().__init__(missing, f"{len(missing)} proposals are not scored yet")


class SubmissionLocked(ReviewError):
    """
    The reviewer has submitted; edits stay rejected until an
    administrator unlocks them.
    """
    status_code = 423
    code = "SUBMISSION_LOCKED"

    def __init__(self, reviewer_name):
        super().__init__(
            f"Evaluations of '{reviewer_name}' are submitted and can no longer be edited. "
            "Ask an administrator to unlock them."
        )


class NotFound(ReviewError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, kind, ident):
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident} not found")


class NameConflict(ReviewError):
    status_code = 409
    code = "NAME_CONFLICT"

    def __init__(self, name):
        super().__init__(f"A reviewer named '{name}' already exists")
