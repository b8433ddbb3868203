from dataclasses import dataclass


@dataclass(frozen=True)
class ClassifiedError:
    """User-facing description of a failure and whether retrying may help."""

    user_message: str
    technical_detail: str
    is_retryable: bool
    suggested_action: str
