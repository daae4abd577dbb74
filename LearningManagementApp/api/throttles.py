"""API throttling classes."""

from rest_framework.throttling import UserRateThrottle

class QuizAnswerRateThrottle(UserRateThrottle):
    """Throttle limiting quiz answers per user."""
    scope = "quiz_answer"
    rate = "60/minute"


class SubmissionRateThrottle(UserRateThrottle):
    """Throttle limiting assignment submissions per user."""
    scope = "assignment_submit"
    rate = "30/minute"
