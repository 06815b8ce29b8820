PENDING = 'Pending'
APPROVED = 'Approved'
REJECTED = 'Rejected'

ACTIVITY_STATUS_CHOICES = [
    (PENDING, 'Pending'),
    (APPROVED, 'Approved'),
    (REJECTED, 'Rejected'),
]

MAX_ACTIVITY_PHOTOS = 3

FALLBACK_ADVICE = (
    "AI analysis could not be completed, but your activity has been approved. "
    "Keep up the great work!"
)
GENERIC_SUGGESTION_TEXT = "Keep up the great work with your sustainable practices!"
