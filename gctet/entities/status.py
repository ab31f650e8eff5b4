from enum import Enum


class AppStatus(str, Enum):
    """Chat session status.

    Every non-idle state is entered from IDLE and returns to IDLE when the
    remote call settles, whether it succeeded or not.
    """

    IDLE = "IDLE"
    THINKING = "THINKING"
    TRANSLATING = "TRANSLATING"
    SPEAKING = "SPEAKING"
