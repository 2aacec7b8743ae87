"""Status enums for the publish workflow.

ContainerState is the local lifecycle of one reel container:

    CREATED -> PROCESSING -> READY -> PUBLISHED
                          -> FAILED | EXPIRED | TIMED_OUT

RemoteStatus is the closed set of logical states the Graph API status
values are normalized into (see instagram.status).
"""

from enum import Enum


class ContainerState(str, Enum):
    """Lifecycle state of a reel container."""
    CREATED = "created"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    EXPIRED = "expired"
    TIMED_OUT = "timed_out"
    PUBLISHED = "published"

    @property
    def is_terminal(self) -> bool:
        """True for states that allow no further polling."""
        return self in {
            ContainerState.FAILED,
            ContainerState.EXPIRED,
            ContainerState.TIMED_OUT,
            ContainerState.PUBLISHED,
        }


class RemoteStatus(str, Enum):
    """Logical container status reported by the Graph API."""
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    EXPIRED = "expired"


class PublishFailure(str, Enum):
    """Reason codes of a failed publish attempt."""
    CREATE_FAILED = "CREATE_FAILED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"
    TIMED_OUT = "TIMED_OUT"
    PUBLISH_FAILED = "PUBLISH_FAILED"


class PublishStatus(str, Enum):
    """Secondary status of the publish step in a generation request."""
    PUBLISHED = "published"
    FAILED = "failed"
    SKIPPED = "skipped"
