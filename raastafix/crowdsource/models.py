"""
Domain records for civic issue reports
Reports, users and notifications as persisted in the key-value store.

Records serialize with camelCase keys so stored blobs stay readable by the
web client. Fields that older blobs lack are filled in with defaults on load.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from raastafix.core.constants import DEFAULT_REPORTER_EMAIL, INITIAL_REPUTATION


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class IssueType(str, Enum):
    """Kinds of civic issue a citizen can report."""
    POTHOLE = "pothole"
    STREETLIGHT = "streetlight"
    WATER_LEAK = "water-leak"
    WASTE = "waste"
    MANHOLE = "manhole"


class ReportStatus(str, Enum):
    """Lifecycle status of a report."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ReportPriority(str, Enum):
    """Priority level of a report."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RewardType(str, Enum):
    """Rewards handed out when a report is approved."""
    VOUCHER = "voucher"
    TSHIRT = "tshirt"
    GOODIES = "goodies"


class UserRole(str, Enum):
    """Account roles."""
    CITIZEN = "citizen"
    AUTHORITY = "authority"
    ADMIN = "admin"


class NotificationType(str, Enum):
    """Kinds of notification shown to a user."""
    REPORT_UPDATE = "report_update"
    COMMENT = "comment"
    RESOLUTION = "resolution"
    UPVOTE = "upvote"
    SYSTEM = "system"
    APPROVAL = "approval"
    REJECTION = "rejection"
    REWARD = "reward"


class Record(BaseModel):
    """Base for stored records (camelCase on the wire, snake_case in code)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Location(Record):
    lat: float
    lng: float
    address: str = ""
    ward: Optional[str] = None
    city: Optional[str] = None


class Reward(Record):
    type: RewardType
    claimed: bool = False
    claimed_at: Optional[datetime] = None


class Comment(Record):
    id: str
    user_id: str
    user_name: str
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


class NotificationReward(Record):
    type: RewardType


class Notification(Record):
    """Message delivered to a user's inbox."""
    id: str
    type: NotificationType
    message: str
    report_id: Optional[str] = None
    read: bool = False
    timestamp: datetime = Field(default_factory=utcnow)
    reward: Optional[NotificationReward] = None


class Report(Record):
    """A citizen-submitted civic issue."""
    id: str
    type: IssueType
    title: str
    description: str
    location: Location
    status: ReportStatus = ReportStatus.PENDING
    priority: ReportPriority = ReportPriority.MEDIUM
    image_url: Optional[str] = None
    is_rainy_hazard: bool = False

    reported_by: str = ""
    reported_by_email: str = DEFAULT_REPORTER_EMAIL
    reported_at: datetime = Field(default_factory=utcnow)

    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejection_reason: Optional[str] = None

    reward: Optional[Reward] = None

    upvotes: int = 0
    downvotes: int = 0
    voted_by: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    views: int = 0
    share_count: int = 0

    estimated_cost: Optional[float] = None
    estimated_time: Optional[str] = None
    assigned_to: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _backfill(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if data.get("tags") is None and data.get("type") is not None:
                issue_type = data["type"]
                data["tags"] = [getattr(issue_type, "value", issue_type)]
            if not data.get("reportedByEmail") and not data.get("reported_by_email"):
                data.pop("reported_by_email", None)
                data["reportedByEmail"] = DEFAULT_REPORTER_EMAIL
        return data

    @property
    def has_active_reward(self) -> bool:
        """A reward only counts while the report is being worked on."""
        return self.reward is not None and self.status == ReportStatus.IN_PROGRESS


class User(Record):
    """A citizen or authority account."""
    id: str
    name: str
    email: str
    role: UserRole = UserRole.CITIZEN
    phone: Optional[str] = None
    avatar: Optional[str] = None

    # Authority only; stored as given, never verified
    gov_id: Optional[str] = None
    password: Optional[str] = None

    reports_submitted: int = 0
    reports_resolved: int = 0
    reputation: int = INITIAL_REPUTATION
    joined_at: datetime = Field(default_factory=utcnow)
    notifications: List[Notification] = Field(default_factory=list)
    rewards_earned: int = 0

    @model_validator(mode="before")
    @classmethod
    def _backfill(cls, data: Any) -> Any:
        # Null counters and lists in older blobs fall back to field defaults
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if v is not None}
        return data

    @property
    def is_authority(self) -> bool:
        return self.role == UserRole.AUTHORITY

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.read)
