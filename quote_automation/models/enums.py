from enum import Enum

class ProjectType(str, Enum):
    CREATIVE = "creative"
    FULLSTACK = "fullstack"
    WEB3 = "web3"
    AI_AUTOMATION = "ai_automation"

class Urgency(str, Enum):
    STANDARD = "standard"
    URGENT = "urgent"
    CRITICAL = "critical"

class ComplexityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class ProjectStatus(str, Enum):
    INITIATED = "initiated"
    ASSESSMENT_COMPLETE = "assessment_complete"
    QUOTE_GENERATED = "quote_generated"
    STRATEGY_CALL_BOOKED = "strategy_call_booked"
    QUOTE_ACCEPTED = "quote_accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class QuoteStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"

# At most one quote per project may be in one of these
ACTIVE_QUOTE_STATUSES = frozenset({QuoteStatus.PENDING, QuoteStatus.SENT, QuoteStatus.ACCEPTED})
OPEN_QUOTE_STATUSES = frozenset({QuoteStatus.PENDING, QuoteStatus.SENT})

class SeedType(str, Enum):
    ALL = "all"
    CATEGORIES = "categories"
    SCALES = "scales"
    COMPLEXITY = "complexity"
    PRICING = "pricing"
