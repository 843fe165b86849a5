from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"
    PARTICIPANT = "PARTICIPANT"


class EventType(str, Enum):
    ONLINE = "ONLINE"
    ONSITE = "ONSITE"


class JoinStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class EventFilter(str, Enum):
    INCOMING = "incoming"
    PAST = "past"
    LIVE = "live"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
