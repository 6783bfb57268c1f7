"""Models package."""

from .user import User
from .user_session import UserSession
from .consumption_entry import ConsumptionEntry
