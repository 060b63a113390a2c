from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]

    @classmethod
    def parse(cls, raw):
        """Case-insensitive lookup by value; returns None when unknown."""
        if raw is None:
            return None
        normalized = str(raw).strip().lower()
        for item in cls:
            if item.value == normalized:
                return item
        return None


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """
    Closed set of actor roles.

    administrator / operator act on every condominium of their tenant;
    board_member (síndico) is read-only and bound to one condominium.
    """

    administrator = "administrator"
    operator = "operator"
    board_member = "board_member"


# -----------------------------------------------------
# SUBSCRIPTION PLAN
# -----------------------------------------------------
class Plan(BaseStrEnum):
    """Subscription tier. `freemium` is the only limited tier."""

    freemium = "freemium"
    essential = "essential"
    professional = "professional"
    scale = "scale"


# -----------------------------------------------------
# AUTH PROVIDER
# -----------------------------------------------------
class AuthProvider(BaseStrEnum):
    local = "local"
    google = "google"


# -----------------------------------------------------
# FINANCIAL ENTRY KIND
# -----------------------------------------------------
class EntryKind(BaseStrEnum):
    income = "income"
    expense = "expense"
