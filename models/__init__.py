# -------------------------
# Enums
# -------------------------
from .enums import (
    AuthProvider,
    EntryKind,
    Plan,
    Role,
)

# -------------------------
# Tenant
# -------------------------
from .administrator import Administrator

# -------------------------
# Condominium Models
# -------------------------
from .condominium import (
    Condominium,
    CondominiumBase,
    CondominiumCreate,
    CondominiumUpdate,
)

# -------------------------
# Unit Models
# -------------------------
from .unit import (
    Unit,
    UnitBase,
    UnitCreate,
    UnitUpdate,
)

# -------------------------
# Resident Models
# -------------------------
from .resident import (
    Resident,
    ResidentBase,
    ResidentCreate,
    ResidentUpdate,
)

# -------------------------
# Financial Entry Models
# -------------------------
from .financial_entry import (
    FinancialEntry,
    FinancialEntryBase,
    FinancialEntryCreate,
    FinancialEntryUpdate,
)

# -------------------------
# User Models
# -------------------------
from .user import User, UserRead

# -------------------------
# Auth Models
# -------------------------
from .auth import (
    AuthResponse,
    EmailRequest,
    GoogleLinkRequest,
    LoginRequest,
    OnboardingRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenRequest,
)

__all__ = [
    # enums
    "AuthProvider",
    "EntryKind",
    "Plan",
    "Role",

    # tenant
    "Administrator",

    # condominiums
    "Condominium",
    "CondominiumBase",
    "CondominiumCreate",
    "CondominiumUpdate",

    # units
    "Unit",
    "UnitBase",
    "UnitCreate",
    "UnitUpdate",

    # residents
    "Resident",
    "ResidentBase",
    "ResidentCreate",
    "ResidentUpdate",

    # financial entries
    "FinancialEntry",
    "FinancialEntryBase",
    "FinancialEntryCreate",
    "FinancialEntryUpdate",

    # users
    "User",
    "UserRead",

    # auth
    "AuthResponse",
    "EmailRequest",
    "GoogleLinkRequest",
    "LoginRequest",
    "OnboardingRequest",
    "RegisterRequest",
    "RegisterResponse",
    "ResetPasswordRequest",
    "TokenRequest",
]
