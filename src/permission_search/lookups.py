"""Static lookup tables used to enrich and rank permissions.

The tables are configuration data, not measured usage. They are bundled into a
``LookupTables`` value that is passed to the indexer, scorer and session, so a
test or an embedding application can substitute its own catalog vocabulary.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


RESOURCE_CATEGORIES = _frozen(
    {
        "user": "HR",
        "payslip": "HR",
        "vacation": "HR",
        "training": "Training",
        "document": "Documents",
        "unit": "Operations",
        "reservation": "Operations",
        "guest": "Operations",
        "task": "Operations",
        "permission": "Admin",
        "role": "Admin",
        "audit": "Admin",
    }
)

# Keyed by "resource.action"
POPULARITY_SCORES = _frozen(
    {
        # High usage
        "user.read": 90,
        "user.update": 85,
        "vacation.create": 80,
        "vacation.read": 85,
        "payslip.read": 90,
        "document.read": 75,
        "training.read": 70,
        # Medium usage
        "user.create": 60,
        "document.create": 55,
        "task.read": 65,
        "task.update": 60,
        # Admin functions
        "permission.grant": 30,
        "role.assign": 25,
        "audit.read": 35,
    }
)

RESOURCE_SYNONYMS = _frozen(
    {
        "user": ("staff", "employee", "person", "member"),
        "document": ("file", "upload", "attachment", "paper"),
        "vacation": ("holiday", "leave", "time-off", "absence"),
        "training": ("course", "education", "learning", "development"),
        "payslip": ("salary", "wage", "pay", "payroll", "compensation"),
        "task": ("assignment", "job", "work", "todo"),
        "reservation": ("booking", "appointment", "schedule"),
        "unit": ("room", "suite", "accommodation", "space"),
        "guest": ("customer", "client", "visitor", "patron"),
    }
)

ACTION_SYNONYMS = _frozen(
    {
        "create": ("add", "new", "make", "generate", "build"),
        "read": ("view", "see", "access", "display", "show"),
        "update": ("edit", "modify", "change", "alter", "adjust"),
        "delete": ("remove", "destroy", "eliminate", "erase"),
        "approve": ("accept", "confirm", "authorize", "validate"),
        "assign": ("allocate", "designate", "appoint", "give"),
    }
)

ACTION_NAMES = _frozen(
    {
        "create": "Create",
        "read": "View",
        "update": "Edit",
        "delete": "Delete",
        "approve": "Approve",
        "assign": "Assign",
        "grant": "Grant",
        "revoke": "Revoke",
    }
)

RESOURCE_NAMES = _frozen(
    {
        "user": "Users",
        "document": "Documents",
        "vacation": "Vacations",
        "training": "Training",
        "payslip": "Payslips",
        "task": "Tasks",
        "unit": "Units/Rooms",
        "reservation": "Reservations",
        "guest": "Guests",
        "permission": "Permissions",
        "role": "Roles",
        "audit": "Audit Logs",
    }
)

SCOPE_NAMES = _frozen(
    {
        "own": "Own",
        "department": "Department",
        "property": "Property",
        "organization": "Organization",
        "platform": "Platform",
    }
)

RESOURCE_ICONS = _frozen(
    {
        "user": "UserIcon",
        "document": "DocumentTextIcon",
        "vacation": "CalendarIcon",
        "training": "AcademicCapIcon",
        "payslip": "CurrencyDollarIcon",
        "task": "CheckCircleIcon",
        "unit": "HomeIcon",
        "reservation": "ClipboardDocumentListIcon",
        "guest": "UserGroupIcon",
        "permission": "ShieldCheckIcon",
        "role": "KeyIcon",
        "audit": "DocumentMagnifyingGlassIcon",
    }
)

RECENT_RESOURCES = ("user", "vacation", "document", "payslip", "training")

# context -> (boosted resources, points)
CONTEXT_BOOSTS = _frozen(
    {
        "role-creation": (frozenset({"user", "permission", "role"}), 10.0),
        "user-management": (frozenset({"user"}), 15.0),
    }
)


@dataclass(frozen=True, eq=False)
class LookupTables:
    """Immutable bundle of every static table the engine consults."""

    resource_categories: Mapping[str, str] = field(default_factory=lambda: RESOURCE_CATEGORIES)
    popularity_scores: Mapping[str, int] = field(default_factory=lambda: POPULARITY_SCORES)
    resource_synonyms: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: RESOURCE_SYNONYMS
    )
    action_synonyms: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: ACTION_SYNONYMS)
    action_names: Mapping[str, str] = field(default_factory=lambda: ACTION_NAMES)
    resource_names: Mapping[str, str] = field(default_factory=lambda: RESOURCE_NAMES)
    scope_names: Mapping[str, str] = field(default_factory=lambda: SCOPE_NAMES)
    resource_icons: Mapping[str, str] = field(default_factory=lambda: RESOURCE_ICONS)
    recent_resources: tuple[str, ...] = RECENT_RESOURCES
    context_boosts: Mapping[str, tuple[frozenset[str], float]] = field(
        default_factory=lambda: CONTEXT_BOOSTS
    )
    default_category: str = "Operations"
    default_popularity: int = 50
    default_icon: str = "CogIcon"

    def category_for(self, resource: str) -> str:
        return self.resource_categories.get(resource, self.default_category)

    def popularity_for(self, resource: str, action: str) -> int:
        return self.popularity_scores.get(f"{resource}.{action}", self.default_popularity)

    def icon_for(self, resource: str) -> str:
        return self.resource_icons.get(resource, self.default_icon)

    def context_boost(self, context: str, resource: str) -> float:
        boost = self.context_boosts.get(context)
        if boost is None:
            return 0.0
        resources, points = boost
        return points if resource in resources else 0.0


DEFAULT_LOOKUPS = LookupTables()
