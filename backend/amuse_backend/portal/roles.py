"""
Role-based portal dispatch.

Every staff role maps to exactly one portal. The set of roles is closed
(`Role`), so dispatch is a dictionary lookup; anything unrecognised lands on
the admin portal.
"""
from dataclasses import dataclass, field, asdict
from typing import List

from .models import Role


class Permission:
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_USERS = "manage_users"
    VIEW_ALL_DATA = "view_all_data"
    SYSTEM_CONFIG = "system_config"
    MANAGE_ROLES = "manage_roles"
    MANAGE_EMPLOYEES = "manage_employees"
    VIEW_HR_REPORTS = "view_hr_reports"
    MANAGE_RECRUITMENT = "manage_recruitment"
    MANAGE_CUSTOMERS = "manage_customers"
    VIEW_CUSTOMER_DATA = "view_customer_data"
    MANAGE_CAMPAIGNS = "manage_campaigns"
    MANAGE_CONTENT = "manage_content"
    VIEW_FINANCIAL_DATA = "view_financial_data"
    MANAGE_INVOICES = "manage_invoices"
    APPROVE_EXPENSES = "approve_expenses"
    MANAGE_PROGRAMS = "manage_programs"
    VIEW_STUDENT_DATA = "view_student_data"
    MANAGE_SCHEDULES = "manage_schedules"
    MANAGE_REGISTRATIONS = "manage_registrations"
    MANAGE_POLICIES = "manage_policies"
    MANAGE_COMPLIANCE = "manage_compliance"
    VIEW_AUDIT_TRAILS = "view_audit_trails"


@dataclass(frozen=True)
class Portal:
    key: str
    title: str
    department: str
    tabs: List[str] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


PORTALS = {
    Role.CEO: Portal(
        key="ceo",
        title="CEO Dashboard",
        department="Executive",
        tabs=["dashboard", "analytics", "approvals", "planning", "reports", "settings"],
        permissions=[
            Permission.VIEW_ALL_DATA,
            Permission.APPROVE_EXPENSES,
            Permission.VIEW_FINANCIAL_DATA,
            Permission.MANAGE_REGISTRATIONS,
        ],
    ),
    Role.ADMIN: Portal(
        key="admin",
        title="Administration",
        department="Administration",
        tabs=["dashboard", "registrations", "users", "content", "settings"],
        permissions=[
            Permission.MANAGE_USERS,
            Permission.SYSTEM_CONFIG,
            Permission.MANAGE_ROLES,
            Permission.MANAGE_REGISTRATIONS,
            Permission.MANAGE_CONTENT,
        ],
    ),
    Role.HR: Portal(
        key="hr",
        title="HR Portal",
        department="Human Resources",
        tabs=["dashboard", "employees", "recruitment", "reports"],
        permissions=[
            Permission.MANAGE_EMPLOYEES,
            Permission.VIEW_HR_REPORTS,
            Permission.MANAGE_RECRUITMENT,
        ],
    ),
    Role.MARKETING: Portal(
        key="marketing",
        title="Marketing Portal",
        department="Marketing",
        tabs=["dashboard", "leads", "customers", "content", "faq", "email"],
        permissions=[
            Permission.MANAGE_CUSTOMERS,
            Permission.VIEW_CUSTOMER_DATA,
            Permission.MANAGE_CAMPAIGNS,
            Permission.MANAGE_CONTENT,
        ],
    ),
    Role.ACCOUNTS: Portal(
        key="accounts",
        title="Accounts Portal",
        department="Finance",
        tabs=[
            "dashboard", "invoices", "payments", "pending-collections",
            "expenses", "budgets", "vendors", "bills", "reports",
        ],
        permissions=[
            Permission.VIEW_FINANCIAL_DATA,
            Permission.MANAGE_INVOICES,
            Permission.MANAGE_REGISTRATIONS,
        ],
    ),
    Role.COACH: Portal(
        key="coach",
        title="Coach Portal",
        department="Programs",
        tabs=["dashboard", "schedule", "attendance", "availability"],
        permissions=[
            Permission.MANAGE_PROGRAMS,
            Permission.VIEW_STUDENT_DATA,
            Permission.MANAGE_SCHEDULES,
        ],
    ),
    Role.GOVERNANCE: Portal(
        key="governance",
        title="Governance Portal",
        department="Risk & Compliance",
        tabs=["dashboard", "policies", "compliance", "risk", "audit", "documents"],
        permissions=[
            Permission.MANAGE_POLICIES,
            Permission.MANAGE_COMPLIANCE,
            Permission.VIEW_AUDIT_TRAILS,
        ],
    ),
}

SUPER_ADMIN_ROLES = frozenset({Role.CEO, Role.ADMIN})


def coerce_role(value):
    try:
        return Role(value)
    except ValueError:
        return None


def portal_for(role):
    """Dispatch a role (enum member or raw string) to its portal."""
    resolved = coerce_role(role)
    if resolved is None:
        return PORTALS[Role.ADMIN]
    return PORTALS[resolved]


def department_for(role):
    resolved = coerce_role(role)
    return PORTALS[resolved].department if resolved else "General"


def permissions_for(role):
    resolved = coerce_role(role)
    return list(PORTALS[resolved].permissions) if resolved else []


def is_super_admin(role):
    return coerce_role(role) in SUPER_ADMIN_ROLES


def has_permission(user, permission):
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser or is_super_admin(user.role):
        return True
    return permission in permissions_for(user.role)
