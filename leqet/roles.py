"""User roles and the per-role dashboard routing table.

Every role must have an entry in ``DASHBOARD_VIEWS``; the module refuses to
import otherwise, so adding a role forces its routes to be declared here.
"""
import enum

LOGIN_PATH = "/login"
DASHBOARD_ROOT = "/dashboard"


class Role(str, enum.Enum):
    MEMBER = "member"
    TRAINER = "trainer"
    NUTRITIONIST = "nutritionist"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value):
        """Return the matching Role or None for unknown/missing values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None

    @property
    def is_coach(self):
        return self in (Role.TRAINER, Role.NUTRITIONIST)


ROLE_VALUES = tuple(r.value for r in Role)

# Paths are relative to /dashboard; "" is the index page.
_SHARED_VIEWS = {
    "profile": "ProfileSetup",
    "workout-plan": "WorkoutPlan",
    "workouts": "WorkoutLogging",
    "progress": "Progress",
    "notifications": "TrainerNotifications",
}

DASHBOARD_VIEWS = {
    Role.MEMBER: {
        **_SHARED_VIEWS,
        "": "MemberDashboard",
        "diet": "DietPlan",
        "meals": "MealLogging",
        "schedule": "MemberSchedule",
    },
    Role.TRAINER: {
        **_SHARED_VIEWS,
        "": "TrainerDashboard",
        "diet": "DietPlan",
        "meals": "MealLogging",
        "workout-plan/builder": "TrainerWorkoutPlanBuilder",
        "schedule": "TrainerSchedule",
        "analytics": "TrainerAnalytics",
    },
    Role.NUTRITIONIST: {
        **_SHARED_VIEWS,
        "": "NutritionistDashboard",
        "diet": "NutritionistMealPlans",
        "meals": "NutritionistClientLogs",
        "analytics": "NutritionistAnalytics",
    },
    Role.ADMIN: {
        **_SHARED_VIEWS,
        "": "AdminDashboard",
        "diet": "DietPlan",
        "meals": "MealLogging",
        "workout-plan/builder": "TrainerWorkoutPlanBuilder",
        "users": "AdminUserManagement",
        "assignments": "AdminAssignments",
        "monitor": "AdminSystemMonitor",
    },
}


def _check_exhaustive():
    missing = [r.value for r in Role if r not in DASHBOARD_VIEWS]
    if missing:
        raise RuntimeError(f"Dashboard views missing for roles: {', '.join(missing)}")


_check_exhaustive()


def normalize_dashboard_path(path):
    path = (path or "").strip()
    if path.startswith(DASHBOARD_ROOT):
        path = path[len(DASHBOARD_ROOT):]
    return path.strip("/")


def resolve_dashboard_view(role, path=""):
    """Resolve the view for ``role`` at ``path``.

    Returns ``("view", name)`` or ``("redirect", target)``. A missing role
    goes to the login page and an unmatched path goes back to the dashboard
    root.
    """
    parsed = Role.parse(role) if role is not None else None
    if parsed is None:
        return "redirect", LOGIN_PATH

    view = DASHBOARD_VIEWS[parsed].get(normalize_dashboard_path(path))
    if view is None:
        return "redirect", DASHBOARD_ROOT
    return "view", view
