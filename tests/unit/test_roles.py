import pytest

from leqet.roles import Role, DASHBOARD_VIEWS, resolve_dashboard_view, normalize_dashboard_path


def test_every_role_has_dashboard_views():
    assert set(DASHBOARD_VIEWS) == set(Role)
    for views in DASHBOARD_VIEWS.values():
        assert "" in views


@pytest.mark.parametrize("role,path,expected", [
    ("member", "/dashboard", ("view", "MemberDashboard")),
    ("trainer", "/dashboard", ("view", "TrainerDashboard")),
    ("nutritionist", "diet", ("view", "NutritionistMealPlans")),
    ("admin", "/dashboard/users", ("view", "AdminUserManagement")),
    (Role.TRAINER, "workout-plan/builder", ("view", "TrainerWorkoutPlanBuilder")),
])
def test_resolve_dashboard_view(role, path, expected):
    assert resolve_dashboard_view(role, path) == expected


def test_unmatched_path_redirects_to_dashboard():
    assert resolve_dashboard_view("member", "/dashboard/users") == ("redirect", "/dashboard")


def test_missing_or_unknown_role_redirects_to_login():
    assert resolve_dashboard_view(None, "/dashboard") == ("redirect", "/login")
    assert resolve_dashboard_view("coach", "/dashboard") == ("redirect", "/login")


def test_role_parse():
    assert Role.parse(" Admin ") is Role.ADMIN
    assert Role.parse("nobody") is None
    assert Role.TRAINER.is_coach and not Role.ADMIN.is_coach


def test_normalize_dashboard_path():
    assert normalize_dashboard_path("/dashboard/meals/") == "meals"
    assert normalize_dashboard_path(None) == ""
