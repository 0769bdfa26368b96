from typing import Any, Dict, List, Optional

from leqet.client.session import AuthSession, ApiError, CancelToken
from leqet.client.validators import (
    require_email, validate_otp, validate_password, require_text, require_id, iso_day,
)
from leqet.models.communication import PLAN_TYPES
from leqet.models.logs import MEAL_TYPES
from leqet.models.schedules import SESSION_TYPES
from leqet.roles import ROLE_VALUES

__all__ = ["LeqetApi", "ApiError", "CancelToken"]


def _plan_type(plan_type):
    if plan_type not in PLAN_TYPES:
        raise ValueError("planType must be 'diet' or 'workout'")
    return plan_type


class LeqetApi:
    """Thin wrapper over the Leqet REST API.

    Every method maps to one endpoint. Input-shape errors raise ValueError
    before anything is sent; server errors raise ApiError.
    """

    def __init__(self, session: Optional[AuthSession] = None):
        self.session = session or AuthSession.from_env()

    def _get(self, path, params=None, cancel_token=None):
        return self.session.request("GET", path, params=params, cancel_token=cancel_token)

    def _post(self, path, json=None, cancel_token=None):
        return self.session.request("POST", path, json=json if json is not None else {}, cancel_token=cancel_token)

    def _put(self, path, json):
        return self.session.request("PUT", path, json=json)

    def _delete(self, path):
        return self.session.request("DELETE", path)

    def health(self) -> bool:
        return bool((self._get("/api/health") or {}).get("ok"))

    # Auth

    def login(self, email, password):
        email = require_email(email)
        if not password:
            raise ValueError("Password is required")
        return self.session.login(email, password)

    def logout(self):
        self.session.logout()

    def request_otp(self, email):
        return self._post("/api/auth/request-otp", {"email": require_email(email)})

    def activate_account(self, email, otp, password, confirm_password=None, full_name=None):
        payload = {
            "email": require_email(email),
            "otp": validate_otp(otp),
            "password": validate_password(password, confirm_password),
        }
        if full_name:
            payload["full_name"] = full_name.strip()
        return self._post("/api/auth/activate", payload)

    def request_password_reset(self, email):
        return self._post("/api/auth/forgot-password/request", {"email": require_email(email)})

    def reset_password(self, email, otp, password, confirm_password=None):
        payload = {
            "email": require_email(email),
            "otp": validate_otp(otp),
            "password": validate_password(password, confirm_password),
        }
        return self._post("/api/auth/forgot-password/reset", payload)

    # Admin users

    def invite_user(self, full_name, email, role):
        if role not in ROLE_VALUES:
            raise ValueError("Invalid role")
        payload = {"full_name": require_text(full_name, "Full name"), "email": require_email(email), "role": role}
        return self._post("/api/admin/users/invite", payload)

    def get_users(self, cancel_token=None) -> List[Dict[str, Any]]:
        return self._get("/api/admin/users", cancel_token=cancel_token)

    def get_user(self, user_id):
        return self._get(f"/api/admin/users/{require_id(user_id, 'User id')}")

    def update_user(self, user_id, changes: Dict[str, Any]):
        """``changes`` may hold role, trainerId and nutritionistId; a None id removes the assignment."""
        if "role" in changes and changes["role"] not in ROLE_VALUES:
            raise ValueError("Invalid role")
        return self._put(f"/api/admin/users/{require_id(user_id, 'User id')}", dict(changes))

    def delete_user(self, user_id):
        return self._delete(f"/api/admin/users/{require_id(user_id, 'User id')}")

    # Catalogue

    def fetch_foods(self, query=None, cancel_token=None):
        params = {"q": query.strip()} if isinstance(query, str) and query.strip() else None
        return self._get("/api/foods", params=params, cancel_token=cancel_token)

    def create_food(self, food: Dict[str, Any]):
        require_text(food.get("name"), "Name")
        return self._post("/api/foods", food)

    def fetch_exercises(self, cancel_token=None):
        return self._get("/api/exercises", cancel_token=cancel_token)

    def search_exercises(self, query, cancel_token=None):
        query = require_text(query, "Search query")
        return self._get("/api/exercises/search", params={"q": query}, cancel_token=cancel_token)

    # Meals and workouts

    def log_meal(self, member_id, meal_type, item: Dict[str, Any]):
        if meal_type not in MEAL_TYPES:
            raise ValueError(f"meal_type must be one of {', '.join(MEAL_TYPES)}")
        payload = dict(item, member_id=require_id(member_id, "member_id"), meal_type=meal_type)
        return self._post("/api/meals", payload)

    def get_today_meals(self, member_id, cancel_token=None):
        params = {"member_id": require_id(member_id, "member_id")}
        return (self._get("/api/meals/today", params=params, cancel_token=cancel_token) or {}).get("meals", [])

    def delete_meal_item(self, item_id):
        return self._delete(f"/api/meals/items/{require_id(item_id, 'Item id')}")

    def get_meals_by_date(self, member_id, day, cancel_token=None):
        params = {"member_id": require_id(member_id, "member_id"), "date": iso_day(day)}
        return (self._get("/api/meals/by-date", params=params, cancel_token=cancel_token) or {}).get("meals", [])

    def fetch_recent_meals(self, limit=10, cancel_token=None):
        return (self._get("/api/meals/recent", params={"limit": limit}, cancel_token=cancel_token) or {}).get("meals", [])

    def log_workout(self, member_id, duration_minutes, exercise_id=None, exercise_name=None,
                    calories_burned=0, weight_used=None, weight_unit=None):
        if not duration_minutes or float(duration_minutes) <= 0:
            raise ValueError("duration_minutes must be > 0")
        if not exercise_id and not (isinstance(exercise_name, str) and exercise_name.strip()):
            raise ValueError("exercise_id or exercise_name is required")
        if weight_used is not None and float(weight_used) < 0:
            raise ValueError("weight_used must be >= 0")
        payload = {
            "member_id": require_id(member_id, "member_id"),
            "duration_minutes": duration_minutes,
            "calories_burned": calories_burned,
        }
        if exercise_id:
            payload["exercise_id"] = exercise_id
        if exercise_name:
            payload["exercise_name"] = exercise_name.strip()
        if weight_used is not None:
            payload["weight_used"] = weight_used
            payload["weight_unit"] = weight_unit
        return self._post("/api/workouts", payload)

    def get_today_workouts(self, member_id, cancel_token=None):
        params = {"member_id": require_id(member_id, "member_id")}
        return (self._get("/api/workouts/today", params=params, cancel_token=cancel_token) or {}).get("workouts", [])

    def delete_workout_item(self, item_id):
        return self._delete(f"/api/workouts/items/{require_id(item_id, 'Item id')}")

    # Plans

    def get_diet_plan(self, member_id, cancel_token=None):
        data = self._get(f"/api/members/{require_id(member_id, 'member_id')}/diet-plan", cancel_token=cancel_token)
        return (data or {}).get("plan")

    def get_workout_plan(self, member_id, cancel_token=None):
        data = self._get(f"/api/members/{require_id(member_id, 'member_id')}/workout-plan", cancel_token=cancel_token)
        return (data or {}).get("plan")

    def create_manual_diet_plan(self, member_id, plan: Dict[str, Any]):
        return self._post(f"/api/members/{require_id(member_id, 'member_id')}/diet-plan/manual", plan)

    def create_manual_workout_plan(self, member_id, plan: Dict[str, Any]):
        return self._post(f"/api/members/{require_id(member_id, 'member_id')}/workout-plan/manual", plan)

    def generate_default_diet_plan(self, member_id):
        return self._post(f"/api/members/{require_id(member_id, 'member_id')}/diet-plan/generate-default")

    def generate_default_workout_plan(self, member_id):
        return self._post(f"/api/members/{require_id(member_id, 'member_id')}/workout-plan/generate-default")

    # Profile

    def get_member_profile(self, member_id, cancel_token=None):
        data = self._get(f"/api/members/{require_id(member_id, 'member_id')}/profile", cancel_token=cancel_token)
        return (data or {}).get("profile")

    def update_member_profile(self, member_id, profile: Dict[str, Any]):
        data = self._put(f"/api/members/{require_id(member_id, 'member_id')}/profile", profile)
        return (data or {}).get("profile")

    # Messaging and feedback

    def fetch_plan_messages(self, member_id, plan_type, limit=50, cancel_token=None):
        params = {"planType": _plan_type(plan_type), "limit": limit}
        path = f"/api/members/{require_id(member_id, 'member_id')}/plan-messages"
        return (self._get(path, params=params, cancel_token=cancel_token) or {}).get("messages", [])

    def send_plan_message(self, member_id, plan_type, message):
        payload = {"planType": _plan_type(plan_type), "message": require_text(message, "Message")}
        data = self._post(f"/api/members/{require_id(member_id, 'member_id')}/plan-messages", payload)
        return (data or {}).get("message")

    def fetch_notifications(self, only_unread=False, cancel_token=None):
        params = {"only_unread": "1"} if only_unread else None
        return (self._get("/api/notifications", params=params, cancel_token=cancel_token) or {}).get("notifications", [])

    def mark_notification_read(self, notification_id):
        return self._post(f"/api/notifications/{require_id(notification_id, 'Notification id')}/read")

    def send_trainer_feedback(self, member_id, message):
        path = f"/api/members/{require_id(member_id, 'member_id')}/trainer-feedback"
        return self._post(path, {"message": require_text(message, "Message")})

    def send_nutritionist_feedback(self, member_id, message):
        path = f"/api/members/{require_id(member_id, 'member_id')}/nutritionist-feedback"
        return self._post(path, {"message": require_text(message, "Message")})

    # Schedule

    def fetch_trainer_schedule(self, from_day=None, to_day=None, cancel_token=None):
        params = {}
        if from_day:
            params["from"] = iso_day(from_day)
        if to_day:
            params["to"] = iso_day(to_day)
        return (self._get("/api/trainer/schedule", params=params or None, cancel_token=cancel_token) or {}).get("sessions", [])

    def create_schedule_session(self, member_id, session_type, session_date, session_time):
        if session_type not in SESSION_TYPES:
            raise ValueError("Valid session_type is required")
        payload = {
            "member_id": require_id(member_id, "member_id"),
            "session_type": session_type,
            "session_date": iso_day(session_date),
            "session_time": session_time.strftime("%H:%M") if hasattr(session_time, "strftime") else str(session_time),
        }
        return self._post("/api/trainer/schedule", payload)

    def fetch_member_schedule(self, member_id, cancel_token=None):
        path = f"/api/members/{require_id(member_id, 'member_id')}/schedule"
        return (self._get(path, cancel_token=cancel_token) or {}).get("sessions", [])

    # Overview and summaries

    def fetch_member_overview(self, cancel_token=None):
        return (self._get("/api/members/overview", cancel_token=cancel_token) or {}).get("members", [])

    def fetch_member_dashboard_summary(self, member_id, days=14, cancel_token=None):
        path = f"/api/members/{require_id(member_id, 'member_id')}/dashboard-summary"
        return self._get(path, params={"days": days}, cancel_token=cancel_token)

    def fetch_member_progress_summary(self, member_id, cancel_token=None):
        path = f"/api/members/{require_id(member_id, 'member_id')}/progress-summary"
        return self._get(path, cancel_token=cancel_token)

    def fetch_member_check_ins(self, member_id, limit=10, cancel_token=None):
        path = f"/api/members/{require_id(member_id, 'member_id')}/check-ins"
        return (self._get(path, params={"limit": limit}, cancel_token=cancel_token) or {}).get("checkIns", [])

    def create_member_check_in(self, member_id, check_in: Dict[str, Any]):
        data = self._post(f"/api/members/{require_id(member_id, 'member_id')}/check-ins", check_in)
        return (data or {}).get("checkIn")

    def fetch_trainer_analytics(self, cancel_token=None):
        return self._get("/api/analytics/trainer", cancel_token=cancel_token)

    def fetch_nutritionist_analytics(self, member_id, cancel_token=None):
        return self._get(f"/api/analytics/nutritionist/{require_id(member_id, 'member_id')}", cancel_token=cancel_token)

    def fetch_member_analytics(self, member_id, cancel_token=None):
        return self._get(f"/api/analytics/member/{require_id(member_id, 'member_id')}", cancel_token=cancel_token)

    # Admin system

    def get_system_stats(self, cancel_token=None):
        return self._get("/api/admin/system/stats", cancel_token=cancel_token)

    def get_system_monitor(self, cancel_token=None):
        return self._get("/api/admin/system/monitor", cancel_token=cancel_token)

    def trigger_backup(self):
        return self._post("/api/admin/maintenance/backup")

    def run_health_check(self):
        return self._post("/api/admin/maintenance/health-check")

    def clear_cache_and_logs(self):
        return self._post("/api/admin/maintenance/clear-cache")
