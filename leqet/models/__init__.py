from .user import User, TrainerAssignment, NutritionistAssignment
from .member_profile import MemberProfile, MemberGoals

from .catalog import FoodItem, Exercise
from .logs import MealLog, MealLogItem, WorkoutLog, WorkoutLogItem, WeightLog, CheckIn

from .plans import (
    DietPlan, DietPlanMeal, DietPlanMealItem,
    WorkoutPlan, WorkoutPlanDay, WorkoutPlanExercise,
)
from .communication import PlanMessage, Notification, TrainerFeedback, NutritionistFeedback
from .schedules import ScheduleSession, SystemLog

__all__ = [
    "User", "TrainerAssignment", "NutritionistAssignment",
    "MemberProfile", "MemberGoals",
    "FoodItem", "Exercise",
    "MealLog", "MealLogItem", "WorkoutLog", "WorkoutLogItem", "WeightLog", "CheckIn",
    "DietPlan", "DietPlanMeal", "DietPlanMealItem",
    "WorkoutPlan", "WorkoutPlanDay", "WorkoutPlanExercise",
    "PlanMessage", "Notification", "TrainerFeedback", "NutritionistFeedback",
    "ScheduleSession", "SystemLog",
]
