import enum
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from leqet.client.session import ApiError
from leqet.services.nutrition import Food, scale_to_quantity, round_1dp
from leqet.services.workouts import calories_burned

logger = logging.getLogger(__name__)


class EntryStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class LogEntry:
    local_id: int
    kind: str
    payload: Dict[str, Any]
    calories: float = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    status: EntryStatus = EntryStatus.PENDING
    item_id: Optional[int] = None
    error: Optional[str] = None
    label: str = ""

    @property
    def is_failed(self) -> bool:
        return self.status == EntryStatus.FAILED


@dataclass
class DayTotals:
    calories: float = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    calories_burned: float = 0
    workout_minutes: float = 0
    water_liters: float = 0.0
    steps: int = 0
    failed: int = field(default=0)


class DayLog:
    """Today's meals and workouts for one member, updated optimistically.

    Entries appear as ``pending`` right away and turn ``confirmed`` (with
    the server item id) or ``failed`` once the API answers. Failed entries
    stay in the list until retried or discarded, and never count towards
    totals. After ``close()`` late answers leave entries untouched.
    """

    def __init__(self, api, member_id: int):
        self.api = api
        self.member_id = member_id
        self.entries: List[LogEntry] = []
        self.water_liters = 0.0
        self.steps = 0
        self.closed = False
        self._ids = itertools.count(1)

    def close(self):
        self.closed = True

    @property
    def failed_entries(self) -> List[LogEntry]:
        return [e for e in self.entries if e.is_failed]

    def add_meal(self, meal_type: str, food: Food, quantity_grams: float) -> LogEntry:
        if quantity_grams is None or quantity_grams <= 0:
            raise ValueError("Quantity must be greater than 0")
        snapshot = scale_to_quantity(food, quantity_grams)
        payload = {
            "meal_type": meal_type,
            "item": dict(
                snapshot,
                food_item_id=int(food.id) if food.id and str(food.id).isdigit() else None,
                quantity=quantity_grams,
                unit="g",
            ),
        }
        entry = LogEntry(local_id=next(self._ids), kind="meal", payload=payload, label=food.name, **snapshot)
        self.entries.append(entry)
        self._submit(entry)
        return entry

    def add_workout(self, exercise_name: str, calories_per_minute: float, duration_minutes: float,
                    intensity: str = "medium", exercise_id: Optional[int] = None) -> LogEntry:
        if duration_minutes is None or duration_minutes <= 0:
            raise ValueError("Duration must be greater than 0")
        burned = calories_burned(calories_per_minute, duration_minutes, intensity)
        payload = {
            "duration_minutes": duration_minutes,
            "exercise_id": exercise_id,
            "exercise_name": exercise_name,
            "calories_burned": burned,
        }
        entry = LogEntry(local_id=next(self._ids), kind="workout", payload=payload, calories=burned, label=exercise_name)
        self.entries.append(entry)
        self._submit(entry)
        return entry

    def add_water(self, liters: float) -> float:
        if liters is None or liters <= 0:
            raise ValueError("Water amount must be greater than 0")
        self.water_liters += liters
        return round_1dp(self.water_liters)

    def add_steps(self, steps: int) -> int:
        if steps is None or steps <= 0:
            raise ValueError("Steps must be greater than 0")
        self.steps += int(steps)
        return self.steps

    def _send(self, entry: LogEntry):
        if entry.kind == "meal":
            return self.api.log_meal(self.member_id, entry.payload["meal_type"], entry.payload["item"])
        return self.api.log_workout(self.member_id, **entry.payload)

    def _submit(self, entry: LogEntry):
        entry.status = EntryStatus.PENDING
        entry.error = None
        try:
            result = self._send(entry)
        except (ApiError, ValueError) as e:
            if self.closed:
                return
            logger.warning(f"Could not save {entry.kind} entry {entry.local_id}: {e}")
            entry.status = EntryStatus.FAILED
            entry.error = str(e)
            return
        if self.closed:
            return
        entry.status = EntryStatus.CONFIRMED
        entry.item_id = (result or {}).get("item_id")

    def retry_failed(self) -> List[LogEntry]:
        failed = self.failed_entries
        for entry in failed:
            self._submit(entry)
        return failed

    def discard_failed(self) -> int:
        before = len(self.entries)
        self.entries = [e for e in self.entries if not e.is_failed]
        return before - len(self.entries)

    def delete(self, entry: LogEntry) -> None:
        """Remove an entry locally, then on the server when it was saved there."""
        self.entries = [e for e in self.entries if e.local_id != entry.local_id]
        if not entry.item_id:
            return
        try:
            if entry.kind == "meal":
                self.api.delete_meal_item(entry.item_id)
            else:
                self.api.delete_workout_item(entry.item_id)
        except ApiError as e:
            logger.error(f"Failed to delete {entry.kind} item {entry.item_id}: {e}")

    def totals(self) -> DayTotals:
        totals = DayTotals(water_liters=round_1dp(self.water_liters), steps=self.steps)
        for entry in self.entries:
            if entry.is_failed:
                totals.failed += 1
                continue
            if entry.kind == "meal":
                totals.calories += entry.calories
                totals.protein += entry.protein
                totals.carbs += entry.carbs
                totals.fat += entry.fat
            else:
                totals.calories_burned += entry.calories
                totals.workout_minutes += entry.payload["duration_minutes"]
        totals.protein = round_1dp(totals.protein)
        totals.carbs = round_1dp(totals.carbs)
        totals.fat = round_1dp(totals.fat)
        return totals
