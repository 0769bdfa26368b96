import pytest

from leqet.client.day_log import DayLog, EntryStatus
from leqet.client.session import ApiError
from leqet.services.nutrition import Food

INJERA = Food(id="3", name="Injera", calories=166, protein=6, carbs=33, fat=1)


class FakeApi:
    def __init__(self):
        self.fail_next = 0
        self.fail_deletes = False
        self.calls = []
        self.next_item_id = 100

    def _answer(self, name, *args):
        self.calls.append((name, args))
        if self.fail_next:
            self.fail_next -= 1
            raise ApiError(500, "Failed to log")
        self.next_item_id += 1
        return {"item_id": self.next_item_id}

    def log_meal(self, member_id, meal_type, item):
        return self._answer("log_meal", member_id, meal_type, item)

    def log_workout(self, member_id, **payload):
        return self._answer("log_workout", member_id, payload)

    def delete_meal_item(self, item_id):
        self.calls.append(("delete_meal_item", (item_id,)))
        if self.fail_deletes:
            raise ApiError(500, "boom")

    def delete_workout_item(self, item_id):
        self.calls.append(("delete_workout_item", (item_id,)))


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def day(api):
    return DayLog(api, member_id=7)


def test_meal_entry_is_confirmed_with_server_id(day, api):
    entry = day.add_meal("lunch", INJERA, 150)
    assert entry.status == EntryStatus.CONFIRMED
    assert entry.item_id == 101
    assert (entry.calories, entry.protein, entry.carbs, entry.fat) == (249, 9.0, 49.5, 1.5)
    _, (member_id, meal_type, item) = api.calls[0]
    assert member_id == 7 and meal_type == "lunch"
    assert item["food_item_id"] == 3 and item["quantity"] == 150


def test_failed_entries_stay_visible_but_are_not_counted(day, api):
    day.add_meal("breakfast", INJERA, 100)
    api.fail_next = 1
    failed = day.add_meal("lunch", INJERA, 200)

    assert failed.status == EntryStatus.FAILED
    assert failed.error == "Failed to log"
    assert day.failed_entries == [failed]
    assert len(day.entries) == 2
    totals = day.totals()
    assert totals.calories == 166
    assert totals.failed == 1


def test_retry_and_discard_failed(day, api):
    api.fail_next = 2
    first = day.add_meal("lunch", INJERA, 100)
    second = day.add_workout("Running", 10, 30, "high")
    assert first.is_failed and second.is_failed

    day.retry_failed()
    assert first.status == EntryStatus.CONFIRMED
    assert second.status == EntryStatus.CONFIRMED

    api.fail_next = 1
    day.add_meal("dinner", INJERA, 50)
    assert day.discard_failed() == 1
    assert all(not e.is_failed for e in day.entries)


def test_workout_totals_use_intensity(day):
    day.add_workout("Running", 10, 30, "high")
    day.add_workout("Walking", 5, 20, "low")
    totals = day.totals()
    assert totals.calories_burned == 390 + 80
    assert totals.workout_minutes == 50


def test_water_and_steps_must_be_positive(day):
    with pytest.raises(ValueError):
        day.add_water(0)
    with pytest.raises(ValueError):
        day.add_steps(-5)
    day.add_water(0.5)
    day.add_water(0.25)
    day.add_steps(4000)
    totals = day.totals()
    assert totals.water_liters == 0.8
    assert totals.steps == 4000


def test_delete_removes_locally_and_swallows_server_errors(day, api):
    entry = day.add_meal("lunch", INJERA, 100)
    api.fail_deletes = True
    day.delete(entry)
    assert day.entries == []
    assert ("delete_meal_item", (entry.item_id,)) in api.calls


def test_delete_of_unsaved_entry_skips_server(day, api):
    api.fail_next = 1
    entry = day.add_meal("lunch", INJERA, 100)
    day.delete(entry)
    assert not any(name.startswith("delete") for name, _ in api.calls)


def test_late_confirmation_after_close_is_ignored(api):
    day = DayLog(api, member_id=7)
    original = api.log_meal

    def close_then_answer(*args):
        day.close()
        return original(*args)

    api.log_meal = close_then_answer
    entry = day.add_meal("lunch", INJERA, 100)
    assert entry.status == EntryStatus.PENDING
    assert entry.item_id is None


@pytest.mark.parametrize("amount, times, expected", [
    (0.25, 4, 1.0),
    (0.04, 5, 0.2),
    (0.3, 3, 0.9),
])
def test_water_total_is_rounded_only_for_display(day, amount, times, expected):
    for _ in range(times):
        shown = day.add_water(amount)
    assert shown == expected
    assert day.totals().water_liters == expected
