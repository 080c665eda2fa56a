DIET = {"name": "Cut", "targetCalories": 2000, "targetProtein": 150, "targetCarbs": 200, "targetFat": 60}


def entry(day, food, calories, **extra):
    return {"date": day, "foodName": food, "calories": calories, "protein": 10, "carbs": 20, "fat": 5, **extra}


def active_diets(client):
    return [d["name"] for d in client.get("/api/diets").json() if d["isActive"]]


def test_create_diet_defaults(alice):
    diet = alice.post("/api/diets", json=DIET).json()
    assert diet["isActive"] is False
    assert diet["targetFiber"] == 25


def test_diet_targets_must_be_positive(alice):
    resp = alice.post("/api/diets", json={**DIET, "targetCalories": 0})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Target calories must be greater than 0"}


def test_only_one_active_diet_on_create(alice):
    alice.post("/api/diets", json={**DIET, "isActive": True})
    alice.post("/api/diets", json={**DIET, "name": "Bulk", "isActive": True})
    assert active_diets(alice) == ["Bulk"]


def test_only_one_active_diet_on_update(alice):
    cut = alice.post("/api/diets", json={**DIET, "isActive": True}).json()
    bulk = alice.post("/api/diets", json={**DIET, "name": "Bulk"}).json()

    alice.put(f"/api/diets/{bulk['id']}", json={"isActive": True})
    assert active_diets(alice) == ["Bulk"]

    alice.put(f"/api/diets/{cut['id']}", json={"isActive": True})
    assert active_diets(alice) == ["Cut"]


def test_activation_does_not_touch_other_users(alice, bob):
    bob.post("/api/diets", json={**DIET, "name": "Bob diet", "isActive": True})
    alice.post("/api/diets", json={**DIET, "isActive": True})
    assert active_diets(bob) == ["Bob diet"]


def test_entries_filtered_by_day(alice):
    alice.post("/api/diet-entries", json=entry("2024-03-01T08:00:00Z", "Oats", 300, mealType="breakfast"))
    alice.post("/api/diet-entries", json=entry("2024-03-02T12:00:00Z", "Rice", 500))

    day = alice.get("/api/diet-entries?date=2024-03-01").json()
    assert [e["foodName"] for e in day] == ["Oats"]
    assert day[0]["mealType"] == "breakfast"

    assert len(alice.get("/api/diet-entries").json()) == 2
    assert alice.get("/api/diet-entries?date=march").status_code == 400


def test_entry_meal_type_enum(alice):
    resp = alice.post("/api/diet-entries", json=entry("2024-03-01", "Oats", 300, mealType="brunch"))
    assert resp.status_code == 400


def test_entry_delete(alice):
    created = alice.post("/api/diet-entries", json=entry("2024-03-01", "Oats", 300)).json()
    resp = alice.delete(f"/api/diet-entries/{created['id']}")
    assert resp.json() == {"message": "Diet entry deleted successfully", "deletedDietEntry": "Oats"}


def test_daily_summary(alice):
    alice.post("/api/diets", json={**DIET, "isActive": True})
    alice.post("/api/diet-entries", json=entry("2024-03-01T08:00:00Z", "Oats", 300))
    alice.post("/api/diet-entries", json=entry("2024-03-01T13:00:00Z", "Chicken", 450, fiber=2))
    alice.post("/api/diet-entries", json=entry("2024-03-02T08:00:00Z", "Eggs", 200))
    alice.post("/api/exercises", json={
        "date": "2024-03-01", "exerciseName": "Run", "exerciseType": "cardio",
        "duration": 30, "caloriesBurned": 250,
    })

    summary = alice.get("/api/diet-entries/summary?date=2024-03-01").json()
    assert summary["date"] == "2024-03-01"
    assert summary["entries"] == 2
    assert summary["totals"] == {"calories": 750, "protein": 20, "carbs": 40, "fat": 10, "fiber": 2}
    assert summary["targets"]["calories"] == 2000
    assert summary["remaining"]["calories"] == 1250
    assert summary["caloriesBurned"] == 250
    assert summary["netCalories"] == 500
    assert summary["activeDiet"]["name"] == "Cut"


def test_summary_without_active_diet(alice):
    summary = alice.get("/api/diet-entries/summary?date=2024-03-01").json()
    assert summary["targets"] is None
    assert summary["remaining"] is None
    assert summary["totals"]["calories"] == 0
