"""
Database Schemas for the life tracker

Each Pydantic model describes one MongoDB collection and doubles as the body of
its create request. The collection name is the snake_cased class name
(e.g., DietEntry -> "diet_entry"). Update bodies are derived with ``partial`` so
every field a create accepts can be patched on its own.

Documents additionally carry ``user_id`` (owner, stringified ObjectId),
``created_at`` and ``updated_at``, set by the server.
"""
from typing import List, Literal, Optional

from pydantic import Field

from lifetracker.database import utcnow
from lifetracker.validation import (
    Amount,
    Schema,
    Trimmed,
    iso_datetime,
    iso_day,
    non_negative,
    object_id,
    partial,
    positive,
    text,
)

Priority = Literal["low", "medium", "high"]
When = iso_datetime("date")


# Auth

class Credentials(Schema):
    username: text("Username", 3)
    password: text("Password", 6)


# Tasks

class Board(Schema):
    name: text("Board name")


class Task(Schema):
    board_id: object_id("board")
    title: text("Title")
    description: Trimmed = ""
    priority: Priority = "medium"
    due_date: Optional[iso_datetime("dueDate")] = None


class TaskUpdate(Schema):
    title: text("Title") = None
    description: Optional[Trimmed] = None
    status: Literal["pending", "completed"] = None
    priority: Priority = None
    due_date: Optional[iso_datetime("dueDate")] = None


class TaskReorder(Schema):
    ids: List[object_id("task")] = Field(..., min_length=1)


# Money

class Expense(Schema):
    amount: Amount
    category: text("Category", 2)
    description: text("Description", 3)
    date: When = Field(default_factory=utcnow)
    type: Literal["personal", "family", "friends"] = "personal"
    is_recoverable: bool = False
    person_name: Trimmed = ""


class Income(Schema):
    amount: Amount
    source: text("Source", 2)
    date: When = Field(default_factory=utcnow)
    type: Literal["salary", "freelance", "investment", "other"] = "salary"
    recurring: bool = False
    recurring_day: Optional[int] = Field(None, ge=1, le=31)


class Lending(Schema):
    amount: Amount
    person_name: text("Person name", 2)
    description: text("Description", 3)
    date: When = Field(default_factory=utcnow)
    expected_return_date: Optional[iso_datetime("expectedReturnDate")] = None


class Borrowing(Lending):
    pass


class Investment(Schema):
    amount: Amount
    type: Literal["mutual_fund", "shares", "courses"]
    description: text("Description", 3)
    date: When = Field(default_factory=utcnow)
    expected_return: Optional[float] = None


ExpenseUpdate = partial(Expense)
IncomeUpdate = partial(Income)
LendingUpdate = partial(Lending, is_returned=bool)
BorrowingUpdate = partial(Borrowing, is_returned=bool)
InvestmentUpdate = partial(Investment, is_active=bool)


# Habits

class Habit(Schema):
    name: text("Habit name", 2)
    description: Trimmed = ""
    category: Trimmed = "General"
    frequency: Literal["daily", "weekly", "monthly"] = "daily"
    target_count: int = Field(1, ge=1)
    color: str = "#3B82F6"
    habit_type: Literal["build", "quit"] = "build"
    quit_date: Optional[iso_datetime("quitDate")] = None


HabitUpdate = partial(Habit, is_active=bool)


class HabitTracker(Schema):
    """One row per (user, habit, day)."""

    habit_id: object_id("habit")
    date: iso_day("date")
    completed: bool = False
    count: int = Field(0, ge=0)
    notes: Trimmed = ""


class HabitBulkDelete(Schema):
    habit_ids: List[object_id("habit")] = Field(..., min_length=1)
    hard_delete: bool = True


class HabitCleanup(Schema):
    habit_ids: List[object_id("habit")] = []
    older_than_days: int = Field(30, ge=0)
    keep_last_days: int = Field(7, ge=0)


class SmokingTracker(Schema):
    """One row per (user, day)."""

    date: iso_day("date")
    smoke_free: bool = Field(..., strict=True)
    cigarettes_smoked: int = Field(0, ge=0, le=100)
    notes: Trimmed = ""


# Diet

class Diet(Schema):
    name: text("Diet name")
    description: Optional[Trimmed] = None
    target_calories: positive("Target calories")
    target_protein: positive("Target protein")
    target_carbs: positive("Target carbs")
    target_fat: positive("Target fat")
    target_fiber: non_negative("Target fiber") = 25
    is_active: bool = False


class DietEntry(Schema):
    date: When
    food_name: text("Food name")
    description: Optional[Trimmed] = None
    calories: non_negative("Calories")
    protein: non_negative("Protein")
    carbs: non_negative("Carbs")
    fat: non_negative("Fat")
    fiber: non_negative("Fiber") = 0
    meal_type: Literal["breakfast", "lunch", "dinner", "snack"] = "snack"
    is_custom_food: bool = False


DietUpdate = partial(Diet)
DietEntryUpdate = partial(DietEntry)


# Health

class Exercise(Schema):
    date: When
    exercise_name: text("Exercise name")
    exercise_type: Literal["cardio", "strength", "flexibility", "sports", "other"]
    duration: positive("Duration")
    calories_burned: non_negative("Calories burned")
    intensity: Priority = "medium"
    notes: Trimmed = ""


class WeightEntry(Schema):
    date: When
    weight: positive("Weight")
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100)
    muscle_mass: Optional[positive("Muscle mass")] = None
    water_percentage: Optional[float] = Field(None, ge=0, le=100)
    notes: Trimmed = ""


ExerciseUpdate = partial(Exercise)
WeightEntryUpdate = partial(WeightEntry)


class WeightLog(Schema):
    weight: positive("Weight")
    height: positive("Height")
    bmi: positive("BMI")


class ExerciseLog(Schema):
    minutes: positive("Minutes", int)
    type: text("Exercise type")
    calories_burned: positive("Calories burned", int)


class MealLog(Schema):
    meal_id: text("Meal ID")
    name: text("Name")
    calories: positive("Calories", int)
    portion: positive("Portion") = 1


class HealthGoal(Schema):
    type: text("Goal type")
    current_value: float
    target_value: float

