from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from lifetracker.schemas import Expense, ExpenseUpdate, Task, TaskUpdate, WeightEntryUpdate
from lifetracker.validation import first_error_message, parse_iso_datetime


def test_text_fields_are_trimmed_and_length_checked():
    expense = Expense.model_validate({"amount": 10, "category": " Food ", "description": " lunch "})
    assert expense.category == "Food"
    assert expense.description == "lunch"

    with pytest.raises(ValidationError) as exc:
        Expense.model_validate({"amount": 10, "category": "F", "description": "lunch"})
    assert first_error_message(exc.value.errors()) == "Category must be at least 2 characters"


def test_amount_must_be_positive():
    with pytest.raises(ValidationError) as exc:
        Expense.model_validate({"amount": 0, "category": "Food", "description": "lunch"})
    assert first_error_message(exc.value.errors()) == "Amount must be greater than 0"


def test_enum_values_are_rejected_not_coerced():
    with pytest.raises(ValidationError) as exc:
        Expense.model_validate({"amount": 1, "category": "Food", "description": "lunch", "type": "work"})
    assert first_error_message(exc.value.errors()).startswith("Invalid type")


def test_camel_case_on_the_wire():
    task = Task.model_validate({"boardId": "65a1b2c3d4e5f6a7b8c9d0e1", "title": "Write", "dueDate": "2024-05-01"})
    assert task.board_id == "65a1b2c3d4e5f6a7b8c9d0e1"
    assert task.due_date == datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_partial_update_only_dumps_sent_fields():
    update = ExpenseUpdate.model_validate({"amount": 50})
    assert update.model_dump(exclude_unset=True) == {"amount": 50}


def test_partial_update_keeps_field_contracts():
    with pytest.raises(ValidationError) as exc:
        ExpenseUpdate.model_validate({"amount": -5})
    assert first_error_message(exc.value.errors()) == "Amount must be greater than 0"

    with pytest.raises(ValidationError):
        ExpenseUpdate.model_validate({"amount": None})


def test_partial_update_accepts_null_only_for_nullable_fields():
    assert WeightEntryUpdate.model_validate({"bodyFatPercentage": None}).model_dump(exclude_unset=True) == {
        "body_fat_percentage": None
    }
    assert TaskUpdate.model_validate({"dueDate": None}).model_dump(exclude_unset=True) == {"due_date": None}


def test_parse_iso_datetime():
    assert parse_iso_datetime("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert parse_iso_datetime("2024-01-01T10:00:00+02:00") == datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
    assert parse_iso_datetime(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ValueError, match="Invalid date"):
        parse_iso_datetime("yesterday")


def test_first_error_message_for_missing_field():
    with pytest.raises(ValidationError) as exc:
        Expense.model_validate({"category": "Food", "description": "lunch"})
    assert first_error_message(exc.value.errors()) == "amount is required"
