import pytest

EXPENSE = {"amount": 120.5, "category": "Food", "description": "Groceries", "date": "2024-03-10"}


@pytest.fixture
def expense(alice):
    resp = alice.post("/api/expenses", json=EXPENSE)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_expense_defaults(expense, alice):
    assert expense["amount"] == 120.5
    assert expense["type"] == "personal"
    assert expense["isRecoverable"] is False
    assert expense["userId"] == alice.user_id
    assert expense["date"].startswith("2024-03-10T00:00:00")
    assert "createdAt" in expense


def test_expense_validation(alice):
    resp = alice.post("/api/expenses", json={**EXPENSE, "amount": 0})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Amount must be greater than 0"}

    resp = alice.post("/api/expenses", json={**EXPENSE, "description": "ab"})
    assert resp.json() == {"detail": "Description must be at least 3 characters"}

    resp = alice.post("/api/expenses", json={**EXPENSE, "date": "10/03/2024"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid date"}


def test_partial_update_leaves_other_fields(expense, alice):
    resp = alice.put(f"/api/expenses/{expense['id']}", json={"amount": 50})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["amount"] == 50
    assert updated["description"] == expense["description"]
    assert updated["category"] == expense["category"]
    assert updated["date"] == expense["date"]


def test_update_rejects_null_for_required_field(expense, alice):
    resp = alice.put(f"/api/expenses/{expense['id']}", json={"amount": None})
    assert resp.status_code == 400


def test_list_sorted_by_date_desc(alice, expense):
    alice.post("/api/expenses", json={**EXPENSE, "description": "Later one", "date": "2024-04-01"})
    listed = alice.get("/api/expenses").json()
    assert [e["description"] for e in listed] == ["Later one", "Groceries"]


def test_expense_ownership(expense, bob, alice):
    assert bob.get("/api/expenses").json() == []
    assert bob.get(f"/api/expenses/{expense['id']}").status_code == 404
    assert bob.put(f"/api/expenses/{expense['id']}", json={"amount": 1}).status_code == 404
    assert bob.delete(f"/api/expenses/{expense['id']}").status_code == 404
    assert alice.get(f"/api/expenses/{expense['id']}").json()["amount"] == 120.5


def test_delete_expense(expense, alice):
    resp = alice.delete(f"/api/expenses/{expense['id']}")
    assert resp.json() == {"message": "Expense deleted successfully", "deletedExpense": "Groceries"}
    assert alice.get(f"/api/expenses/{expense['id']}").status_code == 404


def test_invalid_id_is_bad_request(alice):
    resp = alice.get("/api/incomes/123")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid income id"}


def test_income_recurring_day_only_while_recurring(alice):
    income = alice.post("/api/incomes", json={
        "amount": 3000, "source": "Acme", "recurring": True, "recurringDay": 25,
    }).json()
    assert income["recurringDay"] == 25
    assert income["type"] == "salary"

    stopped = alice.put(f"/api/incomes/{income['id']}", json={"recurring": False}).json()
    assert stopped["recurringDay"] is None

    one_off = alice.post("/api/incomes", json={"amount": 50, "source": "Gift", "recurringDay": 3}).json()
    assert one_off["recurringDay"] is None

    resp = alice.post("/api/incomes", json={"amount": 50, "source": "Gift", "recurring": True, "recurringDay": 32})
    assert resp.status_code == 400


def test_lending_returned_transition(alice):
    lending = alice.post("/api/lendings", json={
        "amount": 40, "personName": "Sam", "description": "Concert ticket",
    }).json()
    assert lending["isReturned"] is False
    assert lending["returnedDate"] is None

    returned = alice.put(f"/api/lendings/{lending['id']}", json={"isReturned": True}).json()
    assert returned["isReturned"] is True
    assert returned["returnedDate"] is not None

    again = alice.put(f"/api/lendings/{lending['id']}", json={"isReturned": True}).json()
    assert again["returnedDate"] == returned["returnedDate"]

    reopened = alice.put(f"/api/lendings/{lending['id']}", json={"isReturned": False}).json()
    assert reopened["isReturned"] is False
    assert reopened["returnedDate"] is None


def test_borrowing_person_name_min_length(alice):
    resp = alice.post("/api/borrowings", json={"amount": 10, "personName": "S", "description": "Taxi fare"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Person name must be at least 2 characters"}


def test_investment_requires_type(alice):
    resp = alice.post("/api/investments", json={"amount": 100, "description": "Index fund"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "type is required"}

    created = alice.post("/api/investments", json={
        "amount": 100, "type": "mutual_fund", "description": "Index fund",
    }).json()
    assert created["isActive"] is True


def test_finance_summary(alice, bob):
    alice.post("/api/incomes", json={"amount": 1000, "source": "Salary"})
    alice.post("/api/expenses", json={**EXPENSE, "amount": 200})
    lent = alice.post("/api/lendings", json={"amount": 50, "personName": "Sam", "description": "Dinner bill"}).json()
    alice.post("/api/lendings", json={"amount": 30, "personName": "Kim", "description": "Cinema"})
    alice.put(f"/api/lendings/{lent['id']}", json={"isReturned": True})
    alice.post("/api/borrowings", json={"amount": 70, "personName": "Lee", "description": "Train fare"})
    alice.post("/api/investments", json={"amount": 100, "type": "shares", "description": "Tech stock"})
    bob.post("/api/incomes", json={"amount": 999, "source": "Other job"})

    summary = alice.get("/api/finance/summary").json()
    assert summary == {
        "totalIncome": 1000,
        "totalExpenses": 200,
        "totalLent": 30,
        "totalBorrowed": 70,
        "totalInvested": 100,
        "netWorth": 1000 - 200 - 30 + 70 - 100,
    }
