import logging

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from lifetracker.crud import jsonable, to_object_id
from lifetracker.database import create_document, get_db, transaction, utcnow
from lifetracker.deps import get_current_user
from lifetracker.routers.boards import find_board
from lifetracker.schemas import Task, TaskReorder, TaskUpdate
from lifetracker.stats import day_of

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def task_out(task: dict) -> dict:
    due = task.get("due_date")
    return {
        "id": str(task["_id"]),
        "boardId": task["board_id"],
        "title": task["title"],
        "description": task.get("description") or None,
        "status": task["status"],
        "priority": task["priority"],
        "dueDate": day_of(due).isoformat() if due else None,
        "order": task.get("order", 0),
        "createdAt": jsonable(task["created_at"]),
    }


def find_own_task(db: Database, task_id: str, user: dict) -> dict:
    """Task by id, 404 when missing and 403 when its board belongs to someone else."""
    task = db["task"].find_one({"_id": to_object_id(task_id, "task")})
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    if not db["board"].find_one({"_id": ObjectId(task["board_id"]), "user_id": user["id"]}):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return task


@router.patch("/reorder")
def reorder_tasks(body: TaskReorder, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    object_ids = [ObjectId(i) for i in body.ids]
    if len(set(object_ids)) != len(object_ids):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate task ids")
    tasks = list(db["task"].find({"_id": {"$in": object_ids}}))
    if len(tasks) != len(set(object_ids)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    board_ids = {ObjectId(t["board_id"]) for t in tasks}
    owned = db["board"].count_documents({"_id": {"$in": list(board_ids)}, "user_id": user["id"]})
    if owned != len(board_ids):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    now = utcnow()
    with transaction(db) as session:
        for index, oid in enumerate(object_ids):
            db["task"].update_one({"_id": oid}, {"$set": {"order": index, "updated_at": now}}, session=session)
    logger.info("Tasks reordered: %d tasks", len(object_ids))
    return {"message": "Reordered"}


@router.get("/{board_id}")
def list_tasks(board_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    board = find_board(db, to_object_id(board_id, "board"), user)
    tasks = db["task"].find({"board_id": str(board["_id"])}).sort(
        [("order", ASCENDING), ("created_at", ASCENDING)]
    )
    return {"tasks": [task_out(t) for t in tasks]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(body: Task, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    board = find_board(db, ObjectId(body.board_id), user)
    board_id = str(board["_id"])

    last = db["task"].find_one({"board_id": board_id}, sort=[("order", DESCENDING)])
    order = last["order"] + 1 if last else 0

    task = create_document(db, "task", {
        "board_id": board_id,
        "title": body.title,
        "description": body.description,
        "status": "pending",
        "priority": body.priority,
        "due_date": body.due_date,
        "order": order,
    })
    logger.info("Task created: %s for board %s", body.title, board_id)
    return {"task": task_out(task)}


@router.put("/{task_id}")
def update_task(task_id: str, body: TaskUpdate, user: dict = Depends(get_current_user),
                db: Database = Depends(get_db)):
    task = find_own_task(db, task_id, user)
    updates = body.model_dump(exclude_unset=True)
    if "description" in updates:
        updates["description"] = updates["description"] or ""
    updates["updated_at"] = utcnow()
    db["task"].update_one({"_id": task["_id"]}, {"$set": updates})
    logger.info("Task updated: %s", task_id)
    return {"task": task_out(db["task"].find_one({"_id": task["_id"]}))}


@router.delete("/{task_id}")
def delete_task(task_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    task = find_own_task(db, task_id, user)
    db["task"].delete_one({"_id": task["_id"]})
    logger.info("Task deleted: %s", task_id)
    return {"message": "Task deleted"}
