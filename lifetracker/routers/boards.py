import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import DESCENDING
from pymongo.database import Database

from lifetracker.crud import jsonable, to_object_id
from lifetracker.database import create_document, get_db, transaction, utcnow
from lifetracker.deps import get_current_user
from lifetracker.schemas import Board

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boards", tags=["boards"])


def board_out(board: dict) -> dict:
    return {
        "id": str(board["_id"]),
        "userId": board["user_id"],
        "name": board["name"],
        "createdAt": jsonable(board["created_at"]),
    }


def find_board(db: Database, board_id, user: dict, session=None) -> dict:
    board = db["board"].find_one({"_id": board_id, "user_id": user["id"]}, session=session)
    if not board:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found")
    return board


@router.get("")
def list_boards(user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    boards = db["board"].find({"user_id": user["id"]}).sort("created_at", DESCENDING)
    return {"boards": [board_out(b) for b in boards]}


@router.get("/{board_id}")
def get_board(board_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    board = find_board(db, to_object_id(board_id, "board"), user)
    return {"board": board_out(board)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_board(body: Board, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    board = create_document(db, "board", {"user_id": user["id"], "name": body.name})
    logger.info("Board created: %s for user %s", body.name, user["username"])
    return {"board": board_out(board)}


@router.put("/{board_id}")
def rename_board(board_id: str, body: Board, user: dict = Depends(get_current_user),
                 db: Database = Depends(get_db)):
    board = find_board(db, to_object_id(board_id, "board"), user)
    db["board"].update_one({"_id": board["_id"]}, {"$set": {"name": body.name, "updated_at": utcnow()}})
    logger.info("Board updated: %s -> %s", board_id, body.name)
    return {"board": board_out(db["board"].find_one({"_id": board["_id"]}))}


@router.delete("/{board_id}")
def delete_board(board_id: str, user: dict = Depends(get_current_user), db: Database = Depends(get_db)):
    board = find_board(db, to_object_id(board_id, "board"), user)
    with transaction(db) as session:
        # Tasks first: an interrupted delete never leaves tasks without a board.
        removed = db["task"].delete_many({"board_id": str(board["_id"])}, session=session)
        db["board"].delete_one({"_id": board["_id"]}, session=session)
    logger.info("Board deleted: %s (%d tasks)", board_id, removed.deleted_count)
    return {"message": "Board deleted"}
