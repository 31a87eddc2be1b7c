from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.schemas.todos import TodoCreateRequest, TodoRead, TodoUpdateRequest
from db.deps import get_db
from db.repos.todos_repo import add_todo, list_todos, set_completed

router = APIRouter(prefix="/todos", tags=["todos"])


@router.get("/{session_id}", response_model=list[TodoRead])
def get_todos(
    session_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[TodoRead]:
    return [TodoRead.model_validate(t) for t in list_todos(db, session_id=session_id, limit=limit)]


@router.post("/{session_id}", response_model=TodoRead, status_code=201)
def create_todo(session_id: str, req: TodoCreateRequest, db: Session = Depends(get_db)) -> TodoRead:
    task = req.task.strip()
    if not task:
        raise HTTPException(status_code=422, detail="task must not be blank")
    return TodoRead.model_validate(add_todo(db, session_id=session_id, task=task))


@router.patch("/{session_id}/{todo_id}", response_model=TodoRead)
def update_todo(
    session_id: str,
    todo_id: int,
    req: TodoUpdateRequest,
    db: Session = Depends(get_db),
) -> TodoRead:
    todo = set_completed(db, session_id=session_id, todo_id=todo_id, completed=req.completed)
    if todo is None:
        raise HTTPException(status_code=404, detail="todo not found")
    return TodoRead.model_validate(todo)
