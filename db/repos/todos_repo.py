from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.todo import Todo


def add_todo(db: Session, *, session_id: str, task: str) -> Todo:
    todo = Todo(session_id=session_id, task=task, completed=False)
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return todo


def list_todos(db: Session, *, session_id: str, limit: int | None = None) -> list[Todo]:
    """Newest first."""
    stmt = (
        select(Todo)
        .where(Todo.session_id == session_id)
        .order_by(Todo.created_at.desc(), Todo.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def set_completed(db: Session, *, session_id: str, todo_id: int, completed: bool) -> Todo | None:
    todo = db.get(Todo, todo_id)
    if todo is None or todo.session_id != session_id:
        return None
    todo.completed = completed
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return todo
