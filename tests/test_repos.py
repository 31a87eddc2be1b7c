from __future__ import annotations

from db.repos.beta_repo import create_beta_application
from db.repos.memory_repo import delete_memory, get_or_create_memory, save_memory
from db.repos.messages_repo import clear_messages, list_messages, log_message
from db.repos.todos_repo import add_todo, list_todos, set_completed


def test_todos_newest_first_and_scoped_to_session(db):
    add_todo(db, session_id="a", task="buy milk")
    second = add_todo(db, session_id="a", task="stake SEI")
    add_todo(db, session_id="b", task="other session")

    todos = list_todos(db, session_id="a")
    assert [t.task for t in todos] == ["stake SEI", "buy milk"]
    assert list_todos(db, session_id="a", limit=1)[0].id == second.id


def test_set_completed_checks_session(db):
    todo = add_todo(db, session_id="a", task="check balance")
    assert set_completed(db, session_id="b", todo_id=todo.id, completed=True) is None

    done = set_completed(db, session_id="a", todo_id=todo.id, completed=True)
    assert done.completed is True
    assert set_completed(db, session_id="a", todo_id=9999, completed=True) is None


def test_memory_defaults_and_updates(db):
    memory = get_or_create_memory(db, session_id="m1")
    assert memory.total_interactions == 0
    assert memory.preferences["risk_tolerance"] == "moderate"
    assert memory.watchlist == []

    save_memory(
        db,
        memory,
        user_name="Ada",
        watchlist=[{"address": "0xabc", "securityScore": 95}],
        bump_interactions=True,
    )
    again = get_or_create_memory(db, session_id="m1")
    assert again.user_name == "Ada"
    assert again.total_interactions == 1
    assert again.watchlist[0]["securityScore"] == 95


def test_delete_memory(db):
    get_or_create_memory(db, session_id="m2")
    assert delete_memory(db, session_id="m2") is True
    assert delete_memory(db, session_id="m2") is False


def test_messages_oldest_first_with_limit(db):
    for i in range(3):
        log_message(db, session_id="c1", role="user", message=f"msg {i}")
    log_message(db, session_id="c2", role="user", message="elsewhere")

    assert [m.message for m in list_messages(db, session_id="c1")] == ["msg 0", "msg 1", "msg 2"]
    assert [m.message for m in list_messages(db, session_id="c1", limit=2)] == ["msg 1", "msg 2"]

    assert clear_messages(db, session_id="c1") == 3
    assert list_messages(db, session_id="c1") == []
    assert len(list_messages(db, session_id="c2")) == 1


def test_beta_application_is_stored(db):
    row = create_beta_application(
        db,
        x_username="seifan",
        email="fan@example.com",
        top_protocol="DragonSwap",
        followed_seifu=True,
        followed_miles=False,
    )
    assert row.id is not None
    assert row.created_at is not None
