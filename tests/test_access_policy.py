from datetime import date

import pytest

from app.core.exceptions import AuthorizationError
from app.models.task import Task, TaskPriority, TaskStatus
from app.models.user import User, UserRole
from app.schemas.task import TaskFilters
from app.schemas.user import Actor
from app.services import access_policy
from app.services.task_service import TaskService


def make_user(db, name, role=UserRole.USER, team=None):
    user = User(
        username=name,
        email=f"{name}@example.com",
        hashed_password="not-used",
        role=role,
        team=team,
    )
    db.add(user)
    db.commit()
    return user


def make_task(db, title, creator, assignee=None, **fields):
    task = Task(
        title=title,
        created_by=creator.id,
        assigned_to=assignee.id if assignee else None,
        **fields,
    )
    db.add(task)
    db.commit()
    return task


def actor_for(user):
    return Actor(id=user.id, role=user.role, team=user.team)


def titles(db, user, **filters):
    tasks = TaskService(db).list_tasks(TaskFilters(**filters), actor_for(user))
    return {task.title for task in tasks}


@pytest.fixture
def world(db):
    alice = make_user(db, "alice", team="eng")
    bob = make_user(db, "bob", team="eng")
    carol = make_user(db, "carol", team="sales")
    manager = make_user(db, "meg", role=UserRole.MANAGER, team="eng")
    admin = make_user(db, "root", role=UserRole.ADMIN)

    make_task(db, "alice-own", alice)
    make_task(db, "carol-to-alice", carol, alice)
    make_task(db, "carol-own", carol)
    make_task(db, "carol-to-bob", carol, bob)
    make_task(db, "meg-own", manager)
    make_task(db, "carol-to-meg", carol, manager)
    return {"alice": alice, "bob": bob, "carol": carol, "manager": manager, "admin": admin}


def test_user_sees_only_created_or_assigned(db, world):
    assert titles(db, world["alice"]) == {"alice-own", "carol-to-alice"}
    assert titles(db, world["bob"]) == {"carol-to-bob"}


def test_manager_sees_team_assignments(db, world):
    assert titles(db, world["manager"]) == {
        "meg-own",
        "carol-to-meg",
        "carol-to-alice",
        "carol-to-bob",
    }


def test_manager_without_team_sees_only_own(db, world):
    loner = make_user(db, "lonely", role=UserRole.MANAGER)
    make_task(db, "lonely-own", loner)
    assert titles(db, loner) == {"lonely-own"}


def test_manager_team_does_not_match_creators(db, world):
    # alice-own is created by a team member but not assigned to anyone
    assert "alice-own" not in titles(db, world["manager"])


def test_admin_sees_everything(db, world):
    assert len(titles(db, world["admin"])) == 6
    assert access_policy.visibility_clause(db, actor_for(world["admin"])) is None


def test_filters_apply_after_scope(db, world):
    make_task(db, "alice-done", world["alice"], status=TaskStatus.DONE, priority=TaskPriority.HIGH)
    make_task(db, "carol-done", world["carol"], status=TaskStatus.DONE)

    assert titles(db, world["alice"], status=TaskStatus.DONE) == {"alice-done"}
    assert titles(db, world["admin"], status=TaskStatus.DONE) == {"alice-done", "carol-done"}
    assert titles(db, world["admin"], priority=TaskPriority.HIGH) == {"alice-done"}


def test_search_matches_title_or_description_case_insensitively(db, world):
    make_task(db, "Write REPORT", world["alice"])
    make_task(db, "misc", world["alice"], description="includes the quarterly report")

    assert titles(db, world["alice"], search="report") == {"Write REPORT", "misc"}


def test_search_treats_wildcards_literally(db, world):
    make_task(db, "100% done", world["alice"])
    make_task(db, "snake_case", world["alice"])

    assert titles(db, world["alice"], search="%") == {"100% done"}
    assert titles(db, world["alice"], search="_") == {"snake_case"}
    assert titles(db, world["alice"], search=".*") == set()


def test_due_date_range_is_inclusive(db, world):
    alice = world["alice"]
    make_task(db, "jan", alice, due_date=date(2025, 1, 1))
    make_task(db, "feb", alice, due_date=date(2025, 2, 1))
    make_task(db, "mar", alice, due_date=date(2025, 3, 1))

    assert titles(db, alice, due_date_from=date(2025, 2, 1)) == {"feb", "mar"}
    assert titles(db, alice, due_date_to=date(2025, 2, 1)) == {"jan", "feb"}
    assert titles(
        db, alice, due_date_from=date(2025, 1, 1), due_date_to=date(2025, 2, 1)
    ) == {"jan", "feb"}


def test_view_rules(db, world):
    task = make_task(db, "t", world["carol"], world["alice"])

    assert access_policy.can_view(actor_for(world["carol"]), task)
    assert access_policy.can_view(actor_for(world["alice"]), task)
    assert not access_policy.can_view(actor_for(world["bob"]), task)
    assert access_policy.can_view(actor_for(world["admin"]), task)
    assert access_policy.can_view(actor_for(world["manager"]), task)

    with pytest.raises(AuthorizationError):
        access_policy.authorize_view(actor_for(world["bob"]), task)


def test_modify_rules(db, world):
    task = make_task(db, "t", world["carol"], world["alice"])

    assert access_policy.can_modify(actor_for(world["carol"]), task)
    # assignees may read but not modify
    assert not access_policy.can_modify(actor_for(world["alice"]), task)
    assert access_policy.can_modify(actor_for(world["admin"]), task)
    assert access_policy.can_modify(actor_for(world["manager"]), task)

    with pytest.raises(AuthorizationError):
        access_policy.authorize_modify(actor_for(world["alice"]), task)


def test_escape_like():
    assert access_policy.escape_like("a%b_c\\d") == "a\\%b\\_c\\\\d"


def test_search_folds_unicode_case(db, world):
    make_task(db, "ÉTÉ plan", world["alice"])
    make_task(db, "Übersicht", world["alice"], description="naïve approach")

    assert titles(db, world["alice"], search="été") == {"ÉTÉ plan"}
    assert titles(db, world["alice"], search="übersicht") == {"Übersicht"}
    assert titles(db, world["alice"], search="NAÏVE") == {"Übersicht"}
