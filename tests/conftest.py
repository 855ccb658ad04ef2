"""Shared test domain: users, a user repository and the USER ADDED event."""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional

import pytest
from pydantic import BaseModel

from dddam import Event, EventProcessor, Mediator, StaticTransactionHandler, UseCase


@dataclass
class User:
    username: str
    hashed_password: str
    age: Optional[int] = None
    status: Optional[str] = None


class UserRepo:
    def __init__(self):
        self.users: List[User] = []

    def add(self, user: User) -> None:
        if self.get(user.username):
            raise ValueError("user already exists")
        self.users.append(user)

    def get(self, username: str) -> Optional[User]:
        return next((u for u in self.users if u.username == username), None)

    def remove(self, user: User) -> None:
        self.users = [u for u in self.users if u is not user]


@dataclass
class Dependencies:
    user_repo: UserRepo = field(default_factory=UserRepo)


@dataclass
class EventDeps:
    added_users: int = 0
    log: List[str] = field(default_factory=list)


@dataclass
class UserAdded(Event):
    event_name: ClassVar[str] = "USER ADDED"
    username: str


class CreateUserParams(BaseModel):
    username: str
    password: Optional[str] = None
    age: Optional[int] = None
    status: Optional[str] = None


class DeleteUserParams(BaseModel):
    username: str


async def create_user(params, deps: Dependencies, use_case_name, emit):
    deps.user_repo.add(
        User(
            params["username"],
            "x",
            params.get("age"),
            params.get("status"),
        )
    )
    emit([UserAdded(params["username"])])
    return params["username"]


async def delete_user(params, deps: Dependencies, use_case_name, emit):
    user = deps.user_repo.get(params["username"])
    if user:
        deps.user_repo.remove(user)
    return user is not None


async def count_users(event: UserAdded, deps: EventDeps):
    deps.added_users += 1


def log_event(event: UserAdded, deps: EventDeps):
    deps.log.append(f"{event.event_name}:{event.username}")


@pytest.fixture
def create_user_use_case():
    return UseCase("create user", CreateUserParams, create_user)


@pytest.fixture
def delete_user_use_case():
    return UseCase("delete user", DeleteUserParams, delete_user)


@pytest.fixture
def deps():
    return Dependencies()


@pytest.fixture
def event_deps():
    return EventDeps()


@pytest.fixture
def mediator(create_user_use_case, delete_user_use_case, deps, event_deps):
    return Mediator(
        StaticTransactionHandler(deps, event_deps),
        [create_user_use_case, delete_user_use_case],
        [
            EventProcessor("USER ADDED", count_users),
            EventProcessor("USER ADDED", log_event),
        ],
    )
