"""
User accounts.

Usernames and emails are unique. Passwords are stored as bcrypt hashes and
the plain text never leaves this module.
"""
from typing import List, Optional

from app.core.clock import Clock, SystemClock
from app.core.exceptions import Conflict, NotFound, Unauthorized, ValidationError
from app.core.logging_config import get_logger
from app.core.security import get_password_hash, verify_password
from app.db.store import EntityStore, UnitOfWork
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.services.common import changes, require

logger = get_logger("users")

USERS = User.__collection__


def _check_unique(uow: UnitOfWork, username: Optional[str], email: Optional[str],
                  exclude_id: Optional[int] = None) -> None:
    for user in uow.all(User):
        if user.id == exclude_id:
            continue
        if username is not None and user.username == username:
            raise Conflict(f"Username '{username}' is already taken")
        if email is not None and user.email.lower() == email.lower():
            raise Conflict(f"Email '{email}' is already registered")


class UserService:
    def __init__(self, store: EntityStore, clock: Optional[Clock] = None):
        self.store = store
        self.clock = clock or SystemClock()

    def list(self) -> List[User]:
        with self.store.snapshot(USERS) as uow:
            return uow.all(User)

    def find(self, user_id: int) -> Optional[User]:
        with self.store.snapshot(USERS) as uow:
            return uow.get(User, user_id)

    def get(self, user_id: int) -> User:
        user = self.find(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    def create(self, data: UserCreate) -> User:
        with self.store.transaction(USERS) as uow:
            _check_unique(uow, data.username, data.email)
            now = self.clock.isoformat()
            user = User(
                username=data.username,
                email=data.email,
                password=get_password_hash(data.password),
                full_name=data.full_name,
                role=data.role,
                created_at=now,
                updated_at=now,
            )
            uow.add(user)
        logger.info("user_created", extra={"user_id": user.id, "role": user.role.value})
        return user

    def update(self, user_id: int, data: UserUpdate) -> User:
        with self.store.transaction(USERS) as uow:
            user = require(uow, User, user_id, "User")
            updates = changes(data, nullable=("full_name",))
            _check_unique(uow, updates.get("username"), updates.get("email"), exclude_id=user_id)
            if "password" in updates:
                updates["password"] = get_password_hash(updates["password"])
            for key, value in updates.items():
                setattr(user, key, value)
            user.updated_at = self.clock.isoformat()
            uow.put(user)
        logger.info("user_updated", extra={"user_id": user_id, "fields": sorted(k for k in updates if k != "password")})
        return user

    def delete(self, user_id: int, actor_id: Optional[int] = None) -> User:
        if actor_id is not None and user_id == actor_id:
            raise ValidationError("You cannot delete your own account")
        with self.store.transaction(USERS) as uow:
            user = require(uow, User, user_id, "User")
            uow.remove(User, user_id)
        logger.info("user_deleted", extra={"user_id": user_id})
        return user

    def authenticate(self, username: str, password: str) -> User:
        """
        Check credentials and stamp last_login.

        Raises Unauthorized for unknown users, wrong passwords and inactive
        accounts alike, so the response never reveals which one it was.
        """
        with self.store.transaction(USERS) as uow:
            user = next((u for u in uow.all(User) if u.username == username), None)
            if user is None or not user.is_active or not verify_password(password, user.password):
                logger.warning("login_failed", extra={"username": username})
                raise Unauthorized("Invalid credentials")
            user.last_login = self.clock.isoformat()
            uow.put(user)
        logger.info("login_succeeded", extra={"user_id": user.id})
        return user
