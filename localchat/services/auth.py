from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from localchat.avatars import user_avatar
from localchat.exceptions import DuplicateUserError, InvalidCredentialsError
from localchat.lc_types import AuthErrorCode, AuthResult, User

if TYPE_CHECKING:
    from localchat.ids import IdGenerator
    from localchat.store import PersistentStore

logger = logging.getLogger(__name__)

RECENT_LOGINS_LIMIT = 3


def placeholder_digest(password: str) -> str:
    """
    32-bit rolling string hash of ``password``.

    Not a password hash. Kept as a stand-in until real authentication exists.
    """
    encoded = password.encode("utf-16-le")
    digest = 0
    for i in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[i : i + 2], "little")
        digest = ((digest << 5) - digest + unit) & 0xFFFFFFFF

    # Signed 32-bit, so stored digests match the ones written by the web client.
    if digest >= 0x80000000:
        digest -= 0x100000000
    return str(digest)


class AuthService:
    def __init__(
        self,
        store: PersistentStore,
        id_generator: IdGenerator,
        recent_logins_limit: int = RECENT_LOGINS_LIMIT,
    ) -> None:
        self.store = store
        self.id_generator = id_generator
        self.recent_logins_limit = recent_logins_limit

    def signup(self, name: str, email: str, phone: str, password: str) -> AuthResult:
        with self.store.transaction():
            state = self.store.load_auth_state()

            if any(user.email == email for user in state.users):
                logger.info("Signup rejected: %s", DuplicateUserError(email))
                return AuthResult(
                    success=False,
                    message="User with this email already exists",
                    error=AuthErrorCode.DUPLICATE_USER,
                )

            user = User(
                id=self.id_generator.next_id(),
                name=name,
                email=email,
                phone=phone,
                password_digest=placeholder_digest(password),
                avatar_url=user_avatar(name),
                created_at=datetime.now(UTC),
                is_online=False,
            )
            state.users.append(user)
            self.store.save_auth_state(state)

        logger.info("User %s signed up as %s", user.id, email)
        return AuthResult(success=True, message="Account created successfully", user=user)

    def login(self, email: str, password: str) -> AuthResult:
        digest = placeholder_digest(password)

        with self.store.transaction():
            state = self.store.load_auth_state()
            user = next(
                (u for u in state.users if u.email == email and u.password_digest == digest),
                None,
            )

            if user is None:
                logger.info("Login rejected: %s", InvalidCredentialsError(email))
                return AuthResult(
                    success=False,
                    message="Invalid email or password",
                    error=AuthErrorCode.INVALID_CREDENTIALS,
                )

            user.is_online = True
            state.current_user = user
            recent = [user_id for user_id in state.recent_logins if user_id != user.id]
            recent.insert(0, user.id)
            state.recent_logins = recent[: self.recent_logins_limit]

            self.store.save_auth_state(state)

        logger.info("User %s logged in", user.id)
        return AuthResult(success=True, message="Login successful", user=user)

    def logout(self) -> None:
        with self.store.transaction():
            state = self.store.load_auth_state()
            if state.current_user is None:
                return

            user_id = state.current_user.id
            for user in state.users:
                if user.id == user_id:
                    user.is_online = False

            state.current_user = None
            self.store.save_auth_state(state)

        logger.info("User %s logged out", user_id)

    def get_current_user(self) -> User | None:
        return self.store.load_auth_state().current_user

    def get_recent_users(self) -> list[User]:
        state = self.store.load_auth_state()
        users = {user.id: user for user in state.users}
        return [users[user_id] for user_id in state.recent_logins if user_id in users]

    def get_all_users(self) -> list[User]:
        return self.store.load_auth_state().users

    def get_user(self, user_id: str) -> User | None:
        return next((u for u in self.get_all_users() if u.id == user_id), None)

    def update_user_status(self, user_id: str, is_online: bool) -> None:
        with self.store.transaction():
            state = self.store.load_auth_state()
            user = next((u for u in state.users if u.id == user_id), None)
            if user is None:
                logger.debug("Status update for unknown user %s ignored", user_id)
                return

            user.is_online = is_online
            if state.current_user is not None and state.current_user.id == user_id:
                state.current_user.is_online = is_online

            self.store.save_auth_state(state)
