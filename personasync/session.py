"""
User Session Module

Owns the username -> profile mapping and the "current user" pointer over a
KeyValueStore. Each UserSession is an explicit context object; nothing here
is module-level state, so independent sessions over independent stores
never collide.

Example Usage:
    from personasync.session import UserSession
    from personasync.models.profile import NewUserProfile
    from personasync.utils.kv_store import JsonFileStore

    session = UserSession(JsonFileStore("data/session_store.json"))
    session.create_user(NewUserProfile(
        first_name="Alice", last_name="Ng", username="alice",
        email="alice@example.com", age=30, gender="female",
    ))

    result = session.complete_survey("big-five", xp_amount=50)
    # CompletionResult(success=True, already_completed=False, xp_earned=50)

    session.complete_survey("big-five", xp_amount=50)
    # CompletionResult(success=True, already_completed=True, xp_earned=0)
"""

import json
import threading
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from personasync.models.config import AppSettings, build_store
from personasync.models.profile import CompletionResult, NewUserProfile, UserProfile
from personasync.utils.kv_store import KeyValueStore
from personasync.utils.logger import get_logger

CURRENT_USER_KEY = "currentUser"
USER_PREFIX = "personasync_user_"


class ProfileDecodeError(ValueError):
    """Raised when a stored profile record cannot be deserialised."""


class UserSession:
    """Profile records plus a single active-user pointer."""

    def __init__(
        self,
        store: KeyValueStore,
        current_user_key: str = CURRENT_USER_KEY,
        user_prefix: str = USER_PREFIX,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize UserSession.

        Args:
            store: Persistent key-value store holding pointer and records
            current_user_key: Key for the active-username pointer
            user_prefix: Prefix prepended to usernames to form record keys
            correlation_id: Correlation ID for logging (auto-generated if None)
        """
        self.store = store
        self.current_user_key = current_user_key
        self.user_prefix = user_prefix
        self._lock = threading.RLock()
        self.logger = get_logger(correlation_id=correlation_id, component="user_session")

    @classmethod
    def from_settings(
        cls, settings: AppSettings, correlation_id: Optional[str] = None
    ) -> "UserSession":
        """Build a session over the store selected by ``settings.storage``."""
        return cls(
            build_store(settings),
            current_user_key=settings.storage.current_user_key,
            user_prefix=settings.storage.user_prefix,
            correlation_id=correlation_id,
        )

    def _user_key(self, username: str) -> str:
        return f"{self.user_prefix}{username}"

    def _load(self, username: str) -> tuple[Optional[UserProfile], bool]:
        """Read a record. Returns (profile, needs_xp_migration)."""
        raw = self.store.get_item(self._user_key(username))
        if raw is None:
            return None, False

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            needs_migration = data.get("xp") is None
            if needs_migration:
                data = {**data, "xp": 0}
            profile = UserProfile.model_validate(data)
        except (json.JSONDecodeError, ValidationError, ValueError) as e:
            self.logger.error("malformed_profile_record", username=username, error=str(e))
            raise ProfileDecodeError(
                f"Malformed profile record for {username!r}: {e}"
            ) from e

        return profile, needs_migration

    def _save(self, profile: UserProfile) -> None:
        self.store.set_item(self._user_key(profile.username), profile.to_record())
        self.logger.debug("profile_saved", username=profile.username, xp=profile.xp)

    def set_current_user(self, username: str) -> None:
        """Mark ``username`` as active. The profile is not required to exist."""
        self.store.set_item(self.current_user_key, username)
        self.logger.info("current_user_set", username=username)

    def get_current_username(self) -> Optional[str]:
        return self.store.get_item(self.current_user_key)

    def get_current_user(self) -> Optional[UserProfile]:
        """
        Return the active user's profile.

        Returns:
            UserProfile, or None when nobody is logged in or the record is missing

        Raises:
            ProfileDecodeError: If the stored record is malformed

        Note:
            Records written before XP tracking have no ``xp`` key (or a null
            one). They are returned with xp=0 and rewritten so the store holds
            the default. Other stored keys, including ones this model does not
            declare, are written back unchanged.
        """
        with self._lock:
            username = self.get_current_username()
            if not username:
                return None

            profile, needs_migration = self._load(username)
            if profile is None:
                return None

            if needs_migration:
                self.logger.info("legacy_profile_migrated", username=username)
                self._save(profile)
            return profile

    def create_user(self, new_profile: NewUserProfile, overwrite: bool = False) -> bool:
        """
        Create a profile and make it the active user.

        Args:
            new_profile: Caller-supplied fields
            overwrite: Replace an existing record with the same username

        Returns:
            True on success, False if the username is taken and overwrite is False

        Note:
            xp starts at 0, completed_surveys empty, created_at now, and
            profile_visibility is always "public" whatever the input says.
        """
        with self._lock:
            username = new_profile.username
            if not overwrite and self.store.get_item(self._user_key(username)) is not None:
                self.logger.warning("username_already_exists", username=username)
                return False

            fields = new_profile.model_dump(
                exclude={"profile_visibility", "xp", "created_at", "completed_surveys"}
            )
            profile = UserProfile(
                **fields,
                profile_visibility="public",
                created_at=datetime.now(timezone.utc),
            )

            self._save(profile)
            self.set_current_user(username)
            self.logger.info("user_created", username=username, overwrite=overwrite)
            return True

    def add_xp(self, amount: int) -> bool:
        """Add ``amount`` XP to the active user. Negative amounts are rejected."""
        if amount < 0:
            self.logger.warning("negative_xp_rejected", operation="add_xp", amount=amount)
            return False

        with self._lock:
            profile = self.get_current_user()
            if profile is None:
                self.logger.warning("no_active_user", operation="add_xp")
                return False

            profile.xp = profile.xp + amount
            self._save(profile)
            self.logger.info("xp_added", username=profile.username, amount=amount, xp=profile.xp)
            return True

    def set_xp(self, amount: int) -> bool:
        """Overwrite the active user's XP. Negative values are rejected."""
        if amount < 0:
            self.logger.warning("negative_xp_rejected", operation="set_xp", amount=amount)
            return False

        with self._lock:
            profile = self.get_current_user()
            if profile is None:
                self.logger.warning("no_active_user", operation="set_xp")
                return False

            profile.xp = amount
            self._save(profile)
            self.logger.info("xp_set", username=profile.username, xp=amount)
            return True

    def complete_survey(self, survey_id: str, xp_amount: int) -> CompletionResult:
        """
        Record a survey completion, awarding XP at most once per survey.

        Args:
            survey_id: Survey identifier
            xp_amount: XP awarded on first completion (must be >= 0)

        Returns:
            CompletionResult:
                - success=False when there is no active user or xp_amount < 0
                - already_completed=True, xp_earned=0 on repeats (no write)
                - already_completed=False, xp_earned=xp_amount otherwise
        """
        if xp_amount < 0:
            self.logger.warning(
                "negative_xp_rejected", operation="complete_survey", amount=xp_amount
            )
            return CompletionResult(success=False)

        with self._lock:
            profile = self.get_current_user()
            if profile is None:
                self.logger.warning("no_active_user", operation="complete_survey")
                return CompletionResult(success=False)

            if survey_id in profile.completed_surveys:
                self.logger.info(
                    "survey_already_completed",
                    username=profile.username,
                    survey_id=survey_id,
                )
                return CompletionResult(success=True, already_completed=True, xp_earned=0)

            profile.completed_surveys = [*profile.completed_surveys, survey_id]
            profile.xp = profile.xp + xp_amount
            self._save(profile)

            self.logger.info(
                "survey_completed",
                username=profile.username,
                survey_id=survey_id,
                xp_earned=xp_amount,
                xp=profile.xp,
            )
            return CompletionResult(success=True, already_completed=False, xp_earned=xp_amount)

    def has_survey_completed(self, survey_id: str) -> bool:
        profile = self.get_current_user()
        if profile is None:
            return False
        return survey_id in profile.completed_surveys

    def logout(self) -> None:
        """Clear the active-user pointer. Profile records are kept."""
        username = self.get_current_username()
        self.store.remove_item(self.current_user_key)
        self.logger.info("logged_out", username=username)

    def is_logged_in(self) -> bool:
        # Pointer only; the matching record is not checked.
        return self.get_current_username() is not None

    def get_user_by_username(self, username: str) -> Optional[UserProfile]:
        """Look up a profile directly, ignoring the active-user pointer."""
        profile, _ = self._load(username)
        return profile

    def list_usernames(self) -> list[str]:
        """Usernames that have a stored profile, sorted."""
        return sorted(
            key[len(self.user_prefix):]
            for key in self.store.keys()
            if key.startswith(self.user_prefix)
        )
