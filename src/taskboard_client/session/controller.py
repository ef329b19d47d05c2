# src/taskboard_client/session/controller.py

from __future__ import annotations

import logging

from ..api.errors import SESSION_EXPIRED_MESSAGE, TaskboardApiError, UnauthorizedError
from ..core.models import AuthMode, Identity
from ..core.ports import SessionHook, TaskboardApiPort
from ..core.state import AppState
from ..workflow.validation import ValidationError, validate_login, validate_register

logger = logging.getLogger(__name__)


class SessionController:
    """
    Owns the current identity.

    Every other component depends on it:
    - when an identity appears, `on_session_started` is awaited (collection refresh);
    - any 401 anywhere ends up in `expire()`, the single session-expiry path.
    """

    def __init__(
            self,
            state: AppState,
            api: TaskboardApiPort,
            *,
            on_session_started: SessionHook | None = None,
    ) -> None:
        self._state = state
        self._api = api
        self._on_session_started = on_session_started

    async def _set_identity(self, identity: Identity) -> None:
        was_absent = self._state.identity is None
        self._state.identity = identity
        self._state.auth_error = None
        self._state.auth_local_error = None
        logger.info("Session active for user id=%s", identity.id)
        if was_absent and self._on_session_started is not None:
            await self._on_session_started()

    async def check_session(self) -> None:
        """Ask the server who we are (run once at startup)."""
        self._state.session_loading = True
        try:
            identity = await self._api.me()
        except UnauthorizedError:
            logger.debug("No active session.")
            self.reset_session()
            return
        except TaskboardApiError as e:
            logger.error("Session check failed: %s", e.message)
            self.reset_session()
            return
        except Exception as e:
            logger.warning("Failed to load current user: %s", e)
            logger.debug("Session check traceback", exc_info=True)
            return
        finally:
            self._state.session_loading = False

        await self._set_identity(identity)

    async def login(self, email: str, password: str) -> bool:
        if self._state.auth_submitting or self._state.session_loading:
            logger.debug("login ignored: another auth call is in progress")
            return False

        self._state.auth_error = None
        self._state.auth_local_error = None
        try:
            data = validate_login(email, password)
        except ValidationError as e:
            self._state.auth_local_error = e.message
            return False

        self._state.auth_submitting = True
        try:
            identity = await self._api.login(data.email, data.password)
        except TaskboardApiError as e:
            logger.info("Login rejected: %s", e.message)
            self._state.auth_error = e.message
            return False
        except Exception as e:
            logger.warning("Login request failed: %s", e)
            logger.debug("Login traceback", exc_info=True)
            self._state.auth_error = "Unable to log in."
            return False
        finally:
            self._state.auth_submitting = False

        self._state.auth_mode = AuthMode.LOGIN
        await self._set_identity(identity)
        return True

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> bool:
        if self._state.auth_submitting or self._state.session_loading:
            logger.debug("register ignored: another auth call is in progress")
            return False

        self._state.auth_error = None
        self._state.auth_local_error = None
        try:
            data = validate_register(name, email, password, confirm_password)
        except ValidationError as e:
            self._state.auth_local_error = e.message
            return False

        self._state.auth_submitting = True
        try:
            identity = await self._api.register(
                data.name, data.email, data.password, data.confirm_password
            )
        except TaskboardApiError as e:
            logger.info("Registration rejected: %s", e.message)
            self._state.auth_error = e.message
            return False
        except Exception as e:
            logger.warning("Registration request failed: %s", e)
            logger.debug("Registration traceback", exc_info=True)
            self._state.auth_error = "Unable to create account."
            return False
        finally:
            self._state.auth_submitting = False

        self._state.auth_mode = AuthMode.LOGIN
        await self._set_identity(identity)
        return True

    async def logout(self) -> None:
        """Best-effort server logout, then always a local reset."""
        try:
            await self._api.logout()
        except Exception as e:
            logger.warning("Error logging out: %s", e)
            logger.debug("Logout traceback", exc_info=True)
        finally:
            self.reset_session()

    def reset_session(self, message: str | None = None) -> None:
        self._state.clear_session(message)

    def expire(self) -> None:
        logger.info("Session expired; resetting client state.")
        self.reset_session(SESSION_EXPIRED_MESSAGE)

    def set_auth_mode(self, mode: AuthMode) -> None:
        self.clear_auth_error()
        self._state.auth_mode = AuthMode(mode)

    def clear_auth_error(self) -> None:
        """Any input on the auth screen hides the previous error."""
        self._state.auth_error = None
        self._state.auth_local_error = None
