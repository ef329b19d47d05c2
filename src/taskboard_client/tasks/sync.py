# src/taskboard_client/tasks/sync.py

from __future__ import annotations

"""
Collection synchronizer.

Pull-based: the task list and the user list are re-fetched wholesale
whenever a session starts and after every successful mutation.
A failed fetch never replaces the current collection.

Each fetch remembers the session generation it started under. If the session
was reset meanwhile (logout, expiry, or logout followed by a new login), the
outcome belongs to a session that no longer exists and is dropped, errors
and 401s included.
"""

import asyncio
import logging

from ..api.errors import TaskboardApiError, UnauthorizedError
from ..core.ports import ExpireHook, TaskboardApiPort
from ..core.state import AppState

logger = logging.getLogger(__name__)


class CollectionSynchronizer:
    def __init__(self, state: AppState, api: TaskboardApiPort, *, on_unauthorized: ExpireHook) -> None:
        self._state = state
        self._api = api
        self._on_unauthorized = on_unauthorized

    def _is_stale(self, generation: int) -> bool:
        return self._state.identity is None or self._state.session_generation != generation

    async def refresh_all(self) -> None:
        """Both fetches are independent; run them side by side."""
        await asyncio.gather(self.refresh_tasks(), self.refresh_users())

    async def refresh_tasks(self) -> bool:
        generation = self._state.session_generation
        self._state.tasks_loading = True
        try:
            tasks = await self._api.list_tasks()
        except UnauthorizedError:
            if self._is_stale(generation):
                logger.debug("Ignoring 401 from a task fetch of an earlier session.")
                return False
            self._on_unauthorized()
            return False
        except TaskboardApiError as e:
            logger.warning("Task list fetch failed: %s", e.message)
            if not self._is_stale(generation):
                self._state.error = e.message
            return False
        except Exception as e:
            logger.warning("Task list fetch failed: %s", e)
            logger.debug("Task list fetch traceback", exc_info=True)
            if not self._is_stale(generation):
                self._state.error = "Failed to load tasks."
            return False
        finally:
            self._state.tasks_loading = False

        if self._is_stale(generation):
            logger.debug("Dropping task list that arrived after session reset.")
            return False

        self._state.tasks = tasks
        self._state.error = None
        logger.debug("Loaded %d tasks", len(tasks))
        return True

    async def refresh_users(self) -> bool:
        generation = self._state.session_generation
        self._state.users_loading = True
        try:
            users = await self._api.list_users()
        except UnauthorizedError:
            if self._is_stale(generation):
                logger.debug("Ignoring 401 from a user fetch of an earlier session.")
                return False
            self._on_unauthorized()
            return False
        except TaskboardApiError as e:
            logger.warning("User list fetch failed: %s", e.message)
            if not self._is_stale(generation):
                self._state.error = e.message
            return False
        except Exception as e:
            logger.warning("User list fetch failed: %s", e)
            logger.debug("User list fetch traceback", exc_info=True)
            if not self._is_stale(generation):
                self._state.error = "Failed to load users."
            return False
        finally:
            self._state.users_loading = False

        if self._is_stale(generation):
            logger.debug("Dropping user list that arrived after session reset.")
            return False

        self._state.users = users
        self._state.error = None
        logger.debug("Loaded %d users", len(users))
        return True
