from .session_cleanup import (
    SessionCleanupTask,
    register_session_cleanup,
    run_session_cleanup,
)

__all__ = ["SessionCleanupTask", "register_session_cleanup", "run_session_cleanup"]
