from event_manager.app.router.v1.auth import router as auth_router
from event_manager.app.router.v1.event import router as event_router
from event_manager.app.router.v1.participant import router as participant_router
from event_manager.app.router.v1.user import router as user_router

__all__ = ["auth_router", "event_router", "participant_router", "user_router"]
