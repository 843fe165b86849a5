from sqlalchemy.orm import configure_mappers

from event_manager.app.v1.auth.entity.refresh_token import RefreshToken
from event_manager.app.v1.event.entity.event import Event, event_organizers
from event_manager.app.v1.participant.entity.participant import Participant
from event_manager.app.v1.user.entity.user import User

# call configure_mappers only after every model is imported
configure_mappers()

__all__ = ["Event", "Participant", "RefreshToken", "User", "event_organizers"]
