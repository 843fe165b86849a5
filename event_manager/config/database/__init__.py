from event_manager.config.database.postgresql import Base, BigIntId, SessionLocal, engine

__all__ = ["Base", "BigIntId", "SessionLocal", "engine"]
