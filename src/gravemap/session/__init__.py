"""Map session state container and session lifecycle."""

from gravemap.session.service import MapSession, MapSessionManager
from gravemap.session.state import MapState, Notice, initial_state, reduce

__all__ = ["MapSession", "MapSessionManager", "MapState", "Notice", "initial_state", "reduce"]
