from app.schemas.panel import PanelCreate, PanelUpdate, PanelResponse, PanelComplete
from app.schemas.breaker import BreakerCreate, BreakerUpdate, BreakerResponse
from app.schemas.room import RoomCreate, RoomUpdate, RoomResponse
from app.schemas.circuit import CircuitCreate, CircuitUpdate, CircuitResponse
from app.schemas.move import MoveRequest, MoveResponse, MovePreview

__all__ = [
    "PanelCreate",
    "PanelUpdate",
    "PanelResponse",
    "PanelComplete",
    "BreakerCreate",
    "BreakerUpdate",
    "BreakerResponse",
    "RoomCreate",
    "RoomUpdate",
    "RoomResponse",
    "CircuitCreate",
    "CircuitUpdate",
    "CircuitResponse",
    "MoveRequest",
    "MoveResponse",
    "MovePreview",
]
