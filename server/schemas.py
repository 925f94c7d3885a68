from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class StartRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class SellRequest(BaseModel):
    cell_key: str = Field(pattern=r"^-?\d+_-?\d+$", description="Cell key in the form x_y")


class MessageResponse(BaseModel):
    player_id: str
    message: str


class ActionResponse(BaseModel):
    player_id: str
    ok: bool
    message: str
    error: Optional[str] = None
    events: List[Dict[str, Any]] = Field(default_factory=list)


class SellableCellDTO(BaseModel):
    cell_key: str
    x: int
    y: int
    estimated_price: int


class SellableResponse(BaseModel):
    player_id: str
    cells: List[SellableCellDTO]
