# tweenr/ui/placement.py
from __future__ import annotations
from enum import Enum
from typing import Optional, Tuple

from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument

Point = Tuple[float, float]
Size = Tuple[float, float]


class PlacementState(Enum):
    IDLE = "idle"
    PLACING = "placing"


class PlacementDrag:
    """
    Drags a layer's centre across the preview surface.
    Positions are always computed from the press origin so repeated identical
    moves never drift.
    """
    def __init__(self, document: AnimationDocument) -> None:
        self._log = get_logger(__name__)
        self.document = document
        self.state = PlacementState.IDLE
        self.layer_id: Optional[str] = None
        self._origin: Point = (0.0, 0.0)
        self._start_pct: Point = (0.0, 0.0)
        self._surface: Size = (1.0, 1.0)

    @property
    def active(self) -> bool:
        return self.state is PlacementState.PLACING

    def begin(self, layer_id: str, pointer: Point, surface_size: Size) -> bool:
        layer = self.document.find_layer(layer_id)
        if layer is None:
            return False
        self.layer_id = layer_id
        self._origin = (float(pointer[0]), float(pointer[1]))
        self._start_pct = (layer.x, layer.y)
        self._surface = (max(1.0, float(surface_size[0])), max(1.0, float(surface_size[1])))
        self.state = PlacementState.PLACING
        self._log.debug("placing %s from (%.1f, %.1f)%%", layer.label, layer.x, layer.y)
        return True

    def move(self, pointer: Point) -> None:
        if self.state is not PlacementState.PLACING or self.layer_id is None:
            return
        dx = (float(pointer[0]) - self._origin[0]) / self._surface[0] * 100.0
        dy = (float(pointer[1]) - self._origin[1]) / self._surface[1] * 100.0
        self.document.set_layer_position(self.layer_id, self._start_pct[0] + dx, self._start_pct[1] + dy)

    def end(self) -> None:
        self.state = PlacementState.IDLE
        self.layer_id = None
