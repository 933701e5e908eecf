from __future__ import annotations

from urbassist.planning_engine.construction_types import ConstructionType
from urbassist.planning_engine.geometry import InsufficientInputError

__all__ = ["ConstructionType", "InsufficientInputError"]
