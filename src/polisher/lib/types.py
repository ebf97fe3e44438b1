"""Stable domain identifier newtypes."""

from typing import NewType

StepName = NewType("StepName", str)
Coordinate = NewType("Coordinate", str)
