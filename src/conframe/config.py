"""Numerical configuration shared by frames and volumes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping

from conframe.cga import epsilon

__all__ = ['FrameConfig', 'DEFAULT_CONFIG']


@dataclass(frozen=True)
class FrameConfig:
    """Sign conventions and tolerance used when deriving surfaces.

    ``sign`` scales every tangent contracted against a surface when
    deriving orthogonal surfaces (+1 or -1).  ``flip`` negates the
    stepping axis of each adjacent corner frame.  ``tolerance`` is the
    near-zero threshold for flatness, coincidence and clamping tests.
    """

    sign: int = 1
    flip: bool = False
    tolerance: float = epsilon

    def __post_init__(self) -> None:
        if self.sign not in (1, -1):
            raise ValueError('sign must be +1 or -1')
        if not self.tolerance > 0.0:
            raise ValueError('tolerance must be positive')

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'FrameConfig':
        """Build a configuration from plain data, rejecting unknown keys."""

        unknown = set(data) - {'sign', 'flip', 'tolerance'}
        if unknown:
            raise ValueError(f"unknown configuration keys: {sorted(unknown)}")
        base = cls()
        return replace(
            base,
            sign=int(data.get('sign', base.sign)),
            flip=bool(data.get('flip', base.flip)),
            tolerance=float(data.get('tolerance', base.tolerance)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'sign': self.sign, 'flip': self.flip, 'tolerance': self.tolerance}


DEFAULT_CONFIG = FrameConfig()
