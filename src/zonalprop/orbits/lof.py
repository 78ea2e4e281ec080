from __future__ import annotations

__all__ = ["LOFType"]

from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from zonalprop.utils.vector import normalize, rowwise_cross

if TYPE_CHECKING:
    import numpy.typing as npt

    from .orbit import PVCoordinates


class LOFType(Enum):
    """Local orbital frames built from the position/velocity of a spacecraft.

    * TNW: X along velocity, Z along orbital momentum.
    * QSW: X along position, Z along orbital momentum (also known as RSW or RTN).
    * LVLH: X along position, Z along orbital momentum (same axes as QSW).
    * VNC: X along velocity, Y along orbital momentum.
    """

    TNW = "tnw"
    QSW = "qsw"
    LVLH = "lvlh"
    VNC = "vnc"

    def rotation_from_inertial(self, pv: PVCoordinates) -> npt.NDArray[np.floating]:
        """Return the matrix whose rows are the local axes expressed in the inertial frame.

        `rotation @ v_inertial` gives local components, `rotation.T @ v_local` gives inertial ones.
        """
        momentum = normalize(rowwise_cross(pv.position, pv.velocity), axis=-1)
        match self:
            case LOFType.TNW:
                x = normalize(pv.velocity, axis=-1)
                z = momentum
                y = rowwise_cross(z, x)
            case LOFType.QSW | LOFType.LVLH:
                x = normalize(pv.position, axis=-1)
                z = momentum
                y = rowwise_cross(z, x)
            case LOFType.VNC:
                x = normalize(pv.velocity, axis=-1)
                y = momentum
                z = rowwise_cross(x, y)
        return np.stack([x, y, z], axis=-2)
