__all__ = [
    "normalize",
    "rowwise_cross",
    "rowwise_innerdot",
]

import logging
from typing import Annotated, Literal, overload

import numpy as np
import numpy.typing as npt
from numpy import linalg as LA  # noqa: N812
from typing_extensions import Doc

logger = logging.getLogger(__name__)


def rowwise_innerdot[NumberType: np.number](
    x1: npt.NDArray[NumberType],
    x2: npt.NDArray[NumberType],
    *,
    keepdims: bool = False,
) -> npt.NDArray[NumberType]:
    return np.sum(x1 * x2, axis=-1, keepdims=keepdims)


def rowwise_cross(
    x1: Annotated[npt.NDArray[np.floating], Doc("Vectors of shape (..., 3).")],
    x2: Annotated[npt.NDArray[np.floating], Doc("Vectors of shape (..., 3), broadcastable against x1.")],
) -> Annotated[npt.NDArray[np.floating], Doc("Row-wise cross product x1 x x2.")]:
    return np.cross(x1, x2, axis=-1)


@overload
def normalize[S: npt.NBitBase](
    x: npt.NDArray[np.integer[S]],
    ord: float | Literal["fro", "nuc"] | None = None,
    axis: int | None = None,
) -> npt.NDArray[np.floating[S]]: ...


@overload
def normalize[S: npt.NBitBase](
    x: npt.NDArray[np.floating[S]],
    ord: float | Literal["fro", "nuc"] | None = None,
    axis: int | None = None,
) -> npt.NDArray[np.floating[S]]: ...


def normalize[S: npt.NBitBase](
    x,
    ord=None,  # noqa: A002
    axis=None,
):
    norm = LA.norm(x, ord=ord, axis=axis, keepdims=True)
    return np.where(norm == 0.0, x, x / np.where(norm == 0.0, 1.0, norm))
