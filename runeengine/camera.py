"""Camera with view and projection matrices, and the matrix helpers it uses.

Matrices are 4x4 numpy arrays acting on column vectors (``M @ v``).
"""

from __future__ import annotations

import math
from enum import IntEnum

import numpy as np
from numpy.typing import ArrayLike

ORTHO_SIZE = 10.0


def _normalize(vector: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return vector / np.linalg.norm(vector)


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection with clip depth -1..1; ``fovy`` in radians."""
    f = 1.0 / math.tan(fovy / 2.0)
    m = np.zeros((4, 4))
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = -(far + near) / (far - near)
    m[2, 3] = -(2.0 * far * near) / (far - near)
    m[3, 2] = -1.0
    return m


def ortho(left: float, right: float, bottom: float, top: float, near: float, far: float) -> np.ndarray:
    """Right-handed orthographic projection with clip depth -1..1."""
    m = np.identity(4)
    m[0, 0] = 2.0 / (right - left)
    m[1, 1] = 2.0 / (top - bottom)
    m[2, 2] = -2.0 / (far - near)
    m[0, 3] = -(right + left) / (right - left)
    m[1, 3] = -(top + bottom) / (top - bottom)
    m[2, 3] = -(far + near) / (far - near)
    return m


def look_at(eye: ArrayLike, center: ArrayLike, up: ArrayLike) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    eye = np.asarray(eye, dtype=float)
    f = _normalize(np.asarray(center, dtype=float) - eye)
    s = _normalize(np.cross(f, np.asarray(up, dtype=float)))
    u = np.cross(s, f)
    m = np.identity(4)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye)
    m[1, 3] = -np.dot(u, eye)
    m[2, 3] = np.dot(f, eye)
    return m


def rotate(matrix: ArrayLike, angle: float, axis: ArrayLike) -> np.ndarray:
    """Return ``matrix`` multiplied by a rotation of ``angle`` radians about ``axis``."""
    x, y, z = _normalize(np.asarray(axis, dtype=float))
    c, s = math.cos(angle), math.sin(angle)
    t = 1.0 - c
    r = np.array(
        [
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y, 0.0],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x, 0.0],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )
    return np.asarray(matrix, dtype=float) @ r


def translate(matrix: ArrayLike, offset: ArrayLike) -> np.ndarray:
    """Return ``matrix`` multiplied by a translation by ``offset``."""
    t = np.identity(4)
    t[:3, 3] = np.asarray(offset, dtype=float)
    return np.asarray(matrix, dtype=float) @ t


def scale(matrix: ArrayLike, factors: ArrayLike) -> np.ndarray:
    """Return ``matrix`` multiplied by a scale by ``factors`` (scalar or per axis)."""
    s = np.identity(4)
    s[:3, :3] *= np.broadcast_to(np.asarray(factors, dtype=float), (3,))
    return np.asarray(matrix, dtype=float) @ s


class CameraType(IntEnum):
    ORTHOLINEAR = 0
    PERSPECTIVE = 1


class Camera:
    """A camera placed at a position with Euler rotation in degrees (applied Z·Y·X)."""

    def __init__(
        self,
        camera_type: CameraType = CameraType.PERSPECTIVE,
        position: ArrayLike = (0.0, 0.0, 2.0),
    ) -> None:
        self._type = CameraType(camera_type)
        self._near_plane = 0.001
        self._far_plane = 400.0
        self._aspect_ratio = 16.0 / 9.0
        self._fov = 90.0

        self._position = np.array(position, dtype=float)
        self._direction = _normalize(self._position - np.zeros(3))
        world_up = np.array([0.0, 1.0, 0.0])
        self._right = _normalize(np.cross(world_up, self._direction))
        self._up = _normalize(np.cross(self._direction, self._right))
        self._rotation = np.zeros(3)

        self._view = look_at(self._position, self._position + self._direction, self._up)
        self._projection = self._build_projection(
            self._fov, self._aspect_ratio, self._near_plane, self._far_plane
        )
        self._rotation_matrix = np.identity(4)
        self._view_projection = self._projection @ self._view
        self._recalculate_view_matrix()

    def _build_projection(self, fov: float, aspect: float, near: float, far: float) -> np.ndarray:
        if self._type is CameraType.ORTHOLINEAR:
            return ortho(-ORTHO_SIZE * aspect, ORTHO_SIZE * aspect, -ORTHO_SIZE, ORTHO_SIZE, near, far)
        return perspective(math.radians(fov), aspect, near, far)

    def _recalculate_view_matrix(self) -> None:
        identity = np.identity(4)
        rx = rotate(identity, math.radians(self._rotation[0]), (1.0, 0.0, 0.0))
        ry = rotate(identity, math.radians(self._rotation[1]), (0.0, 1.0, 0.0))
        rz = rotate(identity, math.radians(self._rotation[2]), (0.0, 0.0, 1.0))
        rotation_matrix = rz @ ry @ rx
        transform = translate(identity, self._position) @ rotation_matrix
        self._rotation_matrix = rotation_matrix
        self._view = np.linalg.inv(transform)
        self._view_projection = self._projection @ self._view

    def set_projection(self, fov: float, aspect_ratio: float, near_plane: float, far_plane: float) -> None:
        """Rebuild the projection for this camera's type and store its parameters."""
        self._projection = self._build_projection(fov, aspect_ratio, near_plane, far_plane)
        self._fov = fov
        self._aspect_ratio = aspect_ratio
        self._near_plane = near_plane
        self._far_plane = far_plane
        self._view_projection = self._projection @ self._view

    def zoom(self, amount: float) -> None:
        """Add ``amount`` degrees to the field of view; the projection is not rebuilt."""
        self._fov += amount
        self._recalculate_view_matrix()

    @property
    def camera_type(self) -> CameraType:
        return self._type

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @position.setter
    def position(self, value: ArrayLike) -> None:
        self._position = np.array(value, dtype=float)
        self._recalculate_view_matrix()

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation.copy()

    @rotation.setter
    def rotation(self, value: ArrayLike) -> None:
        self._rotation = np.array(value, dtype=float)
        self._recalculate_view_matrix()

    @property
    def aspect_ratio(self) -> float:
        return self._aspect_ratio

    @aspect_ratio.setter
    def aspect_ratio(self, value: float) -> None:
        self._aspect_ratio = value
        self._recalculate_view_matrix()

    @property
    def direction(self) -> np.ndarray:
        return self._direction.copy()

    @property
    def up(self) -> np.ndarray:
        return self._up.copy()

    @property
    def right(self) -> np.ndarray:
        return self._right.copy()

    @property
    def projection_matrix(self) -> np.ndarray:
        return self._projection.copy()

    @property
    def view_matrix(self) -> np.ndarray:
        return self._view.copy()

    @property
    def view_projection_matrix(self) -> np.ndarray:
        return self._view_projection.copy()

    @property
    def rotation_matrix(self) -> np.ndarray:
        return self._rotation_matrix.copy()

    @property
    def near_plane(self) -> float:
        return self._near_plane

    @property
    def far_plane(self) -> float:
        return self._far_plane

    @property
    def fov(self) -> float:
        return self._fov