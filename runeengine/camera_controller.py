"""Keyboard-driven camera movement and zoom/resize handling."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from runeengine.camera import Camera, CameraType
from runeengine.events import Event, EventDispatcher, MouseScrolledEvent, WindowResizeEvent
from runeengine.input import Key, is_key_pressed
from runeengine.instrumentor import profile_function

# (key, acts on rotation, axis, direction); the first pressed key wins.
_BINDINGS = (
    (Key.A, False, 0, -1.0),
    (Key.D, False, 0, 1.0),
    (Key.SPACE, False, 1, 1.0),
    (Key.LEFT_CONTROL, False, 1, -1.0),
    (Key.W, False, 2, -1.0),
    (Key.S, False, 2, 1.0),
    (Key.UP, True, 0, 1.0),
    (Key.DOWN, True, 0, -1.0),
    (Key.LEFT, True, 1, 1.0),
    (Key.RIGHT, True, 1, -1.0),
)


class CameraController:
    """Moves and rotates a camera from polled keys and reacts to scroll and resize."""

    def __init__(
        self,
        aspect_ratio: float = 16.0 / 9.0,
        camera_type: CameraType = CameraType.PERSPECTIVE,
        position: ArrayLike = (0.0, 0.0, 2.0),
    ) -> None:
        self.aspect_ratio = aspect_ratio
        self.zoom_level = 1.0
        self.camera = Camera(camera_type, position)
        self._position = np.array([0.0, 0.0, 2.0])
        self._rotation = np.zeros(3)
        self.exposure = 1.0
        self.gamma = 2.0
        self.camera_speed = 5.0
        self.camera_rotation_speed = 90.0

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation.copy()

    @profile_function
    def on_update(self, timestep) -> None:
        """Apply the movement of the first bound key held, then update the camera."""
        dt = float(timestep)
        for key, rotates, axis, sign in _BINDINGS:
            if is_key_pressed(key):
                if rotates:
                    self._rotation[axis] += sign * self.camera_rotation_speed * dt
                else:
                    self._position[axis] += sign * self.camera_speed * dt
                break
        self.camera.rotation = self._rotation
        self.camera.position = self._position

    def on_event(self, event: Event) -> None:
        dispatcher = EventDispatcher(event)
        dispatcher.dispatch(MouseScrolledEvent, self._on_mouse_scrolled)
        dispatcher.dispatch(WindowResizeEvent, self._on_window_resized)

    def _refresh_projection(self) -> None:
        camera = self.camera
        camera.set_projection(camera.fov, camera.aspect_ratio, camera.near_plane, camera.far_plane)

    def _on_mouse_scrolled(self, event: MouseScrolledEvent) -> bool:
        self.zoom_level = -3.0 * event.y_offset
        self.camera.zoom(self.zoom_level)
        self._refresh_projection()
        return False

    def _on_window_resized(self, event: WindowResizeEvent) -> bool:
        if event.height == 0:
            return False
        self.aspect_ratio = event.width / event.height
        self.camera.aspect_ratio = self.aspect_ratio
        self._refresh_projection()
        return False