"""Scene submission and the render command front end."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike

from runeengine.instrumentor import profile_function
from runeengine.renderer_api import API, OpenGLRendererAPI, RendererAPI, get_api


class RenderCommand:
    """Forwards drawing commands to one renderer API."""

    def __init__(self, api: RendererAPI | None = None) -> None:
        self.renderer_api = api if api is not None else OpenGLRendererAPI()

    def init(self) -> None:
        self.renderer_api.init()

    def set_clear_color(self, color: Sequence[float]) -> None:
        self.renderer_api.set_clear_colour(color)

    def clear(self) -> None:
        self.renderer_api.clear()

    def draw_indexed(self, vertex_array: Any) -> None:
        self.renderer_api.draw_indexed(vertex_array)


class Renderer:
    """Draws vertex arrays with shaders under the current scene's camera."""

    def __init__(self, command: RenderCommand | None = None) -> None:
        self.command = command if command is not None else RenderCommand()
        self._view_projection = np.identity(4)
        self.initialized = False
        self.scene_active = False

    @property
    def api(self) -> API:
        return get_api()

    @property
    def view_projection(self) -> np.ndarray:
        """View-projection matrix of the scene begun last."""
        return self._view_projection.copy()

    @profile_function
    def init(self) -> None:
        self.command.init()
        self.initialized = True

    @profile_function
    def shutdown(self) -> None:
        """Mark the renderer as shut down and drop any open scene."""
        self.initialized = False
        self.scene_active = False

    def begin_scene(self, camera: Any) -> None:
        """Take the camera's view-projection matrix for the following submissions."""
        self._view_projection = np.array(camera.view_projection_matrix, dtype=float)
        self.scene_active = True

    @profile_function
    def end_scene(self) -> None:
        """Finish the current scene."""
        self.scene_active = False

    @profile_function
    def submit(self, vertex_array: Any, shader: Any, transform: ArrayLike | None = None) -> None:
        """Draw ``vertex_array`` with ``shader`` placed by ``transform`` (identity by default)."""
        matrix = np.identity(4) if transform is None else np.asarray(transform, dtype=float)
        shader.bind()
        shader.upload_uniform_mat4("u_ViewProjection", self._view_projection)
        shader.upload_uniform_mat4("u_TransformMatrix", matrix)
        vertex_array.bind()
        self.command.draw_indexed(vertex_array)