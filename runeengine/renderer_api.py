"""Rendering backend selection, the renderer API interface and its OpenGL form."""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Sequence

from runeengine.log import core_logger


class API(IntEnum):
    NONE = 0
    OPENGL = 1


_api = API.OPENGL


def get_api() -> API:
    """The rendering backend currently selected."""
    return _api


def set_api(api: API) -> None:
    """Select the rendering backend used by the factory functions."""
    global _api
    _api = API(api)


class _PygletGL:
    """OpenGL calls made through pyglet's bindings, with Python-friendly signatures."""

    def __init__(self) -> None:
        from pyglet import gl
        from pyglet.gl import gl_info
        from pyglet.graphics.shader import Shader as GLShader
        from pyglet.graphics.shader import ShaderException

        self._gl = gl
        self._gl_info = gl_info
        self._shader_class = GLShader
        self._shader_error = ShaderException
        self._stage_names = {
            int(gl.GL_VERTEX_SHADER): "vertex",
            int(gl.GL_FRAGMENT_SHADER): "fragment",
        }
        self._shader_keys = itertools.count(1)
        self._pending_stages: dict[int, str] = {}
        self._compiled: dict[int, Any] = {}

    # state and drawing
    def enable_blending(self) -> None:
        gl = self._gl
        gl.glEnable(gl.GL_BLEND)
        gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)

    def clear_color(self, r: float, g: float, b: float, a: float) -> None:
        self._gl.glClearColor(r, g, b, a)

    def clear(self) -> None:
        gl = self._gl
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)

    def draw_triangles(self, count: int) -> None:
        gl = self._gl
        gl.glDrawElements(gl.GL_TRIANGLES, count, gl.GL_UNSIGNED_INT, None)

    def unbind_texture_2d(self) -> None:
        gl = self._gl
        gl.glBindTexture(gl.GL_TEXTURE_2D, 0)

    def info(self) -> dict[str, str]:
        info = self._gl_info
        version = info.get_version()
        if isinstance(version, tuple):
            version = ".".join(str(part) for part in version)
        return {
            "vendor": str(info.get_vendor()),
            "renderer": str(info.get_renderer()),
            "version": str(version),
        }

    # buffers
    def create_buffer(self) -> int:
        handle = self._gl.GLuint(0)
        self._gl.glGenBuffers(1, handle)
        return int(handle.value)

    def bind_buffer(self, target: int, buffer_id: int) -> None:
        self._gl.glBindBuffer(target, buffer_id)

    def buffer_data(self, target: int, data: bytes) -> None:
        gl = self._gl
        gl.glBufferData(target, len(data), bytes(data), gl.GL_STATIC_DRAW)

    def delete_buffer(self, buffer_id: int) -> None:
        self._gl.glDeleteBuffers(1, self._gl.GLuint(buffer_id))

    # vertex arrays
    def create_vertex_array(self) -> int:
        handle = self._gl.GLuint(0)
        self._gl.glGenVertexArrays(1, handle)
        return int(handle.value)

    def bind_vertex_array(self, array_id: int) -> None:
        self._gl.glBindVertexArray(array_id)

    def delete_vertex_array(self, array_id: int) -> None:
        self._gl.glDeleteVertexArrays(1, self._gl.GLuint(array_id))

    def enable_vertex_attrib(
        self, index: int, size: int, base_type: int, normalized: bool, stride: int, offset: int
    ) -> None:
        gl = self._gl
        gl.glEnableVertexAttribArray(index)
        gl.glVertexAttribPointer(
            index,
            size,
            base_type,
            gl.GL_TRUE if normalized else gl.GL_FALSE,
            stride,
            offset or None,
        )

    # shaders
    def create_program(self) -> int:
        return int(self._gl.glCreateProgram())

    def create_shader(self, stage: int) -> int:
        try:
            stage_name = self._stage_names[int(stage)]
        except KeyError:
            raise ValueError(f"unsupported shader stage {stage}") from None
        key = next(self._shader_keys)
        self._pending_stages[key] = stage_name
        return key

    def compile_shader(self, shader: int, source: str) -> tuple[bool, str]:
        stage_name = self._pending_stages[shader]
        try:
            compiled = self._shader_class(source, stage_name)
        except self._shader_error as exc:
            return False, str(exc)
        self._compiled[shader] = compiled
        return True, ""

    def _shader_id(self, shader: int) -> int:
        return int(self._compiled[shader].id)

    def attach_shader(self, program: int, shader: int) -> None:
        self._gl.glAttachShader(program, self._shader_id(shader))

    def detach_shader(self, program: int, shader: int) -> None:
        self._gl.glDetachShader(program, self._shader_id(shader))

    def delete_shader(self, shader: int) -> None:
        self._pending_stages.pop(shader, None)
        compiled = self._compiled.pop(shader, None)
        if compiled is not None:
            compiled.delete()

    def _program_log(self, program: int) -> str:
        gl = self._gl
        size = gl.GLint(0)
        gl.glGetProgramiv(program, gl.GL_INFO_LOG_LENGTH, size)
        buffer = (gl.GLchar * max(size.value, 1))()
        gl.glGetProgramInfoLog(program, size.value, None, buffer)
        return buffer.value.decode("utf-8", "replace")

    def link_program(self, program: int) -> tuple[bool, str]:
        gl = self._gl
        gl.glLinkProgram(program)
        status = gl.GLint(0)
        gl.glGetProgramiv(program, gl.GL_LINK_STATUS, status)
        if status.value:
            return True, ""
        return False, self._program_log(program)

    def delete_program(self, program: int) -> None:
        self._gl.glDeleteProgram(program)

    def use_program(self, program: int) -> None:
        self._gl.glUseProgram(program)

    def uniform_location(self, program: int, name: str) -> int:
        encoded = name.encode("utf-8")
        buffer = (self._gl.GLchar * (len(encoded) + 1))()
        buffer.value = encoded
        return int(self._gl.glGetUniformLocation(program, buffer))

    def uniform_int(self, location: int, value: int) -> None:
        self._gl.glUniform1i(location, value)

    def uniform_float(self, location: int, *values: float) -> None:
        gl = self._gl
        setters = {1: gl.glUniform1f, 2: gl.glUniform2f, 3: gl.glUniform3f, 4: gl.glUniform4f}
        setters[len(values)](location, *values)

    def uniform_matrix(self, location: int, size: int, values: Sequence[float]) -> None:
        gl = self._gl
        array = (gl.GLfloat * len(values))(*values)
        setter = gl.glUniformMatrix3fv if size == 3 else gl.glUniformMatrix4fv
        setter(location, 1, gl.GL_FALSE, array)


_shared_gl: _PygletGL | None = None


def _opengl(gl: Any = None) -> Any:
    """Return ``gl`` if given, else the shared pyglet-backed OpenGL interface."""
    global _shared_gl
    if gl is not None:
        return gl
    if _shared_gl is None:
        _shared_gl = _PygletGL()
    return _shared_gl


class RendererAPI(ABC):
    """Low-level drawing commands of one rendering backend."""

    @abstractmethod
    def init(self) -> None:
        """Set up global render state."""

    @abstractmethod
    def clear(self) -> None:
        """Clear the colour and depth buffers."""

    @abstractmethod
    def set_clear_colour(self, colour: Sequence[float]) -> None:
        """Set the RGBA colour used by ``clear``."""

    @abstractmethod
    def draw_indexed(self, vertex_array: Any) -> None:
        """Draw the triangles described by the vertex array's index buffer."""


class OpenGLRendererAPI(RendererAPI):
    """Drawing commands issued to OpenGL."""

    def __init__(self, gl: Any = None) -> None:
        self._gl = gl

    @property
    def _backend(self) -> Any:
        return _opengl(self._gl)

    def init(self) -> None:
        self._backend.enable_blending()

    def set_clear_colour(self, colour: Sequence[float]) -> None:
        values = tuple(float(c) for c in colour)
        if len(values) != 4:
            raise ValueError(f"clear colour needs 4 components, got {len(values)}")
        self._backend.clear_color(*values)

    def clear(self) -> None:
        self._backend.clear()

    def draw_indexed(self, vertex_array: Any) -> None:
        index_buffer = vertex_array.index_buffer
        if index_buffer is None:
            raise ValueError("vertex array has no index buffer")
        backend = self._backend
        backend.draw_triangles(index_buffer.count)
        backend.unbind_texture_2d()


class GraphicsContext(ABC):
    """A drawing surface bound to a window."""

    @abstractmethod
    def init(self) -> None:
        """Make the context current and ready for drawing."""

    @abstractmethod
    def swap_buffers(self) -> None:
        """Present the frame that was drawn."""


class OpenGLContext(GraphicsContext):
    """OpenGL context of a window that offers ``switch_to`` and ``flip``."""

    def __init__(self, window_handle: Any, gl: Any = None) -> None:
        if window_handle is None:
            raise ValueError("Window handle is null!")
        self._window = window_handle
        self._gl = gl
        self.gl_info: dict[str, str] = {}

    def init(self) -> None:
        self._window.switch_to()
        self.gl_info = dict(_opengl(self._gl).info())
        log = core_logger()
        log.info("OpenGL Info:")
        log.info("  Vendor: %s", self.gl_info.get("vendor", ""))
        log.info("  Renderer: %s", self.gl_info.get("renderer", ""))
        log.info("  Version: %s", self.gl_info.get("version", ""))

    def swap_buffers(self) -> None:
        self._window.flip()