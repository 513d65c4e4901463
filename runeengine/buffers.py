"""Vertex buffers, index buffers and vertex arrays."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from runeengine.buffer_layout import BufferLayout, ShaderDataType
from runeengine.renderer_api import API, _opengl, get_api

GL_INT = 0x1404
GL_FLOAT = 0x1406
GL_BOOL = 0x8B56
GL_ARRAY_BUFFER = 0x8892
GL_ELEMENT_ARRAY_BUFFER = 0x8893

_BASE_TYPES = {
    ShaderDataType.FLOAT: GL_FLOAT,
    ShaderDataType.FLOAT2: GL_FLOAT,
    ShaderDataType.FLOAT3: GL_FLOAT,
    ShaderDataType.FLOAT4: GL_FLOAT,
    ShaderDataType.MAT3: GL_FLOAT,
    ShaderDataType.MAT4: GL_FLOAT,
    ShaderDataType.INT: GL_INT,
    ShaderDataType.INT2: GL_INT,
    ShaderDataType.INT3: GL_INT,
    ShaderDataType.INT4: GL_INT,
    ShaderDataType.BOOL: GL_BOOL,
}


def gl_base_type(data_type: ShaderDataType) -> int:
    """OpenGL scalar type of the components of ``data_type``."""
    try:
        return _BASE_TYPES[ShaderDataType(data_type)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown ShaderDataType: {data_type!r}") from None


class VertexBuffer(ABC):
    """GPU memory holding vertex data, described by a layout."""

    @abstractmethod
    def bind(self) -> None:
        """Make this buffer current."""

    @abstractmethod
    def unbind(self) -> None:
        """Unbind any vertex buffer."""

    @property
    @abstractmethod
    def layout(self) -> BufferLayout:
        """Layout of one vertex."""

    @layout.setter
    @abstractmethod
    def layout(self, value: BufferLayout) -> None: ...


class IndexBuffer(ABC):
    """GPU memory holding 32-bit vertex indices."""

    @abstractmethod
    def bind(self) -> None:
        """Make this buffer current."""

    @abstractmethod
    def unbind(self) -> None:
        """Unbind any index buffer."""

    @property
    @abstractmethod
    def count(self) -> int:
        """Number of indices."""


class VertexArray(ABC):
    """Vertex buffers and an index buffer bound together for drawing."""

    @abstractmethod
    def bind(self) -> None:
        """Make this vertex array current."""

    @abstractmethod
    def unbind(self) -> None:
        """Unbind any vertex array."""

    @abstractmethod
    def add_vertex_buffer(self, vertex_buffer: VertexBuffer) -> None:
        """Attach a vertex buffer and enable its attributes."""

    @abstractmethod
    def set_index_buffer(self, index_buffer: IndexBuffer) -> None:
        """Attach the index buffer used for drawing."""

    @property
    @abstractmethod
    def vertex_buffers(self) -> tuple[VertexBuffer, ...]:
        """Attached vertex buffers in attachment order."""

    @property
    @abstractmethod
    def index_buffer(self) -> IndexBuffer | None:
        """The attached index buffer, if any."""


class OpenGLVertexBuffer(VertexBuffer):
    """Vertex buffer stored as 32-bit floats in an OpenGL buffer object."""

    def __init__(self, vertices: ArrayLike, gl: Any = None) -> None:
        self._gl = _opengl(gl)
        self.data = np.ascontiguousarray(vertices, dtype=np.float32).reshape(-1)
        self._layout = BufferLayout()
        self.renderer_id = self._gl.create_buffer()
        self._gl.bind_buffer(GL_ARRAY_BUFFER, self.renderer_id)
        self._gl.buffer_data(GL_ARRAY_BUFFER, self.data.tobytes())

    @property
    def size(self) -> int:
        """Size of the vertex data in bytes."""
        return int(self.data.nbytes)

    @property
    def layout(self) -> BufferLayout:
        return self._layout

    @layout.setter
    def layout(self, value: BufferLayout) -> None:
        self._layout = value if isinstance(value, BufferLayout) else BufferLayout(value)

    def bind(self) -> None:
        self._gl.bind_buffer(GL_ARRAY_BUFFER, self.renderer_id)

    def unbind(self) -> None:
        self._gl.bind_buffer(GL_ARRAY_BUFFER, 0)

    def delete(self) -> None:
        """Free the GPU buffer."""
        self._gl.delete_buffer(self.renderer_id)


class OpenGLIndexBuffer(IndexBuffer):
    """Index buffer of unsigned 32-bit integers in an OpenGL buffer object."""

    def __init__(self, indices: ArrayLike, gl: Any = None) -> None:
        self._gl = _opengl(gl)
        self.data = np.ascontiguousarray(indices, dtype=np.uint32).reshape(-1)
        self.renderer_id = self._gl.create_buffer()
        self._gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, self.renderer_id)
        self._gl.buffer_data(GL_ELEMENT_ARRAY_BUFFER, self.data.tobytes())

    @property
    def count(self) -> int:
        return int(self.data.size)

    def bind(self) -> None:
        self._gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, self.renderer_id)

    def unbind(self) -> None:
        self._gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, 0)

    def delete(self) -> None:
        """Free the GPU buffer."""
        self._gl.delete_buffer(self.renderer_id)


class OpenGLVertexArray(VertexArray):
    """OpenGL vertex array object."""

    def __init__(self, gl: Any = None) -> None:
        self._gl = _opengl(gl)
        self.renderer_id = self._gl.create_vertex_array()
        self._vertex_buffers: list[VertexBuffer] = []
        self._index_buffer: IndexBuffer | None = None

    def bind(self) -> None:
        self._gl.bind_vertex_array(self.renderer_id)

    def unbind(self) -> None:
        self._gl.bind_vertex_array(0)

    def add_vertex_buffer(self, vertex_buffer: VertexBuffer) -> None:
        layout = vertex_buffer.layout
        if len(layout) == 0:
            raise ValueError("Vertex Buffer has no layout")
        self._gl.bind_vertex_array(self.renderer_id)
        vertex_buffer.bind()
        for index, element in enumerate(layout):
            self._gl.enable_vertex_attrib(
                index,
                element.component_count(),
                gl_base_type(element.data_type),
                element.normalized,
                layout.stride,
                element.offset,
            )
        self._vertex_buffers.append(vertex_buffer)

    def set_index_buffer(self, index_buffer: IndexBuffer) -> None:
        self._gl.bind_vertex_array(self.renderer_id)
        index_buffer.bind()
        self._index_buffer = index_buffer

    @property
    def vertex_buffers(self) -> tuple[VertexBuffer, ...]:
        return tuple(self._vertex_buffers)

    @property
    def index_buffer(self) -> IndexBuffer | None:
        return self._index_buffer

    def delete(self) -> None:
        """Free the GPU vertex array."""
        self._gl.delete_vertex_array(self.renderer_id)


def _require_backend() -> None:
    api = get_api()
    if api is API.NONE:
        raise RuntimeError("RendererAPI::None is currently not supported")
    if api is not API.OPENGL:
        raise RuntimeError("Unknown RendererAPI")


def create_vertex_buffer(vertices: ArrayLike) -> VertexBuffer:
    """Create a vertex buffer for the selected backend."""
    _require_backend()
    return OpenGLVertexBuffer(vertices)


def create_index_buffer(indices: ArrayLike) -> IndexBuffer:
    """Create an index buffer for the selected backend."""
    _require_backend()
    return OpenGLIndexBuffer(indices)


def create_vertex_array() -> VertexArray:
    """Create a vertex array for the selected backend."""
    _require_backend()
    return OpenGLVertexArray()