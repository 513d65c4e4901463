import numpy as np
import pytest

from runeengine.buffer_layout import BufferLayout, ShaderDataType
from runeengine.buffers import (
    GL_ARRAY_BUFFER,
    GL_BOOL,
    GL_ELEMENT_ARRAY_BUFFER,
    GL_FLOAT,
    GL_INT,
    IndexBuffer,
    OpenGLIndexBuffer,
    OpenGLVertexArray,
    OpenGLVertexBuffer,
    VertexArray,
    VertexBuffer,
    create_index_buffer,
    create_vertex_array,
    create_vertex_buffer,
    gl_base_type,
)
from runeengine.renderer_api import API, get_api, set_api


class FakeGL:
    def __init__(self):
        self.calls = []
        self._next = 0

    def _new(self):
        self._next += 1
        return self._next

    def named(self, name):
        return [call[1:] for call in self.calls if call[0] == name]

    def create_buffer(self):
        handle = self._new()
        self.calls.append(("create_buffer", handle))
        return handle

    def bind_buffer(self, target, handle):
        self.calls.append(("bind_buffer", target, handle))

    def buffer_data(self, target, data):
        self.calls.append(("buffer_data", target, data))

    def delete_buffer(self, handle):
        self.calls.append(("delete_buffer", handle))

    def create_vertex_array(self):
        handle = self._new()
        self.calls.append(("create_vertex_array", handle))
        return handle

    def bind_vertex_array(self, handle):
        self.calls.append(("bind_vertex_array", handle))

    def delete_vertex_array(self, handle):
        self.calls.append(("delete_vertex_array", handle))

    def enable_vertex_attrib(self, *args):
        self.calls.append(("enable_vertex_attrib", *args))


TRIANGLE = [
    -0.5, -0.5, 0.0, 1.0, 0.0, 0.0, 1.0,
    0.5, -0.5, 0.0, 0.0, 1.0, 0.0, 1.0,
    0.0, 0.5, 0.0, 0.0, 0.0, 1.0, 1.0,
]


@pytest.fixture
def restore_api():
    previous = get_api()
    yield
    set_api(previous)


def test_gl_base_type_constants():
    assert GL_FLOAT == 0x1406
    assert gl_base_type(ShaderDataType.FLOAT3) == GL_FLOAT
    assert gl_base_type(ShaderDataType.MAT4) == GL_FLOAT
    assert gl_base_type(ShaderDataType.INT2) == GL_INT
    assert gl_base_type(ShaderDataType.BOOL) == GL_BOOL


def test_gl_base_type_rejects_none():
    with pytest.raises(ValueError):
        gl_base_type(ShaderDataType.NONE)


def test_abstract_bases_cannot_be_instantiated():
    for cls in (VertexBuffer, IndexBuffer, VertexArray):
        with pytest.raises(TypeError):
            cls()


def test_vertex_buffer_uploads_float_data():
    gl = FakeGL()
    vb = OpenGLVertexBuffer(TRIANGLE, gl)
    expected = np.array(TRIANGLE, dtype=np.float32).tobytes()
    assert gl.named("buffer_data") == [(GL_ARRAY_BUFFER, expected)]
    assert gl.named("bind_buffer") == [(GL_ARRAY_BUFFER, vb.renderer_id)]
    assert vb.size == len(expected)


def test_vertex_buffer_bind_unbind_and_delete():
    gl = FakeGL()
    vb = OpenGLVertexBuffer(TRIANGLE, gl)
    gl.calls.clear()
    vb.bind()
    vb.unbind()
    vb.delete()
    assert gl.calls == [
        ("bind_buffer", GL_ARRAY_BUFFER, vb.renderer_id),
        ("bind_buffer", GL_ARRAY_BUFFER, 0),
        ("delete_buffer", vb.renderer_id),
    ]


def test_vertex_buffer_layout_defaults_empty_and_can_be_set():
    vb = OpenGLVertexBuffer(TRIANGLE, FakeGL())
    assert len(vb.layout) == 0
    layout = BufferLayout([(ShaderDataType.FLOAT3, "a_Position"), (ShaderDataType.FLOAT4, "a_Color")])
    vb.layout = layout
    assert vb.layout is layout


def test_index_buffer_counts_and_uploads_uint32():
    gl = FakeGL()
    ib = OpenGLIndexBuffer([0, 1, 2, 2, 3, 0], gl)
    assert ib.count == 6
    expected = np.array([0, 1, 2, 2, 3, 0], dtype=np.uint32).tobytes()
    assert gl.named("buffer_data") == [(GL_ELEMENT_ARRAY_BUFFER, expected)]
    gl.calls.clear()
    ib.unbind()
    assert gl.calls == [("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, 0)]


def test_add_vertex_buffer_without_layout_raises():
    gl = FakeGL()
    va = OpenGLVertexArray(gl)
    with pytest.raises(ValueError):
        va.add_vertex_buffer(OpenGLVertexBuffer(TRIANGLE, gl))
    assert va.vertex_buffers == ()


def test_add_vertex_buffer_enables_each_attribute():
    gl = FakeGL()
    va = OpenGLVertexArray(gl)
    vb = OpenGLVertexBuffer(TRIANGLE, gl)
    layout = BufferLayout(
        [(ShaderDataType.FLOAT3, "a_Position"), (ShaderDataType.FLOAT4, "a_Color", True)]
    )
    vb.layout = layout
    va.add_vertex_buffer(vb)
    elements = list(layout)
    assert gl.named("enable_vertex_attrib") == [
        (0, 3, GL_FLOAT, False, layout.stride, elements[0].offset),
        (1, 4, GL_FLOAT, True, layout.stride, elements[1].offset),
    ]
    assert va.vertex_buffers == (vb,)
    assert ("bind_vertex_array", va.renderer_id) in gl.calls


def test_second_vertex_buffer_restarts_attribute_indices():
    gl = FakeGL()
    va = OpenGLVertexArray(gl)
    for _ in range(2):
        vb = OpenGLVertexBuffer(TRIANGLE, gl)
        vb.layout = BufferLayout([(ShaderDataType.FLOAT2, "a_TexCoord")])
        va.add_vertex_buffer(vb)
    indices = [args[0] for args in gl.named("enable_vertex_attrib")]
    assert indices == [0, 0]
    assert len(va.vertex_buffers) == 2


def test_set_index_buffer_binds_and_stores():
    gl = FakeGL()
    va = OpenGLVertexArray(gl)
    ib = OpenGLIndexBuffer([0, 1, 2], gl)
    assert va.index_buffer is None
    gl.calls.clear()
    va.set_index_buffer(ib)
    assert va.index_buffer is ib
    assert gl.calls == [
        ("bind_vertex_array", va.renderer_id),
        ("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, ib.renderer_id),
    ]


def test_vertex_array_unbind_and_delete():
    gl = FakeGL()
    va = OpenGLVertexArray(gl)
    gl.calls.clear()
    va.unbind()
    va.delete()
    assert gl.calls == [("bind_vertex_array", 0), ("delete_vertex_array", va.renderer_id)]


def test_factories_refuse_none_api(restore_api):
    set_api(API.NONE)
    with pytest.raises(RuntimeError):
        create_vertex_buffer(TRIANGLE)
    with pytest.raises(RuntimeError):
        create_index_buffer([0, 1, 2])
    with pytest.raises(RuntimeError):
        create_vertex_array()