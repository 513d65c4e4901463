import numpy as np
import pytest

from runeengine.renderer_api import API, get_api, set_api
from runeengine.shader import (
    OpenGLShader,
    Shader,
    ShaderError,
    ShaderStage,
    create_shader,
    create_shader_from_sources,
    preprocess,
    read_shader_file,
    shader_stage_from_string,
)


class FakeGL:
    def __init__(self, compile_ok=True, link_ok=True, log="bad thing"):
        self.compile_ok = compile_ok
        self.link_ok = link_ok
        self.log = log
        self.calls = []
        self.stages = {}
        self.sources = {}
        self.locations = {}
        self._next = 100

    def named(self, name):
        return [call[1:] for call in self.calls if call[0] == name]

    def create_program(self):
        self.calls.append(("create_program", 1))
        return 1

    def create_shader(self, stage):
        self._next += 1
        self.stages[self._next] = stage
        return self._next

    def compile_shader(self, shader, source):
        self.sources[self.stages[shader]] = source
        return (self.compile_ok, "" if self.compile_ok else self.log)

    def attach_shader(self, program, shader):
        self.calls.append(("attach_shader", program, shader))

    def detach_shader(self, program, shader):
        self.calls.append(("detach_shader", program, shader))

    def delete_shader(self, shader):
        self.calls.append(("delete_shader", shader))

    def link_program(self, program):
        self.calls.append(("link_program", program))
        return (self.link_ok, "" if self.link_ok else self.log)

    def delete_program(self, program):
        self.calls.append(("delete_program", program))

    def use_program(self, program):
        self.calls.append(("use_program", program))

    def uniform_location(self, program, name):
        return self.locations.setdefault(name, len(self.locations) + 1)

    def uniform_int(self, location, value):
        self.calls.append(("uniform_int", location, value))

    def uniform_float(self, location, *values):
        self.calls.append(("uniform_float", location, values))

    def uniform_matrix(self, location, size, values):
        self.calls.append(("uniform_matrix", location, size, tuple(values)))


VERTEX = "#version 410 core\nvoid main() { gl_Position = vec4(0.0); }\n"
FRAGMENT = "#version 410 core\nout vec4 color;\nvoid main() { color = vec4(1.0); }\n"
COMBINED = "#type vertex\n" + VERTEX + "#type fragment\n" + FRAGMENT


@pytest.fixture
def restore_api():
    previous = get_api()
    yield
    set_api(previous)


def test_stage_values_are_gl_enums():
    assert int(shader_stage_from_string("vertex")) == 0x8B31
    assert int(shader_stage_from_string("fragment")) == 0x8B30


@pytest.mark.parametrize(
    "name, stage",
    [("vertex", ShaderStage.VERTEX), ("fragment", ShaderStage.FRAGMENT), ("pixel", ShaderStage.FRAGMENT)],
)
def test_stage_from_string(name, stage):
    assert shader_stage_from_string(name) is stage


def test_unknown_stage_raises():
    with pytest.raises(ShaderError):
        shader_stage_from_string("geometry")


def test_preprocess_splits_sections():
    result = preprocess(COMBINED)
    assert result == {ShaderStage.VERTEX: VERTEX, ShaderStage.FRAGMENT: FRAGMENT}


def test_preprocess_handles_crlf():
    source = "#type vertex\r\nA\r\n#type pixel\r\nB\r\n"
    assert preprocess(source) == {ShaderStage.VERTEX: "A\r\n", ShaderStage.FRAGMENT: "B\r\n"}


def test_preprocess_later_section_of_same_stage_wins():
    source = "#type vertex\nfirst\n#type vertex\nsecond\n"
    assert preprocess(source) == {ShaderStage.VERTEX: "second\n"}


def test_preprocess_without_token_is_empty():
    assert preprocess("void main() {}\n") == {}


def test_preprocess_missing_line_break_is_syntax_error():
    with pytest.raises(ShaderError):
        preprocess("#type vertex")


def test_preprocess_unknown_type_raises():
    with pytest.raises(ShaderError):
        preprocess("#type compute\nvoid main() {}\n")


def test_read_shader_file_round_trip(tmp_path):
    path = tmp_path / "shader.glsl"
    path.write_bytes(COMBINED.encode("utf-8"))
    assert read_shader_file(path) == COMBINED
    assert preprocess(read_shader_file(str(path)))[ShaderStage.FRAGMENT] == FRAGMENT


def test_read_missing_file_raises(tmp_path):
    with pytest.raises(ShaderError):
        read_shader_file(tmp_path / "missing.glsl")


def test_shader_is_abstract():
    with pytest.raises(TypeError):
        Shader()


def test_compile_and_link_attaches_then_detaches_each_stage():
    gl = FakeGL()
    shader = OpenGLShader(preprocess(COMBINED), gl)
    assert shader.renderer_id == 1
    assert gl.sources == {int(ShaderStage.VERTEX): VERTEX, int(ShaderStage.FRAGMENT): FRAGMENT}
    attached = gl.named("attach_shader")
    assert len(attached) == 2
    assert sorted(gl.named("detach_shader")) == sorted(attached)
    assert gl.named("link_program") == [(1,)]
    assert gl.named("delete_program") == []


def test_compile_failure_raises_with_log_and_frees_program():
    gl = FakeGL(compile_ok=False, log="syntax error at line 2")
    with pytest.raises(ShaderError, match="syntax error at line 2"):
        OpenGLShader(preprocess(COMBINED), gl)
    assert gl.named("delete_program") == [(1,)]
    assert gl.named("link_program") == []


def test_link_failure_raises_and_frees_everything():
    gl = FakeGL(link_ok=False, log="unresolved symbol")
    with pytest.raises(ShaderError, match="unresolved symbol"):
        OpenGLShader(preprocess(COMBINED), gl)
    assert gl.named("delete_program") == [(1,)]
    assert len(gl.named("delete_shader")) == 2
    assert gl.named("detach_shader") == []


def test_bind_and_unbind():
    gl = FakeGL()
    shader = OpenGLShader(preprocess(COMBINED), gl)
    shader.bind()
    shader.unbind()
    assert gl.named("use_program") == [(1,), (0,)]


def test_scalar_uniforms():
    gl = FakeGL()
    shader = OpenGLShader(preprocess(COMBINED), gl)
    shader.upload_uniform_int("u_Texture", 0)
    shader.upload_uniform_bool("u_Flag", True)
    shader.upload_uniform_float("u_Time", 2.5)
    assert gl.named("uniform_int") == [(gl.locations["u_Texture"], 0), (gl.locations["u_Flag"], 1)]
    assert gl.named("uniform_float") == [(gl.locations["u_Time"], (2.5,))]


def test_vector_uniforms():
    gl = FakeGL()
    shader = OpenGLShader(preprocess(COMBINED), gl)
    shader.upload_uniform_float2("u_A", (1, 2))
    shader.upload_uniform_float3("u_B", np.array([1.0, 2.0, 3.0]))
    shader.upload_uniform_float4("u_C", [0.5, 0.5, 0.5, 1.0])
    values = [args[1] for args in gl.named("uniform_float")]
    assert values == [(1.0, 2.0), (1.0, 2.0, 3.0), (0.5, 0.5, 0.5, 1.0)]


def test_vector_uniform_wrong_length_raises():
    shader = OpenGLShader(preprocess(COMBINED), FakeGL())
    with pytest.raises(ValueError):
        shader.upload_uniform_float2("u_A", (1.0, 2.0, 3.0))


def test_matrix_uniform_is_column_major():
    gl = FakeGL()
    shader = OpenGLShader(preprocess(COMBINED), gl)
    matrix = np.arange(16.0).reshape(4, 4)
    shader.upload_uniform_mat4("u_ViewProjection", matrix)
    (location, size, values), = gl.named("uniform_matrix")
    assert location == gl.locations["u_ViewProjection"]
    assert size == 4
    assert values[:4] == tuple(matrix[:, 0])
    assert np.array_equal(np.array(values).reshape(4, 4).T, matrix)


def test_mat3_uniform_shape_checked():
    gl = FakeGL()
    shader = OpenGLShader(preprocess(COMBINED), gl)
    shader.upload_uniform_mat3("u_Normal", np.identity(3))
    assert gl.named("uniform_matrix")[0][1] == 3
    with pytest.raises(ValueError):
        shader.upload_uniform_mat3("u_Normal", np.identity(4))


def test_factories_refuse_none_api(restore_api, tmp_path):
    path = tmp_path / "shader.glsl"
    path.write_text(COMBINED)
    set_api(API.NONE)
    with pytest.raises(RuntimeError):
        create_shader(path)
    with pytest.raises(RuntimeError):
        create_shader_from_sources(VERTEX, FRAGMENT)