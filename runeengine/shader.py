"""GLSL shader programs and the single-file ``#type`` shader format."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from pathlib import Path
from typing import Any, Mapping

import numpy as np
from numpy.typing import ArrayLike

from runeengine.log import core_logger
from runeengine.renderer_api import API, _opengl, get_api

_TYPE_TOKEN = "#type"
_LINE_BREAKS = "\r\n"


class ShaderError(Exception):
    """A shader could not be read, parsed, compiled or linked."""


class ShaderStage(IntEnum):
    FRAGMENT = 0x8B30
    VERTEX = 0x8B31


def shader_stage_from_string(name: str) -> ShaderStage:
    """Map a ``#type`` name to its stage; "pixel" means fragment."""
    if name == "vertex":
        return ShaderStage.VERTEX
    if name in ("fragment", "pixel"):
        return ShaderStage.FRAGMENT
    raise ShaderError(f"Unknown shader type: {name!r}")


def read_shader_file(filepath: str | Path) -> str:
    """Return the whole text of a shader file."""
    try:
        return Path(filepath).read_bytes().decode("utf-8")
    except OSError as exc:
        core_logger().error("Could not open file '%s'", filepath)
        raise ShaderError(f"Could not open file '{filepath}'") from exc


def _find_first_of(text: str, chars: str, start: int) -> int:
    return next((i for i in range(start, len(text)) if text[i] in chars), -1)


def _find_first_not_of(text: str, chars: str, start: int) -> int:
    return next((i for i in range(start, len(text)) if text[i] not in chars), -1)


def preprocess(source: str) -> dict[ShaderStage, str]:
    """Split a source into stages at each ``#type <stage>`` line."""
    sources: dict[ShaderStage, str] = {}
    pos = source.find(_TYPE_TOKEN)
    while pos != -1:
        eol = _find_first_of(source, _LINE_BREAKS, pos)
        if eol == -1:
            raise ShaderError("Syntax error")
        begin = pos + len(_TYPE_TOKEN) + 1
        stage = shader_stage_from_string(source[begin:eol])
        next_line = _find_first_not_of(source, _LINE_BREAKS, eol)
        if next_line == -1:
            sources[stage] = ""
            break
        pos = source.find(_TYPE_TOKEN, next_line)
        sources[stage] = source[next_line:pos] if pos != -1 else source[next_line:]
    return sources


def _vector(value: ArrayLike, size: int) -> tuple[float, ...]:
    array = np.asarray(value, dtype=float).reshape(-1)
    if array.size != size:
        raise ValueError(f"expected {size} components, got {array.size}")
    return tuple(float(x) for x in array)


def _matrix(value: ArrayLike, size: int) -> tuple[float, ...]:
    array = np.asarray(value, dtype=float)
    if array.shape != (size, size):
        raise ValueError(f"expected a {size}x{size} matrix, got shape {array.shape}")
    return tuple(float(x) for x in array.flatten(order="F"))


class Shader(ABC):
    """A linked GPU program and its uniforms."""

    @abstractmethod
    def bind(self) -> None:
        """Use this program for drawing."""

    @abstractmethod
    def unbind(self) -> None:
        """Stop using any program."""

    @abstractmethod
    def upload_uniform_bool(self, name: str, value: bool) -> None: ...

    @abstractmethod
    def upload_uniform_int(self, name: str, value: int) -> None: ...

    @abstractmethod
    def upload_uniform_float(self, name: str, value: float) -> None: ...

    @abstractmethod
    def upload_uniform_float2(self, name: str, value: ArrayLike) -> None: ...

    @abstractmethod
    def upload_uniform_float3(self, name: str, value: ArrayLike) -> None: ...

    @abstractmethod
    def upload_uniform_float4(self, name: str, value: ArrayLike) -> None: ...

    @abstractmethod
    def upload_uniform_mat3(self, name: str, matrix: ArrayLike) -> None: ...

    @abstractmethod
    def upload_uniform_mat4(self, name: str, matrix: ArrayLike) -> None: ...


class OpenGLShader(Shader):
    """OpenGL program compiled and linked from one source per stage."""

    def __init__(self, sources: Mapping[ShaderStage, str], gl: Any = None) -> None:
        self._gl = _opengl(gl)
        self.renderer_id = self._compile(sources)

    def _compile(self, sources: Mapping[ShaderStage, str]) -> int:
        gl = self._gl
        log = core_logger()
        program = gl.create_program()
        shader_ids: list[int] = []
        for stage, source in sources.items():
            shader = gl.create_shader(int(stage))
            ok, info = gl.compile_shader(shader, source)
            if not ok:
                gl.delete_shader(shader)
                for shader_id in shader_ids:
                    gl.delete_shader(shader_id)
                gl.delete_program(program)
                log.error("%s", info)
                raise ShaderError(f"Shader compilation failure! {info}".rstrip())
            gl.attach_shader(program, shader)
            shader_ids.append(shader)

        ok, info = gl.link_program(program)
        if not ok:
            gl.delete_program(program)
            for shader_id in shader_ids:
                gl.delete_shader(shader_id)
            log.error("%s", info)
            raise ShaderError(f"Shader link failure! {info}".rstrip())

        for shader_id in shader_ids:
            gl.detach_shader(program, shader_id)
        return program

    def _location(self, name: str) -> int:
        return self._gl.uniform_location(self.renderer_id, name)

    def bind(self) -> None:
        self._gl.use_program(self.renderer_id)

    def unbind(self) -> None:
        self._gl.use_program(0)

    def delete(self) -> None:
        """Free the GPU program."""
        self._gl.delete_program(self.renderer_id)

    def upload_uniform_bool(self, name: str, value: bool) -> None:
        self._gl.uniform_int(self._location(name), int(bool(value)))

    def upload_uniform_int(self, name: str, value: int) -> None:
        self._gl.uniform_int(self._location(name), int(value))

    def upload_uniform_float(self, name: str, value: float) -> None:
        self._gl.uniform_float(self._location(name), float(value))

    def upload_uniform_float2(self, name: str, value: ArrayLike) -> None:
        self._gl.uniform_float(self._location(name), *_vector(value, 2))

    def upload_uniform_float3(self, name: str, value: ArrayLike) -> None:
        self._gl.uniform_float(self._location(name), *_vector(value, 3))

    def upload_uniform_float4(self, name: str, value: ArrayLike) -> None:
        self._gl.uniform_float(self._location(name), *_vector(value, 4))

    def upload_uniform_mat3(self, name: str, matrix: ArrayLike) -> None:
        self._gl.uniform_matrix(self._location(name), 3, _matrix(matrix, 3))

    def upload_uniform_mat4(self, name: str, matrix: ArrayLike) -> None:
        self._gl.uniform_matrix(self._location(name), 4, _matrix(matrix, 4))


def _require_backend() -> None:
    api = get_api()
    if api is API.NONE:
        raise RuntimeError("RendererAPI::None is currently not supported")
    if api is not API.OPENGL:
        raise RuntimeError("Unknown RendererAPI")


def create_shader(filepath: str | Path) -> Shader:
    """Build a shader from a single ``#type``-sectioned file."""
    _require_backend()
    return OpenGLShader(preprocess(read_shader_file(filepath)))


def create_shader_from_sources(vertex_src: str, fragment_src: str) -> Shader:
    """Build a shader from separate vertex and fragment sources."""
    _require_backend()
    return OpenGLShader({ShaderStage.VERTEX: vertex_src, ShaderStage.FRAGMENT: fragment_src})