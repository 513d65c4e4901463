"""Two-dimensional textures and the image loading behind them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, NamedTuple, Union

import numpy as np
from PIL import Image

from runeengine.instrumentor import profile_function
from runeengine.renderer_api import API, get_api

GL_TEXTURE_2D = 0x0DE1
GL_UNSIGNED_BYTE = 0x1401
GL_RGB = 0x1907
GL_RGBA = 0x1908
GL_RGB8 = 0x8051
GL_RGBA8 = 0x8058
GL_NEAREST = 0x2600
GL_LINEAR = 0x2601
GL_TEXTURE_MAG_FILTER = 0x2800
GL_TEXTURE_MIN_FILTER = 0x2801
GL_TEXTURE_WRAP_S = 0x2802
GL_TEXTURE_WRAP_T = 0x2803
GL_REPEAT = 0x2901
GL_TEXTURE0 = 0x84C0
GL_UNPACK_ALIGNMENT = 0x0CF5

PixelData = Union[bytes, bytearray, memoryview, np.ndarray]


class ImageData(NamedTuple):
    """Decoded image, rows stored bottom to top."""

    width: int
    height: int
    channels: int
    pixels: bytes


def bytes_per_pixel(channels: int) -> int:
    """Bytes of one uploaded pixel for an image with ``channels`` channels."""
    if channels == 4:
        return 4
    if channels == 3:
        return 3
    raise ValueError(f"unsupported channel count: {channels}")


def load_image(path: str | Path) -> ImageData:
    """Read an image as 8-bit RGB or RGBA, flipped so the first row is the bottom one."""
    with Image.open(path) as image:
        image.load()
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA")
        flipped = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        channels = 4 if flipped.mode == "RGBA" else 3
        return ImageData(flipped.width, flipped.height, channels, flipped.tobytes())


class _PygletTextureGL:
    """Texture calls made through pyglet's OpenGL bindings."""

    def __init__(self) -> None:
        from pyglet import gl

        self._gl = gl

    def create_texture(self) -> int:
        handles = (self._gl.GLuint * 1)()
        self._gl.glGenTextures(1, handles)
        return int(handles[0])

    def texture_storage(self, texture_id: int, internal_format: int, data_format: int, width: int, height: int) -> None:
        gl = self._gl
        gl.glBindTexture(GL_TEXTURE_2D, texture_id)
        gl.glTexImage2D(GL_TEXTURE_2D, 0, internal_format, width, height, 0, data_format, GL_UNSIGNED_BYTE, None)

    def texture_parameter(self, texture_id: int, name: int, value: int) -> None:
        gl = self._gl
        gl.glBindTexture(GL_TEXTURE_2D, texture_id)
        gl.glTexParameteri(GL_TEXTURE_2D, name, value)

    def texture_sub_image(self, texture_id: int, width: int, height: int, data_format: int, data: bytes) -> None:
        gl = self._gl
        buffer = (gl.GLubyte * len(data)).from_buffer_copy(data)
        gl.glBindTexture(GL_TEXTURE_2D, texture_id)
        gl.glPixelStorei(GL_UNPACK_ALIGNMENT, 1)
        gl.glTexSubImage2D(GL_TEXTURE_2D, 0, 0, 0, width, height, data_format, GL_UNSIGNED_BYTE, buffer)

    def bind_texture_unit(self, slot: int, texture_id: int) -> None:
        gl = self._gl
        gl.glActiveTexture(GL_TEXTURE0 + slot)
        gl.glBindTexture(GL_TEXTURE_2D, texture_id)

    def delete_texture(self, texture_id: int) -> None:
        self._gl.glDeleteTextures(1, (self._gl.GLuint * 1)(texture_id))


_shared_texture_gl: _PygletTextureGL | None = None


def _texture_gl(gl: Any = None) -> Any:
    global _shared_texture_gl
    if gl is not None:
        return gl
    if _shared_texture_gl is None:
        _shared_texture_gl = _PygletTextureGL()
    return _shared_texture_gl


class Texture(ABC):
    """Image data on the GPU that shaders can sample."""

    @abstractmethod
    def bind(self, slot: int = 0) -> None:
        """Bind the texture to a texture unit."""

    @abstractmethod
    def unbind(self, slot: int = 0) -> None:
        """Unbind whatever texture is on the unit."""

    @property
    @abstractmethod
    def width(self) -> int:
        """Width in pixels."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Height in pixels."""

    @abstractmethod
    def set_data(self, data: PixelData) -> None:
        """Replace the whole image with ``data``."""


class Texture2D(Texture, ABC):
    """A two-dimensional texture."""


def _pixel_bytes(data: PixelData) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return np.ascontiguousarray(data, dtype=np.uint8).tobytes()


class OpenGLTexture2D(Texture2D):
    """OpenGL 2D texture with 8-bit RGB or RGBA pixels."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        channels: int = 4,
        path: str | None = None,
        gl: Any = None,
    ) -> None:
        bytes_per_pixel(channels)
        self._gl = _texture_gl(gl)
        self._width = int(width)
        self._height = int(height)
        self.path = path
        if channels == 3:
            self.internal_format, self.data_format = GL_RGB8, GL_RGB
        else:
            self.internal_format, self.data_format = GL_RGBA8, GL_RGBA

        gl_ = self._gl
        self.renderer_id = gl_.create_texture()
        gl_.texture_storage(self.renderer_id, self.internal_format, self.data_format, self._width, self._height)
        gl_.texture_parameter(self.renderer_id, GL_TEXTURE_MIN_FILTER, GL_LINEAR)
        gl_.texture_parameter(self.renderer_id, GL_TEXTURE_MAG_FILTER, GL_NEAREST)
        if path is None:
            gl_.texture_parameter(self.renderer_id, GL_TEXTURE_WRAP_S, GL_REPEAT)
            gl_.texture_parameter(self.renderer_id, GL_TEXTURE_WRAP_T, GL_REPEAT)

    @classmethod
    def from_file(cls, path: str | Path, gl: Any = None) -> OpenGLTexture2D:
        """Load an image file into a new texture."""
        image = load_image(path)
        texture = cls(image.width, image.height, channels=image.channels, path=str(path), gl=gl)
        texture.set_data(image.pixels)
        return texture

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return 4 if self.data_format == GL_RGBA else 3

    def bind(self, slot: int = 0) -> None:
        self._gl.bind_texture_unit(slot, self.renderer_id)

    def unbind(self, slot: int = 0) -> None:
        self._gl.bind_texture_unit(slot, 0)

    @profile_function
    def set_data(self, data: PixelData) -> None:
        pixels = _pixel_bytes(data)
        if len(pixels) != self._width * self._height * bytes_per_pixel(self.channels):
            raise ValueError("Data must be entire texture!")
        self._gl.texture_sub_image(self.renderer_id, self._width, self._height, self.data_format, pixels)

    def delete(self) -> None:
        """Free the GPU texture."""
        self._gl.delete_texture(self.renderer_id)


def _require_backend() -> None:
    api = get_api()
    if api is API.NONE:
        raise RuntimeError("RendererAPI::None is currently not supported")
    if api is not API.OPENGL:
        raise RuntimeError("Unknown RendererAPI")


def create_texture(width: int, height: int) -> Texture2D:
    """Create an empty RGBA texture for the selected backend."""
    _require_backend()
    return OpenGLTexture2D(width, height)


def load_texture(path: str | Path) -> Texture2D:
    """Create a texture from an image file for the selected backend."""
    _require_backend()
    return OpenGLTexture2D.from_file(path)