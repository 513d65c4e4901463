"""Vertex attribute types and the layout of interleaved vertex data."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Iterator, Union


class ShaderDataType(IntEnum):
    NONE = 0
    FLOAT = 1
    FLOAT2 = 2
    FLOAT3 = 3
    FLOAT4 = 4
    MAT3 = 5
    MAT4 = 6
    INT = 7
    INT2 = 8
    INT3 = 9
    INT4 = 10
    BOOL = 11


_SIZES = {
    ShaderDataType.FLOAT: 4,
    ShaderDataType.FLOAT2: 4 * 2,
    ShaderDataType.FLOAT3: 4 * 3,
    ShaderDataType.FLOAT4: 4 * 4,
    ShaderDataType.MAT3: 4 * 3 * 3,
    ShaderDataType.MAT4: 4 * 4 * 4,
    ShaderDataType.INT: 4,
    ShaderDataType.INT2: 4 * 2,
    ShaderDataType.INT3: 4 * 3,
    ShaderDataType.INT4: 4 * 4,
    ShaderDataType.BOOL: 1,
}

_COMPONENTS = {
    ShaderDataType.FLOAT: 1,
    ShaderDataType.FLOAT2: 2,
    ShaderDataType.FLOAT3: 3,
    ShaderDataType.FLOAT4: 4,
    ShaderDataType.MAT3: 3 * 3,
    ShaderDataType.MAT4: 4 * 4,
    ShaderDataType.INT: 1,
    ShaderDataType.INT2: 2,
    ShaderDataType.INT3: 3,
    ShaderDataType.INT4: 4,
    ShaderDataType.BOOL: 1,
}


def shader_data_type_size(data_type: ShaderDataType) -> int:
    """Size in bytes of one attribute of ``data_type``."""
    try:
        return _SIZES[ShaderDataType(data_type)]
    except (KeyError, ValueError):
        raise ValueError(f"unknown shader data type: {data_type!r}") from None


@dataclass
class BufferElement:
    """One named attribute within a vertex."""

    data_type: ShaderDataType
    name: str
    normalized: bool = False
    offset: int = 0
    size: int = field(init=False)

    def __post_init__(self) -> None:
        self.data_type = ShaderDataType(self.data_type)
        self.size = shader_data_type_size(self.data_type)

    def component_count(self) -> int:
        """Number of scalar components making up the attribute."""
        try:
            return _COMPONENTS[self.data_type]
        except KeyError:
            raise ValueError(f"unknown shader data type: {self.data_type!r}") from None


ElementSpec = Union[BufferElement, tuple]


class BufferLayout:
    """Ordered attributes with their byte offsets and the total vertex stride."""

    def __init__(self, elements: Iterable[ElementSpec] = ()) -> None:
        self._elements: list[BufferElement] = []
        offset = 0
        for item in elements:
            element = item if isinstance(item, BufferElement) else BufferElement(*item)
            placed = dataclasses.replace(element, offset=offset)
            self._elements.append(placed)
            offset += placed.size
        self._stride = offset

    @property
    def stride(self) -> int:
        return self._stride

    @property
    def elements(self) -> tuple[BufferElement, ...]:
        return tuple(self._elements)

    def __iter__(self) -> Iterator[BufferElement]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __repr__(self) -> str:
        return f"BufferLayout({self._elements!r})"