"""Layers of an application and the ordered stack that holds them."""

from __future__ import annotations

from typing import Iterator

from runeengine.events import Event
from runeengine.timestep import Timestep


class Layer:
    """A slice of the application that receives updates, UI passes and events."""

    def __init__(self, name: str = "Layer") -> None:
        self.name = name

    def on_attach(self) -> None:
        """Called when the layer is pushed onto a stack."""

    def on_detach(self) -> None:
        """Called when the layer is popped from a stack."""

    def on_update(self, timestep: Timestep) -> None:
        """Called once per frame."""

    def on_imgui_render(self) -> None:
        """Called once per frame during the UI pass."""

    def on_event(self, event: Event) -> None:
        """Called for each event that reaches this layer."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class LayerStack:
    """Ordered layers: regular layers first, overlays always after them.

    Iteration runs bottom to top (update order); ``reversed`` runs top to
    bottom (event order).
    """

    def __init__(self) -> None:
        self._layers: list[Layer] = []
        self._insert_index = 0

    def push_layer(self, layer: Layer) -> None:
        """Insert ``layer`` above the existing layers but below every overlay."""
        self._layers.insert(self._insert_index, layer)
        self._insert_index += 1
        layer.on_attach()

    def push_overlay(self, overlay: Layer) -> None:
        """Put ``overlay`` on top of everything."""
        self._layers.append(overlay)
        overlay.on_attach()

    def _find(self, layer: Layer) -> int | None:
        return next((i for i, item in enumerate(self._layers) if item is layer), None)

    def pop_layer(self, layer: Layer) -> None:
        """Remove ``layer`` if present; absent layers are ignored."""
        index = self._find(layer)
        if index is None:
            return
        del self._layers[index]
        self._insert_index -= 1
        layer.on_detach()

    def pop_overlay(self, overlay: Layer) -> None:
        """Remove ``overlay`` if present; absent overlays are ignored."""
        index = self._find(overlay)
        if index is None:
            return
        del self._layers[index]
        overlay.on_detach()

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    def __reversed__(self) -> Iterator[Layer]:
        return reversed(list(self._layers))

    def __len__(self) -> int:
        return len(self._layers)

    def __contains__(self, layer: object) -> bool:
        return any(item is layer for item in self._layers)