"""The application: owns the window, the renderer and the layer stack, and runs the loop."""

from __future__ import annotations

import time
from typing import Any, Callable, ClassVar

from runeengine import log
from runeengine.events import Event, EventDispatcher, WindowCloseEvent
from runeengine.input import set_input_backend
from runeengine.instrumentor import Instrumentor
from runeengine.layer import Layer, LayerStack
from runeengine.renderer import Renderer
from runeengine.timestep import Timestep
from runeengine.window import Window, WindowInput, WindowProps


class Application:
    """The single running application.

    A window and a renderer are created unless given; an injected window needs
    ``set_event_callback``, ``on_update`` and ``close``.
    """

    _instance: ClassVar[Application | None] = None

    def __init__(
        self,
        props: WindowProps | None = None,
        *,
        window: Any = None,
        renderer: Any = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if Application._instance is not None:
            raise RuntimeError("Application already running")
        self._clock = clock
        self._start_time = clock()
        self._last_frame_time = 0.0
        self._running = True
        self._closed = False
        self._layer_stack = LayerStack()

        self.window = window if window is not None else Window(props)
        self.window.set_event_callback(self.on_event)
        if isinstance(self.window, Window):
            set_input_backend(WindowInput(self.window))

        self.renderer = renderer if renderer is not None else Renderer()
        self.renderer.init()
        Application._instance = self

    @classmethod
    def get(cls) -> Application:
        """The application currently running."""
        if Application._instance is None:
            raise RuntimeError("no application is running")
        return Application._instance

    @property
    def running(self) -> bool:
        return self._running

    @property
    def layers(self) -> tuple[Layer, ...]:
        """Layers from bottom to top."""
        return tuple(self._layer_stack)

    def push_layer(self, layer: Layer) -> None:
        self._layer_stack.push_layer(layer)

    def push_overlay(self, layer: Layer) -> None:
        self._layer_stack.push_overlay(layer)

    def on_event(self, event: Event) -> None:
        """Handle window close, then offer the event to layers from the top down."""
        EventDispatcher(event).dispatch(WindowCloseEvent, self._on_window_close)
        for layer in reversed(self._layer_stack):
            layer.on_event(event)
            if event.handled:
                break

    def _on_window_close(self, event: WindowCloseEvent) -> bool:
        self._running = False
        return True

    def run(self) -> None:
        """Run frames until the window is closed."""
        while self._running:
            now = self._clock() - self._start_time
            timestep = Timestep(now - self._last_frame_time)
            self._last_frame_time = now

            for layer in self._layer_stack:
                layer.on_update(timestep)
            for layer in self._layer_stack:
                layer.on_imgui_render()
            self.window.on_update()

    def close(self) -> None:
        """Shut down the renderer and the window; the application is no longer current."""
        if self._closed:
            return
        self._closed = True
        self._running = False
        self.renderer.shutdown()
        self.window.close()
        if Application._instance is self:
            Application._instance = None

    def __enter__(self) -> Application:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def run_application(factory: Callable[[], Application]) -> int:
    """Set up logging, then create, run and close an application with profiling sessions."""
    log.init()
    log.core_logger().info("Core logger set up")
    log.client_logger().info("Client logger set up")

    profiler = Instrumentor.get()

    profiler.begin_session("Init", "Profiling-Init.json")
    try:
        app = factory()
    finally:
        profiler.end_session()

    profiler.begin_session("Runtime", "Profiling-Runtime.json")
    try:
        app.run()
    finally:
        profiler.end_session()

    profiler.begin_session("Shutdown", "Profiling-Shutdown.json")
    try:
        app.close()
    finally:
        profiler.end_session()

    return 0