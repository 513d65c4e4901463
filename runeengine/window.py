"""Desktop window, its event translation and the input state it tracks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from runeengine.events import (
    Event,
    KeyPressedEvent,
    KeyReleasedEvent,
    MouseButtonPressedEvent,
    MouseButtonReleasedEvent,
    MouseMovedEvent,
    MouseScrolledEvent,
    WindowCloseEvent,
    WindowResizeEvent,
)
from runeengine.input import InputBackend, Key, MouseButton
from runeengine.log import core_logger
from runeengine.renderer_api import OpenGLContext

EventCallback = Callable[[Event], None]


def _build_key_map() -> dict[int, Key]:
    mapping: dict[int, Key] = {
        32: Key.SPACE,
        39: Key.APOSTROPHE,
        44: Key.COMMA,
        45: Key.MINUS,
        46: Key.PERIOD,
        47: Key.SLASH,
        59: Key.SEMICOLON,
        61: Key.EQUAL,
        91: Key.LEFT_BRACKET,
        92: Key.BACKSLASH,
        93: Key.RIGHT_BRACKET,
        96: Key.GRAVE_ACCENT,
        0xFF1B: Key.ESCAPE,
        0xFF0D: Key.ENTER,
        0xFF09: Key.TAB,
        0xFF08: Key.BACKSPACE,
        0xFF63: Key.INSERT,
        0xFFFF: Key.DELETE,
        0xFF53: Key.RIGHT,
        0xFF51: Key.LEFT,
        0xFF54: Key.DOWN,
        0xFF52: Key.UP,
        0xFF55: Key.PAGE_UP,
        0xFF56: Key.PAGE_DOWN,
        0xFF50: Key.HOME,
        0xFF57: Key.END,
        0xFFE5: Key.CAPS_LOCK,
        0xFF14: Key.SCROLL_LOCK,
        0xFF7F: Key.NUM_LOCK,
        0xFF61: Key.PRINT_SCREEN,
        0xFF13: Key.PAUSE,
        0xFFAE: Key.KP_DECIMAL,
        0xFFAF: Key.KP_DIVIDE,
        0xFFAA: Key.KP_MULTIPLY,
        0xFFAD: Key.KP_SUBTRACT,
        0xFFAB: Key.KP_ADD,
        0xFF8D: Key.KP_ENTER,
        0xFFBD: Key.KP_EQUAL,
        0xFFE1: Key.LEFT_SHIFT,
        0xFFE3: Key.LEFT_CONTROL,
        0xFFE9: Key.LEFT_ALT,
        0xFFEB: Key.LEFT_SUPER,
        0xFFE2: Key.RIGHT_SHIFT,
        0xFFE4: Key.RIGHT_CONTROL,
        0xFFEA: Key.RIGHT_ALT,
        0xFFEC: Key.RIGHT_SUPER,
        0xFF67: Key.MENU,
    }
    for offset in range(10):
        mapping[48 + offset] = Key(Key.D0 + offset)
        mapping[0xFFB0 + offset] = Key(Key.KP_0 + offset)
    for offset in range(26):
        mapping[97 + offset] = Key(Key.A + offset)
    for offset in range(20):
        mapping[0xFFBE + offset] = Key(Key.F1 + offset)
    return mapping


_KEY_MAP = _build_key_map()

_MOUSE_MAP = {
    1: MouseButton.LEFT,
    2: MouseButton.MIDDLE,
    4: MouseButton.RIGHT,
    8: MouseButton.BUTTON_4,
    16: MouseButton.BUTTON_5,
}


def translate_key(symbol: int) -> Key | None:
    """Engine key code for a windowing key symbol, or None if it has none."""
    return _KEY_MAP.get(symbol)


def translate_mouse_button(button: int) -> MouseButton | None:
    """Engine mouse button for a windowing button flag, or None if it has none."""
    return _MOUSE_MAP.get(button)


@dataclass
class WindowProps:
    title: str = "Rune Engine"
    width: int = 1280
    height: int = 720


def _create_native(props: WindowProps) -> Any:
    import pyglet

    return pyglet.window.Window(
        width=props.width, height=props.height, caption=props.title, resizable=True, vsync=True
    )


class Window:
    """A desktop window that turns native events into engine events."""

    _open_count: ClassVar[int] = 0

    def __init__(self, props: WindowProps | None = None, *, native: Any = None, gl: Any = None) -> None:
        props = props if props is not None else WindowProps()
        log = core_logger()
        self.title = props.title
        self._width = props.width
        self._height = props.height
        self._vsync = False
        self._callback: EventCallback | None = None
        self._keys: set[int] = set()
        self._buttons: set[int] = set()
        self._mouse = (0.0, 0.0)
        self._closed = False

        log.info("Creating window %s (%s, %s)", props.title, props.width, props.height)
        if Window._open_count == 0:
            log.info("Initializing window system")
        self._native = native if native is not None else _create_native(props)
        Window._open_count += 1

        self._context = OpenGLContext(self._native, gl)
        self._context.init()
        self.vsync = True

        self._native.push_handlers(
            on_resize=self._on_resize,
            on_close=self._on_close,
            on_key_press=self._on_key_press,
            on_key_release=self._on_key_release,
            on_mouse_press=self._on_mouse_press,
            on_mouse_release=self._on_mouse_release,
            on_mouse_scroll=self._on_mouse_scroll,
            on_mouse_motion=self._on_mouse_motion,
            on_mouse_drag=self._on_mouse_drag,
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def vsync(self) -> bool:
        return self._vsync

    @vsync.setter
    def vsync(self, enabled: bool) -> None:
        self._native.set_vsync(bool(enabled))
        self._vsync = bool(enabled)

    @property
    def native_window(self) -> Any:
        return self._native

    @property
    def pressed_keys(self) -> frozenset[int]:
        return frozenset(self._keys)

    @property
    def pressed_buttons(self) -> frozenset[int]:
        return frozenset(self._buttons)

    @property
    def mouse_position(self) -> tuple[float, float]:
        """Cursor position with the origin at the top-left corner."""
        return self._mouse

    def set_event_callback(self, callback: EventCallback | None) -> None:
        self._callback = callback

    def on_update(self) -> None:
        """Process pending native events and present the frame."""
        self._native.dispatch_events()
        self._context.swap_buffers()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._native.close()
        Window._open_count -= 1
        if Window._open_count == 0:
            core_logger().info("Terminating window system")

    def __enter__(self) -> Window:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _emit(self, event: Event) -> None:
        if self._callback is not None:
            self._callback(event)

    def _set_mouse(self, x: float, y: float) -> None:
        self._mouse = (float(x), float(self._height - y))

    def _on_resize(self, width: int, height: int) -> None:
        self._width = width
        self._height = height
        self._emit(WindowResizeEvent(width, height))

    def _on_close(self) -> bool:
        self._emit(WindowCloseEvent())
        return True

    def _on_key_press(self, symbol: int, modifiers: int) -> None:
        code = translate_key(symbol)
        if code is None:
            return
        repeat = 1 if code in self._keys else 0
        self._keys.add(code)
        self._emit(KeyPressedEvent(code, repeat))

    def _on_key_release(self, symbol: int, modifiers: int) -> None:
        code = translate_key(symbol)
        if code is None:
            return
        self._keys.discard(code)
        self._emit(KeyReleasedEvent(code))

    def _on_mouse_press(self, x: float, y: float, button: int, modifiers: int) -> None:
        self._set_mouse(x, y)
        code = translate_mouse_button(button)
        if code is None:
            return
        self._buttons.add(code)
        self._emit(MouseButtonPressedEvent(code))

    def _on_mouse_release(self, x: float, y: float, button: int, modifiers: int) -> None:
        self._set_mouse(x, y)
        code = translate_mouse_button(button)
        if code is None:
            return
        self._buttons.discard(code)
        self._emit(MouseButtonReleasedEvent(code))

    def _on_mouse_scroll(self, x: float, y: float, scroll_x: float, scroll_y: float) -> None:
        self._emit(MouseScrolledEvent(float(scroll_x), float(scroll_y)))

    def _on_mouse_motion(self, x: float, y: float, dx: float, dy: float) -> None:
        self._set_mouse(x, y)
        self._emit(MouseMovedEvent(*self._mouse))

    def _on_mouse_drag(self, x: float, y: float, dx: float, dy: float, buttons: int, modifiers: int) -> None:
        self._on_mouse_motion(x, y, dx, dy)


class WindowInput(InputBackend):
    """Polled input state read from a window."""

    def __init__(self, window: Window) -> None:
        self.window = window

    def is_key_pressed(self, keycode: int) -> bool:
        return keycode in self.window.pressed_keys

    def is_mouse_button_pressed(self, button: int) -> bool:
        return button in self.window.pressed_buttons

    def get_mouse_pos(self) -> tuple[float, float]:
        return self.window.mouse_position