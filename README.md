# runeengine

A small, layered game engine. An `Application` owns a window, a stack of
layers and a renderer. Every frame it hands each layer a `Timestep`; every
window event is offered to the layers from the top of the stack down until
one of them marks it handled.

## What is in the package

- `runeengine.events`: `WindowResizeEvent`, `WindowCloseEvent`,
  `AppTickEvent`, `AppUpdateEvent`, `AppRenderEvent`, `KeyPressedEvent`,
  `KeyReleasedEvent`, `KeyTypedEvent`, `MouseMovedEvent`,
  `MouseScrolledEvent`, `MouseButtonPressedEvent` and
  `MouseButtonReleasedEvent`, each with an `EventType` and `EventCategory`
  flags (`Event.is_in_category`). `EventDispatcher.dispatch(event_class, func)`
  calls `func` only when the event is of that class and stores its return
  value in `event.handled`.
- `runeengine.timestep`: `Timestep`, a frame delta in seconds with
  `seconds` and `milliseconds`; it converts with `float()` and multiplies
  with numbers.
- `runeengine.layer`: `Layer` with the hooks `on_attach`, `on_detach`,
  `on_update`, `on_imgui_render` and `on_event`, and `LayerStack`, where
  `push_layer` inserts below every overlay and `push_overlay` puts a layer
  on top. Iterating goes bottom to top; `reversed()` goes top to bottom.
  Popping a layer that is not on the stack does nothing.
- `runeengine.input`: `Key` and `MouseButton` codes, the `InputBackend`
  interface, and the polling functions `is_key_pressed`,
  `is_mouse_button_pressed`, `get_mouse_pos`, `get_mouse_x` and
  `get_mouse_y`. They read from the backend installed with
  `set_input_backend` and raise `RuntimeError` when none is set. An
  `Application` that creates its own window installs one for you.
- `runeengine.window`: `Window` (a resizable pyglet window with vsync on)
  described by `WindowProps` (default title "Rune Engine", 1280×720). It
  turns native events into engine events, passes them to the callback set
  with `set_event_callback`, and tracks pressed keys, pressed buttons and
  the cursor position (origin at the top-left corner). `WindowInput` reads
  that state as an `InputBackend`. `translate_key` and
  `translate_mouse_button` map pyglet codes to `Key` and `MouseButton`.
- `runeengine.camera`: numpy 4×4 matrix helpers `perspective`, `ortho`,
  `look_at`, `rotate`, `translate` and `scale`, and `Camera` with a
  `CameraType` of `PERSPECTIVE` or `ORTHOLINEAR`. Setting `position` or
  `rotation` (Euler angles in degrees) rebuilds the view matrix;
  `set_projection(fov, aspect_ratio, near_plane, far_plane)` rebuilds the
  projection; `zoom(amount)` only adds to the field of view. Defaults are a
  90° field of view, a 16:9 aspect ratio and planes at 0.001 and 400.
- `runeengine.camera_controller`: `CameraController`. `on_update(timestep)`
  moves the camera with A/D (x), Space/Left Ctrl (y) and W/S (z) at 5 units
  per second, or turns it with the arrow keys at 90° per second; only the
  first of these keys found held counts in a frame. `on_event` reacts to
  mouse scrolling (zoom) and window resizes (aspect ratio).
- `runeengine.buffer_layout`: `ShaderDataType`, `shader_data_type_size`,
  `BufferElement` and `BufferLayout`, which works out each element's byte
  offset and the vertex `stride`.
- `runeengine.buffers`: `OpenGLVertexBuffer` (float32 data),
  `OpenGLIndexBuffer` (uint32 indices) and `OpenGLVertexArray`, made with
  `create_vertex_buffer`, `create_index_buffer` and `create_vertex_array`.
  Adding a vertex buffer without a layout raises `ValueError`.
- `runeengine.shader`: `OpenGLShader`, made with `create_shader(filepath)`
  from a single file split by `#type vertex` and `#type fragment` (or
  `#type pixel`) lines, or with `create_shader_from_sources`. `preprocess`
  does the splitting on its own. Bad files, unknown stage names and compile
  or link failures raise `ShaderError`. Uniforms are set with
  `upload_uniform_bool`, `_int`, `_float`, `_float2`, `_float3`, `_float4`,
  `_mat3` and `_mat4`.
- `runeengine.texture`: `OpenGLTexture2D`, made empty (RGBA) with
  `create_texture(width, height)` or from an image file with
  `load_texture(path)`. `load_image` reads files with Pillow as 8-bit RGB or
  RGBA, bottom row first. `set_data` must be given the whole image.
- `runeengine.renderer_api` and `runeengine.renderer`: `get_api`/`set_api`
  choose the backend (`API.OPENGL` by default; the create functions raise
  `RuntimeError` for `API.NONE`). `RenderCommand` forwards `init`,
  `set_clear_color`, `clear` and `draw_indexed` to an `OpenGLRendererAPI`.
  `Renderer` has `init`, `shutdown`, `begin_scene(camera)`, `end_scene` and
  `submit(vertex_array, shader, transform)`, which uploads `u_ViewProjection`
  and `u_TransformMatrix` and draws the vertex array's indices.
- `runeengine.instrumentor`: `Instrumentor` sessions writing Chrome
  trace-event JSON, `InstrumentationTimer` (a context manager),
  `profile_scope(name)` and the `profile_function` decorator. Timings are
  written only while a session is open.
- `runeengine.log`: `init()` sets up the `RUNE` (`core_logger()`) and `APP`
  (`client_logger()`) console loggers, open down to a TRACE level and
  coloured when stdout is a terminal.
- `runeengine.application`: `Application` and `run_application`.

## Writing an application

Subclass `Application`, push your layers, and start it with
`run_application`. It sets up logging, then creates, runs and closes the
application, recording each phase in its own profiling file
(`Profiling-Init.json`, `Profiling-Runtime.json`,
`Profiling-Shutdown.json`) in the current directory. The loop runs until the
window is closed. Only one `Application` may exist at a time;
`Application.get()` returns it.

```python
from runeengine.application import Application, run_application
from runeengine.buffer_layout import BufferLayout, ShaderDataType
from runeengine.buffers import create_index_buffer, create_vertex_array, create_vertex_buffer
from runeengine.camera import CameraType
from runeengine.camera_controller import CameraController
from runeengine.layer import Layer
from runeengine.shader import create_shader


class ExampleLayer(Layer):
    def __init__(self):
        super().__init__("Example")
        self.controller = CameraController(10 / 9, CameraType.PERSPECTIVE, (0.0, 0.0, 2.0))

        self.triangle = create_vertex_array()
        vertices = create_vertex_buffer([
            -0.5, -0.5, 0.0, 1.0, 0.0, 0.0, 1.0,
             0.5, -0.5, 0.0, 0.0, 1.0, 0.0, 1.0,
             0.0,  0.5, 0.0, 0.0, 0.0, 1.0, 1.0,
        ])
        vertices.layout = BufferLayout([
            (ShaderDataType.FLOAT3, "a_Position"),
            (ShaderDataType.FLOAT4, "a_Color"),
        ])
        self.triangle.add_vertex_buffer(vertices)
        self.triangle.set_index_buffer(create_index_buffer([0, 1, 2]))
        self.shader = create_shader("assets/shaders/triangle.glsl")

    def on_update(self, timestep):
        self.controller.on_update(timestep)
        renderer = Application.get().renderer
        renderer.command.set_clear_color((0.05, 0.05, 0.05, 1.0))
        renderer.command.clear()
        renderer.begin_scene(self.controller.camera)
        renderer.submit(self.triangle, self.shader)
        renderer.end_scene()

    def on_event(self, event):
        self.controller.on_event(event)


class Sandbox(Application):
    def __init__(self):
        super().__init__()
        self.push_layer(ExampleLayer())


run_application(Sandbox)
```

A shader file holds both stages:

```glsl
#type vertex
#version 330 core
layout(location = 0) in vec3 a_Position;
layout(location = 1) in vec4 a_Color;
uniform mat4 u_ViewProjection;
uniform mat4 u_TransformMatrix;
out vec4 v_Color;
void main() {
    v_Color = a_Color;
    gl_Position = u_ViewProjection * u_TransformMatrix * vec4(a_Position, 1.0);
}

#type fragment
#version 330 core
in vec4 v_Color;
out vec4 color;
void main() { color = v_Color; }
```

`Application` also accepts a ready-made `window` and `renderer`, and a
`clock` function, which lets it run without a display.

## Handling events

```python
from runeengine.events import EventCategory, EventDispatcher, WindowResizeEvent

def on_resize(event):
    print(event.width, event.height)
    return False  # not handled; lower layers still see it

def on_event(event):
    if event.is_in_category(EventCategory.APPLICATION):
        EventDispatcher(event).dispatch(WindowResizeEvent, on_resize)
```

## Profiling

```python
from runeengine.instrumentor import Instrumentor, profile_function, profile_scope

@profile_function
def update():
    with profile_scope("physics"):
        ...

Instrumentor.get().begin_session("Runtime", "Profiling-Runtime.json")
update()
Instrumentor.get().end_session()
```

The resulting file opens in any viewer that reads the Chrome trace format.

## What it does not do

- There is no built-in user-interface overlay. `Layer.on_imgui_render` is
  called once per frame after every layer's `on_update`, but nothing is
  drawn for it unless your layer draws something itself.
- There is no command-line program; the package is used as a library.
- Only an OpenGL backend exists.

## Requirements

Python 3.10 or later, with numpy, pyglet and pillow. Drawing needs a display
on which pyglet can open an OpenGL window with shader support.