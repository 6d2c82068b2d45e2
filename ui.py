import time

from asciimatics.effects import Effect
from asciimatics.event import KeyboardEvent
from asciimatics.exceptions import ResizeScreenError
from asciimatics.scene import Scene
from asciimatics.screen import Screen

# Channel thresholds for the 6x6x6 xterm colour cube (levels 0, 95, 135, 175, 215, 255).
_CUBE_STEPS = (48, 115, 155, 195, 235)


def _cube_level(c: int) -> int:
    level = 0
    for step in _CUBE_STEPS:
        if c >= step:
            level += 1
    return level


def rgb_to_xterm_index(r: int, g: int, b: int) -> int:
    """Nearest entry of the xterm-256 colour cube."""
    return 16 + 36 * _cube_level(r) + 6 * _cube_level(g) + _cube_level(b)


# Simple 8-colour mapping from RGB to nearest basic terminal colour index.
def rgb_to_basic_index(r: int, g: int, b: int) -> int:
    if r > 200 and g > 200 and b > 200:
        return Screen.COLOUR_WHITE
    if r > 200 and g < 100 and b < 100:
        return Screen.COLOUR_RED
    if g > 200 and r < 100 and b < 100:
        return Screen.COLOUR_GREEN
    if b > 200 and r < 100 and g < 100:
        return Screen.COLOUR_BLUE
    if r > 200 and g > 200 and b < 100:
        return Screen.COLOUR_YELLOW
    if r > 200 and b > 200 and g < 100:
        return Screen.COLOUR_MAGENTA
    if g > 200 and b > 200 and r < 100:
        return Screen.COLOUR_CYAN
    return Screen.COLOUR_BLACK


def colour_mapper(colours: int):
    return rgb_to_xterm_index if colours >= 256 else rgb_to_basic_index


def half_block_render(screen, canvas):
    """Renders the committed canvas using half-blocks, two pixel rows per cell."""
    to_index = colour_mapper(screen.colours)
    pixels = canvas.buffer
    for y in range(0, min(canvas.height, screen.height * 2), 2):
        row = y // 2
        for x in range(min(canvas.width, screen.width)):
            upper = pixels[y, x]
            fg = to_index(int(upper[0]), int(upper[1]), int(upper[2]))
            if y + 1 < canvas.height:
                lower = pixels[y + 1, x]
                bg = to_index(int(lower[0]), int(lower[1]), int(lower[2]))
            else:
                bg = Screen.COLOUR_BLACK

            # Same colour in both halves: a full block renders crisper.
            if fg == bg:
                screen.print_at('█', x, row, colour=fg, bg=bg)
            else:
                screen.print_at('▀', x, row, colour=fg, bg=bg)


class CanvasEffect(Effect):
    """Asciimatics Effect that shows a canvas using half-block chars."""

    def __init__(self, screen: Screen, canvas):
        super().__init__(screen)
        self._canvas = canvas

    def reset(self):
        pass

    def stop_frame(self):
        # Runs until the viewer exits.
        return 0

    def _update(self, frame_no):
        half_block_render(self._screen, self._canvas)


def _show(screen, canvas):
    screen.set_scenes([Scene([CanvasEffect(screen, canvas)], duration=-1)])
    while True:
        event = screen.get_event()
        if isinstance(event, KeyboardEvent) and event.key_code in (ord('q'), ord('Q')):
            return
        screen.draw_next_frame()
        time.sleep(1 / 30)


def view(canvas):
    """Shows ``canvas`` full-screen until the user presses q."""
    while True:
        try:
            Screen.wrapper(_show, arguments=[canvas])
            return
        except ResizeScreenError:
            pass
