import colorsys
import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import drawsvg as draw
from shapely import affinity
from shapely.geometry import Polygon, box

logger = logging.getLogger(__name__)


# ============================================================================
# SETTINGS
# ============================================================================

DEFAULT_SETTINGS = {
    # palette
    'frame_color': '#FFFFFF',
    'background_color': '#FDEBED',
    'stroke_color': '#D9ACF5',
    'tile_color_a': '#FFCEFE',
    'tile_color_b': '#AAE3E2',
    'window_color': '#FDF7C3',
    'window_shine_color': '#FDF7C3',
    # postcard
    'postal_width': 540,
    'postal_height': 540,
    'postal_frame_offset_factor': 0.9,
    'postal_frame_size_factor': 0.1,
    'postal_frame_radius': 4.0,
    'stroke_width': 1.5,
    # buildings
    'building_height_min_factor': 0.35,
    'building_height_max_factor': 0.7,
    'building_width_min_factor': 0.225,
    'building_width_max_factor': 0.375,
    'building_width_factor_threshold': 0.25,
    'building_width_minimum_factor': 0.15,
    'building_overscan_factor': 0.3,
    'building_shrink_factor': 0.65,
    'building_offset_jitter': 20.0,
    'building_shadow': True,
    'shadow_offset': 8.0,
    'shadow_opacity': 0.35,
    'max_buildings': 64,
    # tiles
    'tile_count_min': 8,
    'tile_count_max': 12,
    'tile_brightness_jitter': 0.3,
    # windows
    'window_radius': 1.5,
    'window_frame_offset_factor': 0.135,
    'window_min_frame_offset': 3.0,
    'window_grid_offset_factor': 0.1,
    'window_grid_cols': 2,
    'window_space_offset_factor': 0.175,
    'window_probability': 2.0 / 3.0,
    'silhouette_probability': 2.0 / 3.0,
    'window_shine': True,
    'window_weights': None,
    # animation (frames)
    'cycle_length': 340,
    'building_budget': 60,
    'building_duration_min': 20,
    'building_duration_max': 45,
    'tile_reveal_span': 60,
    'tile_building_delay': 2.0,
    'tile_in_duration': 12,
    'tile_animation': 80,
    'tile_main_delay_max': 40,
    'window_reveal_span': 40,
    'window_duration': 14,
    'silhouette_delay': 6,
    'exit_start': 265,
    'exit_end': 340,
}

# Factors that feed random sampling or divisions and so must stay above zero.
_POSITIVE_KEYS = (
    'postal_width', 'postal_height', 'postal_frame_offset_factor',
    'building_height_min_factor', 'building_height_max_factor',
    'building_width_min_factor', 'building_width_max_factor',
    'building_width_minimum_factor', 'building_shrink_factor',
    'tile_count_min', 'tile_count_max',
    'cycle_length', 'tile_in_duration', 'tile_animation', 'window_duration',
    'building_duration_min', 'building_duration_max', 'max_buildings',
)

_NON_NEGATIVE_KEYS = (
    'postal_frame_size_factor', 'postal_frame_radius', 'stroke_width',
    'building_width_factor_threshold', 'building_overscan_factor',
    'building_offset_jitter', 'shadow_offset', 'tile_brightness_jitter',
    'window_radius', 'window_frame_offset_factor', 'window_min_frame_offset',
    'window_grid_offset_factor', 'window_grid_cols', 'window_space_offset_factor',
    'building_budget', 'tile_reveal_span', 'tile_building_delay',
    'tile_main_delay_max', 'window_reveal_span', 'silhouette_delay',
    'exit_start', 'exit_end',
)

_UNIT_KEYS = (
    'window_probability', 'silhouette_probability', 'shadow_opacity',
)

_INT_KEYS = (
    'postal_width', 'postal_height', 'max_buildings', 'tile_count_min',
    'tile_count_max', 'window_grid_cols', 'cycle_length',
)

_RANGE_PAIRS = (
    ('building_height_min_factor', 'building_height_max_factor'),
    ('building_width_min_factor', 'building_width_max_factor'),
    ('tile_count_min', 'tile_count_max'),
    ('building_duration_min', 'building_duration_max'),
    ('exit_start', 'exit_end'),
)

MIN_FACTOR = 1e-3


def make_settings(overrides=None):
    """Merge overrides into DEFAULT_SETTINGS and clamp degenerate values.

    Unknown keys raise KeyError. Non-positive factors, out-of-range
    probabilities and inverted min/max pairs are corrected with a warning
    instead of failing, so random sampling always stays well defined.
    """
    settings = dict(DEFAULT_SETTINGS)
    for key, value in (overrides or {}).items():
        if key not in DEFAULT_SETTINGS:
            raise KeyError("unknown setting: {!r}".format(key))
        settings[key] = value

    for key in _POSITIVE_KEYS:
        if settings[key] <= 0:
            logger.warning("setting %s=%r must be positive, clamping", key, settings[key])
            settings[key] = 1 if key in _INT_KEYS else MIN_FACTOR
    for key in _NON_NEGATIVE_KEYS:
        if settings[key] < 0:
            logger.warning("setting %s=%r must not be negative, clamping", key, settings[key])
            settings[key] = 0
    for key in _UNIT_KEYS:
        value = min(max(settings[key], 0.0), 1.0)
        if value != settings[key]:
            logger.warning("setting %s=%r outside [0, 1], clamping", key, settings[key])
            settings[key] = value
    for key in _INT_KEYS:
        settings[key] = int(settings[key])

    for low_key, high_key in _RANGE_PAIRS:
        if settings[low_key] > settings[high_key]:
            logger.warning("settings %s > %s, swapping", low_key, high_key)
            settings[low_key], settings[high_key] = settings[high_key], settings[low_key]

    if settings['exit_end'] > settings['cycle_length']:
        logger.warning("exit_end past cycle_length, clamping")
        settings['exit_end'] = settings['cycle_length']
        settings['exit_start'] = min(settings['exit_start'], settings['exit_end'])
    return settings


# ============================================================================
# COLOR HELPERS
# ============================================================================

# Lightness shift per unit of brighten(), close to chroma-js' Lab step.
BRIGHTEN_STEP = 0.18


def hex_to_rgb(color):
    value = color.lstrip('#')
    if len(value) == 3:
        value = ''.join(c * 2 for c in value)
    if len(value) != 6:
        raise ValueError("not a hex color: {!r}".format(color))
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hex(rgb):
    channels = [min(max(int(round(c)), 0), 255) for c in rgb]
    return '#{:02X}{:02X}{:02X}'.format(*channels)


def brighten(color, amount):
    """Shift the HLS lightness of a hex color; negative amounts darken."""
    r, g, b = (c / 255.0 for c in hex_to_rgb(color))
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    l = min(max(l + amount * BRIGHTEN_STEP, 0.0), 1.0)
    return rgb_to_hex(c * 255.0 for c in colorsys.hls_to_rgb(h, l, s))


def mix_colors(color_a, color_b, t):
    """Linear RGB interpolation; t is clamped so the result stays between a and b."""
    t = min(max(t, 0.0), 1.0)
    a = hex_to_rgb(color_a)
    b = hex_to_rgb(color_b)
    return rgb_to_hex(ca + (cb - ca) * t for ca, cb in zip(a, b))


# ============================================================================
# MODEL
# ============================================================================

class WindowVariant(Enum):
    """Every legal window accent combination.

    The divider is independent of the accent; shine and silhouette share the
    glass and never appear together.
    """
    PLAIN = (False, None)
    DIVIDED = (True, None)
    SHINE = (False, 'shine')
    DIVIDED_SHINE = (True, 'shine')
    SILHOUETTE = (False, 'silhouette')
    DIVIDED_SILHOUETTE = (True, 'silhouette')

    @property
    def divided(self):
        return self.value[0]

    @property
    def shine(self):
        return self.value[1] == 'shine'

    @property
    def silhouette(self):
        return self.value[1] == 'silhouette'

    @classmethod
    def compose(cls, divided, accent=None):
        for variant in cls:
            if variant.value == (divided, accent):
                return variant
        raise ValueError("unknown window accent: {!r}".format(accent))


@dataclass
class Tile:
    box: Polygon
    current_color: str
    next_color: str
    building_index: int = 0
    color: str = ''
    scale: float = 1.0

    def __post_init__(self):
        if not self.color:
            self.color = self.current_color


@dataclass
class Window:
    frame: Polygon
    glass: Polygon
    inset: float
    variant: WindowVariant
    division: tuple
    division_width: float
    shines: list = field(default_factory=list)
    head: Optional[tuple] = None
    torso: Optional[dict] = None
    scale: float = 1.0
    silhouette_offset: float = 0.0

    @property
    def center(self):
        c = self.frame.centroid
        return c.x, c.y


@dataclass
class Building:
    point: tuple
    size: tuple
    footprint: Polygon
    shadow: Optional[Polygon]
    tiles: list
    windows: list
    scale: float = 1.0
    offset_x: float = 0.0

    @property
    def x(self):
        return self.point[0]

    @property
    def width(self):
        return self.size[0]

    @property
    def height(self):
        return self.size[1]

    @property
    def area(self):
        return self.footprint.area

    @property
    def center_x(self):
        return self.point[0] + self.size[0] * 0.5


@dataclass
class Tajimi:
    point: tuple
    size: tuple
    visible: Polygon
    stroke_frame: Polygon
    buildings: list


@dataclass
class Postal:
    size: tuple
    background: Polygon
    frame: Polygon
    tajimi: Tajimi


def _rect(point, size):
    x, y = point
    w, h = max(size[0], 0.0), max(size[1], 0.0)
    return box(x, y, x + w, y + h)


# ============================================================================
# GRID & TILES
# ============================================================================

def make_grid(rows, cols, point, size):
    """Split a rectangle into rows x cols equal cells, row-major.

    Returns a list of (x, y, w, h). Non-positive counts or sizes give [].
    """
    width, height = size
    if rows <= 0 or cols <= 0 or width <= 0 or height <= 0:
        return []
    row_size = height / rows
    col_size = width / cols
    cells = []
    for row in range(rows):
        for col in range(cols):
            cells.append((point[0] + col * col_size, point[1] + row * row_size,
                          col_size, row_size))
    return cells


def jitter_tile_colors(settings, rng):
    """Draw a (current, next) color pair around the two tile base colors."""
    jitter = settings['tile_brightness_jitter']
    current = brighten(settings['tile_color_a'], rng.uniform(-jitter, jitter))
    nxt = brighten(settings['tile_color_b'], rng.uniform(-jitter, jitter))
    return current, nxt


def make_tiles(point, size, settings, rng, building_index=0):
    width, height = size
    if width <= 0 or height <= 0:
        return []
    count = rng.randint(settings['tile_count_min'], settings['tile_count_max'])
    edge = width / count
    rows = max(1, int(math.ceil(height / edge - 1e-9)))

    tiles = []
    for x, y, w, h in make_grid(rows, count, point, size):
        current, nxt = jitter_tile_colors(settings, rng)
        tiles.append(Tile(box=box(x, y, x + w, y + h), current_color=current,
                          next_color=nxt, building_index=building_index))
    return tiles


def recolor_tiles(tajimi, settings, rng):
    """Redraw every tile's color pair after a palette change; geometry is kept."""
    for building in tajimi.buildings:
        for tile in building.tiles:
            tile.current_color, tile.next_color = jitter_tile_colors(settings, rng)
            tile.color = tile.current_color


# ============================================================================
# WINDOWS
# ============================================================================

# name -> (scale (x, y), divider)
WINDOW_PRESETS = {
    'wide_divided': ((1.0, 0.75), True),
    'square_divided': ((1.0, 1.0), True),
    'small_square': ((0.75, 0.75), False),
    'small_tall': ((0.75, 1.0), False),
}

DEFAULT_WINDOW_WEIGHTS = {name: 1.0 for name in WINDOW_PRESETS}


def get_window_weight(name, window_weights):
    if window_weights is None:
        return DEFAULT_WINDOW_WEIGHTS[name]
    return max(window_weights.get(name, DEFAULT_WINDOW_WEIGHTS[name]), 0.0)


def pick_window_preset(settings, rng):
    """Weighted preset draw; None when every preset is weighted out."""
    names = list(WINDOW_PRESETS)
    weights = [get_window_weight(n, settings['window_weights']) for n in names]
    if sum(weights) <= 0:
        return None
    return rng.choices(names, weights=weights, k=1)[0]


def pick_window_variant(divided, settings, rng):
    if divided:
        accent = 'shine'
    elif rng.random() < settings['silhouette_probability']:
        accent = 'silhouette'
    else:
        accent = 'shine'
    if accent == 'shine' and not settings['window_shine']:
        accent = None
    return WindowVariant.compose(divided, accent)


def window_inset(width, settings):
    """Glass inset inside the frame.

    The width fraction alone collapses on small windows, so the inset is the
    largest of that fraction, a rescaled term that grows as the window
    shrinks, and a hard minimum.
    """
    factor = settings['window_frame_offset_factor']
    inset = width * factor
    if width > 0:
        inset = max((1.25 / width * factor) * 190.0, inset)
    return max(inset, settings['window_min_frame_offset'])


def shine_bands(glass_point, glass_size, rng):
    """2-3 diagonal light bands running across the glass, as point lists."""
    gx, gy = glass_point
    gw, gh = glass_size
    bands = []
    position = 0.0
    for _ in range(rng.randrange(2, 4)):
        dimension = rng.uniform(0.1, 0.3)
        offset = rng.uniform(0.05, 0.3)
        start = position + offset
        end = start + dimension
        bands.append([
            (gx + 2.0 * gw * start, gy),
            (gx + 2.0 * gw * end, gy),
            (gx, gy + 2.0 * gh * end),
            (gx, gy + 2.0 * gh * start),
        ])
        position = end
    return bands


def silhouette_shapes(glass_point, glass_size):
    """Head circle and torso arc of a person standing behind the glass."""
    gx, gy = glass_point
    gw, gh = glass_size
    head = (gx + gw * 0.5, gy + gh * 0.5, gw * 0.2)

    # circle through (0.2w, h), (0.5w, 0.6h), (0.8w, h)
    cy = (0.09 * gw * gw + 0.64 * gh * gh) / (0.8 * gh)
    radius = cy - 0.6 * gh
    torso = {
        'start': (gx + gw * 0.2, gy + gh),
        'end': (gx + gw * 0.8, gy + gh),
        'radius': radius,
        'large_arc': cy < gh,
    }
    return head, torso


def make_window(point, size, settings, variant, rng):
    """Build one window; None if the frame is too small to hold any glass."""
    width, height = size
    inset = window_inset(width, settings)
    glass_w = width - inset * 2.0
    glass_h = height - inset * 2.0
    if glass_w <= 0 or glass_h <= 0:
        return None

    glass_point = (point[0] + inset, point[1] + inset)
    glass_size = (glass_w, glass_h)
    division = ((glass_point[0] + glass_w * 0.5, glass_point[1]),
                (glass_point[0] + glass_w * 0.5, glass_point[1] + glass_h))

    window = Window(
        frame=_rect(point, size),
        glass=_rect(glass_point, glass_size),
        inset=inset,
        variant=variant,
        division=division,
        division_width=settings['stroke_width'] if variant.divided else 0.0,
    )
    if variant.shine:
        window.shines = shine_bands(glass_point, glass_size, rng)
    if variant.silhouette:
        window.head, window.torso = silhouette_shapes(glass_point, glass_size)
    return window


def generate_window(point, size, settings, rng):
    preset = pick_window_preset(settings, rng)
    if preset is None:
        return None
    (sx, sy), divided = WINDOW_PRESETS[preset]
    adjusted = (size[0] * sx, size[1] * sy)
    centered = (point[0] + (size[0] - adjusted[0]) * 0.5,
                point[1] + (size[1] - adjusted[1]) * 0.5)
    variant = pick_window_variant(divided, settings, rng)
    return make_window(centered, adjusted, settings, variant, rng)


def make_window_grid(point, size, settings, rng):
    """Scatter windows over a column grid inside a building body.

    Columns share the width left after the edge offset on both sides; rows
    are as many square cells as fit below the top edge offset. Each cell
    holds a window with probability window_probability.
    """
    width, height = size
    cols = settings['window_grid_cols']
    if cols <= 0 or width <= 0 or height <= 0:
        return []

    edge = width * settings['window_grid_offset_factor']
    space = (width - edge * 2.0) / cols
    if space <= 0:
        return []
    rows = int(math.floor((height - edge) / space))
    space_offset = space * settings['window_space_offset_factor']
    cell = space - space_offset * 2.0
    if cell <= 0:
        return []

    windows = []
    for col in range(cols):
        for row in range(rows):
            if rng.random() >= settings['window_probability']:
                continue
            window_point = (point[0] + col * space + edge + space_offset,
                            point[1] + row * space + edge + space_offset)
            window = generate_window(window_point, (cell, cell), settings, rng)
            if window is not None:
                windows.append(window)
    return windows


# ============================================================================
# BUILDINGS & STREET
# ============================================================================

def make_building(point, size, settings, rng, index=0):
    size = (max(size[0], 0.0), max(size[1], 0.0))
    footprint = _rect(point, size)
    shadow = None
    if settings['building_shadow']:
        shadow = affinity.translate(footprint, 0.0, settings['shadow_offset'])
    return Building(
        point=point,
        size=size,
        footprint=footprint,
        shadow=shadow,
        tiles=make_tiles(point, size, settings, rng, building_index=index),
        windows=make_window_grid(point, size, settings, rng),
    )


def _sample_height(settings, rng, target_height):
    return rng.uniform(settings['building_height_min_factor'] * target_height,
                       settings['building_height_max_factor'] * target_height)


def make_tajimi(point, size, settings, rng, view_width=None):
    """Pack buildings left to right across the canvas.

    The row starts half an overscan to the left of the canvas so buildings
    bleed past both edges. Buildings are drawn until the remaining width
    drops under the threshold, then a filler building takes exactly what is
    left, so the widths always sum to the overscanned width. The result is
    sorted by footprint area: larger buildings are drawn last, in front.

    Args:
        point: top-left corner of the visible canvas
        size: (width, height) of the visible canvas
        view_width: reference width for the threshold and minimum building
                    width factors (defaults to the canvas width)
    """
    width, height = size
    reference = view_width if view_width is not None else width
    minimum_building_width = settings['building_width_minimum_factor'] * reference
    minimum_available_space = settings['building_width_factor_threshold'] * reference
    overscan = width * settings['building_overscan_factor']
    jitter = settings['building_offset_jitter']

    available_width = width + overscan
    current_x = point[0] - overscan * 0.5
    tajimi_point = (current_x, point[1])
    tajimi_size = (available_width, height)

    buildings = []
    while (available_width > minimum_available_space
           and len(buildings) < settings['max_buildings']):
        building_height = _sample_height(settings, rng, height)
        building_width = math.ceil(rng.uniform(
            building_height * settings['building_width_min_factor'],
            building_height * settings['building_width_max_factor'],
        ))
        if available_width - building_width < minimum_building_width:
            building_width *= settings['building_shrink_factor']
        # both this building and the remainder must keep the minimum width
        limit = available_width - minimum_building_width
        if limit < minimum_building_width:
            break
        building_width = min(building_width, limit)

        building_x = current_x + rng.uniform(-jitter, jitter)
        building = make_building(
            (building_x, point[1] + height - building_height),
            (building_width, building_height),
            settings, rng, index=len(buildings),
        )
        buildings.append(building)
        available_width -= building.width
        current_x += building.width

    building_height = _sample_height(settings, rng, height)
    buildings.append(make_building(
        (current_x, point[1] + height - building_height),
        (available_width, building_height),
        settings, rng, index=len(buildings),
    ))
    buildings.sort(key=lambda b: b.area)

    sw = settings['stroke_width']
    visible = _rect(point, size)
    stroke_frame = _rect((point[0] + sw, point[1] + sw), (width - sw * 2.0, height - sw * 2.0))
    logger.debug("packed %d buildings over %.1f units", len(buildings), tajimi_size[0])
    return Tajimi(point=tajimi_point, size=tajimi_size, visible=visible,
                  stroke_frame=stroke_frame, buildings=buildings)


def make_postal(settings, rng=None):
    """Lay out the postcard: page background, card frame and the street inside."""
    if rng is None:
        rng = random.Random()
    view_w, view_h = settings['postal_width'], settings['postal_height']
    frame_offset = (view_w - view_w * settings['postal_frame_offset_factor']) * 0.5
    frame_point = (frame_offset, frame_offset)
    frame_size = (view_w - frame_offset * 2.0, view_h - frame_offset * 2.0)

    canvas_offset = frame_size[0] * settings['postal_frame_size_factor'] * 0.5
    canvas_point = (frame_point[0] + canvas_offset, frame_point[1] + canvas_offset)
    canvas_size = (frame_size[0] - canvas_offset * 2.0, frame_size[1] - canvas_offset * 2.0)

    tajimi = make_tajimi(canvas_point, canvas_size, settings, rng, view_width=view_w)
    return Postal(size=(view_w, view_h), background=_rect((0, 0), (view_w, view_h)),
                  frame=_rect(frame_point, frame_size), tajimi=tajimi)


# ============================================================================
# SVG RENDERING
# ============================================================================

def _draw_box(poly, **kwargs):
    """drawsvg Rectangle for a box polygon; None when it has no area."""
    if poly is None or poly.is_empty:
        return None
    minx, miny, maxx, maxy = poly.bounds
    if maxx - minx <= 0 or maxy - miny <= 0:
        return None
    return draw.Rectangle(minx, miny, maxx - minx, maxy - miny, **kwargs)


def _append(group, element):
    if element is not None:
        group.append(element)


def _scale_about(cx, cy, s):
    return "translate({},{}) scale({}) translate({},{})".format(cx, cy, s, -cx, -cy)


def draw_window(window, settings):
    if window.scale <= 0:
        return None
    sw = settings['stroke_width']
    stroke = settings['stroke_color']
    radius = settings['window_radius']
    cx, cy = window.center
    group = draw.Group(transform=_scale_about(cx, cy, window.scale))

    _append(group, _draw_box(window.frame, fill='#FFFFFF', stroke=stroke,
                             stroke_width=sw, rx=radius))

    clip = draw.ClipPath()
    _append(clip, _draw_box(window.glass))
    glass_group = draw.Group(clip_path=clip)
    _append(glass_group, _draw_box(window.glass, fill=settings['window_color'], rx=radius))

    shine_color = brighten(settings['window_shine_color'], 1.5)
    for band in window.shines:
        coords = [c for point in band for c in point]
        glass_group.append(draw.Lines(*coords, close=True, fill=shine_color))

    if window.head is not None:
        person = draw.Group(transform="translate(0,{})".format(window.silhouette_offset))
        hx, hy, hr = window.head
        person.append(draw.Circle(hx, hy, hr, fill=stroke))
        torso = window.torso
        path = draw.Path(fill=stroke)
        path.M(*torso['start'])
        path.A(torso['radius'], torso['radius'], 0, int(torso['large_arc']), 1, *torso['end'])
        path.Z()
        person.append(path)
        glass_group.append(person)

    (x1, y1), (x2, y2) = window.division
    glass_group.append(draw.Line(x1, y1, x2, y2, stroke=stroke,
                                 stroke_width=window.division_width))
    _append(glass_group, _draw_box(window.glass, fill='none', stroke=stroke,
                                   stroke_width=sw, rx=radius))
    group.append(glass_group)
    return group


def draw_building(building, settings):
    """Group for one building, drawn shadow, tiles, body outline, windows."""
    sw = settings['stroke_width']
    stroke = settings['stroke_color']
    if building.offset_x:
        group = draw.Group(transform="translate({},0)".format(building.offset_x))
    else:
        group = draw.Group()

    minx, _, maxx, maxy = building.footprint.bounds
    origin = ((minx + maxx) * 0.5, maxy)
    s = building.scale
    body = affinity.scale(building.footprint, xfact=s, yfact=s, origin=origin)

    if building.shadow is not None:
        shadow = affinity.translate(body, 0.0, settings['shadow_offset'])
        _append(group, _draw_box(shadow, fill=stroke, stroke=stroke, stroke_width=sw,
                                 opacity=settings['shadow_opacity']))

    for tile in building.tiles:
        if tile.scale <= 0:
            continue
        tile_box = affinity.scale(tile.box, xfact=tile.scale, yfact=tile.scale, origin='center')
        _append(group, _draw_box(tile_box, fill=tile.color, stroke=stroke, stroke_width=sw))

    _append(group, _draw_box(body, fill='none', stroke=stroke, stroke_width=sw))

    for window in building.windows:
        _append(group, draw_window(window, settings))
    return group


def draw_tajimi(tajimi, settings, progress_callback=None):
    sw = settings['stroke_width']
    radius = settings['postal_frame_radius']
    clip = draw.ClipPath()
    _append(clip, _draw_box(tajimi.visible, rx=radius))

    group = draw.Group(id='tajimi', clip_path=clip)
    _append(group, _draw_box(tajimi.visible, fill=settings['background_color'], rx=radius))
    total = len(tajimi.buildings)
    for index, building in enumerate(tajimi.buildings):
        group.append(draw_building(building, settings))
        if progress_callback:
            progress_callback(index + 1, total)
    _append(group, _draw_box(tajimi.stroke_frame, fill='none', stroke=settings['stroke_color'],
                             stroke_width=sw, rx=radius))
    return group


def render_postal(postal, settings, progress_callback=None):
    """Build the drawsvg Drawing for the postal's current animated state."""
    width, height = postal.size
    d = draw.Drawing(width, height)
    _append(d, _draw_box(postal.background, fill=settings['background_color']))
    _append(d, _draw_box(postal.frame, fill=settings['frame_color'],
                         stroke=settings['stroke_color'],
                         stroke_width=settings['stroke_width'],
                         rx=settings['postal_frame_radius']))
    d.append(draw_tajimi(postal.tajimi, settings, progress_callback=progress_callback))
    return d


def render_svg(postal, settings, progress_callback=None):
    """Render the postal to an SVG string.

    Args:
        postal: Postal from make_postal
        settings: dict from make_settings
        progress_callback: optional callable(current, total) per building
    """
    return render_postal(postal, settings, progress_callback=progress_callback).as_svg()
