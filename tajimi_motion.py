import logging
import math
import random
from dataclasses import dataclass, field

from tajimi_core import make_postal, make_settings, mix_colors, recolor_tiles, render_svg

logger = logging.getLogger(__name__)


# ============================================================================
# EASING
# ============================================================================

BACK_C1 = 1.70158
BACK_C3 = BACK_C1 + 1


def clamp(value, low=0.0, high=1.0):
    return low if value < low else high if value > high else value


def progress(frame, delay, duration):
    """Fraction of [delay, delay + duration] elapsed at frame, clamped to [0, 1].

    A zero duration is a step at delay.
    """
    if duration <= 0:
        return 1.0 if frame >= delay else 0.0
    return clamp((frame - delay) / duration)


def ease_in_cubic(x):
    return x * x * x


def ease_in_out_cubic(x):
    return 4 * x * x * x if x < 0.5 else 1 - math.pow(-2 * x + 2, 3) / 2


def ease_in_out_sine(x):
    return -(math.cos(math.pi * x) - 1) / 2


def ease_in_back(x):
    return BACK_C3 * x * x * x - BACK_C1 * x * x


def ease_out_back(x):
    # overshoots past 1 before settling
    return 1 + BACK_C3 * math.pow(x - 1, 3) + BACK_C1 * math.pow(x - 1, 2)


def ease_out_circ(x):
    return math.sqrt(max(1 - math.pow(x - 1, 2), 0.0))


def ease_in_out_expo(x):
    if x <= 0:
        return 0.0
    if x >= 1:
        return 1.0
    if x < 0.5:
        return math.pow(2, 20 * x - 10) / 2
    return (2 - math.pow(2, -20 * x + 10)) / 2


def pulse_sine_squared(x):
    """0 -> 1 -> 0 over one period; used for the tile color breathing."""
    return math.sin(math.pi * x) ** 2


EASINGS = {
    'in_cubic': ease_in_cubic,
    'in_out_cubic': ease_in_out_cubic,
    'in_out_sine': ease_in_out_sine,
    'in_back': ease_in_back,
    'out_back': ease_out_back,
    'out_circ': ease_out_circ,
    'in_out_expo': ease_in_out_expo,
}


# ============================================================================
# MOTION RECORDS
# ============================================================================

@dataclass(frozen=True)
class BuildingMotion:
    delay: float
    duration: float
    start_x: float
    end_x: float
    tiles_end: float

    @property
    def entrance_end(self):
        return self.delay + self.duration


@dataclass(frozen=True)
class TileMotion:
    in_delay: float
    in_duration: float
    main_delay: float
    main_duration: float


@dataclass(frozen=True)
class WindowMotion:
    delay: float
    duration: float
    silhouette_rest: float
    silhouette_hidden: float


@dataclass
class BuildingTrack:
    motion: BuildingMotion
    tiles: list = field(default_factory=list)
    windows: list = field(default_factory=list)


@dataclass
class Timeline:
    cycle_length: int
    tracks: list


# ============================================================================
# SETUP
# ============================================================================

# Settings read by setup_animation or animate_frame.
TIMING_KEYS = (
    'cycle_length', 'building_budget', 'building_duration_min',
    'building_duration_max', 'tile_reveal_span', 'tile_building_delay',
    'tile_in_duration', 'tile_animation', 'tile_main_delay_max',
    'window_reveal_span', 'window_duration', 'silhouette_delay',
    'exit_start', 'exit_end',
)

def _entrance_timing(settings, rng):
    """Random (delay, duration) whose sum never passes building_budget."""
    budget = settings['building_budget']
    low = min(settings['building_duration_min'], budget)
    high = min(settings['building_duration_max'], budget)
    duration = rng.uniform(low, high)
    delay = rng.uniform(0.0, budget - duration)
    return delay, duration


def setup_animation(tajimi, settings, rng):
    """Assign every building, tile and window its motion record for one generation.

    Buildings exit toward the canvas side they already stand on. Tile
    entrances are staggered by tile index across tile_reveal_span and shifted
    by building index; window entrances are staggered across
    window_reveal_span.
    """
    canvas_left, _, canvas_right, _ = tajimi.visible.bounds
    canvas_center = (canvas_left + canvas_right) * 0.5

    tracks = []
    for b_index, building in enumerate(tajimi.buildings):
        delay, duration = _entrance_timing(settings, rng)
        # never slide a building back into view
        if building.center_x < canvas_center:
            end_x = min(canvas_left - building.width, building.x)
        else:
            end_x = max(canvas_right, building.x)

        tiles = []
        tile_count = len(building.tiles)
        for t_index, _tile in enumerate(building.tiles):
            in_delay = (t_index / tile_count * settings['tile_reveal_span']
                        + b_index * settings['tile_building_delay'])
            tiles.append(TileMotion(
                in_delay=in_delay,
                in_duration=settings['tile_in_duration'],
                main_delay=rng.uniform(0.0, settings['tile_main_delay_max']),
                main_duration=settings['tile_animation'] * rng.uniform(0.75, 1.25),
            ))
        tiles_end = delay + duration
        if tiles:
            tiles_end += max(t.in_delay + t.in_duration for t in tiles)

        windows = []
        window_count = len(building.windows)
        for w_index, window in enumerate(building.windows):
            glass_h = window.glass.bounds[3] - window.glass.bounds[1]
            windows.append(WindowMotion(
                delay=w_index / window_count * settings['window_reveal_span'],
                duration=settings['window_duration'],
                silhouette_rest=window.silhouette_offset,
                silhouette_hidden=window.silhouette_offset + glass_h,
            ))

        motion = BuildingMotion(delay=delay, duration=duration, start_x=building.x,
                                end_x=end_x, tiles_end=tiles_end)
        tracks.append(BuildingTrack(motion=motion, tiles=tiles, windows=windows))

    logger.debug("timeline set up for %d buildings", len(tracks))
    return Timeline(cycle_length=settings['cycle_length'], tracks=tracks)


# ============================================================================
# PER-FRAME UPDATE
# ============================================================================

def building_entrance_scale(motion, frame):
    return max(ease_out_back(progress(frame, motion.delay, motion.duration)), 0.0)


def tile_color_progress(tile_motion, elapsed):
    """Pulse progress for a tile whose reveal finished `elapsed` frames ago."""
    if elapsed < tile_motion.main_delay or tile_motion.main_duration <= 0:
        return 0.0
    phase = ((elapsed - tile_motion.main_delay) % tile_motion.main_duration) / tile_motion.main_duration
    return pulse_sine_squared(clamp(phase))


def animate_frame(tajimi, timeline, frame, settings):
    """Write the animated fields of every element for one global frame.

    Per building the phases run entrance, tile reveal, window reveal, each
    starting where the previous one ends. The exit is anchored to the global
    exit_start/exit_end window so all buildings leave together.
    """
    f = frame % timeline.cycle_length
    exit_progress = progress(f, settings['exit_start'],
                             settings['exit_end'] - settings['exit_start'])
    exit_eased = ease_in_back(exit_progress)

    for building, track in zip(tajimi.buildings, timeline.tracks):
        motion = track.motion
        building.scale = building_entrance_scale(motion, f)
        building.offset_x = exit_eased * (motion.end_x - motion.start_x)

        for tile, tile_motion in zip(building.tiles, track.tiles):
            start = motion.entrance_end + tile_motion.in_delay
            tile.scale = ease_out_circ(progress(f, start, tile_motion.in_duration))
            elapsed = f - (start + tile_motion.in_duration)
            tile.color = mix_colors(tile.current_color, tile.next_color,
                                    tile_color_progress(tile_motion, elapsed))

        for window, window_motion in zip(building.windows, track.windows):
            start = motion.tiles_end + window_motion.delay
            window.scale = max(ease_out_back(progress(f, start, window_motion.duration)), 0.0)
            slide = ease_in_out_cubic(progress(f, start + settings['silhouette_delay'],
                                               window_motion.duration))
            window.silhouette_offset = (window_motion.silhouette_hidden
                                        + (window_motion.silhouette_rest
                                           - window_motion.silhouette_hidden) * slide)
    return f


# ============================================================================
# SESSION
# ============================================================================

class AnimationSession:
    """Current postal, its timeline, the frame counter and the play flag.

    All randomness comes from one random.Random seeded at construction, so a
    session replays the same sequence of generations for the same seed.
    """

    def __init__(self, settings=None, seed=None):
        self.settings = make_settings(settings)
        self.seed = seed
        self.rng = random.Random(seed)
        self.frame = 0
        self.playing = True
        self.postal = None
        self.timeline = None
        self.regenerate()

    @property
    def tajimi(self):
        return self.postal.tajimi

    @property
    def cycle_frame(self):
        return self.frame % self.timeline.cycle_length

    def regenerate(self, seed=None):
        """Throw away the current postal and build a new one from frame 0."""
        if seed is not None:
            self.seed = seed
            self.rng.seed(seed)
        self.postal = make_postal(self.settings, self.rng)
        self.timeline = setup_animation(self.postal.tajimi, self.settings, self.rng)
        self.frame = 0
        animate_frame(self.postal.tajimi, self.timeline, self.frame, self.settings)
        return self.postal

    def update_settings(self, overrides, regenerate=False):
        """Apply new settings to the current postal.

        Tile color changes recolor the tiles and timing changes rebuild the
        timeline; layout keys only take effect with regenerate=True.
        """
        merged = dict(self.settings)
        merged.update(overrides)
        self.settings = make_settings(merged)
        if regenerate:
            return self.regenerate()
        if 'tile_color_a' in overrides or 'tile_color_b' in overrides:
            recolor_tiles(self.postal.tajimi, self.settings, self.rng)
        if any(key in TIMING_KEYS for key in overrides):
            self.timeline = setup_animation(self.postal.tajimi, self.settings, self.rng)
        animate_frame(self.postal.tajimi, self.timeline, self.frame, self.settings)
        return self.postal

    def toggle(self):
        self.playing = not self.playing
        return self.playing

    def seek(self, frame):
        self.frame = max(int(frame), 0)
        return animate_frame(self.postal.tajimi, self.timeline, self.frame, self.settings)

    def tick(self):
        """Advance one frame when playing; returns the frame within the cycle."""
        if self.playing:
            self.frame += 1
        return animate_frame(self.postal.tajimi, self.timeline, self.frame, self.settings)

    def render(self, progress_callback=None):
        return render_svg(self.postal, self.settings, progress_callback=progress_callback)
