import re
import time

import streamlit as st
import streamlit.components.v1 as components

import tajimi_core
import tajimi_motion

DEFAULTS = tajimi_core.DEFAULT_SETTINGS

st.set_page_config(page_title="Tajimi Postcard", layout="wide")
st.title("Tajimi Postcard")

with st.sidebar:
    st.header("Palette")
    palette = {
        'background_color': st.color_picker("Background", DEFAULTS['background_color']),
        'frame_color': st.color_picker("Frame", DEFAULTS['frame_color']),
        'stroke_color': st.color_picker("Stroke", DEFAULTS['stroke_color']),
        'tile_color_a': st.color_picker("Tile A", DEFAULTS['tile_color_a']),
        'tile_color_b': st.color_picker("Tile B", DEFAULTS['tile_color_b']),
        'window_color': st.color_picker("Window", DEFAULTS['window_color']),
        'window_shine_color': st.color_picker("Window Shine", DEFAULTS['window_shine_color']),
    }

    st.header("Buildings")
    height_range = st.slider(
        "Height Factor", 0.1, 1.0,
        (DEFAULTS['building_height_min_factor'], DEFAULTS['building_height_max_factor']), 0.05,
        help="Building height as a fraction of the canvas height")
    width_range = st.slider(
        "Width Factor", 0.05, 1.0,
        (DEFAULTS['building_width_min_factor'], DEFAULTS['building_width_max_factor']), 0.025,
        help="Building width as a fraction of its own height")
    shrink_factor = st.slider("Shrink Factor", 0.1, 1.0, DEFAULTS['building_shrink_factor'], 0.05,
                              help="Applied to a building that would leave a sliver behind it")
    building_shadow = st.checkbox("Drop Shadow", value=True)

    with st.expander("Tiles"):
        tile_count = st.slider("Tiles Per Row", 2, 24,
                               (DEFAULTS['tile_count_min'], DEFAULTS['tile_count_max']))
        tile_jitter = st.slider("Brightness Jitter", 0.0, 1.0, DEFAULTS['tile_brightness_jitter'], 0.05)

    with st.expander("Windows"):
        window_cols = st.slider("Window Columns", 0, 5, DEFAULTS['window_grid_cols'])
        window_probability = st.slider("Window Probability", 0.0, 1.0,
                                       round(DEFAULTS['window_probability'], 2), 0.01)
        silhouette_probability = st.slider("Silhouette Probability", 0.0, 1.0,
                                           round(DEFAULTS['silhouette_probability'], 2), 0.01)
        window_shine = st.checkbox("Shine", value=True)
        window_weights = {
            name: st.slider("Weight: {}".format(name.replace('_', ' ')), 0.0, 5.0, 1.0, 0.1)
            for name in tajimi_core.WINDOW_PRESETS
        }

    st.header("Animation")
    cycle_length = DEFAULTS['cycle_length']
    frame = st.slider("Frame", 0, cycle_length - 1, cycle_length // 2)
    play = st.checkbox("Play", value=False)
    fps = st.slider("FPS", 5, 60, 30)

    st.header("Layout")
    seed = st.number_input("Seed", 0, 2 ** 31 - 1, 0)
    regenerate = st.button("Regenerate Postal", type="primary")

layout = {
    'building_height_min_factor': height_range[0],
    'building_height_max_factor': height_range[1],
    'building_width_min_factor': width_range[0],
    'building_width_max_factor': width_range[1],
    'building_shrink_factor': shrink_factor,
    'building_shadow': building_shadow,
    'tile_count_min': tile_count[0],
    'tile_count_max': tile_count[1],
    'tile_brightness_jitter': tile_jitter,
    'window_grid_cols': window_cols,
    'window_probability': window_probability,
    'silhouette_probability': silhouette_probability,
    'window_shine': window_shine,
    'window_weights': window_weights,
}
layout_key = (seed, repr(sorted(layout.items())))

# Generate postal if needed
if 'session' not in st.session_state or st.session_state.get('layout_key') != layout_key:
    settings = dict(layout)
    settings.update(palette)
    st.session_state.session = tajimi_motion.AnimationSession(settings, seed=seed)
    st.session_state.layout_key = layout_key

session = st.session_state.session

if regenerate:
    session.regenerate()

changed = {k: v for k, v in palette.items() if session.settings[k].lower() != v.lower()}
if changed:
    session.update_settings(changed)


def to_display(svg_string):
    # Make SVG responsive for display
    display_svg = re.sub(r'width="\d+"', 'width="100%"', svg_string, count=1)
    return re.sub(r'height="\d+"', 'height="100%"', display_svg, count=1)


def framed(svg_string):
    return f'''
    <div style="background:{palette['background_color']}; display:flex; align-items:center;
                justify-content:center; padding:20px; box-sizing:border-box;">
        <div style="width:80vmin; height:80vmin;">
            {to_display(svg_string)}
        </div>
    </div>
    '''


if play:
    placeholder = st.empty()
    st.caption("Uncheck Play to stop.")
    session.playing = True
    while True:
        session.tick()
        placeholder.markdown(framed(session.render()), unsafe_allow_html=True)
        time.sleep(1.0 / fps)
else:
    session.playing = False
    session.seek(frame)

    progress_bar = st.progress(0, text="Rendering buildings...")

    def update_progress(current, total):
        progress_bar.progress(current / total, text="Rendering building {} / {}".format(current, total))

    svg_string = session.render(progress_callback=update_progress)
    progress_bar.empty()
    components.html(framed(svg_string), height=720, scrolling=True)

    st.caption("Seed {} | frame {} / {} | {} buildings".format(
        session.seed, session.cycle_frame, cycle_length, len(session.tajimi.buildings)))
    st.download_button(
        "Download SVG",
        svg_string,
        file_name="tajimi-{:03d}.svg".format(session.cycle_frame),
        mime="image/svg+xml"
    )
