"""
dashboard.py — Streamlit live dashboard for the stronghold realm simulation.

Launch:
    streamlit run dashboard.py

Reads only dashboard_data.json (written by `python -m stronghold --dashboard`);
figures come from stronghold.charts.  Auto-refreshes at 2 FPS via
streamlit-autorefresh.
"""

import json
import pathlib

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from stronghold.charts import (
    RELATION_COLORS, build_neighbor_map, build_people_chart, build_price_chart,
    build_stock_chart,
)

DATA_PATH = pathlib.Path("dashboard_data.json")

_SEVERITY_ICON = {'Low': '🟢', 'Moderate': '🟡', 'High': '🟠', 'Critical': '🔴'}


# ══════════════════════════════════════════════════════════════════════════
# Data loading — TTL-cached so we don't hammer disk on every Streamlit run
# ══════════════════════════════════════════════════════════════════════════

@st.cache_data(ttl=2)
def _read_json(mtime: float) -> dict | None:          # mtime is the cache-bust key
    try:
        return json.loads(DATA_PATH.read_text(encoding='utf-8'))
    except (FileNotFoundError, json.JSONDecodeError):
        return None


def load_data() -> dict | None:
    try:
        mtime = DATA_PATH.stat().st_mtime
    except FileNotFoundError:
        return None
    return _read_json(mtime)


# ══════════════════════════════════════════════════════════════════════════
# Page config — must be first Streamlit call
# ══════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title='Stronghold — Live Dashboard',
    page_icon='🏰',
    layout='wide',
    initial_sidebar_state='expanded',
)

st.markdown("""
<style>
[data-testid="stTextArea"] textarea {
    font-family: 'Courier New', monospace;
    font-size: 11px;
    background: #0a0e17;
    color: #a8c8a8;
    border: 1px solid #2a3040;
}
[data-testid="metric-container"] {
    background: #111827;
    border-radius: 8px;
    padding: 10px 16px;
    margin-bottom: 6px;
}
</style>
""", unsafe_allow_html=True)

# ── Auto-refresh: 500 ms = 2 FPS ─────────────────────────────────────────
st_autorefresh(interval=500, key='sim_autorefresh')

data = load_data()

# ══════════════════════════════════════════════════════════════════════════
# Sidebar
# ══════════════════════════════════════════════════════════════════════════

with st.sidebar:
    st.title('🏰 Stronghold')
    st.caption('Realm Simulation · Live Monitor')
    st.divider()

    if data is None:
        st.warning(
            '**Waiting for simulation data…**\n\n'
            'Run the simulation first:\n\n```\npython -m stronghold --dashboard\n```\n\n'
            'The dashboard file is written every 25 ticks.'
        )
    else:
        res = data['resources']
        st.metric('⏱  Tick',        f'{data["tick"]:,}')
        st.metric('👥 Population',   f'{data["population"]:.0f} / {data["max_population"]}')
        st.metric('😊 Happiness',    f'{data["happiness"]:.0f}')
        st.metric('💰 Gold',         f'{res["gold"]:,.0f}')
        st.metric('⚔ Power',        f'{data["military_power"]:,.0f}')
        st.metric('⚡ Tick Rate',    f'{data["tick_rate"]:.2f} t/s')

        st.divider()
        risk = data['risk_label']
        st.subheader(f'{_SEVERITY_ICON.get(risk, "")} Invasion risk: {risk} ({data["invasion_risk"]}%)')
        for note in data['advisories']:
            st.markdown(f'• {note}')

        st.divider()
        st.subheader('Neighbours')
        for n in data['neighbors']:
            color = RELATION_COLORS.get(n['relation'], '#AAAAAA')
            power = f'{n["power"]:.0f}' if n['power'] is not None else '???'
            route = ' 🐪' if n['route'] else ''
            st.markdown(
                f'<span style="color:{color}">●</span> '
                f'**{n["name"]}**{route}  \n'
                f'&nbsp;&nbsp;&nbsp;{n["relation"]} · score {n["score"]:+.0f} · power {power}',
                unsafe_allow_html=True,
            )

# ══════════════════════════════════════════════════════════════════════════
# Main panel
# ══════════════════════════════════════════════════════════════════════════

if data is None:
    st.info(
        '**dashboard_data.json** not found yet.  \n'
        'Start the simulation (`python -m stronghold --dashboard`) and the first '
        'snapshot appears at tick 0.'
    )
    st.stop()

research = data.get('research')
research_str = (f'{research["name"]} {research["progress"]:.0f}/{research["duration"]}'
                + (' (paused)' if research['paused'] else '')) if research else 'idle'
st.markdown(
    f'### Tick **{data["tick"]:,}** &nbsp;·&nbsp; '
    f'{data["population"]:.0f} people &nbsp;·&nbsp; '
    f'tax {data["tax_level"]} &nbsp;·&nbsp; '
    f'stance {data["stance"]} &nbsp;·&nbsp; '
    f'research: {research_str}',
    unsafe_allow_html=True,
)

col_left, col_right = st.columns([3, 2], gap='medium')

with col_left:
    st.plotly_chart(build_stock_chart(data), use_container_width=True,
                    key='stock_chart', config={'displayModeBar': False})
    st.plotly_chart(build_people_chart(data), use_container_width=True,
                    key='people_chart', config={'displayModeBar': False})

with col_right:
    st.plotly_chart(build_neighbor_map(data), use_container_width=True,
                    key='neighbor_map', config={'displayModeBar': False})
    st.plotly_chart(build_price_chart(data), use_container_width=True,
                    key='price_chart', config={'displayModeBar': False})

    st.subheader('Chronicle')
    events    = list(reversed(data.get('event_tail', [])))
    event_txt = '\n'.join(events[:30])
    st.text_area(
        label='Events',
        value=event_txt,
        height=215,
        disabled=True,
        key='event_feed',
        label_visibility='collapsed',
    )
