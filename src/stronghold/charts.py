"""
charts.py — Plotly figures built from a dashboard snapshot dict.

Pure functions of the JSON produced by dashboard_bridge; no Streamlit here,
so the figures can be built (and tested) without a running dashboard.
"""

from __future__ import annotations

import numpy as np
import plotly.express as px
import plotly.graph_objects as go

_BG       = '#0e1117'
_PLOT_BG  = '#111827'
_GRID     = '#1e2233'

# Relation palette
RELATION_COLORS: dict[str, str] = {
    'war':      '#FF4B4B',
    'hostile':  '#FFB347',
    'neutral':  '#AAAAAA',
    'friendly': '#66ECFF',
    'ally':     '#66FF99',
    'vassal':   '#CC66FF',
}

_GOOD_COLORS = [
    '#8B5A2B', '#9E9E9E', '#B7410E', '#F5DEB3',
    '#DEB887', '#C0C0C0', '#708090', '#FFB347',
]


def _dark_layout(fig: go.Figure, title: str, height: int = 320) -> go.Figure:
    fig.update_layout(
        title=dict(text=title, font=dict(color='#dddddd', size=13), x=0.0),
        paper_bgcolor=_BG,
        plot_bgcolor=_PLOT_BG,
        font=dict(color='white'),
        xaxis=dict(gridcolor=_GRID, zeroline=False, tickfont=dict(size=10)),
        yaxis=dict(gridcolor=_GRID, zeroline=False),
        legend=dict(bgcolor='rgba(0,0,0,0)', font=dict(color='white', size=11)),
        margin=dict(l=50, r=30, t=40, b=40),
        height=height,
    )
    return fig


def history_matrix(history: list[dict], goods: list[str]) -> tuple[np.ndarray, np.ndarray]:
    """(ticks, stocks) where stocks has one row per snapshot and one column per good."""
    ticks  = np.array([h['tick'] for h in history], dtype=int)
    stocks = np.array([[h['stock'].get(g, 0.0) for g in goods] for h in history], dtype=float)
    if stocks.size == 0:
        stocks = np.zeros((0, len(goods)))
    return ticks, stocks


# ══════════════════════════════════════════════════════════════════════════
# Stockpile time-series
# ══════════════════════════════════════════════════════════════════════════

def build_stock_chart(data: dict) -> go.Figure:
    """Line chart: every good's stock over time, with the storage cap as a band."""
    history = data.get('history', [])
    goods   = list(history[-1]['stock']) if history else []
    ticks, stocks = history_matrix(history, goods)

    fig = go.Figure()
    for idx, good in enumerate(goods):
        fig.add_trace(go.Scatter(
            x=ticks, y=stocks[:, idx],
            mode='lines',
            line=dict(color=_GOOD_COLORS[idx % len(_GOOD_COLORS)], width=2),
            name=good.replace('_', ' '),
            hovertemplate=f'<b>{good}</b>: %{{y:.0f}}<br>Tick %{{x}}<extra></extra>',
        ))
    if 'max_storage' in data:
        fig.add_hline(
            y=data['max_storage'],
            line_dash='dot',
            line_color='#ff4444',
            opacity=0.6,
            annotation_text='  storage cap',
            annotation_position='right',
            annotation_font_color='#ff4444',
        )
    return _dark_layout(fig, 'Stockpiles Over Time')


# ══════════════════════════════════════════════════════════════════════════
# Population / happiness
# ══════════════════════════════════════════════════════════════════════════

def build_people_chart(data: dict) -> go.Figure:
    history = data.get('history', [])
    ticks   = np.array([h['tick'] for h in history], dtype=int)
    pop     = np.array([h['population'] for h in history], dtype=float)
    mood    = np.clip(np.array([h['happiness'] for h in history], dtype=float), 0, 100)

    fig = go.Figure()
    fig.add_trace(go.Scatter(x=ticks, y=pop, mode='lines', name='population',
                             line=dict(color='#66ECFF', width=2)))
    fig.add_trace(go.Scatter(x=ticks, y=mood, mode='lines', name='happiness',
                             line=dict(color='#FAFF66', width=2), yaxis='y2'))
    _dark_layout(fig, 'Population & Happiness')
    fig.update_layout(yaxis2=dict(overlaying='y', side='right', range=[0, 100],
                                  showgrid=False, title='happiness'))
    return fig


# ══════════════════════════════════════════════════════════════════════════
# Market
# ══════════════════════════════════════════════════════════════════════════

def build_price_chart(data: dict) -> go.Figure:
    """Grouped bars: current buy and sell price per good."""
    prices = data.get('prices', {})
    goods  = list(prices)
    buys   = np.array([prices[g]['buy'] for g in goods], dtype=float)
    sells  = np.array([prices[g]['sell'] for g in goods], dtype=float)
    arrows = ['▲' if prices[g]['trend'] == 'up' else '▼' if prices[g]['trend'] == 'down' else ''
              for g in goods]

    fig = go.Figure()
    fig.add_trace(go.Bar(x=goods, y=buys, name='buy', marker_color='#FFB347',
                         text=arrows, textposition='outside'))
    fig.add_trace(go.Bar(x=goods, y=sells, name='sell', marker_color='#66FF99'))
    fig.update_layout(barmode='group')
    return _dark_layout(fig, 'Market Prices')


# ══════════════════════════════════════════════════════════════════════════
# Neighbour map
# ══════════════════════════════════════════════════════════════════════════

def build_neighbor_map(data: dict) -> go.Figure:
    """Scatter of neighbours by map position; colour = relation, size = observed power."""
    rows = data.get('neighbors', [])
    if not rows:
        return _dark_layout(go.Figure(), 'Neighbours', height=420)

    observed = np.array([r['observed'] for r in rows], dtype=float)
    sizes    = 12 + 28 * (observed / observed.max() if observed.max() > 0 else observed)
    fig = px.scatter(
        x=[r['position'][0] for r in rows],
        y=[r['position'][1] for r in rows],
        color=[r['relation'] for r in rows],
        color_discrete_map=RELATION_COLORS,
        size=sizes,
        text=[r['name'] for r in rows],
        hover_data={'score': [round(r['score']) for r in rows],
                    'intel': [r['intel'] for r in rows]},
    )
    fig.update_traces(textposition='top center', marker=dict(line=dict(width=0.8, color='white')))
    fig.add_trace(go.Scatter(x=[50], y=[50], mode='markers+text', text=['our realm'],
                             textposition='bottom center', name='realm',
                             marker=dict(symbol='star', size=18, color='#FAFF66')))
    _dark_layout(fig, 'Neighbours', height=420)
    fig.update_xaxes(range=[0, 100], showticklabels=False)
    fig.update_yaxes(range=[0, 100], showticklabels=False)
    return fig
