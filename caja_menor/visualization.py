"""Plotly visualisation helpers for the petty-cash pages.

Each function takes a :class:`~caja_menor.models.LedgerState` and returns a
``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from . import balance
from .config import TIMESTAMP_FORMAT
from .models import LedgerState


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="Sin datos")
    return fig


def balance_history(state: LedgerState) -> pd.DataFrame:
    """Balance after each movement, oldest first."""
    ordered = list(reversed(state.movements))
    df = pd.DataFrame(
        {
            "Fecha": pd.to_datetime([m.timestamp for m in ordered], format=TIMESTAMP_FORMAT),
            "Movimiento": [m.signed_amount for m in ordered],
        }
    )
    df["Saldo"] = state.initial_fund + df["Movimiento"].cumsum()
    return df


def create_balance_chart(state: LedgerState, title: str | None = None) -> go.Figure:
    """Line chart of the balance after every movement.

    Parameters
    ----------
    state : LedgerState
        Ledger snapshot.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Interactive line chart with the initial fund as a reference line.
    """
    if not state.movements:
        return _empty_figure()
    df = balance_history(state)
    fig = px.line(df, x="Fecha", y="Saldo", markers=True)
    fig.add_hline(y=state.initial_fund, line_dash="dash", annotation_text="Fondo inicial")
    fig.update_layout(
        title=title or "Saldo en el tiempo",
        xaxis_title="Fecha",
        yaxis_title="Saldo (COP)",
    )
    return fig


def create_category_chart(state: LedgerState, title: str | None = None) -> go.Figure:
    totals = balance.category_totals(state)
    if not totals:
        return _empty_figure()
    df = pd.DataFrame(
        {
            "Categoría": [category.label for category in totals],
            "Total": list(totals.values()),
        }
    )
    fig = px.bar(df, x="Categoría", y="Total", color="Categoría")
    fig.update_layout(title=title or "Total por categoría", showlegend=False, yaxis_title="COP")
    return fig
