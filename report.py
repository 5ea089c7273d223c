"""
Chart rendering for the FairShare cost-split summary.

Provides base64-encoded PNG charts for web embedding (get_web_charts).
Figures use the Agg backend so they render without a display.
"""

from __future__ import annotations

import base64
import io
from typing import Any, Dict, List, Mapping

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
import tax

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
SLATE = "#94a3b8"
BORDER = "#1e293b"
INDIGO_DEEP = "#6366f1"
EMERALD_DEEP = "#10b981"

WEB_W, WEB_H = 10, 6

# ═══════════════════════════════════════════════════════════════════
# Axis formatters and style helpers
# ═══════════════════════════════════════════════════════════════════

def _gbp_fmt(x, _):
    if abs(x) >= 1e6:
        return f"£{x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"£{x / 1e3:.0f}k"
    return f"£{x:.0f}"


GBP_FMT = FuncFormatter(_gbp_fmt)


def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, alpha=0.15, color=SLATE)


def _legend(ax, loc="upper right"):
    ax.legend(loc=loc, fontsize=8, facecolor=CARD, edgecolor=BORDER, labelcolor=TEXT)


# ═══════════════════════════════════════════════════════════════════
# Charts
# ═══════════════════════════════════════════════════════════════════

def _chart_monthly_split(summary: Mapping[str, Any], figsize=(WEB_W, WEB_H)) -> plt.Figure:
    """Grouped bar chart of each partner's share per monthly category."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    costs = {k: v for k, v in summary["monthly"]["costs"].items() if v["total"] > 0}
    names = list(costs)
    x = np.arange(len(names))
    w = 0.38
    ax.bar(x - w / 2, [costs[n]["p1"] for n in names], w, color=INDIGO,
           label="You", edgecolor=INDIGO_DEEP, linewidth=0.5)
    ax.bar(x + w / 2, [costs[n]["p2"] for n in names], w, color=EMERALD,
           label="Partner", edgecolor=EMERALD_DEEP, linewidth=0.5)
    ax.set_xticks(x)
    ax.set_xticklabels([cfg.CATEGORY_LABELS.get(n, n) for n in names],
                       fontsize=8, rotation=30, ha="right")
    ax.yaxis.set_major_formatter(GBP_FMT)
    ax.set_ylabel("Per Month")
    ax.set_title("Monthly Costs by Partner", fontsize=13, pad=12)
    if not names:
        ax.annotate("No monthly costs entered", xy=(0.5, 0.5), xycoords="axes fraction",
                    fontsize=10, color=SLATE, ha="center")
    else:
        _legend(ax)
    return fig


def _chart_upfront(state: Mapping[str, Any], summary: Mapping[str, Any],
                   figsize=(WEB_W, WEB_H - 1)) -> plt.Figure:
    """Stacked bar of what the upfront cash pays for, next to each partner's share."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    up = summary["upfront"]
    parts = [
        ("Deposit", float(state.get("total_equity") or 0), INDIGO),
        ("Property tax", up["sdlt"], AMBER),
        ("Legal fees", up["legal_fees"], SLATE),
        ("Mortgage fees", float(state.get("mortgage_fees") or 0), EMERALD_DEEP),
    ]
    bottom = 0.0
    for label, value, color in parts:
        ax.bar(0, value, 0.5, bottom=bottom, color=color, label=label)
        bottom += value
    ax.bar(1, up["p1"], 0.5, color=INDIGO, edgecolor=INDIGO_DEEP)
    ax.bar(2, up["p2"], 0.5, color=EMERALD, edgecolor=EMERALD_DEEP)
    ax.set_xticks([0, 1, 2])
    ax.set_xticklabels(["Total", "You", "Partner"])
    ax.yaxis.set_major_formatter(GBP_FMT)
    ax.set_title(f"Upfront Cash: {_gbp_fmt(up['total'], None)}", fontsize=13, pad=12)
    _legend(ax)
    return fig


def _chart_property_tax(state: Mapping[str, Any], figsize=(WEB_W, WEB_H - 1)) -> plt.Figure:
    """Property tax across a price range, with the chosen price marked."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    price = float(state.get("property_price") or 0)
    region = state.get("region_code", "EN")
    ftb = bool(state.get("is_first_time_buyer", False))
    top = max(price * 2, 1_000_000)
    prices = np.linspace(0, top, 400)

    ax.plot(prices, tax.stamp_duty(prices, region, "first", ftb), color=INDIGO,
            linewidth=2.2, label="Main home")
    ax.plot(prices, tax.stamp_duty(prices, region, "second", ftb), color=AMBER,
            linewidth=1.6, linestyle="--", label="Additional property")
    if price > 0:
        duty = float(tax.stamp_duty(price, region, state.get("home_type", "first"), ftb))
        ax.scatter([price], [duty], color=EMERALD, zorder=5, s=40)
        ax.annotate(_gbp_fmt(duty, None), xy=(price, duty), xytext=(8, 8),
                    textcoords="offset points", color=EMERALD, fontsize=9)
    ax.xaxis.set_major_formatter(GBP_FMT)
    ax.yaxis.set_major_formatter(GBP_FMT)
    ax.set_xlabel("Purchase Price")
    ax.set_ylabel("Property Tax")
    ax.set_title(f"Property Tax ({region})", fontsize=13, pad=12)
    _legend(ax, loc="upper left")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=120, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def get_web_charts(state: Mapping[str, Any], summary: Dict[str, Any]) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 3 charts:
      [0] Monthly split by category
      [1] Upfront cash breakdown and split
      [2] Property tax curve for the region
    """
    chart_figs = [
        _chart_monthly_split(summary),
        _chart_upfront(state, summary),
        _chart_property_tax(state),
    ]
    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images
