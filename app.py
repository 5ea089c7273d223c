"""
Flask web application for the FairShare household cost splitter.

Single-file app using render_template_string.  Run via ``python main.py``
which starts the dev server on localhost:5000.  The app keeps no
server-side state: every request carries the whole household snapshot.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from flask import Flask, jsonify, render_template_string, request

import config as cfg
import finance
import report
import validator
from cli import compute_display_data, fmt, pct
from property_price import estimate_property_price
from regions import populate_estimates, region_update, resolve_region

logger = logging.getLogger(__name__)

app = Flask(__name__)

STEPS = ("income", "property", "mortgage", "utilities", "committed")

# ═══════════════════════════════════════════════════════════════════
# Form parsing
# ═══════════════════════════════════════════════════════════════════

NUMBER_FIELDS = (
    "salary_p1", "salary_p2", "property_price", "deposit_percentage",
    "deposit_amount", "mortgage_interest_rate", "mortgage_term", "mortgage_fees",
    *cfg.COST_FIELDS.values(),
)
INT_FIELDS = ("beds", "baths")
TEXT_FIELDS = ("salary_type", "deposit_type", "home_type", "council_tax_band")
FLAG_FIELDS = ("is_first_time_buyer", "deposit_split_proportional")
SPLIT_CHOICES = ("yes", "no")


def _parse_currency(s: str) -> float:
    return float(str(s).replace("£", "").replace(",", "").replace(" ", "") or 0)


def _read_number(value: Any, cast=float):
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    number = _parse_currency(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return cast(number)


def _read_numbers(source: Mapping[str, Any], state: Dict[str, Any]) -> List[str]:
    """Copy numeric fields from *source* into *state*.

    Unparseable values count as 0. Returns the names of the fields that
    could not be read.
    """
    rejected = []
    for names, cast in ((NUMBER_FIELDS, float), (INT_FIELDS, int)):
        for name in names:
            if name not in source:
                continue
            try:
                state[name] = _read_number(source[name], cast)
            except ValueError:
                state[name] = cast(0)
                rejected.append(name)
    return rejected


def parse_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn submitted form fields into a household snapshot.

    Missing fields keep their defaults; unparseable numbers count as 0.
    """
    state = cfg.defaults()
    _read_numbers(form, state)
    for name in TEXT_FIELDS:
        if form.get(name):
            state[name] = form[name]
    state["is_first_time_buyer"] = form.get("buyer_status") == "ftb"
    state["deposit_split_proportional"] = form.get("deposit_split", "yes") == "yes"
    for cat in cfg.SPLIT_CATEGORIES:
        state["split_types"][cat] = form.get(f"split_{cat}", "yes")
    state.update(region_update(form.get("postcode", "")))
    return state


def _merge_json(payload: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Household snapshot from a JSON body, plus the fields that were rejected.

    Only input fields are read; derived figures are always recalculated.
    A field of the wrong type keeps its default and is reported back.
    """
    state = cfg.defaults()
    rejected = _read_numbers(payload, state)

    for name in TEXT_FIELDS:
        if name not in payload:
            continue
        if isinstance(payload[name], str):
            state[name] = payload[name]
        else:
            rejected.append(name)

    for name in FLAG_FIELDS:
        if name not in payload:
            continue
        if isinstance(payload[name], bool):
            state[name] = payload[name]
        else:
            rejected.append(name)

    split_types = payload.get("split_types")
    if isinstance(split_types, Mapping):
        for cat, choice in split_types.items():
            if cat in cfg.SPLIT_CATEGORIES and choice in SPLIT_CHOICES:
                state["split_types"][cat] = choice
            else:
                rejected.append("split_types")
    elif split_types is not None:
        rejected.append("split_types")

    postcode = payload.get("postcode")
    if postcode is not None:
        if not isinstance(postcode, str):
            rejected.append("postcode")
        state.update(region_update(str(postcode)))
    return state, rejected


def _errors(state: Mapping[str, Any], rejected: Sequence[str] = ()) -> Dict[str, list]:
    out = {}
    for step in STEPS:
        result = validator.validate_step(step, state)
        if not result.is_valid:
            out[step] = result.errors
    for name in rejected:
        errors = out.setdefault(validator.step_for_field(name) or "input", [])
        if name not in errors:
            errors.append(name)
    return out


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>FairShare: Household Cost Splitter</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;--bg-surface:rgba(15,23,42,0.55);--bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.1);--text-primary:#f1f5f9;--text-secondary:#94a3b8;
    --indigo:#818cf8;--emerald:#34d399;--amber:#fbbf24;--radius-lg:16px;--radius-md:10px;
  }
  body{background:var(--bg-deep);color:var(--text-primary);
    font-family:system-ui,-apple-system,sans-serif;line-height:1.6}
  .container{max-width:1140px;margin:0 auto;padding:2rem 1.5rem}
  .hero{text-align:center;padding:1.5rem 0 2rem}
  .hero h1{font-size:2rem;font-weight:800;color:var(--indigo)}
  .card{background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-lg);padding:1.6rem;margin-bottom:1.4rem}
  h2{font-size:1.1rem;font-weight:700;margin-bottom:1rem}
  .form-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(240px,1fr));gap:1rem 1.5rem}
  .form-group{display:flex;flex-direction:column}
  .form-group label{font-size:.78rem;color:var(--text-secondary);margin-bottom:.3rem}
  .form-group input,.form-group select{background:var(--bg-input);border:1px solid rgba(71,85,105,.35);
    border-radius:var(--radius-md);color:var(--text-primary);padding:.55rem .8rem;font-size:.88rem}
  .btn{background:var(--indigo);border:0;border-radius:var(--radius-md);color:#050816;
    font-weight:700;padding:.75rem 2rem;cursor:pointer;margin-top:1rem}
  table{width:100%;border-collapse:collapse;font-size:.88rem}
  th,td{padding:.45rem .6rem;text-align:right;border-bottom:1px solid var(--border-subtle)}
  th:first-child,td:first-child{text-align:left}
  .total td{font-weight:700;color:var(--emerald)}
  .warn{color:var(--amber);font-size:.85rem}
  img.chart{width:100%;border-radius:var(--radius-md);margin-top:1rem}
</style>
</head>
<body>
<div class="container">
  <div class="hero"><h1>FairShare</h1><p>Split household costs fairly by income.</p></div>

  <form method="post" class="card">
    <h2>Income</h2>
    <div class="form-grid">
      <div class="form-group"><label>Salaries entered as</label>
        <select name="salary_type">
          <option value="gross" {% if form.get('salary_type','gross')=='gross' %}selected{% endif %}>Annual gross</option>
          <option value="net" {% if form.get('salary_type')=='net' %}selected{% endif %}>Monthly net</option>
        </select></div>
      <div class="form-group"><label>Your pay</label><input name="salary_p1" value="{{ form.get('salary_p1','') }}"></div>
      <div class="form-group"><label>Partner's pay</label><input name="salary_p2" value="{{ form.get('salary_p2','') }}"></div>
    </div>

    <h2 style="margin-top:1.4rem">Property</h2>
    <div class="form-grid">
      <div class="form-group"><label>Postcode</label><input name="postcode" value="{{ form.get('postcode','') }}"></div>
      <div class="form-group"><label>Price (blank to estimate)</label><input name="property_price" value="{{ form.get('property_price','') }}"></div>
      <div class="form-group"><label>Bedrooms</label><input name="beds" value="{{ form.get('beds','2') }}"></div>
      <div class="form-group"><label>Bathrooms</label><input name="baths" value="{{ form.get('baths','1') }}"></div>
      <div class="form-group"><label>Council tax band</label>
        <select name="council_tax_band">
          {% for b in 'ABCDEFGH' %}<option {% if form.get('council_tax_band','D')==b %}selected{% endif %}>{{ b }}</option>{% endfor %}
        </select></div>
      <div class="form-group"><label>Home type</label>
        <select name="home_type">
          <option value="first" {% if form.get('home_type','first')=='first' %}selected{% endif %}>Main home</option>
          <option value="second" {% if form.get('home_type')=='second' %}selected{% endif %}>Additional property</option>
        </select></div>
      <div class="form-group"><label>Buyer status</label>
        <select name="buyer_status">
          <option value="standard">Standard</option>
          <option value="ftb" {% if form.get('buyer_status')=='ftb' %}selected{% endif %}>First-time buyer</option>
        </select></div>
    </div>

    <h2 style="margin-top:1.4rem">Mortgage</h2>
    <div class="form-grid">
      <div class="form-group"><label>Deposit as</label>
        <select name="deposit_type">
          <option value="percentage">Percentage</option>
          <option value="amount" {% if form.get('deposit_type')=='amount' %}selected{% endif %}>Fixed amount</option>
        </select></div>
      <div class="form-group"><label>Deposit %</label><input name="deposit_percentage" value="{{ form.get('deposit_percentage','10') }}"></div>
      <div class="form-group"><label>Deposit amount</label><input name="deposit_amount" value="{{ form.get('deposit_amount','') }}"></div>
      <div class="form-group"><label>Split deposit by income</label>
        <select name="deposit_split">
          <option value="yes">Yes</option>
          <option value="no" {% if form.get('deposit_split')=='no' %}selected{% endif %}>No, 50/50</option>
        </select></div>
      <div class="form-group"><label>Interest rate %</label><input name="mortgage_interest_rate" value="{{ form.get('mortgage_interest_rate','4.5') }}"></div>
      <div class="form-group"><label>Term (years)</label><input name="mortgage_term" value="{{ form.get('mortgage_term','25') }}"></div>
      <div class="form-group"><label>Arrangement fees</label><input name="mortgage_fees" value="{{ form.get('mortgage_fees','0') }}"></div>
    </div>

    <h2 style="margin-top:1.4rem">Monthly costs (blank to estimate utilities)</h2>
    <div class="form-grid">
      {% for cat, field, label in cost_fields %}
      <div class="form-group"><label>{{ label }}</label>
        <input name="{{ field }}" value="{{ form.get(field,'') }}">
        <select name="split_{{ cat }}">
          <option value="yes">Split by income</option>
          <option value="no" {% if form.get('split_' ~ cat)=='no' %}selected{% endif %}>Split 50/50</option>
        </select></div>
      {% endfor %}
    </div>
    <button class="btn" type="submit">Calculate</button>
  </form>

  {% if d %}
  {% for step, errs in errors.items() %}
  <p class="warn">Check {{ step }}: {{ errs|join(', ') }}</p>
  {% endfor %}
  {% if price_note %}<p class="warn">{{ price_note }}</p>{% endif %}

  <div class="card">
    <h2>Income ratio{% if region %}: {{ region.name }}{% endif %}</h2>
    <table>
      <tr><th></th><th>Take-home / month</th><th>Share</th></tr>
      <tr><td>You{% if d.band_p1 %} ({{ d.band_p1 }}){% endif %}</td><td>{{ fmt(d.net_p1, 2) }}</td><td>{{ pct(d.ratio_p1 * 100) }}</td></tr>
      <tr><td>Partner{% if d.band_p2 %} ({{ d.band_p2 }}){% endif %}</td><td>{{ fmt(d.net_p2, 2) }}</td><td>{{ pct(d.ratio_p2 * 100) }}</td></tr>
    </table>
  </div>

  <div class="card">
    <h2>Upfront costs</h2>
    <table>
      <tr><td>Deposit ({{ pct(d.deposit_percentage) }})</td><td>{{ fmt(d.total_equity) }}</td></tr>
      <tr><td>Property transaction tax</td><td>{{ fmt(d.summary.upfront.sdlt) }}</td></tr>
      <tr><td>Legal fees</td><td>{{ fmt(d.summary.upfront.legal_fees) }}</td></tr>
      <tr><td>Mortgage fees</td><td>{{ fmt(d.mortgage_fees) }}</td></tr>
      <tr class="total"><td>Total upfront</td><td id="total-upfront">{{ fmt(d.summary.upfront.total) }}</td></tr>
      <tr><td>You pay</td><td>{{ fmt(d.summary.upfront.p1) }}</td></tr>
      <tr><td>Partner pays</td><td>{{ fmt(d.summary.upfront.p2) }}</td></tr>
    </table>
  </div>

  <div class="card">
    <h2>Monthly costs</h2>
    <table>
      <tr><th>Category</th><th>Total</th><th>You</th><th>Partner</th></tr>
      {% for name, c in d.summary.monthly.costs.items() %}
      <tr><td>{{ labels[name] }}</td><td>{{ fmt(c.total, 2) }}</td><td>{{ fmt(c.p1, 2) }}</td><td>{{ fmt(c.p2, 2) }}</td></tr>
      {% endfor %}
      <tr class="total"><td>Total</td><td>{{ fmt(d.summary.monthly.total, 2) }}</td><td>{{ fmt(d.summary.monthly.p1, 2) }}</td><td>{{ fmt(d.summary.monthly.p2, 2) }}</td></tr>
    </table>
    <p style="margin-top:.8rem">Mortgage: {{ fmt(d.mortgage_required) }} borrowed, total repayment {{ fmt(d.total_repayment, 2) }}</p>
  </div>

  <div class="card">
    {% for img in charts %}<img class="chart" src="data:image/png;base64,{{ img }}" alt="chart">{% endfor %}
  </div>
  {% endif %}
</div>
</body>
</html>
"""

def _render(form, d=None, charts=(), errors=None, price_note="", region=None):
    return render_template_string(
        HTML_TEMPLATE,
        form=form,
        d=d,
        charts=list(charts),
        errors=errors or {},
        price_note=price_note,
        region=region,
        cost_fields=[(c, cfg.COST_FIELDS[c], cfg.CATEGORY_LABELS[c]) for c in cfg.SPLIT_CATEGORIES],
        labels=cfg.CATEGORY_LABELS,
        fmt=fmt,
        pct=pct,
    )


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        return _render(form={})

    form = request.form.to_dict()
    state = parse_form(form)
    logger.debug("Form submitted for postcode %r", state["postcode"])

    price_note = ""
    if state["property_price"] <= 0 and state["postcode"]:
        estimate = estimate_property_price(state["postcode"], state["beds"] or 2)
        state["property_price"] = float(estimate.price)
        price_note = (f"Price estimated at {fmt(estimate.price)}" if estimate.is_estimated
                      else f"Price from recent local sales: {fmt(estimate.price)}")

    # blank utility fields take the regional estimates
    estimates = populate_estimates(state)
    for field, value in estimates.items():
        if not str(form.get(field, "")).strip():
            state[field] = value

    state.update(finance.recalculate(state))
    d = compute_display_data(state)
    charts = report.get_web_charts(state, d["summary"])

    return _render(
        form=form,
        d=d,
        charts=charts,
        errors=_errors(state),
        price_note=price_note,
        region=resolve_region(state["postcode"]),
    )


@app.route("/api/summary", methods=["POST"])
def api_summary():
    """Recalculate a JSON household snapshot and return it with its summary."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "expected a JSON object"}), 400
    state, rejected = _merge_json(payload)
    if rejected:
        logger.debug("Rejected JSON fields: %s", ", ".join(rejected))
    state.update(finance.recalculate(state))
    return jsonify({
        "state": state,
        "summary": finance.get_summary(state),
        "errors": _errors(state, rejected),
    })


@app.route("/api/region")
def api_region():
    region = resolve_region(request.args.get("postcode", ""))
    if region is None:
        return jsonify({"region": None}), 404
    return jsonify({"region": {"key": region.key, "name": region.name, "code": region.code}})


@app.route("/api/price-estimate")
def api_price_estimate():
    postcode = request.args.get("postcode", "")
    if not postcode:
        return jsonify({"error": "postcode is required"}), 400
    bedrooms = request.args.get("bedrooms", default=2, type=int)
    estimate = estimate_property_price(postcode, bedrooms)
    return jsonify({"price": estimate.price, "is_estimated": estimate.is_estimated})


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(host: str = "127.0.0.1", port: int = 5000, debug: bool = True) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://{host}:{port}"
    print(f"Starting web app at {url}")
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_web()
