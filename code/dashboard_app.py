#!/usr/bin/env python3
"""
dashboard_app.py

Dash dashboard for the shared-living household ledger.

What it shows for the selected month
- Ledger net (income - expense + adjustments) vs actual net (ledger net
  corrected for the counterpart's unpaid settlement and pending card
  installments).
- The cost-sharing settlement: rent baseline, half of shared costs, full
  reimbursements, minus half of the counterpart's own advance.
- Expense mix by subcategory (top 6 + other), the year's monthly trend, and
  the ledger / shared / subscription detail tables.

The two manual inputs (counterpart advance, installment deduction) are
persisted per month through household.adjustments.AdjustmentStore.

Env
- LEDGER_FEED_URL (required): Apps Script web app URL returning the ledger rows
- LEDGER_ADJUSTMENTS_JSON (optional): default adjustments.json
- DASH_HOST (optional): default 127.0.0.1
- DASH_PORT (optional): default 8050
"""

from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional, Tuple

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from dash import Dash, Input, Output, State, dcc, html, dash_table, no_update

from household.adjustments import AdjustmentStore, MonthAdjustments, advance_key, installment_key
from household.charts import bucketize
from household.classifier import ClassifiedRow, TransactionType, classify_rows
from household.config import DEFAULT_CONFIG, LedgerConfig
from household.feed import FeedError, fetch_rows
from household.io import load_settings
from household.overview import available_years, build_overview, latest_period, monthly_series
from household.parsing import parse_yen_input
from household.report import details_frame
from household.summary import MonthlyReport, summarize_period


# ======================================================
# SETTINGS (palette)
# ======================================================

FONT_STACK = "\"Noto Sans JP\", Inter, -apple-system, BlinkMacSystemFont, \"Segoe UI\", Roboto, sans-serif"
FIG_FONT = FONT_STACK
FONT_STYLESHEET = "https://fonts.googleapis.com/css2?family=Noto+Sans+JP:wght@400;500;700&display=swap"

COLORS = {
    "positive": "#047857",
    "negative": "#c2410c",
    "income": "#059669",
    "expense": "#ea580c",
    "neutral_gray": "#64748b",
    "dark_text": "#0f172a",
    "light_text": "#94a3b8",
    "bg_primary": "#ffffff",
    "bg_secondary": "#f8fafc",
    "border": "#e2e8f0",
    "header_bg": "#0f766e",
    "ledger_line": "#0F766E",
    "actual_line": "#F59E0B",
}

PIE_COLORS = ["#0F766E", "#10B981", "#F59E0B", "#F97316", "#60A5FA", "#34D399", "#F43F5E"]


# ======================================================
# FORMATTING
# ======================================================

def format_yen(value) -> str:
    return f"¥{abs(value):,.0f}"


def format_signed_yen(value) -> str:
    sign = "+" if value > 0 else "-" if value < 0 else ""
    return f"{sign}{format_yen(value)}"


def format_deduction(value) -> str:
    return f"-{format_yen(value)}" if value else format_yen(0)


def format_ledger_amount(ttype: TransactionType, amount) -> str:
    if ttype is TransactionType.INCOME:
        return f"+{format_yen(amount)}"
    if ttype is TransactionType.EXPENSE:
        return f"-{format_yen(amount)}"
    return format_signed_yen(amount)


def _signed_color(value) -> str:
    return COLORS["positive"] if value >= 0 else COLORS["negative"]


# ======================================================
# LAYOUT HELPERS
# ======================================================

def _kpi_tile(label: str, value_text: str, subtitle: str = "", color: Optional[str] = None) -> html.Div:
    children = [
        html.Div(label, style={
            "fontSize": "11px",
            "color": COLORS["neutral_gray"],
            "fontWeight": "600",
            "letterSpacing": "0.5px",
            "marginBottom": "4px",
        }),
        html.Div(value_text, style={
            "fontSize": "26px",
            "fontWeight": "700",
            "color": color or COLORS["dark_text"],
            "lineHeight": "1.1",
        }),
    ]
    if subtitle:
        children.append(html.Div(subtitle, style={
            "fontSize": "10px",
            "color": COLORS["light_text"],
            "marginTop": "6px",
        }))
    return html.Div(children, className="kpi-tile", style={
        "backgroundColor": COLORS["bg_primary"],
        "border": f"1px solid {COLORS['border']}",
        "borderRadius": "12px",
        "padding": "16px 18px",
        "flex": "1",
        "minWidth": "200px",
    })


def _kpi_strip(report: MonthlyReport) -> html.Div:
    return html.Div([
        _kpi_tile("帳簿上収支", format_signed_yen(report.ledger.net), "収入 - 支出 + 調整",
                  _signed_color(report.ledger.net)),
        _kpi_tile("実質収支", format_signed_yen(report.actual.net), "帳簿上 + 相手の支払額 - 入金済み - 分割控除",
                  _signed_color(report.actual.net)),
        _kpi_tile("帳簿との差分", format_signed_yen(report.actual.gap), "未収/過収と分割控除の影響",
                  _signed_color(report.actual.gap)),
        _kpi_tile("相手の支払額", format_yen(report.billing.counterpart_payment), "今月の精算額",
                  COLORS["positive"]),
    ], style={"display": "flex", "gap": "12px", "flexWrap": "wrap", "marginBottom": "24px"})


def _breakdown(rows: List[Tuple[str, str, str]], title: str) -> html.Div:
    """rows: (label, value_text, color)"""
    return html.Div([
        html.H3(title, style={"fontSize": "15px", "color": COLORS["dark_text"], "margin": "0 0 12px 0"}),
        html.Div([
            html.Div([
                html.Span(label),
                html.Span(value, style={"fontWeight": "600", "color": color}),
            ], style={"display": "flex", "justifyContent": "space-between", "fontSize": "13px", "padding": "4px 0"})
            for label, value, color in rows
        ]),
    ])


def ledger_breakdown_rows(report: MonthlyReport) -> List[Tuple[str, str, str]]:
    return [
        ("収入合計", format_yen(report.ledger.income), COLORS["income"]),
        ("支出合計", format_yen(report.ledger.expense), COLORS["expense"]),
        ("調整", format_signed_yen(report.ledger.adjust), COLORS["neutral_gray"]),
        ("帳簿上収支", format_signed_yen(report.ledger.net), _signed_color(report.ledger.net)),
    ]


def billing_breakdown_rows(report: MonthlyReport) -> List[Tuple[str, str, str]]:
    s = report.billing.summary
    return [
        ("家賃・光熱費（固定）", format_yen(s.rent), COLORS["dark_text"]),
        ("共有費合計", format_yen(s.shared), COLORS["dark_text"]),
        ("共有費の半額", format_yen(s.shared_half), COLORS["dark_text"]),
        ("全額立替", format_yen(s.full), COLORS["dark_text"]),
        ("請求合計", format_yen(report.billing.total_billing), COLORS["dark_text"]),
        ("相手の立替（半額控除）", format_deduction(s.counterpart_advance_half), COLORS["negative"]),
        ("相手の支払額", format_yen(report.billing.counterpart_payment), COLORS["positive"]),
        ("入金済み（同棲費用）", format_yen(report.billing.counterpart_paid_actual), COLORS["income"]),
        ("未収額", format_signed_yen(report.actual.unpaid_gap), _signed_color(report.actual.unpaid_gap)),
        ("自分の立替総額", format_yen(report.billing.my_advance_total), COLORS["neutral_gray"]),
        ("分割払い控除", format_deduction(report.billing.installment_deduction), COLORS["negative"]),
    ]


def _empty_figure(title: str, message: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        title=dict(text=title, font=dict(size=16, color=COLORS["dark_text"])),
        annotations=[dict(text=message, x=0.5, y=0.5, showarrow=False)],
        font=dict(family=FIG_FONT, size=12),
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        plot_bgcolor=COLORS["bg_primary"],
        paper_bgcolor=COLORS["bg_primary"],
    )
    return fig


def _build_trend_figure(series: pd.DataFrame, year: int) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=series["label"], y=series["ledger_net"], mode="lines", name="帳簿上",
                             line=dict(color=COLORS["ledger_line"], width=3, shape="spline")))
    fig.add_trace(go.Scatter(x=series["label"], y=series["actual_net"], mode="lines", name="実質",
                             line=dict(color=COLORS["actual_line"], width=3, shape="spline")))
    fig.update_layout(
        title=dict(text=f"帳簿上 vs 実質の推移（{year}年）", font=dict(size=16, color=COLORS["dark_text"])),
        font=dict(family=FIG_FONT, size=12, color=COLORS["dark_text"]),
        margin=dict(t=60, b=40, l=70, r=30),
        hovermode="x unified",
        plot_bgcolor=COLORS["bg_primary"],
        paper_bgcolor=COLORS["bg_primary"],
        legend=dict(orientation="h", y=-0.15),
    )
    fig.update_xaxes(gridcolor=COLORS["border"])
    fig.update_yaxes(gridcolor=COLORS["border"], tickprefix="¥", tickformat=",.0f")
    return fig


def _build_expense_pie(report: MonthlyReport, config: LedgerConfig) -> go.Figure:
    entries = bucketize(report.expense_by_subcategory, limit=6, other_label=config.other_label)
    if not entries:
        return _empty_figure("支出内訳", "支出がありません")

    d = pd.DataFrame([{"name": e.name, "value": e.value} for e in entries])
    fig = px.pie(d, names="name", values="value", hole=0.55, color_discrete_sequence=PIE_COLORS)
    fig.update_traces(sort=False, texttemplate="%{label}<br>%{percent}", hovertemplate="%{label}: ¥%{value:,.0f}")
    fig.update_layout(
        title=dict(text="支出内訳", font=dict(size=16, color=COLORS["dark_text"])),
        font=dict(family=FIG_FONT, size=12),
        margin=dict(t=60, b=20, l=20, r=20),
        showlegend=False,
        paper_bgcolor=COLORS["bg_primary"],
    )
    return fig


def _build_settlement_waterfall(report: MonthlyReport) -> go.Figure:
    """Rent + shared half + full reimbursement - advance half = counterpart payment."""
    s = report.billing.summary
    steps = [s.rent, s.shared_half, s.full, -s.counterpart_advance_half]
    fig = go.Figure(go.Waterfall(
        orientation="v",
        measure=["relative", "relative", "relative", "relative", "total"],
        x=["家賃・光熱費", "共有費の半額", "全額立替", "相手の立替控除", "支払額"],
        y=steps + [report.billing.counterpart_payment],
        textposition="outside",
        text=[format_signed_yen(v) for v in steps] + [format_yen(report.billing.counterpart_payment)],
        connector={"line": {"color": COLORS["neutral_gray"], "width": 1, "dash": "dot"}},
        increasing={"marker": {"color": COLORS["income"]}},
        decreasing={"marker": {"color": COLORS["negative"]}},
        totals={"marker": {"color": COLORS["header_bg"]}},
    ))
    fig.update_layout(
        title=dict(text="精算ブリッジ", font=dict(size=16, color=COLORS["dark_text"])),
        showlegend=False,
        font=dict(family=FIG_FONT, size=12, color=COLORS["dark_text"]),
        margin=dict(t=60, b=40, l=60, r=30),
        plot_bgcolor=COLORS["bg_primary"],
        paper_bgcolor=COLORS["bg_primary"],
    )
    fig.update_yaxes(gridcolor=COLORS["border"], tickprefix="¥", tickformat=",.0f")
    return fig


def details_records(rows, config: LedgerConfig = DEFAULT_CONFIG) -> List[dict]:
    d = details_frame(rows, config)
    d["amount"] = [format_ledger_amount(r.type, r.amount) for r in rows]
    return d.to_dict("records")


_TABLE_COLUMNS = [
    {"name": "日付", "id": "date"},
    {"name": "区分", "id": "type"},
    {"name": "大項目", "id": "category"},
    {"name": "中項目", "id": "subcategory"},
    {"name": "内容", "id": "content"},
    {"name": "金額", "id": "amount"},
    {"name": "メモ", "id": "memo"},
]


def _details_table(table_id: str) -> dash_table.DataTable:
    return dash_table.DataTable(
        id=table_id,
        columns=_TABLE_COLUMNS,
        data=[],
        page_size=15,
        sort_action="native",
        style_table={"overflowX": "auto"},
        style_cell={"fontFamily": FONT_STACK, "fontSize": "12px", "padding": "6px", "textAlign": "left"},
        style_cell_conditional=[{"if": {"column_id": "amount"}, "textAlign": "right"}],
        style_header={"backgroundColor": COLORS["bg_secondary"], "fontWeight": "600"},
    )


def _card(children, **style) -> html.Div:
    base = {
        "backgroundColor": COLORS["bg_primary"],
        "border": f"1px solid {COLORS['border']}",
        "borderRadius": "12px",
        "padding": "16px 20px",
        "marginBottom": "20px",
    }
    base.update(style)
    return html.Div(children, style=base)


class _SelectedMonthAdjustments:
    """Store view where the selected month reads the live input values."""

    def __init__(self, store: AdjustmentStore, year: int, month: int, current: MonthAdjustments):
        self.store = store
        self.year = year
        self.month = month
        self.current = current

    def get(self, year: int, month: int) -> MonthAdjustments:
        if (year, month) == (self.year, self.month):
            return self.current
        return self.store.get(year, month)


def _installment_input_value(store: AdjustmentStore, year: int, month: int, config: LedgerConfig) -> str:
    raw = store.read(installment_key(year, month))
    return str(config.installment_default_total) if raw is None else raw


def persist_month_adjustments(
    store: AdjustmentStore,
    year: int,
    month: int,
    advance_value,
    installment_value,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> List[str]:
    """
    Store the inputs that differ from what the month currently shows.

    Loading a month fills the installment box with the default when nothing
    is stored; echoing that value back must not persist it. Returns the keys
    written.
    """
    written = []
    if advance_value is not None and str(advance_value) != (store.read(advance_key(year, month)) or ""):
        store.set(year, month, counterpart_advance=advance_value)
        written.append(advance_key(year, month))
    if installment_value is not None and str(installment_value) != _installment_input_value(store, year, month, config):
        store.set(year, month, installment_deduction=installment_value)
        written.append(installment_key(year, month))
    return written


def selected_month_adjustments(
    store: AdjustmentStore,
    year: int,
    month: int,
    advance_value,
    installment_value,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> _SelectedMonthAdjustments:
    current = MonthAdjustments(
        counterpart_advance=parse_yen_input(advance_value),
        installment_deduction=parse_yen_input(
            installment_value if installment_value is not None
            else _installment_input_value(store, year, month, config)
        ),
    )
    return _SelectedMonthAdjustments(store, year, month, current)


def build_month_views(
    feed: List[ClassifiedRow],
    store: AdjustmentStore,
    year: int,
    month: int,
    advance_value,
    installment_value,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> Tuple[MonthlyReport, pd.DataFrame]:
    """Monthly report and annual overview for the selected period, live inputs applied."""
    adjustments = selected_month_adjustments(store, year, month, advance_value, installment_value, config)
    report = summarize_period(feed, year, month, adjustments, config)
    overview = build_overview(feed, year, adjustments, config)
    return report, overview


# ======================================================
# APP
# ======================================================

def build_app(
    rows: List[dict],
    store: AdjustmentStore,
    config: LedgerConfig = DEFAULT_CONFIG,
    loader: Optional[Callable[[], List[dict]]] = None,
    feed_error: str = "",
) -> Dash:
    app = Dash(
        __name__,
        external_stylesheets=[FONT_STYLESHEET],
        suppress_callback_exceptions=False,
    )
    app.title = "キャッシュフロー・ダッシュボード"

    # Classified once per fetch; callbacks slice this list by parsed date.
    cache = {"feed": classify_rows(rows, config)}

    latest = latest_period(cache["feed"], config)
    today = date.today()
    init_year, init_month = latest if latest else (today.year, today.month)
    years = available_years(cache["feed"], config)

    app.layout = html.Div(
        [
            # ===== HEADER =====
            html.Div([
                html.H1("キャッシュフロー・ダッシュボード", style={
                    "color": COLORS["bg_primary"],
                    "fontSize": "22px",
                    "fontWeight": "700",
                    "margin": "0",
                }),
                html.Div("同棲費用の清算と実質収支をまとめて把握", style={
                    "color": "#ccfbf1",
                    "fontSize": "12px",
                    "marginTop": "4px",
                }),
            ], style={"backgroundColor": COLORS["header_bg"], "padding": "16px 24px"}),

            html.Div(id="feed_banner", children=_feed_banner(feed_error)),
            dcc.Store(id="feed_revision", data=0),

            html.Div([
                # ===== PERIOD + CONTROLS =====
                html.Div([
                    dcc.Dropdown(
                        id="year_select",
                        options=[{"label": f"{y}年", "value": y} for y in years],
                        value=init_year,
                        clearable=False,
                        style={"width": "120px"},
                    ),
                    dcc.Dropdown(
                        id="month_select",
                        options=[{"label": f"{m}月", "value": m} for m in range(1, 13)],
                        value=init_month,
                        clearable=False,
                        style={"width": "100px"},
                    ),
                    html.Button("データを更新", id="refresh_btn", n_clicks=0, disabled=loader is None),
                ], style={"display": "flex", "gap": "12px", "alignItems": "center", "marginBottom": "20px"}),

                html.Div(id="empty_notice"),
                html.Div(id="adjust_status", style={"display": "none"}),
                html.Div(id="kpi_tiles"),

                html.Div([
                    _card([dcc.Graph(id="trend_chart")], flex="2", minWidth="420px"),
                    _card([
                        html.Div(id="ledger_breakdown"),
                        html.Hr(),
                        html.H3("分割払い補正", style={"fontSize": "14px", "margin": "8px 0"}),
                        html.Div("未計上のカード引落", style={"fontSize": "11px", "color": COLORS["neutral_gray"]}),
                        dcc.Input(
                            id="installment_input",
                            type="text",
                            inputMode="numeric",
                            debounce=True,
                            placeholder=f"例: {config.installment_default_total:,}",
                            style={"width": "100%", "textAlign": "right", "marginTop": "6px"},
                        ),
                        html.Ul([
                            html.Li(f"{item.name}  {format_yen(item.amount)}  （完了: {item.completion_date}）",
                                    style={"fontSize": "11px", "color": COLORS["neutral_gray"]})
                            for item in config.installment_items
                        ], style={"paddingLeft": "16px"}),
                    ], flex="1", minWidth="280px"),
                ], style={"display": "flex", "gap": "20px", "flexWrap": "wrap"}),

                html.Div([
                    _card([
                        html.Div(id="billing_breakdown"),
                        html.Hr(),
                        html.Label("相手の立替額（今月）", style={"fontSize": "12px", "fontWeight": "600"}),
                        dcc.Input(
                            id="advance_input",
                            type="text",
                            inputMode="numeric",
                            debounce=True,
                            placeholder="例: 12,000",
                            style={"width": "100%", "textAlign": "right", "marginTop": "6px"},
                        ),
                    ], flex="1", minWidth="280px"),
                    _card([dcc.Graph(id="settlement_chart")], flex="1", minWidth="320px"),
                    _card([dcc.Graph(id="expense_pie")], flex="1", minWidth="320px"),
                ], style={"display": "flex", "gap": "20px", "flexWrap": "wrap"}),

                _card([
                    html.H3("明細", style={"fontSize": "15px", "margin": "0 0 12px 0"}),
                    _details_table("ledger_table"),
                ]),
                _card([
                    html.H3("同棲費用の対象明細", style={"fontSize": "15px", "margin": "0 0 12px 0"}),
                    _details_table("shared_table"),
                ]),
                _card([
                    html.Div([
                        html.H3("サブスク", style={"fontSize": "15px", "margin": "0"}),
                        html.Span(id="subscription_total", style={"fontWeight": "600"}),
                    ], style={"display": "flex", "justifyContent": "space-between", "marginBottom": "12px"}),
                    _details_table("subscription_table"),
                ]),
            ], style={"padding": "20px 24px", "backgroundColor": COLORS["bg_secondary"]}),
        ],
        style={"fontFamily": FONT_STACK},
    )

    # ---------- refresh ----------
    @app.callback(
        Output("feed_revision", "data"),
        Output("feed_banner", "children"),
        Output("year_select", "options"),
        Output("year_select", "value"),
        Output("month_select", "value"),
        Input("refresh_btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def refresh_rows(n_clicks):
        if loader is None:
            return no_update, no_update, no_update, no_update, no_update
        try:
            fresh = loader()
        except FeedError as e:
            print(f"[ERROR] {e}")
            return no_update, _feed_banner(str(e)), no_update, no_update, no_update

        cache["feed"] = classify_rows(fresh, config)
        print(f"[OK] Reloaded {len(fresh)} rows")
        options = [{"label": f"{y}年", "value": y} for y in available_years(cache["feed"], config)]
        newest = latest_period(cache["feed"], config)
        if newest is None:
            return n_clicks, "", options, no_update, no_update
        return n_clicks, "", options, newest[0], newest[1]

    # ---------- adjustment inputs ----------
    @app.callback(
        Output("advance_input", "value"),
        Output("installment_input", "value"),
        Input("year_select", "value"),
        Input("month_select", "value"),
    )
    def load_adjustments(year, month):
        return (
            store.read(advance_key(year, month)) or "",
            _installment_input_value(store, year, month, config),
        )

    @app.callback(
        Output("adjust_status", "children"),
        Input("advance_input", "value"),
        Input("installment_input", "value"),
        State("year_select", "value"),
        State("month_select", "value"),
        prevent_initial_call=True,
    )
    def persist_adjustments(advance_value, installment_value, year, month):
        written = persist_month_adjustments(store, year, month, advance_value, installment_value, config)
        return f"{year}-{month} saved: {', '.join(written)}" if written else no_update

    # ---------- views ----------
    @app.callback(
        Output("empty_notice", "children"),
        Output("kpi_tiles", "children"),
        Output("ledger_breakdown", "children"),
        Output("billing_breakdown", "children"),
        Output("trend_chart", "figure"),
        Output("settlement_chart", "figure"),
        Output("expense_pie", "figure"),
        Output("ledger_table", "data"),
        Output("shared_table", "data"),
        Output("subscription_table", "data"),
        Output("subscription_total", "children"),
        Input("feed_revision", "data"),
        Input("year_select", "value"),
        Input("month_select", "value"),
        Input("advance_input", "value"),
        Input("installment_input", "value"),
    )
    def refresh_views(revision, year, month, advance_value, installment_value):
        report, overview = build_month_views(
            cache["feed"], store, year, month, advance_value, installment_value, config
        )

        notice = ""
        if not report.has_rows:
            notice = html.Div("選択された年月のデータが見つかりませんでした。", style={
                "color": COLORS["neutral_gray"],
                "fontSize": "13px",
                "marginBottom": "12px",
            })

        return (
            notice,
            _kpi_strip(report),
            _breakdown(ledger_breakdown_rows(report), "帳簿内訳"),
            _breakdown(billing_breakdown_rows(report), "同棲費用の精算"),
            _build_trend_figure(monthly_series(overview), year),
            _build_settlement_waterfall(report),
            _build_expense_pie(report, config),
            details_records(report.details.ledger, config),
            details_records(report.details.shared, config),
            details_records(report.subscription.details, config),
            format_yen(report.subscription.total),
        )

    return app


def _feed_banner(message: str):
    if not message:
        return ""
    return html.Div(
        [
            html.Div("データの取得に失敗しました。URLや公開設定を確認してください。", style={"fontWeight": "600"}),
            html.Code(message, style={"fontSize": "11px"}),
        ],
        style={
            "backgroundColor": "#fef2f2",
            "color": "#b91c1c",
            "border": "1px solid #fecaca",
            "padding": "10px 24px",
        },
    )


def main():
    s = load_settings()

    def loader() -> List[dict]:
        return fetch_rows(s.feed_url, timeout=s.feed_timeout)

    feed_error = ""
    try:
        rows = loader()
        print(f"[OK] Loaded {len(rows)} rows from feed")
    except FeedError as e:
        print(f"[ERROR] {e}")
        rows = []
        feed_error = str(e)

    store = AdjustmentStore(s.adjustments_path)
    print(f"[INFO] Adjustments file: {s.adjustments_path}")

    app = build_app(rows, store, loader=loader, feed_error=feed_error)
    app.run(debug=False, host=s.host, port=s.port)


if __name__ == "__main__":
    main()
