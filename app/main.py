import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import replace
from datetime import date
from uuid import uuid4

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from dateutil.relativedelta import relativedelta

from subtracker.config import SEED_FILE
from subtracker.currency import convert_currency, format_amount
from subtracker.domain import (
    ACTIVE, CANCELED, CUSTOM, INTERVAL_UNITS, MONTH, PAUSED, SCHEDULE_TYPES, Subscription,
)
from subtracker.exceptions import SeedLoadError
from subtracker.functional import validate_subscription
from subtracker.lazy import lazy_top_categories
from subtracker.logger import setup_logger
from subtracker.schedule import compute_next_payment_date, is_subscription_active
from subtracker.services import (
    DEFAULT_ANALYTICS_CALCULATORS,
    DEFAULT_HOME_CALCULATORS,
    AnalyticsService,
    HomeService,
)
from subtracker.totals import calculate_monthly_total, calculate_total_spent, get_monthly_equivalent
from subtracker.transforms import (
    add_subscription,
    change_status,
    filter_subscriptions,
    load_seed,
    subscriptions_due_on,
    update_subscription,
)

logger = setup_logger("subtracker")

st.set_page_config(page_title="Subscription Tracker", layout="wide")

try:
    categories, subscriptions, settings, rates = load_seed(str(SEED_FILE))
except SeedLoadError as e:
    logger.error("Seed load failed: %s", e)
    st.error(str(e))
    st.stop()

if "subs" not in st.session_state:
    st.session_state.subs = subscriptions

if "main_currency" not in st.session_state:
    st.session_state.main_currency = settings.main_currency

if "round_whole" not in st.session_state:
    st.session_state.round_whole = settings.round_whole_numbers

st.sidebar.markdown("### ⚙️ Display")
currency_options = sorted(set(rates.rates) | {rates.base, settings.main_currency})
st.session_state.main_currency = st.sidebar.selectbox(
    "Main currency",
    currency_options,
    index=currency_options.index(st.session_state.main_currency),
)
st.session_state.round_whole = st.sidebar.checkbox("Round to whole numbers", value=st.session_state.round_whole)
settings = replace(
    settings,
    main_currency=st.session_state.main_currency,
    round_whole_numbers=st.session_state.round_whole,
)
st.sidebar.caption(f"Rates base {rates.base}, updated {rates.updated_at or 'never'}")

category_by_id = {c.id: c for c in categories}


def money(value: float) -> str:
    return format_amount(value, settings.main_currency, settings.round_whole_numbers)


def subs_to_df(subs):
    today = date.today()
    rows = []
    for s in subs:
        rows.append({
            "id": s.id,
            "name": s.name,
            "category": category_by_id[s.category_id].name if s.category_id in category_by_id else "Other",
            "schedule": s.schedule_type if s.schedule_type != CUSTOM else f"every {s.interval_count} {s.interval_unit}",
            "amount": format_amount(s.amount, s.currency, settings.round_whole_numbers),
            "status": s.status,
            "next_payment": compute_next_payment_date(s, today).isoformat() if is_subscription_active(s, today) else "-",
            "monthly_equiv": money(convert_currency(get_monthly_equivalent(s), s.currency, settings.main_currency, rates)),
            "total_spent": money(calculate_total_spent(s, settings, rates, today)),
        })
    return pd.DataFrame(rows)


menu = st.sidebar.radio("Menu", ["🏠 Home", "📋 Subscriptions", "📊 Analytics", "💱 Currency"])

if menu == "🏠 Home":
    st.title("🏠 Home")

    col_month, col_list, col_query = st.columns([1, 1, 2])
    with col_month:
        month_date = st.date_input("Month", value=date.today())
    with col_list:
        list_ids = sorted({s.list_id for s in st.session_state.subs if s.list_id})
        selected_list = st.selectbox("List", ["All Subs"] + list_ids)
    with col_query:
        query = st.text_input("Search", value="")

    visible = filter_subscriptions(
        st.session_state.subs,
        None if selected_list == "All Subs" else selected_list,
        query,
    )

    summary = HomeService(DEFAULT_HOME_CALCULATORS).summary(month_date, visible, settings, rates)
    result = summary["result"]

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("This month", money(result["monthly_total"]))
    with k2:
        st.metric("Average monthly", money(result["average_monthly"]))
    with k3:
        st.metric("Active", len(visible))

    for err in summary["validation"]:
        st.warning(err["message"])

    st.subheader(f"📅 Payments in {summary['month']}")
    calendar = result["calendar"]
    if calendar:
        sub_by_id = {s.id: s for s in visible}
        cal_rows = [
            {
                "date": day,
                "subscription": sub_by_id[sid].name,
                "amount": format_amount(sub_by_id[sid].amount, sub_by_id[sid].currency, settings.round_whole_numbers),
            }
            for day, ids in calendar.items()
            for sid in ids
        ]
        st.table(pd.DataFrame(cal_rows))

        selected_day = st.selectbox("Day", list(calendar.keys()))
        due = subscriptions_due_on(visible, selected_day)
        st.caption(", ".join(s.name for s in due) or "Nothing due")
    else:
        st.info("No payments this month.")

elif menu == "📋 Subscriptions":
    st.title("📋 Subscriptions")

    df = subs_to_df(st.session_state.subs)
    if not df.empty:
        st.dataframe(df.drop(columns=["id"]), use_container_width=True)
        st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name="subscriptions.csv", mime="text/csv")
    else:
        st.info("No subscriptions yet.")

    st.subheader("⏸ Change status")
    if st.session_state.subs:
        names = {s.name: s for s in st.session_state.subs}
        col_sub, col_status = st.columns(2)
        with col_sub:
            chosen = st.selectbox("Subscription", list(names))
        with col_status:
            new_status = st.selectbox("Status", [ACTIVE, PAUSED, CANCELED])
        if st.button("Apply", key="btn_status"):
            updated = change_status(names[chosen], new_status)
            st.session_state.subs = update_subscription(st.session_state.subs, updated)
            logger.info("Subscription %s set to %s", updated.id, new_status)
            st.rerun()

    st.subheader("➕ Add Subscription")
    with st.form("add_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name")
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
            currency = st.selectbox("Currency", currency_options)
            category = st.selectbox("Category", [c.name for c in categories])
        with col2:
            schedule_type = st.selectbox("Schedule", SCHEDULE_TYPES)
            interval_count = st.number_input("Every", min_value=1, value=1, step=1)
            interval_unit = st.selectbox("Unit (custom only)", INTERVAL_UNITS, index=INTERVAL_UNITS.index(MONTH))
            anchor = st.date_input("First payment", value=date.today())
        submitted = st.form_submit_button("Add")

        if submitted:
            new_sub = Subscription(
                id=str(uuid4()),
                name=name or "Untitled",
                amount=float(amount),
                currency=currency,
                billing_anchor=anchor.isoformat(),
                start_date=anchor.isoformat(),
                schedule_type=schedule_type,
                interval_count=int(interval_count),
                interval_unit=interval_unit if schedule_type == CUSTOM else None,
                category_id=next(c.id for c in categories if c.name == category),
            )
            checked = validate_subscription(new_sub)
            if checked.is_left():
                st.error(checked.get_error()["message"])
            else:
                st.session_state.subs = add_subscription(st.session_state.subs, new_sub)
                logger.info("Added subscription %s", new_sub.id)
                st.success(f"Added {new_sub.name}, next payment {compute_next_payment_date(new_sub).isoformat()}")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")

    report = AnalyticsService(DEFAULT_ANALYTICS_CALCULATORS).report(
        st.session_state.subs, categories, settings, rates
    )
    result = report["result"]

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Active", result["active_count"])
    with k2:
        st.metric("Yearly forecast", money(result["yearly_forecast"]))
    with k3:
        st.metric("Average monthly", money(result["average_monthly"]))
    with k4:
        st.metric("Year to date", money(result["year_to_date"]))

    cat_totals = result["category_totals"]
    if cat_totals:
        df_cat = pd.DataFrame(cat_totals)
        fig_cat = px.pie(
            df_cat,
            values="total",
            names="name",
            color="name",
            color_discrete_map={c["name"]: c["color"] for c in cat_totals},
            hole=0.55,
            title="Yearly spend by category",
        )
        fig_cat.update_layout(height=360)
        st.plotly_chart(fig_cat, use_container_width=True)

        pairs = [(category_by_id[c["id"]], c["total"]) for c in cat_totals]
        top_n = st.slider("Top categories", 1, len(pairs), min(3, len(pairs))) if len(pairs) > 1 else 1
        for cat_name, total in lazy_top_categories(pairs, top_n):
            st.markdown(f"- **{cat_name}**: {money(total)}")
    else:
        st.info("No category spend yet.")

    this_month = date.today().replace(day=1)
    months = [this_month - relativedelta(months=i) for i in range(11, -1, -1)]
    active = [s for s in st.session_state.subs if s.status == ACTIVE]
    monthly = np.array([calculate_monthly_total(active, m, settings, rates) for m in months])
    run_rate = np.full(len(months), result["average_monthly"])

    fig_ts = go.Figure()
    fig_ts.add_trace(go.Bar(x=[m.strftime("%b %y") for m in months], y=monthly, name="Charged"))
    fig_ts.add_trace(go.Scatter(x=[m.strftime("%b %y") for m in months], y=run_rate, mode="lines", name="Run rate"))
    fig_ts.add_trace(go.Scatter(x=[m.strftime("%b %y") for m in months], y=np.cumsum(monthly), mode="lines+markers", name="Cumulative"))
    fig_ts.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

elif menu == "💱 Currency":
    st.title("💱 Currency")

    col1, col2, col3 = st.columns(3)
    with col1:
        amount = st.number_input("Amount", value=100.0, step=10.0)
    with col2:
        from_code = st.selectbox("From", currency_options, key="conv_from")
    with col3:
        to_code = st.selectbox("To", currency_options, key="conv_to")

    converted = convert_currency(amount, from_code, to_code, rates)
    st.metric("Result", format_amount(converted, to_code, settings.round_whole_numbers))

    rate_df = pd.DataFrame(
        [{"currency": code, f"per 1 {rates.base}": rate} for code, rate in sorted(rates.rates.items())]
    )
    st.table(rate_df)
