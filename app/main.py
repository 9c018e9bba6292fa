import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime
from uuid import uuid4

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
import plotly.express as px
from loguru import logger

from cashflow.config import get_settings
from cashflow.domain import (
    BUCKETS, EXPENSE, INCOME, AllocationSplit, BusinessProfile, GrowthGoal, Onboarding, Transaction
)
from cashflow.events import event_bus, TRANSACTION_ADDED, GOAL_UPDATED
from cashflow.functional import safe_goal, validate_transaction
from cashflow.goals import add_cash, days_until, months_to_goal, progress_percentage
from cashflow.lazy import lazy_top_categories, search_transactions
from cashflow.notifications import load_notifications, notifications_for_user
from cashflow import onboarding as setup
from cashflow.services import DashboardService, ReportService, SplitService, REPORT_TYPES
from cashflow.split import split_amounts
from cashflow.support import PRIORITIES, add_ticket, open_ticket, tickets_for_user
from cashflow.transforms import (
    add_transaction, load_seed, monthly_summary, remove_transaction, update_transaction
)

settings = get_settings()
logger.remove()
logger.add(sys.stderr, level=settings.LOG_LEVEL)

st.set_page_config(page_title="Profit First Tracker", layout="wide")

BUCKET_LABELS = {
    "owner_pay": "Owner Pay",
    "reinvestment": "Reinvestment",
    "savings": "Savings",
    "tax_reserve": "Tax Reserve",
}

if "transactions" not in st.session_state:
    seed_transactions, seed_split, seed_goals = load_seed(settings.SEED_PATH)
    st.session_state.transactions = seed_transactions
    st.session_state.split = seed_split
    st.session_state.goals = seed_goals
    st.session_state.reports = []
    st.session_state.notifications = load_notifications(settings.SEED_PATH)
    st.session_state.tickets = ()
    st.session_state.onboarding = Onboarding()
    st.session_state.profile = BusinessProfile()

dashboard = DashboardService()
splits = SplitService()
reports = ReportService()


def money(x: float) -> str:
    return f"{x:,.2f} {settings.CURRENCY}"


def tx_to_df(tx_list):
    df = pd.DataFrame(
        [
            {
                "id": t.id,
                "date": pd.to_datetime(t.date),
                "description": t.description,
                "category": t.category,
                "kind": t.kind,
                "amount": t.amount if t.kind == INCOME else -t.amount,
            }
            for t in tx_list
        ],
        columns=["id", "date", "description", "category", "kind", "amount"],
    )
    return df.sort_values("date", ascending=False) if not df.empty else df


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "🥧 Profit Split", "🎯 Growth Goals", "📑 Reports", "🚀 Setup", "💬 Support"]
)

if menu == "🏠 Dashboard":
    data = dashboard.summary(
        st.session_state.transactions,
        st.session_state.split,
        st.session_state.goals,
        date.today(),
    )
    summary = data["summary"]

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Revenue (this month)", money(summary["revenue"]))
    with k2:
        st.metric("Expenses (this month)", money(summary["expenses"]))
    with k3:
        st.metric("Profit (this month)", money(summary["profit"]))
    with k4:
        st.metric("Cash Reserve", money(summary["cash_reserve"]))

    for s in data["suggestions"]:
        if s["type"] == "alert":
            st.warning(s["text"])
        else:
            st.info(s["text"])

    col_chart, col_split = st.columns([2, 1])
    with col_chart:
        points = data["cash_reserve_data"]
        fig_res = go.Figure()
        fig_res.add_trace(go.Scatter(
            x=[p["date"] for p in points],
            y=[p["amount"] for p in points],
            mode="lines+markers",
            fill="tozeroy",
            name="Cash Reserve",
        ))
        fig_res.update_layout(title="Cash Reserve", template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_res, use_container_width=True)

    with col_split:
        split = data["profit_split"]
        fig_split = px.pie(
            names=[BUCKET_LABELS[k] for k in BUCKETS],
            values=[split[k] for k in BUCKETS],
            hole=0.5,
            title="Profit Split",
            template="plotly_dark",
        )
        st.plotly_chart(fig_split, use_container_width=True)

    st.subheader("Recent Transactions")
    if data["recent_transactions"]:
        st.table(pd.DataFrame(data["recent_transactions"]))
    else:
        st.info("No transactions to display.")

    st.subheader("Growth Goals")
    for g in data["growth_goals"]:
        st.progress(int(g["progress"]), text=f"{g['name']}: {money(g['current_amount'])} / {money(g['target_amount'])}")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    st.subheader("➕ Add New Transaction")
    with st.form("input_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            tx_date = st.date_input("Date")
            amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f")
        with col2:
            kind = st.selectbox("Type", [INCOME, EXPENSE])
            category = st.text_input("Category")
        description = st.text_input("Description")
        submitted = st.form_submit_button("Add Transaction")

        if submitted:
            new_tx = Transaction(
                id=str(uuid4()),
                amount=float(amount),
                kind=kind,
                date=tx_date,
                description=description,
                category=category,
            )
            checked = validate_transaction(new_tx)
            if checked.is_left():
                st.error(checked.get_error()["message"])
            else:
                st.session_state.transactions = add_transaction(st.session_state.transactions, new_tx)
                event_bus.publish(TRANSACTION_ADDED, {"amount": new_tx.amount, "kind": new_tx.kind})
                logger.info("transaction {} added", new_tx.id)
                st.success("Transaction added")

    with st.expander("🔎 Filter"):
        f1, f2, f3, f4 = st.columns(4)
        with f1:
            f_kind = st.selectbox("Type", ["", INCOME, EXPENSE], key="f_kind")
        with f2:
            categories = sorted({t.category for t in st.session_state.transactions if t.category})
            f_category = st.selectbox("Category", [""] + categories, key="f_category")
        with f3:
            f_start = st.date_input("From", value=None, key="f_start")
        with f4:
            f_end = st.date_input("To", value=None, key="f_end")

    shown = search_transactions(
        st.session_state.transactions,
        kind=f_kind or None,
        category=f_category or None,
        start=f_start,
        end=f_end,
    )
    df = tx_to_df(shown)
    if df.empty:
        st.info("No matching transactions.")
    else:
        disp = df.copy()
        disp["date"] = disp["date"].dt.strftime("%Y-%m-%d")
        st.dataframe(disp.drop(columns=["id"]).reset_index(drop=True), use_container_width=True)
        st.download_button("⬇ Download CSV", disp.to_csv(index=False), file_name="transactions.csv")

        to_delete = st.selectbox(
            "Delete transaction",
            options=[""] + list(df["id"]),
            format_func=lambda tid: "" if not tid else df.loc[df["id"] == tid, "description"].iloc[0],
        )
        if to_delete and st.button("🗑 Delete"):
            st.session_state.transactions = remove_transaction(st.session_state.transactions, to_delete)
            st.rerun()

        to_edit = st.selectbox(
            "Edit transaction",
            options=[""] + list(df["id"]),
            format_func=lambda tid: "" if not tid else df.loc[df["id"] == tid, "description"].iloc[0],
        )
        if to_edit:
            old = next(t for t in st.session_state.transactions if t.id == to_edit)
            with st.form("edit_form"):
                e1, e2 = st.columns(2)
                with e1:
                    e_date = st.date_input("Date", value=old.date, key="e_date")
                    e_amount = st.number_input("Amount", min_value=0.0, value=float(old.amount), step=10.0, key="e_amount")
                with e2:
                    e_kind = st.selectbox("Type", [INCOME, EXPENSE], index=[INCOME, EXPENSE].index(old.kind), key="e_kind")
                    e_category = st.text_input("Category", value=old.category, key="e_category")
                e_description = st.text_input("Description", value=old.description, key="e_description")
                if st.form_submit_button("Save changes"):
                    changes = dict(
                        date=e_date, amount=float(e_amount), kind=e_kind,
                        category=e_category, description=e_description,
                    )
                    edited = update_transaction(st.session_state.transactions, to_edit, **changes)
                    checked = validate_transaction(next(t for t in edited if t.id == to_edit))
                    if checked.is_left():
                        st.error(checked.get_error()["message"])
                    else:
                        st.session_state.transactions = edited
                        logger.info("transaction {} updated", to_edit)
                        st.rerun()

        top = list(lazy_top_categories(st.session_state.transactions, k=5))
        if top:
            fig_cat = px.bar(
                x=[name for name, _ in top],
                y=[total for _, total in top],
                labels={"x": "Category", "y": f"Spent ({settings.CURRENCY})"},
                title="Top Expense Categories",
                template="plotly_dark",
            )
            st.plotly_chart(fig_cat, use_container_width=True)

elif menu == "🥧 Profit Split":
    st.title("🥧 Profit Split")
    st.caption("Allocate your profits strategically across different buckets")

    current = st.session_state.split
    profit = monthly_summary(st.session_state.transactions, date.today()).profit
    amounts = split_amounts(current, profit)

    for key in BUCKETS:
        value = st.slider(
            BUCKET_LABELS[key], min_value=0, max_value=100, value=current.get(key), step=1, key=f"slider_{key}"
        )
        st.caption(money(amounts[key]))
        if value != current.get(key):
            result = splits.update(current, key, value)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.session_state.split = result.get_or_else({})["split"]
                for tip in result.get_or_else({})["suggestions"]:
                    st.info(tip["text"])
                for k in BUCKETS:
                    st.session_state.pop(f"slider_{k}", None)
                st.rerun()

    st.metric("Total", f"{current.total()}%")

elif menu == "🎯 Growth Goals":
    st.title("🎯 Growth Goals")
    if st.session_state.pop("celebrate", False):
        st.balloons()

    with st.form("goal_form", clear_on_submit=True):
        name = st.text_input("Goal name")
        target = st.number_input("Target amount", min_value=0.0, step=100.0)
        target_date = st.date_input("Target date", value=None)
        if st.form_submit_button("Create Goal"):
            if not name or target <= 0:
                st.error("Name and a positive target are required")
            else:
                goal = GrowthGoal(id=str(uuid4()), name=name, target_amount=target, target_date=target_date)
                st.session_state.goals = st.session_state.goals + (goal,)
                st.success("Goal created")

    for g in st.session_state.goals:
        with st.expander(f"{'✅' if g.is_completed else '🎯'} {g.name}"):
            st.progress(int(progress_percentage(g)))
            st.caption(f"{money(g.current_amount)} of {money(g.target_amount)}")
            if g.target_date:
                st.caption(f"{days_until(g.target_date, date.today())} days left")
            eta = months_to_goal(g, st.session_state.transactions)
            if eta is not None and not g.is_completed:
                st.caption(f"About {eta} month(s) at your recent profit rate")

            add = st.number_input("Add cash", min_value=0.0, step=50.0, key=f"add_{g.id}")
            if st.button("Add", key=f"btn_add_{g.id}"):
                latest = safe_goal(st.session_state.goals, g.id).get_or_else(g)
                updated = add_cash(latest, add)
                if updated.is_left():
                    st.error(updated.get_error()["message"])
                else:
                    new_goal = updated.get_or_else(g)
                    st.session_state.goals = tuple(
                        new_goal if x.id == g.id else x for x in st.session_state.goals
                    )
                    for note in event_bus.publish(GOAL_UPDATED, {
                        "goal_id": g.id,
                        "name": g.name,
                        "is_completed": new_goal.is_completed,
                        "was_completed": g.is_completed,
                    }):
                        if note:
                            # balloons render on the next run
                            st.session_state.celebrate = True
                    st.rerun()

elif menu == "📑 Reports":
    st.title("📑 Reports")

    col1, col2 = st.columns(2)
    with col1:
        report_type = st.selectbox("Report type", list(REPORT_TYPES))
    with col2:
        period = st.text_input("Period", value=date.today().strftime("%Y-%m"))

    if st.button("Generate Report"):
        result = reports.generate(report_type, period, st.session_state.transactions, st.session_state.goals)
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            st.session_state.reports = [result.get_or_else({})] + st.session_state.reports

    for rpt in st.session_state.reports:
        meta = rpt["report"]
        with st.expander(f"{meta.name} · {meta.created_at[:10]}"):
            res = rpt["result"]
            c1, c2, c3 = st.columns(3)
            c1.metric("Revenue", money(res.get("revenue", 0)))
            c2.metric("Expenses", money(res.get("expenses", 0)))
            c3.metric("Profit", money(res.get("profit", 0)))
            if "months" in res:
                st.table(pd.DataFrame(res["months"]).T)
            if "goals" in res:
                st.table(pd.DataFrame(res["goals"]))
            st.caption(meta.url)

elif menu == "🚀 Setup":
    st.title("🚀 Setup")
    state = st.session_state.onboarding
    profile = st.session_state.profile

    st.progress(int((state.step - 1) / (setup.LAST_STEP - 1) * 100), text=f"Step {state.step} of {setup.LAST_STEP}")
    if state.completed:
        st.success("Setup complete. You can revisit any step below.")

    with st.expander("1. Welcome", expanded=state.step == 1):
        st.write("Track income and expenses, split every profit dollar on purpose, and watch your reserve grow.")
        if st.button("Get started"):
            st.session_state.onboarding = setup.start(state)
            st.rerun()

    with st.expander("2. Business info", expanded=state.step == 2):
        with st.form("profile_form"):
            business_name = st.text_input("Business name", value=profile.business_name)
            industries = list(setup.INDUSTRIES)
            industry = st.selectbox(
                "Industry", industries, format_func=setup.INDUSTRIES.get,
                index=industries.index(profile.industry) if profile.industry in industries else 0,
            )
            ranges = list(setup.REVENUE_RANGES)
            revenue = st.selectbox(
                "Approximate monthly revenue", ranges, format_func=setup.REVENUE_RANGES.get,
                index=ranges.index(profile.monthly_revenue) if profile.monthly_revenue in ranges else 0,
            )
            if st.form_submit_button("Save business info"):
                result = setup.submit_business_info(state, profile, business_name, industry, revenue)
                if result.is_left():
                    st.error(result.get_error()["message"])
                else:
                    st.session_state.onboarding, st.session_state.profile = result.get_or_else((state, profile))
                    st.rerun()

    with st.expander("3. Financial goals", expanded=state.step == 3):
        picked = st.multiselect(
            f"Pick up to {setup.MAX_FINANCIAL_GOALS}",
            list(setup.FINANCIAL_GOALS),
            default=list(state.financial_goals),
            format_func=setup.FINANCIAL_GOALS.get,
            max_selections=setup.MAX_FINANCIAL_GOALS,
        )
        if st.button("Save goals"):
            result = setup.select_goals(state, picked)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.session_state.onboarding = result.get_or_else(state)
                st.rerun()

    with st.expander("4. Bank connection", expanded=state.step == 4):
        st.caption("Bank sync is simulated; transactions are still entered by hand.")
        b1, b2 = st.columns(2)
        if b1.button("Connect bank"):
            st.session_state.onboarding = setup.connect_bank(state, True)
            st.rerun()
        if b2.button("Skip for now"):
            st.session_state.onboarding = setup.connect_bank(state, False)
            st.rerun()

    with st.expander("5. Profit split", expanded=state.step == 5):
        with st.form("setup_split_form"):
            chosen = {
                key: st.number_input(
                    BUCKET_LABELS[key], min_value=0, max_value=100, value=st.session_state.split.get(key), step=1
                )
                for key in BUCKETS
            }
            if st.form_submit_button("Finish setup"):
                result = setup.complete(state, AllocationSplit(**{k: int(v) for k, v in chosen.items()}))
                if result.is_left():
                    st.error(result.get_error()["message"])
                else:
                    st.session_state.onboarding, st.session_state.split = result.get_or_else((state, None))
                    st.rerun()

elif menu == "💬 Support":
    st.title("💬 Support")

    st.subheader("🔔 Notifications")
    feed = notifications_for_user(st.session_state.notifications, settings.USER_ID, datetime.now())
    if not feed:
        st.info("You're all caught up.")
    for n in feed:
        show = st.warning if n.type in ("alert", "maintenance") else st.info
        show(f"**{n.title}**: {n.message}")

    st.subheader("✉️ Contact support")
    with st.form("ticket_form", clear_on_submit=True):
        subject = st.text_input("Subject")
        message = st.text_area("Message")
        priority = st.selectbox("Priority", PRIORITIES, index=PRIORITIES.index("medium"))
        if st.form_submit_button("Send"):
            result = open_ticket(settings.USER_ID, subject, message, priority)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.session_state.tickets = add_ticket(st.session_state.tickets, result.get_or_else(None))
                st.success("Ticket sent")

    st.subheader("My tickets")
    mine = tickets_for_user(st.session_state.tickets, settings.USER_ID)
    if mine:
        st.table(pd.DataFrame([
            {
                "id": t.id,
                "subject": t.subject,
                "priority": t.priority,
                "status": t.status,
                "created": t.created_at.strftime("%Y-%m-%d %H:%M"),
            }
            for t in mine
        ]))
    else:
        st.caption("No tickets yet.")
