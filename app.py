import streamlit as st
import pandas as pd
import altair as alt
import plotly.graph_objects as go

import draft_engine as de
import handicap_engine as he
import hole_resolver as hr
import match_engine as me
import pairing_engine as pe
import press_ledger as pl
import standings as sd
import tee_sheet as ts
import views
from engine_errors import EngineError
from match_models import (
    DEFAULT_AUCTION_BUDGET,
    DraftMode,
    DraftStatus,
    Match,
    MatchStatus,
    Player,
    Session,
    SessionType,
    Side,
    TeeSet,
)

# ------------------------------------------------------------
# Page config
# ------------------------------------------------------------
st.set_page_config(
    page_title="Ryder Caddy",
    page_icon="🏆",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ------------------------------------------------------------
# Demo course & roster
# ------------------------------------------------------------

DEMO_TEE_SET = TeeSet(
    id="blue",
    name="Blue Tees",
    hole_handicap_ranking=(7, 11, 3, 13, 9, 1, 15, 5, 17, 8, 16, 10, 4, 12, 6, 18, 2, 14),
    hole_par=(4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 4, 3, 5, 4, 4, 3, 4, 5),
)

DEMO_PLAYERS = [
    Player("p1", "Alex", 4.2),
    Player("p2", "Blake", 9.8),
    Player("p3", "Casey", 12.5),
    Player("p4", "Drew", 17.1),
    Player("p5", "Emery", 6.0),
    Player("p6", "Finley", 11.3),
    Player("p7", "Gray", 14.9),
    Player("p8", "Harper", None),
]

# ------------------------------------------------------------
# Session state defaults
# ------------------------------------------------------------

DEFAULTS = {
    "side_a_name": "USA",
    "side_b_name": "Europe",
    "slope_rating": 128,
    "course_rating": 71.4,
    "side_a_index": 8.4,
    "side_b_index": 14.6,
    "hole_results": [],       # HoleResult list for the live match
    "presses": [],            # Press list for the live match
    "draft_state": None,
    "pairing_history": [],
    "session_matches": [],    # matches locked in from the Pairings tab
    "tee_mode": ts.MODE_STAGGERED,
    "first_tee_time": "08:00",
}


def init_session_state():
    for k, v in DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = list(v) if isinstance(v, list) else v


init_session_state()

st.markdown(
    """
    <style>
    .stApp {
        background-color: #05070b;
    }
    h1, h2, h3, h4, h5, h6 {
        color: #f5f5f5;
    }
    .stMarkdown, .stText, .stCaption, label {
        color: #e6e6e6 !important;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

# ------------------------------------------------------------
# Sidebar controls
# ------------------------------------------------------------

with st.sidebar:
    st.header("Match Setup")

    st.session_state.side_a_name = st.text_input("Side A name", value=st.session_state.side_a_name)
    st.session_state.side_b_name = st.text_input("Side B name", value=st.session_state.side_b_name)

    st.markdown("---")
    st.markdown("**Course**")
    st.session_state.slope_rating = st.number_input(
        "Slope rating", min_value=55, max_value=155, value=int(st.session_state.slope_rating)
    )
    st.session_state.course_rating = st.number_input(
        "Course rating", min_value=60.0, max_value=80.0,
        value=float(st.session_state.course_rating), step=0.1,
    )

    st.markdown("---")
    st.markdown("**Handicap Index**")
    st.session_state.side_a_index = st.number_input(
        "Side A index", min_value=-10.0, max_value=54.0,
        value=float(st.session_state.side_a_index), step=0.1,
    )
    st.session_state.side_b_index = st.number_input(
        "Side B index", min_value=-10.0, max_value=54.0,
        value=float(st.session_state.side_b_index), step=0.1,
        help="Plus handicaps are entered as negative numbers.",
    )

side_names = {
    Side.SIDE_A: st.session_state.side_a_name or "Side A",
    Side.SIDE_B: st.session_state.side_b_name or "Side B",
}

course_par = sum(DEMO_TEE_SET.hole_par)
ch_a = he.course_handicap(
    st.session_state.side_a_index, st.session_state.slope_rating,
    st.session_state.course_rating, course_par,
)
ch_b = he.course_handicap(
    st.session_state.side_b_index, st.session_state.slope_rating,
    st.session_state.course_rating, course_par,
)
allowances = he.singles_allowances(ch_a, ch_b)

live_match = Match(
    id="live",
    session_id="s1",
    side_a_player_ids=[side_names[Side.SIDE_A]],
    side_b_player_ids=[side_names[Side.SIDE_B]],
    side_a_handicap_allowance=allowances["side_a"],
    side_b_handicap_allowance=allowances["side_b"],
    tee_set_id=DEMO_TEE_SET.id,
)


def _recompute_presses():
    st.session_state.presses = pl.recompute_presses(
        st.session_state.presses, st.session_state.hole_results
    )


def draw_match_progress(hole_results):
    progress = views.match_progress_frame(hole_results)
    if progress.empty:
        st.info("No holes played yet.")
        return

    line = (
        alt.Chart(progress)
        .mark_line(point=True, color="#f1c40f")
        .encode(
            x=alt.X("Hole:Q", scale=alt.Scale(domain=[1, 18]), title="Hole"),
            y=alt.Y("Score:Q", title=f"+ = {side_names[Side.SIDE_A]} up"),
            tooltip=["Hole", "Status"],
        )
    )
    zero = alt.Chart(pd.DataFrame({"y": [0]})).mark_rule(color="#7f8c8d").encode(y="y:Q")

    chart = (
        alt.layer(zero, line)
        .properties(height=280, title="Match Progress")
        .configure_view(stroke=None, fill="#05070b")
        .configure_axis(labelColor="#f5f5f5", titleColor="#f5f5f5")
        .configure_title(color="#f5f5f5")
    )
    st.altair_chart(chart, use_container_width=True)


def draw_team_totals(totals):
    fig = go.Figure(
        go.Bar(
            x=list(totals.keys()),
            y=list(totals.values()),
            marker_color=["#3498db", "#e74c3c", "#2ecc71", "#f1c40f"][: len(totals)],
        )
    )
    fig.update_layout(
        height=280,
        title="Team Handicap Totals",
        margin=dict(t=60, b=10, l=10, r=10),
    )
    st.plotly_chart(fig, use_container_width=True)


# ------------------------------------------------------------
# Tabs
# ------------------------------------------------------------

tab_match, tab_standings, tab_presses, tab_draft, tab_pairings, tab_tees, tab_info = st.tabs(
    ["Match", "Standings", "Presses", "Draft", "Pairings", "Tee Sheet", "Info"]
)

# ============================================================
# MATCH TAB
# ============================================================

with tab_match:
    st.subheader(f"{side_names[Side.SIDE_A]} vs {side_names[Side.SIDE_B]}")
    st.caption(
        f"Course handicaps {ch_a} / {ch_b}. "
        f"Strokes: {side_names[Side.SIDE_A]} {allowances['side_a']}, "
        f"{side_names[Side.SIDE_B]} {allowances['side_b']}."
    )

    state = me.calculate_match_state(live_match, st.session_state.hole_results, side_names=side_names)

    c1, c2, c3 = st.columns(3)
    c1.metric("Score", state.display_score)
    c2.metric("Thru", state.holes_played)
    c3.metric("Status", "Dormie" if state.is_dormie else state.status.value.replace("_", " ").title())

    hole = me.next_hole(st.session_state.hole_results)
    if state.status != MatchStatus.COMPLETED and hole is not None:
        strokes = he.strokes_on_hole(
            hole, allowances["side_a"], allowances["side_b"], DEMO_TEE_SET.hole_handicap_ranking
        )
        st.markdown(
            f"**Hole {hole}** (par {DEMO_TEE_SET.hole_par[hole - 1]}, "
            f"index {DEMO_TEE_SET.hole_handicap_ranking[hole - 1]})"
        )
        g1, g2 = st.columns(2)
        with g1:
            gross_a = st.number_input(
                f"{side_names[Side.SIDE_A]} gross (+{strokes['side_a']})",
                min_value=1, max_value=15, value=4, key=f"gross_a_{hole}",
            )
        with g2:
            gross_b = st.number_input(
                f"{side_names[Side.SIDE_B]} gross (+{strokes['side_b']})",
                min_value=1, max_value=15, value=4, key=f"gross_b_{hole}",
            )

        if st.button("Record hole", type="primary"):
            result = hr.score_hole(
                live_match, DEMO_TEE_SET, int(hole),
                side_a_gross=int(gross_a), side_b_gross=int(gross_b),
            )
            try:
                st.session_state.hole_results = me.record_hole_result(
                    live_match, st.session_state.hole_results, result
                )
            except EngineError as exc:
                st.error(str(exc))
            else:
                _recompute_presses()
                st.rerun()
    else:
        st.success(me.format_final_result(state, side_names[Side.SIDE_A], side_names[Side.SIDE_B]))

    b1, b2 = st.columns(2)
    with b1:
        if st.button("Undo last hole", disabled=not st.session_state.hole_results):
            st.session_state.hole_results = me.undo_last_hole(st.session_state.hole_results)
            _recompute_presses()
            st.rerun()
    with b2:
        if st.button("Reset match"):
            st.session_state.hole_results = []
            st.session_state.presses = []
            st.rerun()

    draw_match_progress(st.session_state.hole_results)

    st.markdown("### Scorecard")
    st.dataframe(
        views.scorecard_frame(live_match, st.session_state.hole_results, DEMO_TEE_SET, side_names),
        use_container_width=True,
        hide_index=True,
    )

# ============================================================
# STANDINGS TAB
# ============================================================

with tab_standings:
    st.subheader("Team Standings")

    event_matches = [live_match] + st.session_state.session_matches
    results_by_match = {live_match.id: st.session_state.hole_results}
    standings = sd.calculate_team_standings(event_matches, results_by_match)
    magic = sd.calculate_magic_number(standings, sd.points_needed_to_win(len(event_matches)))

    s1, s2, s3 = st.columns(3)
    s1.metric(side_names[Side.SIDE_A], standings["side_a_points"])
    s2.metric(side_names[Side.SIDE_B], standings["side_b_points"])
    s3.metric("Matches left", standings["matches_remaining"])
    if magic["has_clinched"]:
        st.success(f"{side_names[magic['clinching_side']]} has won the cup.")
    else:
        st.caption(f"{magic['points_to_win']:g} points win the cup.")

    st.dataframe(views.standings_frame(standings, magic, side_names), use_container_width=True, hide_index=True)
    st.dataframe(
        views.match_board_frame(event_matches, results_by_match, side_names, totals=True),
        use_container_width=True,
        hide_index=True,
    )

    team_of = {p.id: side_names[Side.SIDE_A] for p in DEMO_PLAYERS[:4]}
    team_of.update({p.id: side_names[Side.SIDE_B] for p in DEMO_PLAYERS[4:]})
    leaderboard = sd.calculate_player_leaderboard(DEMO_PLAYERS, event_matches, results_by_match, team_of)
    st.markdown("### Players")
    st.dataframe(views.leaderboard_frame(leaderboard), use_container_width=True, hide_index=True)

# ============================================================
# PRESSES TAB
# ============================================================

with tab_presses:
    st.subheader("Presses")
    st.caption(f"A side {pl.PRESS_THRESHOLD} or more down may press; never on the last hole.")

    played = me.tally_holes(st.session_state.hole_results)["last_hole"]
    press_side = st.radio(
        "Pressing side",
        [Side.SIDE_A, Side.SIDE_B],
        format_func=lambda s: side_names[s],
        horizontal=True,
    )
    press_value = st.number_input("Press value", min_value=1, max_value=100, value=1)

    if st.button("Press", disabled=played is None):
        try:
            press = pl.open_press(
                press_side,
                int(played),
                st.session_state.hole_results,
                st.session_state.presses,
                value=int(press_value),
            )
        except EngineError as exc:
            st.warning(str(exc))
        else:
            st.session_state.presses = st.session_state.presses + [press]
            _recompute_presses()
            st.rerun()

    if st.session_state.presses:
        st.dataframe(views.press_frame(st.session_state.presses), use_container_width=True, hide_index=True)
        exposure = pl.press_exposure(st.session_state.presses)
        e1, e2, e3 = st.columns(3)
        e1.metric(side_names[Side.SIDE_A], exposure["side_a"])
        e2.metric(side_names[Side.SIDE_B], exposure["side_b"])
        e3.metric("Open presses", exposure["open_presses"])
    else:
        st.info("No presses yet.")

# ============================================================
# DRAFT TAB
# ============================================================

with tab_draft:
    st.subheader("Team Draft")

    teams = [side_names[Side.SIDE_A], side_names[Side.SIDE_B]]
    method = st.radio(
        "Method", ["Snake", "Auction", "Random", "Balanced"], horizontal=True
    )

    if method in ("Random", "Balanced"):
        if method == "Random":
            seed = st.number_input("Shuffle seed", min_value=0, max_value=9999, value=7)
            allocation = de.randomize_teams(DEMO_PLAYERS, teams, seed=int(seed))
        else:
            allocation = de.balance_teams_by_handicap(DEMO_PLAYERS, teams)
        st.dataframe(views.allocation_frame(allocation, DEMO_PLAYERS), use_container_width=True, hide_index=True)
        draw_team_totals(allocation["handicap_totals"])
    else:
        mode = DraftMode.SNAKE if method == "Snake" else DraftMode.AUCTION
        draft = st.session_state.draft_state
        if draft is None or draft.config.mode != mode or list(draft.config.draft_order) != teams:
            config = de.create_draft_config(mode, teams, len(DEMO_PLAYERS), DEFAULT_AUCTION_BUDGET)
            problems = de.validate_draft_ready(config, DEMO_PLAYERS)
            for p in problems:
                st.warning(p)
            draft = de.initialize_draft(config, DEMO_PLAYERS)
            st.session_state.draft_state = draft

        summary = de.draft_summary(draft, DEMO_PLAYERS)

        if draft.status != DraftStatus.COMPLETE:
            st.markdown(f"**On the clock:** {summary['on_the_clock']}")
            pool = {p.id: p for p in draft.available_players}
            choice = st.selectbox(
                "Player",
                list(pool.keys()),
                format_func=lambda pid: f"{pool[pid].name} ({pool[pid].handicap_index})",
            )
            price = None
            if mode == DraftMode.AUCTION:
                price = int(st.number_input("Winning bid", min_value=0, max_value=DEFAULT_AUCTION_BUDGET, value=10))

            d1, d2 = st.columns(2)
            with d1:
                if st.button("Make pick", type="primary"):
                    try:
                        picked = de.make_draft_pick(draft, choice, price)
                    except (EngineError, ValueError) as exc:
                        st.error(str(exc))
                    else:
                        st.session_state.draft_state = picked
                        st.rerun()
            with d2:
                if st.button("Auto pick"):
                    auto_id = de.auto_pick_player(draft)
                    try:
                        picked = de.make_draft_pick(
                            draft, auto_id, 1 if mode == DraftMode.AUCTION else None
                        )
                    except EngineError as exc:
                        st.error(str(exc))
                    else:
                        st.session_state.draft_state = picked
                        st.rerun()
        else:
            st.success("Draft complete.")

        if st.button("Restart draft"):
            st.session_state.draft_state = None
            st.rerun()

        st.dataframe(views.team_totals_frame(summary), use_container_width=True, hide_index=True)
        st.dataframe(views.draft_board_frame(summary), use_container_width=True, hide_index=True)
        draw_team_totals({t["team_id"]: t["handicap_total"] for t in summary["teams"]})

# ============================================================
# PAIRINGS TAB
# ============================================================

with tab_pairings:
    st.subheader("Smart Pairings")

    session_type = st.selectbox(
        "Format",
        [SessionType.SINGLES, SessionType.FOURBALL, SessionType.FOURSOMES],
        format_func=lambda s: s.value.title(),
    )
    per_side = pe.players_per_side(session_type)
    side_a_players = DEMO_PLAYERS[:4]
    side_b_players = DEMO_PLAYERS[4:]
    match_count = st.slider("Matches", 1, len(side_a_players) // per_side, len(side_a_players) // per_side)

    suggestions = pe.suggest_pairings(
        side_a_players,
        side_b_players,
        st.session_state.pairing_history,
        match_count,
        session_type,
    )
    players_by_id = {p.id: p for p in DEMO_PLAYERS}
    st.dataframe(views.pairing_frame(suggestions, players_by_id), use_container_width=True, hide_index=True)

    session_number = 1 + max((h.session_number for h in st.session_state.pairing_history), default=0)
    proposed = [
        Match(
            id=f"s{session_number}-m{s.match_slot}",
            session_id=f"s{session_number}",
            side_a_player_ids=s.side_a_player_ids,
            side_b_player_ids=s.side_b_player_ids,
            match_order=s.match_slot,
            session_type=session_type,
        )
        for s in suggestions
    ]
    report = pe.analyze_session_pairings(
        proposed, side_a_players, side_b_players, st.session_state.pairing_history, session_type
    )
    r1, r2, r3 = st.columns(3)
    r1.metric("Fairness", report["overall_fairness_score"])
    r2.metric("Handicap balance", report["handicap_balance"])
    r3.metric("Repeat matchups", report["repeat_matchup_count"])
    for tip in report["suggestions"]:
        st.caption(tip)

    lineup_errors = sd.validate_session_lineup(
        session_type, proposed, roster_ids=[p.id for p in DEMO_PLAYERS]
    )
    for problem in lineup_errors:
        st.warning(problem)

    if st.button("Lock in session", disabled=not proposed or bool(lineup_errors)):
        session = Session(f"s{session_number}", session_type, session_number)
        st.session_state.pairing_history = st.session_state.pairing_history + pe.extract_pairing_history(
            proposed, [session]
        )
        st.session_state.session_matches = st.session_state.session_matches + proposed
        st.rerun()

# ============================================================
# TEE SHEET TAB
# ============================================================

with tab_tees:
    st.subheader("Tee Sheet")

    tee_count = st.slider("Matches to send off", 1, 16, 4)
    tee_format = st.selectbox(
        "Session format",
        [SessionType.SINGLES, SessionType.FOURBALL, SessionType.FOURSOMES],
        format_func=lambda s: s.value.title(),
        key="tee_format",
    )
    suggested = ts.suggest_tee_time_config(tee_count, tee_format, st.session_state.first_tee_time)
    modes = [ts.MODE_STAGGERED, ts.MODE_SHOTGUN]
    st.session_state.tee_mode = st.radio(
        "Start", modes, index=modes.index(suggested["mode"]), horizontal=True
    )
    st.session_state.first_tee_time = st.text_input("First tee time (HH:MM)", st.session_state.first_tee_time)

    tee_matches = [
        Match(id=f"m{i}", session_id="tee", side_a_player_ids=[], side_b_player_ids=[], match_order=i)
        for i in range(1, tee_count + 1)
    ]
    try:
        sheet = ts.generate_tee_sheet(
            tee_matches,
            {"mode": st.session_state.tee_mode, "first_tee_time": st.session_state.first_tee_time},
            session_type=tee_format,
        )
    except ValueError as exc:
        st.error(str(exc))
    else:
        st.dataframe(views.tee_sheet_frame(sheet), use_container_width=True, hide_index=True)
        st.caption(
            f"First group {sheet['first_tee_time']}, last group {sheet['last_tee_time']}, "
            f"finishing around {ts.estimated_finish_time(ts.format_time_24h(sheet['slots'][-1]['time']), tee_format)}."
        )
        for conflict in ts.check_tee_time_conflicts(sheet["slots"]):
            st.warning(conflict)

# ============================================================
# INFO TAB
# ============================================================

with tab_info:
    st.subheader("How scoring works")
    st.markdown(
        """
        - **Strokes**: only the difference between the two handicaps is given,
          on the hardest holes by stroke index first.
        - **Dormie**: a side is as many holes up as there are left to play.
        - **Closeout**: the lead is bigger than the holes left; shown as *3 & 2*.
        - **Press**: a side two or more down can start a new bet from the next hole.
        """
    )
    st.markdown("### Stroke table")
    st.dataframe(
        views.stroke_table(DEMO_TEE_SET, allowances["side_a"], allowances["side_b"]),
        use_container_width=True,
        hide_index=True,
    )
