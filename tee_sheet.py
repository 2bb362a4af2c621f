import logging
from datetime import date, datetime, time, timedelta

from match_models import TOTAL_HOLES, SessionType

logger = logging.getLogger(__name__)

# ============================================================
# Constants
# ============================================================

MODE_STAGGERED = "staggered"
MODE_SHOTGUN = "shotgun"
MODE_WAVE = "wave"

# minutes between groups
DEFAULT_INTERVALS = {
    SessionType.SINGLES: 8,
    SessionType.FOURBALL: 10,
    SessionType.FOURSOMES: 10,
}

DEFAULT_SHOTGUN_HOLES = [1, 3, 5, 7, 10, 12, 14, 16]

# estimated 18-hole round times, minutes
ROUND_MINUTES = {
    SessionType.SINGLES: 240,
    SessionType.FOURBALL: 270,
    SessionType.FOURSOMES: 240,
}


# ============================================================
# Utility functions
# ============================================================

def parse_time_string(value):
    """'HH:MM' -> (hours, minutes)."""
    try:
        hours, minutes = (int(part) for part in value.split(":"))
    except (AttributeError, ValueError):
        raise ValueError(f"Tee time must look like HH:MM, got {value!r}") from None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Tee time out of range: {value!r}")
    return hours, minutes


def format_time_12h(moment):
    return moment.strftime("%I:%M %p").lstrip("0")


def format_time_24h(moment):
    return moment.strftime("%H:%M")


def _at(tee_date, hhmm):
    hours, minutes = parse_time_string(hhmm)
    return datetime.combine(tee_date, time(hours, minutes))


def generate_shotgun_holes(group_count):
    """Spread groups evenly around the course."""
    if group_count <= 0:
        return []
    spacing = max(1, TOTAL_HOLES // group_count)
    return [((i * spacing) % TOTAL_HOLES) + 1 for i in range(group_count)]


# ============================================================
# Slot generators
# ============================================================

def _slot(match, moment, starting_hole, group_name):
    return {
        "match_id": match.id,
        "time": moment,
        "starting_hole": starting_hole,
        "group_name": group_name,
    }


def _staggered(matches, cfg, tee_date):
    ordered = list(reversed(matches)) if cfg["reverse_order"] else matches
    start = _at(tee_date, cfg["first_tee_time"])
    step = timedelta(minutes=cfg["interval_minutes"])
    return [
        _slot(m, start + i * step, 1, f"Match {m.match_order}")
        for i, m in enumerate(ordered)
    ]


def _shotgun(matches, cfg, tee_date):
    start = _at(tee_date, cfg["first_tee_time"])
    holes = cfg["shotgun_holes"] or DEFAULT_SHOTGUN_HOLES
    slots = []
    for i, m in enumerate(matches):
        hole = holes[i % len(holes)]
        slots.append(_slot(m, start, hole, f"Match {m.match_order} - Hole {hole}"))
    return slots


def _waves(matches, cfg, tee_date):
    if not cfg["waves"]:
        return _staggered(matches, cfg, tee_date)

    step = timedelta(minutes=cfg["interval_minutes"])
    slots = []
    placed = set()
    for wave in cfg["waves"]:
        wave_start = _at(tee_date, wave["start_time"])
        wave_matches = [m for m in matches if m.id in wave["match_ids"]]
        for i, m in enumerate(wave_matches):
            slots.append(
                _slot(m, wave_start + i * step, 1, f"{wave['name']} - Match {m.match_order}")
            )
            placed.add(m.id)

    unplaced = [m.id for m in matches if m.id not in placed]
    if unplaced:
        logger.debug("matches not in any wave: %s", unplaced)
    return slots


# ============================================================
# Tee sheet
# ============================================================

def generate_tee_sheet(matches, config=None, tee_date=None, session_type=SessionType.SINGLES, time_slot="AM"):
    """
    Lay out tee times for a session's matches.

    config keys (all optional): mode (staggered | shotgun | wave),
    first_tee_time ("HH:MM"), interval_minutes, reverse_order,
    shotgun_holes, waves ([{name, start_time, match_ids}]).
    """
    config = config or {}
    session_type = SessionType(session_type)
    cfg = {
        "mode": config.get("mode") or MODE_STAGGERED,
        "first_tee_time": config.get("first_tee_time") or ("13:00" if time_slot == "PM" else "08:00"),
        "interval_minutes": (
            config["interval_minutes"]
            if config.get("interval_minutes") is not None
            else DEFAULT_INTERVALS[session_type]
        ),
        "reverse_order": bool(config.get("reverse_order")),
        "shotgun_holes": config.get("shotgun_holes"),
        "waves": config.get("waves") or [],
    }

    tee_date = tee_date or date.today()
    ordered = sorted(matches, key=lambda m: m.match_order)

    if cfg["mode"] == MODE_SHOTGUN:
        slots = _shotgun(ordered, cfg, tee_date)
    elif cfg["mode"] == MODE_WAVE:
        slots = _waves(ordered, cfg, tee_date)
    elif cfg["mode"] == MODE_STAGGERED:
        slots = _staggered(ordered, cfg, tee_date)
    else:
        raise ValueError(f"Unknown tee sheet mode: {cfg['mode']!r}")

    if not slots:
        return {"slots": [], "total_duration": 0, "first_tee_time": None, "last_tee_time": None}

    first = min(s["time"] for s in slots)
    last = max(s["time"] for s in slots)
    return {
        "slots": slots,
        "total_duration": int((last - first).total_seconds() // 60),
        "first_tee_time": format_time_12h(first),
        "last_tee_time": format_time_12h(last),
    }


def suggest_tee_time_config(match_count, session_type, preferred_start="08:00"):
    """Shotgun for big fields (12+ matches), otherwise a simple staggered start."""
    session_type = SessionType(session_type)
    if match_count >= 12:
        return {
            "mode": MODE_SHOTGUN,
            "first_tee_time": preferred_start,
            "interval_minutes": 0,
            "shotgun_holes": generate_shotgun_holes(match_count),
        }
    return {
        "mode": MODE_STAGGERED,
        "first_tee_time": preferred_start,
        "interval_minutes": DEFAULT_INTERVALS[session_type],
    }


def estimated_finish_time(start_time, session_type, nine_holes=False):
    """12-hour finish time for a group going off at start_time."""
    minutes = ROUND_MINUTES[SessionType(session_type)]
    if nine_holes:
        minutes //= 2
    start = _at(date.today(), start_time)
    return format_time_12h(start + timedelta(minutes=minutes))


def check_tee_time_conflicts(slots, minimum_interval=8):
    """Groups off the same hole closer together than minimum_interval minutes."""
    ordered = sorted(slots, key=lambda s: s["time"])
    conflicts = []
    for current, nxt in zip(ordered, ordered[1:]):
        gap = (nxt["time"] - current["time"]).total_seconds() / 60
        if gap < minimum_interval and current["starting_hole"] == nxt["starting_hole"]:
            conflicts.append(
                f"{current['group_name']} and {nxt['group_name']} are only {gap:.0f} minutes apart"
            )
    return conflicts
