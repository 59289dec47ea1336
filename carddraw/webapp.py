# carddraw/webapp.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from carddraw.buckets import format_bucket, format_tier, get_buckets
from carddraw.catalog import available_levels, load_catalog
from carddraw.config import CATALOG_PATH, STATIC_DIR, TEMPLATES_DIR
from carddraw.distribution import capped_quotas, compute_distribution, describe_distribution
from carddraw.eligibility import pool_summary
from carddraw.models import ActionKind, Catalog, DrawnChart, Drawing, EligibleChart
from carddraw.session import DrawSession

logger = logging.getLogger(__name__)

app = FastAPI()
templates = Jinja2Templates(directory=TEMPLATES_DIR)
app.mount("/static", StaticFiles(directory=STATIC_DIR, check_dir=False), name="static")

# In-memory sessions; drawings do not outlive the process.
SESSIONS: Dict[str, DrawSession] = {}

_CATALOG: Optional[Catalog] = None


def get_catalog() -> Catalog:
    global _CATALOG
    if _CATALOG is None:
        _CATALOG = load_catalog(CATALOG_PATH)
    return _CATALOG


def _session_or_none(sid: str) -> Optional[DrawSession]:
    return SESSIONS.get(sid)


def _back(sid: str) -> RedirectResponse:
    return RedirectResponse(url=f"/session/{sid}", status_code=303)


# --- plain-data views for templates and JSON ---

def chart_json(chart: EligibleChart) -> Dict[str, Any]:
    return {
        "name": chart.name,
        "name_translation": chart.name_translation,
        "artist": chart.artist,
        "artist_translation": chart.artist_translation,
        "bpm": chart.bpm,
        "style": chart.style,
        "difficulty_class": chart.difficulty_class,
        "level": chart.level,
        "jacket": chart.jacket,
        "has_shock": chart.has_shock,
        "flags": sorted(chart.flags),
    }


def drawn_chart_json(drawing: Drawing, drawn: DrawnChart) -> Dict[str, Any]:
    action = drawing.actions.get(drawn.id)
    return {
        "id": drawn.id,
        "chart": chart_json(drawn.chart),
        "state": action.kind.value if action else "none",
        "player": action.player if action else None,
        "pick": chart_json(action.pick.chart) if action and action.pick else None,
    }


def drawing_json(drawing: Drawing) -> Dict[str, Any]:
    def player_actions(items):
        return [{"chart_id": a.chart_id, "player": a.player} for a in items]

    return {
        "id": drawing.id,
        "charts": [drawn_chart_json(drawing, c) for c in drawing.charts],
        "bans": player_actions(drawing.bans),
        "protects": player_actions(drawing.protects),
        "pocket_picks": player_actions(drawing.pocket_picks),
    }


def weights_view(session: DrawSession) -> List[Dict[str, Any]]:
    """One row per bucket: label, weight slot, entered weight, distribution label."""
    cfg = session.config
    meta = session.catalog.meta
    granular = cfg.use_granular_levels
    resolution = meta.granular_tier_resolution if granular else None
    levels = available_levels(session.catalog, granular)
    buckets = get_buckets(cfg, levels, meta.granular_tier_resolution)

    labels = describe_distribution(buckets, cfg.weights, cfg.chart_count, cfg.force_distribution)
    planned: List[Optional[int]] = [None] * len(buckets)
    if cfg.force_distribution:
        quotas = compute_distribution(buckets, cfg.weights, cfg.chart_count, True)
        planned = list(capped_quotas(quotas, cfg.chart_count))

    rows = []
    for pos, bucket in enumerate(buckets):
        if meta.uses_tiers and not isinstance(bucket, tuple):
            name = format_tier(bucket)
        else:
            name = format_bucket(bucket, resolution)
        rows.append({
            "label": name,
            "index": pos,
            "weight": cfg.weights[pos] if pos < len(cfg.weights) else None,
            "distribution": labels[pos],
            "planned": planned[pos],
        })
    return rows


def session_json(session: DrawSession) -> Dict[str, Any]:
    cfg = session.config
    return {
        "config": {
            "chart_count": cfg.chart_count,
            "lower_bound": cfg.lower_bound,
            "upper_bound": cfg.upper_bound,
            "use_weights": cfg.use_weights,
            "weights": list(cfg.weights),
            "force_distribution": cfg.force_distribution,
            "probability_bucket_count": cfg.probability_bucket_count,
            "use_granular_levels": cfg.use_granular_levels,
            "style": cfg.style,
            "difficulties": sorted(cfg.difficulties),
            "flags": sorted(cfg.flags),
            "order_by_action": cfg.order_by_action,
        },
        "show_pool": session.show_pool,
        "weights": weights_view(session) if cfg.use_weights else [],
        "drawings": [drawing_json(d) for d in session.drawings],
        "last_draw_failed": session.last_draw_failed,
    }


# --- routes ---

@app.get("/", response_class=HTMLResponse)
def root(request: Request):
    sid = str(uuid.uuid4())
    SESSIONS[sid] = DrawSession(get_catalog())
    logger.info("New draw session %s", sid)
    return _back(sid)


@app.get("/session/{sid}", response_class=HTMLResponse)
def session_view(request: Request, sid: str):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)

    cfg = session.config
    if session.show_pool:
        pool = session.eligible_pool()
        return templates.TemplateResponse(
            request,
            "pool.html",
            {
                "sid": sid,
                "charts": pool,
                "summary": pool_summary(pool),
                "total_songs": len(session.catalog.songs),
            },
        )

    return templates.TemplateResponse(
        request,
        "draw.html",
        {
            "sid": sid,
            "config": cfg,
            "meta": session.catalog.meta,
            "weights": weights_view(session) if cfg.use_weights else [],
            "drawings": [drawing_json(d) for d in session.drawings],
            "last_draw_failed": session.last_draw_failed,
            "show_pool": session.show_pool,
        },
    )


@app.get("/session/{sid}/state")
def session_state(sid: str):
    session = _session_or_none(sid)
    if not session:
        raise HTTPException(status_code=404, detail="Unknown session")
    return JSONResponse(session_json(session))


@app.post("/session/{sid}/draw")
def draw_charts(sid: str):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)
    session.draw()
    return _back(sid)


_TOGGLES = {
    "use_weights",
    "force_distribution",
    "use_granular_levels",
    "order_by_action",
}


@app.post("/session/{sid}/config")
def update_config(sid: str, field: str = Form(...), value: str = Form("")):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)

    store = session.store
    if field == "chart_count":
        store.set_chart_count(value)
    elif field == "lower_bound":
        store.set_lower_bound(value)
    elif field == "upper_bound":
        store.set_upper_bound(value)
    elif field == "style":
        store.set_style(value)
    elif field == "difficulty":
        store.toggle_difficulty(value)
    elif field == "flag":
        store.toggle_flag(value)
    elif field == "buckets":
        store.toggle_bucket_count()
    elif field == "bucket_count":
        store.set_bucket_count(value)
    elif field == "show_pool":
        session.toggle_pool_view()
    elif field in _TOGGLES:
        store.update(lambda cfg: {field: not getattr(cfg, field)})
    else:
        logger.debug("Ignoring unknown config field %r", field)
    return _back(sid)


@app.post("/session/{sid}/weights")
def update_weight(sid: str, index: int = Form(...), value: str = Form("")):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)
    session.store.set_weight(index, value)
    return _back(sid)


@app.post("/session/{sid}/drawing/{did}/action")
def chart_action(
    sid: str,
    did: int,
    action: str = Form(...),
    chart_id: int = Form(...),
    player: int = Form(...),
    pick: Optional[int] = Form(None),
):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)

    try:
        kind = ActionKind(action)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown action: {action}")

    replacement = None
    if kind is ActionKind.POCKET_PICK and pick is not None:
        pool = session.eligible_pool()
        if not 0 <= pick < len(pool):
            raise HTTPException(status_code=400, detail="Pocket pick out of range")
        replacement = pool[pick]

    try:
        session.act(did, kind, chart_id, player, pick=replacement)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _back(sid)


@app.post("/session/{sid}/drawing/{did}/reset")
def reset_chart(sid: str, did: int, chart_id: int = Form(...)):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)
    try:
        session.reset_chart(did, chart_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _back(sid)


@app.post("/session/{sid}/drawing/{did}/redraw")
def redraw_chart(sid: str, did: int, chart_id: int = Form(...)):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)
    try:
        session.redraw_chart(did, chart_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _back(sid)


@app.post("/session/{sid}/drawing/{did}/clear")
def clear_drawing(sid: str, did: int):
    session = _session_or_none(sid)
    if not session:
        return RedirectResponse(url="/", status_code=303)
    try:
        session.clear_drawing(did)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _back(sid)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="127.0.0.1", port=8000)
