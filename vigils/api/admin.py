"""
Signature-gated moderation routes: an HTML listing and a delete endpoint.
"""

import html
import json
from datetime import datetime
from string import Template
from typing import List
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from ..core.admin_auth import AdminAuthError, verify_admin_request
from ..core.replication import sync_succeeded
from ..core.schema import VigilRecord, succeeded
from ..core.state import AppState
from .dependencies import get_state
from .schemas import DeleteVigilResponse
from util.logging import logger

router = APIRouter()

PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Vigil Moderation</title>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; max-width: 1200px; margin: 0 auto; padding: 20px; background: #f5f5f5; }
        h1 { color: #333; border-bottom: 3px solid #000; padding-bottom: 10px; }
        .stats, .vigil-card { background: white; padding: 15px 20px; margin: 20px 0; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
        .vigil-header { display: flex; justify-content: space-between; align-items: start; }
        .vigil-title { font-size: 1.2em; font-weight: bold; margin-bottom: 5px; }
        .vigil-meta { color: #666; font-size: 0.9em; margin: 5px 0; }
        .vigil-id { font-size: 0.8em; color: #999; }
        .vigil-description { margin: 15px 0; line-height: 1.6; }
        .delete-btn { background: #dc3545; color: white; border: none; padding: 10px 20px; border-radius: 4px; cursor: pointer; font-weight: bold; }
        .delete-btn:disabled { background: #6c757d; cursor: not-allowed; }
        .empty-state { text-align: center; padding: 60px 20px; color: #666; }
    </style>
</head>
<body>
    <h1>Vigil Moderation</h1>
    <div class="stats"><strong>Total Vigils:</strong> $total</div>
    $cards
    <script>
        const AUTH_QUERY = $auth_query;

        async function deleteVigil(uuid, btn) {
            if (!confirm('Are you sure you want to permanently delete this vigil?')) {
                return;
            }
            btn.disabled = true;
            btn.textContent = 'Deleting...';
            try {
                const response = await fetch('/admin/delete/' + encodeURIComponent(uuid) + '?' + AUTH_QUERY, { method: 'DELETE' });
                if (response.ok) {
                    document.getElementById('vigil-' + uuid).remove();
                    if (document.querySelectorAll('.vigil-card').length === 0) {
                        location.reload();
                    }
                } else {
                    alert('Failed to delete vigil: ' + await response.text());
                    btn.disabled = false;
                    btn.textContent = 'Delete';
                }
            } catch (error) {
                alert('Error deleting vigil: ' + error.message);
                btn.disabled = false;
                btn.textContent = 'Delete';
            }
        }
    </script>
</body>
</html>
""")

CARD_TEMPLATE = Template("""
    <div class="vigil-card" id="vigil-$uuid">
        <div class="vigil-header">
            <div class="vigil-info">
                <div class="vigil-title">$location</div>
                <div class="vigil-meta">Zipcode $zipcode | $date at $time</div>
                <div class="vigil-meta">Organized by: $organizer</div>
                $contact
                <div class="vigil-id">UUID: $uuid | Created: $created</div>
            </div>
            <button class="delete-btn" data-uuid="$uuid" onclick="deleteVigil(this.dataset.uuid, this)">Delete</button>
        </div>
        $description
    </div>""")

EMPTY_STATE = """
    <div class="empty-state">
        <h2>No vigils to moderate</h2>
        <p>No vigils have been submitted yet.</p>
    </div>"""


def _escape(value) -> str:
    return html.escape(str(value if value is not None else ""), quote=True)


def render_card(record: VigilRecord) -> str:
    contact = ""
    if record.contact:
        contact = f'<div class="vigil-meta">Contact: {_escape(record.contact)}</div>'

    description = ""
    if record.description:
        description = f'<div class="vigil-description"><strong>Description:</strong><br>{_escape(record.description)}</div>'

    created = datetime.fromtimestamp(record.created_at / 1000).strftime("%Y-%m-%d %H:%M:%S")
    return CARD_TEMPLATE.substitute(
        uuid=_escape(record.uuid),
        location=_escape(record.location),
        zipcode=_escape(record.zipcode),
        date=_escape(record.date),
        time=_escape(record.time),
        organizer=_escape(record.organizer_name),
        contact=contact,
        created=created,
        description=description,
    )


def render_moderation_page(records: List[VigilRecord], timestamp: str, signature: str) -> str:
    """Render the moderation page; every user-supplied value is HTML-escaped."""
    cards = "".join(render_card(record) for record in records) if records else EMPTY_STATE
    auth_query = urlencode({"timestamp": timestamp, "signature": signature})
    # json.dumps gives a JS string literal; escape '<' so it cannot close the script tag
    return PAGE_TEMPLATE.substitute(
        total=len(records),
        cards=cards,
        auth_query=json.dumps(auth_query).replace("<", "\\u003c"),
    )


def _authorize(state: AppState, timestamp: str, signature: str, action: str):
    try:
        verify_admin_request(timestamp, signature, public_key=state.admin_public_key, action=action)
    except AdminAuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/admin", response_class=HTMLResponse)
def moderation_page(timestamp: str = None, signature: str = None, state: AppState = Depends(get_state)):
    """Moderation listing of every stored vigil."""
    _authorize(state, timestamp, signature, "view")
    return HTMLResponse(render_moderation_page(state.store.list_all(), timestamp, signature))


@router.delete("/admin/delete/{uuid}", response_model=DeleteVigilResponse)
def delete_vigil(uuid: str, timestamp: str = None, signature: str = None, state: AppState = Depends(get_state)):
    """Delete a vigil and re-replicate the snapshot."""
    _authorize(state, timestamp, signature, "delete")

    if not state.store.delete(uuid):
        raise HTTPException(status_code=404, detail="Vigil not found")

    outcomes = state.replicator.replicate(state.store)
    if not sync_succeeded(outcomes):
        raise HTTPException(
            status_code=500,
            detail={
                "error": "Failed to sync deletion to any storage endpoint",
                "details": [outcome.to_dict() for outcome in outcomes],
            },
        )

    logger.info(f"Admin deleted vigil: {uuid}")
    return DeleteVigilResponse(
        success=True,
        uuid=uuid,
        syncedTo=[outcome.server for outcome in succeeded(outcomes)],
        remainingVigils=state.store.count(),
    )
