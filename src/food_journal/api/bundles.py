"""Bundle export, analysis and import endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends

from food_journal.api.auth import get_container, require_token
from food_journal.api.schemas import (
    BundleText,
    ImportRequest,
    import_result_out,
    item_out,
    resolution_out,
)
from food_journal.containers import AppContainer
from food_journal.services.bundles import encode_compact, encode_plain, share_link

router = APIRouter(
    prefix="/bundles", tags=["bundles"], dependencies=[Depends(require_token)]
)


@router.post("/analyze")
async def analyze_bundle(
    payload: BundleText, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Decode bundle text and classify its items against the library."""
    bundle = container.codec.decode(payload.text)
    analysis = container.merge_resolver.analyze(bundle)
    return {
        "root_id": bundle.root_id,
        "counts": analysis.counts(),
        "entries": [resolution_out(entry) for entry in analysis.entries],
    }


@router.post("/import")
async def import_bundle(
    payload: ImportRequest, container: AppContainer = Depends(get_container)
) -> dict[str, object]:
    """Decode, resolve with overrides, and commit a bundle."""
    bundle = container.codec.decode(payload.text)
    analysis = container.merge_resolver.analyze(bundle)
    for imported_id, override in payload.resolutions.items():
        if override.link:
            container.merge_resolver.link(analysis, imported_id, override.link)
        elif override.action is not None:
            analysis.choose(imported_id, override.action)
    result = container.import_executor.execute(analysis)
    return import_result_out(result)


@router.get("/candidates")
async def link_candidates(
    q: str | None = None,
    type: str | None = None,  # noqa: A002
    limit: int = 10,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return local items an imported item can be manually linked to."""
    items = container.merge_resolver.search_candidates(q, item_type=type, limit=limit)
    return {"items": [item_out(item) for item in items]}


@router.get("/{root_id}")
async def export_bundle(
    root_id: str,
    format: Literal["plain", "compact", "link"] = "plain",  # noqa: A002
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Export a recipe with its closure in the requested encoding."""
    bundle = container.codec.export(root_id)
    if format == "compact":
        text = encode_compact(bundle)
    elif format == "link":
        text = share_link(bundle, container.settings.share_base_url)
    else:
        text = encode_plain(bundle)
    return {"root_id": bundle.root_id, "format": format, "text": text}
