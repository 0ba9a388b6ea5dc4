"""Admin dashboard: tabbed CRUD over the content collections and site copy.

Signed out, /admin shows the login form. Signed in as anyone but the
configured admin, it shows a fixed "Access denied" view; there is no silent
redirect.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from storefront.admin.forms import (
    CATEGORIES,
    FORM_SEEDS,
    ICONS,
    MAX_VARIANTS,
    FormError,
    build_fields,
    parse_content_json,
    resize_image_inputs,
    save_record,
)
from storefront.auth.gateway import AuthGateway, Identity
from storefront.content.defaults import DEFAULT_CONTENT, merge_content
from storefront.content.images import resolve_images
from storefront.content.store import ContentStore
from storefront.web.deps import get_auth, get_current_user, get_store
from storefront.web.rendering import redirect_with_notice, render

logger = logging.getLogger(__name__)

router = APIRouter()

TABS = ["projects", "pricing", "reviews", "terms", "faqs", "content"]
DEFAULT_TAB = "pricing"

# Collection -> tab it is managed from
TAB_FOR = {
    "projects": "projects",
    "pricing": "pricing",
    "reviews": "reviews",
    "terms_sections": "terms",
    "additional_terms": "terms",
    "faqs": "faqs",
}


def _denied(request: Request, user: Identity | None, auth: AuthGateway):
    """The response for anyone who may not use the dashboard, or None for the admin."""
    if user is None:
        return None
    if not auth.is_admin(user):
        logger.info(f"Admin access denied for user {user.id}")
        return render(request, "access_denied.html", status_code=403, user=user)
    return None


def _admin_url(tab: str) -> str:
    return f"/admin?tab={tab}"


@router.get("")
async def dashboard(
    request: Request,
    tab: str = DEFAULT_TAB,
    form: str | None = None,
    edit: str | None = None,
    variants: int | None = None,
    store: ContentStore = Depends(get_store),
    auth: AuthGateway = Depends(get_auth),
    user: Identity | None = Depends(get_current_user),
):
    if user is None:
        return render(request, "login.html", user=None, next="/admin")
    denied = _denied(request, user, auth)
    if denied is not None:
        return denied

    if tab not in TABS:
        tab = DEFAULT_TAB

    records = {collection: await store.list_records(collection) for collection in TAB_FOR}
    counts = {
        "projects": len(records["projects"]),
        "pricing": len(records["pricing"]),
        "reviews": len(records["reviews"]),
        "terms": len(records["terms_sections"]) + len(records["additional_terms"]),
        "faqs": len(records["faqs"]),
    }

    content = {}
    for page in DEFAULT_CONTENT:
        merged = merge_content(page, await store.get_site_content(page))
        content[page] = {
            section: json.dumps(value, indent=2, ensure_ascii=False)
            for section, value in merged.items()
        }

    editor = None
    if form in FORM_SEEDS:
        record = await store.get_record(form, edit) if edit else None
        if edit and record is None:
            return redirect_with_notice(_admin_url(tab), "Record not found", level="error")
        values = FORM_SEEDS[form](record)
        if form == "projects" and variants is not None:
            values["images"] = resize_image_inputs(values["images"], variants)
        editor = {
            "collection": form,
            "record_id": record.id if record else None,
            "values": values,
        }

    return render(
        request,
        "admin.html",
        user=user,
        tab=tab,
        tabs=TABS,
        counts=counts,
        records=records,
        project_images={p.id: resolve_images(p) for p in records["projects"]},
        content=content,
        editor=editor,
        categories=CATEGORIES,
        icons=ICONS,
        max_variants=MAX_VARIANTS,
    )


@router.post("/content/save")
async def save_content(
    request: Request,
    store: ContentStore = Depends(get_store),
    auth: AuthGateway = Depends(get_auth),
    user: Identity | None = Depends(get_current_user),
):
    if user is None:
        return RedirectResponse("/auth/login?next=/admin", status_code=303)
    denied = _denied(request, user, auth)
    if denied is not None:
        return denied

    form = await request.form()
    page = form.get("page", "")
    section = form.get("section", "")
    if page not in DEFAULT_CONTENT or not section:
        return redirect_with_notice(_admin_url("content"), "Unknown content section", level="error")

    try:
        content = parse_content_json(form.get("content", ""))
    except FormError as e:
        return redirect_with_notice(_admin_url("content"), str(e), level="error")

    if await store.update_site_content(page, section, content):
        return redirect_with_notice(_admin_url("content"), "Saved!")
    return redirect_with_notice(_admin_url("content"), "Failed to save", level="error")


@router.post("/{collection}/save")
async def save(
    request: Request,
    collection: str,
    store: ContentStore = Depends(get_store),
    auth: AuthGateway = Depends(get_auth),
    user: Identity | None = Depends(get_current_user),
):
    if collection not in FORM_SEEDS:
        raise HTTPException(status_code=404, detail="Unknown collection")
    if user is None:
        return RedirectResponse("/auth/login?next=/admin", status_code=303)
    denied = _denied(request, user, auth)
    if denied is not None:
        return denied

    form = dict(await request.form())
    record_id = form.get("id") or None
    tab = TAB_FOR[collection]

    try:
        fields = await build_fields(store, collection, form)
    except FormError as e:
        params = {"form": collection}
        if record_id:
            params["edit"] = record_id
        return redirect_with_notice(f"/admin?tab={tab}", str(e), level="error", **params)

    if not await save_record(store, collection, fields, record_id):
        return redirect_with_notice(_admin_url(tab), "Failed", level="error")
    return redirect_with_notice(_admin_url(tab), "Updated!" if record_id else "Added!")


@router.post("/{collection}/{record_id}/delete")
async def delete(
    request: Request,
    collection: str,
    record_id: str,
    store: ContentStore = Depends(get_store),
    auth: AuthGateway = Depends(get_auth),
    user: Identity | None = Depends(get_current_user),
):
    if collection not in TAB_FOR:
        raise HTTPException(status_code=404, detail="Unknown collection")
    if user is None:
        return RedirectResponse("/auth/login?next=/admin", status_code=303)
    denied = _denied(request, user, auth)
    if denied is not None:
        return denied

    tab = TAB_FOR[collection]
    if await store.delete_record(collection, record_id):
        return redirect_with_notice(_admin_url(tab), "Deleted")
    return redirect_with_notice(_admin_url(tab), "Failed", level="error")
