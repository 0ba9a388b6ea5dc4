"""Public pages: home, portfolio, viewer, pricing, reviews, terms."""

import logging
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import Response

from storefront.admin.forms import CATEGORIES, ICONS
from storefront.auth.gateway import Identity
from storefront.content.defaults import TOOL_ICONS, merge_content, review_stats
from storefront.content.images import build_zip, fetch_all_images, resolve_images
from storefront.content.moderation import (
    MAX_REVIEW_LENGTH,
    MIN_REVIEW_LENGTH,
    check_review_submission,
)
from storefront.content.ordering import order_pricing
from storefront.content.store import SITE_CONTENT, ContentStore
from storefront.db.models import Project, TermsIcon
from storefront.web.deps import get_current_user, get_store
from storefront.web.rendering import redirect_with_notice, render

logger = logging.getLogger(__name__)

router = APIRouter()

ALL_CATEGORIES = "All"


async def _page_content(store: ContentStore, page: str) -> dict:
    return merge_content(page, await store.get_site_content(page))


@router.get("/")
async def home(
    request: Request,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    content = await _page_content(store, "home")
    return render(
        request,
        "home.html",
        user=user,
        content=content,
        tool_icons=TOOL_ICONS,
        watch=[SITE_CONTENT],
    )


# --- Portfolio ---


@router.get("/portfolio")
async def portfolio(
    request: Request,
    category: str = ALL_CATEGORIES,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    projects = await store.list_records("projects")
    if category in CATEGORIES:
        projects = [p for p in projects if p.category == category]
    else:
        category = ALL_CATEGORIES

    return render(
        request,
        "portfolio.html",
        user=user,
        cards=[{"project": p, "images": resolve_images(p)} for p in projects],
        categories=[ALL_CATEGORIES] + CATEGORIES,
        active_category=category,
        watch=["projects"],
    )


async def _download_images(request: Request, project: Project):
    delay_seconds = request.app.state.settings.download_delay_ms / 1000
    client = request.app.state.http_client
    if client is not None:
        return await fetch_all_images(project, client, delay_seconds)
    async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
        return await fetch_all_images(project, client, delay_seconds)


@router.get("/portfolio/{project_id}/download")
async def download_project(
    request: Request,
    project_id: str,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    """Bundle every variant of a project into one ZIP attachment."""
    project = await store.get_record("projects", project_id)
    if project is None:
        return render(request, "not_found.html", status_code=404, user=user)

    back = f"/view/{project_id}"
    if not any(img.url for img in resolve_images(project)):
        return redirect_with_notice(back, "No images to download", level="error")

    files = await _download_images(request, project)
    if not files:
        return redirect_with_notice(back, "Download failed", level="error")

    logger.info(f"Serving {len(files)} image(s) for project {project_id}")
    filename = quote(f"{project.title}.zip")
    return Response(
        content=build_zip(files),
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )


@router.get("/view/{project_id}")
async def view_project(
    request: Request,
    project_id: str,
    variant: int = 0,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    project = await store.get_record("projects", project_id)
    if project is None:
        return render(request, "not_found.html", status_code=404, user=user)

    images = resolve_images(project)
    count = len(images)
    index = variant % count if count else 0
    return render(
        request,
        "viewer.html",
        user=user,
        project=project,
        images=images,
        index=index,
        current=images[index] if images else None,
        prev_index=(index - 1) % count if count else 0,
        next_index=(index + 1) % count if count else 0,
        watch=["projects"],
    )


# --- Pricing ---


@router.get("/pricing")
async def pricing(
    request: Request,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    plans = order_pricing(await store.list_records("pricing"))
    faqs = await store.list_records("faqs")
    content = await _page_content(store, "pricing")
    return render(
        request,
        "pricing.html",
        user=user,
        plans=plans,
        faqs=faqs,
        content=content,
        watch=["pricing", "faqs", SITE_CONTENT],
    )


# --- Reviews ---


@router.get("/reviews")
async def reviews(
    request: Request,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    approved = await store.list_approved_reviews()
    content = await _page_content(store, "reviews")
    has_reviewed = user is not None and await store.has_user_reviewed(user.id)
    return render(
        request,
        "reviews.html",
        user=user,
        reviews=approved,
        content=content,
        stats=review_stats(content),
        can_review=user is not None and not has_reviewed,
        has_reviewed=has_reviewed,
        min_length=MIN_REVIEW_LENGTH,
        max_length=MAX_REVIEW_LENGTH,
        watch=["reviews", SITE_CONTENT],
    )


@router.post("/reviews")
async def submit_review(
    rating: str = Form(""),
    review_text: str = Form(""),
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    if user is None:
        return redirect_with_notice("/reviews", "Please login first", level="error")

    try:
        rating_value = int(rating)
    except ValueError:
        rating_value = None

    error = check_review_submission(rating_value, review_text)
    if error:
        return redirect_with_notice("/reviews", error, level="error")

    if await store.has_user_reviewed(user.id):
        return redirect_with_notice("/reviews", "You have already submitted a review", level="error")

    result = await store.create_review(
        user_id=user.id,
        name=user.display_name,
        rating=rating_value,
        review_text=review_text,
        discord_username=user.username if user.provider == "discord" else None,
        discord_avatar=user.avatar_url,
    )
    if not result.success:
        return redirect_with_notice("/reviews", result.error, level="error")
    return redirect_with_notice("/reviews", "Review submitted successfully!")


# --- Terms ---


@router.get("/terms")
async def terms(
    request: Request,
    store: ContentStore = Depends(get_store),
    user: Identity | None = Depends(get_current_user),
):
    sections = await store.list_records("terms_sections")
    additional = await store.list_records("additional_terms")
    content = await _page_content(store, "terms")
    return render(
        request,
        "terms.html",
        user=user,
        sections=[
            {
                "section": s,
                "icon": s.icon if s.icon in ICONS else TermsIcon.FILE_TEXT.value,
            }
            for s in sections
        ],
        additional_terms=additional,
        content=content,
        watch=["terms_sections", "additional_terms", SITE_CONTENT],
    )
