"""Admin form handling: seed forms from records and turn submissions into fields.

Saving any record (create or edit) sets order_index to the current
collection size + 1, which moves an edited record to the end of the
display order. Delimited inputs become lists: tags on commas,
features/items on newlines, each entry trimmed and empties dropped.
"""

import json

from storefront.content.images import ProjectImage
from storefront.content.store import ContentStore
from storefront.db.models import (
    FAQ,
    AdditionalTerm,
    Category,
    PricingPlan,
    Project,
    TermsIcon,
    TermsSection,
)

CATEGORIES = [c.value for c in Category]
ICONS = [i.value for i in TermsIcon]
MAX_VARIANTS = 10
VARIANT_COLORS = [
    "#ff0000", "#00ff00", "#0000ff", "#ffff00", "#ff00ff",
    "#00ffff", "#ff8000", "#8000ff", "#00ff80", "#ff0080",
]
ADMIN_PREVIEW_COLOR = "#ff0000"
DEFAULT_VARIANT_NAME = "Variant"


class FormError(Exception):
    """A submitted form failed validation; nothing was sent to the store."""
    pass


def split_list(text: str, separator: str) -> list[str]:
    return [part.strip() for part in (text or "").split(separator) if part.strip()]


def _require(value: str, label: str) -> None:
    if not (value or "").strip():
        raise FormError(f"{label} required")


# --- Projects ---


def blank_image_input(position: int) -> dict:
    return {"url": "", "color": VARIANT_COLORS[position % len(VARIANT_COLORS)], "name": ""}


def resize_image_inputs(inputs: list[dict], count: int) -> list[dict]:
    """Grow (with blank, colour-cycled inputs) or truncate to `count` entries."""
    count = max(1, min(count, MAX_VARIANTS))
    return [inputs[i] if i < len(inputs) else blank_image_input(i) for i in range(count)]


def project_form(project: Project | None = None) -> dict:
    if project is None:
        return {
            "title": "",
            "description": "",
            "category": Category.CHARACTERS.value,
            "tags": "",
            "images": [{"url": "", "color": ADMIN_PREVIEW_COLOR, "name": ""}],
        }

    if project.images:
        images = [ProjectImage.from_dict(img).to_dict() for img in project.images]
    else:
        images = [{"url": project.image_url or "", "color": ADMIN_PREVIEW_COLOR, "name": "Default"}]
    return {
        "title": project.title,
        "description": project.description,
        "category": project.category,
        "tags": ", ".join(project.tags or []),
        "images": images,
    }


def image_inputs_from_form(form: dict) -> list[dict]:
    """Read image_url_N / image_color_N / image_name_N for N < image_count."""
    try:
        count = int(form.get("image_count") or 1)
    except ValueError:
        count = 1
    count = max(1, min(count, MAX_VARIANTS))
    return [
        {
            "url": (form.get(f"image_url_{i}") or "").strip(),
            "color": form.get(f"image_color_{i}") or VARIANT_COLORS[i % len(VARIANT_COLORS)],
            "name": (form.get(f"image_name_{i}") or "").strip(),
        }
        for i in range(count)
    ]


def project_fields(form: dict, image_inputs: list[dict], current_count: int) -> dict:
    _require(form.get("title", ""), "Title")

    valid_images = [
        {"url": img["url"], "color": img["color"], "name": img["name"] or DEFAULT_VARIANT_NAME}
        for img in image_inputs
        if img.get("url")
    ]
    category = form.get("category") or Category.CHARACTERS.value
    if category not in CATEGORIES:
        raise FormError(f"Unknown category: {category}")

    return {
        "title": form["title"].strip(),
        "description": form.get("description", ""),
        "category": category,
        "image_url": image_inputs[0]["url"] if image_inputs else "",
        "images": valid_images,
        "tags": split_list(form.get("tags", ""), ","),
        "order_index": current_count + 1,
    }


# --- Pricing ---


def pricing_form(plan: PricingPlan | None = None) -> dict:
    if plan is None:
        return {
            "name": "",
            "price": 0,
            "price_label": "per model",
            "delivery_time": "",
            "description": "",
            "features": "",
            "is_popular": False,
        }
    return {
        "name": plan.name,
        "price": plan.price,
        "price_label": plan.price_label,
        "delivery_time": plan.delivery_time,
        "description": plan.description,
        "features": "\n".join(plan.features or []),
        "is_popular": plan.is_popular,
    }


def pricing_fields(form: dict, current_count: int) -> dict:
    _require(form.get("name", ""), "Name")
    try:
        price = float(form.get("price") or 0)
    except ValueError:
        raise FormError("Price must be a number") from None

    return {
        "name": form["name"].strip(),
        "price": price,
        "price_label": form.get("price_label", ""),
        "delivery_time": form.get("delivery_time", ""),
        "description": form.get("description", ""),
        "features": split_list(form.get("features", ""), "\n"),
        "is_popular": form.get("is_popular") in ("on", "true", "1", True),
        "order_index": current_count + 1,
    }


# --- Terms ---


def terms_section_form(section: TermsSection | None = None) -> dict:
    if section is None:
        return {"title": "", "icon": TermsIcon.FILE_TEXT.value, "items": ""}
    return {"title": section.title, "icon": section.icon, "items": "\n".join(section.items or [])}


def terms_section_fields(form: dict, current_count: int) -> dict:
    _require(form.get("title", ""), "Title")
    icon = form.get("icon") or TermsIcon.FILE_TEXT.value
    if icon not in ICONS:
        raise FormError(f"Unknown icon: {icon}")
    return {
        "title": form["title"].strip(),
        "icon": icon,
        "items": split_list(form.get("items", ""), "\n"),
        "order_index": current_count + 1,
    }


def additional_term_form(term: AdditionalTerm | None = None) -> dict:
    if term is None:
        return {"title": "", "content": ""}
    return {"title": term.title, "content": term.content}


def additional_term_fields(form: dict, current_count: int) -> dict:
    _require(form.get("title", ""), "Title")
    return {
        "title": form["title"].strip(),
        "content": form.get("content", ""),
        "order_index": current_count + 1,
    }


# --- FAQs ---


def faq_form(faq: FAQ | None = None) -> dict:
    if faq is None:
        return {"question": "", "answer": ""}
    return {"question": faq.question, "answer": faq.answer}


def faq_fields(form: dict, current_count: int) -> dict:
    _require(form.get("question", ""), "Question")
    return {
        "question": form["question"].strip(),
        "answer": form.get("answer", ""),
        "order_index": current_count + 1,
    }


# --- Site content ---


def parse_content_json(text: str) -> dict:
    try:
        content = json.loads(text)
    except json.JSONDecodeError:
        raise FormError("Invalid JSON") from None
    if not isinstance(content, dict):
        raise FormError("Content must be a JSON object")
    return content


# --- Save dispatch ---


async def build_fields(store: ContentStore, collection: str, form: dict) -> dict:
    """Validate a submission and build the fields to write.

    Raises:
        FormError: If a required field is missing or a value is invalid.
    """
    current_count = len(await store.list_records(collection))

    if collection == "projects":
        return project_fields(form, image_inputs_from_form(form), current_count)
    if collection == "pricing":
        return pricing_fields(form, current_count)
    if collection == "terms_sections":
        return terms_section_fields(form, current_count)
    if collection == "additional_terms":
        return additional_term_fields(form, current_count)
    if collection == "faqs":
        return faq_fields(form, current_count)
    raise FormError(f"{collection} cannot be edited here")


async def save_record(
    store: ContentStore,
    collection: str,
    fields: dict,
    record_id: str | None = None,
) -> bool:
    """Create when no record is being edited, otherwise update it."""
    if record_id:
        return await store.update_record(collection, record_id, fields)
    return await store.create_record(collection, fields) is not None


FORM_SEEDS = {
    "projects": project_form,
    "pricing": pricing_form,
    "terms_sections": terms_section_form,
    "additional_terms": additional_term_form,
    "faqs": faq_form,
}
