"""Parse individual course activities out of LMS markup."""

import re

from lxml.html import HtmlElement

from .html import first, first_attr, has_class, text_of, text_without
from .types import Activity
from .urls import query_param, to_absolute

MODULE_ID_PREFIX = "module-"
DEFAULT_MOD_TYPE = "resource"

# Moodle section dividers; they carry no navigable content
HIDDEN_MOD_TYPES = {"label"}

_MOD_PATH = re.compile(r"/mod/(\w+)/")

# Screen-reader-only elements inside activity names, dropped wherever they
# sit ("Lesson 1Page" otherwise). Themes hiding text with sr-only or
# visually-hidden instead of accesshide are not covered.
ACCESSHIDE = f".//*[{has_class('accesshide')}]"


def parse_activity(node: HtmlElement) -> Activity | None:
    """Build an Activity from one li.activity element.

    Returns None for labels and for activities without a usable name.
    """
    instance_name = first(node, f".//span[{has_class('instancename')}]")
    name = text_without(instance_name, ACCESSHIDE) if instance_name is not None else ""
    if not name:
        name = text_of(first(node, ".//a"))

    mod_type = DEFAULT_MOD_TYPE
    for cls in (node.get("class") or "").split():
        if cls.startswith("modtype_"):
            mod_type = cls[len("modtype_"):]
            break

    if not name or mod_type in HIDDEN_MOD_TYPES:
        return None

    icon = first_attr(
        node,
        f".//img[{has_class('activityicon')} or {has_class('iconlarge')}]",
        "src",
    )
    return Activity(
        id=(node.get("id") or "").removeprefix(MODULE_ID_PREFIX),
        name=name,
        mod_type=mod_type,
        url=to_absolute(first_attr(node, ".//a", "href")),
        icon=to_absolute(icon),
    )


def parse_activities(root: HtmlElement) -> list[Activity]:
    """Parse every li.activity below root, in document order."""
    activities = []
    for node in root.xpath(f".//li[{has_class('activity')}]"):
        activity = parse_activity(node)
        if activity:
            activities.append(activity)
    return activities


def activity_from_link(href: str, text: str) -> Activity | None:
    """Build an Activity from a bare /mod/<type>/ link (no li.activity around it)."""
    name = text.strip()
    if not name or "/mod/" not in href:
        return None
    match = _MOD_PATH.search(href)
    mod_type = match.group(1) if match else "unknown"
    if mod_type in HIDDEN_MOD_TYPES:
        return None
    return Activity(
        id=query_param(href, "id") or "",
        name=name,
        mod_type=mod_type,
        url=to_absolute(href),
    )
