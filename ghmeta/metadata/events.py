"""Event classification.

Rules are applied in priority order and the first match wins:

1. ``schedule``
2. ``workflow_dispatch``
3. the pull request family
4. a published ``release``; other release verbs fall through
5. a tag ref, refined by ``tag_push_event`` for version tags
6. anything else is a branch push
"""

from __future__ import annotations

import re

from ghmeta.logging import get_logger, log_debug, log_warning

from .models import EventInfo, EventName

logger = get_logger(__name__)

TAG_REF_PREFIX = "refs/tags/"
VERSION_TAG_PATTERN = re.compile(r"v\d+(\.\d+)*")

PULL_REQUEST_TRIGGERS = frozenset(
    {
        "pull_request",
        "pull_request_target",
        "pull_request_review",
        "pull_request_review_comment",
    }
)
# Runners that omit the payload verb still get the release category.
PUBLISHED_RELEASE_ACTIONS = frozenset({"published", ""})
_PUSH_TRIGGER = "push"


def is_version_tag(tag_name: str) -> bool:
    """Return whether ``tag_name`` looks like ``v1``, ``v1.2``, ``v1.2.3``."""
    return VERSION_TAG_PATTERN.fullmatch(tag_name) is not None


def is_tag_ref(ref: str, ref_type: str = "") -> bool:
    """Return whether the ref points at a tag."""
    if ref.startswith(TAG_REF_PREFIX):
        return True
    return ref_type == "tag" and not ref.startswith("refs/")


def classify_event(
    trigger: str,
    *,
    ref: str,
    ref_type: str = "",
    action: str = "",
) -> EventInfo:
    """Derive the canonical event name and flags for an invocation.

    Parameters
    ----------
    trigger
        Raw event name (``GITHUB_EVENT_NAME``).
    ref
        Full ref (``GITHUB_REF``).
    ref_type
        ``branch`` or ``tag`` when the runner supplies it.
    action
        Payload action verb. Only ``published`` (or no verb) makes a
        ``release`` trigger a release.

    Returns
    -------
    EventInfo
        Exactly one category flag set, plus ``tag_push_event`` for version
        tag pushes.

    """
    common = {"trigger": trigger, "action": action}
    if trigger == EventName.SCHEDULE:
        return EventInfo(name=EventName.SCHEDULE, is_schedule=True, **common)
    if trigger == EventName.WORKFLOW_DISPATCH:
        return EventInfo(
            name=EventName.WORKFLOW_DISPATCH, is_workflow_dispatch=True, **common
        )
    if trigger in PULL_REQUEST_TRIGGERS:
        return EventInfo(name=EventName.PULL_REQUEST, is_pull_request=True, **common)
    if trigger == EventName.RELEASE:
        if action in PUBLISHED_RELEASE_ACTIONS:
            return EventInfo(name=EventName.RELEASE, is_release=True, **common)
        log_debug(
            logger,
            "[event] release action %r is not a publication; classified by ref %r",
            action,
            ref,
        )
    elif trigger != _PUSH_TRIGGER:
        log_warning(
            logger,
            "Unrecognised trigger %r classified by ref %r",
            trigger,
            ref,
        )

    if is_tag_ref(ref, ref_type):
        tag_name = ref.removeprefix(TAG_REF_PREFIX)
        return EventInfo(
            name=EventName.PUSH,
            is_tag_push=True,
            tag_push_event=is_version_tag(tag_name),
            **common,
        )
    return EventInfo(name=EventName.PUSH, is_branch_push=True, **common)
