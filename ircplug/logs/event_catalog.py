"""Human-readable templates for ``log_event`` names.

``event_templates.json`` maps ``{domain: {action: template}}``; templates are
``str.format`` strings filled from the event's keyword context.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

TEMPLATES_FILE = Path(__file__).with_name("event_templates.json")


def load_event_templates(path: Path = TEMPLATES_FILE) -> dict[tuple[str, str], str]:
    """Flatten the catalog into ``(domain, action) -> template``.

    A missing or unreadable catalog yields an empty mapping; ``log_event``
    then derives its text from the event name.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logging.getLogger("ircplug").warning(f"Event templates unavailable ({path}): {e}")
        return {}
    if not isinstance(raw, dict):
        return {}
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


EVENT_TEMPLATES = load_event_templates()


def template_for(domain: str, action: str) -> str | None:
    return EVENT_TEMPLATES.get((domain, action))
