"""Digest renderers — structured JSON, markdown and chat message."""

from bizdigest.render.chat import render_alert_message, render_chat_message, render_department_message
from bizdigest.render.markdown import render_markdown
from bizdigest.render.structured import digest_to_dict, render_json

__all__ = [
    "digest_to_dict",
    "render_alert_message",
    "render_chat_message",
    "render_department_message",
    "render_json",
    "render_markdown",
]
