"""Relationship assistant: prompt construction and the upstream chat proxy."""

from __future__ import annotations

import logging
from datetime import date
from typing import AsyncIterator, Dict, List, Sequence

import httpx

from records import ContactRecord, EventRecord

from .config import CHAT_API_KEY, CHAT_API_URL, CHAT_MODEL, CHAT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

ASSISTANT_PERSONA = """You are a warm, thoughtful relationship assistant. Your job is to help the \
user maintain and improve their personal relationships.

You can:
1. Analyse the user's contacts and events to give personalised social advice
2. Remind the user of important upcoming dates such as birthdays and anniversaries
3. Suggest gift ideas for specific occasions
4. Offer communication tips and relationship advice
5. Help plan social activities"""

CLOSING_INSTRUCTION = "Reply in a warm, friendly tone with concrete, practical suggestions. Keep answers concise but thoughtful."


class ChatUpstreamError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


def _contact_line(contact: ContactRecord) -> str:
    line = f"- {contact.name}"
    if contact.relationship:
        line += f" ({contact.relationship})"
    if contact.birthday:
        line += f", birthday: {contact.birthday.isoformat()}"
    if contact.notes:
        line += f", notes: {contact.notes}"
    return line


def _event_line(event: EventRecord) -> str:
    line = f"- {event.title} ({event.event_type}), date: {event.event_date.isoformat()}"
    if event.recurrence_text:
        line += f", {event.recurrence_text}"
    if event.description:
        line += f", description: {event.description}"
    return line


def build_relationship_context(
    contacts: Sequence[ContactRecord],
    events: Sequence[EventRecord],
) -> str:
    sections: List[str] = []
    if contacts:
        sections.append("The user's contacts:\n" + "\n".join(_contact_line(c) for c in contacts))
    if events:
        sections.append("The user's events:\n" + "\n".join(_event_line(e) for e in events))
    return "\n\n".join(sections)


def build_system_prompt(
    contacts: Sequence[ContactRecord],
    events: Sequence[EventRecord],
    today: date,
) -> str:
    parts = [ASSISTANT_PERSONA, f"Today's date is {today.isoformat()}."]
    context = build_relationship_context(contacts, events)
    if context:
        parts.append(context)
    parts.append(CLOSING_INSTRUCTION)
    return "\n\n".join(parts)


def build_chat_payload(system_prompt: str, messages: Sequence[Dict[str, str]]) -> Dict[str, object]:
    return {
        "model": CHAT_MODEL,
        "messages": [{"role": "system", "content": system_prompt}, *messages],
        "stream": True,
    }


def _upstream_error(status_code: int) -> ChatUpstreamError:
    if status_code == 429:
        return ChatUpstreamError(429, "Too many requests, please try again later")
    if status_code == 402:
        return ChatUpstreamError(402, "Assistant quota exhausted")
    return ChatUpstreamError(502, "Assistant service unavailable")


async def stream_chat(
    payload: Dict[str, object],
    *,
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[bytes]:
    """Forward a chat request upstream and return an iterator over the raw event-stream bytes.

    Errors are raised before the first chunk is yielded, so callers can still
    turn them into an HTTP error response.
    """
    if not CHAT_API_KEY:
        raise ChatUpstreamError(500, "Chat API key is not configured")
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=CHAT_TIMEOUT_SECONDS)
    headers = {"Authorization": f"Bearer {CHAT_API_KEY}", "Content-Type": "application/json"}
    try:
        request = client.build_request("POST", CHAT_API_URL, json=payload, headers=headers)
        response = await client.send(request, stream=True)
    except httpx.HTTPError as exc:
        if owns_client:
            await client.aclose()
        logger.error("Chat upstream request failed: %r", exc)
        raise ChatUpstreamError(502, "Assistant service unavailable") from exc
    if response.status_code != 200:
        body = await response.aread()
        await response.aclose()
        if owns_client:
            await client.aclose()
        logger.error("Chat upstream returned %s: %s", response.status_code, body[:500])
        raise _upstream_error(response.status_code)

    async def relay() -> AsyncIterator[bytes]:
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        finally:
            await response.aclose()
            if owns_client:
                await client.aclose()

    return relay()
