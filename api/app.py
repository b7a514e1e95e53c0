from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from records import (
    RELATIONSHIP_GROUPS,
    create_contact,
    create_event,
    delete_contact,
    delete_event,
    get_contact,
    get_event,
    initialize_database,
    list_contacts,
    list_events,
    list_events_for_contact,
    search_database,
    update_contact,
    update_event,
)
from reminders import build_reminder_feed

from .assistant import ChatUpstreamError, build_chat_payload, build_system_prompt, stream_chat
from .config import API_HOST, API_PORT, API_VERSION, DB_PATH
from .dependencies import get_db_path, verify_token
from .mdns import register_mdns_service, unregister_mdns_service
from .models import (
    ChatRequest,
    ContactCreateRequest,
    ContactResponse,
    ContactUpdateRequest,
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    GroupResponse,
    HealthResponse,
    ReminderResponse,
    SearchResultResponse,
    contact_to_response,
    event_to_response,
    group_to_response,
    reminder_to_response,
    search_result_to_response,
)
from .security import load_or_create_server_id, load_or_create_token

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_database(app.state.db_path)
    app.state.token = load_or_create_token()
    app.state.server_id = load_or_create_server_id()
    logger.info("=" * 40)
    logger.info("Kinship Server")
    logger.info("Token: %s", app.state.token)
    logger.info("Server ID: %s", app.state.server_id)
    logger.info("=" * 40)
    register_mdns_service(app.state.server_id, app.state.port)
    yield
    unregister_mdns_service()


app = FastAPI(title="Kinship Server", version=API_VERSION, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.db_path = DB_PATH
app.state.token = None
app.state.server_id = None
app.state.port = API_PORT

protected = [Depends(verify_token)]


@app.get("/api/health", response_model=HealthResponse, dependencies=protected)
async def health() -> HealthResponse:
    return HealthResponse(
        version=API_VERSION,
        server_time=int(datetime.now(timezone.utc).timestamp() * 1000),
        server_id=app.state.server_id or "",
    )


@app.get("/api/groups", response_model=List[GroupResponse], dependencies=protected)
async def list_groups_api() -> List[GroupResponse]:
    return [group_to_response(group) for group in RELATIONSHIP_GROUPS]


# Contacts


@app.get("/api/contacts", response_model=List[ContactResponse], dependencies=protected)
async def list_contacts_api(db_path: Path = Depends(get_db_path)) -> List[ContactResponse]:
    return [contact_to_response(record) for record in list_contacts(db_path)]


@app.post(
    "/api/contacts",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=protected,
)
async def create_contact_api(
    payload: ContactCreateRequest,
    db_path: Path = Depends(get_db_path),
) -> ContactResponse:
    try:
        record = create_contact(db_path=db_path, **payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return contact_to_response(record)


@app.get("/api/contacts/{contact_id}", response_model=ContactResponse, dependencies=protected)
async def get_contact_api(contact_id: int, db_path: Path = Depends(get_db_path)) -> ContactResponse:
    record = get_contact(contact_id, db_path)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return contact_to_response(record)


@app.put("/api/contacts/{contact_id}", response_model=ContactResponse, dependencies=protected)
async def update_contact_api(
    contact_id: int,
    payload: ContactUpdateRequest,
    db_path: Path = Depends(get_db_path),
) -> ContactResponse:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided for update")
    if get_contact(contact_id, db_path) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    try:
        record = update_contact(contact_id, db_path=db_path, **data)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return contact_to_response(record)


@app.delete(
    "/api/contacts/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=protected,
)
async def delete_contact_api(contact_id: int, db_path: Path = Depends(get_db_path)) -> None:
    if get_contact(contact_id, db_path) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    delete_contact(contact_id, db_path)


@app.get(
    "/api/contacts/{contact_id}/events",
    response_model=List[EventResponse],
    dependencies=protected,
)
async def contact_events_api(contact_id: int, db_path: Path = Depends(get_db_path)) -> List[EventResponse]:
    if get_contact(contact_id, db_path) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    today = date.today()
    return [event_to_response(record, today) for record in list_events_for_contact(contact_id, db_path)]


# Events


@app.get("/api/events", response_model=List[EventResponse], dependencies=protected)
async def list_events_api(db_path: Path = Depends(get_db_path)) -> List[EventResponse]:
    today = date.today()
    return [event_to_response(record, today) for record in list_events(db_path)]


@app.post(
    "/api/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=protected,
)
async def create_event_api(payload: EventCreateRequest, db_path: Path = Depends(get_db_path)) -> EventResponse:
    try:
        record = create_event(
            payload.title,
            payload.event_date,
            event_type=payload.event_type.value,
            description=payload.description,
            is_recurring=payload.is_recurring,
            recurring_type=payload.recurring_type.value if payload.recurring_type else None,
            reminder_days=payload.reminder_days,
            contact_id=payload.contact_id,
            db_path=db_path,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return event_to_response(record)


@app.get("/api/events/{event_id}", response_model=EventResponse, dependencies=protected)
async def get_event_api(event_id: int, db_path: Path = Depends(get_db_path)) -> EventResponse:
    record = get_event(event_id, db_path)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event_to_response(record)


@app.put("/api/events/{event_id}", response_model=EventResponse, dependencies=protected)
async def update_event_api(
    event_id: int,
    payload: EventUpdateRequest,
    db_path: Path = Depends(get_db_path),
) -> EventResponse:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided for update")
    if get_event(event_id, db_path) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    for key in ("event_type", "recurring_type"):
        if data.get(key) is not None:
            data[key] = data[key].value
    try:
        record = update_event(event_id, db_path=db_path, **data)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return event_to_response(record)


@app.delete(
    "/api/events/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=protected,
)
async def delete_event_api(event_id: int, db_path: Path = Depends(get_db_path)) -> None:
    if get_event(event_id, db_path) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    delete_event(event_id, db_path)


# Reminders and assistant


@app.get("/api/reminders", response_model=List[ReminderResponse], dependencies=protected)
async def reminders_api(
    today: Optional[date] = Query(None, description="Reference date (defaults to the server's today)"),
    db_path: Path = Depends(get_db_path),
) -> List[ReminderResponse]:
    reference = today or date.today()
    feed = build_reminder_feed(list_events(db_path), list_contacts(db_path), reference)
    return [reminder_to_response(item, reference) for item in feed]


@app.get("/api/search", response_model=List[SearchResultResponse], dependencies=protected)
async def search_api(
    q: str = Query("", description="Case-insensitive text to look for in contacts and events"),
    db_path: Path = Depends(get_db_path),
) -> List[SearchResultResponse]:
    today = date.today()
    return [search_result_to_response(result, today) for result in search_database(q, db_path)]


@app.post("/api/assistant/chat", dependencies=protected)
async def assistant_chat_api(payload: ChatRequest, db_path: Path = Depends(get_db_path)) -> StreamingResponse:
    contacts = list_contacts(db_path)
    events = list_events(db_path)
    logger.info(
        "Assistant chat: %d contacts, %d events, %d messages",
        len(contacts),
        len(events),
        len(payload.messages),
    )
    system_prompt = build_system_prompt(contacts, events, date.today())
    chat_payload = build_chat_payload(system_prompt, [message.model_dump() for message in payload.messages])
    try:
        stream = await stream_chat(chat_payload)
    except ChatUpstreamError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return StreamingResponse(stream, media_type="text/event-stream")


def run_server(*, host: str = API_HOST, port: int = API_PORT, log_level: str = "info") -> None:
    app.state.port = port
    uvicorn.run(app=app, host=host, port=port, log_level=log_level)
