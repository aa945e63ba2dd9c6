"""
SyncMe - Notes Route Handlers
=============================

What:  CRUD endpoints for notes.
How:   Resolves the repository and the optional requesting user through
       dependencies, delegates to NoteService, sets status codes and headers.
Who:   Called by the client's HttpSyncPort and any other HTTP consumer.

Endpoints:
    GET    /notes        → 200, non-deleted notes, newest-updated first
    GET    /notes/{id}   → 200 | 404
    POST   /notes        → 201 + Location: /notes/{id}
    PUT    /notes/{id}   → 200 | 404
    DELETE /notes/{id}   → 204 | 404

Ownership:
    An optional X-User-Email header (the identifier returned by POST /login)
    scopes every operation to that user's notes. Without it the request is
    unscoped and bypasses ownership: it can list, read, update and delete
    notes owned by any user. Clients that log in must always send the header.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Response, status

from syncme.models.user import User
from syncme.repositories.base import NoteRepository, UserRepository
from syncme.repositories.sql import get_note_repository, get_user_repository
from syncme.schemas.note import ErrorResponse, NoteResponse, NoteWrite
from syncme.services.auth_service import auth_service
from syncme.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])


async def get_request_owner(
    x_user_email: Optional[str] = Header(default=None),
    users: UserRepository = Depends(get_user_repository),
) -> Optional[User]:
    """Resolve X-User-Email to a user; None when the header is absent."""
    return await auth_service.resolve_session(users, x_user_email)


@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={401: {"description": "Unknown X-User-Email", "model": ErrorResponse}},
    summary="List notes",
    description="Returns every non-deleted note ordered by updatedAt descending.",
)
async def list_notes(
    repo: NoteRepository = Depends(get_note_repository),
    owner: Optional[User] = Depends(get_request_owner),
) -> List[NoteResponse]:
    return await note_service.list_notes(repo, owner=owner)


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note absent or deleted", "model": ErrorResponse}},
    summary="Get a single note",
)
async def get_note(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
    owner: Optional[User] = Depends(get_request_owner),
) -> NoteResponse:
    return await note_service.get_note(repo, note_id, owner=owner)


@router.post(
    "/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a note",
    description=(
        "Creates a note from title and content. createdAt, updatedAt and isDeleted "
        "are assigned by the server; client-supplied values are ignored."
    ),
)
async def create_note(
    data: NoteWrite,
    response: Response,
    repo: NoteRepository = Depends(get_note_repository),
    owner: Optional[User] = Depends(get_request_owner),
) -> NoteResponse:
    result = await note_service.create_note(repo, data, owner=owner)
    response.headers["Location"] = f"/notes/{result.id}"
    return result


@router.put(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note absent or deleted", "model": ErrorResponse}},
    summary="Update a note's title and content",
)
async def update_note(
    note_id: int,
    data: NoteWrite,
    repo: NoteRepository = Depends(get_note_repository),
    owner: Optional[User] = Depends(get_request_owner),
) -> NoteResponse:
    return await note_service.update_note(repo, note_id, data, owner=owner)


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Note absent or already deleted", "model": ErrorResponse}},
    summary="Soft-delete a note",
)
async def delete_note(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
    owner: Optional[User] = Depends(get_request_owner),
) -> Response:
    await note_service.delete_note(repo, note_id, owner=owner)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
