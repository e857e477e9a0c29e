"""Local mirror endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from farmsync.application.schemas import MirrorReplace, MirrorResponse
from farmsync.application.services import LocalMirrorService
from farmsync.domain.exceptions import UnknownMirrorError
from farmsync.infrastructure.dependencies import get_mirrors

router = APIRouter(prefix="/mirrors", tags=["Local Mirrors"])


@router.get("/{name}", response_model=MirrorResponse)
async def get_mirror(
    name: str,
    mirrors: LocalMirrorService = Depends(get_mirrors),
) -> MirrorResponse:
    """Read a mirror; unreadable contents come back as an empty list."""
    try:
        mirror = mirrors.resolve(name)
    except UnknownMirrorError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    records = await mirrors.read(mirror)
    return MirrorResponse(name=mirror.value, available=bool(records), records=records)


@router.put("/{name}", response_model=MirrorResponse)
async def replace_mirror(
    name: str,
    data: MirrorReplace,
    mirrors: LocalMirrorService = Depends(get_mirrors),
) -> MirrorResponse:
    """Overwrite a mirror with a local edit, bypassing the queue."""
    try:
        mirror = mirrors.resolve(name)
    except UnknownMirrorError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    await mirrors.write(mirror, data.records)
    return MirrorResponse(name=mirror.value, available=bool(data.records), records=data.records)
