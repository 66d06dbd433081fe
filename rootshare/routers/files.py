from __future__ import annotations

import mimetypes
from typing import AsyncIterator, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from ..deps import get_file_ops
from ..errors import FileOpError, to_http_exception
from ..schemas import ApiResponse, DeleteRequest, FileEntryOut, MkdirRequest, MoveRequest, UploadFailureOut, UploadResult
from ..services.file_ops import FileOps, UploadItem

router = APIRouter(prefix='/api', tags=['files'])


async def _chunks(file: UploadFile, chunk_size: int) -> AsyncIterator[bytes]:
    while chunk := await file.read(chunk_size):
        yield chunk


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


@router.get('/files')
def list_files(
    path: str = Query(default='/'),
    sort_by: Optional[str] = Query(default=None, pattern='^(name|size|date)$'),
    order: str = Query(default='asc', pattern='^(asc|desc)$'),
    ops: FileOps = Depends(get_file_ops),
):
    try:
        entries = ops.list_dir(path)
    except FileOpError as exc:
        raise to_http_exception(exc) from exc

    items = [FileEntryOut.model_validate(entry) for entry in entries]
    if sort_by:
        reverse = order == 'desc'
        key_map = {'name': lambda i: i.name.lower(), 'size': lambda i: i.size, 'date': lambda i: i.updated_at}
        items.sort(key=key_map[sort_by], reverse=reverse)
    return {'ok': True, 'path': path, 'files': items, 'data': items}


@router.post('/upload')
async def upload(
    path: str = Query(default='/'),
    files: list[UploadFile] = File(...),
    ops: FileOps = Depends(get_file_ops),
):
    items = [UploadItem(name=f.filename, chunks=_chunks(f, ops.chunk_size)) for f in files]
    try:
        report = await ops.receive(path, items)
    except FileOpError as exc:
        raise to_http_exception(exc) from exc
    finally:
        for f in files:
            await f.close()

    if report.failed and not report.stored:
        first = report.failed[0]
        raise HTTPException(status_code=first.kind.status_code, detail=first.message, headers={'X-Error-Code': first.kind.value})

    result = UploadResult(
        stored=report.stored,
        failed=[UploadFailureOut.model_validate(failure) for failure in report.failed],
    )
    message = 'Upload successful' if report.ok else 'Upload finished with errors'
    return ApiResponse(ok=report.ok, message=message, data=result)


@router.get('/download')
def download(path: str = Query(..., min_length=1), ops: FileOps = Depends(get_file_ops)):
    try:
        target = ops.download(path)
    except FileOpError as exc:
        raise to_http_exception(exc) from exc
    media_type = mimetypes.guess_type(target.name)[0] or 'application/octet-stream'
    headers = {
        'Content-Disposition': _content_disposition(target.name),
        'Content-Length': str(target.size),
        'X-File-Size': str(target.size),
    }
    return StreamingResponse(target.iter_chunks(), media_type=media_type, headers=headers)


@router.post('/mkdir')
def mkdir(payload: MkdirRequest, ops: FileOps = Depends(get_file_ops)):
    try:
        ops.mkdir(payload.path, payload.name)
    except FileOpError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(ok=True, message='Directory created')


@router.delete('/delete')
def delete(payload: DeleteRequest, ops: FileOps = Depends(get_file_ops)):
    try:
        ops.delete(payload.path)
    except FileOpError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(ok=True, message='Deleted successfully')


@router.post('/move')
def move(payload: MoveRequest, ops: FileOps = Depends(get_file_ops)):
    try:
        ops.move(payload.old_path, payload.new_path)
    except FileOpError as exc:
        raise to_http_exception(exc) from exc
    return ApiResponse(ok=True, message='Moved/Renamed successfully')
