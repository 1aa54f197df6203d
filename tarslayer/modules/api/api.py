import re
from pathlib import PurePosixPath
from urllib.parse import quote

from fastapi import FastAPI, Query, HTTPException, APIRouter, Request
from fastapi.responses import JSONResponse, Response
import httpx
import fastapi_swagger_dark as fsd

from tarslayer.modules.keepers import TarReader, NotFound, TruncatedContent
from tarslayer.modules.keepers.sources import fetch_tar_async
from tarslayer.modules.formatters import guess_media_type


app = FastAPI(
    title="Tarslayer API",
    docs_url=None,
    description="""
**Tarslayer API**
* List the entries of a tar archive
* Pull single files out of it, as text or as a download
    """,
    version="1.0.0"
    )

# Create a router for the dark docs
router = APIRouter()

# Install dark theme on the router
fsd.install(router)

# Include the router in the app
app.include_router(router)

# Only plain http(s) URLs may be fetched
URL_PATTERN = re.compile(r'^https?://[^\s/$.?#][^\s]*$', re.IGNORECASE)


def _listing(reader: TarReader) -> dict:
    return {
        "entries_found": len(reader),
        "archive_size": reader.buffer_size,
        "entries": [info.to_dict() for info in reader.file_infos],
    }


def content_disposition(disposition: str, filename: str) -> str:
    """
    Build a Content-Disposition value that survives any entry name.

    Non-ASCII names get an ASCII fallback plus an RFC 5987 `filename*` parameter.
    """
    fallback = "".join(
        "_" if (not char.isascii() or char in '"\\' or not char.isprintable()) else char
        for char in filename
    )
    value = f'{disposition}; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def _file_response(reader: TarReader, name: str, as_text: bool) -> Response:
    try:
        blob = reader.get_file_blob(name, guess_media_type(name))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TruncatedContent as e:
        raise HTTPException(status_code=422, detail=str(e))

    # Extract just the filename for Content-Disposition
    filename = PurePosixPath(name).name

    headers = {
        "Content-Length": str(blob.size),
    }

    if as_text:
        headers["Content-Disposition"] = content_disposition("inline", filename)
        return Response(
            content=blob.data,
            media_type="text/plain; charset=utf-8",
            headers=headers,
        )

    headers["Content-Disposition"] = content_disposition("attachment", filename)
    return Response(
        content=blob.data,
        media_type=blob.type,
        headers=headers,
    )


async def _fetch_remote(url: str) -> TarReader:
    if not URL_PATTERN.match(url):
        raise HTTPException(status_code=400, detail="Invalid archive URL")

    try:
        data = await fetch_tar_async(url)
    except httpx.HTTPStatusError as e:
        raise HTTPException(
            status_code=e.response.status_code,
            detail=f"Upstream error: {e.response.text}"
        )
    except httpx.RequestError as e:
        raise HTTPException(
            status_code=502,
            detail=f"Failed to fetch archive: {str(e)}"
        )

    return await TarReader.load(data)


@app.post("/entries")
async def uploaded_entries(request: Request):
    """
    ## /entries

    List the entries of the tar archive sent as the request body.

    - Returns JSON with one object per entry, in archive order.

    - Example: `curl --data-binary @layer.tar http://127.0.0.1:8000/entries`
    """
    reader = await TarReader.load(await request.body())
    return JSONResponse(_listing(reader))


@app.post("/file")
async def uploaded_file(
    request: Request,
    name: str = Query(..., description="Entry name inside the archive, e.g., etc/passwd"),
    as_text: bool = Query(default=False, description="Render as plain text in browser instead of downloading"),
):
    """
    ## /file

    Return a single file from the tar archive sent as the request body.

    ### Parameters

    - `name` : `etc/passwd`
        - Exact entry name as listed by `/entries`
    - `as_text` : `true`
        - Allows viewing the file in browser instead of saving to disk
        - Example: `curl --data-binary @layer.tar "http://127.0.0.1:8000/file?name=etc/passwd&as_text=true"`
    """
    reader = await TarReader.load(await request.body())
    return _file_response(reader, name, as_text)


@app.get("/remote/entries")
async def remote_entries(
    url: str = Query(..., description="http(s) URL of an uncompressed tar archive"),
):
    """
    ## /remote/entries

    Fetch a tar archive from `url` and list its entries.

    - Example: `/remote/entries?url=https://example.com/rootfs.tar`
    """
    reader = await _fetch_remote(url)
    return JSONResponse(_listing(reader))


@app.get("/remote/file")
async def remote_file(
    url: str = Query(..., description="http(s) URL of an uncompressed tar archive"),
    name: str = Query(..., description="Entry name inside the archive"),
    as_text: bool = Query(default=False, description="Render as plain text in browser instead of downloading"),
):
    """
    ## /remote/file

    Fetch a tar archive from `url` and return a single file from it.

    - Example: `/remote/file?url=https://example.com/rootfs.tar&name=etc/os-release&as_text=true`
    """
    reader = await _fetch_remote(url)
    return _file_response(reader, name, as_text)
