"""
FastAPI application serving extracted articles over HTTP.

``GET /`` without a ``url`` parameter returns a small form; with one, the
page is fetched and its article returned as HTML, plain text or metadata
JSON.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from readerview import __version__
from readerview.config import Config, settings
from readerview.exceptions import ReaderViewError
from readerview.observability.logging import get_logger
from readerview.service import OutputMode, ReaderService, is_http_url

logger = get_logger(__name__)

INDEX_PAGE = """<!DOCTYPE HTML>
<html>
 <head>
  <meta charset="utf-8">
  <title>readerview</title>
 </head>
 <body>
 <form action="/" style="width:80%">
  <fieldset>
   <legend>Get readability content</legend>
   <p><label for="url">URL </label><input type="url" name="url" style="width:90%"></p>
   <p><input type="checkbox" name="text" value="true">text only</p>
   <p><input type="checkbox" name="metadata" value="true">only get the page's metadata</p>
  </fieldset>
  <p><input type="submit"></p>
 </form>
 </body>
</html>"""

_TRUE_VALUES = frozenset(["1", "t", "T", "TRUE", "true", "True"])
_MEDIA_TYPES = {
    OutputMode.HTML: "text/html",
    OutputMode.TEXT: "text/plain",
    OutputMode.METADATA: "application/json",
}


def parse_bool(value: Optional[str]) -> bool:
    """Accepts the usual spellings of true; anything else is false."""
    return value in _TRUE_VALUES


def get_service(request: Request) -> ReaderService:
    return request.app.state.service


def create_app(config: Optional[Config] = None, service: Optional[ReaderService] = None) -> FastAPI:
    """Build the application; `service` overrides the one built from `config`."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Built at startup; one service per running app.
        app.state.service = service or ReaderService(config or settings)
        yield
        app.state.service.close()

    app = FastAPI(title="readerview", version=__version__, lifespan=lifespan)

    @app.get("/", response_model=None)
    def read_article(
        url: str = "",
        text: str = "",
        metadata: str = "",
        service: ReaderService = Depends(get_service),
    ) -> Response:
        """Form page, or the article of `url`."""
        if not url:
            return HTMLResponse(INDEX_PAGE)
        if not is_http_url(url):
            return PlainTextResponse(f"not an http(s) URL: {url}", status_code=400)

        mode = OutputMode.from_flags(metadata_only=parse_bool(metadata), text_only=parse_bool(text))
        logger.info("process URL", url=url, mode=mode.value)
        try:
            content = service.get_content(url, mode)
        except ReaderViewError as e:
            logger.warning("request failed", url=url, **e.to_dict())
            return PlainTextResponse(e.message, status_code=400)
        return Response(content, media_type=_MEDIA_TYPES[mode])

    return app


app = create_app()


def run_web_server(host: str = "127.0.0.1", port: int = 8080, config: Optional[Config] = None) -> None:
    """Function to run the FastAPI server."""
    import uvicorn

    log_level = config.web.log_level if config is not None else "info"
    uvicorn.run(create_app(config), host=host, port=port, log_level=log_level)
