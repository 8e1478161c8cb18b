import logging
from urllib.parse import quote, urlsplit, urlunsplit

from fastapi import APIRouter, Depends, HTTPException, Response, status

from shortlinks.config import Settings
from shortlinks.dependencies import get_app_settings, get_click_tracker, get_link_service
from shortlinks.hit_processor.click_tracker import ClickTracker
from shortlinks.services.link_service import LinkService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["redirect"])

# Printable ASCII: everything that may appear in a header as-is
_HEADER_SAFE = "".join(chr(c) for c in range(0x21, 0x7f))


def location_header(url: str) -> str:
    """
    The Location value for a stored URL.

    ASCII URLs are sent exactly as stored. Non-ASCII hosts are IDNA-encoded
    and any other non-ASCII characters are percent-encoded as UTF-8.
    """
    if url.isascii():
        return url

    parts = urlsplit(url)
    userinfo, at, hostport = parts.netloc.rpartition("@")
    host, colon, port = hostport.partition(":")
    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError:
            logger.warning("Cannot IDNA-encode host %r, percent-encoding it", host)
    netloc = f"{userinfo}{at}{host}{colon}{port}"
    return quote(urlunsplit(parts._replace(netloc=netloc)), safe=_HEADER_SAFE)


def redirect_to(url: str, status_code: int) -> Response:
    """Redirect without RedirectResponse, which re-quotes characters like {} | ^"""
    return Response(status_code=status_code, headers={"location": location_header(url)})


@router.get("/", include_in_schema=False)
async def redirect_root(settings: Settings = Depends(get_app_settings)):
    """Redirect to the configured default URL. No database access."""
    logger.info("Root redirect to %s", settings.default_redirect_url)
    return redirect_to(settings.default_redirect_url, settings.redirect_status_code)


@router.get("/{token}", include_in_schema=False)
async def redirect_to_long_url(
    token: str,
    settings: Settings = Depends(get_app_settings),
    link_service: LinkService = Depends(get_link_service),
    click_tracker: ClickTracker = Depends(get_click_tracker),
):
    """
    Redirect a short token to its long URL.

    Flow:
    1. Resolve the token (database, then static CSV links)
    2. Schedule the click increment in the background (not awaited)
    3. Redirect immediately

    A failed increment is only logged; the redirect still goes out.
    """
    link = await link_service.resolve(token)

    if link is None:
        logger.warning("Token not found: %s", token)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found",
        )

    if link.counts_clicks:
        click_tracker.record(token)

    logger.info("Redirecting %s to %s (%s)", token, link.long_url, link.source.value)
    return redirect_to(link.long_url, settings.redirect_status_code)
