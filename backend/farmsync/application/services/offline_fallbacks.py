"""Synthesized responses served when neither the network nor the cache can answer."""

from farmsync.domain.entities import CachedResponse

_OFFLINE_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <title>Adonai Farm - Offline</title>
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
      body { font-family: Arial, sans-serif; text-align: center; padding: 2rem;
             background: #f5f5dc; color: #2d5016; }
      .offline-message { max-width: 400px; margin: 2rem auto; padding: 2rem;
                         background: white; border-radius: 10px;
                         box-shadow: 0 4px 6px rgba(0,0,0,0.1); }
      h1 { color: #2d5016; margin-bottom: 1rem; }
      p { margin-bottom: 1rem; line-height: 1.6; }
      .btn { background: #2d5016; color: white; padding: 0.75rem 1.5rem;
             border: none; border-radius: 5px; cursor: pointer; font-size: 1rem; }
    </style>
  </head>
  <body>
    <div class="offline-message">
      <h1>You're Offline</h1>
      <p>Adonai Farm is currently offline. Your data is safely stored locally and will sync when you're back online.</p>
      <p>You can still view your cached data and make changes that will be synced later.</p>
      <button class="btn" onclick="window.location.reload()">Try Again</button>
    </div>
  </body>
</html>
"""

_PLACEHOLDER_SVG = """<svg width="400" height="300" xmlns="http://www.w3.org/2000/svg">
  <rect width="100%" height="100%" fill="#f5f5f5" stroke="#ddd" stroke-width="2"/>
  <text x="50%" y="40%" font-family="Arial" font-size="18" fill="#999" text-anchor="middle" dy=".3em">Adonai Farm</text>
  <text x="50%" y="60%" font-family="Arial" font-size="14" fill="#bbb" text-anchor="middle" dy=".3em">Image Not Available</text>
</svg>
"""


def offline_page(url: str = "") -> CachedResponse:
    return CachedResponse(
        status=200,
        status_text="OK",
        headers={"content-type": "text/html; charset=utf-8"},
        body=_OFFLINE_PAGE.encode("utf-8"),
        url=url,
    )


def service_unavailable(url: str = "") -> CachedResponse:
    return CachedResponse(
        status=503,
        status_text="Service Unavailable",
        headers={"content-type": "text/plain"},
        body=b"Offline",
        url=url,
    )


def placeholder_image(url: str = "") -> CachedResponse:
    """A 400x300 neutral SVG reading "Image Not Available"."""
    return CachedResponse(
        status=200,
        status_text="OK",
        headers={"content-type": "image/svg+xml"},
        body=_PLACEHOLDER_SVG.encode("utf-8"),
        url=url,
    )
