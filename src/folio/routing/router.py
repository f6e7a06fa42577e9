"""Request-bound router.

Maps the current request to a page id and page ids back to URLs. There
is no route table: a page id *is* the path below the site root.

    /docs/setup?x=1  ->  "docs/setup"
    "docs/"          ->  https://example.com/docs/
"""

from collections.abc import Mapping
from urllib.parse import unquote


class Router:
    """Routes one request.

    Built from the request's ``server_params`` (``path``, ``root_path``,
    ``scheme``, ``host``) and the configured ``base_url``. When
    ``base_url`` is empty it is derived from scheme, host and root path.

    Usage::

        router = Router(request.server_params, base_url="")
        page_id = router.current_url()
        url = router.url_for_page("about")
    """

    __slots__ = ("_base_url", "_server")

    def __init__(self, server_params: Mapping[str, str], base_url: str = "") -> None:
        self._server = dict(server_params)
        self._base_url = base_url.rstrip("/") if base_url else ""

    @property
    def base_url(self) -> str:
        """Site root URL without a trailing slash."""
        if self._base_url:
            return self._base_url
        scheme = self._server.get("scheme") or "http"
        host = self._server.get("host") or "localhost"
        root = self._server.get("root_path", "").rstrip("/")
        return f"{scheme}://{host}{root}"

    def current_url(self) -> str:
        """The page id requested, relative to the site root.

        Query string removed, percent-decoded, no leading slash.
        """
        path = self._server.get("path", "")
        path, _, _ = path.partition("?")
        root = self._server.get("root_path", "").rstrip("/")
        if root and (path == root or path.startswith(root + "/")):
            path = path[len(root) :]
        return unquote(path).lstrip("/")

    def url(self, path: str) -> str:
        """Absolute URL for a path below the site root."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def url_for_page(self, page_id: str, *, absolute: bool = True) -> str:
        """URL serving *page_id*.

        With ``absolute=False`` returns a root-relative path (root path
        prefix included) instead.
        """
        if absolute:
            return self.url(page_id)
        root = self._server.get("root_path", "").rstrip("/")
        return f"{root}/{page_id.lstrip('/')}"

    def __repr__(self) -> str:
        return f"<Router base_url={self.base_url!r} current={self.current_url()!r}>"
