"""
HTTP client for the Reform Agenda API.
Wraps an httpx.Client; FastAPI's TestClient can be passed in its place.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger("app.client")

DEFAULT_TIMEOUT = 15.0


class ApiError(Exception):
    """Non-2xx response or transport failure."""

    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class ReformsApiClient:
    def __init__(self, base_url: str = "http://localhost:8000", token: Optional[str] = None,
                 http: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def __enter__(self) -> "ReformsApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self.http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Network error calling {method} {path}: {e}")
            raise ApiError(0, "Network error") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise ApiError(response.status_code, detail)
        return response.json()

    # Agendas
    def list_agendas(self, page: int = 1, limit: int = 20, category: Optional[str] = None) -> dict:
        params = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        return self._request("GET", "/api/agendas", params=params)

    def get_agenda(self, agenda_id: str) -> dict:
        return self._request("GET", f"/api/agendas/{agenda_id}")

    def vote_agenda(self, agenda_id: str, vote_type: str) -> dict:
        return self._request("POST", f"/api/agendas/{agenda_id}/vote", json={"vote_type": vote_type})

    # Suggestions
    def list_suggestions(self, agenda_id: str) -> dict:
        return self._request("GET", "/api/suggestions", params={"agenda_id": agenda_id})

    def create_suggestion(self, agenda_id: str, content: str, author_name: str) -> dict:
        return self._request(
            "POST",
            "/api/suggestions",
            json={"agenda_id": agenda_id, "content": content, "author_name": author_name},
        )

    def vote_suggestion(self, suggestion_id: str, vote_type: str) -> dict:
        return self._request("POST", f"/api/suggestions/{suggestion_id}/vote", json={"vote_type": vote_type})

    # Votes
    def vote(self, table: str, item_id: str, vote_type: str) -> dict:
        if table == "agenda_votes":
            return self.vote_agenda(item_id, vote_type)
        return self.vote_suggestion(item_id, vote_type)

    def batch_votes(self, table: str, item_ids: List[str]) -> dict:
        return self._request("POST", "/api/votes/batch", json={"itemIds": list(item_ids), "table": table})

    # Catalog
    def list_testimonials(self, limit: int = 50, offset: int = 0) -> list:
        return self._request("GET", "/api/testimonials", params={"limit": limit, "offset": offset})

    def list_manifesto(self, lang: str = "en", **filters) -> dict:
        params = {"lang": lang, **{k: v for k, v in filters.items() if v is not None}}
        return self._request("GET", "/api/manifesto", params=params)

    def get_manifesto_item(self, item_id: str, lang: str = "en") -> dict:
        return self._request("GET", f"/api/manifesto/{item_id}", params={"lang": lang})
