"""
Admin dashboard controller

HTTP glue for the admin panel: every call carries the shared secret in the
``x-admin-password`` header. Project and course forms are mapped field by
field into API bodies; list views can be exported as CSV.
"""
import csv
import io
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

ADMIN_HEADER = "x-admin-password"
REDACTED = "********"

# kind -> (endpoint, key of the list in the response)
LISTS = {
    "users": ("/api/users", "users"),
    "sessions": ("/api/sessions", "sessions"),
    "hires": ("/api/hires", "hires"),
    "bulk-quotes": ("/api/bulk-quotes", "bulkQuotes"),
    "logins": ("/api/logins", "logins"),
    "projects": ("/api/projects", "projects"),
    "courses": ("/api/courses", "courses"),
}

PROJECT_FIELDS = ("title", "category", "image", "description", "tags", "link", "badge", "featured", "priority")
COURSE_FIELDS = ("title", "level", "description", "duration", "features", "sessionType", "badge")


class DashboardError(Exception):
    """A dashboard call failed; ``message`` is what the server said."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# ---------------------- Form mapping ----------------------
def split_list(value: Any) -> List[str]:
    """'a, b ,c' -> ['a', 'b', 'c']; lists pass through trimmed."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        text = str(value)
        if not text.strip():
            return []
        items = text.split(",")
    return [str(s).strip() for s in items]


def _checkbox(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("on", "true", "1", "yes")
    return bool(value)


def _int_or_zero(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _pick(form: Mapping[str, Any], fields) -> Dict[str, Any]:
    data = {}
    for field in fields:
        if field not in form:
            continue
        value = form[field]
        if isinstance(value, str):
            value = value.strip()
            if not value and field == "badge":
                # blank badge clears the stored one
                value = None
        data[field] = value
    return data


def project_from_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    data = _pick(form, PROJECT_FIELDS)
    data["tags"] = split_list(form.get("tags"))
    data["featured"] = _checkbox(form.get("featured"))
    data["priority"] = _int_or_zero(form.get("priority"))
    return data


def course_from_form(form: Mapping[str, Any]) -> Dict[str, Any]:
    data = _pick(form, COURSE_FIELDS)
    data["features"] = split_list(form.get("features"))
    return data


# ---------------------- CSV ----------------------
def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_cell(v) for v in value)
    return str(value)


def to_csv(records: List[Mapping[str, Any]], redact=("password",)) -> str:
    """Header is the keys of the first record; every value is quoted, quotes doubled."""
    if not records:
        return ""
    keys = list(records[0].keys())
    buf = io.StringIO()
    buf.write(",".join(keys) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for item in records:
        writer.writerow([REDACTED if key in redact and item.get(key) else _cell(item.get(key)) for key in keys])
    return buf.getvalue()[:-1]


# ---------------------- Client ----------------------
class AdminClient:
    """Admin API client. ``http`` is any httpx.Client pointed at the site."""

    def __init__(self, http: httpx.Client, password: str):
        self.http = http
        self.password = password

    @property
    def headers(self) -> Dict[str, str]:
        return {ADMIN_HEADER: self.password}

    def _request(self, method: str, url: str, **kwargs) -> dict:
        response = self.http.request(method, url, headers=self.headers, **kwargs)
        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                message = "Server returned non-JSON response: " + response.text[:100]
            else:
                message = (data.get("error") if isinstance(data, dict) else None) or response.reason_phrase
            raise DashboardError(message, response.status_code)
        return response.json()

    def unlock(self) -> bool:
        """True when the password is accepted."""
        try:
            self._request("GET", "/api/users")
        except DashboardError:
            return False
        return True

    def list(self, kind: str) -> List[dict]:
        endpoint, key = LISTS[kind]
        return self._request("GET", endpoint)[key]

    def stats(self) -> dict:
        return self._request("GET", "/api/stats")

    def load_all(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {kind: self.list(kind) for kind in LISTS}
        data["stats"] = self.stats()
        return data

    def delete(self, kind: str, doc_id: str) -> dict:
        endpoint, _ = LISTS[kind]
        result = self._request("DELETE", f"{endpoint}/{doc_id}")
        logger.info("Deleted %s %s", kind, doc_id)
        return result

    def _save(self, endpoint: str, body: dict, doc_id: Optional[str]) -> dict:
        if doc_id:
            return self._request("PUT", f"{endpoint}/{doc_id}", json=body)
        return self._request("POST", endpoint, json=body)

    def save_project(self, form: Mapping[str, Any], doc_id: Optional[str] = None) -> dict:
        return self._save("/api/projects", project_from_form(form), doc_id)["project"]

    def save_course(self, form: Mapping[str, Any], doc_id: Optional[str] = None) -> dict:
        return self._save("/api/courses", course_from_form(form), doc_id)["course"]

    def upload(self, filename: str, content: bytes) -> str:
        return self._request("POST", "/api/upload", files={"image": (filename, content)})["url"]

    def export_csv(self, kind: str) -> str:
        return to_csv(self.list(kind))
