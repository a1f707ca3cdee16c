import httpx
from flask import current_app, flash

from .refresh import DataRefreshManager


class ApiError(Exception):
    """Raised when the lending API answers with a non-2xx status."""

    def __init__(self, status_code, message):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(response):
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or str(body)
    return str(body)


class LendingApi:
    """Thin client for the remote lending API (/api/clients, /api/loans, /api/transactions)."""

    def __init__(self, base_url, timeout=10.0, attempts=3, cache_bust=False, transport=None):
        self.base_url = base_url.rstrip("/")
        self.attempts = max(1, attempts)
        self.cache_bust = cache_bust
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def close(self):
        self._http.close()

    def _get(self, path):
        """
        GET with simple retries to handle transient
        'RemoteProtocolError: Server disconnected' issues.
        """
        params = DataRefreshManager.get_cache_buster() if self.cache_bust else None
        for i in range(self.attempts):
            try:
                response = self._http.get(path, params=params)
                break
            except httpx.RemoteProtocolError:
                if i < self.attempts - 1:
                    continue
                raise
        return self._unwrap(response)

    def _send(self, method, path, payload):
        response = self._http.request(method, path, json=payload)
        return self._unwrap(response)

    @staticmethod
    def _unwrap(response):
        if not response.is_success:
            raise ApiError(response.status_code, _error_message(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise ApiError(response.status_code, "Invalid JSON from lending API")

    def _get_list(self, path):
        rows = self._get(path)
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise ApiError(200, f"Expected a list from {path}, got {type(rows).__name__}")
        return rows

    # --- clients ---
    def list_clients(self):
        return self._get_list("/api/clients")

    def create_client(self, data):
        return self._send("POST", "/api/clients", data)

    def update_client(self, client_id, data):
        return self._send("PUT", f"/api/clients/{client_id}", data)

    # --- loans ---
    def list_loans(self):
        return self._get_list("/api/loans")

    def get_loan(self, loan_id):
        # The API has no single-loan endpoint
        for loan in self.list_loans():
            if str(loan.get("_id")) == str(loan_id):
                return loan
        return None

    def create_loan(self, data):
        return self._send("POST", "/api/loans", data)

    def collect_interest(self, loan_id, data):
        return self._send("POST", f"/api/loans/{loan_id}/collect-interest", data)

    def pre_close(self, loan_id, data):
        return self._send("POST", f"/api/loans/{loan_id}/pre-close", data)

    # --- transactions ---
    def list_transactions(self):
        return self._get_list("/api/transactions")


def init_api(app):
    app.extensions["lending_api"] = LendingApi(
        app.config["LENDING_API_URL"],
        timeout=app.config["API_TIMEOUT"],
        attempts=app.config["API_RETRY_ATTEMPTS"],
        cache_bust=app.config["API_CACHE_BUST"],
        transport=app.config.get("API_TRANSPORT"),
    )


def get_api():
    return current_app.extensions["lending_api"]


def fetch_list(name):
    """
    Fetch clients/loans/transactions for a page. Failures are logged and
    flashed, and the page renders with an empty list.
    """
    try:
        return getattr(get_api(), f"list_{name}")()
    except (ApiError, httpx.HTTPError) as e:
        current_app.logger.error(f"Error fetching {name}: {e}")
        flash(f"Could not load {name} from the lending service.", "danger")
        return []
