"""In-memory stand-in for the remote lending API, served through httpx.MockTransport."""
import copy
import json
import re

import httpx

from lendadmin import create_app

ADMIN_EMAIL = "admin@admin.com"
ADMIN_PASSWORD = "admin@123"

CLIENTS = [
    {"_id": "c1", "name": "Asha Rao", "email": "asha@example.com", "phone": "+91 9000000001",
     "address": "12 MG Road, Bengaluru", "status": "active"},
    {"_id": "c2", "name": "Ravi Kumar", "email": "ravi@example.com", "phone": "+91 9000000002",
     "address": "4 Park Street, Kolkata", "status": "inactive"},
]

LOANS = [
    {"_id": "l1", "client": {"_id": "c1", "name": "Asha Rao", "email": "asha@example.com"},
     "loanAmount": 100000, "interestRate": 3, "monthlyInterest": 3000, "totalCollected": 4500,
     "remainingAmount": 100000, "status": "active", "loanDate": "2025-01-01T00:00:00"},
    {"_id": "l2", "client": "c2", "loanAmount": 50000, "interestRate": 2, "monthlyInterest": 1000,
     "totalCollected": 6000, "remainingAmount": 0, "status": "closed", "loanDate": "2024-09-15T00:00:00"},
]

TRANSACTIONS = [
    {"_id": "t1", "type": "interest", "amount": 3000, "client": "c1", "loan": "l1",
     "paymentMethod": "cash", "description": "March interest", "transactionDate": "2025-03-05T10:00:00.000Z"},
    {"_id": "t2", "type": "interest", "amount": 1500, "client": {"_id": "c1", "name": "Asha Rao"},
     "loan": {"_id": "l1"}, "paymentMethod": "bank_transfer", "description": "Part payment",
     "transactionDate": "2025-03-10T12:00:00"},
    {"_id": "t3", "type": "interest", "amount": 1000, "client": "c2", "loan": "l2",
     "paymentMethod": "cheque", "description": "February interest", "transactionDate": "2025-02-10T09:00:00"},
    {"_id": "t4", "type": "pre_close", "amount": 50000, "client": "c2", "loan": "l2",
     "paymentMethod": "cash", "description": "Loan pre-closed", "transactionDate": "2025-02-28T09:00:00"},
    {"_id": "t5", "type": "interest", "amount": 200, "client": "c2", "loan": "l2",
     "paymentMethod": "cash", "description": "Undated", "transactionDate": "not-a-date"},
]


class FakeLendingBackend:
    """Callable handler for httpx.MockTransport that mimics /api/clients, /api/loans and /api/transactions."""

    def __init__(self, clients=None, loans=None, transactions=None):
        self.clients = copy.deepcopy(CLIENTS if clients is None else clients)
        self.loans = copy.deepcopy(LOANS if loans is None else loans)
        self.transactions = copy.deepcopy(TRANSACTIONS if transactions is None else transactions)
        self.requests = []
        self.failures = {}

    def fail(self, method, path, status=500, message="Internal error"):
        self.failures[(method, path)] = (status, message)

    def bodies(self, method, path):
        return [json.loads(r.content) for r in self.requests if r.method == method and r.url.path == path]

    def _loan(self, loan_id):
        return next((loan for loan in self.loans if loan["_id"] == loan_id), None)

    def __call__(self, request):
        request.read()
        self.requests.append(request)
        method, path = request.method, request.url.path
        if (method, path) in self.failures:
            status, message = self.failures[(method, path)]
            return httpx.Response(status, json={"message": message})
        body = json.loads(request.content) if request.content else None

        if path == "/api/clients":
            if method == "GET":
                return httpx.Response(200, json=self.clients)
            client = {"_id": f"c{len(self.clients) + 1}", "status": "active", **body}
            self.clients.append(client)
            return httpx.Response(201, json=client)

        match = re.fullmatch(r"/api/clients/([^/]+)", path)
        if match and method == "PUT":
            client = next((c for c in self.clients if c["_id"] == match.group(1)), None)
            if client is None:
                return httpx.Response(404, json={"message": "Client not found"})
            client.update(body)
            return httpx.Response(200, json=client)

        if path == "/api/loans":
            if method == "GET":
                return httpx.Response(200, json=self.loans)
            loan = {
                "_id": f"l{len(self.loans) + 1}",
                "client": body["clientId"],
                "loanAmount": body["loanAmount"],
                "interestRate": body["interestRate"],
                "monthlyInterest": body["loanAmount"] * body["interestRate"] / 100,
                "totalCollected": 0,
                "remainingAmount": body["loanAmount"],
                "status": "active",
            }
            self.loans.append(loan)
            return httpx.Response(201, json=loan)

        match = re.fullmatch(r"/api/loans/([^/]+)/(collect-interest|pre-close)", path)
        if match and method == "POST":
            loan = self._loan(match.group(1))
            if loan is None:
                return httpx.Response(404, json={"message": "Loan not found"})
            if match.group(2) == "collect-interest":
                loan["totalCollected"] += body["collectedAmount"]
                kind, amount = "interest", body["collectedAmount"]
            else:
                loan["status"] = "closed"
                loan["remainingAmount"] = 0
                kind, amount = "pre_close", body["finalAmount"]
            self.transactions.insert(0, {
                "_id": f"t{len(self.transactions) + 1}", "type": kind, "amount": amount,
                "client": loan["client"], "loan": loan["_id"], "paymentMethod": body["paymentMethod"],
                "description": body.get("notes") or "", "transactionDate": "2025-03-20T10:00:00",
            })
            return httpx.Response(200, json={"message": "ok", "loan": loan})

        if path == "/api/transactions" and method == "GET":
            return httpx.Response(200, json=self.transactions)

        return httpx.Response(404, json={"message": "Not found"})


def make_app(backend=None, **overrides):
    backend = backend if backend is not None else FakeLendingBackend()
    config = {
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "LENDING_API_URL": "http://lending.test",
        "API_TRANSPORT": httpx.MockTransport(backend),
        "API_CACHE_BUST": False,
        "ADMIN_EMAIL": ADMIN_EMAIL,
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
        "ADMIN_PASSWORD_HASH": None,
    }
    config.update(overrides)
    return create_app(config), backend


def log_in(client):
    with client.session_transaction() as sess:
        sess["is_logged_in"] = True
        sess["user_email"] = ADMIN_EMAIL
        sess["login_time"] = "2025-03-15T09:00:00"
