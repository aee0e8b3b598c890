# Overview: AI assistant client; ships the business snapshot to the chat relay.

from __future__ import annotations

import httpx
from flask import current_app

from ..models import Product
from ..extensions import db
from . import khata_service, transactions_service

MAX_QUESTION_LENGTH = 2000


class AssistantError(Exception):
    """Relay unreachable, misconfigured or returned an error payload."""
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def build_snapshot() -> dict:
    """Current products, transactions (with items) and contacts (with balances)."""
    products = db.session.query(Product).order_by(Product.name.asc()).all()
    return {
        "products": [p.to_dict() for p in products],
        "transactions": [t.to_dict() for t in transactions_service.load_all_transactions()],
        "contacts": khata_service.list_contacts(),
    }


def _error_message(payload) -> str | None:
    if not isinstance(payload, dict) or not payload.get("error"):
        return None
    err = payload["error"]
    if isinstance(err, dict):
        return str(err.get("message") or err)
    return str(err)


def _extract_text(payload) -> str | None:
    if not isinstance(payload, dict):
        return None
    if payload.get("text"):
        return payload["text"]
    # Relays that pass the upstream completion through as "raw"
    try:
        return payload["raw"]["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None


def ask_assistant(user_input: str, *, client: httpx.Client | None = None) -> str:
    """
    POST {userInput, products, transactions, contacts} to the relay and
    return its text answer.
    """
    question = (user_input or "").strip()
    if not question:
        raise AssistantError("userInput is required", status_code=400)
    if len(question) > MAX_QUESTION_LENGTH:
        raise AssistantError(f"userInput exceeds {MAX_QUESTION_LENGTH} characters", status_code=400)

    url = current_app.config.get("ASSISTANT_RELAY_URL")
    if not url:
        raise AssistantError("Assistant relay is not configured", status_code=503)

    payload = {"userInput": question, **build_snapshot()}

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=current_app.config["ASSISTANT_TIMEOUT_SECONDS"])
    try:
        response = client.post(url, json=payload)
    except httpx.HTTPError as exc:
        current_app.logger.warning("Assistant relay request failed: %s", exc)
        raise AssistantError("Could not connect to the AI service") from exc
    finally:
        if owns_client:
            client.close()

    try:
        body = response.json()
    except ValueError:
        body = None

    if response.status_code == 429:
        raise AssistantError("AI service rate limit reached, try again in a minute", status_code=429)

    message = _error_message(body)
    if response.is_error or message:
        current_app.logger.warning("Assistant relay error %s: %s", response.status_code, message or response.text)
        raise AssistantError(message or f"Relay error {response.status_code}")

    text = _extract_text(body)
    if not text:
        raise AssistantError("No response from AI service.")
    return text
