"""Business-domain vocabulary used to name a codebase's domain.

The table is immutable: a read-only mapping of frozen term sets.
Order matters, since ties in scoring go to the earlier domain.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class DomainTerms:
    entities: tuple[str, ...]
    actions: tuple[str, ...]
    properties: tuple[str, ...]


DOMAIN_LEXICON: MappingProxyType[str, DomainTerms] = MappingProxyType({
    "e-commerce": DomainTerms(
        entities=(
            "product", "cart", "order", "customer", "payment", "inventory",
            "shipping", "catalog", "category", "review", "wishlist",
        ),
        actions=(
            "checkout", "purchase", "add-to-cart", "browse", "search",
            "filter", "refund", "ship",
        ),
        properties=("price", "quantity", "sku", "stock", "discount", "tax"),
    ),
    "authentication": DomainTerms(
        entities=(
            "user", "session", "token", "role", "permission", "credential",
            "identity", "account",
        ),
        actions=(
            "login", "logout", "register", "authenticate", "authorize",
            "verify", "reset-password", "impersonate",
        ),
        properties=(
            "email", "password", "username", "claims", "scope", "expiry",
        ),
    ),
    "content-management": DomainTerms(
        entities=(
            "article", "post", "page", "media", "author", "comment", "tag",
            "category", "template",
        ),
        actions=("publish", "draft", "archive", "edit", "moderate", "upload"),
        properties=("title", "content", "slug", "status", "published-at"),
    ),
    "analytics": DomainTerms(
        entities=(
            "event", "metric", "report", "dashboard", "chart", "segment",
            "cohort",
        ),
        actions=("track", "aggregate", "analyze", "export", "visualize"),
        properties=("timestamp", "dimension", "measure", "period"),
    ),
    "messaging": DomainTerms(
        entities=(
            "message", "conversation", "channel", "notification", "thread",
            "recipient",
        ),
        actions=("send", "receive", "read", "archive", "notify", "subscribe"),
        properties=("subject", "body", "sender", "recipient", "timestamp"),
    ),
    "project-management": DomainTerms(
        entities=(
            "project", "task", "sprint", "milestone", "team", "member",
            "board", "backlog",
        ),
        actions=(
            "assign", "complete", "prioritize", "estimate", "plan", "review",
        ),
        properties=("status", "priority", "deadline", "effort", "progress"),
    ),
    "financial": DomainTerms(
        entities=(
            "transaction", "account", "balance", "ledger", "invoice",
            "payment", "transfer",
        ),
        actions=("debit", "credit", "reconcile", "audit", "report"),
        properties=("amount", "currency", "date", "reference"),
    ),
})


def score_domain(text: str, terms: DomainTerms) -> float:
    """Substring hits in *text*: entity 2, action 1, property 0.5."""
    return (
        2.0 * sum(1 for t in terms.entities if t in text)
        + 1.0 * sum(1 for t in terms.actions if t in text)
        + 0.5 * sum(1 for t in terms.properties if t in text)
    )
