"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import itertools
from typing import Any

import pytest

from rehome.gateway import Comment, GatewayError, Ticket, TicketNotFoundError, TicketState


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")
    config.addinivalue_line("markers", "real: talks to the real GitHub API (local only)")


class FakeGateway:
    """In-memory stand-in for TicketGateway with the same method surface."""

    def __init__(self, repo: str = "owner/repo", page_size: int = 100) -> None:
        self.repo = repo
        self.page_size = page_size
        self.tickets: dict[int, Ticket] = {}
        self.comments: dict[int, list[Comment]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_create_for: set[str] = set()  # titles whose creation fails
        self.fail_close = False
        self._numbers = itertools.count(100)
        self._comment_ids = itertools.count(9000)

    # Seeding helpers

    def add_ticket(self, **fields: Any) -> Ticket:
        ticket = Ticket(**fields)
        self.tickets[ticket.number] = ticket
        return ticket

    def add_comment(self, number: int, body: str, author: str = "finalFlick") -> Comment:
        comment_id = next(self._comment_ids)
        comment = Comment(
            id=comment_id,
            body=body,
            author=author,
            created_at="2026-02-03T15:48:18Z",
            url=f"https://github.com/{self.repo}/issues/{number}#issuecomment-{comment_id}",
        )
        self.comments.setdefault(number, []).append(comment)
        return comment

    def calls_to(self, name: str) -> list[Any]:
        return [args for called, args in self.calls if called == name]

    # Gateway surface

    def list_tickets(self, state: str = "all") -> list[Ticket]:
        self.calls.append(("list_tickets", state))
        return list(self.tickets.values())

    def get_ticket(self, number: int) -> Ticket:
        self.calls.append(("get_ticket", number))
        if number not in self.tickets:
            raise TicketNotFoundError(f"Ticket #{number} not found in {self.repo}")
        return self.tickets[number]

    def create_ticket(
        self, title: str, body: str, labels: list[str], milestone: int | None = None
    ) -> Ticket:
        self.calls.append(("create_ticket", title))
        if title in self.fail_create_for:
            raise GatewayError(f"GitHub API POST /repos/{self.repo}/issues failed: 500")
        number = next(self._numbers)
        return self.add_ticket(
            number=number,
            title=title,
            body=body,
            labels=list(labels),
            milestone=milestone,
            state=TicketState.OPEN,
            author="manta-warden[bot]",
            url=f"https://github.com/{self.repo}/issues/{number}",
        )

    def update_ticket_state(self, number: int, state: TicketState | str) -> Ticket:
        self.calls.append(("update_ticket_state", (number, str(state))))
        if self.fail_close:
            raise GatewayError(f"GitHub API PATCH /repos/{self.repo}/issues/{number} failed: 502")
        self.tickets[number].state = TicketState.parse(state)
        return self.tickets[number]

    def list_comments(self, number: int, page: int, page_size: int | None = None) -> list[Comment]:
        size = page_size or self.page_size
        self.calls.append(("list_comments", (number, page)))
        items = self.comments.get(number, [])
        return list(items[(page - 1) * size : page * size])

    def list_all_comments(self, number: int) -> list[Comment]:
        comments: list[Comment] = []
        page = 1
        while True:
            batch = self.list_comments(number, page)
            comments.extend(batch)
            if len(batch) < self.page_size:
                return comments
            page += 1

    def create_comment(self, number: int, body: str) -> Comment:
        self.calls.append(("create_comment", (number, body)))
        comment_id = next(self._comment_ids)
        comment = Comment(id=comment_id, body=body, author="manta-warden[bot]")
        self.comments.setdefault(number, []).append(comment)
        return comment

    def update_comment(self, comment_id: int, body: str) -> Comment:
        self.calls.append(("update_comment", (comment_id, body)))
        for comments in self.comments.values():
            for comment in comments:
                if comment.id == comment_id:
                    comment.body = body
                    return comment
        raise TicketNotFoundError(f"Comment {comment_id} not found")


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """An empty in-memory gateway."""
    return FakeGateway()
