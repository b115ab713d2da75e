"""TicketGateway - GitHub REST access for issues and issue comments."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from rehome.gateway.exceptions import (
    GatewayError,
    RateLimitError,
    TicketNotFoundError,
    TransportError,
)
from rehome.gateway.models import Comment, Ticket, TicketState
from rehome.logging import sanitize_for_log, truncate_output

logger = logging.getLogger("rehome.gateway")

DEFAULT_PAGE_SIZE = 100


class TicketGateway:
    """Adapter for the GitHub issues REST API of a single repository.

    All calls are synchronous and sequential. Nothing is retried: a failed
    call raises and the caller decides whether the run is over.
    """

    def __init__(
        self,
        repo: str,
        token: str,
        base_url: str = "https://api.github.com",
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the gateway.

        Args:
            repo: GitHub repo in "owner/repo" format
            token: Installation or personal access token
            base_url: GitHub API base URL (for testing/enterprise)
            page_size: Items requested per page when paginating (max 100)
            timeout: Per-request timeout in seconds
        """
        self.repo = repo
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GitHub API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                    "User-Agent": "rehome",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> TicketGateway:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        expected: tuple[int, ...] = (200,),
        **kwargs: Any,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            TransportError: If the request fails or the body is not JSON
            RateLimitError: If GitHub reports an exhausted rate limit
            GatewayError: For any other unexpected status code
        """
        logger.debug("%s %s", method, path)
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise TransportError(
                f"GitHub API {method} {path} failed: {sanitize_for_log(str(e))}"
            ) from e

        if response.status_code not in expected:
            self._raise_for_status(method, path, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Failed to parse JSON response from {method} {path}:\n"
                f"{truncate_output(response.text)}"
            ) from e

    def _raise_for_status(self, method: str, path: str, response: httpx.Response) -> None:
        status = response.status_code
        headers = response.headers
        if status in (403, 429) and (
            headers.get("x-ratelimit-remaining") == "0" or "retry-after" in headers
        ):
            reset = headers.get("x-ratelimit-reset")
            raise RateLimitError(
                f"GitHub API rate limit exceeded on {method} {path}",
                reset_at=int(reset) if reset and reset.isdigit() else None,
            )
        logger.error("GitHub API %s %s failed: %s", method, path, status)
        if status == 404:
            raise TicketNotFoundError(f"GitHub API {method} {path} failed: 404 (not found)")
        raise GatewayError(
            f"GitHub API {method} {path} failed: {status}\n{truncate_output(response.text)}"
        )

    def _paginate(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch every page of a list endpoint, stopping at the first short page."""
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            data = self._request(
                "GET",
                path,
                params={**(params or {}), "per_page": self.page_size, "page": page},
            )
            if not data:
                break
            items.extend(data)
            if len(data) < self.page_size:
                break
            page += 1
        return items

    # --- Tickets ---

    def list_tickets(self, state: str = "all") -> list[Ticket]:
        """List issues in the repository.

        Pull requests, which the issues endpoint also returns, are dropped.

        Args:
            state: "open", "closed" or "all"

        Returns:
            Tickets in the order GitHub returned them
        """
        items = self._paginate(f"/repos/{self.repo}/issues", {"state": state})
        tickets = [Ticket.from_api(item) for item in items if "pull_request" not in item]
        logger.info("Listed %d ticket(s) in %s (state=%s)", len(tickets), self.repo, state)
        return tickets

    def get_ticket(self, number: int) -> Ticket:
        """Get a single issue.

        Raises:
            TicketNotFoundError: If the issue doesn't exist
        """
        try:
            data = self._request("GET", f"/repos/{self.repo}/issues/{number}")
        except TicketNotFoundError as e:
            raise TicketNotFoundError(f"Ticket #{number} not found in {self.repo}") from e
        return Ticket.from_api(data)

    def create_ticket(
        self,
        title: str,
        body: str,
        labels: list[str],
        milestone: int | None = None,
    ) -> Ticket:
        """Create an issue. GitHub always creates issues in the open state."""
        payload: dict[str, Any] = {"title": title, "body": body, "labels": labels}
        if milestone is not None:
            payload["milestone"] = milestone
        data = self._request("POST", f"/repos/{self.repo}/issues", expected=(201,), json=payload)
        ticket = Ticket.from_api(data)
        logger.info("Created ticket #%d: %s", ticket.number, ticket.url)
        return ticket

    def update_ticket_state(self, number: int, state: TicketState | str) -> Ticket:
        """Set an issue's state."""
        data = self._request(
            "PATCH",
            f"/repos/{self.repo}/issues/{number}",
            json={"state": str(TicketState.parse(state))},
        )
        logger.info("Set ticket #%d state to %s", number, state)
        return Ticket.from_api(data)

    # --- Comments ---

    def list_comments(self, number: int, page: int, page_size: int | None = None) -> list[Comment]:
        """Fetch one page of comments on an issue."""
        data = self._request(
            "GET",
            f"/repos/{self.repo}/issues/{number}/comments",
            params={"per_page": page_size or self.page_size, "page": page},
        )
        return [Comment.from_api(item) for item in data or []]

    def list_all_comments(self, number: int) -> list[Comment]:
        """Fetch every comment on an issue, one page at a time."""
        comments: list[Comment] = []
        page = 1
        while True:
            batch = self.list_comments(number, page)
            comments.extend(batch)
            if len(batch) < self.page_size:
                break
            page += 1
        logger.debug("Fetched %d comment(s) on #%d", len(comments), number)
        return comments

    def create_comment(self, number: int, body: str) -> Comment:
        """Add a comment to an issue."""
        data = self._request(
            "POST",
            f"/repos/{self.repo}/issues/{number}/comments",
            expected=(201,),
            json={"body": body},
        )
        return Comment.from_api(data)

    def update_comment(self, comment_id: int, body: str) -> Comment:
        """Replace the body of an existing comment."""
        data = self._request(
            "PATCH",
            f"/repos/{self.repo}/issues/comments/{comment_id}",
            json={"body": body},
        )
        return Comment.from_api(data)
