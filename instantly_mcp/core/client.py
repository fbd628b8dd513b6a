"""Async client binding for the Instantly API v2.

Each endpoint method only builds a :class:`CallDescriptor`; retries, failure
classification and logging live in :class:`RequestExecutor`.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx

from instantly_mcp.core.config import InstantlyConfig
from instantly_mcp.core.http import (
    CallDescriptor,
    ExecutionResult,
    HttpMethod,
    RequestExecutor,
    unwrap,
)
from instantly_mcp.core.http.executor import SleepFn
from instantly_mcp.core.logging import get_logger

logger = get_logger(__name__)


def create_http_client(config: InstantlyConfig, **kwargs: Any) -> httpx.AsyncClient:
    """Build the shared HTTP client with base URL and auth headers.

    Extra keyword arguments (``transport`` in tests) go to ``httpx.AsyncClient``.
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {config.api_key}",
        "User-Agent": config.http.user_agent,
    }
    return httpx.AsyncClient(
        base_url=config.http.base_url,
        headers=headers,
        timeout=httpx.Timeout(config.http.timeout),
        follow_redirects=True,
        **kwargs,
    )


def _segment(value: str) -> str:
    return quote(value, safe="")


class InstantlyClient:
    """Instantly API client.

    Usage::

        async with InstantlyClient(load_config_from_env()) as client:
            campaigns = await client.list_campaigns({"limit": 10})
    """

    def __init__(
        self,
        config: InstantlyConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or create_http_client(config)
        self.executor = RequestExecutor(self._http_client, config.retry, sleep=sleep)
        logger.debug(f"InstantlyClient initialized for {config.http.base_url}")

    async def __aenter__(self) -> "InstantlyClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def call(self, descriptor: CallDescriptor, *, timeout: float | None = None) -> ExecutionResult:
        """Execute a descriptor and return the raw result value."""
        return await self.executor.execute(descriptor, timeout=timeout)

    async def request(
        self,
        endpoint: str,
        method: HttpMethod | str = HttpMethod.GET,
        payload: Any = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Execute a call and return its body.

        Raises:
            RequestFailedError: When the call ends in a terminal error
        """
        result = await self.call(CallDescriptor(endpoint, method, payload), timeout=timeout)
        return unwrap(result)

    # Analytics

    async def get_warmup_analytics(self, emails: list[str]) -> Any:
        return await self.request("/accounts/warmup-analytics", HttpMethod.POST, {"emails": emails})

    async def test_account_vitals(self, accounts: list[str] | None = None) -> Any:
        return await self.request("/accounts/test/vitals", HttpMethod.POST, {"accounts": accounts})

    async def get_campaign_analytics(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/campaigns/analytics", HttpMethod.GET, params)

    async def get_campaign_analytics_overview(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/campaigns/analytics/overview", HttpMethod.GET, params)

    async def get_daily_campaign_analytics(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/campaigns/analytics/daily", HttpMethod.GET, params)

    async def get_campaign_steps_analytics(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/campaigns/analytics/steps", HttpMethod.GET, params)

    # Accounts

    async def create_account(self, data: dict[str, Any]) -> Any:
        return await self.request("/accounts", HttpMethod.POST, data)

    async def list_accounts(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/accounts", HttpMethod.GET, params)

    async def get_account(self, email: str) -> Any:
        return await self.request(f"/accounts/{_segment(email)}")

    async def update_account(self, email: str, data: dict[str, Any]) -> Any:
        return await self.request(f"/accounts/{_segment(email)}", HttpMethod.PATCH, data)

    async def delete_account(self, email: str) -> Any:
        return await self.request(f"/accounts/{_segment(email)}", HttpMethod.DELETE)

    async def pause_account(self, email: str) -> Any:
        return await self.request(f"/accounts/{_segment(email)}/pause", HttpMethod.POST)

    async def resume_account(self, email: str) -> Any:
        return await self.request(f"/accounts/{_segment(email)}/resume", HttpMethod.POST)

    async def mark_account_fixed(self, email: str) -> Any:
        return await self.request(f"/accounts/{_segment(email)}/mark-fixed", HttpMethod.POST)

    async def get_custom_tracking_domain_status(self, host: str) -> Any:
        return await self.request("/accounts/ctd/status", HttpMethod.GET, {"host": host})

    # Campaigns

    async def create_campaign(self, data: dict[str, Any]) -> Any:
        return await self.request("/campaigns", HttpMethod.POST, data)

    async def list_campaigns(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/campaigns", HttpMethod.GET, params)

    async def activate_campaign(self, campaign_id: str) -> Any:
        return await self.request(f"/campaigns/{_segment(campaign_id)}/activate", HttpMethod.POST)

    async def pause_campaign(self, campaign_id: str) -> Any:
        return await self.request(f"/campaigns/{_segment(campaign_id)}/pause", HttpMethod.POST)

    async def get_campaign(self, campaign_id: str) -> Any:
        return await self.request(f"/campaigns/{_segment(campaign_id)}")

    async def update_campaign(self, campaign_id: str, data: dict[str, Any]) -> Any:
        return await self.request(f"/campaigns/{_segment(campaign_id)}", HttpMethod.PATCH, data)

    async def delete_campaign(self, campaign_id: str) -> Any:
        return await self.request(f"/campaigns/{_segment(campaign_id)}", HttpMethod.DELETE)

    async def share_campaign(self, campaign_id: str) -> Any:
        return await self.request(f"/campaigns/{_segment(campaign_id)}/share", HttpMethod.POST)

    # Emails

    async def reply_to_email(self, data: dict[str, Any]) -> Any:
        return await self.request("/emails/reply", HttpMethod.POST, data)

    async def list_emails(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/emails", HttpMethod.GET, params)

    async def get_email(self, email_id: str) -> Any:
        return await self.request(f"/emails/{_segment(email_id)}")

    async def update_email(self, email_id: str, data: dict[str, Any]) -> Any:
        return await self.request(f"/emails/{_segment(email_id)}", HttpMethod.PATCH, data)

    async def delete_email(self, email_id: str) -> Any:
        return await self.request(f"/emails/{_segment(email_id)}", HttpMethod.DELETE)

    async def count_unread_emails(self) -> Any:
        return await self.request("/emails/unread/count")

    async def mark_thread_as_read(self, thread_id: str) -> Any:
        return await self.request(f"/emails/threads/{_segment(thread_id)}/mark-as-read", HttpMethod.POST)

    # Email verification

    async def verify_email(self, email: str) -> Any:
        return await self.request("/email-verification", HttpMethod.POST, {"email": email})

    async def get_email_verification(self, email: str) -> Any:
        return await self.request(f"/email-verification/{_segment(email)}")

    # Leads

    async def create_lead(self, data: dict[str, Any]) -> Any:
        return await self.request("/leads", HttpMethod.POST, data)

    async def list_leads(self, data: dict[str, Any] | None = None) -> Any:
        # The v2 API lists leads with a POST body rather than query parameters
        return await self.request("/leads/list", HttpMethod.POST, data or {})

    async def get_lead(self, lead_id: str) -> Any:
        return await self.request(f"/leads/{_segment(lead_id)}")

    async def update_lead(self, lead_id: str, data: dict[str, Any]) -> Any:
        return await self.request(f"/leads/{_segment(lead_id)}", HttpMethod.PATCH, data)

    async def delete_lead(self, lead_id: str) -> Any:
        return await self.request(f"/leads/{_segment(lead_id)}", HttpMethod.DELETE)

    async def merge_leads(self, data: dict[str, Any]) -> Any:
        return await self.request("/leads/merge", HttpMethod.POST, data)

    async def update_lead_interest_status(self, data: dict[str, Any]) -> Any:
        return await self.request("/leads/update-interest-status", HttpMethod.POST, data)

    async def remove_lead_from_subsequence(self, data: dict[str, Any]) -> Any:
        return await self.request("/leads/subsequence/remove", HttpMethod.POST, data)

    # Lead lists

    async def create_lead_list(self, data: dict[str, Any]) -> Any:
        return await self.request("/lead-lists", HttpMethod.POST, data)

    async def list_lead_lists(self, params: dict[str, Any] | None = None) -> Any:
        return await self.request("/lead-lists", HttpMethod.GET, params)

    async def get_lead_list(self, list_id: str) -> Any:
        return await self.request(f"/lead-lists/{_segment(list_id)}")

    async def update_lead_list(self, list_id: str, data: dict[str, Any]) -> Any:
        return await self.request(f"/lead-lists/{_segment(list_id)}", HttpMethod.PATCH, data)

    async def delete_lead_list(self, list_id: str) -> Any:
        return await self.request(f"/lead-lists/{_segment(list_id)}", HttpMethod.DELETE)


__all__ = ["InstantlyClient", "create_http_client"]
