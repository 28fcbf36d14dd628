"""Spoonacular recipe API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

SEARCH_PATH = "/recipes/complexSearch"


class SpoonacularClient(Protocol):
    """Interface for Spoonacular API interactions."""

    async def search_recipes(self, params: dict[str, object]) -> dict[str, object]:
        """Run a complex recipe search and return raw API data."""


@dataclass
class HttpxSpoonacularClient(SpoonacularClient):
    """HTTPX-backed Spoonacular client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxSpoonacularClient":
        """Create a Spoonacular client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_recipes(self, params: dict[str, object]) -> dict[str, object]:
        """Search recipes with the given query parameters."""
        response = await self.http_client.get(
            f"{self.base_url}{SEARCH_PATH}",
            params={"apiKey": self.api_key, **params},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
