"""
Basic HTTP Pipeline Usage Examples

Demonstrates GET/POST requests, interceptors and error handling.
"""

import asyncio

from http_pipeline import ClientConfig, HttpClient, HttpError, NetworkError

BASE_URL = "https://jsonplaceholder.typicode.com"


async def basic_requests(client: HttpClient):
    """Simple GET and POST."""
    print("\n=== Basic GET Request ===")
    response = await client.get("/posts/1")
    print(f"Status: {response.status_code}")
    print(f"Title: {response.data['title']}")

    print("\n=== POST with JSON ===")
    response = await client.post("/posts", data={"title": "My Post", "body": "Content", "userId": 1})
    print(f"Status: {response.status_code}")
    print(f"Created: {response.data}")


async def with_interceptors(client: HttpClient):
    """Request and response interceptors."""
    print("\n=== Interceptors ===")

    slot = client.interceptors.request.use(lambda request: request.with_headers({"X-Request-Source": "example"}))
    client.interceptors.response.use(lambda response: response.evolve(data=response.data.get("title")))

    response = await client.get("/posts/2")
    print(f"Title only: {response.data}")

    client.interceptors.request.eject(slot)
    client.interceptors.response.clear()


async def error_handling(client: HttpClient):
    """Typed errors."""
    print("\n=== Error Handling ===")
    try:
        await client.get("/posts/not-a-number/comments/missing")
    except HttpError as e:
        print(f"HTTP error {e.status_code}: {e.message}")
    except NetworkError as e:
        print(f"Network error ({e.code}): {e.message}")


async def main():
    async with HttpClient(ClientConfig(base_url=BASE_URL, timeout=10)) as client:
        await basic_requests(client)
        await with_interceptors(client)
        await error_handling(client)
        print(f"\nStats: {client.stats.snapshot()}")


if __name__ == "__main__":
    asyncio.run(main())
