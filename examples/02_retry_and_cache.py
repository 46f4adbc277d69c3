"""
Retry, caching and request de-duplication.
"""

import asyncio

from http_pipeline import ClientConfig, HttpClient, LoggingConfig

BASE_URL = "https://jsonplaceholder.typicode.com"


async def main():
    config = ClientConfig.create(
        base_url=BASE_URL,
        retries=2,
        retry_delay=0.2,
        max_retry_delay=2.0,
        logging=LoggingConfig.create(level="DEBUG", format="colored"),
    )

    async with HttpClient(config) as client:
        print("\n=== Cached GET ===")
        first = await client.get_with_retry("/users", cache=True, cache_ttl=60)
        second = await client.get_with_retry("/users", cache=True, cache_ttl=60)
        print(f"Same response object: {first is second}")

        print("\n=== Concurrent identical requests ===")
        results = await asyncio.gather(*(client.get_with_retry("/posts/1") for _ in range(5)))
        print(f"Shared result: {all(r is results[0] for r in results)}")

        print("\n=== Custom retry condition ===")
        response = await client.request_with_retry(
            "/posts",
            method="POST",
            data={"title": "retry me"},
            retries=3,
            retry_condition=lambda error: error.status_code in (429, 503),
        )
        print(f"Status: {response.status_code}")

        removed = client.clear_cache("/users")
        print(f"\nCleared {removed} cache entries")


if __name__ == "__main__":
    asyncio.run(main())
