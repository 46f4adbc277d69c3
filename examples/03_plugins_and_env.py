"""
Default client with plugins, and configuration from the environment.

    HTTP_PIPELINE_BASE_URL=https://jsonplaceholder.typicode.com \
    HTTP_PIPELINE_RETRIES=2 python examples/03_plugins_and_env.py
"""

import asyncio

from http_pipeline import (
    BusinessError,
    HttpClient,
    LoggingPlugin,
    MemoryStorage,
    create_default_client,
    load_from_env,
)
from http_pipeline.core.env_config import print_config_summary


async def default_client():
    print("\n=== Default client ===")
    storage = MemoryStorage({"token": "demo-token"})

    async with create_default_client(
        storage,
        base_url="https://jsonplaceholder.typicode.com",
        static_headers={"Device-Type": "cli", "App-Version": "1.0.0"},
    ) as client:
        client.add_plugin(LoggingPlugin())
        try:
            response = await client.get("/todos/1")
            print(f"Todo: {response.data}")
        except BusinessError as e:
            print(f"Business error {e.business_code}: {e.message}")


async def from_environment():
    print("\n=== Config from environment ===")
    config = load_from_env()
    print_config_summary(config)

    async with HttpClient(config) as client:
        if config.base_url:
            response = await client.get_with_retry("/posts/1")
            print(f"Status: {response.status_code}")


async def main():
    await default_client()
    await from_environment()


if __name__ == "__main__":
    asyncio.run(main())
