import asyncio
import contextlib
import sys
from pathlib import Path

from anyio import create_task_group

from idp_connect import (
    DiscoveryFetcher,
    DiscoveryFetchError,
    IdentityProvider,
    IdpConnectSettings,
    ResourceBundle,
    ServiceEndpointConfig,
    build_authorization_request,
    default_registry,
)
from idp_connect.provider import RetrieveConfigurationCallback
from idp_connect.utils.logger import logger


async def main() -> None:
    """
    Demonstrates sign-in with several identity providers.
    Includes:
    - Resource bundle loading (IDP_CONNECT_RESOURCE_FILE or examples/providers.toml)
    - Enabled provider listing in registration order
    - Concurrent endpoint dispatch (discovery or explicit endpoints)
    - Authorization URL construction for each provider that succeeds
    """
    settings = IdpConnectSettings()
    resource_file = settings.resource_file or Path(__file__).with_name("providers.toml")
    bundle = ResourceBundle.from_file(resource_file)

    providers = default_registry().list_enabled(bundle)
    if not providers:
        print(">>> No identity providers configured. Enable one in", resource_file)
        return

    def make_callback(idp: IdentityProvider) -> RetrieveConfigurationCallback:
        def on_completed(config: ServiceEndpointConfig | None, error: DiscoveryFetchError | None) -> None:
            if error is not None:
                logger.warning(f"Failed to retrieve configuration for {idp.name}: {error}")
                return
            logger.debug(f"Configuration retrieved for {idp.name}, proceeding")
            assert config is not None
            request = build_authorization_request(config, idp)
            print(f">>> {idp.name}: open {request.url}")

        return on_completed

    async with DiscoveryFetcher(settings) as fetcher:
        async with create_task_group() as tg:
            for idp in providers:
                logger.debug(f"Initiating auth for {idp.name}")
                tg.start_soon(idp.dispatch, bundle, make_callback(idp), fetcher)


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        sys.exit(asyncio.run(main()))
