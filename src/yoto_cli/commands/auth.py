"""Authentication commands (OAuth device code flow)."""

from __future__ import annotations

import time

from yoto_cli import output
from yoto_cli.container import Container
from yoto_cli.result import returns_result


def _show_verification(url: str, user_code: str) -> None:
    output.info("\nTo sign in, visit:")
    output.info(f"  {url}")
    output.info(f"\nAnd confirm the code: {user_code}\n")
    output.info("Waiting for authorization...")


@returns_result
async def login(container: Container, timeout: int = 300) -> None:
    client = container.api_client()
    await client.authenticate(callback=_show_verification, timeout=timeout)
    output.success("Logged in")


@returns_result
async def logout(container: Container) -> None:
    container.api_client().reset_authentication()
    output.success("Logged out")


@returns_result
async def status(container: Container) -> bool:
    client = container.api_client()
    token = client.auth.token_data

    if not client.is_authenticated() or token is None:
        output.info("Not logged in. Run 'yoto auth login'.")
        return False

    if token.is_expired():
        output.info("Logged in (access token expired, will refresh on next request)")
    else:
        minutes = int((token.expires_at - time.time()) // 60)
        output.info(f"Logged in (access token valid for {minutes} more minutes)")
    return True
