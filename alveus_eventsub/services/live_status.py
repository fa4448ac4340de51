"""Live status lookup for configured channels."""

import logging

from ..models import Stream, TwitchConfig
from .retry import TokenRetryPolicy
from .twitch_api import TwitchEventSubClient

logger = logging.getLogger(__name__)


async def get_live_channels(
    client: TwitchEventSubClient, retry_policy: TokenRetryPolicy, config: TwitchConfig
) -> dict[str, Stream]:
    """Return the currently live configured channels, keyed by channel name."""
    response = await retry_policy.run(client.get_streams_for_channels, config.channel_ids())

    live: dict[str, Stream] = {}
    for stream in response.data:
        name = config.channel_name_for_id(stream.user_id)
        if name is None:
            logger.debug(f"Ignoring stream for unconfigured channel {stream.user_id}")
            continue
        live[name] = stream
    return live
