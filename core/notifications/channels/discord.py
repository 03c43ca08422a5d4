"""Discord DM delivery channel (the chat push channel)."""

import asyncio
from dataclasses import dataclass

import discord
from discord import Client

from core.notifications.results import Err, Ok, Result

# Set by the bot's on_ready handler
_bot: Client | None = None

# Rate limiting: 1 DM per second to avoid Discord throttling
_dm_semaphore: asyncio.Semaphore | None = None

DM_DELAY_SECONDS = 1
DEFAULT_COLOR = 0x6366F1


@dataclass
class ChatMessage:
    """Structured push message, rendered as a Discord embed."""

    title: str
    body: str
    color: int = DEFAULT_COLOR

    def to_embed(self) -> discord.Embed:
        # Embed descriptions are capped at 4096 characters
        return discord.Embed(
            title=self.title[:256],
            description=self.body[:4096],
            color=self.color,
        )


def set_bot(bot: Client | None) -> None:
    """Set the Discord bot instance for sending messages."""
    global _bot, _dm_semaphore
    _bot = bot
    _dm_semaphore = asyncio.Semaphore(1) if bot else None


def is_ready() -> bool:
    return _bot is not None


async def send_discord_dm(discord_id: str, message: ChatMessage) -> Result:
    """
    Send a direct message to a Discord user.

    Rate-limited to ~1 DM/second to avoid Discord throttling.

    Args:
        discord_id: Discord user ID (as string)
        message: Title and body to render

    Returns:
        Ok with the sent message id, or Err(reason)
    """
    if not _bot:
        return Err("Discord bot not configured")

    try:
        if _dm_semaphore:
            async with _dm_semaphore:
                user = await _bot.fetch_user(int(discord_id))
                sent = await user.send(embed=message.to_embed())
                await asyncio.sleep(DM_DELAY_SECONDS)
        else:
            user = await _bot.fetch_user(int(discord_id))
            sent = await user.send(embed=message.to_embed())
    except Exception as e:
        return Err(f"Discord DM failed: {e}")

    return Ok(str(getattr(sent, "id", "") or ""))
