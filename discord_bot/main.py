"""
Workshop Notifier - Discord client.

The bot only pushes: schedule notifications to linked attendees and
summaries to operators. It registers itself with the notification channel
once connected.
"""

import os

import discord
from dotenv import load_dotenv

from core.notifications.channels.discord import set_bot


def create_bot() -> discord.Client:
    """Create and configure the bot instance."""
    intents = discord.Intents.default()
    intents.members = False
    return discord.Client(intents=intents)


bot = create_bot()


@bot.event
async def on_ready():
    """Called when the bot is ready and connected to Discord."""
    set_bot(bot)
    print(f"Bot is ready! Logged in as {bot.user}")


@bot.event
async def on_disconnect():
    print("Discord bot disconnected")


def main():
    """Run the bot on its own (without the API server)."""
    load_dotenv()

    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set!")
        print("Set it in your .env file or with: set DISCORD_BOT_TOKEN=your_token_here")
        raise SystemExit(1)

    bot.run(token)


if __name__ == "__main__":
    main()
