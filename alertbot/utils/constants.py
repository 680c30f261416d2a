"""Constants and default values."""

# Forum topic that collects confirmations and notifications
REMINDER_TOPIC_NAME = "📅 Напоминания"

# Topic id meaning "no topic" (main thread of the chat)
GENERAL_TOPIC_ID = 0

# Defaults for configuration
DEFAULT_TIMEZONE = "Europe/Moscow"
DEFAULT_REMINDER_MINUTES = 10
DEFAULT_STATE_FILE = "bot_state.json"
DEFAULT_DELIVERY_TIMEOUT = 10.0

# The scheduler reconciles once per minute
TICK_INTERVAL_SECONDS = 60

# Display format for dates in user-facing messages
DISPLAY_FORMAT = "%H:%M %d.%m.%Y"
