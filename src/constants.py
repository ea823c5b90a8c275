"""Constants for the application."""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App settings
ENVIRONMENT = os.environ.get("ENVIRONMENT", "local")
LOGGING_LEVEL = getattr(logging, os.environ.get("LOGGING_LEVEL", "INFO").upper(), logging.INFO)

# MongoDB settings
DATABASE_CONNECTION_STRING = os.environ.get("DATABASE_CONNECTION_STRING", "mongodb://localhost:27017")
DATABASE_NAME = os.environ.get("DATABASE_NAME", "relaychat")

# Completion API settings
COMPLETION_API_URL = os.environ.get("COMPLETION_API_URL", "https://api.groq.com/openai/v1/chat/completions")
DEFAULT_MODEL = os.environ.get("DEFAULT_MODEL", "llama-3.3-70b-versatile")

# Conversation defaults
DEFAULT_CONVERSATION_TITLE = "New Chat"
IMPORTED_CONVERSATION_TITLE = "Imported Chat"
TITLE_MAX_LENGTH = 50

# Models offered on the settings screen
AVAILABLE_MODELS = {
    "llama-3.1-8b-instant": "Llama 3.1 8B Instant",
    "llama-3.3-70b-versatile": "Llama 3.3 70B Versatile",
    "openai/gpt-oss-120b": "GPT OSS 120B",
}
