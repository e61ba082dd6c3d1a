"""Telegram Bot API integration."""
