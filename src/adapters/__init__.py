"""Adapters binding the core pipeline to Telethon, HTTP webhooks, and the control API."""
