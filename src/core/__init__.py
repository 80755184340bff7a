"""Core domain package for tgbridge.

Core contains payload building, album aggregation, and the delivery policy
without any Telethon or HTTP-specific code, keeping the pipeline portable.
"""
