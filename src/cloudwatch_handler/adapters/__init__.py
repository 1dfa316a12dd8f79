"""Adapters connecting the core to boto3 and the logging module."""
