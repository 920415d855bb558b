"""Utility functions for beanstalk-deploy."""

from beanstalk_deploy.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
