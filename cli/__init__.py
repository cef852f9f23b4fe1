"""CLI package for the library lending engine"""
from .main import cli

__all__ = ['cli']
