"""LickUI: proxy a website, render it locally and restyle it by instruction."""

__version__ = "0.1.0"
