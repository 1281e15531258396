"""SheepIt - one-click deploy of a local project folder to GitHub and Vercel."""

__version__ = "0.1.0"
