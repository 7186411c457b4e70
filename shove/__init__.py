"""shove: run commands when GitHub or Gitea webhooks arrive."""

__version__ = "1.0.0"
