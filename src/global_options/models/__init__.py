"""SQLModel table exports."""

from .option import AUTOLOAD_NO, AUTOLOAD_YES, GlobalOption

__all__ = ["AUTOLOAD_NO", "AUTOLOAD_YES", "GlobalOption"]
