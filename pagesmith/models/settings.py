"""User interface settings persisted alongside the workspace data."""

from pydantic import ConfigDict

from .base import CamelModel


class Settings(CamelModel):
    """
    Workspace settings. Keys this model does not know about are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    theme: str = "light"
    sidebar_width: int = 240
    show_line_numbers: bool = False
    auto_save: bool = True
