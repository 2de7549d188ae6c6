from litestar import Controller

from wildtrip.controllers.editor import create_editor_controller
from wildtrip.controllers.public import create_public_controller
from wildtrip.controllers.users import UserController
from wildtrip.db.content_kinds import CONTENT_KINDS


def build_controllers() -> list[type[Controller]]:
    """Public and editor controllers for every content kind, plus users."""
    controllers: list[type[Controller]] = []
    for kind in CONTENT_KINDS.values():
        controllers.append(create_public_controller(kind))
        controllers.append(create_editor_controller(kind))
    controllers.append(UserController)
    return controllers


__all__ = ["build_controllers", "create_editor_controller", "create_public_controller", "UserController"]
