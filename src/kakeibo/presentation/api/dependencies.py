"""FastAPI dependencies.

The container is created once per application (see ``app.lifespan``) and
stored on ``app.state``; routers depend on it through ``Container``.
"""

from typing import Annotated

from fastapi import Depends, Request

from kakeibo.presentation.api.container import SyncContainer


def get_container(request: Request) -> SyncContainer:
    return request.app.state.container


Container = Annotated[SyncContainer, Depends(get_container)]
