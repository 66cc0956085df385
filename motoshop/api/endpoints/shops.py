from typing import List

from fastapi import APIRouter, Depends

from motoshop.api.deps import get_workspace
from motoshop.schemas.shop import DirectoryView, ShopFilterUpdate, ShopStats
from motoshop.services.directory import DirectoryController
from motoshop.services.router import Screen
from motoshop.services.workspace import Workspace

router = APIRouter()


def get_directory(workspace: Workspace = Depends(get_workspace)) -> DirectoryController:
    return workspace.require(Screen.HOME)


@router.get("/", response_model=DirectoryView)
def list_shops(directory: DirectoryController = Depends(get_directory)) -> DirectoryView:
    """The directory as currently filtered and paged."""
    return directory.render()


@router.patch("/filters", response_model=DirectoryView)
def update_filters(
    update: ShopFilterUpdate,
    directory: DirectoryController = Depends(get_directory),
) -> DirectoryView:
    """
    Change one or more filters. Every change reloads the first page;
    a new country also clears the city and reloads the city list.
    """
    changes = update.model_dump(exclude_unset=True)
    # Country first so its city reset does not undo a city sent alongside it
    for key in sorted(changes, key=lambda k: k != "country"):
        directory.set_filter(key, changes[key] or "")
    return directory.render()


@router.post("/more", response_model=DirectoryView)
def load_more(directory: DirectoryController = Depends(get_directory)) -> DirectoryView:
    """Append the next page when there is one."""
    directory.load_more()
    return directory.render()


@router.get("/stats", response_model=ShopStats)
def stats(directory: DirectoryController = Depends(get_directory)) -> ShopStats:
    return directory.stats


@router.get("/countries", response_model=List[str])
def countries(directory: DirectoryController = Depends(get_directory)) -> List[str]:
    return directory.countries


@router.get("/cities", response_model=List[str])
def cities(directory: DirectoryController = Depends(get_directory)) -> List[str]:
    """Cities of the selected country; empty when no country is selected."""
    return directory.cities
