"""Client view state as an explicit state machine.

The application shows one view at a time.  :class:`ViewState` is immutable;
every navigation function returns a new state.  :func:`resolve` decides what
is actually shown once login status is known.
"""

from dataclasses import dataclass, replace
from enum import Enum


class View(Enum):
    HOME = "home"
    CREATE = "create"
    EDIT = "edit"
    VIEW = "view"
    MY_SHEETS = "my-sheets"
    LOGIN = "login"


class ListSource(Enum):
    LATEST = "latest"
    SEARCH = "search"
    MINE = "mine"


_LOGIN_REQUIRED = {View.CREATE, View.EDIT, View.MY_SHEETS}
_NEEDS_SELECTION = {View.EDIT, View.VIEW}


@dataclass(frozen=True)
class ViewState:
    view: View = View.HOME
    selected_sheet_id: str | None = None
    search_query: str = ""


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def view_sheet(state: ViewState, sheet_id: str) -> ViewState:
    return replace(state, view=View.VIEW, selected_sheet_id=sheet_id)


def edit_sheet(state: ViewState, sheet_id: str) -> ViewState:
    return replace(state, view=View.EDIT, selected_sheet_id=sheet_id)


def create_new(state: ViewState) -> ViewState:
    return replace(state, view=View.CREATE, selected_sheet_id=None)


def back_to_home(state: ViewState) -> ViewState:
    """Return to the latest-sheets list, dropping selection and search."""
    return ViewState()


def search(state: ViewState, query: str) -> ViewState:
    """Set the search query; the current view is kept."""
    return replace(state, search_query=query)


def show_my_sheets(state: ViewState) -> ViewState:
    return replace(state, view=View.MY_SHEETS)


def show_login(state: ViewState) -> ViewState:
    return replace(state, view=View.LOGIN)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def resolve(state: ViewState, logged_in: bool) -> View:
    """Return the view to display for *state*.

    Views that need a login fall back to LOGIN for anonymous users; LOGIN
    itself falls back to HOME once logged in.  EDIT and VIEW need a selected
    sheet.
    """
    view = state.view
    if view in _NEEDS_SELECTION and state.selected_sheet_id is None:
        return View.HOME
    if view in _LOGIN_REQUIRED and not logged_in:
        return View.LOGIN
    if view is View.LOGIN and logged_in:
        return View.HOME
    return view


def shows_search_bar(state: ViewState) -> bool:
    return state.view in (View.HOME, View.MY_SHEETS)


def list_source(state: ViewState) -> ListSource:
    if state.view is View.MY_SHEETS:
        return ListSource.MINE
    if state.search_query.strip():
        return ListSource.SEARCH
    return ListSource.LATEST


def list_heading(state: ViewState) -> str:
    source = list_source(state)
    if source is ListSource.MINE:
        return "My Chord Sheets"
    if source is ListSource.SEARCH:
        return f'Search Results for "{state.search_query}"'
    return "Latest Chord Sheets"


def empty_message(state: ViewState) -> str:
    source = list_source(state)
    if source is ListSource.MINE:
        return "You haven't created any chord sheets yet."
    if source is ListSource.SEARCH:
        return "No chord sheets found matching your search."
    return "No chord sheets available yet."
