from __future__ import annotations


class NavigationError(Exception):
    """Base class for failures surfaced by the navigation engine."""

    code = "navigation_error"


class DestinationMissingError(NavigationError):
    """No destination identifier was supplied for the session."""

    code = "destination_missing"

    def __init__(self) -> None:
        super().__init__("Aucune destination n'a été indiquée.")


class NoRouteFoundError(NavigationError):
    """Discovery found no step at index 1 for the destination."""

    code = "no_route"

    def __init__(self, destination: str) -> None:
        self.destination = destination
        super().__init__(f"Aucun parcours n'a été trouvé pour \"{destination}\".")
