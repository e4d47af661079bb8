"""Errors raised when upstream data needed by the engine is missing."""


class MenuPlannerError(Exception):
    """Base error for the menu planner."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        super().__init__(message)


class NotFoundError(MenuPlannerError):
    """A referenced record does not exist (404-equivalent)."""


class DishNotFound(NotFoundError):
    def __init__(self, dish_id: object) -> None:
        super().__init__(f"Dish not found: {dish_id}")
        self.dish_id = dish_id


class ResidentNotFound(NotFoundError):
    def __init__(self, resident_id: object) -> None:
        super().__init__(f"Resident not found: {resident_id}")
        self.resident_id = resident_id


class MenuNotFound(NotFoundError):
    def __init__(self, menu_id: object) -> None:
        super().__init__(f"Menu not found: {menu_id}")
        self.menu_id = menu_id
