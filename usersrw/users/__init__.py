from .coordinator import Health, Outcome, Result, UsersCoordinator, UserStore

__all__ = ["Health", "Outcome", "Result", "UsersCoordinator", "UserStore"]
