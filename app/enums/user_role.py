from enum import Enum


class UserRole(str, Enum):
    """
    Enum for account roles.

    VILLAGER marks a user holding an active lease obtained through a
    rental request.
    """

    USER = "USER"
    VILLAGER = "VILLAGER"
    ADMIN = "ADMIN"

    def __str__(self):
        return self.value
