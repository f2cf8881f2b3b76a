from dataclasses import dataclass

from rentacar.utils.constants import Role


@dataclass(frozen=True)
class User:
    """
    Acting principal. Accounts live in the external user service; a reservation
    is attributed to its requester by `user_id` only.
    """
    user_id: str
    username: str = ""
    role: str = Role.CUSTOMER  # "admin" | "customer"
